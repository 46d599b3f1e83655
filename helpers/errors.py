"""
Exceptions raised by the normalizer.

Validation findings are not errors, see helpers/outcomes.py.
"""


class NormalizerError(Exception):
    """Base class for every error raised by the normalizer."""


class NotFoundError(NormalizerError):
    """A folder or document is absent from the cached tree or from Drive."""


class InvalidTemplateError(NormalizerError):
    """Slide geometry the reconciliation cannot repair on its own."""


class StaleWatermarkFormatError(NormalizerError):
    """The stored processing watermark cannot be parsed as a timestamp."""


class ExternalCallFailure(NormalizerError):
    """A Google API call failed after retries. The HttpError is chained as __cause__."""


class DocumentProcessingError(NormalizerError):
    """
    Raised by the reconciliation engine when a document fails.

    Carries the DocumentError outcome that was reported, so the caller can
    tally it and decide whether to continue with the next document.
    """

    def __init__(self, outcome):
        super().__init__(outcome.message)
        self.outcome = outcome
