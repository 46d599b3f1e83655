import logging

from helpers.errors import DocumentProcessingError, NotFoundError
from helpers.index_utils import DocumentIndex
from helpers.outcomes import DocumentError, DocumentProcessed, DocumentSkipped, FolderStarted


#region Process Documents
def process_folder(engine, cache, folder, skip_check=False, stop_on_error=False, reporter=None):
    """
    Normalize every presentation in a folder subtree, one after the other.

    A failing presentation is recorded and the loop moves on, unless
    stop_on_error is set, in which case the DocumentProcessingError propagates.

    Args:
        engine (ReconciliationEngine): The engine to run
        cache (FolderTreeCache): The cached tree
        folder (FolderNode): Subtree to process
        skip_check (bool): Ignore the watermarks
        stop_on_error (bool): Stop at the first failing presentation
        reporter (ProgressBar): Optional reporter for the FolderStarted event

    Returns:
        list: One outcome per presentation
    """
    event = FolderStarted(folder.name, folder.total_documents)
    logging.info(f"Processing folder {folder.name} ({folder.id}), {folder.total_documents} presentations")
    if reporter is not None:
        reporter.folder_started(event)

    outcomes = []
    for ref, _ in cache.iter_documents(folder.id):
        try:
            outcomes.append(engine.process_document(ref, skip_check))
        except DocumentProcessingError as e:
            outcomes.append(e.outcome)
            if stop_on_error:
                raise

    return outcomes


def process_all(engine, cache, skip_check=False, stop_on_error=False, reporter=None):
    """Normalize every top-level folder of the cache."""
    logging.info(f"Start processing {cache.total_documents} presentations...")

    outcomes = []
    for folder in list(cache.folders.values()):
        outcomes.extend(process_folder(engine, cache, folder, skip_check, stop_on_error, reporter))
    return outcomes


def process_single(engine, cache, document_id, skip_check=False):
    """
    Normalize one cached presentation.

    Raises:
        NotFoundError: If the id is not a cached presentation
        DocumentProcessingError: If the presentation fails
    """
    kind, found = DocumentIndex(cache).resolve(document_id)
    if kind != "document":
        raise NotFoundError(f"{document_id} is a folder, not a presentation")

    ref, folder = found
    logging.info(f"Processing specific presentation: {ref.name} ({document_id}) in {folder.name}")
    return engine.process_document(ref, skip_check)
#endregion


def summarize(outcomes):
    """Counts per outcome kind plus the validation findings."""
    summary = {"processed": 0, "skipped": 0, "errors": 0, "findings": []}
    for outcome in outcomes:
        if isinstance(outcome, DocumentProcessed):
            summary["processed"] += 1
            summary["findings"].extend(outcome.findings)
        elif isinstance(outcome, DocumentSkipped):
            summary["skipped"] += 1
        elif isinstance(outcome, DocumentError):
            summary["errors"] += 1
    return summary
