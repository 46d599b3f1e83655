import datetime
import logging

from helpers.errors import StaleWatermarkFormatError


def utc_now():
    return datetime.datetime.now(datetime.timezone.utc)


def parse_timestamp(time_str):
    """
    Parse a Drive RFC 3339 timestamp ("2023-01-01T12:00:00.000Z", "...+00:00").

    Naive values are taken as UTC.

    Raises:
        ValueError: If the string is not a timestamp
    """
    if not isinstance(time_str, str) or not time_str.strip():
        raise ValueError(f"Not a timestamp: {time_str!r}")

    value = time_str.strip()
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'

    parsed = datetime.datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def format_timestamp(moment):
    """Drive style timestamp, millisecond precision, Z suffix."""
    moment = moment.astimezone(datetime.timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class StalenessGate:
    """
    Decide whether a presentation changed since it was last normalized.

    The watermark is a custom Drive property holding "now + skew margin" written
    after every successful pass. The margin keeps the watermark strictly after
    the modification time Drive records for the edits of that same pass.
    """

    def __init__(self, store, property_name, skew_seconds, clock=utc_now):
        self.store = store
        self.property_name = property_name
        self.skew = datetime.timedelta(seconds=skew_seconds)
        self.clock = clock

    def should_process(self, doc_id, skip_check=False):
        """
        Args:
            doc_id (str): The presentation id
            skip_check (bool): Force processing (operator override)

        Returns:
            bool: True when the presentation must be reconciled

        Raises:
            StaleWatermarkFormatError: If the stored watermark cannot be parsed
        """
        if skip_check:
            return True

        metadata = self.store.get_metadata(doc_id, fields="id, name, properties, modifiedTime")
        watermark = (metadata.get('properties') or {}).get(self.property_name)

        if watermark is None:
            logging.info(f"{metadata.get('name', doc_id)}: no watermark, first run")
            return True

        try:
            watermark_time = parse_timestamp(watermark)
        except ValueError as e:
            raise StaleWatermarkFormatError(
                f"Presentation {doc_id}: invalid {self.property_name} value {watermark!r}") from e

        modified_time = parse_timestamp(metadata['modifiedTime'])
        logging.info(f"{metadata.get('name', doc_id)}: modified {modified_time.isoformat()}, "
                     f"watermark {watermark_time.isoformat()}")
        return modified_time > watermark_time

    def mark_processed(self, doc_id):
        """Write the watermark (now + skew margin) and return it."""
        watermark = format_timestamp(self.clock() + self.skew)
        self.store.update_metadata(doc_id, {self.property_name: watermark})
        logging.info(f"Presentation {doc_id} marked as normalized at {watermark}")
        return watermark
