import io

from helpers.ProgressBar import ProgressBar
from helpers.outcomes import DocumentError, DocumentProcessed, DocumentSkipped, FolderStarted, ValidationFinding


def test_record_tallies_every_outcome_kind():
    stream = io.StringIO()
    bar = ProgressBar(total_documents=4, stream=stream)
    finding = ValidationFinding("a1", 0, "missing header")

    bar.record(DocumentProcessed("a1", "Algebra 1", (finding,)))
    bar.record(DocumentSkipped("a2", "Algebra 2", "not modified since last normalization"))
    bar.record(DocumentError("a3", "Algebra 3", 1, "Loaded: boom"))

    assert bar.counts == {"processed": 1, "skipped": 1, "errors": 1}
    assert bar.done == 3
    assert bar.findings == [finding]

    output = stream.getvalue()
    assert "75.0%" in output
    assert "Error: Loaded: boom" in output


def test_folder_started_resets_folder_tallies_only():
    stream = io.StringIO()
    bar = ProgressBar(stream=stream)
    bar.record(DocumentProcessed("a1", "Algebra 1"))

    bar.folder_started(FolderStarted("Geometry", 12))

    assert bar.current_folder == "Geometry"
    assert bar.folder_total == 12
    assert bar.folder_counts == {"processed": 0, "skipped": 0, "errors": 0}
    assert bar.counts["processed"] == 1
    assert "Started folder" in stream.getvalue()


def test_skipped_sheet_rows_are_printed():
    stream = io.StringIO()
    bar = ProgressBar(stream=stream)

    bar.record(DocumentSkipped("", "", "empty row", sheet_row=7))

    assert "Row 7" in stream.getvalue()
