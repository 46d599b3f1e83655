from unittest.mock import MagicMock

import pytest

from helpers.errors import DocumentProcessingError
from helpers.outcomes import DocumentError, DocumentProcessed, DocumentSkipped
from helpers.sheet_utils import STATUS_COLUMN
from helpers.students_utils import StudentsFlow
from helpers.tree_utils import FolderTreeCache

from fakes import FakeSheets, conforming_deck


HEADER = ["name", "source_id", "slides", "status"]


@pytest.fixture
def setup(fake, engine, config, clock):
    fake.add_folder("Students", folder_id="students")
    source_id = fake.add_presentation("Fractions", "teacher", conforming_deck(content_slides=4), doc_id="source")
    clock.advance(60)

    sheets = FakeSheets({"Class A": [
        HEADER,
        ["Fractions - class A", source_id, "1,3", ""],
        ["", "", "", ""],
    ]})
    cache = FolderTreeCache()
    reporter = MagicMock()
    flow = StudentsFlow(config, fake, sheets, cache, engine, "students", reporter)
    return flow, sheets, cache, reporter


def test_row_generates_a_reduced_copy(fake, setup):
    flow, sheets, cache, _ = setup

    outcomes = flow.process_all()

    assert isinstance(outcomes[0], DocumentProcessed)
    folder = cache.get_subfolder_by_name("Class A")
    assert fake.files[folder.id]["parents"] == ["students"]

    copy_ref = folder.documents[0]
    assert copy_ref.name == "Fractions - class A"
    assert copy_ref.footer_text == "Class A"
    assert cache.total_documents == 1

    slides = fake.get_document(copy_ref.id)["slides"]
    # Slides 1 and 3 of the source, then a new blank board
    assert [s["objectId"] for s in slides[:2]] == ["s0", "s2"]
    assert len(slides) == 3

    assert sheets.writes == [("Class A", 2, STATUS_COLUMN, copy_ref.id)]


def test_empty_row_is_skipped_with_its_row_number(setup):
    flow, _, _, reporter = setup

    outcomes = flow.process_sheet("Class A")

    assert outcomes[1] == DocumentSkipped("", "", "empty row", 3)
    reporter.record.assert_any_call(outcomes[1])
    reporter.folder_started.assert_called_once()


def test_current_copy_is_kept(fake, setup):
    flow, sheets, cache, _ = setup
    flow.process_sheet("Class A")
    copy_id = cache.get_subfolder_by_name("Class A").documents[0].id

    outcomes = flow.process_sheet("Class A")

    assert outcomes[0] == DocumentSkipped(copy_id, "Fractions - class A", "copy is newer than its source", 2)
    assert not fake.files[copy_id]["trashed"]
    assert len(sheets.writes) == 1


def test_stale_copy_is_replaced(fake, setup):
    flow, sheets, cache, _ = setup
    flow.process_sheet("Class A")
    folder = cache.get_subfolder_by_name("Class A")
    old_copy_id = folder.documents[0].id

    flow.process_sheet("Class A", skip_check=True)

    assert fake.files[old_copy_id]["trashed"]
    assert [ref.id for ref in folder.documents] != [old_copy_id]
    assert cache.total_documents == 1
    assert sheets.writes[-1] == ("Class A", 2, STATUS_COLUMN, folder.documents[0].id)


def test_existing_folder_is_reused(fake, setup):
    flow, _, cache, _ = setup
    cache.add_folder("existing", "Class A")

    flow.process_sheet("Class A")

    assert list(cache.folders) == ["existing"]
    assert not any(item["name"] == "Class A" for item in fake.files.values())


def test_bad_selection_becomes_an_error_outcome(setup):
    flow, sheets, _, _ = setup
    sheets.tabs["Class A"][1][2] = "3-1"

    outcomes = flow.process_sheet("Class A")

    assert isinstance(outcomes[0], DocumentError)
    assert "Row 2" in outcomes[0].message


def test_stop_on_error_raises(setup):
    flow, sheets, _, _ = setup
    sheets.tabs["Class A"][1][1] = "missing"

    with pytest.raises(DocumentProcessingError):
        flow.process_sheet("Class A", stop_on_error=True)


def test_selection_outside_the_source_fails_before_copying(fake, setup):
    flow, sheets, cache, _ = setup
    flow.process_sheet("Class A")
    folder = cache.get_subfolder_by_name("Class A")
    old_copy_id = folder.documents[0].id
    files_before = len(fake.files)
    sheets.tabs["Class A"][1][2] = "8-9"

    outcomes = flow.process_sheet("Class A", skip_check=True)

    assert isinstance(outcomes[0], DocumentError)
    assert "None of the selected slides" in outcomes[0].message
    assert "Row 2" in outcomes[0].message
    assert len(fake.files) == files_before
    assert not fake.files[old_copy_id]["trashed"]
    assert [ref.id for ref in folder.documents] == [old_copy_id]
    assert len(sheets.writes) == 1
