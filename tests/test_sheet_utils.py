from unittest.mock import MagicMock

import pytest

from helpers.sheet_utils import GoogleSheetsStore, parse_manifest, parse_slide_selection


def test_parse_slide_selection():
    assert parse_slide_selection("1,3-5") == [1, 3, 4, 5]
    assert parse_slide_selection(" 4 , 2, 2 ") == [2, 4]
    assert parse_slide_selection("") == []
    assert parse_slide_selection(None) == []


@pytest.mark.parametrize("selection", ["a", "0", "5-3", "1-", "2,-1"])
def test_parse_slide_selection_rejects_bad_parts(selection):
    with pytest.raises(ValueError):
        parse_slide_selection(selection)


def test_parse_manifest_pads_rows_and_keeps_row_numbers():
    manifest = parse_manifest([
        ["name", "source_id", "slides", "status"],
        ["Deck A", "id_a", "1-2"],
        [],
        ["Deck B", "id_b", "", "copy_b", "extra"],
    ])

    assert list(manifest.columns) == ["name", "source_id", "slides", "status", "sheet_row"]
    assert manifest["sheet_row"].tolist() == [2, 3, 4]
    assert manifest.iloc[0]["status"] == ""
    assert manifest.iloc[1]["name"] == ""
    assert manifest.iloc[2]["status"] == "copy_b"


def test_parse_manifest_of_header_only_tab_is_empty():
    assert parse_manifest([["name", "source_id", "slides", "status"]]).empty
    assert parse_manifest([]).empty


def test_sheets_store_calls():
    service = MagicMock()
    service.spreadsheets().get().execute.return_value = {
        "sheets": [{"properties": {"title": "Class A"}}, {"properties": {"title": "Class B"}}]}
    service.spreadsheets().values().get().execute.return_value = {"values": [["name"], ["Deck"]]}
    store = GoogleSheetsStore(service, "sheet_id")

    assert store.list_sheets() == ["Class A", "Class B"]
    assert store.read_rows("Class A") == [["name"], ["Deck"]]

    store.write_cell("Class A", 7, 4, "copy_id")
    service.spreadsheets().values().update.assert_called_with(
        spreadsheetId="sheet_id", range="'Class A'!D7", valueInputOption="RAW", body={"values": [["copy_id"]]})
