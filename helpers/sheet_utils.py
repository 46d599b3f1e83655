import logging

import pandas as pd
from googleapiclient.errors import HttpError
from openpyxl.utils import get_column_letter

from helpers.drive_utils import retry_with_exponential_backoff
from helpers.errors import ExternalCallFailure


MANIFEST_COLUMNS = ["name", "source_id", "slides", "status"]
"""
Columns of a students manifest tab, in sheet order (A to D).
The first row of every tab is a header and is never read as data.
"""

STATUS_COLUMN = MANIFEST_COLUMNS.index("status") + 1
"""1-based index of the column that receives the id of the generated copy."""


class GoogleSheetsStore:
    """
    Spreadsheet store over the Sheets v4 API, bound to one spreadsheet.
    """

    def __init__(self, sheets_service, spreadsheet_id):
        self.sheets_service = sheets_service
        self.spreadsheet_id = spreadsheet_id

    def _call(self, description, func):
        try:
            return retry_with_exponential_backoff(func)
        except HttpError as e:
            logging.error(f"{description} failed: {e}")
            raise ExternalCallFailure(f"{description} failed: {e}") from e

    def list_sheets(self):
        """Titles of the tabs, in spreadsheet order."""
        spreadsheet = self._call(f"spreadsheets.get {self.spreadsheet_id}", lambda: self.sheets_service.spreadsheets().get(
            spreadsheetId=self.spreadsheet_id, fields="sheets.properties.title").execute())
        return [sheet['properties']['title'] for sheet in spreadsheet.get('sheets', [])]

    def read_rows(self, sheet_name):
        """All rows of a tab as lists of strings (trailing empty cells are omitted by the API)."""
        result = self._call(f"values.get {sheet_name}", lambda: self.sheets_service.spreadsheets().values().get(
            spreadsheetId=self.spreadsheet_id, range=f"'{sheet_name}'").execute())
        return result.get('values', [])

    def write_cell(self, sheet_name, row, column, value):
        """
        Write one value.

        Args:
            sheet_name (str): Tab title
            row (int): 1-based row number
            column (int): 1-based column number
            value (str): Raw value to write
        """
        cell = f"'{sheet_name}'!{get_column_letter(column)}{row}"
        self._call(f"values.update {cell}", lambda: self.sheets_service.spreadsheets().values().update(
            spreadsheetId=self.spreadsheet_id, range=cell, valueInputOption="RAW",
            body={'values': [[value]]}).execute())
        logging.info(f"Wrote {value} to {cell}")


def parse_manifest(rows):
    """
    Turn the raw rows of a manifest tab into a DataFrame.

    The header row is dropped. Short rows are padded with empty strings and a
    `sheet_row` column keeps the 1-based row number of every entry.

    Returns:
        pd.DataFrame: Columns name, source_id, slides, status, sheet_row
    """
    records = []
    for offset, row in enumerate(rows[1:]):
        cells = [str(cell).strip() for cell in row[:len(MANIFEST_COLUMNS)]]
        cells += [""] * (len(MANIFEST_COLUMNS) - len(cells))
        records.append(cells + [offset + 2])

    return pd.DataFrame(records, columns=MANIFEST_COLUMNS + ["sheet_row"])


def parse_slide_selection(selection):
    """
    Parse a slide selection such as "1,3-5" into sorted 1-based slide numbers.

    An empty selection returns an empty list, meaning every slide.

    Raises:
        ValueError: If a part is not a number or a well-formed range
    """
    numbers = set()
    for part in (selection or "").split(","):
        part = part.strip()
        if not part:
            continue

        if "-" in part:
            start, _, end = part.partition("-")
            start, end = int(start), int(end)
            if start < 1 or end < start:
                raise ValueError(f"Invalid slide range: {part}")
            numbers.update(range(start, end + 1))
        else:
            number = int(part)
            if number < 1:
                raise ValueError(f"Invalid slide number: {part}")
            numbers.add(number)

    return sorted(numbers)
