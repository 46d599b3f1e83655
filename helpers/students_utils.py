import logging
import traceback

from helpers.batch_utils import BatchEditBuilder
from helpers.errors import DocumentProcessingError, NormalizerError
from helpers.outcomes import DocumentError, DocumentSkipped, FolderStarted
from helpers.sheet_utils import STATUS_COLUMN, parse_manifest, parse_slide_selection
from helpers.sync_utils import parse_timestamp


class StudentsFlow:
    """
    Derive student presentations from teacher presentations, driven by a manifest.

    Every tab of the manifest spreadsheet names a folder under the students
    root. Every row of a tab asks for a copy of a teacher presentation reduced
    to a selection of slides. Copies are normalized like any other
    presentation and their id is written back into the row.
    """

    def __init__(self, config, store, sheets, cache, engine, root_folder_id, reporter=None):
        self.config = config
        self.store = store
        self.sheets = sheets
        self.cache = cache
        self.engine = engine
        self.root_folder_id = root_folder_id
        self.reporter = reporter

    def _report(self, outcome):
        if self.reporter is not None:
            self.reporter.record(outcome)

    def process_all(self, skip_check=False, stop_on_error=False):
        """Process every tab of the manifest, in spreadsheet order."""
        outcomes = []
        for sheet_name in self.sheets.list_sheets():
            outcomes.extend(self.process_sheet(sheet_name, skip_check, stop_on_error))
        return outcomes

    def process_sheet(self, sheet_name, skip_check=False, stop_on_error=False):
        """
        Process every row of one manifest tab.

        Args:
            sheet_name (str): Tab title, also the name of the students folder
            skip_check (bool): Regenerate copies even when they look up to date
            stop_on_error (bool): Re-raise the first failure

        Returns:
            list: One outcome per row
        """
        folder = self.ensure_folder(sheet_name)
        manifest = parse_manifest(self.sheets.read_rows(sheet_name))

        event = FolderStarted(sheet_name, len(manifest))
        logging.info(f"Processing students sheet {sheet_name}, {len(manifest)} rows")
        if self.reporter is not None:
            self.reporter.folder_started(event)

        outcomes = []
        for row in manifest.itertuples(index=False):
            try:
                outcomes.append(self.process_row(sheet_name, folder, row, skip_check))
            except DocumentProcessingError as e:
                outcomes.append(e.outcome)
                if stop_on_error:
                    raise
            except (NormalizerError, ValueError) as e:
                outcome = DocumentError(row.source_id, row.name, 0, f"Row {row.sheet_row}: {e}")
                logging.error(f"Error processing row {row.sheet_row} of {sheet_name}: {e}")
                logging.error(traceback.format_exc())
                self._report(outcome)
                outcomes.append(outcome)
                if stop_on_error:
                    raise DocumentProcessingError(outcome) from e

        return outcomes

    def ensure_folder(self, sheet_name):
        """The students folder named after the tab, created in Drive and in the cache if missing."""
        folder = self.cache.get_subfolder_by_name(sheet_name)
        if folder is not None:
            return folder

        folder_id = self.store.create_folder(self.root_folder_id, sheet_name)
        folder = self.cache.add_folder(folder_id, sheet_name)
        self.cache.build_paths(self.config.path_start_level, self.config.path_separator,
                               self.config.name_normalizer)
        return folder

    def process_row(self, sheet_name, folder, row, skip_check=False):
        """
        Generate (or keep) the student copy described by one manifest row.

        Returns:
            DocumentProcessed | DocumentSkipped
        """
        if not row.name or not row.source_id:
            outcome = DocumentSkipped(row.source_id, row.name, "empty row", row.sheet_row)
            self._report(outcome)
            return outcome

        selection = parse_slide_selection(row.slides)
        existing = next((ref for ref in folder.documents if ref.name == row.name), None)

        if existing is not None and not skip_check and self._copy_is_current(existing.id, row.source_id):
            outcome = DocumentSkipped(existing.id, row.name, "copy is newer than its source", row.sheet_row)
            logging.info(f"Skipping row {row.sheet_row} of {sheet_name}: {outcome.reason}")
            self._report(outcome)
            return outcome

        self._check_selection(row.source_id, selection)

        if existing is not None:
            self.store.trash_document(existing.id)
            self.cache.remove_document(existing.id)

        copy_id = self.store.copy_document(row.source_id, folder.id, row.name)
        self._keep_slides(copy_id, selection)

        ref = self.cache.add_document(folder.id, copy_id, row.name)
        self.cache.build_paths(self.config.path_start_level, self.config.path_separator,
                               self.config.name_normalizer)

        outcome = self.engine.process_document(ref, skip_check=True)
        self.sheets.write_cell(sheet_name, row.sheet_row, STATUS_COLUMN, copy_id)
        return outcome

    def _copy_is_current(self, copy_id, source_id):
        copy = self.store.get_metadata(copy_id, fields="id, modifiedTime")
        source = self.store.get_metadata(source_id, fields="id, modifiedTime")
        return parse_timestamp(copy['modifiedTime']) > parse_timestamp(source['modifiedTime'])

    def _check_selection(self, source_id, selection):
        """
        Raises:
            ValueError: If not a single selected slide exists in the source
        """
        if not selection:
            return

        slide_count = len(self.store.get_document(source_id).get('slides', []))
        if not any(number <= slide_count for number in selection):
            raise ValueError(f"None of the selected slides {selection} exist in {source_id} "
                             f"({slide_count} slides)")

    def _keep_slides(self, document_id, selection):
        """Delete every slide whose 1-based number is not selected. An empty selection keeps them all."""
        if not selection:
            return

        slides = self.store.get_document(document_id).get('slides', [])
        out_of_range = [number for number in selection if number > len(slides)]
        if out_of_range:
            logging.warning(f"{document_id}: selected slides {out_of_range} do not exist "
                            f"({len(slides)} slides)")

        builder = BatchEditBuilder(self.engine.transport, document_id)
        for number, slide in enumerate(slides, start=1):
            if number not in selection:
                builder.add_delete_object(slide['objectId'])
        builder.execute()
