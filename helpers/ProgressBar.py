import time
import sys
import logging
import threading

from constants.colors import RESET, BOLD_CYAN, BOLD_YELLOW, GREEN, RED, DARK_GRAY
from helpers.outcomes import DocumentError, DocumentProcessed, DocumentSkipped


class ProgressBar:
    """
    Console reporter for normalization events.

    Keeps per-folder and overall tallies of processed, skipped and failed
    presentations and redraws a progress bar after every event.
    """

    def __init__(self, total_documents=0, stream=None):
        self.total_documents = total_documents
        self.stream = stream or sys.stdout
        self.start_time = time.time()
        self.current_folder = None
        self.folder_total = 0
        self.folder_counts = {"processed": 0, "skipped": 0, "errors": 0}
        self.counts = {"processed": 0, "skipped": 0, "errors": 0}
        self.findings = []
        self._lock = threading.Lock()

    @property
    def done(self):
        return sum(self.counts.values())

    def folder_started(self, event):
        """Reset the folder tallies (FolderStarted event)."""
        with self._lock:
            self.current_folder = event.name
            self.folder_total = event.total_count
            self.folder_counts = {"processed": 0, "skipped": 0, "errors": 0}

        logging.info(f"Started folder: {event.name}, {event.total_count} presentations")
        self._write(f"\n\nStarted folder: {BOLD_YELLOW}{event.name}{RESET}, {event.total_count} presentations\n")

    def record(self, outcome):
        """Tally one outcome and redraw."""
        with self._lock:
            if isinstance(outcome, DocumentProcessed):
                key = "processed"
                self.findings.extend(outcome.findings)
            elif isinstance(outcome, DocumentSkipped):
                key = "skipped"
            else:
                key = "errors"
            self.counts[key] += 1
            self.folder_counts[key] += 1

        if isinstance(outcome, DocumentError):
            self._write(f"\r{' ' * 100}\r  ↳ {BOLD_CYAN}{outcome.document_name}{RESET} - "
                        f"{RED}Error: {outcome.message}{RESET}\n")
        elif isinstance(outcome, DocumentSkipped) and outcome.sheet_row:
            self._write(f"\r{' ' * 100}\r  ↳ Row {outcome.sheet_row} - {DARK_GRAY}{outcome.reason}{RESET}\n")
        elif isinstance(outcome, DocumentProcessed) and outcome.findings:
            self._write(f"\r{' ' * 100}\r  ↳ {BOLD_CYAN}{outcome.document_name}{RESET} - "
                        f"{GREEN}Done{RESET}, {len(outcome.findings)} findings\n")

        self.update()

    def update(self):
        """Redraw the progress line at the bottom."""
        elapsed_time = time.time() - self.start_time
        folder_done = sum(self.folder_counts.values())

        status = (f"{self.current_folder or 'Presentations'}: {folder_done} "
                  f"({self.folder_counts['processed']} done, {self.folder_counts['skipped']} skipped), "
                  f"Total: {self.done} ({self.counts['processed']} done, {self.counts['skipped']} skipped, "
                  f"{self.counts['errors']} errors)")

        if self.total_documents:
            progress_percentage = min(self.done / self.total_documents, 1) * 100
            progress_bar_width = 30
            filled_width = int(progress_percentage / 100 * progress_bar_width)
            bar = '=' * filled_width + '-' * (progress_bar_width - filled_width)
            status = f"[{bar}] {progress_percentage:.1f}% | {status}"

        self._write(f"\r{status} | Elapsed: {elapsed_time:.1f}s")

    def _write(self, text):
        self.stream.write(text)
        self.stream.flush()
