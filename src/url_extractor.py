"""
URL Extractor Session
=====================

Holds the state of one user's extraction workflow:

    submit(url)               -> extraction service -> extracted_data
    export_to_google_sheets() -> RecordParser -> RowAppender(SheetsBackend)
    export_to_excel(file)     -> RecordParser -> RowAppender(WorkbookBackend)

Only one export runs at a time per session; a second request while one is in
flight raises OperationInProgress. Nothing is retried and nothing is cancelled.
"""
import threading
from typing import Callable, Optional

from errors import ExtractionFailure, ExtractorError, OperationInProgress
from exports.row_appender import AppendResult, RowAppender
from exports.workbook_backend import WorkbookBackend
from parsing.record_parser import RecordParser


class UrlExtractorSession:
    """Submit URLs and export the extracted record"""

    def __init__(self, extraction_client=None, auth_provider=None,
                 sheets_backend_factory: Optional[Callable] = None,
                 parser: Optional[RecordParser] = None, logger=None,
                 export_lock: Optional[threading.Lock] = None):
        """
        Args:
            extraction_client: Object with extract(url) -> str; None for export-only sessions
            auth_provider: Supplies Google tokens for the Sheets export
            sheets_backend_factory: Callable(auth_provider) -> TabularBackend;
                defaults to SheetsBackend
            parser: RecordParser to use
            logger: Optional ExtractorLogger
            export_lock: Lock shared by sessions writing the same dataset
        """
        self.extraction_client = extraction_client
        self.auth_provider = auth_provider
        self.sheets_backend_factory = sheets_backend_factory or _default_sheets_backend
        self.logger = logger
        self.parser = parser or RecordParser(logger=logger)
        self.appender = RowAppender(logger=logger)

        self.url = ''
        self.extracted_data: Optional[str] = None
        self.error = ''
        self.is_loading = False
        self._export_lock = export_lock or threading.Lock()

    @property
    def is_exporting(self) -> bool:
        return self._export_lock.locked()

    def submit(self, url: str) -> str:
        """Run an extraction for ``url`` and keep its text."""
        self.url = url
        self.error = ''
        self.extracted_data = None
        self.is_loading = True
        try:
            if self.extraction_client is None:
                raise ExtractionFailure("No extraction service configured")
            self.extracted_data = self.extraction_client.extract(url)
            return self.extracted_data
        except ExtractorError as e:
            self._fail("Extraction", e)
            raise
        finally:
            self.is_loading = False

    def load(self, url: str, extracted_data: str) -> None:
        """Restore a previous extraction without calling the service again."""
        self.url = url
        self.extracted_data = extracted_data
        self.error = ''

    def current_record(self):
        """The record for the current extraction, or None before one exists."""
        if not self.extracted_data:
            return None
        return self.parser.parse(self.extracted_data, self.url)

    def export_to_google_sheets(self) -> Optional[AppendResult]:
        """Append the current record to the configured spreadsheet."""
        if not self.extracted_data:
            return None
        with self._single_flight():
            try:
                record = self.current_record()
                backend = self.sheets_backend_factory(self.auth_provider)
                return self.appender.append_row(backend, record)
            except ExtractorError as e:
                self._fail("Sheets export", e)
                raise

    def export_to_excel(self, existing_file: Optional[bytes] = None,
                        filename: Optional[str] = None) -> Optional[AppendResult]:
        """
        Append the current record to ``existing_file`` (or a new workbook).

        Returns:
            AppendResult whose ``content`` is the workbook to download
        """
        if not self.extracted_data:
            return None
        with self._single_flight():
            try:
                record = self.current_record()
                backend = WorkbookBackend(existing_file, filename=filename, logger=self.logger)
                return self.appender.append_row(backend, record)
            except ExtractorError as e:
                self._fail("Excel export", e)
                raise

    # ─────────────────────────────────────────────────────────────
    # Internal helpers
    # ─────────────────────────────────────────────────────────────

    def _single_flight(self):
        if not self._export_lock.acquire(blocking=False):
            raise OperationInProgress("Export requested while another is running")
        return _Release(self._export_lock)

    def _fail(self, operation: str, error: ExtractorError):
        self.error = error.user_message
        if self.logger:
            self.logger.log_error(operation, type(error).__name__, str(error))


class _Release:
    """Context manager releasing an already-acquired lock"""

    def __init__(self, lock):
        self.lock = lock

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.lock.release()
        return False


def _default_sheets_backend(auth_provider):
    from sheets.sheets_backend import SheetsBackend
    return SheetsBackend(auth_provider=auth_provider)
