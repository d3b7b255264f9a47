"""
Excel workbook back end for the row appender
Loads an optional existing .xlsx into memory, appends, and re-serializes it for download.
"""
import io
import zipfile
from typing import Dict, List, Optional

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

import config
from errors import ParseError
from exports.row_appender import AppendResult, TabularBackend, cell_text


class WorkbookBackend(TabularBackend):
    """
    In-memory dataset serialized as a single-sheet workbook.

    The existing file's first sheet is read as a header row plus data rows.
    Records with keys the header lacks add columns at the end; cells a
    record has no value for stay empty.
    """

    name = 'excel'

    def __init__(self, existing_file: Optional[bytes] = None, filename: Optional[str] = None,
                 sheet_name: str = None, logger=None):
        """
        Args:
            existing_file: Bytes of a user-supplied .xlsx (None creates a new workbook)
            filename: Name of the supplied file, kept for the download
            sheet_name: Title of the output sheet
            logger: Optional ExtractorLogger
        """
        self.sheet_name = sheet_name or config.WORKBOOK_SHEET_NAME
        self.logger = logger
        self.filename = filename if (existing_file and filename) else config.DEFAULT_EXPORT_FILENAME
        self.rows: List[Dict[str, str]] = self.load_existing(existing_file) if existing_file else []

    def load_existing(self, blob: bytes) -> List[Dict[str, str]]:
        """
        Read the first sheet of ``blob`` into a list of records.

        Raises:
            ParseError: If the bytes are not a readable workbook
        """
        try:
            workbook = openpyxl.load_workbook(io.BytesIO(blob), read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as e:
            raise ParseError(f"Could not read workbook: {e}") from e

        try:
            sheet = workbook.worksheets[0]
            row_iter = sheet.iter_rows(values_only=True)
            header_row = next(row_iter, None)
            if not header_row:
                return []
            headers = [cell_text(cell) for cell in header_row]

            records = []
            for row in row_iter:
                if not any(cell not in (None, '') for cell in row):  # Skip empty rows
                    continue
                record = {}
                for index, header in enumerate(headers):
                    if not header:
                        continue
                    record[header] = cell_text(row[index]) if index < len(row) else ''
                records.append(record)
        finally:
            workbook.close()

        if self.logger:
            self.logger.debug(f"Loaded {len(records)} existing rows", component="Workbook")
        return records

    def serialize(self, rows: List[Dict[str, str]]) -> bytes:
        """Write ``rows`` to a fresh single-sheet workbook and return its bytes."""
        headers: List[str] = []
        for row in rows:
            for key in row:
                if key not in headers:
                    headers.append(key)

        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.title = self.sheet_name
        if headers:
            sheet.append(headers)
        for row in rows:
            sheet.append([row.get(header, '') for header in headers])

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    # ─────────────────────────────────────────────────────────────
    # TabularBackend
    # ─────────────────────────────────────────────────────────────

    def existing_row_count(self) -> int:
        return len(self.rows)

    def append_record(self, row_index: int, record: Dict[str, str]) -> None:
        self.rows.append(dict(record))

    def write_first_record(self, record: Dict[str, str]) -> None:
        # No header row is stored; serialize() derives it from the records
        self.rows.append(dict(record))

    def finish(self, result: AppendResult) -> AppendResult:
        result.content = self.serialize(self.rows)
        result.filename = self.filename
        return result
