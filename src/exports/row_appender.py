"""
Row Appender
Appends one record to a dataset, writing the header first when the dataset is empty.

The same algorithm drives both back ends:

1. existing = number of data records already in the dataset
2. next_row = existing + 1
3. next_row == 1 -> the record's field names become the header
4. the record's values are appended as data record ``next_row``

Known limitation: against the remote back end the count-then-append is not
transactional, so two concurrent writers can both target the same row.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class AppendResult:
    """Outcome of a successful append"""
    success: bool
    backend: str
    next_row: int
    wrote_header: bool
    spreadsheet_url: Optional[str] = None
    content: Optional[bytes] = None
    filename: Optional[str] = None

    def to_dict(self) -> Dict:
        """JSON-friendly view (workbook bytes omitted)."""
        return {
            'success': self.success,
            'backend': self.backend,
            'next_row': self.next_row,
            'wrote_header': self.wrote_header,
            'spreadsheet_url': self.spreadsheet_url,
            'filename': self.filename,
        }


class TabularBackend:
    """
    Where a dataset lives. Subclasses implement the storage calls.

    Back ends that keep whole records override append_record and
    write_first_record and need not implement the positional calls.
    """

    name = 'tabular'

    def existing_row_count(self) -> int:
        """Number of data records already stored (header excluded)."""
        raise NotImplementedError

    def write_header(self, fields: List[str]) -> None:
        raise NotImplementedError

    def append_values(self, row_index: int, values: List[str]) -> None:
        """Store ``values`` as data record ``row_index`` (1-based)."""
        raise NotImplementedError

    def append_record(self, row_index: int, record: Dict[str, str]) -> None:
        """Positional append of the record's values."""
        self.append_values(row_index, record_values(record))

    def write_first_record(self, record: Dict[str, str]) -> None:
        """
        Write header and first data record to an empty dataset.

        Back ends that can do this in one call override it.
        """
        self.write_header(list(record.keys()))
        self.append_values(1, record_values(record))

    def finish(self, result: 'AppendResult') -> 'AppendResult':
        """Attach back-end specific output (link, file) to the result."""
        return result


class RowAppender:
    """Run the append protocol against any TabularBackend"""

    def __init__(self, logger=None):
        self.logger = logger

    def append_row(self, backend: TabularBackend, record: Dict[str, str]) -> AppendResult:
        """
        Append ``record`` to the dataset behind ``backend``.

        Any BackendError or ParseError raised by the back end aborts the
        append and propagates unchanged.
        """
        existing = backend.existing_row_count()
        next_row = existing + 1

        wrote_header = next_row == 1
        if wrote_header:
            backend.write_first_record(record)
        else:
            backend.append_record(next_row, record)

        if self.logger:
            self.logger.log_append(backend.name, next_row, wrote_header)

        result = AppendResult(
            success=True,
            backend=backend.name,
            next_row=next_row,
            wrote_header=wrote_header,
        )
        return backend.finish(result)


def cell_text(value) -> str:
    """Stringify a cell value; None becomes an empty cell."""
    if value is None:
        return ''
    return str(value)


def record_values(record: Dict[str, str]) -> List[str]:
    """The record's values as strings, in field order."""
    return [cell_text(value) for value in record.values()]


def append_row(backend: TabularBackend, record: Dict[str, str], logger=None) -> AppendResult:
    """Module-level shortcut for ``RowAppender().append_row``."""
    return RowAppender(logger=logger).append_row(backend, record)
