"""
Google Sheets back end for the row appender
Counts populated rows and inserts new ones with RAW input (no formulas).

For tests, inject a fake spreadsheet via ``SheetsBackend.from_spreadsheet``
to avoid any real API calls.
"""
from typing import Dict, List, Optional

import gspread
import requests
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials

import config
from errors import AuthFailure, BackendError
from exports.row_appender import AppendResult, TabularBackend, record_values


def _get_client(auth_provider):
    """Authorize a gspread client with the provider's bearer token."""
    token = auth_provider.get_token()
    credentials = Credentials(token=token, scopes=config.GOOGLE_SHEETS_SCOPES)
    client = gspread.authorize(credentials)
    client.set_timeout(config.SHEETS_TIMEOUT_SECONDS)
    return client


class SheetsBackend(TabularBackend):
    """Dataset stored in one worksheet of a Google Spreadsheet"""

    name = 'google_sheets'

    def __init__(self, auth_provider=None, sheet_id: str = None,
                 sheet_name: str = None, spreadsheet: Optional[object] = None):
        """
        Args:
            auth_provider: Supplies the bearer token (ignored when spreadsheet is given)
            sheet_id: Spreadsheet key, defaults to config.GOOGLE_SHEET_ID
            sheet_name: Worksheet title, defaults to config.SHEET_NAME
            spreadsheet: Pre-opened spreadsheet (tests)
        """
        self.sheet_name = sheet_name or config.SHEET_NAME

        if spreadsheet is not None:
            self.spreadsheet = spreadsheet
            self.sheet_id = sheet_id or getattr(spreadsheet, 'id', None)
        else:
            self.sheet_id = sheet_id or config.GOOGLE_SHEET_ID
            if not self.sheet_id:
                raise ValueError("GOOGLE_SHEET_ID must be set")
            if auth_provider is None:
                raise AuthFailure("No authentication provider configured")
            client = _get_client(auth_provider)
            self.spreadsheet = self._call("open spreadsheet", client.open_by_key, self.sheet_id)

        self._worksheet = None

    @classmethod
    def from_spreadsheet(cls, spreadsheet: object, sheet_name: str = None) -> "SheetsBackend":
        """Helper for unit tests to inject a fake spreadsheet."""
        return cls(spreadsheet=spreadsheet, sheet_name=sheet_name)

    # ─────────────────────────────────────────────────────────────
    # Internal helpers
    # ─────────────────────────────────────────────────────────────

    def _call(self, operation: str, fn, *args, **kwargs):
        """Run one Sheets API call, converting library errors to BackendError/AuthFailure."""
        try:
            return fn(*args, **kwargs)
        except gspread.exceptions.APIError as e:
            status = getattr(getattr(e, 'response', None), 'status_code', None)
            if status in (401, 403):
                raise AuthFailure(f"Sheets API refused to {operation}: {e}") from e
            raise BackendError(f"Sheets API failed to {operation}: {e}", status=status) from e
        except GoogleAuthError as e:
            raise AuthFailure(f"Google authentication failed during {operation}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise BackendError(f"Network error during {operation}: {e}") from e

    @property
    def worksheet(self):
        """Target worksheet, created on first use if the spreadsheet lacks it."""
        if self._worksheet is None:
            try:
                self._worksheet = self._call("open worksheet", self.spreadsheet.worksheet, self.sheet_name)
            except gspread.exceptions.WorksheetNotFound:
                self._worksheet = self._call(
                    "create worksheet",
                    self.spreadsheet.add_worksheet,
                    title=self.sheet_name, rows=1000, cols=26,
                )
        return self._worksheet

    # ─────────────────────────────────────────────────────────────
    # TabularBackend
    # ─────────────────────────────────────────────────────────────

    def current_row_count(self) -> int:
        """Populated rows in the worksheet, header included."""
        # Any populated cell counts, so rows with an empty first field are kept
        rows = self._call("read rows", self.worksheet.get_all_values)
        return len(rows)

    def existing_row_count(self) -> int:
        # Row 1 is the header once anything has been written
        return max(self.current_row_count() - 1, 0)

    def write_header(self, fields: List[str]) -> None:
        self._call(
            "write header",
            self.worksheet.update,
            range_name='A1',
            values=[list(fields)],
            value_input_option=config.SHEETS_VALUE_INPUT_OPTION,
        )

    def append_values(self, row_index: int, values: List[str]) -> None:
        # Data record N lives on sheet row N + 1, below the header
        self._insert_rows("append row", [list(values)], f'A{row_index + 1}')

    def write_first_record(self, record: Dict[str, str]) -> None:
        """Header and first data row in a single inserting append."""
        self._insert_rows(
            "write header and first row",
            [list(record.keys()), record_values(record)],
            'A1',
        )

    def _insert_rows(self, operation: str, rows: List[List[str]], table_range: str) -> None:
        # INSERT_ROWS never overwrites cells that are already populated
        self._call(
            operation,
            self.worksheet.append_rows,
            rows,
            value_input_option=config.SHEETS_VALUE_INPUT_OPTION,
            insert_data_option='INSERT_ROWS',
            table_range=table_range,
        )

    def finish(self, result: AppendResult) -> AppendResult:
        if self.sheet_id:
            result.spreadsheet_url = config.SPREADSHEET_URL_TEMPLATE.format(sheet_id=self.sheet_id)
        return result
