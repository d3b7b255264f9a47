"""
FastAPI route tests using TestClient.
Extraction service, auth provider, and Sheets back end are all faked.
"""
import io
import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock

import openpyxl

# Ensure src/ is on path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))

from auth.auth_provider import BearerTokenAuthProvider  # noqa: E402
from errors import AuthFailure, ExtractionFailure  # noqa: E402
from exports.row_appender import TabularBackend  # noqa: E402

RAW = "**Victim_Name:** John Doe\n**Agency:** City Police"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class FakeExtractionClient:
    endpoint_url = 'http://extractor.local/api/upload'

    def __init__(self):
        self.error = None

    def extract(self, url):
        if self.error:
            raise self.error
        return RAW


class MemoryBackend(TabularBackend):
    name = 'memory'

    def __init__(self):
        self.rows = []

    def existing_row_count(self):
        return max(len(self.rows) - 1, 0)

    def write_header(self, fields):
        self.rows.append(list(fields))

    def append_values(self, row_index, values):
        self.rows.append(list(values))

    def finish(self, result):
        result.spreadsheet_url = 'https://docs.google.com/spreadsheets/d/test'
        return result


class TestAPIEndpoints(unittest.TestCase):
    def setUp(self):
        from fastapi.testclient import TestClient
        from api.main import create_app

        self.extraction_client = FakeExtractionClient()
        self.backend = MemoryBackend()
        self.providers_seen = []

        def factory(auth_provider):
            self.providers_seen.append(auth_provider)
            auth_provider.get_token()
            return self.backend

        self.default_provider = MagicMock()
        self.default_provider.get_token.return_value = 'server-token'
        self.app = create_app(
            extraction_client=self.extraction_client,
            auth_provider=self.default_provider,
            sheets_backend_factory=factory,
            logger=MagicMock(),
        )
        self.client = TestClient(self.app)

    def test_root(self):
        res = self.client.get("/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["service"], "URL Data Extractor API")

    def test_health(self):
        res = self.client.get("/health")
        self.assertEqual(res.status_code, 200)
        data = res.json()
        self.assertEqual(data["status"], "healthy")
        self.assertEqual(data["components"]["extraction"], FakeExtractionClient.endpoint_url)

    def test_extract_returns_text_and_record(self):
        res = self.client.post("/extract", json={"url": "https://news.example/a"})
        self.assertEqual(res.status_code, 200)
        data = res.json()
        self.assertEqual(data["extractedData"], RAW)
        self.assertEqual(
            list(data["record"].keys()),
            ["Victim Name", "Agency", "Extraction Date", "Source URL"],
        )
        self.assertEqual(data["record"]["Source URL"], "https://news.example/a")

    def test_extract_failure_is_502(self):
        self.extraction_client.error = ExtractionFailure("upstream down")
        res = self.client.post("/extract", json={"url": "https://news.example/a"})
        self.assertEqual(res.status_code, 502)
        self.assertEqual(res.json()["detail"], "Failed to extract data. Please check the URL and try again.")

    def test_extract_requires_url(self):
        res = self.client.post("/extract", json={"url": ""})
        self.assertEqual(res.status_code, 422)

    def test_sheets_export_uses_server_credentials(self):
        res = self.client.post("/exports/sheets", json={"url": "https://x", "extracted_data": RAW})
        self.assertEqual(res.status_code, 200)
        data = res.json()
        self.assertTrue(data["success"])
        self.assertTrue(data["wrote_header"])
        self.assertEqual(data["next_row"], 1)
        self.assertEqual(data["spreadsheet_url"], 'https://docs.google.com/spreadsheets/d/test')
        self.assertIs(self.providers_seen[0], self.default_provider)

        res = self.client.post("/exports/sheets", json={"url": "https://y", "extracted_data": RAW})
        self.assertEqual(res.json()["next_row"], 2)
        self.assertEqual(len(self.backend.rows), 3)

    def test_sheets_export_with_bearer_token(self):
        res = self.client.post(
            "/exports/sheets",
            json={"url": "https://x", "extracted_data": RAW},
            headers={"Authorization": "Bearer ya29.user"},
        )
        self.assertEqual(res.status_code, 200)
        provider = self.providers_seen[0]
        self.assertIsInstance(provider, BearerTokenAuthProvider)
        self.assertEqual(provider.get_token(), 'ya29.user')

    def test_sheets_export_auth_failure_is_401(self):
        self.default_provider.get_token.side_effect = AuthFailure("signed out")
        res = self.client.post("/exports/sheets", json={"url": "https://x", "extracted_data": RAW})
        self.assertEqual(res.status_code, 401)
        self.assertEqual(self.backend.rows, [])

    def test_sheets_export_busy_is_409(self):
        self.app.state.sheets_export_lock.acquire()
        try:
            res = self.client.post("/exports/sheets", json={"url": "https://x", "extracted_data": RAW})
        finally:
            self.app.state.sheets_export_lock.release()
        self.assertEqual(res.status_code, 409)

    def test_excel_export_new_workbook(self):
        res = self.client.post("/exports/excel", data={"url": "https://x", "extracted_data": RAW})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.headers["content-type"], XLSX)
        self.assertIn('fatal-encounters-data.xlsx', res.headers["content-disposition"])

        sheet = openpyxl.load_workbook(io.BytesIO(res.content)).active
        rows = list(sheet.iter_rows(values_only=True))
        self.assertEqual(rows[0][:2], ("Victim Name", "Agency"))
        self.assertEqual(rows[1][:2], ("John Doe", "City Police"))

    def test_excel_export_appends_to_upload(self):
        first = self.client.post("/exports/excel", data={"url": "https://x", "extracted_data": RAW})

        res = self.client.post(
            "/exports/excel",
            data={"url": "https://y", "extracted_data": RAW},
            files={"file": ("encounters.xlsx", first.content, XLSX)},
        )
        self.assertEqual(res.status_code, 200)
        self.assertIn('encounters.xlsx', res.headers["content-disposition"])

        sheet = openpyxl.load_workbook(io.BytesIO(res.content)).active
        rows = list(sheet.iter_rows(values_only=True))
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[2][-1], "https://y")

    def test_excel_export_rejects_non_workbook(self):
        res = self.client.post(
            "/exports/excel",
            data={"url": "https://x", "extracted_data": RAW},
            files={"file": ("notes.xlsx", b"plain text", XLSX)},
        )
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.json()["detail"], "The selected file is not a valid Excel workbook.")


if __name__ == "__main__":
    unittest.main()
