"""
Configuration validation tests.
Module constants are patched in place; the environment is never modified.
"""
import os
import sys
import unittest
from unittest.mock import patch

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))

import config  # noqa: E402


class TestValidateConfig(unittest.TestCase):
    def test_missing_sheet_id_reported(self):
        with patch.object(config, 'GOOGLE_SHEET_ID', None), \
                patch.object(config, 'AUTH_PROVIDER', 'stored_token'):
            with self.assertRaises(ValueError) as ctx:
                config.validate_config()
        self.assertIn("GOOGLE_SHEET_ID is not set", str(ctx.exception))

    def test_unknown_auth_provider_reported(self):
        with patch.object(config, 'GOOGLE_SHEET_ID', 'abc'), \
                patch.object(config, 'AUTH_PROVIDER', 'magic'):
            with self.assertRaises(ValueError) as ctx:
                config.validate_config()
        self.assertIn("AUTH_PROVIDER", str(ctx.exception))

    def test_stored_token_setup_is_valid(self):
        with patch.object(config, 'GOOGLE_SHEET_ID', 'abc'), \
                patch.object(config, 'AUTH_PROVIDER', 'stored_token'):
            self.assertTrue(config.validate_config())

    def test_service_account_without_credentials_reported(self):
        with patch.object(config, 'GOOGLE_SHEET_ID', 'abc'), \
                patch.object(config, 'AUTH_PROVIDER', 'service_account'), \
                patch.object(config, 'get_credentials_path', side_effect=ValueError("No valid credentials source found")):
            with self.assertRaises(ValueError) as ctx:
                config.validate_config()
        self.assertIn("No valid credentials source found", str(ctx.exception))

    def test_defaults(self):
        self.assertEqual(config.SHEETS_VALUE_INPUT_OPTION, 'RAW')
        self.assertEqual(config.EXTRACTION_DATE_FIELD, 'Extraction Date')
        self.assertEqual(config.SOURCE_URL_FIELD, 'Source URL')


if __name__ == "__main__":
    unittest.main()
