"""
Error kinds for the URL Data Extractor

Every failure is terminal for the operation that raised it; nothing here is
retried. Each error carries one human-readable message for the caller.
"""
from typing import Optional


class ExtractorError(Exception):
    """Base class for all extractor failures"""

    default_message = "Operation failed"

    def __init__(self, detail: str = "", user_message: Optional[str] = None):
        super().__init__(detail or self.default_message)
        self.detail = detail
        self.user_message = user_message or self.default_message


class ExtractionFailure(ExtractorError):
    """Bad URL or upstream extraction service failure"""
    default_message = "Failed to extract data. Please check the URL and try again."


class AuthFailure(ExtractorError):
    """No token available, or the token is invalid/expired"""
    default_message = "Not signed in to Google. Please sign in and try again."


class BackendError(ExtractorError):
    """Remote spreadsheet read/write failure"""
    default_message = "Failed to write to Google Sheets. Please check your permissions."

    def __init__(self, detail: str = "", status: Optional[int] = None, user_message: Optional[str] = None):
        super().__init__(detail, user_message)
        self.status = status


class ParseError(ExtractorError):
    """The supplied file is not a readable spreadsheet"""
    default_message = "The selected file is not a valid Excel workbook."


class OperationInProgress(ExtractorError):
    """An export is already running for this session"""
    default_message = "An export is already in progress. Please wait for it to finish."
