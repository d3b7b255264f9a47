"""
Exports module for the URL Data Extractor
Contains the row append protocol and the Excel workbook back end
"""

from .row_appender import AppendResult, RowAppender, TabularBackend
from .workbook_backend import WorkbookBackend

__all__ = ['AppendResult', 'RowAppender', 'TabularBackend', 'WorkbookBackend']
