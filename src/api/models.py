"""
Pydantic models for extraction and export requests and responses.
"""
from pydantic import BaseModel, Field
from typing import Dict, Optional


class ExtractRequest(BaseModel):
    """Extraction request body."""
    url: str = Field(..., min_length=1, description="Page to extract data from")


class ExtractResponse(BaseModel):
    """Extracted text plus the record it parses into."""
    url: str
    extractedData: str
    record: Dict[str, str]


class SheetsExportRequest(BaseModel):
    """Export a previous extraction to Google Sheets."""
    url: str = Field(..., min_length=1, description="Source URL of the extraction")
    extracted_data: str = Field(..., min_length=1, description="Text returned by /extract")


class SheetsExportResponse(BaseModel):
    """Outcome of a Google Sheets append."""
    success: bool
    next_row: int
    wrote_header: bool
    spreadsheet_url: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str
