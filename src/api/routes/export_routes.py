"""
Export routes - append an extracted record to Google Sheets or an Excel workbook.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response

from api.dependencies import (
    get_auth_provider,
    get_logger,
    get_sheets_backend_factory,
    get_sheets_export_lock,
)
from api.models import ErrorResponse, SheetsExportRequest, SheetsExportResponse
from url_extractor import UrlExtractorSession

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# ═══════════════════════════════════════════════════════════════════
# Google Sheets
# ═══════════════════════════════════════════════════════════════════

@router.post(
    "/sheets",
    response_model=SheetsExportResponse,
    summary="Append the record to Google Sheets",
    responses={
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
def export_to_sheets(
    body: SheetsExportRequest,
    auth_provider=Depends(get_auth_provider),
    backend_factory=Depends(get_sheets_backend_factory),
    export_lock=Depends(get_sheets_export_lock),
    logger=Depends(get_logger),
):
    """
    Parse ``extracted_data`` and append it as the next row of the sheet.

    The header row is written together with the first record when the
    sheet is empty. Pass a Google access token as ``Authorization: Bearer``
    to write as that user; otherwise the server's credentials are used.
    """
    session = UrlExtractorSession(
        auth_provider=auth_provider,
        sheets_backend_factory=backend_factory,
        logger=logger,
        export_lock=export_lock,
    )
    session.load(body.url, body.extracted_data)
    result = session.export_to_google_sheets()
    return {
        "success": result.success,
        "next_row": result.next_row,
        "wrote_header": result.wrote_header,
        "spreadsheet_url": result.spreadsheet_url,
    }


# ═══════════════════════════════════════════════════════════════════
# Excel
# ═══════════════════════════════════════════════════════════════════

@router.post(
    "/excel",
    summary="Download the record as an Excel workbook",
    response_class=Response,
    responses={
        200: {"content": {XLSX_MEDIA_TYPE: {}}},
        422: {"model": ErrorResponse},
    },
)
def export_to_excel(
    url: str = Form(...),
    extracted_data: str = Form(..., min_length=1),
    file: Optional[UploadFile] = File(None),
    logger=Depends(get_logger),
):
    """
    Append the record to the uploaded workbook, or start a new one.

    The download keeps the uploaded file's name; a new workbook gets the
    default export filename.
    """
    existing_file = None
    filename = None
    if file is not None and file.filename:
        existing_file = file.file.read() or None
        filename = file.filename

    session = UrlExtractorSession(logger=logger)
    session.load(url, extracted_data)
    result = session.export_to_excel(existing_file, filename=filename)

    return Response(
        content=result.content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
