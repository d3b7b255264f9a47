"""
Extraction routes - submit a URL to the extraction service and preview the parsed record.
"""
from fastapi import APIRouter, Depends

from api.dependencies import get_extraction_client, get_logger
from api.models import ErrorResponse, ExtractRequest, ExtractResponse
from url_extractor import UrlExtractorSession

router = APIRouter()


@router.post(
    "",
    response_model=ExtractResponse,
    summary="Extract data from a URL",
    responses={502: {"model": ErrorResponse}},
)
def extract(
    body: ExtractRequest,
    extraction_client=Depends(get_extraction_client),
    logger=Depends(get_logger),
):
    """
    Send the URL to the extraction service.

    Returns the raw annotated text and the record it parses into
    (parsed fields, then Extraction Date and Source URL).
    """
    session = UrlExtractorSession(extraction_client, logger=logger)
    extracted = session.submit(body.url)
    return {
        "url": body.url,
        "extractedData": extracted,
        "record": session.parser.parse(extracted, body.url),
    }
