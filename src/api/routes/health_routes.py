"""
Health check route - public, no authentication required.
"""
from fastapi import APIRouter, Request

router = APIRouter()


@router.get(
    "",
    summary="System health check",
)
def health_check(request: Request):
    """
    Check system health status.

    Reports whether the configured components are usable.
    """
    health = {
        "status": "healthy",
        "service": "URL Data Extractor API",
        "version": "1.0.0",
        "components": {}
    }

    try:
        import config
        health["components"]["config"] = "ok"
        health["components"]["sheets"] = "configured" if config.GOOGLE_SHEET_ID else "not configured"
    except Exception as e:
        health["components"]["config"] = f"error: {str(e)}"
        health["status"] = "degraded"

    auth_provider = getattr(request.app.state, "auth_provider", None)
    is_authenticated = getattr(auth_provider, "is_authenticated", None)
    if auth_provider is None:
        health["components"]["auth"] = "unavailable"
    elif is_authenticated is not None:
        health["components"]["auth"] = "signed in" if is_authenticated() else "signed out"
    else:
        health["components"]["auth"] = type(auth_provider).__name__

    extraction_client = getattr(request.app.state, "extraction_client", None)
    health["components"]["extraction"] = (
        extraction_client.endpoint_url if extraction_client is not None else "unavailable"
    )

    return health
