"""
FastAPI dependencies.
Resolves the shared extraction client, auth provider, and per-dataset export locks from app state.
"""
from typing import Optional

from fastapi import Header, Request

from auth.auth_provider import AuthProvider, BearerTokenAuthProvider


def get_extraction_client(request: Request):
    """Extraction client created at startup."""
    return request.app.state.extraction_client


def get_auth_provider(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> AuthProvider:
    """
    A Google token in ``Authorization: Bearer <token>`` wins;
    otherwise the provider configured at startup is used.
    """
    if authorization and authorization.lower().startswith('bearer '):
        return BearerTokenAuthProvider(authorization[len('bearer '):])
    return request.app.state.auth_provider


def get_sheets_backend_factory(request: Request):
    """Factory building the Sheets back end (overridable in tests)."""
    return request.app.state.sheets_backend_factory


def get_sheets_export_lock(request: Request):
    """Lock guarding the single shared spreadsheet."""
    return request.app.state.sheets_export_lock


def get_logger(request: Request):
    return request.app.state.logger
