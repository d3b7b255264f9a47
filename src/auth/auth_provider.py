"""
Authentication Providers
Every provider exposes get_token() -> bearer token string for the Sheets back end.
How the token was obtained (service account, browser sign-in) stays behind this seam.
"""
import time
from typing import Callable, Optional

from oauth2client.client import Error as OAuth2ClientError
from oauth2client.service_account import ServiceAccountCredentials

import config
from errors import AuthFailure

# Tokens this close to expiry are treated as already expired
EXPIRY_SKEW_SECONDS = 60


class AuthProvider:
    """Interface: return a valid bearer token or raise AuthFailure"""

    def get_token(self) -> str:
        raise NotImplementedError


class BearerTokenAuthProvider(AuthProvider):
    """A token handed over by the caller (e.g. from an Authorization header)"""

    def __init__(self, token: str):
        self.token = (token or '').strip()

    def get_token(self) -> str:
        if not self.token:
            raise AuthFailure("No bearer token supplied")
        return self.token


class StoredTokenAuthProvider(AuthProvider):
    """
    Token obtained elsewhere (browser sign-in) and persisted in a key-value store.

    The stored value is ``{"access_token": str, "expires_at": float}``.
    """

    def __init__(self, store, key: str = None, clock: Callable[[], float] = None):
        """
        Args:
            store: Object with get(key) / set(key, value)
            key: Store key, defaults to config.TOKEN_STORE_KEY
            clock: Returns epoch seconds (injectable for tests)
        """
        self.store = store
        self.key = key or config.TOKEN_STORE_KEY
        self.clock = clock or time.time

    def store_token(self, token: str, expires_in: Optional[int] = 3600) -> None:
        """Persist a freshly issued token. ``expires_in=None`` never expires."""
        expires_at = self.clock() + expires_in if expires_in else None
        self.store.set(self.key, {'access_token': token, 'expires_at': expires_at})

    def clear(self) -> None:
        """Forget the stored token (sign-out)."""
        self.store.set(self.key, None)

    def is_authenticated(self) -> bool:
        try:
            self.get_token()
            return True
        except AuthFailure:
            return False

    def get_token(self) -> str:
        entry = self.store.get(self.key)
        if not entry or not entry.get('access_token'):
            raise AuthFailure("No stored Google token; sign in first")

        expires_at = entry.get('expires_at')
        if expires_at is not None and self.clock() >= expires_at - EXPIRY_SKEW_SECONDS:
            raise AuthFailure("Stored Google token has expired; sign in again")

        return entry['access_token']


class ServiceAccountAuthProvider(AuthProvider):
    """Tokens minted from service account credentials (or ADC on Cloud Run)"""

    def __init__(self, credentials_path: str = None, scopes=None):
        """
        Args:
            credentials_path: Service account JSON file; resolved from config when omitted
            scopes: OAuth scopes, defaults to config.GOOGLE_SHEETS_SCOPES
        """
        self.credentials_path = credentials_path
        self.scopes = scopes or config.GOOGLE_SHEETS_SCOPES
        self._credentials = None
        self._from_keyfile = False

    def _load_credentials(self):
        if self._credentials is not None:
            return self._credentials

        try:
            creds_path = self.credentials_path or config.get_credentials_path()
        except ValueError as e:
            raise AuthFailure(str(e)) from e

        if creds_path:
            # Use service account JSON file (local, Docker, or Cloud Run with secret)
            try:
                self._credentials = ServiceAccountCredentials.from_json_keyfile_name(creds_path, self.scopes)
                self._from_keyfile = True
            except (OSError, ValueError, KeyError) as e:
                raise AuthFailure(f"Could not load service account credentials: {e}") from e
        else:
            # Use Application Default Credentials (Cloud Run with Workload Identity)
            import google.auth
            from google.auth.exceptions import DefaultCredentialsError
            try:
                self._credentials, _ = google.auth.default(scopes=self.scopes)
            except DefaultCredentialsError as e:
                raise AuthFailure(f"Application Default Credentials unavailable: {e}") from e
        return self._credentials

    def get_token(self) -> str:
        credentials = self._load_credentials()

        if self._from_keyfile:
            try:
                return credentials.get_access_token().access_token
            except OAuth2ClientError as e:
                raise AuthFailure(f"Service account token refresh failed: {e}") from e

        import google.auth.transport.requests
        from google.auth.exceptions import GoogleAuthError
        try:
            if not credentials.valid:
                credentials.refresh(google.auth.transport.requests.Request())
        except GoogleAuthError as e:
            raise AuthFailure(f"Application Default Credentials refresh failed: {e}") from e
        return credentials.token


def build_auth_provider(kind: str = None, store=None) -> AuthProvider:
    """
    Create the configured provider.

    Args:
        kind: 'service_account' or 'stored_token', defaults to config.AUTH_PROVIDER
        store: Token store for 'stored_token'; a JsonFileTokenStore at
               config.TOKEN_STORE_PATH when omitted
    """
    kind = (kind or config.AUTH_PROVIDER).lower()
    if kind == 'service_account':
        return ServiceAccountAuthProvider()
    if kind == 'stored_token':
        if store is None:
            from auth.token_store import JsonFileTokenStore
            store = JsonFileTokenStore(config.TOKEN_STORE_PATH)
        return StoredTokenAuthProvider(store)
    raise ValueError(f"Unknown auth provider: {kind}")
