"""
Extraction Service Client
Posts a URL to the extraction endpoint and returns the annotated text it produces.
"""
from typing import Optional

import requests

import config
from errors import ExtractionFailure


class ExtractionClient:
    """HTTP client for the ``/api/upload`` extraction endpoint"""

    def __init__(self, base_url: str = None, endpoint: str = None, timeout: float = None,
                 session: Optional[requests.Session] = None, logger=None):
        """
        Args:
            base_url: Service root, defaults to config.EXTRACTION_SERVICE_URL
            endpoint: Path of the extraction endpoint
            timeout: Seconds before the request is abandoned
            session: requests.Session to reuse (injectable for tests)
            logger: Optional ExtractorLogger
        """
        self.base_url = (base_url or config.EXTRACTION_SERVICE_URL).rstrip('/')
        self.endpoint = endpoint or config.EXTRACTION_ENDPOINT
        self.timeout = timeout or config.EXTRACTION_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        self.logger = logger

    @property
    def endpoint_url(self) -> str:
        return f"{self.base_url}/{self.endpoint.lstrip('/')}"

    def extract(self, url: str) -> str:
        """
        Ask the service to extract data from ``url``.

        Returns:
            The ``extractedData`` text

        Raises:
            ExtractionFailure: Empty URL, network error, non-2xx status,
                or a response without ``extractedData``
        """
        url = (url or '').strip()
        if not url:
            raise ExtractionFailure("URL is required")

        try:
            response = self.session.post(
                self.endpoint_url,
                json={'url': url},
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise ExtractionFailure(f"Extraction timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise ExtractionFailure(f"Could not reach extraction service: {e}") from e

        if not response.ok:
            raise ExtractionFailure(self._error_detail(response))

        try:
            payload = response.json()
        except ValueError as e:
            raise ExtractionFailure("Extraction service returned invalid JSON") from e

        extracted = payload.get('extractedData') if isinstance(payload, dict) else None
        if extracted is None:
            raise ExtractionFailure("Extraction service response had no extractedData")

        if self.logger:
            self.logger.log_extraction(url, len(extracted))
        return extracted

    @staticmethod
    def _error_detail(response) -> str:
        """Upstream ``error`` message when the body is JSON, else a generic one."""
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        message = payload.get('error') if isinstance(payload, dict) else None
        return message or f"Network response was not ok (HTTP {response.status_code})"
