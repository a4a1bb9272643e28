"""Client for the upstream model listing endpoint.

Issues exactly one GET per call; there is no retry or backoff. Failures are
raised as ``UpstreamError`` subclasses carrying the HTTP status the API layer
should relay.
"""

import json
import time
from typing import Any, List, Optional
import httpx
import structlog

from libs.common.config import DEFAULT_UPSTREAM_URL
from libs.common.metrics import MetricsCollector

logger = structlog.get_logger("dashboard_service.upstream")


class UpstreamError(Exception):
    """Base class for upstream listing failures."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class UpstreamStatusError(UpstreamError):
    """The upstream answered with a non-2xx status."""


class UpstreamUnavailableError(UpstreamError):
    """The request never produced a response (DNS, connect, timeout...)."""


class MalformedResponseError(UpstreamError):
    """The upstream body is not the expected JSON object."""


class UpstreamClient:
    """Fetches the raw ``models`` array from the upstream listing.

    Parameters
    - url: listing endpoint, including its ``plan=free`` query
    - transport: optional httpx transport (tests use ``httpx.MockTransport``)
    - metrics_collector: optional collector for fetch outcome metrics
    """

    def __init__(
        self,
        url: str = DEFAULT_UPSTREAM_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        metrics_collector: Optional[MetricsCollector] = None
    ):
        self.url = url
        self.transport = transport
        self.metrics_collector = metrics_collector
        self.http_client: Optional[httpx.AsyncClient] = None

    async def initialize(self):
        """Open the shared HTTP client."""
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(
                timeout=30.0,
                follow_redirects=True,
                transport=self.transport
            )
            logger.info("Upstream client initialized", url=self.url)

    async def cleanup(self):
        """Close the shared HTTP client."""
        if self.http_client is not None:
            await self.http_client.aclose()
            self.http_client = None

    async def __aenter__(self) -> "UpstreamClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.cleanup()

    async def fetch_models(self) -> List[Any]:
        """Fetch the listing and return its ``models`` array.

        A body without ``models`` is an empty listing, not an error.

        Raises
        - UpstreamUnavailableError: transport failure
        - UpstreamStatusError: non-2xx response (status mirrored)
        - MalformedResponseError: body is not a JSON object with a list of models
        """
        if self.http_client is None:
            await self.initialize()

        start_time = time.time()
        try:
            models = await self._fetch()
        except UpstreamError as e:
            self._record(type(e).__name__, start_time)
            raise
        self._record("ok", start_time)
        return models

    async def _fetch(self) -> List[Any]:
        try:
            response = await self.http_client.get(self.url)
        except httpx.HTTPError as e:
            logger.error("Upstream request failed", url=self.url, error=str(e))
            raise UpstreamUnavailableError(f"Upstream request failed: {e}") from e

        if not response.is_success:
            logger.warning(
                "Upstream returned error status",
                url=self.url,
                status_code=response.status_code
            )
            raise UpstreamStatusError(
                f"Upstream API error: HTTP {response.status_code}",
                status_code=response.status_code
            )

        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error("Upstream body is not valid JSON", url=self.url, error=str(e))
            raise MalformedResponseError("Upstream body is not valid JSON") from e

        if not isinstance(body, dict):
            raise MalformedResponseError("Upstream body is not a JSON object")

        models = body.get("models")
        if models is None:
            return []
        if not isinstance(models, list):
            raise MalformedResponseError("Upstream 'models' field is not a list")
        return models

    def _record(self, outcome: str, start_time: float) -> None:
        if self.metrics_collector is not None:
            self.metrics_collector.record_upstream_fetch(
                outcome=_OUTCOME_LABELS.get(outcome, outcome),
                duration=time.time() - start_time
            )


_OUTCOME_LABELS = {
    "UpstreamStatusError": "status_error",
    "UpstreamUnavailableError": "unavailable",
    "MalformedResponseError": "malformed",
}
