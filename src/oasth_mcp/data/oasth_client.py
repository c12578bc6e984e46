from enum import Enum

import httpx

from oasth_mcp.codec.response import DecodedPayload, decode_payload
from oasth_mcp.data.config import OASTHConfig


class Endpoint(str, Enum):
    """OASTH telematics endpoints consumed by the client."""

    STOPS = "getStopsB"
    LINES = "getLines"
    ROUTES = "getRoutes"
    ROUTE_DETAILS = "getRouteDetailPerRoute"
    STOP_ARRIVALS = "getStopArrivals"
    BUS_LOCATION = "getBusLocation"


def build_url(base_url: str, endpoint: str, param: str | None = None) -> str:
    """Build an endpoint URL with the trailing `?a=1` marker the server expects.

    Example: build_url(base, "getStopArrivals", "1029") -> "{base}/getStopArrivals/1029/?a=1"
    """
    endpoint = endpoint.value if isinstance(endpoint, Endpoint) else endpoint
    path = f"{endpoint}/{param}" if param else endpoint
    return f"{base_url.rstrip('/')}/{path}/?a=1"


class OASTHClient:
    """Async HTTP client for the OASTH telematics API.

    Usage:
        async with OASTHClient(config) as client:
            payload = await client.fetch(Endpoint.LINES)
    """

    def __init__(self, config: OASTHConfig):
        """Initialize the client.

        Args:
            config: Configuration with base URL and timeout.
        """
        self._config = config
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "OASTHClient":
        """Enter async context - create HTTP client."""
        headers = {"Accept": "*/*"}
        self._client = httpx.AsyncClient(
            headers=headers, timeout=self._config.request_timeout_seconds
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context - close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_raw(self, endpoint: Endpoint | str, param: str | None = None) -> bytes:
        """Fetch the raw (possibly gzip-compressed) body of one endpoint.

        The whole body is read before returning, so callers never decode a
        partially received buffer.

        Returns:
            Response body bytes.

        Raises:
            RuntimeError: If client not initialized.
            httpx.HTTPError: If the HTTP request fails.
        """
        if not self._client:
            raise RuntimeError("Client not initialized - use 'async with'")

        response = await self._client.get(build_url(self._config.base_url, endpoint, param))
        response.raise_for_status()

        return response.content

    async def fetch(self, endpoint: Endpoint | str, param: str | None = None) -> DecodedPayload:
        """Fetch one endpoint and decode its body.

        Raises:
            RuntimeError: If client not initialized.
            httpx.HTTPError: If the HTTP request fails.
        """
        return decode_payload(await self.fetch_raw(endpoint, param))
