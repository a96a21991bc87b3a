# rollover/core/http.py
from typing import Any, Optional

import httpx
from tenacity import retry, stop_after_attempt, wait_fixed, retry_if_exception_type

from rollover.core.config import settings
from rollover.core.errors import ApiError
from rollover.core.logging import log


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return {"message": response.text}


class CoreHTTP:
    """Thin async transport for the school REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.CORE_API_BASE).rstrip("/")
        self._token = token or ""
        # httpx wants either one default or all four parts; connect gets its own budget
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(settings.HTTP_TIMEOUT, connect=settings.HTTP_CONNECT_TIMEOUT),
            transport=transport,
        )

    async def __aenter__(self) -> "CoreHTTP":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    def set_token(self, token: Optional[str]) -> None:
        self._token = str(token or "")

    def headers(self) -> dict:
        h = {"Content-Type": "application/json"}
        if self._token:
            bearer = self._token
            h["Authorization"] = bearer if bearer.lower().startswith("bearer ") else f"Bearer {bearer}"
        return h

    @retry(stop=stop_after_attempt(settings.RETRY_ATTEMPTS), wait=wait_fixed(0.4),
           retry=retry_if_exception_type(httpx.TransportError), reraise=True)
    async def _get(self, path: str, params: Optional[dict]) -> httpx.Response:
        return await self._client.get(path, params=params, headers=self.headers())

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        log.info("core_http_request", method="GET", path=path, params=params)
        try:
            response = await self._get(path, params)
        except httpx.TransportError as e:
            log.error("core_http_error", method="GET", path=path, error=str(e), error_type=type(e).__name__)
            raise ApiError(f"Network error: {e}", method="GET", path=path) from e
        return self._handle(response, "GET", path)

    async def request(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        method = method.upper()
        log.info("core_http_request", method=method, path=path)
        try:
            response = await self._client.request(method, path, json=json, headers=self.headers())
        except httpx.TransportError as e:
            log.error("core_http_error", method=method, path=path, error=str(e), error_type=type(e).__name__)
            raise ApiError(f"Network error: {e}", method=method, path=path) from e
        return self._handle(response, method, path)

    async def post(self, path: str, data: dict) -> Any:
        return await self.request("POST", path, data)

    def _handle(self, response: httpx.Response, method: str, path: str) -> Any:
        log.info("core_http_response", method=method, path=path, status_code=response.status_code)
        payload = _decode(response)
        if response.is_success:
            return payload
        raise ApiError.from_response(response.status_code, method, path, payload)
