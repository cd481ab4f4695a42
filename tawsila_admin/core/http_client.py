# tawsila_admin/core/http_client.py
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import httpx
import orjson

from tawsila_admin.core.config import settings
from tawsila_admin.core.errors import MessageError, NetworkError, error_from_response

# Set up logging
logger = logging.getLogger(__name__)

# Shared async client (keep-alive, pooled)
_HTTPX_ASYNC_CLIENT: Optional[httpx.AsyncClient] = None

UnauthorizedHook = Callable[[], Union[Awaitable[None], None]]


def get_http_client() -> httpx.AsyncClient:
    """Shared async HTTPX client for all platform API calls"""
    global _HTTPX_ASYNC_CLIENT
    if _HTTPX_ASYNC_CLIENT is None or _HTTPX_ASYNC_CLIENT.is_closed:
        _HTTPX_ASYNC_CLIENT = httpx.AsyncClient(
            timeout=settings.HTTP_TIMEOUT,
            limits=httpx.Limits(
                max_keepalive_connections=settings.HTTP_MAX_KEEPALIVE,
                max_connections=settings.HTTP_MAX_CONNECTIONS,
            ),
        )
    return _HTTPX_ASYNC_CLIENT


async def close_http_client() -> None:
    """Close the shared client on shutdown"""
    global _HTTPX_ASYNC_CLIENT
    if _HTTPX_ASYNC_CLIENT is not None:
        await _HTTPX_ASYNC_CLIENT.aclose()
        _HTTPX_ASYNC_CLIENT = None


def token_preview(token: Optional[str]) -> str:
    """Never log full tokens"""
    if not token:
        return "none"
    return token[:6] + "..." if len(token) > 6 else "***"


class ApiClient:
    """
    Authenticated client for the platform REST API.

    One instance per incoming request: it carries the caller's token and
    locale, and shares the pooled HTTPX client underneath.
    """

    def __init__(
            self,
            token: Optional[str] = None,
            locale: Optional[str] = None,
            base_url: Optional[str] = None,
            http: Optional[httpx.AsyncClient] = None,
            on_unauthorized: Optional[UnauthorizedHook] = None
    ):
        self.token = token
        self.locale = settings.normalize_locale(locale)
        self.base_url = base_url if base_url is not None else settings.API_BASE_URL
        self.http = http
        self.on_unauthorized = on_unauthorized

    def build_headers(self, multipart: bool = False, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Language": self.locale,
            "X-Locale": self.locale,
        }

        # Multipart bodies get their own boundary header from HTTPX
        if not multipart:
            headers["Content-Type"] = "application/json"

        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        if extra:
            headers.update(extra)

        return headers

    async def request(
            self,
            method: str,
            endpoint: str,
            json: Any = None,
            files: Optional[Dict[str, Any]] = None,
            data: Optional[Dict[str, Any]] = None,
            headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Make an API request and return the decoded JSON body.

        Raises ValidationError, MessageError or NetworkError for failed calls.
        """
        url = f"{self.base_url}{endpoint}"
        http = self.http or get_http_client()
        request_headers = self.build_headers(multipart=files is not None, extra=headers)

        logger.debug(f"{method} {url} (token: {token_preview(self.token)}, locale: {self.locale})")

        try:
            response = await http.request(
                method,
                url,
                json=json,
                files=files,
                data=data,
                headers=request_headers,
            )
        except httpx.TransportError as e:
            logger.error(f"Network error calling {method} {endpoint}: {str(e)}")
            raise NetworkError()

        payload = self._decode(response)

        # HTTP 203 means the account must change its password first
        if response.status_code == 203:
            payload["status_code"] = 203

        if response.is_success:
            return payload

        error = error_from_response(response.status_code, payload)
        logger.warning(f"{method} {endpoint} failed with {response.status_code}: {error.message}")

        if response.status_code == 401:
            await self._handle_unauthorized()

        raise error

    def _decode(self, response: httpx.Response) -> Dict[str, Any]:
        if not response.content:
            return {}

        try:
            payload = orjson.loads(response.content)
        except orjson.JSONDecodeError:
            logger.error(f"Invalid JSON from platform API (status {response.status_code})")
            raise MessageError(
                "Invalid response from server. Please try again.",
                status=response.status_code,
            )

        if not isinstance(payload, dict):
            return {"data": payload}
        return payload

    async def _handle_unauthorized(self) -> None:
        if self.on_unauthorized is None:
            return

        result = self.on_unauthorized()
        if inspect.isawaitable(result):
            await result

    async def get(self, endpoint: str, **kwargs) -> Dict[str, Any]:
        return await self.request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, **kwargs) -> Dict[str, Any]:
        return await self.request("POST", endpoint, **kwargs)

    async def put(self, endpoint: str, **kwargs) -> Dict[str, Any]:
        return await self.request("PUT", endpoint, **kwargs)

    async def delete(self, endpoint: str, **kwargs) -> Dict[str, Any]:
        return await self.request("DELETE", endpoint, **kwargs)
