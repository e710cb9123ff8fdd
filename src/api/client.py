# owns the HTTP connection to the commerce API
from typing import Any, Callable, Dict, Optional

import httpx

from api.errors import ApiError, AuthenticationError, AuthorizationError
from utils.logger import get_logger

_logger = get_logger(__name__)

TokenProvider = Callable[[], Optional[str]]


def unwrap(body: Any) -> Any:
    """
    Normalize a response envelope to its payload.

    The API answers either with the payload itself or with
    {"status": ..., "message": ..., "data": payload}. Only a non-null "data"
    key counts as an envelope.
    """
    if isinstance(body, dict) and body.get("data") is not None:
        return body["data"]
    return body


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        return str(message) if message else None
    if isinstance(body, str) and body.strip():
        return body.strip()
    return None


class ApiClient:
    """
    Thin async wrapper over httpx.AsyncClient.

    Attaches the bearer credential from token_provider to every request,
    maps failures to ApiError and returns the normalized payload.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.token_provider = token_provider
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._http.request(
                method, path, json=json, params=params, headers=headers
            )
        except httpx.HTTPError as exc:
            _logger.warning(f"{method} {path} failed: {exc!r}")
            raise ApiError(None, None) from exc

        body = _decode(response)
        if response.is_error:
            status = response.status_code
            message = _error_message(body)
            _logger.info(f"{method} {path} -> {status} {message or ''}".rstrip())
            if status == 401:
                raise AuthenticationError(status, message)
            if status == 403:
                raise AuthorizationError(status, message)
            raise ApiError(status, message)

        _logger.debug(f"{method} {path} -> {response.status_code}")
        return unwrap(body)

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        await self._http.aclose()
