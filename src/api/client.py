# thin httpx wrapper: base url, bearer token, uniform error translation
from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from api.errors import ApiError, AuthExpired, NetworkError, ResponseShapeError
from db.storage import SessionStorage
from utils.logger import get_logger

_logger = get_logger(__name__)


def _error_message(response: httpx.Response) -> Optional[str]:
    """`message` field of a JSON error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message:
            return message
    return None


class HttpClient:
    """
    Every request goes through `request`.

    The token is read from the shared storage at send time, so once any call
    has seen a 401 no later call goes out with the revoked token.
    """

    def __init__(
        self,
        base_url: str,
        storage: SessionStorage,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.storage = storage
        self.on_auth_expired: Optional[Callable[[], Awaitable[None]]] = None
        self._client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout, transport=transport
        )

    @property
    def base_url(self) -> str:
        return str(self._client.base_url).rstrip("/")

    @base_url.setter
    def base_url(self, url: str) -> None:
        self._client.base_url = url
        _logger.info(f"API base url set to {self.base_url}")

    @property
    def secure(self) -> bool:
        return self._client.base_url.scheme == "https"

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        headers = {"Content-Type": "application/json"}
        token = self.storage.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        cookie = self.storage.cookie_header()
        if cookie:
            headers["Cookie"] = cookie
        if params:
            params = {k: v for k, v in params.items() if v not in (None, "")}

        _logger.debug(f"{method} {path} {params or ''}")
        try:
            response = await self._client.request(
                method, path, params=params or None, json=json, headers=headers
            )
        except httpx.RequestError as e:
            _logger.warning(f"{method} {path} failed: {e!r}")
            raise NetworkError(
                f"Could not reach the backend at {self.base_url}. Is it running?"
            ) from e

        if response.status_code == 401:
            await self._expire(token)
            raise AuthExpired(_error_message(response))

        if response.is_error:
            message = _error_message(response) or (
                f"API Error: {response.reason_phrase}"
            )
            _logger.warning(f"{method} {path} -> {response.status_code}: {message}")
            raise ApiError(message, response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ResponseShapeError(
                f"Expected JSON from {path}", response.status_code
            ) from e

    async def _expire(self, used_token: Optional[str]) -> None:
        # only the first 401 for a given token clears it; the in-memory copy
        # goes before the first await so concurrent 401s see it gone
        if not used_token or self.storage.token != used_token:
            return
        self.storage.forget()
        _logger.warning("Session token rejected by the backend, clearing it.")
        await self.storage.clear_session()
        if self.on_auth_expired is not None:
            await self.on_auth_expired()

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
