"""Async client for the site's API key endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from giphyblock.config import REST_NAMESPACE
from giphyblock.editor.errors import KeyExchangeError

log = logging.getLogger(__name__)

API_KEY_PATH = f"/{REST_NAMESPACE}/api-key"


class KeyExchangeClient:
    """Reads and writes the shared Giphy API key on behalf of one editor."""

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> KeyExchangeClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_api_key(self) -> str:
        resp = await self._request("GET", API_KEY_PATH)
        return _string_body(resp)

    async def save_api_key(self, api_key: str) -> str:
        resp = await self._request(
            "POST",
            API_KEY_PATH,
            content=api_key.encode("utf-8"),
            headers={"Content-Type": "text/plain; charset=utf-8"},
        )
        return _string_body(resp)

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log.warning("API key request %s %s failed: %s", method, path, e)
            raise KeyExchangeError(0, "NETWORK_ERROR", str(e) or type(e).__name__) from e
        if resp.status_code >= 400:
            code, message = _parse_error(resp)
            raise KeyExchangeError(resp.status_code, code, message)
        return resp


def _string_body(resp: httpx.Response) -> str:
    try:
        value = resp.json()
    except ValueError as e:
        raise KeyExchangeError(resp.status_code, "MALFORMED_RESPONSE", "Expected a JSON string.") from e
    if not isinstance(value, str):
        raise KeyExchangeError(resp.status_code, "MALFORMED_RESPONSE", "Expected a JSON string.")
    return value


def _parse_error(resp: httpx.Response) -> tuple[str, str]:
    """Extract (code, message) from either envelope shape the server emits."""
    try:
        body = resp.json()
    except ValueError:
        return "HTTP_ERROR", resp.reason_phrase or "Request failed."
    if isinstance(body, dict):
        body = body.get("detail", body)
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        err = body["error"]
        return str(err.get("code", "HTTP_ERROR")), str(err.get("message", ""))
    return "HTTP_ERROR", resp.reason_phrase or "Request failed."
