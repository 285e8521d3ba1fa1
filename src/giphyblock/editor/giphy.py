"""Async client for the Giphy search endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from giphyblock.config import config
from giphyblock.editor.errors import GiphyError
from giphyblock.models.gifs import GifResult, GiphyImage, GiphySearchResponse

log = logging.getLogger(__name__)

# Rendition keys in order of preference
_PREVIEW_RENDITIONS = ("fixed_width", "fixed_width_downsampled", "preview_gif", "downsized")
_FULL_RENDITIONS = ("original", "downsized_large", "downsized")


def search_params(
    query: str,
    api_key: str,
    offset: int,
    limit: int,
    *,
    rating: str | None = None,
    lang: str | None = None,
) -> dict[str, str | int]:
    params: dict[str, str | int] = {
        "q": query,
        "limit": limit,
        "api_key": api_key,
        "offset": offset,
    }
    if rating:
        params["rating"] = rating
    if lang:
        params["lang"] = lang
    return params


def normalize(item: GiphyImage) -> GifResult | None:
    """Pick preview and full-size renditions; None if the item has neither."""
    preview = next((item.images[k] for k in _PREVIEW_RENDITIONS if k in item.images and item.images[k].url), None)
    full = next((item.images[k] for k in _FULL_RENDITIONS if k in item.images and item.images[k].url), None)
    if preview is None and full is None:
        return None
    preview = preview or full
    full = full or preview
    return GifResult(
        id=item.id,
        preview_url=preview.url,
        full_url=full.url,
        title=item.title,
        width=full.width,
        height=full.height,
    )


class GiphyClient:
    """Searches Giphy one page at a time.

    The offset sent to the provider is the zero-based page index.
    """

    def __init__(
        self,
        *,
        search_url: str | None = None,
        limit: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        cfg = config.giphy
        self.search_url = search_url or cfg.search_url
        self.limit = limit or cfg.results_limit
        self._rating = cfg.rating
        self._lang = cfg.lang
        self._client = httpx.AsyncClient(
            timeout=timeout if timeout is not None else cfg.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> GiphyClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def search(self, query: str, api_key: str, *, offset: int = 0) -> list[GifResult]:
        params = search_params(
            query, api_key, offset, self.limit, rating=self._rating, lang=self._lang
        )
        try:
            resp = await self._client.get(self.search_url, params=params)
        except httpx.HTTPError as e:
            log.warning("Giphy request failed: %s", e)
            raise GiphyError(0, str(e) or type(e).__name__) from e

        if resp.status_code != 200:
            raise GiphyError(resp.status_code, _error_message(resp))

        try:
            payload = GiphySearchResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise GiphyError(resp.status_code, "Malformed response from Giphy.") from e

        if payload.meta.status != 200:
            raise GiphyError(payload.meta.status, payload.meta.msg or "Giphy returned an error status.")

        results = [r for r in (normalize(item) for item in payload.data) if r is not None]
        log.debug("Giphy search %r offset=%d -> %d result(s)", query, offset, len(results))
        return results


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase or "Request failed."
    if isinstance(body, dict):
        meta = body.get("meta")
        if isinstance(meta, dict) and meta.get("msg"):
            return str(meta["msg"])
        if body.get("message"):
            return str(body["message"])
    return resp.reason_phrase or "Request failed."
