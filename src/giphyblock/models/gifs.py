"""Giphy search payloads and the normalized result the editor consumes."""

from __future__ import annotations

from pydantic import BaseModel, Field

from giphyblock.models.base import BlockModel


class GifResult(BlockModel):
    id: str
    preview_url: str
    full_url: str
    title: str = ""
    width: int = 0
    height: int = 0


# --- Raw provider payload (only the fields we read) ---


class GiphyRendition(BaseModel):
    url: str = ""
    width: int = 0
    height: int = 0


class GiphyImage(BaseModel):
    id: str
    title: str = ""
    images: dict[str, GiphyRendition] = Field(default_factory=dict)


class GiphyMeta(BaseModel):
    status: int
    msg: str = ""


class GiphyPagination(BaseModel):
    total_count: int = 0
    count: int = 0
    offset: int = 0


class GiphySearchResponse(BaseModel):
    data: list[GiphyImage] = Field(default_factory=list)
    meta: GiphyMeta
    pagination: GiphyPagination | None = None
