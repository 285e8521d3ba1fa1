from __future__ import annotations

from typing import Literal

from giphyblock.models.base import BlockModel
from giphyblock.models.gifs import GifResult

BlockAlignment = Literal["left", "center", "right", "wide", "full"]
TextAlignment = Literal["left", "center", "right"]


class BlockAttributes(BlockModel):
    """Attributes the hosting document stores for one Giphy block."""

    search: str = ""
    gif: GifResult | None = None
    block_alignment: BlockAlignment | None = None
    text_alignment: TextAlignment | None = None
