"""Headless editor core: search controller, state transitions, HTTP clients."""

from giphyblock.editor.controller import SearchController
from giphyblock.editor.errors import GiphyError, KeyExchangeError
from giphyblock.editor.giphy import GiphyClient
from giphyblock.editor.keys import KeyExchangeClient
from giphyblock.editor.state import EditorState, Mode, reduce

__all__ = [
    "EditorState",
    "GiphyClient",
    "GiphyError",
    "KeyExchangeClient",
    "KeyExchangeError",
    "Mode",
    "SearchController",
    "reduce",
]
