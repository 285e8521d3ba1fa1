"""Search controller: debounced Giphy search and API key persistence for one block."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from giphyblock.config import config
from giphyblock.editor.errors import GiphyError, KeyExchangeError
from giphyblock.editor.giphy import GiphyClient
from giphyblock.editor.keys import KeyExchangeClient
from giphyblock.editor.state import (
    ApiKeyChanged,
    ApiKeyLoaded,
    ApiKeyLoadFailed,
    ApiKeyPersisted,
    ApiKeyPersistFailed,
    ApiKeyPersistStarted,
    BlockAlignmentChanged,
    EditorState,
    GifSelected,
    Mode,
    PageRequested,
    QueryChanged,
    SavedNoticeExpired,
    SearchFailed,
    SearchStarted,
    SearchSucceeded,
    SelectionCleared,
    TextAlignmentChanged,
    reduce,
)
from giphyblock.editor.timers import Debouncer
from giphyblock.models.block import BlockAlignment, BlockAttributes, TextAlignment
from giphyblock.models.gifs import GifResult

log = logging.getLogger(__name__)

# Called with (previous, current) after every state change
StateListener = Callable[[EditorState, EditorState], None]


class SearchController:
    """Mediates between editor input, Giphy, and the API key endpoint.

    Usage::

        async with SearchController(keys, giphy, attributes=attrs) as ctl:

            @ctl.on_change
            def render(old, new):
                ...

            ctl.on_query_changed("cats")

    Entering the context loads the API key.  Leaving it cancels the pending
    timers and any debounced action still running; responses that arrive
    afterwards are dropped, so the state never changes after close.
    """

    def __init__(
        self,
        keys: KeyExchangeClient,
        giphy: GiphyClient,
        *,
        attributes: BlockAttributes | None = None,
        search_delay: float | None = None,
        api_key_delay: float | None = None,
        saved_notice_delay: float | None = None,
    ) -> None:
        editor = config.editor
        self._keys = keys
        self._giphy = giphy
        self._state = EditorState.initial(attributes)
        self._listeners: list[StateListener] = []
        self._seq = 0
        self._persist_seq = 0
        self._persist_lock = asyncio.Lock()
        self._closed = False

        self._search_timer = Debouncer(
            search_delay if search_delay is not None else editor.search_debounce_ms / 1000,
            self.execute_search,
            name="search",
        )
        self._persist_timer = Debouncer(
            api_key_delay if api_key_delay is not None else editor.api_key_debounce_ms / 1000,
            self.persist_api_key,
            name="api-key",
        )
        self._saved_timer = Debouncer(
            saved_notice_delay if saved_notice_delay is not None else editor.saved_notice_ms / 1000,
            self._expire_saved_notice,
            name="saved-notice",
        )

    async def __aenter__(self) -> SearchController:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # --- State ---

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def mode(self) -> Mode:
        return self._state.mode

    @property
    def closed(self) -> bool:
        return self._closed

    def on_change(self, listener: StateListener) -> StateListener:
        """Register a listener; usable as a decorator."""
        self._listeners.append(listener)
        return listener

    def dispatch(self, event: object) -> EditorState:
        if self._closed:
            return self._state
        previous = self._state
        current = reduce(previous, event)
        if current is previous:
            return current
        self._state = current
        for listener in list(self._listeners):
            try:
                listener(previous, current)
            except Exception:
                log.exception("Error in state listener for %s", type(event).__name__)
        return current

    # --- Lifecycle ---

    async def start(self) -> None:
        await self.load_api_key()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await asyncio.gather(
            self._search_timer.close(),
            self._persist_timer.close(),
            self._saved_timer.close(),
        )

    # --- Search ---

    def on_query_changed(self, text: str) -> None:
        if self._closed:
            return
        self.dispatch(QueryChanged(text))
        self._search_timer.schedule()

    async def execute_search(self) -> None:
        if self._closed:
            return
        search = self._state.search
        query, page = search.query, search.current_page_index
        self._seq += 1
        seq = self._seq
        self.dispatch(SearchStarted(seq=seq, query=query, page=page))
        try:
            results = await self._giphy.search(query, self._state.api_key.value, offset=page)
        except GiphyError as e:
            log.warning("Search for %r (page %d) failed: %s", query, page, e)
            self.dispatch(SearchFailed(seq=seq, message=e.message))
            return
        self.dispatch(SearchSucceeded(seq=seq, query=query, page=page, results=tuple(results)))

    async def go_to_page(self, index: int) -> None:
        """Show page *index*, fetching it only if it is not cached for the current query."""
        if self._closed:
            return
        self.dispatch(PageRequested(index))
        if not self._state.search.has_page(index):
            await self.execute_search()

    async def next_page(self) -> None:
        await self.go_to_page(self._state.search.current_page_index + 1)

    async def previous_page(self) -> None:
        current = self._state.search.current_page_index
        if current > 0:
            await self.go_to_page(current - 1)

    # --- Selection ---

    def select_gif(self, gif: GifResult) -> None:
        self.dispatch(GifSelected(gif))

    async def clear_selection(self) -> None:
        if self._closed:
            return
        self.dispatch(SelectionCleared())
        await self.execute_search()

    def set_block_alignment(self, value: BlockAlignment | None) -> None:
        self.dispatch(BlockAlignmentChanged(value))

    def set_text_alignment(self, value: TextAlignment | None) -> None:
        self.dispatch(TextAlignmentChanged(value))

    # --- API key ---

    async def load_api_key(self) -> None:
        try:
            value = await self._keys.fetch_api_key()
        except KeyExchangeError as e:
            log.warning("Could not load the Giphy API key: %s", e)
            self.dispatch(ApiKeyLoadFailed(e.message))
            return
        self.dispatch(ApiKeyLoaded(value))

    def on_api_key_changed(self, text: str) -> None:
        if self._closed:
            return
        self.dispatch(ApiKeyChanged(text))
        self._persist_timer.schedule()

    async def persist_api_key(self) -> None:
        """Write the current key.

        Writes go out one at a time in call order, each sending the value
        current when its turn comes.
        """
        if self._closed:
            return
        self._persist_seq += 1
        seq = self._persist_seq
        self.dispatch(ApiKeyPersistStarted(seq))
        async with self._persist_lock:
            if self._closed:
                return
            value = self._state.api_key.value
            try:
                stored = await self._keys.save_api_key(value)
            except KeyExchangeError as e:
                log.warning("Could not save the Giphy API key: %s", e)
                self.dispatch(ApiKeyPersistFailed(seq=seq, value=value, message=e.message))
                return
        self.dispatch(ApiKeyPersisted(seq=seq, value=stored))
        self._saved_timer.schedule()

    async def _expire_saved_notice(self) -> None:
        self.dispatch(SavedNoticeExpired())
