"""Editor state and its transition function.

Every change to the editor goes through ``reduce(state, event)``, which
returns a new ``EditorState`` (or the same object when the event changes
nothing).  The controller owns the only mutable reference.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TypeVar

from giphyblock.models.block import BlockAlignment, BlockAttributes, TextAlignment
from giphyblock.models.gifs import GifResult

Page = tuple[GifResult, ...]


class Mode(str, Enum):
    KEY_ENTRY = "key_entry"
    SEARCHING = "searching"
    VIEWING = "viewing"


@dataclass(frozen=True)
class SearchState:
    query: str = ""
    current_page_index: int = 0
    # Indexed by page number; None marks a page never fetched
    pages: tuple[Page | None, ...] = ()
    cached_query: str | None = None
    is_fetching: bool = False
    # A query change is waiting out the debounce and has not been searched yet
    query_pending: bool = False
    issued_seq: int = 0
    applied_seq: int = 0

    def page(self, index: int) -> Page | None:
        if 0 <= index < len(self.pages):
            return self.pages[index]
        return None

    def has_page(self, index: int) -> bool:
        return self.cached_query == self.query and self.page(index) is not None

    @property
    def results(self) -> Page:
        return self.page(self.current_page_index) or ()


@dataclass(frozen=True)
class ApiKeyState:
    value: str = ""
    is_dirty: bool = False
    # True until the initial load settles
    is_persisting: bool = True
    is_saved: bool = False
    is_loaded: bool = False
    issued_seq: int = 0
    applied_seq: int = 0


@dataclass(frozen=True)
class EditorState:
    search: SearchState = field(default_factory=SearchState)
    api_key: ApiKeyState = field(default_factory=ApiKeyState)
    attributes: BlockAttributes = field(default_factory=BlockAttributes)
    is_searching: bool = True
    error: str | None = None

    @classmethod
    def initial(cls, attributes: BlockAttributes | None = None) -> EditorState:
        attributes = attributes or BlockAttributes()
        return cls(
            search=SearchState(query=attributes.search),
            attributes=attributes,
            is_searching=attributes.gif is None,
        )

    @property
    def mode(self) -> Mode:
        if not self.api_key.value or self.api_key.is_dirty:
            return Mode.KEY_ENTRY
        if self.is_searching:
            return Mode.SEARCHING
        return Mode.VIEWING


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QueryChanged:
    text: str


@dataclass(frozen=True)
class SearchStarted:
    seq: int
    query: str
    page: int


@dataclass(frozen=True)
class SearchSucceeded:
    seq: int
    query: str
    page: int
    results: Page


@dataclass(frozen=True)
class SearchFailed:
    seq: int
    message: str


@dataclass(frozen=True)
class PageRequested:
    index: int


@dataclass(frozen=True)
class GifSelected:
    gif: GifResult


@dataclass(frozen=True)
class SelectionCleared:
    pass


@dataclass(frozen=True)
class BlockAlignmentChanged:
    value: BlockAlignment | None


@dataclass(frozen=True)
class TextAlignmentChanged:
    value: TextAlignment | None


@dataclass(frozen=True)
class ApiKeyLoaded:
    value: str


@dataclass(frozen=True)
class ApiKeyLoadFailed:
    message: str


@dataclass(frozen=True)
class ApiKeyChanged:
    text: str


@dataclass(frozen=True)
class ApiKeyPersistStarted:
    seq: int


@dataclass(frozen=True)
class ApiKeyPersisted:
    seq: int
    value: str


@dataclass(frozen=True)
class ApiKeyPersistFailed:
    seq: int
    value: str
    message: str


@dataclass(frozen=True)
class SavedNoticeExpired:
    pass


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

E = TypeVar("E")
_Reducer = Callable[[EditorState, E], EditorState]

_REDUCERS: dict[type, _Reducer] = {}


def _on(event_type: type[E]) -> Callable[[_Reducer], _Reducer]:
    def decorator(func: _Reducer) -> _Reducer:
        _REDUCERS[event_type] = func
        return func
    return decorator


def reduce(state: EditorState, event: object) -> EditorState:
    """Apply *event* to *state* and return the resulting state."""
    reducer = _REDUCERS.get(type(event))
    if reducer is None:
        raise TypeError(f"Unknown editor event: {type(event).__name__}")
    return reducer(state, event)


def _with_page(pages: tuple[Page | None, ...], index: int, results: Page) -> tuple[Page | None, ...]:
    if index >= len(pages):
        pages = pages + (None,) * (index + 1 - len(pages))
    return pages[:index] + (results,) + pages[index + 1:]


def _still_fetching(search: SearchState, seq: int) -> bool:
    return search.is_fetching and (search.query_pending or seq < search.issued_seq)


@_on(QueryChanged)
def _query_changed(state: EditorState, event: QueryChanged) -> EditorState:
    return replace(
        state,
        search=replace(
            state.search, query=event.text, current_page_index=0, is_fetching=True, query_pending=True,
        ),
        attributes=state.attributes.model_copy(update={"search": event.text}),
    )


@_on(SearchStarted)
def _search_started(state: EditorState, event: SearchStarted) -> EditorState:
    return replace(
        state,
        search=replace(state.search, issued_seq=event.seq, is_fetching=True, query_pending=False),
    )


@_on(SearchSucceeded)
def _search_succeeded(state: EditorState, event: SearchSucceeded) -> EditorState:
    search = state.search
    if event.seq < search.applied_seq:
        return state
    pages = search.pages if event.query == search.cached_query else ()
    return replace(
        state,
        search=replace(
            search,
            pages=_with_page(pages, event.page, event.results),
            cached_query=event.query,
            applied_seq=event.seq,
            is_fetching=_still_fetching(search, event.seq),
        ),
        error=None,
    )


@_on(SearchFailed)
def _search_failed(state: EditorState, event: SearchFailed) -> EditorState:
    search = state.search
    if event.seq < search.applied_seq:
        return state
    return replace(
        state,
        search=replace(search, is_fetching=_still_fetching(search, event.seq)),
        error=event.message,
    )


@_on(PageRequested)
def _page_requested(state: EditorState, event: PageRequested) -> EditorState:
    if event.index < 0:
        raise ValueError("Page index must be >= 0")
    return replace(state, search=replace(state.search, current_page_index=event.index))


@_on(GifSelected)
def _gif_selected(state: EditorState, event: GifSelected) -> EditorState:
    return replace(
        state,
        attributes=state.attributes.model_copy(update={"gif": event.gif}),
        is_searching=False,
    )


@_on(SelectionCleared)
def _selection_cleared(state: EditorState, event: SelectionCleared) -> EditorState:
    return replace(
        state,
        search=replace(state.search, is_fetching=True),
        is_searching=True,
    )


@_on(BlockAlignmentChanged)
def _block_alignment_changed(state: EditorState, event: BlockAlignmentChanged) -> EditorState:
    return replace(state, attributes=state.attributes.model_copy(update={"block_alignment": event.value}))


@_on(TextAlignmentChanged)
def _text_alignment_changed(state: EditorState, event: TextAlignmentChanged) -> EditorState:
    return replace(state, attributes=state.attributes.model_copy(update={"text_alignment": event.value}))


@_on(ApiKeyLoaded)
def _api_key_loaded(state: EditorState, event: ApiKeyLoaded) -> EditorState:
    key = state.api_key
    # Keystrokes that arrived before the load finished win
    value = key.value if key.is_dirty else event.value
    return replace(
        state,
        api_key=replace(key, value=value, is_persisting=False, is_loaded=True),
    )


@_on(ApiKeyLoadFailed)
def _api_key_load_failed(state: EditorState, event: ApiKeyLoadFailed) -> EditorState:
    return replace(
        state,
        api_key=replace(state.api_key, is_persisting=False, is_loaded=True),
        error=event.message,
    )


@_on(ApiKeyChanged)
def _api_key_changed(state: EditorState, event: ApiKeyChanged) -> EditorState:
    return replace(state, api_key=replace(state.api_key, value=event.text, is_dirty=True))


@_on(ApiKeyPersistStarted)
def _api_key_persist_started(state: EditorState, event: ApiKeyPersistStarted) -> EditorState:
    return replace(state, api_key=replace(state.api_key, issued_seq=event.seq, is_persisting=True))


def _persist_settled(key: ApiKeyState, seq: int, written: str) -> ApiKeyState:
    return replace(
        key,
        # Still dirty if the user kept typing while the write was in flight
        is_dirty=key.value != written,
        is_persisting=seq < key.issued_seq,
        applied_seq=seq,
    )


@_on(ApiKeyPersisted)
def _api_key_persisted(state: EditorState, event: ApiKeyPersisted) -> EditorState:
    key = state.api_key
    if event.seq < key.applied_seq:
        return state
    return replace(
        state,
        api_key=replace(_persist_settled(key, event.seq, event.value), is_saved=True),
        error=None,
    )


@_on(ApiKeyPersistFailed)
def _api_key_persist_failed(state: EditorState, event: ApiKeyPersistFailed) -> EditorState:
    key = state.api_key
    if event.seq < key.applied_seq:
        return state
    return replace(
        state,
        api_key=_persist_settled(key, event.seq, event.value),
        error=event.message,
    )


@_on(SavedNoticeExpired)
def _saved_notice_expired(state: EditorState, event: SavedNoticeExpired) -> EditorState:
    if not state.api_key.is_saved:
        return state
    return replace(state, api_key=replace(state.api_key, is_saved=False))
