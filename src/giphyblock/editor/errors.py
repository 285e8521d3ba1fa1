"""Errors raised by the editor's HTTP clients."""

from __future__ import annotations


class GiphyError(Exception):
    """A Giphy search could not produce results.

    ``status`` is the HTTP status or the payload's ``meta.status``; 0 means the
    request never got a response.
    """

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(f"Giphy error {status}: {message}")


class KeyExchangeError(Exception):
    """The API key endpoint rejected a request or could not be reached."""

    def __init__(self, status: int, code: str, message: str) -> None:
        self.status = status
        self.code = code
        self.message = message
        super().__init__(f"{status} {code}: {message}")
