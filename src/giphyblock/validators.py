"""Validator factories for use with ``Annotated[..., AfterValidator(...)]``.

These check values against the runtime ``limits`` singleton so that
limits adjusted through the ``config`` table take effect without a restart.
"""

from __future__ import annotations


def _limits():
    """Lazy import to avoid circular dependency at module level."""
    from giphyblock.config import config
    return config.limits


def str_limit(*, min_attr: str | None = None, max_attr: str | None = None):
    """Returns a callable for AfterValidator that checks string length against limits.<attr>."""
    def _validate(v: str | None) -> str | None:
        if v is None:
            return v
        lim = _limits()
        if min_attr and len(v) < getattr(lim, min_attr):
            raise ValueError(f"String should have at least {getattr(lim, min_attr)} character(s)")
        if max_attr and len(v) > getattr(lim, max_attr):
            raise ValueError(f"String should have at most {getattr(lim, max_attr)} character(s)")
        return v
    return _validate


def check_api_key(value: str) -> str:
    """Raise ValueError if *value* cannot be stored as the Giphy API key."""
    lim = _limits()
    if len(value) > lim.api_key_max:
        raise ValueError(f"API key should have at most {lim.api_key_max} character(s)")
    return value
