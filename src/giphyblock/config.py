"""Site configuration backed by the DB ``config`` table.

Uses pydantic-settings ``BaseSettings`` sub-configs grouped under a top-level
``SiteConfig``.  All config values can be overridden via:

  1. env vars              (per-section prefix, highest priority)
  2. DB ``config`` rows    (site-level overrides)
  3. field defaults         (lowest priority)

Call ``load_config(db)`` at startup to sync the DB overrides into the
in-memory singleton.

The same table also holds plain site options such as the Giphy API key.
Those are read and written with ``get_option`` / ``update_option`` and never
go through the settings sections.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from giphyblock.validators import str_limit  # noqa: F401

# Option holding the Giphy API key shared by every editor of the site.
API_KEY_OPTION = "dm_giphy_block_api_key"

# Route namespace of the API key endpoint.
REST_NAMESPACE = "dmgiphyblock/v1"

# ---------------------------------------------------------------------------
# Single flat store of raw DB values (async -> sync bridge)
# ---------------------------------------------------------------------------
_db_values: dict[str, str] = {}


# ---------------------------------------------------------------------------
# Generic DB settings source
# ---------------------------------------------------------------------------

class DbSource(PydanticBaseSettingsSource):
    """Reads values from ``_db_values`` using a per-class key map."""

    def get_field_value(
        self, field: Any, field_name: str
    ) -> tuple[Any, str, bool]:
        key_map: dict[str, str] = getattr(self.settings_cls, "_DB_KEY_MAP", {})
        db_key = None
        for k, v in key_map.items():
            if v == field_name:
                db_key = k
                break
        if db_key is not None and db_key in _db_values:
            return _db_values[db_key], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        for field_name in self.settings_cls.model_fields:
            val, _, _ = self.get_field_value(None, field_name)
            if val is not None:
                d[field_name] = val
        return d


class _DbSettings(BaseSettings):
    """Base for all sub-configs: wires in DbSource so env > DB > defaults."""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, DbSource(settings_cls))


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class LimitsConfig(_DbSettings):
    model_config = {"env_prefix": "GIPHYBLOCK_LIMIT_"}

    _DB_KEY_MAP: ClassVar[dict[str, str]] = {}  # auto-generated below

    # --- Auth ---
    username_min: int = 1
    username_max: int = 60
    password_min: int = 8
    password_max: int = 128
    display_name_max: int = 250

    # --- Options ---
    api_key_max: int = 128

    # --- Requests ---
    max_request_body: int = 64 * 1024


# Auto-generate the key map: limit_{field} -> field
LimitsConfig._DB_KEY_MAP = {f"limit_{f}": f for f in LimitsConfig.model_fields}


class AuthConfig(_DbSettings):
    model_config = {"env_prefix": "GIPHYBLOCK_AUTH_"}

    _DB_KEY_MAP: ClassVar[dict[str, str]] = {
        "session_ttl_days": "session_ttl_days",
    }

    session_ttl_days: int = 30


class GiphyConfig(_DbSettings):
    model_config = {"env_prefix": "GIPHYBLOCK_GIPHY_"}

    _DB_KEY_MAP: ClassVar[dict[str, str]] = {
        "giphy_search_url": "search_url",
        "giphy_results_limit": "results_limit",
        "giphy_timeout": "timeout",
        "giphy_rating": "rating",
        "giphy_lang": "lang",
    }

    search_url: str = "https://api.giphy.com/v1/gifs/search"
    results_limit: int = 5
    timeout: float = 10.0
    rating: str | None = None  # g, pg, pg-13 or r; provider default when unset
    lang: str | None = None


class EditorConfig(_DbSettings):
    model_config = {"env_prefix": "GIPHYBLOCK_EDITOR_"}

    _DB_KEY_MAP: ClassVar[dict[str, str]] = {
        "editor_search_debounce_ms": "search_debounce_ms",
        "editor_api_key_debounce_ms": "api_key_debounce_ms",
        "editor_saved_notice_ms": "saved_notice_ms",
    }

    search_debounce_ms: int = 500
    api_key_debounce_ms: int = 500
    saved_notice_ms: int = 3000


# ---------------------------------------------------------------------------
# Top-level SiteConfig
# ---------------------------------------------------------------------------

_SECTIONS: dict[str, type[BaseSettings]] = {
    "auth": AuthConfig,
    "limits": LimitsConfig,
    "giphy": GiphyConfig,
    "editor": EditorConfig,
}

# Reverse lookup: DB key -> section name
_KEY_TO_SECTION: dict[str, str] = {}
for _section_name, _cls in _SECTIONS.items():
    for _db_key in getattr(_cls, "_DB_KEY_MAP", {}):
        _KEY_TO_SECTION[_db_key] = _section_name


class SiteConfig(BaseModel):
    auth: AuthConfig = AuthConfig()
    limits: LimitsConfig = LimitsConfig()
    giphy: GiphyConfig = GiphyConfig()
    editor: EditorConfig = EditorConfig()


# Module-level singleton
config = SiteConfig()


# ---------------------------------------------------------------------------
# Reload helpers
# ---------------------------------------------------------------------------

def _reload_section(section_name: str) -> None:
    """Rebuild a single sub-config from DB values + env."""
    new_obj = _SECTIONS[section_name]()
    setattr(config, section_name, new_obj)


def _reload_all() -> None:
    """Rebuild all sub-configs from ``_db_values`` + env."""
    for section_name in _SECTIONS:
        _reload_section(section_name)


# ---------------------------------------------------------------------------
# DB <-> memory sync
# ---------------------------------------------------------------------------

async def load_config(db: AsyncSession) -> None:
    """Load all config overrides from the config table into the in-memory singleton."""
    from giphyblock.db.models import Config

    result = await db.execute(select(Config))
    _db_values.clear()
    for row in result.scalars().all():
        _db_values[row.key] = row.value
    _reload_all()


async def save_config_value(db: AsyncSession, key: str, value: str) -> None:
    """Write a single config value to DB + update in-memory.

    The caller is responsible for calling ``await db.commit()``.
    """
    from giphyblock.db.models import Config

    result = await db.execute(select(Config).where(Config.key == key))
    row = result.scalar_one_or_none()
    if row:
        row.value = value
    else:
        db.add(Config(key=key, value=value))

    _db_values[key] = value

    section = _KEY_TO_SECTION.get(key)
    if section:
        _reload_section(section)


# ---------------------------------------------------------------------------
# Plain site options
# ---------------------------------------------------------------------------

async def get_option(db: AsyncSession, name: str, default: str = "") -> str:
    """Return the stored value of option *name*, or *default* when unset."""
    from giphyblock.db.models import Config

    result = await db.execute(select(Config.value).where(Config.key == name))
    value = result.scalar_one_or_none()
    return default if value is None else value


async def update_option(db: AsyncSession, name: str, value: str) -> str:
    """Store *value* under option *name* and return it.

    The caller is responsible for calling ``await db.commit()``.
    """
    await save_config_value(db, name, value)
    return value
