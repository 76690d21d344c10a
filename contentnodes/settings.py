"""Environment-driven settings for the content node data-access layer.

Settings are read once from environment variables and carried as a frozen
value. Invalid optional values fall back to defaults so a misconfigured batch
size never prevents the layer from starting.

Examples
--------
Build a session factory from the process environment:

>>> settings = load_settings()
>>> session_factory = build_session_factory(settings)
"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ

import sqlalchemy as sa
from sqlalchemy import exc as sa_exc

from contentnodes.logging import (
    configure_logging,
    get_logger,
    log_warning,
    normalise_level,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = get_logger(__name__)

DATABASE_URL_ENV = "CONTENTNODES_DATABASE_URL"
LOG_LEVEL_ENV = "CONTENTNODES_LOG_LEVEL"
STREAM_BATCH_SIZE_ENV = "CONTENTNODES_STREAM_BATCH_SIZE"

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///contentnodes.db"
DEFAULT_STREAM_BATCH_SIZE = 500


def _parse_optional_positive_int(value: str | None) -> int | None:
    """Parse a positive integer environment value.

    Invalid values return ``None`` so callers can fall back to defaults.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    try:
        parsed = int(text)
    except ValueError:
        return None
    if parsed <= 0:
        return None
    return parsed


@dc.dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings for content node queries.

    Attributes
    ----------
    database_url : str
        SQLAlchemy async database URL.
    log_level : str
        Normalised femtologging level name.
    stream_batch_size : int
        Number of rows fetched per round trip when streaming results.
    """

    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"
    stream_batch_size: int = DEFAULT_STREAM_BATCH_SIZE


def load_settings(environ: cabc.Mapping[str, str] | None = None) -> Settings:
    """Load settings from ``environ`` (the process environment by default).

    Parameters
    ----------
    environ : collections.abc.Mapping[str, str] | None, optional
        Environment mapping to read from.

    Returns
    -------
    Settings
        Parsed settings.

    Raises
    ------
    ValueError
        If the configured database URL cannot be parsed.
    """
    env = os.environ if environ is None else environ

    database_url = env.get(DATABASE_URL_ENV, "").strip() or DEFAULT_DATABASE_URL
    try:
        sa.make_url(database_url)
    except sa_exc.ArgumentError as exc:
        msg = f"Invalid {DATABASE_URL_ENV}: {database_url!r}"
        raise ValueError(msg) from exc

    log_level, _ = normalise_level(env.get(LOG_LEVEL_ENV))

    raw_batch_size = env.get(STREAM_BATCH_SIZE_ENV)
    batch_size = _parse_optional_positive_int(raw_batch_size)
    if batch_size is None:
        if raw_batch_size is not None:
            log_warning(
                logger,
                "Ignoring invalid %s=%r; using %d.",
                STREAM_BATCH_SIZE_ENV,
                raw_batch_size,
                DEFAULT_STREAM_BATCH_SIZE,
            )
        batch_size = DEFAULT_STREAM_BATCH_SIZE

    return Settings(
        database_url=database_url,
        log_level=str(log_level),
        stream_batch_size=batch_size,
    )


def apply_logging(settings: Settings, *, force: bool = False) -> str:
    """Configure femtologging from ``settings`` and return the level used."""
    level, _ = configure_logging(settings.log_level, force=force)
    return level


def build_session_factory(settings: Settings) -> async_sessionmaker[AsyncSession]:
    """Return an async session factory bound to the configured database."""
    from sqlalchemy.ext.asyncio import (
        AsyncSession,
        async_sessionmaker,
        create_async_engine,
    )

    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


__all__ = (
    "DATABASE_URL_ENV",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_STREAM_BATCH_SIZE",
    "LOG_LEVEL_ENV",
    "STREAM_BATCH_SIZE_ENV",
    "Settings",
    "apply_logging",
    "build_session_factory",
    "load_settings",
)
