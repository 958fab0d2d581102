from __future__ import annotations

import logging
from urllib.parse import urlparse, urlunparse, parse_qsl, urlencode

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine
from sqlalchemy.pool import NullPool

from backend.settings import get_settings

logger = logging.getLogger(__name__)


def _normalize_database_url(database_url: str) -> str:
    url = str(database_url or "").strip()
    if not url:
        return url
    if url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + url[len("sqlite://") :]
    if url.startswith("postgres://"):
        url = "postgresql+asyncpg://" + url[len("postgres://") :]
    elif url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url[len("postgresql://") :]
    elif url.startswith("postgresql+psycopg2://"):
        url = "postgresql+asyncpg://" + url[len("postgresql+psycopg2://") :]
    if not url.startswith("postgresql+asyncpg://"):
        return url
    parsed = urlparse(url)
    clean = []
    ssl_requested = False
    for key, value in parse_qsl(parsed.query, keep_blank_values=True):
        # asyncpg rejects libpq-only options
        if key == "sslmode":
            ssl_requested = value != "disable"
            continue
        if key in {"channel_binding", "ssl"}:
            continue
        clean.append((key, value))
    if ssl_requested:
        clean.append(("ssl", "true"))
    return urlunparse(parsed._replace(query=urlencode(clean)))


def is_sqlite_url(database_url: str) -> bool:
    return _normalize_database_url(database_url).startswith("sqlite")


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        settings = get_settings()
        db_url = _normalize_database_url(settings.database_url)
        if is_sqlite_url(db_url):
            _engine = create_async_engine(db_url, poolclass=NullPool, future=True)
        else:
            _engine = create_async_engine(
                db_url, pool_pre_ping=True, future=True, pool_size=10, max_overflow=10
            )
        logger.info("Database engine created for %s", urlparse(db_url).scheme)
    return _engine


def get_sessionmaker() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
