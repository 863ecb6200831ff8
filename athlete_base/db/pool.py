"""Bounded async connection pool shared by the repositories.

The pool is an explicit handle: construct it once, pass it to the
repositories, and close it on shutdown. It opens itself on first use, so
``open()`` is optional for callers that only query.

SQLAlchemy and driver exceptions are translated here into the typed
errors of ``athlete_base.db.errors``; nothing above this module sees them.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from contextlib import suppress
from dataclasses import asdict, dataclass
from typing import Any

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as SQLAlchemyTimeoutError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.sql.base import Executable

from athlete_base.config.settings import Settings, get_settings
from athlete_base.db.errors import DatabaseError, PoolTimeoutError, UniqueViolationError
from athlete_base.db.models import Base

APPLICATION_NAME = "athlete-base"
QUERY_LOG_LIMIT = 100
UNIQUE_VIOLATION_SQLSTATE = "23505"


@dataclass(frozen=True)
class PoolStats:
    is_open: bool
    size: int
    checked_in: int
    checked_out: int
    overflow: int
    max_connections: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _truncate(statement: Any) -> str:
    return " ".join(str(statement).split())[:QUERY_LOG_LIMIT]


def _is_unique_violation(error: IntegrityError) -> bool:
    """Classify an IntegrityError as a unique-key violation.

    PostgreSQL drivers expose the SQLSTATE; sqlite only reports it in text.
    """
    orig = getattr(error, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code == UNIQUE_VIOLATION_SQLSTATE
    message = str(orig).lower()
    return "unique constraint" in message or "duplicate key" in message


def _pool_counter(pool: Any, name: str) -> int:
    counter = getattr(pool, name, None)
    if not callable(counter):
        return 0
    return max(int(counter()), 0)


class ConnectionPool:
    """Explicitly managed handle around an SQLAlchemy ``AsyncEngine``."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._engine: AsyncEngine | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def settings(self) -> Settings:
        return self._settings

    def _engine_options(self) -> dict[str, Any]:
        """Build create_async_engine arguments from settings.

        sqlite (local development and tests) keeps SQLAlchemy's default pool;
        PostgreSQL gets the configured bounds and timeouts. QueuePool has no
        idle eviction and does not pre-open connections: pool_size=min is the
        number of connections kept once opened, and the idle timeout is applied
        as pool_recycle, a maximum connection age checked at checkout.
        """
        settings = self._settings
        options: dict[str, Any] = {
            "echo": False,
            "hide_parameters": True,  # Parameters carry password hashes
            "pool_pre_ping": True,
        }
        if settings.is_sqlite:
            return options

        pool_size = max(settings.database_min_connections, 1)
        connect_args: dict[str, Any] = {
            "timeout": settings.database_connection_timeout_ms / 1000,
            "server_settings": {
                "application_name": APPLICATION_NAME,
                "statement_timeout": str(settings.database_statement_timeout_ms),
            },
        }
        if settings.database_ssl:
            connect_args["ssl"] = "require"

        options.update(
            pool_size=pool_size,
            max_overflow=max(settings.database_max_connections - pool_size, 0),
            pool_timeout=settings.database_connection_timeout_ms / 1000,
            pool_recycle=max(settings.database_idle_timeout_ms // 1000, 1),
            connect_args=connect_args,
        )
        return options

    def _register_hooks(self, engine: AsyncEngine) -> None:
        sync_engine = engine.sync_engine
        event.listen(sync_engine, "handle_error", self._on_error)
        event.listen(sync_engine, "connect", self._on_connect)
        event.listen(sync_engine, "close", self._on_remove)

    @staticmethod
    def _on_error(context: Any) -> None:
        with suppress(Exception):
            logger.error(f"[POOL] Unexpected database error: {type(context.original_exception).__name__}")

    @staticmethod
    def _on_connect(_dbapi_connection: Any, _connection_record: Any) -> None:
        with suppress(Exception):
            logger.debug("[POOL] New database connection established")

    @staticmethod
    def _on_remove(_dbapi_connection: Any, _connection_record: Any) -> None:
        with suppress(Exception):
            logger.debug("[POOL] Database connection removed from pool")

    def open(self) -> AsyncEngine:
        """Create the engine if needed and return it. Idempotent."""
        if self._engine is not None:
            return self._engine

        settings = self._settings
        engine = create_async_engine(settings.sqlalchemy_url, **self._engine_options())
        self._register_hooks(engine)
        self._engine = engine

        logger.info(
            f"[POOL] Database connection pool created: driver={engine.url.drivername}, "
            f"host={engine.url.host}, database={engine.url.database}, "
            f"max_connections={settings.database_max_connections}, min_connections={settings.database_min_connections}, "
            f"idle_timeout={settings.database_idle_timeout_ms}ms, connection_timeout={settings.database_connection_timeout_ms}ms, "
            f"statement_timeout={settings.database_statement_timeout_ms}ms, ssl={settings.database_ssl}"
        )
        return engine

    async def query(self, statement: str | Executable, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Execute a parameterized statement in its own transaction.

        Args:
            statement: SQL text with named binds, or an SQLAlchemy statement
            params: Bind parameters for text statements

        Returns:
            Result rows as dicts (empty for statements that return no rows)

        Raises:
            UniqueViolationError: If a unique constraint rejected the write
            PoolTimeoutError: If no connection was free within the connection timeout
            DatabaseError: For any other database failure
        """
        engine = self.open()
        executable = text(statement) if isinstance(statement, str) else statement
        started = time.perf_counter()

        try:
            async with engine.begin() as conn:
                if params:
                    result = await conn.execute(executable, dict(params))
                else:
                    result = await conn.execute(executable)
                rows = [dict(row._mapping) for row in result] if result.returns_rows else []
        except IntegrityError as e:
            duration_ms = (time.perf_counter() - started) * 1000
            if _is_unique_violation(e):
                logger.warning(f"[DB] Unique constraint violation after {duration_ms:.1f}ms: query={_truncate(executable)}")
                raise UniqueViolationError("Unique constraint violated") from e
            logger.error(f"[DB] Integrity error after {duration_ms:.1f}ms: query={_truncate(executable)}, error={e.orig}")
            raise DatabaseError("Database query failed") from e
        except SQLAlchemyTimeoutError as e:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.error(f"[DB] Timed out acquiring a connection after {duration_ms:.1f}ms: query={_truncate(executable)}")
            raise PoolTimeoutError("Timed out acquiring a database connection") from e
        except (SQLAlchemyError, OSError, TimeoutError) as e:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.error(
                f"[DB] Database query failed after {duration_ms:.1f}ms: query={_truncate(executable)}, "
                f"error_type={type(e).__name__}"
            )
            raise DatabaseError("Database query failed") from e

        duration_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"[DB] Query executed in {duration_ms:.1f}ms, rows={len(rows)}")
        return rows

    async def check_health(self) -> bool:
        """Round-trip ``SELECT 1``. Returns False instead of raising."""
        try:
            rows = await self.query("SELECT 1 AS health")
        except Exception as e:
            logger.error(f"[POOL] Database health check failed: {type(e).__name__}")
            return False

        healthy = len(rows) == 1 and rows[0].get("health") == 1
        if healthy:
            logger.debug("[POOL] Database health check passed")
        else:
            logger.warning("[POOL] Database health check returned unexpected result")
        return healthy

    def stats(self) -> PoolStats:
        max_connections = self._settings.database_max_connections
        if self._engine is None:
            return PoolStats(
                is_open=False,
                size=0,
                checked_in=0,
                checked_out=0,
                overflow=0,
                max_connections=max_connections,
            )

        pool = self._engine.pool
        return PoolStats(
            is_open=True,
            size=_pool_counter(pool, "size"),
            checked_in=_pool_counter(pool, "checkedin"),
            checked_out=_pool_counter(pool, "checkedout"),
            overflow=_pool_counter(pool, "overflow"),
            max_connections=max_connections,
        )

    async def create_schema(self) -> None:
        """Create the players and coaches tables if they are missing."""
        engine = self.open()
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"[DB] Schema creation failed: {type(e).__name__}")
            raise DatabaseError("Schema creation failed") from e
        logger.info("[DB] Database tables verified")

    async def close(self) -> None:
        """Dispose of every pooled connection. Safe to call when closed."""
        if self._engine is None:
            return
        engine, self._engine = self._engine, None
        logger.info("[POOL] Closing database connection pool")
        await engine.dispose()
        logger.info("[POOL] Database connection pool closed")
