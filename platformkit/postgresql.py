"""A pooled PostgreSQL connection with a start/stop lifecycle."""

from __future__ import annotations

from collections.abc import Mapping
from contextlib import ExitStack
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from platformkit.errors import AppError, ErrorList
from platformkit.logger import Logger

ERR_CONFIG_IS_REQUIRED = AppError("SYS", "PostgreSQL config is required")
ERR_LOGGER_IS_REQUIRED = AppError("SYS", "Logger is required")


@dataclass
class PostgresConfig:
    url: str = ""
    max_conn_idle_time: timedelta = timedelta(0)
    max_conns: int = 0
    min_conns: int = 0


def _normalise_url(url: str) -> str:
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


class PostgreSQL:
    """Owns a connection pool opened by :meth:`start` and closed by :meth:`stop`."""

    def __init__(self, config: PostgresConfig, logger: Logger) -> None:
        self._config = config
        self._logger = logger
        self._engine: Engine | None = None

    def start(self, ctx: Mapping[str, Any] | None) -> None:
        """Open the pool and check it; errors are logged and re-raised."""
        try:
            engine = self._create_engine()
        except Exception as exc:
            self._logger.log_error(ctx, exc)
            raise

        try:
            self._ping(engine)
        except Exception as exc:
            engine.dispose()
            self._logger.log_error(ctx, exc)
            raise

        self._engine = engine
        self._logger.log_info(ctx, "PostgreSQL connection is initialized")

    def stop(self, ctx: Mapping[str, Any] | None) -> None:
        if self._engine is None:
            raise RuntimeError("PostgreSQL connection is not started")
        self._engine.dispose()
        self._logger.log_info(ctx, "PostgreSQL connection is closed")

    def conn_pool(self) -> Engine | None:
        """Return the pool, or None before :meth:`start`."""
        return self._engine

    def _create_engine(self) -> Engine:
        options: dict[str, Any] = {"poolclass": QueuePool}
        if self._config.max_conns > 0:
            options["pool_size"] = self._config.max_conns
            options["max_overflow"] = 0
        idle_seconds = self._config.max_conn_idle_time.total_seconds()
        if idle_seconds > 0:
            options["pool_recycle"] = max(1, int(idle_seconds))
        return create_engine(_normalise_url(self._config.url), **options)

    def _ping(self, engine: Engine) -> None:
        # Open the minimum number of connections up front so they stay pooled.
        warm = max(1, self._config.min_conns)
        if self._config.max_conns > 0:
            warm = min(warm, self._config.max_conns)
        with ExitStack() as stack:
            connections = [stack.enter_context(engine.connect()) for _ in range(warm)]
            connections[0].execute(text("SELECT 1"))


class PostgreSQLBuilder:
    """Collects the required parts and builds a :class:`PostgreSQL`."""

    def __init__(self) -> None:
        self._config: PostgresConfig | None = None
        self._logger: Logger | None = None

    def config(self, config: PostgresConfig | None) -> PostgreSQLBuilder:
        self._config = config
        return self

    def logger(self, logger: Logger | None) -> PostgreSQLBuilder:
        self._logger = logger
        return self

    def build(self) -> PostgreSQL:
        """Build the component; raise ErrorList naming every missing part."""
        errors = ErrorList()
        if self._config is None:
            errors.add_error(ERR_CONFIG_IS_REQUIRED)
        if self._logger is None:
            errors.add_error(ERR_LOGGER_IS_REQUIRED)
        if errors.is_present():
            raise errors
        return PostgreSQL(self._config, self._logger)