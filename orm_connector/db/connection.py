"""
Connection handle.

A ``DatabaseConnection`` bundles everything that is bound to one database:

- the SQLAlchemy engine (created lazily, no network I/O until first use)
- a declarative ``Base`` private to this connection, so its MetaData and
  class registry never collide with another connector's models
- a session factory bound to the engine

Model definition files receive this object and declare their classes on
``connection.Base``.
"""

import asyncio
import logging
from typing import Any, Optional

from sqlalchemy import Engine, inspect, literal_column, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from orm_connector.core.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)


def _make_base() -> type:
    """Create a fresh declarative base with its own registry."""

    class Base(DeclarativeBase):
        pass

    return Base


class DatabaseConnection:
    """Live handle to a database, wrapping a SQLAlchemy engine."""

    def __init__(self, engine: Engine, dialect: Optional[str] = None, options: Optional[dict] = None):
        self.engine = engine
        self.dialect = dialect or engine.dialect.name
        self.options = options or {}
        self.Base = _make_base()
        self.metadata = self.Base.metadata
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def __repr__(self):
        return f"<DatabaseConnection(dialect={self.dialect}, url={self.engine.url!r})>"

    def session(self) -> Session:
        """Return a new ORM session bound to this connection."""
        return self.SessionLocal()

    async def _run(self, func, *args) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def _ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(select(literal_column("1")))

    async def authenticate(self) -> None:
        """
        Verify the database is reachable and the credentials are accepted.

        Raises:
            DatabaseConnectionError: If the driver rejects the connection
        """
        try:
            await self._run(self._ping)
        except SQLAlchemyError as e:
            raise DatabaseConnectionError(
                f"Unable to connect to the database: {e}", dialect=self.dialect
            ) from e

    async def close(self) -> None:
        """Dispose of the engine's connection pool."""
        try:
            await self._run(self.engine.dispose)
        except SQLAlchemyError as e:
            raise DatabaseConnectionError(
                f"Error closing the database connection: {e}", dialect=self.dialect
            ) from e

    def _create_tables(self) -> list:
        existing_tables = set(inspect(self.engine).get_table_names())
        missing = [table for name, table in self.metadata.tables.items() if name not in existing_tables]
        if not missing:
            logger.info("Database tables already exist, skipping initialization")
            return []
        logger.info(f"Creating {len(missing)} database table(s)")
        self.metadata.create_all(bind=self.engine, tables=missing)
        return [table.name for table in missing]

    async def create_tables(self) -> list:
        """
        Create tables for the registered models that don't exist yet.

        Returns:
            list: Names of the tables that were created
        """
        try:
            return await self._run(self._create_tables)
        except SQLAlchemyError as e:
            raise DatabaseConnectionError(
                f"Error creating database tables: {e}", dialect=self.dialect
            ) from e
