import textwrap
from pathlib import Path
from typing import Callable, Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from orm_connector.db.connection import DatabaseConnection

# Sample model definitions shipped with the repository
EXAMPLE_MODELS_PATH = Path(__file__).resolve().parent.parent / "examples" / "models"

# In-memory SQLite; StaticPool keeps a single connection across executor threads
TEST_DATABASE_URL = "sqlite://"


def make_sqlite_connection() -> DatabaseConnection:
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return DatabaseConnection(engine, dialect="sqlite")


@pytest.fixture(scope="function")
def connection() -> Generator:
    """
    Create a fresh SQLite-backed connection handle for each test function.

    The handle has its own declarative Base, so models registered in one
    test never leak into another.
    """
    conn = make_sqlite_connection()
    try:
        yield conn
    finally:
        conn.engine.dispose()


@pytest.fixture
def models_path() -> Path:
    """Directory holding the User/Post/Tag example definitions."""
    return EXAMPLE_MODELS_PATH


@pytest.fixture
def write_model(tmp_path: Path) -> Callable[[str, str], Path]:
    """
    Write a model definition file into a temporary models directory.

    Usage:
        def test_something(write_model, tmp_path):
            write_model("user.py", "def define(connection, types): ...")
            ModelRegistrar(connection, tmp_path).register_models()
    """
    def _write(filename: str, source: str) -> Path:
        path = tmp_path / filename
        path.write_text(textwrap.dedent(source))
        return path

    return _write


@pytest.fixture
def mysql_config() -> dict:
    """A complete MySQL configuration."""
    return {
        "db_dialect": "mysql",
        "db_host": "localhost",
        "db_name": "test",
        "db_user": "user",
        "db_password": "pass",
        "db_logging": False,
    }
