"""
SQLAlchemy connector package.

Validates per-dialect connection configuration, loads model definition files
from a directory, wires their associations and manages the connection
lifecycle:

- connector.py: ORMConnector, the facade most callers use
- db/: connection handle, database connector and model registrar
- schemas/: pydantic models for the connection configuration
- core/: environment settings, logging setup and error types
"""

from orm_connector.connector import ORMConnector
from orm_connector.core.errors import (
    ConfigurationError,
    ConnectorError,
    DatabaseConnectionError,
    ModelLoadError,
    ModelLookupError,
)
from orm_connector.core.logging import configure_logging
from orm_connector.db.connection import DatabaseConnection
from orm_connector.db.database import DatabaseConnector
from orm_connector.db.model_registrar import ModelRegistrar
from orm_connector.schemas.config import ConnectorOptions, DBConfig, PoolConfig

__version__ = "0.1.0"

__all__ = [
    "ORMConnector",
    "configure_logging",
    "DatabaseConnector",
    "DatabaseConnection",
    "ModelRegistrar",
    "ConnectorOptions",
    "DBConfig",
    "PoolConfig",
    "ConnectorError",
    "ConfigurationError",
    "ModelLoadError",
    "ModelLookupError",
    "DatabaseConnectionError",
]
