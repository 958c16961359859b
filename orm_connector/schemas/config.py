from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Dialects the connector knows how to validate and build options for
SUPPORTED_DIALECTS = ("mysql", "postgres", "mariadb", "mssql", "db2", "oracle", "snowflake")


class _ConfigModel(BaseModel):
    """Base for config schemas; accepts both snake_case and camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class PoolConfig(_ConfigModel):
    """Pool tuning; timeouts are in milliseconds."""
    # pool_size=0 disables the pool limit in SQLAlchemy
    max: Optional[int] = Field(None, ge=1)
    min: Optional[int] = Field(None, ge=0)
    idle: Optional[int] = Field(None, ge=0)
    acquire: Optional[int] = Field(None, ge=0)


class MSSQLOptions(_ConfigModel):
    """Encryption flags for SQL Server connections."""
    encrypt: Optional[bool] = None
    trust_server_certificate: Optional[bool] = None


class MSSQLDialectOptions(_ConfigModel):
    """MSSQL only - wraps the nested ``options`` block."""
    options: Optional[MSSQLOptions] = None


class OracleDialectOptions(_ConfigModel):
    """Oracle only - connect string (e.g. ``host:1521/service``)."""
    connect_string: Optional[str] = None


class DBConfig(_ConfigModel):
    """
    Connection configuration for a single database.

    Required-ness depends on the dialect, so every field is optional here and
    ``DatabaseConnector`` decides what is missing.
    """
    db_dialect: Optional[str] = None
    db_host: Optional[str] = None
    db_port: Optional[int] = None
    db_name: Optional[str] = None
    db_user: Optional[str] = None
    db_password: Optional[str] = None
    db_logging: Optional[bool] = None
    pool: Optional[PoolConfig] = None
    snowflake_account: Optional[str] = None  # Snowflake only - account name
    snowflake_warehouse: Optional[str] = None  # Snowflake only - warehouse name
    snowflake_schema: Optional[str] = None  # Snowflake only - schema name
    mssql_dialect_options: Optional[MSSQLDialectOptions] = None
    oracle_dialect_options: Optional[OracleDialectOptions] = None


class ConnectorOptions(_ConfigModel):
    """Construction argument for ``ORMConnector``."""
    db_config: DBConfig
    models_path: Union[str, Path] = Field(...)
