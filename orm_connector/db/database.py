"""
Database connector.

Validates a ``DBConfig`` for its dialect, turns it into engine options and
creates the ``DatabaseConnection``. Validation runs before the engine is
built, so a bad configuration never reaches the driver.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy import URL, create_engine

from orm_connector.core.config import settings
from orm_connector.core.errors import ConfigurationError
from orm_connector.db.connection import DatabaseConnection
from orm_connector.schemas.config import DBConfig, SUPPORTED_DIALECTS

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3306
DEFAULT_POOL = {
    "max": 5,
    "min": 0,
    "idle": 10000,
    "acquire": 10000,
}


def _missing(config: DBConfig, *fields: str) -> list:
    return [field for field in fields if not getattr(config, field)]


class DatabaseConnector:
    """Builds a connection handle from a validated configuration."""

    def __init__(self, db_config: Union[DBConfig, Mapping[str, Any]], drivers: Optional[Dict[str, str]] = None):
        self.db_config = self._coerce(db_config)
        self.drivers = drivers or settings.DIALECT_DRIVERS
        self._connection: Optional[DatabaseConnection] = None
        self.validate_config()
        self._connection = self.create_connection()

    @staticmethod
    def _coerce(db_config: Union[DBConfig, Mapping[str, Any]]) -> DBConfig:
        if isinstance(db_config, DBConfig):
            return db_config
        try:
            return DBConfig.model_validate(dict(db_config))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid database configuration: {e}") from e

    def validate_config(self) -> None:
        """
        Check the required fields for the configured dialect.

        Raises:
            ConfigurationError: If any required field is missing
        """
        config = self.db_config
        missing = _missing(config, "db_dialect", "db_name", "db_user", "db_password")
        if missing:
            raise ConfigurationError(
                f"Missing required database configuration values: {', '.join(missing)}",
                missing=missing,
            )

        dialect = config.db_dialect
        if dialect not in SUPPORTED_DIALECTS:
            raise ConfigurationError(
                f"Unsupported database dialect: {dialect}. "
                f"Expected one of: {', '.join(SUPPORTED_DIALECTS)}",
                dialect=dialect,
            )

        if dialect == "mssql":
            options = config.mssql_dialect_options.options if config.mssql_dialect_options else None
            missing = [
                f"mssql_dialect_options.options.{flag}"
                for flag in ("encrypt", "trust_server_certificate")
                if options is None or getattr(options, flag) is None
            ]
            if missing:
                raise ConfigurationError(
                    f"Missing required MSSQL dialect options: {', '.join(missing)}",
                    missing=missing,
                    dialect=dialect,
                )
        elif dialect == "oracle":
            options = config.oracle_dialect_options
            if options is None or not options.connect_string:
                raise ConfigurationError(
                    "Missing required Oracle dialect options: oracle_dialect_options.connect_string",
                    missing=["oracle_dialect_options.connect_string"],
                    dialect=dialect,
                )
        elif dialect == "snowflake":
            missing = _missing(config, "snowflake_account", "snowflake_schema", "snowflake_warehouse")
            if missing:
                raise ConfigurationError(
                    f"Missing required Snowflake configuration values: {', '.join(missing)}",
                    missing=missing,
                    dialect=dialect,
                )
        elif not config.db_host:
            raise ConfigurationError(
                "Missing required database host: db_host",
                missing=["db_host"],
                dialect=dialect,
            )

    def construct_config(self) -> Dict[str, Any]:
        """
        Build the connection options for the configured dialect.

        Returns:
            dict: ``host`` (when set), ``port``, ``dialect``, ``logging`` and
            ``pool``, plus ``dialect_options`` for mssql/oracle and
            ``account``/``warehouse``/``schema`` for snowflake
        """
        config = self.db_config
        options: Dict[str, Any] = {
            "port": int(config.db_port) if config.db_port else DEFAULT_PORT,
            "dialect": config.db_dialect,
            "logging": bool(config.db_logging),
        }
        if config.db_host:
            options["host"] = config.db_host

        pool = dict(DEFAULT_POOL)
        if config.pool:
            pool.update(config.pool.model_dump(exclude_none=True))
        options["pool"] = pool

        if config.db_dialect == "mssql":
            mssql = config.mssql_dialect_options.options
            options["dialect_options"] = {
                "options": {
                    "encrypt": bool(mssql.encrypt),
                    "trust_server_certificate": bool(mssql.trust_server_certificate),
                }
            }
        elif config.db_dialect == "oracle":
            options["dialect_options"] = {
                "connect_string": config.oracle_dialect_options.connect_string,
            }
        elif config.db_dialect == "snowflake":
            options.pop("host", None)
            options.update(
                account=config.snowflake_account,
                warehouse=config.snowflake_warehouse,
                schema=config.snowflake_schema,
            )

        return options

    def _build_url(self, options: Dict[str, Any]) -> URL:
        config = self.db_config
        dialect = config.db_dialect
        drivername = self.drivers[dialect]

        if dialect == "snowflake":
            return URL.create(
                drivername,
                username=config.db_user,
                password=config.db_password,
                host=options["account"],
                database=f"{config.db_name}/{options['schema']}",
                query={"warehouse": options["warehouse"]},
            )
        if dialect == "oracle":
            # The connect string is passed to the driver as ``dsn``
            return URL.create(drivername, username=config.db_user, password=config.db_password)

        query = {}
        if dialect == "mssql":
            flags = options["dialect_options"]["options"]
            query = {
                "driver": settings.MSSQL_ODBC_DRIVER,
                "Encrypt": "yes" if flags["encrypt"] else "no",
                "TrustServerCertificate": "yes" if flags["trust_server_certificate"] else "no",
            }
        return URL.create(
            drivername,
            username=config.db_user,
            password=config.db_password,
            host=options.get("host"),
            port=options["port"],
            database=config.db_name,
            query=query,
        )

    def create_connection(self) -> DatabaseConnection:
        """Create the engine and wrap it in a ``DatabaseConnection``."""
        options = self.construct_config()
        pool = options["pool"]

        engine_kwargs: Dict[str, Any] = {
            "echo": options["logging"],
            "pool_size": pool["max"],
            "max_overflow": 0,
            "pool_timeout": pool["acquire"] / 1000,
            "pool_recycle": pool["idle"] / 1000,
        }
        if options["dialect"] == "oracle":
            engine_kwargs["connect_args"] = {"dsn": options["dialect_options"]["connect_string"]}

        engine = create_engine(self._build_url(options), **engine_kwargs)
        logger.debug(f"Created {options['dialect']} engine for database {self.db_config.db_name}")
        return DatabaseConnection(engine, dialect=options["dialect"], options=options)

    def get_connection(self) -> DatabaseConnection:
        """Return the connection, creating it if it does not exist yet."""
        if self._connection is None:
            self._connection = self.create_connection()
        return self._connection
