"""
Connector facade.

``ORMConnector`` wires the database connector and the model registrar
together and owns the resulting connection and model registry::

    async with ORMConnector({"db_config": {...}, "models_path": "models"}) as db:
        User = db.get_model("User")
        with db.connection.session() as session:
            ...

Initialization is asynchronous and always runs in the same order:
connection, models, authentication.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from orm_connector.core.config import Settings, settings
from orm_connector.core.errors import ConfigurationError, ModelLookupError
from orm_connector.db.connection import DatabaseConnection
from orm_connector.db.database import DatabaseConnector
from orm_connector.db.model_registrar import ModelRegistrar
from orm_connector.schemas.config import ConnectorOptions

logger = logging.getLogger(__name__)

EMPTY_MODELS_MESSAGE = "Models have not been initialized or are empty."


class ORMConnector:
    """Owns one database connection and the models registered against it."""

    def __init__(self, options: Union[ConnectorOptions, Mapping[str, Any]]):
        if not isinstance(options, ConnectorOptions):
            try:
                options = ConnectorOptions.model_validate(dict(options))
            except ValidationError as e:
                raise ConfigurationError(f"Invalid connector options: {e}") from e
        self.options = options
        self.connection: Optional[DatabaseConnection] = None
        self.models: Dict[str, Any] = {}
        self._ready = False

    @classmethod
    async def create(cls, options: Union[ConnectorOptions, Mapping[str, Any]]) -> "ORMConnector":
        """Construct and initialize a connector."""
        connector = cls(options)
        await connector.initialize()
        return connector

    @classmethod
    def from_settings(cls, env_settings: Optional[Settings] = None) -> "ORMConnector":
        """Construct a connector from environment settings (not yet initialized)."""
        try:
            options = (env_settings or settings).to_connector_options()
        except ValidationError as e:
            raise ConfigurationError(f"Invalid connector settings: {e}") from e
        return cls(options)

    async def __aenter__(self) -> "ORMConnector":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close_db_connection()

    @property
    def is_initialized(self) -> bool:
        return self.connection is not None and bool(self.models)

    async def initialize(self) -> None:
        """
        Build the connection, register models and authenticate.

        Does nothing once initialization has succeeded. A handle left over
        from a failed attempt is closed before a new one is built.

        A failure is logged and re-raised; the connector should then be
        treated as unusable.
        """
        if self._ready:
            return
        if self.connection is not None:
            await self.connection.close()
            self.connection = None

        try:
            self.connection = DatabaseConnector(self.options.db_config).get_connection()
            self.models = ModelRegistrar(self.connection, self.options.models_path).register_models()

            # Test the connection
            await self.connection.authenticate()
            self._ready = True
            logger.info("Database connection established successfully.")
        except Exception as e:
            logger.error(f"Failed to initialize database connector: {e}", exc_info=True)
            raise

    def get_models(self) -> Dict[str, Any]:
        """Return all registered models keyed by name."""
        if not self.models:
            raise ModelLookupError(EMPTY_MODELS_MESSAGE)
        return self.models

    def get_model(self, model_name: str) -> Any:
        """Return the model registered under ``model_name``."""
        if not self.models:
            raise ModelLookupError(EMPTY_MODELS_MESSAGE)
        if model_name not in self.models:
            raise ModelLookupError(
                f"Model with name {model_name} does not exist.",
                {"model": model_name},
            )
        return self.models[model_name]

    async def get_connection(self) -> DatabaseConnection:
        """Return the connection, running full initialization first if there is none."""
        if self.connection is None:
            await self.initialize()
        return self.connection

    async def close_db_connection(self) -> None:
        """Close the connection if one was opened."""
        if self.connection is not None:
            await self.connection.close()
        self._ready = False
        logger.info("Database connection closed successfully.")
