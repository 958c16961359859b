"""
Model registrar.

Scans a directory for model definition files and registers the models they
define against a connection. A definition file is any ``*.py`` file whose
name does not start with an underscore, and it must expose::

    def define(connection, types):
        class User(connection.Base):
            __tablename__ = "users"
            id = Column(types.Integer, primary_key=True)

            @classmethod
            def associate(cls, models):
                cls.posts = relationship(models["Post"], back_populates="author")

        return User

``types`` is ``sqlalchemy.types``. Associations are wired only after every
file has been loaded, so a model can reference any other model regardless of
file order.
"""

import importlib.util
import logging
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, Union

from sqlalchemy import types as sa_types

from orm_connector.core.errors import ModelLoadError
from orm_connector.db.connection import DatabaseConnection

logger = logging.getLogger(__name__)

MODEL_FILE_SUFFIXES = (".py",)
DEFINE_FUNCTION = "define"


def model_name(model: Any) -> str:
    """Return the registry key for a model: class name, or its ``name`` attribute."""
    if isinstance(model, type):
        return model.__name__
    name = getattr(model, "name", None)
    if not isinstance(name, str) or not name:
        raise ModelLoadError(f"Model {model!r} does not expose a name")
    return name


class ModelRegistrar:
    """Loads model definitions from a directory and wires their associations."""

    def __init__(self, connection: DatabaseConnection, models_path: Union[str, Path]):
        self.connection = connection
        self.models_path = Path(models_path)
        self.models: Dict[str, Any] = {}
        # Unique per registrar so reloading the same directory never reuses modules
        self._namespace = f"_orm_connector_models_{uuid.uuid4().hex}"

    def _model_files(self) -> list:
        if not self.models_path.is_dir():
            raise ModelLoadError(
                f"Models path is not a directory: {self.models_path}",
                path=str(self.models_path),
            )
        return sorted(
            path for path in self.models_path.iterdir()
            if path.is_file()
            and path.suffix in MODEL_FILE_SUFFIXES
            and not path.name.startswith("_")
        )

    def _module_name(self, path: Path) -> str:
        return f"{self._namespace}_{path.stem}"

    def _load_definition(self, path: Path):
        module_name = self._module_name(path)
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ModelLoadError(f"Cannot load model file: {path.name}", path=str(path))

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise ModelLoadError(f"Error importing model file {path.name}: {e}", path=str(path)) from e

        define = getattr(module, DEFINE_FUNCTION, None)
        if not callable(define):
            sys.modules.pop(module_name, None)
            raise ModelLoadError(
                f"Model file {path.name} does not export a '{DEFINE_FUNCTION}' function",
                path=str(path),
            )
        return define

    def register_models(self) -> Dict[str, Any]:
        """
        Load every model definition file, then run association hooks.

        Returns:
            dict: Model name -> model

        Raises:
            ModelLoadError: If a file cannot be imported, has no ``define``,
                raises while defining or associating, or repeats a model name
        """
        models: Dict[str, Any] = {}
        for path in self._model_files():
            define = self._load_definition(path)
            try:
                model = define(self.connection, sa_types)
            except Exception as e:
                raise ModelLoadError(f"Error defining model from {path.name}: {e}", path=str(path)) from e
            finally:
                # Only needed while the module body and define() run
                sys.modules.pop(self._module_name(path), None)

            name = model_name(model)
            if name in models:
                raise ModelLoadError(
                    f"Duplicate model name {name} in {path.name}",
                    path=str(path),
                    model=name,
                )
            models[name] = model
            logger.debug(f"Loaded model {name} from {path.name}")

        # Handle associations once every model is known
        for name, model in models.items():
            associate = getattr(model, "associate", None)
            if not callable(associate):
                continue
            try:
                associate(models)
            except Exception as e:
                raise ModelLoadError(f"Error associating model {name}: {e}", model=name) from e
            logger.debug(f"Associated model {name}")

        self.models = models
        logger.info(f"Registered {len(models)} model(s) from {self.models_path}")
        return models
