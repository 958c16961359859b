import pytest
from unittest.mock import patch, MagicMock

from orm_connector.core.errors import ConfigurationError
from orm_connector.db.connection import DatabaseConnection
from orm_connector.db.database import DatabaseConnector, DEFAULT_POOL
from orm_connector.schemas.config import DBConfig


@pytest.fixture(autouse=True)
def mock_create_engine():
    """Keep engine creation away from real drivers."""
    with patch("orm_connector.db.database.create_engine") as mock_engine:
        mock_engine.return_value = MagicMock()
        yield mock_engine


def snowflake_config(**overrides):
    config = {
        "db_dialect": "snowflake",
        "db_name": "analytics",
        "db_user": "user",
        "db_password": "pass",
        "snowflake_account": "acme-xy123",
        "snowflake_schema": "public",
        "snowflake_warehouse": "compute_wh",
    }
    config.update(overrides)
    return config


def mssql_config(**options):
    return {
        "db_dialect": "mssql",
        "db_host": "sql.local",
        "db_name": "test",
        "db_user": "sa",
        "db_password": "pass",
        "mssql_dialect_options": {"options": options},
    }


@pytest.mark.parametrize("dialect", ["mysql", "postgres", "mariadb", "db2"])
def test_host_required_for_generic_dialects(dialect, mysql_config):
    """Dialects without special rules need a host."""
    config = dict(mysql_config, db_dialect=dialect)
    del config["db_host"]

    with pytest.raises(ConfigurationError) as exc_info:
        DatabaseConnector(config)
    assert "host" in str(exc_info.value)
    assert exc_info.value.details["missing"] == ["db_host"]

    config["db_host"] = "localhost"
    connector = DatabaseConnector(config)
    assert isinstance(connector.get_connection(), DatabaseConnection)


@pytest.mark.parametrize("field", ["db_dialect", "db_name", "db_user", "db_password"])
def test_common_fields_required(field, mysql_config, mock_create_engine):
    """Every dialect needs dialect, name, user and password."""
    del mysql_config[field]

    with pytest.raises(ConfigurationError) as exc_info:
        DatabaseConnector(mysql_config)

    assert field in exc_info.value.details["missing"]
    mock_create_engine.assert_not_called()


def test_unknown_dialect_rejected(mysql_config):
    """A dialect outside the supported set is a configuration error."""
    mysql_config["db_dialect"] = "cockroach"

    with pytest.raises(ConfigurationError, match="Unsupported database dialect: cockroach"):
        DatabaseConnector(mysql_config)


def test_invalid_types_raise_configuration_error(mysql_config):
    """Pydantic type errors surface as configuration errors."""
    mysql_config["db_port"] = "not-a-port"

    with pytest.raises(ConfigurationError, match="Invalid database configuration"):
        DatabaseConnector(mysql_config)


@pytest.mark.parametrize("options", [
    {},
    {"encrypt": True},
    {"trust_server_certificate": True},
])
def test_mssql_requires_both_flags(options):
    """MSSQL fails validation when either flag is missing."""
    with pytest.raises(ConfigurationError, match="Missing required MSSQL dialect options"):
        DatabaseConnector(mssql_config(**options))


def test_mssql_missing_options_block():
    config = mssql_config()
    del config["mssql_dialect_options"]

    with pytest.raises(ConfigurationError) as exc_info:
        DatabaseConnector(config)
    assert len(exc_info.value.details["missing"]) == 2


def test_mssql_accepts_explicit_false_flags():
    """False is a supplied value, not a missing one."""
    connector = DatabaseConnector(mssql_config(encrypt=False, trust_server_certificate=True))

    options = connector.construct_config()
    assert options["dialect_options"] == {
        "options": {"encrypt": False, "trust_server_certificate": True}
    }


def test_mssql_url_carries_encryption_flags(mock_create_engine):
    DatabaseConnector(mssql_config(encrypt=True, trust_server_certificate=False))

    url = mock_create_engine.call_args.args[0]
    assert url.drivername == "mssql+pyodbc"
    assert url.query["Encrypt"] == "yes"
    assert url.query["TrustServerCertificate"] == "no"
    assert "driver" in url.query


def test_oracle_requires_connect_string():
    config = {
        "db_dialect": "oracle",
        "db_name": "orcl",
        "db_user": "scott",
        "db_password": "tiger",
    }
    with pytest.raises(ConfigurationError, match="Oracle"):
        DatabaseConnector(config)

    config["oracle_dialect_options"] = {"connect_string": ""}
    with pytest.raises(ConfigurationError, match="Oracle"):
        DatabaseConnector(config)


def test_oracle_does_not_require_host(mock_create_engine):
    """The connect string replaces the host and is handed to the driver as dsn."""
    connector = DatabaseConnector({
        "db_dialect": "oracle",
        "db_name": "orcl",
        "db_user": "scott",
        "db_password": "tiger",
        "oracle_dialect_options": {"connect_string": "db.local:1521/ORCLPDB1"},
    })

    assert connector.construct_config()["dialect_options"] == {"connect_string": "db.local:1521/ORCLPDB1"}
    kwargs = mock_create_engine.call_args.kwargs
    assert kwargs["connect_args"] == {"dsn": "db.local:1521/ORCLPDB1"}


@pytest.mark.parametrize("field", ["snowflake_account", "snowflake_schema", "snowflake_warehouse"])
def test_snowflake_required_fields(field):
    config = snowflake_config()
    del config[field]

    with pytest.raises(ConfigurationError) as exc_info:
        DatabaseConnector(config)
    assert exc_info.value.details["missing"] == [field]


def test_snowflake_options_never_contain_host(mock_create_engine):
    """Host is dropped for Snowflake even when one is supplied."""
    connector = DatabaseConnector(snowflake_config(db_host="ignored.example.com"))

    options = connector.construct_config()
    assert "host" not in options
    assert options["account"] == "acme-xy123"
    assert options["warehouse"] == "compute_wh"
    assert options["schema"] == "public"

    url = mock_create_engine.call_args.args[0]
    assert url.host == "acme-xy123"
    assert url.database == "analytics/public"
    assert url.query["warehouse"] == "compute_wh"


def test_pool_defaults_when_not_supplied(mysql_config):
    options = DatabaseConnector(mysql_config).construct_config()

    assert options["pool"] == {"max": 5, "min": 0, "idle": 10000, "acquire": 10000}
    assert options["pool"] == DEFAULT_POOL


def test_pool_values_override_individually(mysql_config):
    mysql_config["pool"] = {"max": 20, "acquire": 30000}

    options = DatabaseConnector(mysql_config).construct_config()

    assert options["pool"] == {"max": 20, "min": 0, "idle": 10000, "acquire": 30000}


@pytest.mark.parametrize("pool", [{"max": 0}, {"min": -1}, {"idle": -5}, {"acquire": -1}])
def test_invalid_pool_values_rejected(pool, mysql_config, mock_create_engine):
    """A zero pool size would mean no limit at all, so it is refused."""
    mysql_config["pool"] = pool

    with pytest.raises(ConfigurationError, match="Invalid database configuration"):
        DatabaseConnector(mysql_config)
    mock_create_engine.assert_not_called()


def test_pool_maps_to_engine_arguments(mysql_config, mock_create_engine):
    mysql_config["pool"] = {"max": 10, "idle": 5000, "acquire": 2000}

    DatabaseConnector(mysql_config)

    kwargs = mock_create_engine.call_args.kwargs
    assert kwargs["pool_size"] == 10
    assert kwargs["max_overflow"] == 0
    assert kwargs["pool_timeout"] == 2
    assert kwargs["pool_recycle"] == 5
    assert kwargs["echo"] is False


def test_port_and_logging_defaults(mysql_config):
    options = DatabaseConnector(mysql_config).construct_config()

    assert options["port"] == 3306
    assert options["logging"] is False
    assert options["host"] == "localhost"
    assert "dialect_options" not in options


def test_port_string_is_coerced(mysql_config):
    mysql_config["db_port"] = "5432"
    mysql_config["db_dialect"] = "postgres"

    options = DatabaseConnector(mysql_config).construct_config()

    assert options["port"] == 5432


def test_generic_url(mysql_config, mock_create_engine):
    mysql_config["db_logging"] = True

    DatabaseConnector(mysql_config)

    url = mock_create_engine.call_args.args[0]
    assert url.drivername == "mysql+pymysql"
    assert url.host == "localhost"
    assert url.port == 3306
    assert url.database == "test"
    assert url.username == "user"
    assert mock_create_engine.call_args.kwargs["echo"] is True


def test_custom_driver_map(mysql_config, mock_create_engine):
    DatabaseConnector(mysql_config, drivers={"mysql": "mysql+aiomysql"})

    assert mock_create_engine.call_args.args[0].drivername == "mysql+aiomysql"


def test_camel_case_keys_accepted(mock_create_engine):
    """Configs using the camelCase key names still load."""
    connector = DatabaseConnector({
        "dbDialect": "postgres",
        "dbHost": "db.local",
        "dbPort": 5432,
        "dbName": "app",
        "dbUser": "app",
        "dbPassword": "secret",
        "pool": {"max": 2},
    })

    assert connector.db_config.db_dialect == "postgres"
    assert connector.construct_config()["pool"]["max"] == 2


def test_accepts_dbconfig_instance(mysql_config):
    config = DBConfig(**mysql_config)

    connector = DatabaseConnector(config)

    assert connector.db_config is config


def test_get_connection_is_lazy_and_idempotent(mysql_config, mock_create_engine):
    connector = DatabaseConnector(mysql_config)
    first = connector.get_connection()

    assert connector.get_connection() is first
    assert mock_create_engine.call_count == 1

    connector._connection = None
    second = connector.get_connection()

    assert second is not first
    assert mock_create_engine.call_count == 2
