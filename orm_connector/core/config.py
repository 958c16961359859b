from typing import Dict, Optional

from pydantic import ConfigDict
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

from orm_connector.schemas.config import ConnectorOptions

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Connector settings read from the environment."""

    # Logging settings
    LOG_LEVEL: str = "INFO"

    # Database settings
    DB_DIALECT: Optional[str] = None
    DB_HOST: Optional[str] = None
    DB_PORT: Optional[int] = None
    DB_NAME: Optional[str] = None
    DB_USER: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_LOGGING: bool = False

    # Pool settings (milliseconds for the timeouts)
    DB_POOL_MAX: Optional[int] = None
    DB_POOL_MIN: Optional[int] = None
    DB_POOL_IDLE: Optional[int] = None
    DB_POOL_ACQUIRE: Optional[int] = None

    # Dialect specific settings
    SNOWFLAKE_ACCOUNT: Optional[str] = None
    SNOWFLAKE_WAREHOUSE: Optional[str] = None
    SNOWFLAKE_SCHEMA: Optional[str] = None
    MSSQL_ENCRYPT: Optional[bool] = None
    MSSQL_TRUST_SERVER_CERTIFICATE: Optional[bool] = None
    MSSQL_ODBC_DRIVER: str = "ODBC Driver 18 for SQL Server"
    ORACLE_CONNECT_STRING: Optional[str] = None

    # Directory scanned for model definition files
    MODELS_PATH: str = "models"

    # SQLAlchemy driver name used for each dialect
    DIALECT_DRIVERS: Dict[str, str] = {
        "mysql": "mysql+pymysql",
        "postgres": "postgresql+psycopg2",
        "mariadb": "mariadb+pymysql",
        "mssql": "mssql+pyodbc",
        "db2": "db2+ibm_db",
        "oracle": "oracle+oracledb",
        "snowflake": "snowflake",
    }

    model_config = ConfigDict(
        case_sensitive=True,
        env_file=".env",
        extra="ignore"
    )

    def to_connector_options(self) -> ConnectorOptions:
        """Build connector options from the environment values."""
        db_config = {
            "db_dialect": self.DB_DIALECT,
            "db_host": self.DB_HOST,
            "db_port": self.DB_PORT,
            "db_name": self.DB_NAME,
            "db_user": self.DB_USER,
            "db_password": self.DB_PASSWORD,
            "db_logging": self.DB_LOGGING,
            "snowflake_account": self.SNOWFLAKE_ACCOUNT,
            "snowflake_warehouse": self.SNOWFLAKE_WAREHOUSE,
            "snowflake_schema": self.SNOWFLAKE_SCHEMA,
        }

        pool = {
            "max": self.DB_POOL_MAX,
            "min": self.DB_POOL_MIN,
            "idle": self.DB_POOL_IDLE,
            "acquire": self.DB_POOL_ACQUIRE,
        }
        if any(value is not None for value in pool.values()):
            db_config["pool"] = pool

        if self.MSSQL_ENCRYPT is not None or self.MSSQL_TRUST_SERVER_CERTIFICATE is not None:
            db_config["mssql_dialect_options"] = {
                "options": {
                    "encrypt": self.MSSQL_ENCRYPT,
                    "trust_server_certificate": self.MSSQL_TRUST_SERVER_CERTIFICATE,
                }
            }
        if self.ORACLE_CONNECT_STRING:
            db_config["oracle_dialect_options"] = {"connect_string": self.ORACLE_CONNECT_STRING}

        return ConnectorOptions(db_config=db_config, models_path=self.MODELS_PATH)


# Create settings instance
settings = Settings()
