from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FAMLEDGER_", env_file=".env", extra="ignore")

    # Full SQLAlchemy URL; when set, the db_* connection fields below are ignored.
    db_url: str | None = None

    # Use the common instance name format used by SSMS, e.g. .\SQLEXPRESS
    db_server: str = r".\SQLEXPRESS"
    db_port: int | None = None
    db_name: str = "FamilyLedger"
    db_trusted_connection: bool = True
    db_user: str | None = None
    db_password: str | None = None
    db_driver: str = "ODBC Driver 17 for SQL Server"

    db_pool_size: int = 5
    db_max_overflow: int = 0
    db_pool_timeout: int = 30
    db_pool_recycle: int = 1800

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_access_expire_minutes: int = 24 * 60
    jwt_refresh_expire_days: int = 7

    host: str = "0.0.0.0"
    port: int = 5000
    https_port: int = 5443
    # TLS normally terminates at the reverse proxy.
    use_https: bool = False
    ssl_cert_path: str = "certs/server.crt"
    ssl_key_path: str = "certs/server.key"

    cors_origins: str = "*"

    log_level: str = "INFO"

    seed_default_categories: bool = True


settings = Settings()
