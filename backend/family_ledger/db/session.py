from __future__ import annotations

from typing import Any
from urllib.parse import quote_plus

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from family_ledger.core.config import Settings, settings


def build_connection_url(cfg: Settings = settings) -> str:
    if cfg.db_url:
        return cfg.db_url

    # Use ODBC connection string to avoid URL-escaping pain on Windows instance names.
    # Some .env examples may contain double backslashes (e.g. .\\SQLEXPRESS). ODBC expects .\SQLEXPRESS.
    server = cfg.db_server.replace("\\\\", "\\")
    if cfg.db_port:
        server = f"{server},{cfg.db_port}"
    parts: list[str] = [
        f"DRIVER={{{cfg.db_driver}}}",
        f"SERVER={server}",
        f"DATABASE={cfg.db_name}",
        "TrustServerCertificate=yes",
    ]

    if cfg.db_trusted_connection:
        parts.append("Trusted_Connection=yes")
    else:
        if not cfg.db_user or not cfg.db_password:
            raise ValueError("SQL login requires FAMLEDGER_DB_USER and FAMLEDGER_DB_PASSWORD")
        parts.append(f"UID={cfg.db_user}")
        parts.append(f"PWD={cfg.db_password}")

    odbc_str = ";".join(parts)
    return "mssql+pyodbc:///?odbc_connect=" + quote_plus(odbc_str)


def build_engine(cfg: Settings = settings) -> Engine:
    url = build_connection_url(cfg)
    kwargs: dict[str, Any] = {"pool_pre_ping": True, "hide_parameters": True, "future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=cfg.db_pool_size,
            max_overflow=cfg.db_max_overflow,
            pool_timeout=cfg.db_pool_timeout,
            pool_recycle=cfg.db_pool_recycle,
        )
    return create_engine(url, **kwargs)


engine = build_engine()

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
