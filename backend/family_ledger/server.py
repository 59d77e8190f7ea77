from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import uvicorn

from family_ledger.core.config import Settings, settings
from family_ledger.core.logging import configure_logging

logger = logging.getLogger(__name__)

APP_PATH = "family_ledger.main:app"


def build_configs(cfg: Settings = settings) -> list[uvicorn.Config]:
    """HTTP always; HTTPS on a second port when enabled and the cert pair exists."""

    configs = [uvicorn.Config(APP_PATH, host=cfg.host, port=cfg.port, log_level=cfg.log_level.lower())]

    if not cfg.use_https:
        logger.info("HTTPS is disabled; set FAMLEDGER_USE_HTTPS=true to serve TLS in-process")
        return configs

    cert_path = Path(cfg.ssl_cert_path)
    key_path = Path(cfg.ssl_key_path)
    if not (cert_path.exists() and key_path.exists()):
        logger.warning(
            "HTTPS is enabled but SSL certificates were not found (certificate: %s, key: %s)",
            cert_path,
            key_path,
        )
        return configs

    configs.append(
        uvicorn.Config(
            APP_PATH,
            host=cfg.host,
            port=cfg.https_port,
            ssl_certfile=str(cert_path),
            ssl_keyfile=str(key_path),
            log_level=cfg.log_level.lower(),
        )
    )
    return configs


async def _serve(configs: list[uvicorn.Config]) -> None:
    await asyncio.gather(*(uvicorn.Server(c).serve() for c in configs))


def main() -> None:
    configure_logging(settings.log_level)
    configs = build_configs(settings)
    for c in configs:
        scheme = "https" if c.ssl_certfile else "http"
        logger.info("Serving %s on %s:%s", scheme, c.host, c.port)
    asyncio.run(_serve(configs))


if __name__ == "__main__":
    main()
