"""Process wiring and lifecycle."""

from __future__ import annotations

import logging
import math
from typing import Optional

import uvicorn

from logrelay.relay.dispatcher import Dispatcher
from logrelay.relay.registry import DestinationRegistry
from logrelay.services.config_service import ConfigService
from logrelay.services.settings import Settings, parse_addr

from .app import create_app

logger = logging.getLogger(__name__)


def bootstrap(settings: Settings, config_path: Optional[str] = None) -> Dispatcher:
    """Load the configuration and compile the registry, once per process."""
    config = ConfigService(config_path or settings.remote_loggers_path).load_config()
    registry = DestinationRegistry.from_config(config)
    logger.info(
        "destinations loaded", extra={"destinations": list(registry.names())}
    )
    return Dispatcher(registry, send_timeout=settings.send_timeout)


def serve(settings: Settings, dispatcher: Dispatcher) -> None:
    """Serve until SIGINT/SIGTERM, then drain for at most the shutdown timeout."""
    host, port = parse_addr(settings.addr)
    config = uvicorn.Config(
        create_app(dispatcher),
        host=host,
        port=port,
        log_config=None,
        access_log=False,
        timeout_graceful_shutdown=math.ceil(settings.shutdown_timeout),
    )
    server = uvicorn.Server(config)
    logger.info("server started", extra={"addr": settings.addr})
    try:
        server.run()
    finally:
        dispatcher.close()
    logger.info("server stopped")


__all__ = ["bootstrap", "serve"]
