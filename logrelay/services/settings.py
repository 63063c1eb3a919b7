"""Process settings read from the environment."""

from __future__ import annotations

import os
from typing import Tuple

from pydantic import BaseModel, Field

from .config_service import DEFAULT_CONFIG_PATH


class Settings(BaseModel):
    remote_loggers_path: str = DEFAULT_CONFIG_PATH
    addr: str = ":8080"
    shutdown_timeout: float = Field(default=5.0, gt=0)
    send_timeout: float = Field(default=30.0, gt=0)
    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, ignoring empty values."""
        env = {
            "remote_loggers_path": os.getenv("REMOTE_LOGGERS_PATH"),
            "addr": os.getenv("ADDR"),
            "shutdown_timeout": os.getenv("SHUTDOWN_TIMEOUT"),
            "send_timeout": os.getenv("SEND_TIMEOUT"),
            "log_level": os.getenv("LOG_LEVEL"),
            "log_format": os.getenv("LOG_FORMAT"),
        }
        return cls.model_validate({k: v for k, v in env.items() if v})


def parse_addr(addr: str) -> Tuple[str, int]:
    """Split a ``host:port`` listen address; an empty host means all interfaces."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid listen address: {addr!r}")
    host = host.strip("[]")
    return host or "0.0.0.0", int(port)


__all__ = ["Settings", "parse_addr"]
