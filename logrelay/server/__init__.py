"""Inbound HTTP listener."""

from logrelay.server.app import create_app
from logrelay.server.runner import bootstrap, serve

__all__ = ["bootstrap", "create_app", "serve"]
