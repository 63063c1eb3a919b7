"""Entrypoint for services package."""

from logrelay.services.config_service import ConfigService
from logrelay.services.credential_service import CredentialResolver
from logrelay.services.settings import Settings

__all__ = ["ConfigService", "CredentialResolver", "Settings"]
