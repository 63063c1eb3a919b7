"""Basic auth credentials read from files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from logrelay.errors import CredentialReadError

from .config_schema import BasicAuthConfig


@dataclass(frozen=True)
class BasicCredentials:
    username: bytes
    password: bytes


class CredentialResolver:
    """Read basic auth secrets from disk.

    Files are read on every call so that a rotated secret is picked up by the
    next request without a restart. Contents are used verbatim, trailing
    newlines included.
    """

    def resolve(self, destination: str, auth: BasicAuthConfig) -> BasicCredentials:
        username = self._read(destination, auth.username_file, "username")
        password = self._read(destination, auth.password_file, "password")
        return BasicCredentials(username=username, password=password)

    @staticmethod
    def _read(destination: str, path: str, field: str) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as e:
            raise CredentialReadError(destination, path, field, e) from e


__all__ = ["BasicCredentials", "CredentialResolver"]
