"""Error taxonomy for the dispatch engine.

Every error knows which destination and which stage produced it, so the
listener can answer with a useful diagnostic and logs can be grepped by
destination name.
"""

from __future__ import annotations

from typing import Optional


class RelayError(Exception):
    """Base class for all dispatch engine errors."""

    stage = "relay"
    message = "relay error"

    def __init__(self, destination: str, cause: Optional[BaseException] = None):
        self.destination = destination
        self.cause = cause
        super().__init__(self._describe())

    def _describe(self) -> str:
        text = f"{self.message} for destination {self.destination}"
        if self.cause is not None:
            text += f": {self.cause}"
        return text


class CompileError(RelayError):
    stage = "compile"
    message = "failed to parse body template"

    def __init__(
        self, destination: str, index: int, cause: Optional[BaseException] = None
    ):
        self.index = index
        super().__init__(destination, cause)

    def _describe(self) -> str:
        text = (
            f"failed to parse body template number {self.index} "
            f"for destination {self.destination}"
        )
        if self.cause is not None:
            text += f": {self.cause}"
        return text


class CredentialReadError(RelayError):
    stage = "credentials"
    message = "failed to read basic auth file"

    def __init__(
        self,
        destination: str,
        path: str,
        field: str,
        cause: Optional[BaseException] = None,
    ):
        self.path = path
        self.field = field
        self.message = f"failed to read basic auth {field} file"
        super().__init__(destination, cause)


class RenderError(RelayError):
    stage = "render"
    message = "failed to execute body template"

    def __init__(
        self, destination: str, index: int, cause: Optional[BaseException] = None
    ):
        self.index = index
        super().__init__(destination, cause)

    def _describe(self) -> str:
        text = (
            f"failed to execute body template number {self.index} "
            f"for destination {self.destination}"
        )
        if self.cause is not None:
            text += f": {self.cause}"
        return text


class BuildError(RelayError):
    stage = "build"
    message = "failed to create HTTP request"


class SendError(RelayError):
    stage = "send"
    message = "failed to send HTTP request"


__all__ = [
    "RelayError",
    "CompileError",
    "CredentialReadError",
    "RenderError",
    "BuildError",
    "SendError",
]
