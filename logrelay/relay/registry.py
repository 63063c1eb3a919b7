"""Compiled, read-only set of destinations."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple
from urllib.parse import urlsplit

from logrelay.errors import BuildError
from logrelay.services.config_schema import BasicAuthConfig, RemoteLoggersConfig

from .templates import TemplateChain, TemplateChainCompiler

# RFC 7230 token
_METHOD_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def validate_target(method: str, url: str) -> None:
    """Raise ValueError when the method or URL cannot make a request."""
    if not _METHOD_RE.match(method or ""):
        raise ValueError(f"invalid method {method!r}")
    parts = urlsplit(url or "")
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError(f"invalid URL {url!r}")


@dataclass(frozen=True)
class Destination:
    name: str
    method: str
    url: str
    headers: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    basic_auth: Optional[BasicAuthConfig] = None
    templates: TemplateChain = ()


class DestinationRegistry:
    """Destinations keyed by name, built once before serving and never mutated."""

    def __init__(self, destinations: Mapping[str, Destination]):
        self._destinations = MappingProxyType(dict(destinations))

    @classmethod
    def from_config(
        cls,
        config: RemoteLoggersConfig,
        compiler: Optional[TemplateChainCompiler] = None,
    ) -> "DestinationRegistry":
        """Compile every configured HTTP remote logger.

        Raises CompileError on the first template that does not parse and
        BuildError on a method or URL no request could be made with.
        """
        compiler = compiler or TemplateChainCompiler()
        destinations: Dict[str, Destination] = {}
        for name, remote in config.items():
            http = remote.http
            if http is None:
                continue
            try:
                validate_target(http.method, http.url)
            except ValueError as e:
                raise BuildError(name, e) from e
            sources = http.body.templates if http.body else []
            destinations[name] = Destination(
                name=name,
                method=http.method,
                url=http.url,
                headers=MappingProxyType(
                    {k: tuple(v) for k, v in http.headers.items()}
                ),
                basic_auth=http.auth.basic if http.auth else None,
                templates=compiler.compile(name, sources),
            )
        return cls(destinations)

    def get(self, name: str) -> Optional[Destination]:
        return self._destinations.get(name)

    def names(self) -> Tuple[str, ...]:
        return tuple(self._destinations)

    def __iter__(self) -> Iterator[Destination]:
        return iter(self._destinations.values())

    def __len__(self) -> int:
        return len(self._destinations)

    def __contains__(self, name: object) -> bool:
        return name in self._destinations


__all__ = ["Destination", "DestinationRegistry", "validate_target"]
