"""Compilation of destination body template chains."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote_plus

from jinja2 import StrictUndefined, Template, TemplateSyntaxError
from jinja2.sandbox import ImmutableSandboxedEnvironment

from logrelay.errors import CompileError

TemplateChain = Tuple[Template, ...]


def urlencode(value: Any) -> str:
    """Escape a value for use inside a URL query string."""
    return quote_plus(str(value), safe="")


def tolower(value: Any) -> str:
    return str(value).lower()


def get(mapping: Optional[Mapping[str, Sequence[Any]]], key: str) -> Any:
    """First value stored under ``key`` in a multi-valued mapping, or ``""``."""
    values: List[Any] = list((mapping or {}).get(key) or [])
    if not values:
        return ""
    return values[0]


TEMPLATE_HELPERS = {
    "urlencode": urlencode,
    "tolower": tolower,
    "get": get,
}


class MappingFirstSandbox(ImmutableSandboxedEnvironment):
    """Sandbox where ``a.b`` on a mapping reads key ``b`` before any attribute.

    Inbound JSON keys such as ``items`` or ``update`` would otherwise resolve
    to dict methods.
    """

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Mapping):
            try:
                return obj[attribute]
            except (KeyError, TypeError):
                pass
        return super().getattr(obj, attribute)


class TemplateChainCompiler:
    """Compile template sources into executable chains.

    Templates run in an immutable sandbox: they may read the event context
    and call the helpers but cannot mutate what they are given.
    """

    def __init__(self):
        self._env = MappingFirstSandbox(
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        self._env.globals.update(TEMPLATE_HELPERS)
        self._env.filters.update(TEMPLATE_HELPERS)

    def compile(self, destination: str, sources: Iterable[str]) -> TemplateChain:
        chain = []
        for index, source in enumerate(sources):
            try:
                template = self._env.from_string(source)
            except TemplateSyntaxError as e:
                raise CompileError(destination, index, e) from e
            template.name = f"{destination}-body-{index}"
            chain.append(template)
        return tuple(chain)


__all__ = [
    "TEMPLATE_HELPERS",
    "MappingFirstSandbox",
    "TemplateChain",
    "TemplateChainCompiler",
    "get",
    "tolower",
    "urlencode",
]
