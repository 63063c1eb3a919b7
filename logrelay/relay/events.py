"""Per-request evaluation context exposed to body templates."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Tuple


def canonical_header_key(name: str) -> str:
    """``content-type`` -> ``Content-Type``."""
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


def multimap(items: Iterable[Tuple[str, str]]) -> Dict[str, List[str]]:
    out: Dict[str, List[str]] = {}
    for key, value in items:
        out.setdefault(key, []).append(value)
    return out


@dataclass(frozen=True)
class EventContext:
    """One inbound write, as seen by the templates of every destination.

    ``executed_templates`` holds the outputs of the templates already
    evaluated in the current chain. Each step derives a new context with
    :meth:`with_executed`, so the base context handed to the dispatcher is
    never modified and can be shared by all destinations.
    """

    host: str
    headers: Mapping[str, List[str]]
    method: str
    path: str
    query: Mapping[str, List[str]]
    body: Any
    executed_templates: Tuple[str, ...] = field(default=())

    @classmethod
    def from_request(
        cls,
        host: str,
        header_items: Iterable[Tuple[str, str]],
        method: str,
        path: str,
        query_items: Iterable[Tuple[str, str]],
        body: Any,
    ) -> "EventContext":
        headers = multimap(
            (canonical_header_key(k), v)
            for k, v in header_items
            if k.lower() != "host"
        )
        return cls(
            host=host,
            headers=headers,
            method=method,
            path=path,
            query=multimap(query_items),
            body=body,
        )

    def with_executed(self, output: str) -> "EventContext":
        return replace(self, executed_templates=self.executed_templates + (output,))

    def template_data(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "headers": self.headers,
            "method": self.method,
            "path": self.path,
            "query": self.query,
            "body": self.body,
            "executedTemplates": list(self.executed_templates),
        }


__all__ = ["EventContext", "canonical_header_key", "multimap"]
