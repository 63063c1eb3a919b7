"""Templated multi-destination dispatch engine."""

from logrelay.relay.builder import RequestBuilder
from logrelay.relay.dispatcher import DispatchResult, Dispatcher
from logrelay.relay.events import EventContext
from logrelay.relay.registry import Destination, DestinationRegistry
from logrelay.relay.renderer import RequestRenderer
from logrelay.relay.templates import TemplateChainCompiler

__all__ = [
    "Destination",
    "DestinationRegistry",
    "DispatchResult",
    "Dispatcher",
    "EventContext",
    "RequestBuilder",
    "RequestRenderer",
    "TemplateChainCompiler",
]
