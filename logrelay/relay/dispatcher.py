"""Fan one inbound event out to every registered destination."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests

from logrelay.errors import RelayError, SendError
from logrelay.services.credential_service import CredentialResolver

from .builder import RequestBuilder
from .events import EventContext
from .registry import Destination, DestinationRegistry
from .renderer import RequestRenderer

logger = logging.getLogger(__name__)


class DispatchCancelled(Exception):
    """The inbound request went away before the send completed."""


@dataclass
class DispatchResult:
    delivered: List[str] = field(default_factory=list)
    failed: Dict[str, SendError] = field(default_factory=dict)


class Dispatcher:
    """Render, build and send one request per destination.

    All requests are prepared before anything is sent: a render, credential
    or build failure on any destination aborts the whole dispatch and is
    raised to the caller. Send failures are logged and isolated to their
    destination.

    Sends run on daemon threads joined against a cancellation event. Once
    the event is set, or the dispatcher is closed, ``dispatch`` stops
    waiting and reports the unfinished sends as cancelled.
    """

    def __init__(
        self,
        registry: DestinationRegistry,
        renderer: Optional[RequestRenderer] = None,
        credentials: Optional[CredentialResolver] = None,
        builder: Optional[RequestBuilder] = None,
        session: Optional[requests.Session] = None,
        send_timeout: float = 30.0,
        poll_interval: float = 0.05,
    ):
        self.registry = registry
        self._renderer = renderer or RequestRenderer()
        self._credentials = credentials or CredentialResolver()
        self._builder = builder or RequestBuilder()
        self._session = session or requests.Session()
        self._send_timeout = send_timeout
        self._poll_interval = poll_interval
        self._closed = threading.Event()

    def dispatch(
        self, event: EventContext, cancel: Optional[threading.Event] = None
    ) -> DispatchResult:
        prepared = [(d, self.prepare(d, event)) for d in self.registry]
        result = DispatchResult()

        sends = []
        for destination, request in prepared:
            if self._cancelled(cancel):
                break
            outcome: Dict[str, Optional[SendError]] = {}
            thread = threading.Thread(
                target=self._send_into,
                args=(destination, request, outcome),
                name=f"send-{destination.name}",
                daemon=True,
            )
            thread.start()
            sends.append((destination, thread, outcome))

        started = {destination.name for destination, _, _ in sends}
        for destination, thread, outcome in sends:
            while thread.is_alive() and not self._cancelled(cancel):
                thread.join(self._poll_interval)
            if thread.is_alive():
                result.failed[destination.name] = self._cancel_error(destination)
            elif outcome.get("error") is None:
                result.delivered.append(destination.name)
            else:
                result.failed[destination.name] = outcome["error"]
        for destination, _ in prepared:
            if destination.name not in started:
                result.failed[destination.name] = self._cancel_error(destination)
        return result

    def prepare(
        self, destination: Destination, event: EventContext
    ) -> requests.PreparedRequest:
        try:
            body = self._renderer.render(
                destination.name, destination.templates, event
            )
            credentials = None
            if destination.basic_auth is not None:
                credentials = self._credentials.resolve(
                    destination.name, destination.basic_auth
                )
            return self._builder.build(destination, body, credentials)
        except RelayError as e:
            logger.error(
                e.message,
                extra={
                    "destination": destination.name,
                    "stage": e.stage,
                    "error": str(e),
                },
            )
            raise

    def close(self) -> None:
        """Release every pending dispatch and drop pooled connections."""
        self._closed.set()
        self._session.close()

    def _cancelled(self, cancel: Optional[threading.Event]) -> bool:
        return self._closed.is_set() or (cancel is not None and cancel.is_set())

    def _cancel_error(self, destination: Destination) -> SendError:
        error = SendError(destination.name, DispatchCancelled("dispatch cancelled"))
        logger.warning(
            "send abandoned, inbound request cancelled",
            extra={"destination": destination.name, "stage": error.stage},
        )
        return error

    def _send_into(
        self,
        destination: Destination,
        request: requests.PreparedRequest,
        outcome: Dict[str, Optional[SendError]],
    ) -> None:
        outcome["error"] = self._send(destination, request)

    def _send(
        self, destination: Destination, request: requests.PreparedRequest
    ) -> Optional[SendError]:
        try:
            response = self._session.send(
                request, timeout=self._send_timeout, stream=True
            )
        except Exception as e:
            error = SendError(destination.name, e)
            logger.error(
                error.message,
                extra={
                    "destination": destination.name,
                    "stage": error.stage,
                    "error": str(e),
                },
            )
            return error
        response.close()
        if not response.ok:
            # Counted as delivered, the status only shows up in logs.
            logger.warning(
                "destination answered with a non-2xx status",
                extra={
                    "destination": destination.name,
                    "status": response.status_code,
                },
            )
        return None
