"""FastAPI application receiving JSON writes."""

from __future__ import annotations

import asyncio
import json
import logging
import threading

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from logrelay.errors import RelayError
from logrelay.relay.dispatcher import Dispatcher
from logrelay.relay.events import EventContext

logger = logging.getLogger(__name__)

DISCONNECT_POLL_INTERVAL = 0.1

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def respond_error(status: int, err: Exception, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status, content={"error": str(err), "message": message}
    )


def create_app(dispatcher: Dispatcher) -> FastAPI:
    """Build the listener around an already compiled dispatcher."""
    app = FastAPI(
        title="json-logger-server", docs_url=None, redoc_url=None, openapi_url=None
    )
    app.state.dispatcher = dispatcher

    @app.api_route("/{path:path}", methods=ALL_METHODS)
    async def handle(request: Request, path: str) -> Response:
        if request.method == "GET":
            return Response(status_code=200)
        if request.method != "POST":
            return Response(status_code=405)

        raw = await request.body()
        try:
            body = json.loads(raw)
        except ValueError as e:
            logger.error("failed to unmarshal request body", extra={"error": str(e)})
            return respond_error(400, e, "failed to unmarshal request body")

        logger.info("request", extra={"body": body})

        event = EventContext.from_request(
            host=request.headers.get("host", ""),
            header_items=request.headers.items(),
            method=request.method,
            path=request.url.path,
            query_items=request.query_params.multi_items(),
            body=body,
        )
        try:
            await dispatch_until_disconnect(request, event)
        except RelayError as e:
            return respond_error(500, e, e.message)
        return Response(status_code=200)

    return app


async def dispatch_until_disconnect(request: Request, event: EventContext) -> None:
    """Run the dispatch on a worker thread, cancelling it if the client leaves.

    The task is also cancelled by uvicorn once the shutdown grace period is
    over; the dispatch is then released instead of holding the worker.
    """
    cancel = threading.Event()
    task = asyncio.ensure_future(
        run_in_threadpool(request.app.state.dispatcher.dispatch, event, cancel)
    )
    try:
        while not task.done():
            await asyncio.wait({task}, timeout=DISCONNECT_POLL_INTERVAL)
            if (
                not task.done()
                and not cancel.is_set()
                and await request.is_disconnected()
            ):
                logger.warning("client disconnected, cancelling dispatch")
                cancel.set()
    except asyncio.CancelledError:
        cancel.set()
        raise
    task.result()


__all__ = ["create_app", "dispatch_until_disconnect", "respond_error"]
