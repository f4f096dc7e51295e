"""
benchmcp transports

ASGI applications for the streamable HTTP and WebSocket transports, the
middleware that mirrors HTTP sessions into the session registry, and the
sweep task that fires due scheduler callbacks on the server loop.
"""

import asyncio
import contextlib
import logging
from typing import AsyncIterator, Optional

from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from mcp.server.websocket import websocket_server
from starlette.applications import Starlette
from starlette.datastructures import Headers
from starlette.routing import Route, WebSocketRoute
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..common.scheduling import Scheduler
from ..common.sessions import SessionManager
from .adapter import SESSION_HEADER, MCPAdapter

logger = logging.getLogger(__name__)


async def sweep_sessions(scheduler: Scheduler, interval: float = 1.0) -> None:
    """Fire due scheduler callbacks every ``interval`` seconds, until cancelled"""
    while True:
        scheduler.run_due()
        delay = scheduler.time_until_next()
        await asyncio.sleep(interval if delay is None else min(max(delay, 0.0), interval))


@contextlib.asynccontextmanager
async def session_sweeper(scheduler: Scheduler, interval: float = 1.0) -> AsyncIterator[asyncio.Task]:
    task = asyncio.create_task(sweep_sessions(scheduler, interval), name="benchmcp-session-sweep")
    try:
        yield task
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


class SessionTrackingMiddleware:
    """ASGI middleware keeping the session registry in step with HTTP sessions

    A session id assigned by the SDK in a response header registers a
    session; later requests carrying the id refresh it and ``DELETE``
    removes it.
    """

    def __init__(self, app: ASGIApp, sessions: SessionManager):
        self.app = app
        self.sessions = sessions

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET").upper()
        request_session_id = Headers(scope=scope).get(SESSION_HEADER)

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start" and method != "DELETE":
                session_id = Headers(raw=message.get("headers", [])).get(SESSION_HEADER) or request_session_id
                if session_id and message.get("status", 200) < 400:
                    self.sessions.add(session_id)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            if method == "DELETE" and request_session_id:
                self.sessions.remove(request_session_id)


class StreamableHTTPApp:
    """ASGI endpoint delegating to the SDK session manager"""

    def __init__(self, session_manager: StreamableHTTPSessionManager):
        self.session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.session_manager.handle_request(scope, receive, send)


class WebSocketApp:
    """ASGI endpoint serving one MCP connection per WebSocket"""

    def __init__(self, adapter: MCPAdapter):
        self.adapter = adapter

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        async with websocket_server(scope, receive, send) as (read_stream, write_stream):
            await self.adapter.run(read_stream, write_stream)


def build_http_app(adapter: MCPAdapter, scheduler: Scheduler, endpoint: str = "/bench-mcp",
                   sweep_interval: float = 1.0,
                   session_manager: Optional[StreamableHTTPSessionManager] = None) -> Starlette:
    """Starlette app serving streamable HTTP at ``endpoint``"""
    session_manager = session_manager or StreamableHTTPSessionManager(app=adapter.server)

    @contextlib.asynccontextmanager
    async def lifespan(app):
        async with session_manager.run():
            async with session_sweeper(scheduler, sweep_interval):
                logger.info(f"Streamable HTTP transport ready at {endpoint}")
                yield

    endpoint_app = SessionTrackingMiddleware(StreamableHTTPApp(session_manager), adapter.sessions)
    return Starlette(routes=[Route(endpoint, endpoint=endpoint_app)], lifespan=lifespan)


def build_websocket_app(adapter: MCPAdapter, scheduler: Scheduler, endpoint: str = "/bench-mcp",
                        sweep_interval: float = 1.0) -> Starlette:
    """Starlette app serving MCP over WebSocket at ``endpoint``"""

    @contextlib.asynccontextmanager
    async def lifespan(app):
        async with session_sweeper(scheduler, sweep_interval):
            logger.info(f"WebSocket transport ready at {endpoint}")
            yield

    return Starlette(routes=[WebSocketRoute(endpoint, endpoint=WebSocketApp(adapter))], lifespan=lifespan)
