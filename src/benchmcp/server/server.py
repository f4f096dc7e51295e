"""
benchmcp MCP server

Runs the protocol adapter on one of the supported transports, either on the
caller's event loop or in a background thread owned by the plugin.
"""

import argparse
import asyncio
import logging
import sys
import threading
import time
from typing import Callable, Optional

import uvicorn
from mcp.server.stdio import stdio_server

from ..common.errors import LifecycleError
from ..common.scheduling import Scheduler
from .adapter import MCPAdapter
from .config import TRANSPORTS, ConfigManager
from .transport import build_http_app, build_websocket_app, session_sweeper

logger = logging.getLogger(__name__)


class MCPServer:
    """MCP server

    Args:
        adapter: protocol adapter to serve
        scheduler: scheduler whose due callbacks the sweep task fires
        config: configuration manager, a default one when None
    """

    def __init__(self, adapter: MCPAdapter, scheduler: Scheduler, config: Optional[ConfigManager] = None):
        self.adapter = adapter
        self.scheduler = scheduler
        self.config = config or ConfigManager(use_env=False)
        self.running = False
        self._uvicorn: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._started = threading.Event()
        self._error: Optional[BaseException] = None

    @property
    def host(self) -> str:
        return self.config.get("server.host", "localhost")

    @property
    def port(self) -> int:
        return int(self.config.get("server.port", 3000))

    @property
    def endpoint(self) -> str:
        return self.config.get("server.endpoint", "/bench-mcp")

    @property
    def transport(self) -> str:
        return self.config.get("server.transport", "http")

    @property
    def url(self) -> str:
        scheme = "ws" if self.transport == "websocket" else "http"
        return f"{scheme}://{self.host}:{self.port}{self.endpoint}"

    def build_app(self):
        sweep_interval = float(self.config.get("sessions.sweep_interval", 1.0))
        if self.transport == "websocket":
            return build_websocket_app(self.adapter, self.scheduler, self.endpoint, sweep_interval)
        return build_http_app(self.adapter, self.scheduler, self.endpoint, sweep_interval)

    async def start(self) -> None:
        """Serve HTTP or WebSocket until ``stop()`` is called"""
        if self.transport == "stdio":
            await self.start_stdio()
            return
        if self.running:
            logger.warning("MCP server is already running")
            return

        config = uvicorn.Config(
            self.build_app(),
            host=self.host,
            port=self.port,
            log_level=str(self.config.get("logging.level", "INFO")).lower(),
            ws="websockets",
            lifespan="on",
        )
        self._uvicorn = uvicorn.Server(config)

        self.running = True
        logger.info(f"MCP server listening on {self.url}")
        try:
            await self._uvicorn.serve()
        finally:
            self.running = False
            self._uvicorn = None
            logger.info("MCP server stopped")

    async def start_stdio(self) -> None:
        """Serve a single client over stdin/stdout"""
        if self.running:
            logger.warning("MCP server is already running")
            return

        self.running = True
        logger.info("MCP server serving stdio")
        sweep_interval = float(self.config.get("sessions.sweep_interval", 1.0))
        try:
            async with session_sweeper(self.scheduler, sweep_interval):
                async with stdio_server() as (read_stream, write_stream):
                    await self.adapter.run(read_stream, write_stream, connection_id="stdio")
        finally:
            self.running = False

    async def stop(self) -> None:
        if self._uvicorn is not None:
            logger.info("Stopping MCP server...")
            self._uvicorn.should_exit = True

    # background thread

    def _thread_main(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_until_complete(self._serve_in_thread())
        except BaseException as e:
            self._error = e
            logger.error(f"MCP server thread failed: {e}", exc_info=True)
        finally:
            self._started.set()
            self._loop.close()
            self._loop = None

    async def _serve_in_thread(self) -> None:
        serve = asyncio.ensure_future(self.start())
        while not serve.done():
            if self._uvicorn is not None and self._uvicorn.started:
                self._started.set()
            await asyncio.sleep(0.05)
        serve.result()

    def start_in_thread(self, timeout: float = 10.0) -> None:
        """Start serving from a daemon thread and wait until it accepts connections

        Raises:
            LifecycleError: the server is already running or failed to start
        """
        if self._thread is not None and self._thread.is_alive():
            raise LifecycleError("MCP server thread is already running")
        if self.transport == "stdio":
            raise LifecycleError("The stdio transport cannot run in a background thread")

        self._started.clear()
        self._error = None
        self._thread = threading.Thread(target=self._thread_main, name="benchmcp-server", daemon=True)
        self._thread.start()

        if not self._started.wait(timeout):
            raise LifecycleError(f"MCP server did not start within {timeout}s")
        if self._error is not None or not self.running:
            raise LifecycleError(f"MCP server failed to start: {self._error}")

    def stop_thread(self, timeout: float = 5.0, pump: Optional[Callable[[], object]] = None) -> None:
        """Stop the server thread and wait for it

        Args:
            timeout: seconds to wait for the thread
            pump: called while waiting, e.g. to run queued host calls
        """
        if self._thread is None:
            return
        loop = self._loop
        if loop is not None and self._uvicorn is not None:
            loop.call_soon_threadsafe(setattr, self._uvicorn, "should_exit", True)
        deadline = time.monotonic() + timeout
        while self._thread.is_alive() and time.monotonic() < deadline:
            if pump is not None:
                pump()
            self._thread.join(0.05)
        if self._thread.is_alive():
            logger.warning("MCP server thread did not stop in time")
        self._thread = None


def main(argv=None) -> int:
    """Standalone server backed by the in-memory host"""
    from .. import configure_logging
    from .context import PluginLifecycle
    from ..host.memory import demo_editor

    parser = argparse.ArgumentParser(description="Bench MCP server")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--host", help="host to bind")
    parser.add_argument("--port", type=int, help="port to bind")
    parser.add_argument("--transport", choices=TRANSPORTS, help="transport to serve")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    args = parser.parse_args(argv)

    config = ConfigManager(args.config)
    for key, value in (("server.host", args.host), ("server.port", args.port),
                       ("server.transport", args.transport)):
        if value is not None:
            config._set(key, value)
    if args.debug:
        config._set("logging.level", "DEBUG")

    # stdout carries the protocol on stdio
    configure_logging(config.get("logging.level"), config.get("logging.file"),
                      stream=sys.stderr)

    lifecycle = PluginLifecycle(demo_editor(), config)
    lifecycle.init()
    try:
        asyncio.run(lifecycle.context.server.start())
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        lifecycle.teardown()
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
