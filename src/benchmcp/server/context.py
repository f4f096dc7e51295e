"""
benchmcp plugin context

``PluginContext`` holds every object of one loaded plugin instance and
``PluginLifecycle`` builds, starts and tears it down.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..common.errors import LifecycleError
from ..common.scheduling import Clock, MonotonicClock, Scheduler
from ..common.sessions import SessionManager
from ..host.facade import HostEditor
from ..tools import register_all_tools
from ..ui.panel import StatusPanel
from .adapter import MCPAdapter
from .config import ConfigManager
from .factories import Registries
from .prompts import register_prompts
from .resources import register_resources
from .server import MCPServer

logger = logging.getLogger(__name__)


@dataclass
class PluginContext:
    host: HostEditor
    config: ConfigManager
    clock: Clock
    scheduler: Scheduler
    sessions: SessionManager
    registries: Registries
    adapter: MCPAdapter
    server: MCPServer
    panel: StatusPanel


class PluginLifecycle:
    """Owns the plugin context between ``init()`` and ``teardown()``

    Args:
        host: host editor facade
        config: configuration, defaults when None
        clock: clock for session eviction, monotonic when None
    """

    def __init__(self, host: HostEditor, config: Optional[ConfigManager] = None,
                 clock: Optional[Clock] = None):
        self.host = host
        self.config = config or ConfigManager()
        self.clock = clock or MonotonicClock()
        self._context: Optional[PluginContext] = None

    @property
    def context(self) -> PluginContext:
        if self._context is None:
            raise LifecycleError("Plugin is not initialised")
        return self._context

    @property
    def initialised(self) -> bool:
        return self._context is not None

    def init(self) -> PluginContext:
        """Build the registries, adapter, server and panel"""
        if self._context is not None:
            raise LifecycleError("Plugin is already initialised")

        config = self.config
        scheduler = Scheduler(self.clock)
        sessions = SessionManager(scheduler, float(config.get("sessions.inactivity_timeout")),
                                  dispatch=self.host.run_on_main)

        registries = Registries(
            self.host,
            tool_prefix=config.get("server.tool_prefix", ""),
            disabled_tools=config.get("tools.disabled", []),
        )
        register_all_tools(registries.tools, config)
        register_resources(registries.resources)
        register_prompts(registries.prompts)

        adapter = MCPAdapter(registries, sessions, name=config.get("server.name"))
        server = MCPServer(adapter, scheduler, config)

        panel = StatusPanel(sessions, registries, tool_prefix=registries.tools.prefix)
        panel.mount()
        self.host.show_panel(panel)

        self._context = PluginContext(
            host=self.host,
            config=config,
            clock=self.clock,
            scheduler=scheduler,
            sessions=sessions,
            registries=registries,
            adapter=adapter,
            server=server,
            panel=panel,
        )
        logger.info(f"Plugin initialised: {len(registries.tools.all())} tools, "
                    f"{len(registries.resources.all())} resources, {len(registries.prompts.all())} prompts")
        return self._context

    def start(self) -> None:
        """Start the server in its background thread"""
        context = self.context
        context.server.start_in_thread()
        context.panel.set_server_status(True, context.adapter.name, context.adapter.version)
        logger.info(f"MCP server started on {context.server.url}")

    def teardown(self) -> None:
        """Stop the server and release everything ``init()`` created"""
        context = self._context
        if context is None:
            return

        dispatcher = self.host.dispatcher
        try:
            # host calls in flight need the main thread to finish
            context.server.stop_thread(pump=dispatcher.process_pending if dispatcher else None)
        finally:
            if dispatcher is not None:
                dispatcher.cancel_pending()
            context.panel.set_server_status(False)
            context.panel.unmount()
            self.host.hide_panel(context.panel)
            context.sessions.clear()
            context.scheduler.clear()
            self._context = None
            logger.info("Plugin torn down")
