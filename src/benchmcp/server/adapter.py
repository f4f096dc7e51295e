"""
benchmcp MCP protocol adapter

Wires the registries into one low-level MCP ``Server`` and keeps the session
registry informed about every request it handles.
"""

import contextvars
import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.shared.exceptions import McpError

from ..common.constants import SERVER_NAME, VERSION
from ..common.errors import BenchMCPError, NotFoundError, ParameterError
from ..common.protocol import JsonRpcCodes
from ..common.sessions import SessionManager
from ..host.facade import call_on_host
from .factories import Registries

logger = logging.getLogger(__name__)

SESSION_HEADER = "mcp-session-id"

# Id of the stdio or WebSocket connection the current task serves
current_connection_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "benchmcp_connection_id", default=None
)

INSTRUCTIONS = (
    "Tools, resources and prompts for a 3D model editor. Read projects://, nodes:// "
    "and textures:// to inspect the scene, and use the tools to change it."
)


def _mcp_error(code: int, message: str, data: Any = None) -> McpError:
    return McpError(types.ErrorData(code=code, message=message, data=data))


class MCPAdapter:
    """MCP protocol adapter

    Args:
        registries: tools, resources and prompts to serve
        sessions: session registry touched on every request
        name: server name reported to clients
        version: server version reported to clients
    """

    def __init__(self, registries: Registries, sessions: SessionManager,
                 name: str = SERVER_NAME, version: str = VERSION):
        self.registries = registries
        self.sessions = sessions
        self.server = Server(name, version=version, instructions=INSTRUCTIONS)
        self._register_handlers()

    @property
    def name(self) -> str:
        return self.server.name

    @property
    def version(self) -> Optional[str]:
        return self.server.version

    def create_initialization_options(self):
        return self.server.create_initialization_options()

    # session tracking

    def _request_session_id(self) -> Optional[str]:
        connection_id = current_connection_id.get()
        if connection_id:
            return connection_id
        try:
            request = self.server.request_context.request
        except LookupError:
            return None
        headers = getattr(request, "headers", None)
        if headers is None:
            return None
        return headers.get(SESSION_HEADER)

    def _touch(self) -> None:
        """Refresh the session of the current request and record its client"""
        session_id = self._request_session_id()
        if not session_id:
            return
        self.sessions.add(session_id)

        try:
            client_params = self.server.request_context.session.client_params
        except LookupError:
            return
        client_info = client_params.clientInfo if client_params else None
        if client_info is None:
            return

        session = self.sessions.get(session_id)
        if session and (session.client_name, session.client_version) != (client_info.name, client_info.version):
            self.sessions.update_client_info(session_id, client_info.name, client_info.version)

    # handlers

    def _register_handlers(self) -> None:
        server = self.server
        registries = self.registries

        @server.list_tools()
        async def list_tools() -> List[types.Tool]:
            self._touch()
            return registries.tools.list_tools()

        @server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: Dict[str, Any]) -> types.CallToolResult:
            self._touch()
            logger.info(f"Calling tool: {name}")
            return await registries.tools.call(name, arguments)

        @server.list_resources()
        async def list_resources() -> List[types.Resource]:
            self._touch()
            return await registries.resources.list_resources()

        @server.list_resource_templates()
        async def list_resource_templates() -> List[types.ResourceTemplate]:
            self._touch()
            return registries.resources.list_templates()

        @server.read_resource()
        async def read_resource(uri) -> Iterable[ReadResourceContents]:
            self._touch()
            uri = str(uri)
            try:
                return await registries.resources.read(uri)
            except NotFoundError as e:
                raise _mcp_error(JsonRpcCodes.RESOURCE_NOT_FOUND, str(e), {"uri": uri}) from e
            except BenchMCPError as e:
                raise _mcp_error(JsonRpcCodes.INVALID_PARAMS, str(e), {"uri": uri}) from e
            except Exception as e:
                logger.exception(f"Reading {uri} failed")
                raise _mcp_error(JsonRpcCodes.INTERNAL_ERROR, f"Failed to read {uri}: {e}") from e

        @server.list_prompts()
        async def list_prompts() -> List[types.Prompt]:
            self._touch()
            return registries.prompts.list_prompts()

        @server.get_prompt()
        async def get_prompt(name: str, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
            self._touch()
            try:
                return await call_on_host(registries.host, registries.prompts.get, name, arguments)
            except (NotFoundError, ParameterError) as e:
                raise _mcp_error(JsonRpcCodes.INVALID_PARAMS, str(e)) from e

    async def run(self, read_stream, write_stream, connection_id: Optional[str] = None) -> None:
        """Serve one stdio or WebSocket connection until it closes

        The connection is tracked as a session for its whole lifetime.
        """
        connection_id = connection_id or str(uuid.uuid4())
        token = current_connection_id.set(connection_id)
        self.sessions.add(connection_id)
        try:
            await self.server.run(read_stream, write_stream, self.create_initialization_options())
        finally:
            self.sessions.remove(connection_id)
            current_connection_id.reset(token)
