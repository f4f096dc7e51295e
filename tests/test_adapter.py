"""
Tests for the MCP protocol adapter
"""

import json

import anyio
import pytest
from mcp import types
from mcp.client.session import ClientSession
from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_client_server_memory_streams

from benchmcp.common.protocol import JsonRpcCodes
from benchmcp.server.adapter import MCPAdapter, current_connection_id


@pytest.fixture
def adapter(registries, sessions):
    return MCPAdapter(registries, sessions)


class TestAdapterHandlers:
    """Request handlers"""

    @pytest.mark.asyncio
    async def test_list_tools(self, adapter):
        handler = adapter.server.request_handlers[types.ListToolsRequest]
        result = await handler(types.ListToolsRequest(method="tools/list"))
        names = {tool.name for tool in result.root.tools}
        assert "bench_create_project" in names
        assert "bench_place_mesh" in names

    @pytest.mark.asyncio
    async def test_call_tool(self, host, adapter):
        handler = adapter.server.request_handlers[types.CallToolRequest]
        result = await handler(types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="bench_create_project", arguments={"name": "ship"}),
        ))
        assert not result.root.isError
        assert host.active_project().name == "ship"

    @pytest.mark.asyncio
    async def test_call_tool_error_is_result(self, adapter):
        handler = adapter.server.request_handlers[types.CallToolRequest]
        result = await handler(types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="bench_capture_screenshot", arguments={"project": "nope"}),
        ))
        assert result.root.isError

    @pytest.mark.asyncio
    async def test_read_resource(self, host, adapter):
        handler = adapter.server.request_handlers[types.ReadResourceRequest]
        uuid = host.active_project().uuid
        result = await handler(types.ReadResourceRequest(
            method="resources/read",
            params=types.ReadResourceRequestParams(uri=f"projects://{uuid}"),
        ))
        [contents] = result.root.contents
        assert contents.mimeType == "application/json"
        assert json.loads(contents.text)["uuid"] == uuid

    @pytest.mark.asyncio
    async def test_read_unknown_resource(self, adapter):
        handler = adapter.server.request_handlers[types.ReadResourceRequest]
        with pytest.raises(McpError) as excinfo:
            await handler(types.ReadResourceRequest(
                method="resources/read",
                params=types.ReadResourceRequestParams(uri="projects://unknown-id"),
            ))
        assert excinfo.value.error.code == JsonRpcCodes.RESOURCE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_get_unknown_prompt(self, adapter):
        handler = adapter.server.request_handlers[types.GetPromptRequest]
        with pytest.raises(McpError) as excinfo:
            await handler(types.GetPromptRequest(
                method="prompts/get",
                params=types.GetPromptRequestParams(name="missing"),
            ))
        assert excinfo.value.error.code == JsonRpcCodes.INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_requests_touch_connection_session(self, clock, adapter, sessions):
        handler = adapter.server.request_handlers[types.ListPromptsRequest]
        token = current_connection_id.set("conn-1")
        try:
            await handler(types.ListPromptsRequest(method="prompts/list"))
            assert sessions.has("conn-1")
            clock.advance(60)
            await handler(types.ListPromptsRequest(method="prompts/list"))
            assert sessions.get("conn-1").last_activity == clock.now()
        finally:
            current_connection_id.reset(token)

    @pytest.mark.asyncio
    async def test_requests_outside_a_connection(self, adapter, sessions):
        handler = adapter.server.request_handlers[types.ListResourceTemplatesRequest]
        result = await handler(types.ListResourceTemplatesRequest(method="resources/templates/list"))
        assert len(result.root.resourceTemplates) == 3
        assert sessions.get_count() == 0


class TestAdapterConnection:
    """A full client connection over in-memory streams"""

    @pytest.mark.asyncio
    async def test_connection_lifecycle(self, adapter, sessions):
        client_info = types.Implementation(name="test-client", version="1.0")
        async with create_client_server_memory_streams() as (client_streams, server_streams):
            async with anyio.create_task_group() as tg:
                tg.start_soon(adapter.run, server_streams[0], server_streams[1], "mem")

                async with ClientSession(client_streams[0], client_streams[1], client_info=client_info) as client:
                    init = await client.initialize()
                    assert init.serverInfo.name == "Bench MCP"

                    tools = await client.list_tools()
                    assert any(tool.name == "bench_capture_screenshot" for tool in tools.tools)

                    session = sessions.get("mem")
                    assert session.client_name == "test-client"
                    assert session.client_version == "1.0"

                    listing = await client.read_resource("projects://castle")
                    assert json.loads(listing.contents[0].text)["name"] == "castle"

                    with pytest.raises(McpError) as excinfo:
                        await client.read_resource("projects://unknown-id")
                    assert excinfo.value.error.code == JsonRpcCodes.RESOURCE_NOT_FOUND

                tg.cancel_scope.cancel()

        assert not sessions.has("mem")
