"""
Tests for the tool, resource and prompt registries
"""

import json

import pytest
from mcp import types

from benchmcp.common.constants import STATUS_EXPERIMENTAL
from benchmcp.common.errors import HostError, NotFoundError, ParameterError
from benchmcp.host.memory import InMemoryEditor
from benchmcp.server.factories import (
    PromptArgument,
    PromptRegistry,
    Registries,
    ResourceRegistry,
    ToolRegistry,
    UriTemplate,
    to_content,
)

ECHO_SCHEMA = {
    "type": "object",
    "properties": {
        "message": {"type": "string"},
        "times": {"type": "integer", "minimum": 1, "default": 1},
    },
    "required": ["message"],
}


def echo(host, params):
    return params["message"] * params["times"]


class TestUriTemplate:
    """URI templates"""

    def test_match(self):
        template = UriTemplate("projects://{id}")
        assert template.match("projects://abc-123") == {"id": "abc-123"}
        assert template.match("projects://My%20Model") == {"id": "My Model"}

    def test_empty_variable(self):
        assert UriTemplate("projects://{id}").match("projects://") == {"id": ""}

    def test_no_match(self):
        template = UriTemplate("projects://{id}")
        assert template.match("nodes://abc") is None
        assert template.match("projects://a/b") is None

    def test_expand(self):
        template = UriTemplate("textures://{id}")
        assert template.expand(id="t1") == "textures://t1"
        assert template.variables == ["id"]
        assert template.scheme == "textures"


class TestToContent:
    """Handler result conversion"""

    def test_string(self):
        assert to_content("hello") == [types.TextContent(type="text", text="hello")]

    def test_dict(self):
        content = to_content({"a": 1})
        assert json.loads(content[0].text) == {"a": 1}

    def test_content_passthrough(self):
        image = types.ImageContent(type="image", data="AAAA", mimeType="image/png")
        assert to_content(image) == [image]
        assert to_content([image, image]) == [image, image]

    def test_none(self):
        assert to_content(None) == []


class TestToolRegistry:
    """Tool registry"""

    def setup_method(self):
        self.host = InMemoryEditor()
        self.tools = ToolRegistry(self.host, prefix="bench_")

    def test_create_prefixes_name(self):
        tool = self.tools.create("echo", "Echo a message", echo, parameters=ECHO_SCHEMA)
        assert tool.name == "bench_echo"
        assert self.tools.get("echo") is tool
        assert self.tools.get("bench_echo") is tool

    def test_already_prefixed_name_is_kept(self):
        assert self.tools.create("bench_echo", "Echo", echo).name == "bench_echo"

    def test_duplicate_name(self):
        self.tools.create("echo", "Echo", echo)
        with pytest.raises(ValueError):
            self.tools.create("echo", "Echo again", echo)

    def test_invalid_status(self):
        with pytest.raises(ValueError):
            self.tools.create("echo", "Echo", echo, status="beta")

    def test_list_tools(self):
        self.tools.create("echo", "Echo a message", echo, parameters=ECHO_SCHEMA,
                          title="Echo", annotations={"readOnlyHint": True})
        [tool] = self.tools.list_tools()
        assert tool.name == "bench_echo"
        assert tool.inputSchema == ECHO_SCHEMA
        assert tool.annotations.readOnlyHint is True
        assert tool.annotations.title == "Echo"

    @pytest.mark.asyncio
    async def test_call_applies_defaults(self):
        self.tools.create("echo", "Echo", echo, parameters=ECHO_SCHEMA)
        result = await self.tools.call("bench_echo", {"message": "hi"})
        assert not result.isError
        assert result.content[0].text == "hi"

        result = await self.tools.call("echo", {"message": "hi", "times": 3})
        assert result.content[0].text == "hihihi"

    @pytest.mark.asyncio
    async def test_call_async_handler(self):
        async def handler(host, params):
            return {"projects": len(host.list_projects())}

        self.tools.create("count", "Count projects", handler)
        result = await self.tools.call("bench_count", {})
        assert json.loads(result.content[0].text) == {"projects": 0}

    @pytest.mark.asyncio
    async def test_validation_error_is_result(self):
        self.tools.create("echo", "Echo", echo, parameters=ECHO_SCHEMA)
        result = await self.tools.call("bench_echo", {"times": 0})
        assert result.isError
        assert "message" in result.content[0].text
        assert "times" in result.content[0].text

    @pytest.mark.asyncio
    async def test_unknown_tool_is_result(self):
        result = await self.tools.call("bench_missing", {})
        assert result.isError
        assert "Unknown tool" in result.content[0].text

    @pytest.mark.asyncio
    async def test_handler_errors_are_results(self):
        def not_found(host, params):
            raise NotFoundError('Project with name or UUID "x" not found.')

        def crash(host, params):
            raise ZeroDivisionError("division by zero")

        self.tools.create("lookup", "Lookup", not_found)
        self.tools.create("crash", "Crash", crash)

        result = await self.tools.call("bench_lookup")
        assert result.isError
        assert result.content[0].text == 'Project with name or UUID "x" not found.'

        result = await self.tools.call("bench_crash")
        assert result.isError
        assert "division by zero" in result.content[0].text

    @pytest.mark.asyncio
    async def test_disabled_tool(self):
        tools = ToolRegistry(self.host, prefix="bench_", disabled=["echo"])
        tool = tools.create("echo", "Echo", echo, parameters=ECHO_SCHEMA)
        assert not tool.enabled
        assert tools.list_tools() == []

        result = await tools.call("bench_echo", {"message": "hi"})
        assert result.isError

        tools.set_enabled("echo", True)
        result = await tools.call("bench_echo", {"message": "hi"})
        assert not result.isError

    def test_set_enabled_unknown(self):
        with pytest.raises(NotFoundError):
            self.tools.set_enabled("missing", False)


class TestResourceRegistry:
    """Resource registry"""

    def setup_method(self):
        self.host = InMemoryEditor()
        self.resources = ResourceRegistry(self.host)
        self.resources.create(
            "items",
            "items://{id}",
            "Items",
            lambda host, uri, variables: {"uri": uri, "id": variables["id"]},
            list_callback=lambda host: [{"uri": "items://1", "name": "one"}],
        )

    @pytest.mark.asyncio
    async def test_read(self):
        [contents] = await self.resources.read("items://42")
        assert contents.mime_type == "application/json"
        assert json.loads(contents.content) == {"uri": "items://42", "id": "42"}

    @pytest.mark.asyncio
    async def test_unknown_scheme(self):
        with pytest.raises(NotFoundError):
            await self.resources.read("other://42")

    @pytest.mark.asyncio
    async def test_list_resources(self):
        async def failing(host):
            raise HostError("editor busy")

        self.resources.create("broken", "broken://{id}", "Broken", lambda h, u, v: {}, list_callback=failing)
        [resource] = await self.resources.list_resources()
        assert str(resource.uri) == "items://1"
        assert resource.name == "one"
        assert resource.mimeType == "application/json"

    def test_list_templates(self):
        [template] = self.resources.list_templates()
        assert template.uriTemplate == "items://{id}"
        assert template.name == "items"


class TestPromptRegistry:
    """Prompt registry"""

    def setup_method(self):
        self.prompts = PromptRegistry(InMemoryEditor())
        self.prompts.create(
            "greet",
            "Greeting",
            arguments=[PromptArgument("name", required=True), PromptArgument("mood", default="cheerful")],
            template="Say hello to $name in a $mood way.",
        )

    def test_get(self):
        result = self.prompts.get("greet", {"name": "Steve"})
        assert result.messages[0].role == "user"
        assert result.messages[0].content.text == "Say hello to Steve in a cheerful way."

    def test_missing_required_argument(self):
        with pytest.raises(ParameterError):
            self.prompts.get("greet", {})

    def test_unknown_prompt(self):
        with pytest.raises(NotFoundError):
            self.prompts.get("missing")

    def test_needs_template_or_render(self):
        with pytest.raises(ValueError):
            self.prompts.create("empty", "Nothing")

    def test_list_prompts(self):
        [prompt] = self.prompts.list_prompts()
        assert prompt.name == "greet"
        assert [arg.required for arg in prompt.arguments] == [True, False]

    def test_experimental_status(self):
        prompt = self.prompts.create("beta", "Beta", template="x", status=STATUS_EXPERIMENTAL)
        assert prompt.to_dict()["status"] == "experimental"


class TestRegistries:
    """Descriptor export for the UI"""

    def test_describe(self, registries):
        described = registries.describe()
        names = [tool["name"] for tool in described["tools"]]
        assert "bench_capture_screenshot" in names
        assert "bench_create_project" in names
        assert [r["uriTemplate"] for r in described["resources"]] == [
            "projects://{id}", "nodes://{id}", "textures://{id}",
        ]
        assert {p["name"] for p in described["prompts"]} == {"modeling_workflow", "texture_workflow"}

    def test_empty(self):
        described = Registries(InMemoryEditor()).describe()
        assert described == {"tools": [], "resources": [], "prompts": []}
