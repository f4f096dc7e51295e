"""
benchmcp registration factories

Declarative registration of tools, resources and prompts. Each registry is
bound to the host facade that its handlers receive, keeps a descriptor per
entry for the UI, and converts results and failures into MCP types.
"""

import copy
import inspect
import json
import logging
import re
from dataclasses import dataclass, field
from string import Template
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
from urllib.parse import unquote

import jsonschema
from mcp import types
from mcp.server.lowlevel.helper_types import ReadResourceContents

from ..common.constants import DEFAULT_TOOL_PREFIX, JSON_MIME_TYPE, STATUS_STABLE, STATUSES
from ..common.errors import BenchMCPError, NotFoundError, ParameterError
from ..host.facade import HostEditor, call_on_host

logger = logging.getLogger(__name__)

ToolHandler = Callable[[HostEditor, Dict[str, Any]], Union[Any, Awaitable[Any]]]
ReadCallback = Callable[[HostEditor, str, Dict[str, str]], Union[Any, Awaitable[Any]]]
ListCallback = Callable[[HostEditor], Union[List[Dict[str, Any]], Awaitable[List[Dict[str, Any]]]]]

CONTENT_TYPES = (types.TextContent, types.ImageContent, types.AudioContent,
                 types.EmbeddedResource, types.ResourceLink)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def _invoke(host: HostEditor, fn: Callable[..., Any], *args: Any) -> Any:
    """Run a callback on the host's main thread

    Coroutine functions stay on the event loop and reach the host through
    ``call_on_host()`` themselves.
    """
    if inspect.iscoroutinefunction(fn):
        return await fn(*args)
    return await _maybe_await(await call_on_host(host, fn, *args))


def _check_status(status: str) -> str:
    if status not in STATUSES:
        raise ValueError(f"Unknown status {status!r}, expected one of {', '.join(STATUSES)}")
    return status


def to_content(result: Any) -> List[Any]:
    """Convert a handler result into a list of MCP content blocks"""
    if result is None:
        return []
    if isinstance(result, CONTENT_TYPES):
        return [result]
    if isinstance(result, str):
        return [types.TextContent(type="text", text=result)]
    if isinstance(result, (list, tuple)) and result and all(isinstance(item, CONTENT_TYPES) for item in result):
        return list(result)
    return [types.TextContent(type="text", text=json.dumps(result, default=str))]


def error_result(message: str) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=message)],
        isError=True,
    )


class UriTemplate:
    """Level-1 URI template such as ``projects://{id}``

    Variables match anything but ``/``, ``?`` and ``#`` and may be empty.
    """

    _VARIABLE = re.compile(r"\{(\w+)\}")

    def __init__(self, template: str):
        self.template = template
        self.variables = self._VARIABLE.findall(template)
        pattern = ""
        position = 0
        for match in self._VARIABLE.finditer(template):
            pattern += re.escape(template[position:match.start()])
            pattern += f"(?P<{match.group(1)}>[^/?#]*)"
            position = match.end()
        pattern += re.escape(template[position:])
        self._regex = re.compile(f"^{pattern}$")

    @property
    def scheme(self) -> str:
        return self.template.split("://", 1)[0]

    def match(self, uri: str) -> Optional[Dict[str, str]]:
        match = self._regex.match(uri)
        if match is None:
            return None
        return {name: unquote(value) for name, value in match.groupdict().items()}

    def expand(self, **values: str) -> str:
        return self._VARIABLE.sub(lambda m: str(values.get(m.group(1), "")), self.template)

    def __repr__(self) -> str:
        return f"UriTemplate({self.template!r})"


@dataclass
class ToolDescriptor:
    """A registered tool and its input schema"""
    name: str
    description: str
    handler: ToolHandler
    input_schema: Dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})
    title: Optional[str] = None
    status: str = STATUS_STABLE
    enabled: bool = True
    annotations: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "enabled": self.enabled,
            "status": self.status,
        }

    def to_mcp(self) -> types.Tool:
        annotations = types.ToolAnnotations(title=self.title, **self.annotations)
        return types.Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema=self.input_schema,
            annotations=annotations,
        )

    def apply_defaults(self, params: Dict[str, Any]) -> Dict[str, Any]:
        filled = dict(params)
        for key, prop in self.input_schema.get("properties", {}).items():
            if key not in filled and isinstance(prop, dict) and "default" in prop:
                filled[key] = copy.deepcopy(prop["default"])
        return filled

    def validate_params(self, params: Dict[str, Any]) -> None:
        """Validate ``params`` against the input schema

        Raises:
            ParameterError: listing every violation
        """
        validator = jsonschema.Draft7Validator(self.input_schema)
        errors = sorted(validator.iter_errors(params), key=lambda e: list(e.path))
        if errors:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in error.path) or '<arguments>'}: {error.message}"
                for error in errors
            )
            raise ParameterError(f"Invalid arguments for {self.name}: {problems}")


class ToolRegistry:
    """Tools exposed to MCP clients

    Args:
        host: facade passed to every handler
        prefix: prepended to tool names that do not carry it yet
        disabled: names (with or without prefix) registered as disabled
    """

    def __init__(self, host: HostEditor, prefix: str = DEFAULT_TOOL_PREFIX,
                 disabled: Optional[List[str]] = None):
        self.host = host
        self.prefix = prefix
        self.disabled = set(disabled or [])
        self._tools: Dict[str, ToolDescriptor] = {}

    def qualify(self, name: str) -> str:
        if self.prefix and not name.startswith(self.prefix):
            return f"{self.prefix}{name}"
        return name

    def create(self, name: str, description: str, handler: ToolHandler,
               parameters: Optional[Dict[str, Any]] = None, status: str = STATUS_STABLE,
               title: Optional[str] = None, annotations: Optional[Dict[str, Any]] = None) -> ToolDescriptor:
        """Register a tool

        Args:
            name: tool name, prefixed when needed
            description: shown to the client
            handler: ``handler(host, params)``, sync or async
            parameters: JSON schema of the arguments object
            status: stable or experimental
            title: human readable name
            annotations: MCP tool hints (readOnlyHint, destructiveHint ...)

        Returns:
            the registered descriptor
        """
        qualified = self.qualify(name)
        if qualified in self._tools:
            raise ValueError(f"Tool already registered: {qualified}")

        schema = parameters or {"type": "object", "properties": {}}
        jsonschema.Draft7Validator.check_schema(schema)

        descriptor = ToolDescriptor(
            name=qualified,
            description=description,
            handler=handler,
            input_schema=schema,
            title=title,
            status=_check_status(status),
            enabled=not ({name, qualified} & self.disabled),
            annotations=dict(annotations or {}),
        )
        self._tools[qualified] = descriptor
        logger.debug(f"Registered tool: {qualified}")
        return descriptor

    def get(self, name: str) -> Optional[ToolDescriptor]:
        return self._tools.get(name) or self._tools.get(self.qualify(name))

    def set_enabled(self, name: str, enabled: bool) -> None:
        descriptor = self.get(name)
        if descriptor is None:
            raise NotFoundError(f"Tool {name!r} not found.")
        descriptor.enabled = enabled

    def all(self) -> List[ToolDescriptor]:
        return list(self._tools.values())

    def list_tools(self) -> List[types.Tool]:
        return [tool.to_mcp() for tool in self._tools.values() if tool.enabled]

    async def call(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> types.CallToolResult:
        """Run a tool; every failure is returned as an error result"""
        descriptor = self.get(name)
        if descriptor is None or not descriptor.enabled:
            return error_result(f"Unknown tool: {name}")

        try:
            params = descriptor.apply_defaults(arguments or {})
            descriptor.validate_params(params)
            result = await _invoke(self.host, descriptor.handler, self.host, params)
            return types.CallToolResult(content=to_content(result), isError=False)
        except BenchMCPError as e:
            logger.warning(f"Tool {descriptor.name} failed: {e}")
            return error_result(str(e))
        except Exception as e:
            logger.exception(f"Tool {descriptor.name} raised: {e}")
            return error_result(f"Tool execution error: {e}")


@dataclass
class ResourceDescriptor:
    name: str
    uri_template: UriTemplate
    description: str
    read_callback: ReadCallback
    list_callback: Optional[ListCallback] = None
    title: Optional[str] = None
    mime_type: str = JSON_MIME_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "uriTemplate": self.uri_template.template,
        }

    def to_mcp(self) -> types.ResourceTemplate:
        return types.ResourceTemplate(
            uriTemplate=self.uri_template.template,
            name=self.name,
            title=self.title,
            description=self.description,
            mimeType=self.mime_type,
        )


class ResourceRegistry:
    """URI-addressable read-only views over the host"""

    def __init__(self, host: HostEditor):
        self.host = host
        self._resources: Dict[str, ResourceDescriptor] = {}

    def create(self, name: str, uri_template: str, description: str, read_callback: ReadCallback,
               list_callback: Optional[ListCallback] = None, title: Optional[str] = None,
               mime_type: str = JSON_MIME_TYPE) -> ResourceDescriptor:
        if name in self._resources:
            raise ValueError(f"Resource already registered: {name}")
        descriptor = ResourceDescriptor(
            name=name,
            uri_template=UriTemplate(uri_template),
            description=description,
            read_callback=read_callback,
            list_callback=list_callback,
            title=title,
            mime_type=mime_type,
        )
        self._resources[name] = descriptor
        logger.debug(f"Registered resource: {name} ({uri_template})")
        return descriptor

    def get(self, name: str) -> Optional[ResourceDescriptor]:
        return self._resources.get(name)

    def all(self) -> List[ResourceDescriptor]:
        return list(self._resources.values())

    def list_templates(self) -> List[types.ResourceTemplate]:
        return [resource.to_mcp() for resource in self._resources.values()]

    async def list_resources(self) -> List[types.Resource]:
        resources: List[types.Resource] = []
        for descriptor in self._resources.values():
            if descriptor.list_callback is None:
                continue
            try:
                entries = await _invoke(self.host, descriptor.list_callback, self.host)
            except Exception as e:
                logger.error(f"Listing {descriptor.name} failed: {e}", exc_info=True)
                continue
            for entry in entries or []:
                resources.append(types.Resource(
                    uri=entry["uri"],
                    name=entry.get("name") or entry["uri"],
                    description=entry.get("description"),
                    mimeType=entry.get("mimeType", descriptor.mime_type),
                ))
        return resources

    def resolve(self, uri: str) -> Optional[tuple]:
        for descriptor in self._resources.values():
            variables = descriptor.uri_template.match(uri)
            if variables is not None:
                return descriptor, variables
        return None

    async def read(self, uri: str) -> List[ReadResourceContents]:
        """Read a resource

        Raises:
            NotFoundError: no template matches or the referenced object is missing
        """
        resolved = self.resolve(uri)
        if resolved is None:
            raise NotFoundError(f"Unknown resource: {uri}")
        descriptor, variables = resolved

        result = await _invoke(self.host, descriptor.read_callback, self.host, uri, variables)
        text = result if isinstance(result, str) else json.dumps(result, default=str)
        return [ReadResourceContents(content=text, mime_type=descriptor.mime_type)]


@dataclass
class PromptArgument:
    name: str
    description: str = ""
    required: bool = False
    default: str = ""


@dataclass
class PromptDescriptor:
    name: str
    description: str
    arguments: List[PromptArgument] = field(default_factory=list)
    template: Optional[str] = None
    render: Optional[Callable[[HostEditor, Dict[str, str]], str]] = None
    status: str = STATUS_STABLE
    enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "enabled": self.enabled,
            "status": self.status,
            "argumentCount": len(self.arguments),
        }

    def to_mcp(self) -> types.Prompt:
        return types.Prompt(
            name=self.name,
            description=self.description,
            arguments=[
                types.PromptArgument(name=arg.name, description=arg.description, required=arg.required)
                for arg in self.arguments
            ],
        )


class PromptRegistry:
    """Prompt templates offered to the client"""

    def __init__(self, host: HostEditor):
        self.host = host
        self._prompts: Dict[str, PromptDescriptor] = {}

    def create(self, name: str, description: str, arguments: Optional[List[PromptArgument]] = None,
               template: Optional[str] = None,
               render: Optional[Callable[[HostEditor, Dict[str, str]], str]] = None,
               status: str = STATUS_STABLE) -> PromptDescriptor:
        if name in self._prompts:
            raise ValueError(f"Prompt already registered: {name}")
        if (template is None) == (render is None):
            raise ValueError("A prompt needs exactly one of template or render")
        descriptor = PromptDescriptor(
            name=name,
            description=description,
            arguments=list(arguments or []),
            template=template,
            render=render,
            status=_check_status(status),
        )
        self._prompts[name] = descriptor
        logger.debug(f"Registered prompt: {name}")
        return descriptor

    def get_descriptor(self, name: str) -> Optional[PromptDescriptor]:
        return self._prompts.get(name)

    def all(self) -> List[PromptDescriptor]:
        return list(self._prompts.values())

    def list_prompts(self) -> List[types.Prompt]:
        return [prompt.to_mcp() for prompt in self._prompts.values() if prompt.enabled]

    def get(self, name: str, arguments: Optional[Dict[str, str]] = None) -> types.GetPromptResult:
        descriptor = self._prompts.get(name)
        if descriptor is None or not descriptor.enabled:
            raise NotFoundError(f"Prompt {name!r} not found.")

        arguments = dict(arguments or {})
        missing = [arg.name for arg in descriptor.arguments if arg.required and not arguments.get(arg.name)]
        if missing:
            raise ParameterError(f"Missing required arguments for {name}: {', '.join(missing)}")
        for arg in descriptor.arguments:
            if not arguments.get(arg.name):
                arguments[arg.name] = arg.default

        if descriptor.render is not None:
            text = descriptor.render(self.host, arguments)
        else:
            text = Template(descriptor.template).safe_substitute(arguments)

        return types.GetPromptResult(
            description=descriptor.description,
            messages=[types.PromptMessage(role="user", content=types.TextContent(type="text", text=text))],
        )


class Registries:
    """The tool, resource and prompt registries of one plugin instance"""

    def __init__(self, host: HostEditor, tool_prefix: str = DEFAULT_TOOL_PREFIX,
                 disabled_tools: Optional[List[str]] = None):
        self.host = host
        self.tools = ToolRegistry(host, prefix=tool_prefix, disabled=disabled_tools)
        self.resources = ResourceRegistry(host)
        self.prompts = PromptRegistry(host)

    def describe(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "tools": [tool.to_dict() for tool in self.tools.all()],
            "resources": [resource.to_dict() for resource in self.resources.all()],
            "prompts": [prompt.to_dict() for prompt in self.prompts.all()],
        }
