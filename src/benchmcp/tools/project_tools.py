"""
benchmcp project tools
"""

import logging

from ..common.constants import STATUS_STABLE
from ..common.errors import HostError

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "bedrock_block"


def create_project(host, params):
    name = params["name"]
    format_id = params["format"]

    project = host.new_project(format_id, name)
    if project is None:
        raise HostError("Failed to create project.")
    project.name = name

    logger.info(f"Created project {name} ({project.uuid})")
    return f'Created project with name "{name}" (UUID: {project.uuid}) and format "{format_id}".'


def register_project_tools(tools):
    """Register the project tools; the format enum is read from the host"""
    formats = sorted(tools.host.list_formats() or {})
    format_schema = {
        "type": "string",
        "description": "Format of the new project.",
        "default": DEFAULT_FORMAT,
    }
    if formats:
        format_schema["enum"] = formats

    tools.create(
        "create_project",
        "Creates a new project with the given name and project type.",
        create_project,
        parameters={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Name of the new project."},
                "format": format_schema,
            },
            "required": ["name"],
        },
        status=STATUS_STABLE,
        title="Create Project",
        annotations={"destructiveHint": True, "openWorldHint": True},
    )
