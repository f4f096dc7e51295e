"""
benchmcp element tools

Place cubes and meshes in a project.
"""

import logging

from ..common.constants import STATUS_EXPERIMENTAL
from .schemas import CUBE_SCHEMA, MESH_SCHEMA
from .utils import require_project

logger = logging.getLogger(__name__)


def _node_summary(node):
    return {
        "uuid": node.uuid,
        "name": node.name,
        "type": node.type,
        "position": list(node.position),
        "rotation": list(node.rotation),
        "scale": list(node.scale),
    }


def place_cube(host, params):
    project = require_project(host, params.pop("project", None))
    node = host.add_cube(project, params)
    logger.info(f"Placed cube {node.name} in {project.name}")
    return _node_summary(node)


def place_mesh(host, params):
    project = require_project(host, params.pop("project", None))
    node = host.add_mesh(project, params)
    logger.info(f"Placed mesh {node.name} in {project.name}")
    return _node_summary(node)


def register_element_tools(tools):
    tools.create(
        "place_cube",
        "Adds a cube element to a project.",
        place_cube,
        parameters=CUBE_SCHEMA,
        status=STATUS_EXPERIMENTAL,
        title="Place Cube",
        annotations={"destructiveHint": True},
    )
    tools.create(
        "place_mesh",
        "Adds a mesh element to a project.",
        place_mesh,
        parameters=MESH_SCHEMA,
        status=STATUS_EXPERIMENTAL,
        title="Place Mesh",
        annotations={"destructiveHint": True},
    )
