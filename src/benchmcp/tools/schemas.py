"""
JSON schemas shared by the tool modules
"""

from typing import Any, Dict, List


def vector3(description: str, default: List[float] = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {
        "type": "array",
        "items": {"type": "number"},
        "minItems": 3,
        "maxItems": 3,
        "description": description,
    }
    if default is not None:
        schema["default"] = default
    return schema


PROJECT_PARAM = {
    "type": "string",
    "description": "Project name or UUID. Defaults to the active project.",
}

CUBE_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Name of the cube."},
        "origin": vector3("Pivot point of the cube.", [0, 0, 0]),
        "from": vector3("Starting point of the cube.", [0, 0, 0]),
        "to": vector3("Ending point of the cube.", [1, 1, 1]),
        "rotation": vector3("Rotation of the cube.", [0, 0, 0]),
        "project": PROJECT_PARAM,
    },
    "required": ["name"],
    "additionalProperties": False,
}

MESH_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Name of the mesh."},
        "position": vector3("Position of the mesh.", [0, 0, 0]),
        "rotation": vector3("Rotation of the mesh.", [0, 0, 0]),
        "scale": vector3("Scale of the mesh.", [1, 1, 1]),
        "vertices": {
            "type": "array",
            "items": vector3("Vertex coordinates in the mesh."),
            "description": "Vertices of the mesh.",
            "default": [],
        },
        "project": PROJECT_PARAM,
    },
    "required": ["name"],
    "additionalProperties": False,
}
