"""
benchmcp host object model

Attribute shape of the host editor objects that benchmcp reads. Real hosts
may hand out their own objects as long as they expose the same attributes;
the in-memory host uses these dataclasses directly.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


def new_uuid() -> str:
    return str(uuid.uuid4())


@dataclass
class Format:
    """A model format the host can create projects in"""
    id: str
    name: str


@dataclass
class Node:
    """A 3D node (cube, mesh, group, locator ...) in a project"""
    name: str
    type: str = "cube"
    uuid: str = field(default_factory=new_uuid)
    position: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    rotation: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    scale: List[float] = field(default_factory=lambda: [1.0, 1.0, 1.0])
    visibility: bool = True
    # Type specific properties, e.g. cube bounds or mesh vertices
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Texture:
    name: str
    uuid: str = field(default_factory=new_uuid)
    id: str = "0"
    width: int = 16
    height: int = 16
    frame_count: int = 1
    ratio: float = 1.0
    path: Optional[str] = None
    folder: Optional[str] = None
    namespace: Optional[str] = None
    particle: bool = False
    render_mode: str = "default"
    render_sides: str = "auto"
    visible: bool = True
    saved: bool = False
    selected: bool = False
    source: Optional[str] = None


@dataclass
class Project:
    name: str
    format: Optional[Format] = None
    uuid: str = field(default_factory=new_uuid)
    selected: bool = False
    saved: bool = True
    box_uv: bool = True
    texture_width: int = 16
    texture_height: int = 16
    save_path: str = ""
    export_path: str = ""
    model_identifier: str = ""
    geometry_name: str = ""
    elements: List[Node] = field(default_factory=list)
    groups: List[Node] = field(default_factory=list)
    textures: List[Texture] = field(default_factory=list)
    animations: List[Any] = field(default_factory=list)
    # Keyed by node uuid, mirrors the host's scene graph lookup table
    nodes_3d: Dict[str, Node] = field(default_factory=dict)

    def add_node(self, node: Node) -> Node:
        self.nodes_3d[node.uuid] = node
        if node.type == "group":
            self.groups.append(node)
        else:
            self.elements.append(node)
        return node


@dataclass
class Codec:
    """Import/export codec; ``parse`` loads model data into the active project"""
    id: str
    name: str
    parse: Optional[Callable[[Any, str], None]] = None


@dataclass
class CameraAngle:
    position: List[float]
    projection: str = "unset"
    target: Optional[List[float]] = None
    rotation: Optional[List[float]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"position": list(self.position), "projection": self.projection}
        if self.target is not None:
            data["target"] = list(self.target)
        if self.rotation is not None:
            data["rotation"] = list(self.rotation)
        return data


class Preview:
    """A viewport whose camera can be repositioned"""

    def __init__(self, id: str = "main"):
        self.id = id
        self.angle: Optional[CameraAngle] = None

    def load_angle_preset(self, angle: CameraAngle) -> None:
        self.angle = angle
