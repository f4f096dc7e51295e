"""
benchmcp in-memory host

A self-contained ``HostEditor`` used when no editor is attached (simulation
mode for the standalone server) and as the fake host in tests.
"""

import logging
from typing import Any, Dict, List, Optional

from .dispatch import MainThreadDispatcher
from .facade import HostEditor
from .model import Codec, Format, Node, Preview, Project, Texture

logger = logging.getLogger(__name__)

# 1x1 transparent PNG
BLANK_PNG_DATA_URL = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

DEFAULT_FORMATS = {
    "bedrock_block": Format(id="bedrock_block", name="Bedrock Block"),
    "bedrock": Format(id="bedrock", name="Bedrock Entity"),
    "java_block": Format(id="java_block", name="Java Block/Item"),
    "free": Format(id="free", name="Generic Model"),
}


class InMemoryEditor(HostEditor):
    """Host editor kept entirely in Python objects"""

    name = "memory"

    def __init__(self, formats: Optional[Dict[str, Format]] = None,
                 dispatcher: Optional[MainThreadDispatcher] = None):
        self.dispatcher = dispatcher
        self.formats: Dict[str, Format] = dict(formats or DEFAULT_FORMATS)
        self.projects: List[Project] = []
        self.current: Optional[Project] = None
        self.preview: Optional[Preview] = Preview()
        self.screenshots: List[Optional[str]] = []
        self.panels: List[Any] = []
        self.codecs: Dict[str, Codec] = {
            "bedrock": Codec(id="bedrock", name="Bedrock Geometry", parse=self._parse_bedrock),
        }

    # projects

    def list_projects(self) -> List[Project]:
        return list(self.projects)

    def active_project(self) -> Optional[Project]:
        return self.current

    def list_formats(self) -> Dict[str, Format]:
        return dict(self.formats)

    def new_project(self, format_id: str, name: str) -> Optional[Project]:
        fmt = self.formats.get(format_id)
        if fmt is None:
            return None
        project = Project(name=name, format=fmt, saved=False)
        self.add_project(project)
        return project

    def add_project(self, project: Project) -> Project:
        """Add ``project`` and make it the active one"""
        self.projects.append(project)
        self.select_project(project)
        return project

    def select_project(self, project: Project) -> None:
        for other in self.projects:
            other.selected = other is project
        self.current = project

    # scene graph

    def nodes(self, project: Optional[Project] = None) -> Dict[str, Node]:
        project = project or self.current
        if project is None:
            return {}
        return project.nodes_3d

    def textures(self, project: Optional[Project] = None) -> List[Texture]:
        project = project or self.current
        if project is None:
            return []
        return list(project.textures)

    def add_cube(self, project: Project, cube: Dict[str, Any]) -> Node:
        node = Node(
            name=cube["name"],
            type="cube",
            position=list(cube.get("origin", [0, 0, 0])),
            rotation=list(cube.get("rotation", [0, 0, 0])),
            attributes={"from": list(cube.get("from", [0, 0, 0])), "to": list(cube.get("to", [1, 1, 1]))},
        )
        project.saved = False
        return project.add_node(node)

    def add_mesh(self, project: Project, mesh: Dict[str, Any]) -> Node:
        node = Node(
            name=mesh["name"],
            type="mesh",
            position=list(mesh.get("position", [0, 0, 0])),
            rotation=list(mesh.get("rotation", [0, 0, 0])),
            scale=list(mesh.get("scale", [1, 1, 1])),
            attributes={"vertices": [list(v) for v in mesh.get("vertices", [])]},
        )
        project.saved = False
        return project.add_node(node)

    # camera & screenshots

    def selected_preview(self) -> Optional[Preview]:
        return self.preview

    def capture_screenshot(self, project: Optional[Project] = None) -> str:
        if project is not None and project is not self.current:
            self.select_project(project)
        self.screenshots.append(project.uuid if project else None)
        return BLANK_PNG_DATA_URL

    def capture_app_screenshot(self) -> str:
        self.screenshots.append("app")
        return BLANK_PNG_DATA_URL

    # codecs

    def get_codec(self, codec_id: str) -> Optional[Codec]:
        return self.codecs.get(codec_id)

    def _parse_bedrock(self, data: Any, path: str) -> None:
        """Load ``minecraft:geometry`` bones and cubes into the active project"""
        if not isinstance(data, dict) or "minecraft:geometry" not in data:
            raise ValueError("Not a bedrock geometry file: missing 'minecraft:geometry'")

        project = self.current
        if project is None:
            project = self.add_project(Project(name="imported", format=self.formats.get("bedrock")))

        for geometry in data["minecraft:geometry"]:
            for bone in geometry.get("bones", []):
                group = project.add_node(Node(
                    name=bone.get("name", "bone"),
                    type="group",
                    position=list(bone.get("pivot", [0, 0, 0])),
                    rotation=list(bone.get("rotation", [0, 0, 0])),
                ))
                for index, cube in enumerate(bone.get("cubes", [])):
                    origin = cube.get("origin", [0, 0, 0])
                    size = cube.get("size", [1, 1, 1])
                    self.add_cube(project, {
                        "name": f"{group.name}_{index}",
                        "origin": cube.get("pivot", origin),
                        "from": origin,
                        "to": [o + s for o, s in zip(origin, size)],
                        "rotation": cube.get("rotation", [0, 0, 0]),
                    })
        logger.info(f"Imported bedrock geometry into {project.name}")

    # UI integration

    def show_panel(self, panel: Any) -> None:
        self.panels.append(panel)

    def hide_panel(self, panel: Any) -> None:
        if panel in self.panels:
            self.panels.remove(panel)


def demo_editor() -> InMemoryEditor:
    """In-memory host with one small project, used by the standalone server"""
    editor = InMemoryEditor()
    project = editor.add_project(Project(
        name="demo",
        format=editor.formats["bedrock_block"],
        model_identifier="demo:block",
    ))
    editor.add_cube(project, {"name": "base", "from": [0, 0, 0], "to": [16, 8, 16]})
    project.textures.append(Texture(name="demo.png", width=16, height=16, saved=True))
    project.saved = True
    return editor
