"""
benchmcp host facade

The narrow capability interface every tool, resource and prompt handler
receives. A host integration subclasses ``HostEditor`` and forwards each
call to the editor's own object model; tests use the in-memory host.

Handlers run through ``run_on_main()``. Hosts bound to a UI thread attach a
``MainThreadDispatcher`` and drain it from that thread; without one, calls
run directly on the server's event loop.
"""

import asyncio
from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Optional

from .dispatch import MainThreadDispatcher, run_into_future
from .model import CameraAngle, Codec, Format, Node, Preview, Project, Texture


class HostEditor:
    """Capability interface over the host editor"""

    name = "host"

    # set by hosts whose object model is bound to their main thread
    dispatcher: Optional[MainThreadDispatcher] = None

    def run_on_main(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Schedule ``fn(*args)`` on the host's main thread

        Returns:
            future of the result, already resolved when no dispatcher is attached
        """
        if self.dispatcher is not None:
            return self.dispatcher.submit(fn, *args)
        future: Future = Future()
        run_into_future(future, fn, args)
        return future

    # projects

    def list_projects(self) -> List[Project]:
        raise NotImplementedError

    def active_project(self) -> Optional[Project]:
        raise NotImplementedError

    def list_formats(self) -> Dict[str, Format]:
        raise NotImplementedError

    def new_project(self, format_id: str, name: str) -> Optional[Project]:
        """Create a project, make it the active one and return it (None on failure)"""
        raise NotImplementedError

    # scene graph

    def nodes(self, project: Optional[Project] = None) -> Dict[str, Node]:
        """Node lookup table of ``project`` (default: active project)"""
        raise NotImplementedError

    def textures(self, project: Optional[Project] = None) -> List[Texture]:
        raise NotImplementedError

    def add_cube(self, project: Project, cube: Dict[str, Any]) -> Node:
        raise NotImplementedError

    def add_mesh(self, project: Project, mesh: Dict[str, Any]) -> Node:
        raise NotImplementedError

    # camera & screenshots

    def selected_preview(self) -> Optional[Preview]:
        raise NotImplementedError

    def set_camera_angle(self, preview: Preview, angle: CameraAngle) -> None:
        preview.load_angle_preset(angle)

    def capture_screenshot(self, project: Optional[Project] = None) -> str:
        """Screenshot of the viewport as a ``data:image/png;base64,...`` URL"""
        raise NotImplementedError

    def capture_app_screenshot(self) -> str:
        """Screenshot of the whole application window as a data URL"""
        raise NotImplementedError

    # codecs

    def get_codec(self, codec_id: str) -> Optional[Codec]:
        raise NotImplementedError

    # UI integration, optional

    def show_panel(self, panel: Any) -> None:
        pass

    def hide_panel(self, panel: Any) -> None:
        pass


def find_project(host: HostEditor, project_id: str) -> Optional[Project]:
    """Find a project by UUID or name, falling back to a case-insensitive name match

    Project ids taken from a URI host arrive lower-cased.
    """
    projects = host.list_projects() or []
    for project in projects:
        if project.uuid == project_id or project.name == project_id:
            return project
    lowered = project_id.lower()
    for project in projects:
        if (project.name or "").lower() == lowered:
            return project
    return None


async def call_on_host(host: HostEditor, fn: Callable[..., Any], *args: Any) -> Any:
    """Await ``fn(*args)`` run on the host's main thread"""
    return await asyncio.wrap_future(host.run_on_main(fn, *args))
