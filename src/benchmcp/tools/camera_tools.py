"""
benchmcp camera tools

Screenshots of the viewport and the application, and camera placement.
"""

import logging

from ..common.constants import STATUS_EXPERIMENTAL, STATUS_STABLE
from ..common.errors import HostError
from ..host.model import CameraAngle
from .schemas import PROJECT_PARAM, vector3
from .utils import image_content, resolve_project

logger = logging.getLogger(__name__)

PROJECTIONS = ["unset", "orthographic", "perspective"]


def capture_screenshot(host, params):
    project = resolve_project(host, params.get("project"))
    return image_content(host.capture_screenshot(project))


def capture_app_screenshot(host, params):
    return image_content(host.capture_app_screenshot())


def set_camera_angle(host, params):
    preview = host.selected_preview()
    if preview is None:
        raise HostError("No preview found in the editor.")

    angle = CameraAngle(
        position=params["position"],
        projection=params["projection"],
        target=params.get("target"),
        rotation=params.get("rotation"),
    )
    host.set_camera_angle(preview, angle)
    logger.debug(f"Camera angle set: {angle.to_dict()}")
    return image_content(host.capture_screenshot())


def register_camera_tools(tools):
    """Register the camera tools on a ``ToolRegistry``"""
    tools.create(
        "capture_screenshot",
        "Returns the image data of the current view.",
        capture_screenshot,
        parameters={
            "type": "object",
            "properties": {"project": PROJECT_PARAM},
        },
        status=STATUS_STABLE,
        title="Capture Screenshot",
        annotations={"readOnlyHint": True},
    )

    tools.create(
        "capture_app_screenshot",
        "Returns the image data of the editor application.",
        capture_app_screenshot,
        status=STATUS_STABLE,
        title="Capture App Screenshot",
        annotations={"readOnlyHint": True},
    )

    tools.create(
        "set_camera_angle",
        "Sets the camera angle to the specified value.",
        set_camera_angle,
        parameters={
            "type": "object",
            "properties": {
                "position": vector3("Camera position."),
                "target": vector3("Camera target position."),
                "rotation": vector3("Camera rotation."),
                "projection": {
                    "type": "string",
                    "enum": PROJECTIONS,
                    "description": "Camera projection type.",
                },
            },
            "required": ["position", "projection"],
        },
        status=STATUS_EXPERIMENTAL,
        title="Set Camera Angle",
        annotations={"destructiveHint": True},
    )
