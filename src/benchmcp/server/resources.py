"""
benchmcp resources

Read-only JSON views of the host's projects, nodes and textures.
"""

import logging
from typing import Any, Dict, List

from ..common.constants import JSON_MIME_TYPE
from ..common.errors import NotFoundError
from ..host.facade import find_project

logger = logging.getLogger(__name__)


def project_info(project) -> Dict[str, Any]:
    fmt = getattr(project, "format", None)
    return {
        "uuid": project.uuid,
        "name": project.name,
        "selected": project.selected,
        "saved": project.saved,
        "format": fmt.id if fmt else None,
        "formatName": fmt.name if fmt else None,
        "boxUv": project.box_uv,
        "textureWidth": project.texture_width,
        "textureHeight": project.texture_height,
        "savePath": project.save_path or None,
        "exportPath": project.export_path or None,
        "elementCount": len(project.elements or []),
        "groupCount": len(project.groups or []),
        "textureCount": len(project.textures or []),
        "animationCount": len(project.animations or []),
        "modelIdentifier": project.model_identifier or None,
        "geometryName": project.geometry_name or None,
    }


def node_info(node) -> Dict[str, Any]:
    info = dict(getattr(node, "attributes", None) or {})
    info.update({
        "uuid": node.uuid,
        "name": node.name,
        "type": node.type,
        "visibility": node.visibility,
        "position": list(node.position),
        "rotation": list(node.rotation),
        "scale": list(node.scale),
    })
    return info


def texture_info(texture) -> Dict[str, Any]:
    return {
        "uuid": texture.uuid,
        "name": texture.name,
        "id": texture.id,
        "width": texture.width,
        "height": texture.height,
        "frameCount": texture.frame_count,
        "ratio": texture.ratio,
        "path": texture.path or None,
        "folder": texture.folder or None,
        "namespace": texture.namespace or None,
        "particle": bool(texture.particle),
        "render_mode": texture.render_mode or "default",
        "render_sides": texture.render_sides or "auto",
        "visible": texture.visible,
        "saved": bool(texture.saved),
        "selected": bool(texture.selected),
        "source": texture.source or None,
    }


# projects://{id}

def list_projects(host) -> List[Dict[str, Any]]:
    resources = []
    for project in host.list_projects() or []:
        fmt = project.format.name if project.format else "Unknown format"
        resources.append({
            "uri": f"projects://{project.uuid}",
            "name": project.name or project.uuid,
            "description": f"{fmt} project{'' if project.saved else ' (unsaved)'}",
            "mimeType": JSON_MIME_TYPE,
        })
    return resources


def read_projects(host, uri, variables):
    project_id = variables.get("id")
    if project_id:
        project = find_project(host, project_id)
        if project is None:
            raise NotFoundError(f'Project with ID "{project_id}" not found.')
        return project_info(project)

    projects = host.list_projects() or []
    active = host.active_project()
    return {
        "projects": [project_info(project) for project in projects],
        "count": len(projects),
        "activeProject": active.uuid if active else None,
    }


# nodes://{id}

def list_nodes(host) -> List[Dict[str, Any]]:
    if host.active_project() is None:
        return []
    return [
        {
            "uri": f"nodes://{node.uuid}",
            "name": node.name or node.uuid,
            "description": "3D node in current project",
            "mimeType": JSON_MIME_TYPE,
        }
        for node in host.nodes().values()
    ]


def read_nodes(host, uri, variables):
    if host.active_project() is None:
        raise NotFoundError("No nodes found: there is no active project.")
    nodes = host.nodes()

    node_id = variables.get("id")
    if not node_id:
        return {"nodes": [node_info(node) for node in nodes.values()], "count": len(nodes)}

    node = nodes.get(node_id)
    if node is None:
        node = next((n for n in nodes.values() if node_id in (n.name, n.uuid)), None)
    if node is None:
        raise NotFoundError(f'Node with ID "{node_id}" not found.')
    return node_info(node)


# textures://{id}

def list_textures(host) -> List[Dict[str, Any]]:
    return [
        {
            "uri": f"textures://{texture.uuid}",
            "name": texture.name or texture.uuid,
            "description": f"Texture from {texture.path}" if texture.path else "Embedded texture",
            "mimeType": JSON_MIME_TYPE,
        }
        for texture in host.textures()
    ]


def read_textures(host, uri, variables):
    textures = host.textures()

    texture_id = variables.get("id")
    if not texture_id:
        return {"textures": [texture_info(texture) for texture in textures], "count": len(textures)}

    for texture in textures:
        if texture_id in (texture.uuid, texture.name, texture.id):
            return texture_info(texture)
    raise NotFoundError(f'Texture with ID "{texture_id}" not found.')


def register_resources(resources):
    """Register the project, node and texture resources on a ``ResourceRegistry``"""
    resources.create(
        "projects",
        "projects://{id}",
        "Returns information about available projects. Use without an ID to list all "
        "projects, or provide a project UUID/name to get details about a specific project.",
        read_projects,
        list_callback=list_projects,
        title="Projects",
    )
    resources.create(
        "nodes",
        "nodes://{id}",
        "Returns the current nodes in the editor.",
        read_nodes,
        list_callback=list_nodes,
        title="Nodes",
    )
    resources.create(
        "textures",
        "textures://{id}",
        "Returns information about textures in the current project. Use without an ID to "
        "list all textures, or provide a texture UUID/name to get details about a specific texture.",
        read_textures,
        list_callback=list_textures,
        title="Textures",
    )
    logger.info("Registered resources: projects, nodes, textures")
