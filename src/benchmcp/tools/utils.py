"""
benchmcp tool helpers

Shared helpers for the tool modules: screenshot conversion, project lookup
and GeoJSON loading.
"""

import base64
import binascii
import json
import logging
import os
from typing import Any, Optional
from urllib.parse import unquote_to_bytes

import aiohttp
from mcp import types

from ..common.constants import PNG_MIME_TYPE
from ..common.errors import HostError, NotFoundError, ParameterError
from ..host.facade import HostEditor, find_project
from ..host.model import Project

logger = logging.getLogger(__name__)


def split_data_url(url: str) -> tuple:
    """Split a ``data:`` URL into (mime type, payload bytes)"""
    if not url.startswith("data:") or "," not in url:
        raise ParameterError("Not a data URL")
    header, payload = url[5:].split(",", 1)
    parts = header.split(";")
    mime_type = parts[0] or "text/plain"
    if "base64" in parts[1:]:
        try:
            return mime_type, base64.b64decode(payload, validate=True)
        except binascii.Error as e:
            raise ParameterError(f"Invalid base64 payload in data URL: {e}") from e
    return mime_type, unquote_to_bytes(payload)


def image_content(data_url: Optional[str]) -> types.ImageContent:
    """Turn a screenshot data URL from the host into MCP image content"""
    if not data_url:
        raise HostError("The host returned no screenshot")
    if not data_url.startswith("data:"):
        raise HostError("The host returned a screenshot that is not a data URL")
    mime_type, payload = split_data_url(data_url)
    return types.ImageContent(
        type="image",
        data=base64.b64encode(payload).decode("ascii"),
        mimeType=mime_type or PNG_MIME_TYPE,
    )


def resolve_project(host: HostEditor, project_id: Optional[str]) -> Optional[Project]:
    """Project named by ``project_id``, or the active project when it is empty

    Raises:
        NotFoundError: ``project_id`` names no project
    """
    if not project_id:
        return host.active_project()
    project = find_project(host, project_id)
    if project is None:
        raise NotFoundError(f'Project with name or UUID "{project_id}" not found.')
    return project


def require_project(host: HostEditor, project_id: Optional[str]) -> Project:
    project = resolve_project(host, project_id)
    if project is None:
        raise NotFoundError("No active project.")
    return project


async def fetch_text(url: str, timeout: float = 30) -> str:
    """GET ``url`` and return the body as text"""
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(url) as response:
                response.raise_for_status()
                return await response.text()
    except aiohttp.ClientError as e:
        raise HostError(f"Failed to fetch {url}: {e}") from e


async def load_geojson(source: str, timeout: float = 30) -> Any:
    """Load GeoJSON given inline, as a data URL, an http(s) URL or a file path"""
    text = source.strip()
    if not text.startswith(("{", "[")):
        if text.startswith("data:"):
            _, payload = split_data_url(text)
            text = payload.decode("utf-8")
        elif text.startswith(("http://", "https://")):
            logger.info(f"Fetching GeoJSON from {text}")
            text = await fetch_text(text, timeout)
        else:
            path = text[7:] if text.startswith("file://") else text
            if not os.path.isfile(path):
                raise NotFoundError(f"GeoJSON file not found: {path}")
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParameterError(f"Invalid GeoJSON: {e}") from e
