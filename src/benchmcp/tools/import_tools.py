"""
benchmcp import tools
"""

import asyncio
import logging

from ..common.constants import STATUS_STABLE
from ..common.errors import HostError
from ..host.facade import call_on_host
from .utils import image_content, load_geojson

logger = logging.getLogger(__name__)


def parse_bedrock(host, data):
    codec = host.get_codec("bedrock")
    if codec is None or codec.parse is None:
        raise HostError("The bedrock codec is not available.")
    try:
        codec.parse(data, "")
    except ValueError as e:
        raise HostError(f"Failed to import GeoJSON: {e}") from e


def make_from_geo_json(settle_delay=3.0, fetch_timeout=30):
    """Build the ``from_geo_json`` handler

    The host renders imported geometry asynchronously, so the screenshot is
    taken ``settle_delay`` seconds after parsing. Fetching and waiting stay on
    the server loop; only the parse and the screenshot run on the host.
    """

    async def from_geo_json(host, params):
        data = await load_geojson(params["geojson"], timeout=fetch_timeout)
        await call_on_host(host, parse_bedrock, host, data)

        if settle_delay > 0:
            await asyncio.sleep(settle_delay)
        return image_content(await call_on_host(host, host.capture_app_screenshot))

    return from_geo_json


def register_import_tools(tools, settle_delay=3.0, fetch_timeout=30):
    tools.create(
        "from_geo_json",
        "Imports a model from a GeoJSON file.",
        make_from_geo_json(settle_delay, fetch_timeout),
        parameters={
            "type": "object",
            "properties": {
                "geojson": {
                    "type": "string",
                    "description": "Path to the GeoJSON file or data URL, or the GeoJSON string itself.",
                },
            },
            "required": ["geojson"],
        },
        status=STATUS_STABLE,
        title="Import GeoJSON",
        annotations={"destructiveHint": True},
    )
