"""
benchmcp tools

Every tool the plugin exposes. ``register_all_tools`` registers them on the
tool registry of one plugin instance.
"""

import logging

from .camera_tools import register_camera_tools
from .element_tools import register_element_tools
from .import_tools import register_import_tools
from .project_tools import register_project_tools

logger = logging.getLogger(__name__)


def register_all_tools(tools, config=None):
    """Register all tools

    Args:
        tools: ``ToolRegistry`` to register on
        config: ``ConfigManager`` supplying the ``tools.*`` settings
    """
    settle_delay = config.get("tools.import_settle_delay", 3.0) if config else 3.0
    fetch_timeout = config.get("tools.fetch_timeout", 30) if config else 30

    register_camera_tools(tools)
    register_import_tools(tools, settle_delay=settle_delay, fetch_timeout=fetch_timeout)
    register_project_tools(tools)
    register_element_tools(tools)

    logger.info(f"Registered {len(tools.all())} tools")
