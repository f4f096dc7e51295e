"""
benchmcp - Model Context Protocol server for a 3D model editor

The host editor's plugin loader calls ``register(host)`` when the plugin is
loaded and ``unregister()`` when it is unloaded.
"""

import os
import logging
import tempfile
from typing import Optional

from .common.constants import SERVER_NAME, VERSION, __DEV__, __ICON__
from .host.facade import HostEditor
from .server.config import ConfigManager
from .server.context import PluginLifecycle

__version__ = VERSION

# Plugin information
plugin_info = {
    "id": "mcp",
    "name": SERVER_NAME,
    "author": "benchmcp developers",
    "description": "Model Context Protocol server exposing projects, nodes and textures to AI assistants",
    "version": VERSION,
    "icon": __ICON__,
    "about": "about.md",
    "tags": ["MCP", "AI"],
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("benchmcp")

_lifecycle: Optional[PluginLifecycle] = None


def configure_logging(level="INFO", log_file: Optional[str] = None, stream=None) -> None:
    """Log to a file in the temp directory and to stderr

    Args:
        level: level name or number for the ``benchmcp`` logger
        log_file: defaults to ``<tmp>/benchmcp/benchmcp.log``
        stream: stream for the console handler, stderr when None
    """
    log_file = log_file or os.path.join(tempfile.gettempdir(), "benchmcp", "benchmcp.log")
    os.makedirs(os.path.dirname(log_file), exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger("benchmcp")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    stream_handler = logging.StreamHandler(stream)
    stream_handler.setFormatter(formatter)

    root.addHandler(file_handler)
    root.addHandler(stream_handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)


def register(host: HostEditor, config_path: Optional[str] = None) -> PluginLifecycle:
    """Load the plugin into ``host`` and start the MCP server when configured to"""
    global _lifecycle
    if _lifecycle is not None:
        logger.warning("benchmcp is already registered, reloading")
        unregister()

    config = ConfigManager(config_path)
    configure_logging(config.get("logging.level", "INFO"), config.get("logging.file"))

    lifecycle = PluginLifecycle(host, config)
    lifecycle.init()
    try:
        if config.get("server.auto_start", True):
            lifecycle.start()
    except Exception:
        lifecycle.teardown()
        raise

    if __DEV__:
        logger.debug(f"Development build, config: {config.config_path or 'defaults'}")
    _lifecycle = lifecycle
    logger.info(f"{SERVER_NAME} v{VERSION} registered")
    return lifecycle


def unregister() -> None:
    """Stop the server and release the plugin"""
    global _lifecycle
    if _lifecycle is None:
        return
    try:
        _lifecycle.teardown()
    finally:
        _lifecycle = None
        logger.info(f"{SERVER_NAME} unregistered")


def get_lifecycle() -> Optional[PluginLifecycle]:
    return _lifecycle
