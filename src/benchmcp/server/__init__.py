"""
benchmcp server

Configuration, registration factories, the MCP protocol adapter and its
transports.
"""

from .config import ConfigManager
from .context import PluginContext, PluginLifecycle
from .factories import Registries
from .server import MCPServer

__all__ = ["ConfigManager", "MCPServer", "PluginContext", "PluginLifecycle", "Registries"]
