"""
benchmcp build pipeline

``python -m benchmcp.build`` bundles the plugin for the host's plugin loader.
"""

from .bundler import Bundler, COMPAT_SHIM, DEFAULT_RESTRICTED_MODULES, DEFAULT_VENDOR

__all__ = ["Bundler", "COMPAT_SHIM", "DEFAULT_RESTRICTED_MODULES", "DEFAULT_VENDOR"]
