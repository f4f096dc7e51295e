"""
benchmcp constants

Version and other values shared by the plugin, the server and the UI.
"""

# benchmcp version
VERSION = "0.4.0"

SERVER_NAME = "Bench MCP"

# Maturity of a registered tool or prompt
STATUS_STABLE = "stable"
STATUS_EXPERIMENTAL = "experimental"
STATUSES = (STATUS_STABLE, STATUS_EXPERIMENTAL)

# Idle sessions are evicted after this many seconds
INACTIVITY_TIMEOUT = 5 * 60

DEFAULT_TOOL_PREFIX = "bench_"

JSON_MIME_TYPE = "application/json"
PNG_MIME_TYPE = "image/png"

# Compile-time constants; the bundler replaces every use with a literal
__DEV__ = True
__ICON__ = "icon.svg"
