"""
benchmcp Protocol Definitions

Error codes used by benchmcp and the JSON-RPC codes it reports to MCP clients.
"""


class ErrorCodes:
    """Standard error codes for benchmcp"""
    NOT_FOUND = "NOT_FOUND"
    INVALID_PARAMS = "INVALID_PARAMS"
    HOST_ERROR = "HOST_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
    BUILD_ERROR = "BUILD_ERROR"
    LIFECYCLE_ERROR = "LIFECYCLE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class JsonRpcCodes:
    """JSON-RPC error codes sent in protocol error responses"""
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    # MCP reserves -32002 for unknown resources
    RESOURCE_NOT_FOUND = -32002


def short_id(session_id: str) -> str:
    """Abbreviated session id used in log lines and the UI"""
    return f"{session_id[:8]}..."
