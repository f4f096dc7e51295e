"""
benchmcp Error Definitions

This module defines custom exceptions for benchmcp.
"""

from typing import Optional, Dict, Any
from .protocol import ErrorCodes

class BenchMCPError(Exception):
    """Base exception for all benchmcp errors"""
    def __init__(self, message: str, code: str = ErrorCodes.INTERNAL_ERROR,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self):
        return self.message

class NotFoundError(BenchMCPError):
    """Raised when a referenced project, node, texture or other host object does not exist"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCodes.NOT_FOUND, details)

class ParameterError(BenchMCPError):
    """Raised when tool or prompt arguments are invalid"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCodes.INVALID_PARAMS, details)

class HostError(BenchMCPError):
    """Raised when the host editor refuses or fails an operation"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCodes.HOST_ERROR, details)

class ConfigError(BenchMCPError):
    """Raised when configuration cannot be loaded or is invalid"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCodes.CONFIG_ERROR, details)

class BuildError(BenchMCPError):
    """Raised when the plugin bundle cannot be produced"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCodes.BUILD_ERROR, details)

class LifecycleError(BenchMCPError):
    """Raised when the plugin context is used before init() or after teardown()"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCodes.LIFECYCLE_ERROR, details)
