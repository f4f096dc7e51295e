"""
benchmcp UI

Status panel shown by the host editor.
"""

from .panel import StatusPanel, format_session_label, format_time

__all__ = ["StatusPanel", "format_session_label", "format_time"]
