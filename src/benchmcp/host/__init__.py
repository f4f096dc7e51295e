"""
benchmcp host package

The capability interface over the host editor, main-thread dispatch and an
in-memory host.
"""

from .dispatch import MainThreadDispatcher
from .facade import HostEditor, call_on_host, find_project
from .memory import InMemoryEditor, demo_editor

__all__ = ['HostEditor', 'MainThreadDispatcher', 'call_on_host', 'find_project',
           'InMemoryEditor', 'demo_editor']
