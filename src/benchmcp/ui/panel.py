"""
benchmcp status panel

Host-independent view model of the MCP side panel. The host draws it from
``render()`` / ``status_text()`` or from the ``view`` dict directly.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from ..common.constants import DEFAULT_TOOL_PREFIX, SERVER_NAME, STATUS_EXPERIMENTAL, VERSION
from ..common.protocol import short_id
from ..common.sessions import Session, SessionManager

logger = logging.getLogger(__name__)


def format_session_label(session: Union[Session, Dict[str, Any]]) -> str:
    """``name vX`` when the client identified itself, else the short id"""
    if isinstance(session, Session):
        return session.display_name
    name = session.get("clientName")
    if name:
        version = session.get("clientVersion")
        return f"{name} v{version}" if version else name
    return short_id(session["id"])


def format_time(value: Union[datetime, str]) -> str:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value.strftime("%H:%M:%S")


class StatusPanel:
    """MCP side panel

    Args:
        sessions: session registry to follow while mounted
        registries: tools, resources and prompts listed in the panel
        tool_prefix: stripped from tool names for display
    """

    id = "mcp_panel"
    title = "MCP"

    def __init__(self, sessions: SessionManager, registries, tool_prefix: str = DEFAULT_TOOL_PREFIX,
                 name: str = SERVER_NAME, version: str = VERSION):
        self.sessions = sessions
        self.registries = registries
        self.tool_prefix = tool_prefix
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.view: Dict[str, Any] = {
            "sessions": [],
            "server": {
                "running": False,
                "connected": False,
                "name": name,
                "version": version,
            },
            "tools": [],
            "resources": [],
            "prompts": [],
        }
        self.refresh()

    def refresh(self) -> None:
        """Re-read tools, resources and prompts, e.g. after a tool was toggled"""
        self.view.update(self.registries.describe())

    @property
    def mounted(self) -> bool:
        return self._unsubscribe is not None

    def mount(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.sessions.subscribe(self._on_sessions)

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_sessions(self, sessions: List[Session]) -> None:
        self.view["sessions"] = [session.to_dict() for session in sessions]
        self.view["server"]["connected"] = len(sessions) > 0

    def set_server_status(self, running: bool, name: Optional[str] = None,
                          version: Optional[str] = None) -> None:
        server = self.view["server"]
        server["running"] = running
        if name:
            server["name"] = name
        if version:
            server["version"] = version

    def get_display_name(self, tool_name: str) -> str:
        if self.tool_prefix and tool_name.startswith(self.tool_prefix):
            return tool_name[len(self.tool_prefix):]
        return tool_name

    def status_text(self) -> str:
        server = self.view["server"]
        if not server["running"]:
            return "MCP: stopped"
        count = len(self.view["sessions"])
        clients = "1 client" if count == 1 else f"{count} clients"
        return f"MCP: {clients} ({server['name']} v{server['version']})"

    def render(self) -> List[str]:
        """Panel contents as text lines"""
        self.refresh()
        server = self.view["server"]
        lines = [f"{server['name']} v{server['version']}", self.status_text(), "", "Sessions:"]
        if not self.view["sessions"]:
            lines.append("  (none)")
        for session in self.view["sessions"]:
            lines.append(
                f"  {format_session_label(session)}  connected {format_time(session['connectedAt'])}"
                f", last activity {format_time(session['lastActivity'])}"
            )

        lines += ["", "Tools:"]
        for tool in self.view["tools"]:
            flags = []
            if not tool["enabled"]:
                flags.append("disabled")
            if tool["status"] == STATUS_EXPERIMENTAL:
                flags.append(STATUS_EXPERIMENTAL)
            suffix = f" [{', '.join(flags)}]" if flags else ""
            lines.append(f"  {self.get_display_name(tool['name'])}{suffix}")

        lines += ["", "Resources:"]
        lines += [f"  {resource['uriTemplate']}  {resource['title'] or resource['name']}"
                  for resource in self.view["resources"]]

        lines += ["", "Prompts:"]
        lines += [f"  {prompt['name']} ({prompt['argumentCount']} args)" for prompt in self.view["prompts"]]
        return lines
