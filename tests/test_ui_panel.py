"""
Tests for the status panel
"""

from datetime import datetime

from benchmcp.ui.panel import StatusPanel, format_session_label, format_time


class TestFormatting:
    """Label and time formatting"""

    def test_session_label(self):
        assert format_session_label({"id": "0123456789", "clientName": "inspector", "clientVersion": "1.2"}) \
            == "inspector v1.2"
        assert format_session_label({"id": "0123456789", "clientName": "inspector"}) == "inspector"
        assert format_session_label({"id": "0123456789abcdef"}) == "01234567..."

    def test_format_time(self):
        assert format_time(datetime(2024, 1, 1, 13, 5, 9)) == "13:05:09"
        assert format_time("2024-01-01T08:00:30") == "08:00:30"


class TestStatusPanel:
    """Status panel"""

    def test_mount_follows_sessions(self, sessions, registries):
        panel = StatusPanel(sessions, registries)
        sessions.add("early")
        panel.mount()
        assert [s["id"] for s in panel.view["sessions"]] == ["early"]
        assert panel.view["server"]["connected"]

        sessions.add("late")
        assert len(panel.view["sessions"]) == 2

        panel.unmount()
        assert not panel.mounted
        sessions.remove("early")
        sessions.remove("late")
        assert len(panel.view["sessions"]) == 2

    def test_display_name(self, sessions, registries):
        panel = StatusPanel(sessions, registries, tool_prefix="bench_")
        assert panel.get_display_name("bench_place_cube") == "place_cube"
        assert panel.get_display_name("other_tool") == "other_tool"

    def test_status_text(self, sessions, registries):
        panel = StatusPanel(sessions, registries)
        panel.mount()
        assert panel.status_text() == "MCP: stopped"

        panel.set_server_status(True, "Bench MCP", "1.0.0")
        assert panel.status_text() == "MCP: 0 clients (Bench MCP v1.0.0)"
        sessions.add("a")
        assert panel.status_text() == "MCP: 1 client (Bench MCP v1.0.0)"

    def test_render(self, sessions, registries):
        sessions.add("0123456789abcdef")
        sessions.update_client_info("0123456789abcdef", "inspector", "0.9")
        registries.tools.set_enabled("capture_app_screenshot", False)
        panel = StatusPanel(sessions, registries)
        panel.mount()

        lines = panel.render()
        assert any(line.startswith("  inspector v0.9  connected") for line in lines)
        assert "  set_camera_angle [experimental]" in lines
        assert "  capture_app_screenshot [disabled]" in lines
        assert any(line.startswith("  projects://{id}") for line in lines)
        assert "  modeling_workflow (2 args)" in lines

    def test_render_follows_tool_toggles(self, sessions, registries):
        panel = StatusPanel(sessions, registries)
        assert "  place_cube [experimental]" in panel.render()

        registries.tools.set_enabled("place_cube", False)
        assert "  place_cube [disabled, experimental]" in panel.render()
        assert not next(tool for tool in panel.view["tools"] if tool["name"] == "bench_place_cube")["enabled"]
