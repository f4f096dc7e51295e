"""
Tests for the configuration manager
"""

import os
import tempfile

import pytest
import yaml

from benchmcp.common.errors import ConfigError
from benchmcp.server.config import ConfigManager


class TestConfigManager:
    """Configuration manager"""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.temp_dir, "config.yaml")

    def teardown_method(self):
        if os.path.exists(self.config_path):
            os.remove(self.config_path)
        os.rmdir(self.temp_dir)

    def test_init_default(self):
        """Defaults are used and written to a missing file"""
        config = ConfigManager(self.config_path, use_env=False)

        assert config.get("server.host") == "localhost"
        assert config.get("server.port") == 3000
        assert config.get("server.transport") == "http"
        assert config.get("sessions.inactivity_timeout") == 300
        assert config.get("build.restricted_modules") == ["os", "pathlib", "shutil", "subprocess", "socket"]
        assert config.get("build.vendor") == ["uvicorn", "starlette", "anyio", "mcp"]
        assert os.path.exists(self.config_path)

    def test_without_path_nothing_is_written(self):
        config = ConfigManager(use_env=False)
        config.set("server.port", 4000)
        assert config.get("server.port") == 4000
        assert config.config_path is None

    def test_load_config(self):
        """The file is deep-merged over the defaults"""
        with open(self.config_path, "w") as f:
            yaml.dump({"server": {"host": "127.0.0.1", "port": 8080}}, f)

        config = ConfigManager(self.config_path, use_env=False)

        assert config.get("server.host") == "127.0.0.1"
        assert config.get("server.port") == 8080
        assert config.get("server.endpoint") == "/bench-mcp"
        assert isinstance(config.get("tools"), dict)

    def test_get_config(self):
        config = ConfigManager(self.config_path, use_env=False)

        assert config.get("server.host") == "localhost"
        assert config.get("nonexistent.key") is None
        assert config.get("nonexistent.key", "default") == "default"
        assert config.get("server.host.deeper") is None

    def test_set_config(self):
        """set() persists the value"""
        config = ConfigManager(self.config_path, use_env=False)
        config.set("server.port", 9000)
        config.set("custom.nested.value", "x")

        reloaded = ConfigManager(self.config_path, use_env=False)
        assert reloaded.get("server.port") == 9000
        assert reloaded.get("custom.nested.value") == "x"

    def test_invalid_yaml(self):
        with open(self.config_path, "w") as f:
            f.write("server: [unclosed\n")

        with pytest.raises(ConfigError):
            ConfigManager(self.config_path, use_env=False)

    def test_root_must_be_mapping(self):
        with open(self.config_path, "w") as f:
            f.write("- just\n- a list\n")

        with pytest.raises(ConfigError):
            ConfigManager(self.config_path, use_env=False)

    def test_unknown_transport(self):
        with open(self.config_path, "w") as f:
            yaml.dump({"server": {"transport": "carrier-pigeon"}}, f)

        with pytest.raises(ConfigError):
            ConfigManager(self.config_path, use_env=False)

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("BENCHMCP_PORT", "4567")
        monkeypatch.setenv("BENCHMCP_TRANSPORT", "websocket")
        monkeypatch.setenv("BENCHMCP_ENV", "production")

        config = ConfigManager(self.config_path)

        assert config.get("server.port") == 4567
        assert config.get("server.transport") == "websocket"
        assert config.is_production

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("BENCHMCP_PORT", "not-a-port")

        with pytest.raises(ConfigError):
            ConfigManager(self.config_path)

    def test_is_production_default(self):
        assert not ConfigManager(use_env=False).is_production
