"""
Shared fixtures
"""

import pytest

from benchmcp.common.scheduling import Scheduler, VirtualClock
from benchmcp.common.sessions import SessionManager
from benchmcp.host.memory import InMemoryEditor
from benchmcp.host.model import Node, Project, Texture
from benchmcp.server.config import ConfigManager
from benchmcp.server.factories import Registries
from benchmcp.server.prompts import register_prompts
from benchmcp.server.resources import register_resources
from benchmcp.tools import register_all_tools


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock)


@pytest.fixture
def sessions(scheduler):
    return SessionManager(scheduler, inactivity_timeout=300)


@pytest.fixture
def config():
    """Default configuration without a file or environment overrides"""
    config = ConfigManager(use_env=False)
    config._set("tools.import_settle_delay", 0)
    return config


@pytest.fixture
def host():
    """In-memory editor with two projects; "castle" is active"""
    editor = InMemoryEditor()
    tower = editor.add_project(Project(name="tower", format=editor.formats["bedrock"]))
    editor.add_cube(tower, {"name": "wall", "from": [0, 0, 0], "to": [4, 16, 4]})

    castle = editor.add_project(Project(
        name="castle",
        format=editor.formats["bedrock_block"],
        model_identifier="demo:castle",
        save_path="/models/castle.bbmodel",
    ))
    keep = castle.add_node(Node(name="keep", type="group", position=[8, 0, 8]))
    editor.add_cube(castle, {"name": "gate", "origin": [8, 0, 0], "from": [6, 0, 0], "to": [10, 6, 1]})
    castle.textures.append(Texture(name="stone.png", id="1", width=32, height=32, path="/textures/stone.png"))
    castle.textures.append(Texture(name="moss.png", id="2"))
    castle.keep_uuid = keep.uuid
    castle.saved = True
    return editor


@pytest.fixture
def registries(host, config):
    registries = Registries(host, tool_prefix=config.get("server.tool_prefix"))
    register_all_tools(registries.tools, config)
    register_resources(registries.resources)
    register_prompts(registries.prompts)
    return registries
