"""
Tests for the projects, nodes and textures resources
"""

import json

import pytest

from benchmcp.common.errors import NotFoundError
from benchmcp.host.memory import InMemoryEditor
from benchmcp.server.factories import ResourceRegistry
from benchmcp.server.resources import register_resources


async def read_json(registries, uri):
    [contents] = await registries.resources.read(uri)
    assert contents.mime_type == "application/json"
    return json.loads(contents.content)


class TestProjectsResource:
    """projects://{id}"""

    @pytest.mark.asyncio
    async def test_listing(self, host, registries):
        """Without an id the listing counts every project"""
        data = await read_json(registries, "projects://")
        assert data["count"] == len(host.list_projects()) == 2
        assert [p["name"] for p in data["projects"]] == ["tower", "castle"]
        assert data["activeProject"] == host.active_project().uuid

    @pytest.mark.asyncio
    async def test_unknown_id(self, registries):
        with pytest.raises(NotFoundError):
            await read_json(registries, "projects://unknown-id")

    @pytest.mark.asyncio
    async def test_by_uuid_and_name(self, host, registries):
        castle = host.active_project()
        by_uuid = await read_json(registries, f"projects://{castle.uuid}")
        by_name = await read_json(registries, "projects://castle")
        assert by_uuid == by_name
        assert by_uuid["format"] == "bedrock_block"
        assert by_uuid["formatName"] == "Bedrock Block"
        assert by_uuid["selected"] is True
        assert by_uuid["elementCount"] == 1
        assert by_uuid["groupCount"] == 1
        assert by_uuid["textureCount"] == 2
        assert by_uuid["modelIdentifier"] == "demo:castle"
        assert by_uuid["savePath"] == "/models/castle.bbmodel"
        assert by_uuid["exportPath"] is None

    @pytest.mark.asyncio
    async def test_name_is_case_insensitive(self, registries):
        data = await read_json(registries, "projects://CASTLE")
        assert data["name"] == "castle"

    @pytest.mark.asyncio
    async def test_no_projects(self):
        registry = ResourceRegistry(InMemoryEditor())
        register_resources(registry)
        [contents] = await registry.read("projects://")
        assert json.loads(contents.content) == {"projects": [], "count": 0, "activeProject": None}

    @pytest.mark.asyncio
    async def test_list_callback(self, host, registries):
        resources = await registries.resources.list_resources()
        projects = [r for r in resources if str(r.uri).startswith("projects://")]
        assert [r.name for r in projects] == ["tower", "castle"]
        assert projects[0].description == "Bedrock Entity project (unsaved)"
        assert projects[1].description == "Bedrock Block project"


class TestNodesResource:
    """nodes://{id}"""

    @pytest.mark.asyncio
    async def test_listing(self, registries):
        data = await read_json(registries, "nodes://")
        assert data["count"] == 2
        assert {n["name"] for n in data["nodes"]} == {"keep", "gate"}

    @pytest.mark.asyncio
    async def test_by_key_and_name(self, host, registries):
        keep_uuid = host.active_project().keep_uuid
        by_key = await read_json(registries, f"nodes://{keep_uuid}")
        assert by_key["name"] == "keep"
        assert by_key["position"] == [8, 0, 8]
        assert by_key["scale"] == [1.0, 1.0, 1.0]

        gate = await read_json(registries, "nodes://gate")
        assert gate["type"] == "cube"
        assert gate["from"] == [6, 0, 0]
        assert gate["to"] == [10, 6, 1]

    @pytest.mark.asyncio
    async def test_unknown_node(self, registries):
        with pytest.raises(NotFoundError):
            await read_json(registries, "nodes://missing")

    @pytest.mark.asyncio
    async def test_no_active_project(self):
        registry = ResourceRegistry(InMemoryEditor())
        register_resources(registry)
        with pytest.raises(NotFoundError):
            await registry.read("nodes://")
        assert await registry.list_resources() == []


class TestTexturesResource:
    """textures://{id}"""

    @pytest.mark.asyncio
    async def test_listing(self, registries):
        data = await read_json(registries, "textures://")
        assert data["count"] == 2
        assert data["textures"][0]["frameCount"] == 1

    @pytest.mark.asyncio
    async def test_by_name_and_id(self, registries):
        stone = await read_json(registries, "textures://stone.png")
        assert stone["width"] == 32
        assert stone["path"] == "/textures/stone.png"
        assert stone["render_mode"] == "default"
        assert await read_json(registries, "textures://2") == await read_json(registries, "textures://moss.png")

    @pytest.mark.asyncio
    async def test_unknown_texture(self, registries):
        with pytest.raises(NotFoundError):
            await read_json(registries, "textures://missing.png")

    @pytest.mark.asyncio
    async def test_list_callback(self, registries):
        resources = await registries.resources.list_resources()
        textures = [r for r in resources if str(r.uri).startswith("textures://")]
        assert [r.description for r in textures] == ["Texture from /textures/stone.png", "Embedded texture"]
