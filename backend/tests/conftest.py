"""Shared test fixtures for backend tests."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from serverfs.core.config import settings
from serverfs.services.filesystem.reconciler import write_document
from serverfs.services.server import Server

SERVER_UUID = "a1b2c3d4"


@pytest.fixture
def server(tmp_path):
    """A server instance rooted in a temporary sandbox, without a running watcher."""
    root = tmp_path / SERVER_UUID
    root.mkdir()
    instance = Server(SERVER_UUID, root, {"name": "test", "memory": 1024})
    asyncio.run(write_document(instance.config_location, instance.json))
    return instance


@pytest.fixture
def root(server):
    return server.sandbox.root


@pytest.fixture
def fs(server):
    return server.filesystem


@pytest.fixture
def client(tmp_path, monkeypatch):
    """FastAPI TestClient serving one registered server from a temporary data directory."""
    data_dir = tmp_path / "servers"
    server_root = data_dir / SERVER_UUID
    server_root.mkdir(parents=True)
    (server_root / settings.config_filename).write_text('{"name": "api"}')

    monkeypatch.setattr(settings, "data_dir", data_dir)
    monkeypatch.setattr(settings, "watch_config", False)

    from serverfs.main import app

    with TestClient(app) as c:
        yield c
