# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Shared fixtures: graph node factories, a fake backend served over
httpx.ASGITransport, and fully wired editor state.
"""

import os
import random
import sys

import httpx
import pytest
import pytest_asyncio

# Add backend to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pipeline_studio.core.config import Config
from pipeline_studio.core.dependencies import build_app_state
from pipeline_studio.graph.models import NodeRole, PipelineNode, Position
from pipeline_studio.services.backend_client import BackendClient
from tests.fake_backend import FakeBackend, create_app

BASE_URL = "http://testserver/api"


def make_node(node_id: str, role: NodeRole, plugin_type: str = "csv", **kwargs) -> PipelineNode:
    """Build a node with sensible defaults"""
    return PipelineNode(
        id=node_id,
        name=kwargs.pop("name", node_id),
        role=role,
        plugin_type=plugin_type,
        config=kwargs.pop("config", {}),
        position=kwargs.pop("position", Position(x=0, y=0)),
    )


@pytest.fixture
def config():
    """Test configuration - no waiting between execution polls"""
    return Config(
        api_base_url=BASE_URL,
        http_timeout=5.0,
        http_timeout_long=5.0,
        execution_poll_interval=0.0,
        execution_poll_limit=5,
        log_format="text",
    )


@pytest.fixture
def fake_backend():
    """In-memory backend state"""
    return FakeBackend()


@pytest_asyncio.fixture
async def client(fake_backend):
    """BackendClient wired to the fake backend app"""
    transport = httpx.ASGITransport(app=create_app(fake_backend))
    backend_client = BackendClient(BASE_URL, timeout=5.0, long_timeout=5.0, transport=transport)
    yield backend_client
    await backend_client.aclose()


@pytest_asyncio.fixture
async def app_state(config, client):
    """Fully wired editor state with the catalog loaded"""
    state = build_app_state(config, client=client, rng=random.Random(7))
    await state.startup()
    return state
