# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
End-to-end editor flows against the fake backend: build, save, switch,
execute.
"""

import httpx
import pytest

from pipeline_studio.core.dependencies import build_app_state
from pipeline_studio.graph.models import ExecutionStatus, NodeRole, Pipeline
from pipeline_studio.graph.validation import validate_for_execution
from pipeline_studio.services.session_service import SessionState
from tests.conftest import make_node
from tests.fake_backend import create_app


@pytest.mark.asyncio
async def test_build_save_then_open_other_pipeline(app_state, fake_backend):
    """Build a pipeline on the canvas, save it, then switch to another one"""
    other = fake_backend.seed(Pipeline(
        name="Archive",
        nodes=[make_node("a", NodeRole.SOURCE, "jdbc"), make_node("b", NodeRole.TARGET)],
    ).to_payload())
    session, controller, canvas = app_state.session, app_state.controller, app_state.canvas

    created = await session.create("p1")
    source = controller.create_node(NodeRole.SOURCE, "csv")
    target = controller.create_node(NodeRole.TARGET, "csv")
    assert canvas.on_connect(source.id, target.id).id == f"edge-{source.id}-{target.id}"

    await controller.select(source.id)
    assert controller.commit_config(source.id, "Orders", {"path": "/in.csv"}).ok
    await session.save()

    stored = fake_backend.pipelines[created.id]
    assert [n["id"] for n in stored["nodes"]] == [source.id, target.id]
    assert stored["nodes"][0]["config"]["path"] == "/in.csv"
    assert [e["id"] for e in stored["edges"]] == [f"edge-{source.id}-{target.id}"]

    opened = await session.open(other["id"])

    snapshot = app_state.graph.snapshot()
    assert list(snapshot.nodes) == opened.nodes == Pipeline.model_validate(other).nodes
    assert snapshot.edges == ()
    assert controller.selected_id is None
    assert controller.active_schema is None


@pytest.mark.asyncio
async def test_edit_and_execute_flow(app_state, fake_backend):
    """Configure a three-node pipeline and run it to completion"""
    session, controller = app_state.session, app_state.controller
    fake_backend.execution_script = ["RUNNING", "COMPLETED"]

    await session.create("nightly")
    source = controller.create_node(NodeRole.SOURCE, "csv")
    transformer = controller.create_node(NodeRole.TRANSFORMER, "filter")
    target = controller.create_node(NodeRole.TARGET, "csv")
    app_state.graph.connect(source.id, transformer.id)
    app_state.graph.connect(transformer.id, target.id)
    assert validate_for_execution(app_state.graph.snapshot()) == []

    result = await session.execute()

    assert result.status == ExecutionStatus.COMPLETED
    assert result.total_records_processed == 30
    assert not session.dirty
    assert session.state == SessionState.EDITING


@pytest.mark.asyncio
async def test_app_state_context_manager(config, fake_backend):
    """AppState opens as an async context manager and loads the catalog on startup"""
    transport = httpx.ASGITransport(app=create_app(fake_backend))
    async with build_app_state(config, transport=transport) as state:
        await state.startup()
        assert state.catalog.is_loaded
        assert state.session.state == SessionState.NO_PIPELINE
