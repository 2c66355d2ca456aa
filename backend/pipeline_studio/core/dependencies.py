# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Application state wiring for the editor.

Everything the editor shares (current pipeline, graph, selection, plugin
catalog) lives on one explicitly constructed AppState. Nothing here is a
module-level global; the view layer owns the AppState it builds.
"""

import random
from dataclasses import dataclass
from typing import Optional

import httpx

from pipeline_studio.core.config import Config, get_config
from pipeline_studio.core.logging import get_service_logger
from pipeline_studio.editor.canvas import CanvasAdapter
from pipeline_studio.editor.controller import EditingController
from pipeline_studio.forms.engine import FormEngine
from pipeline_studio.graph.model import PipelineGraph
from pipeline_studio.services.backend_client import BackendClient
from pipeline_studio.services.catalog_service import PluginCatalog
from pipeline_studio.services.session_service import PipelineSession

logger = get_service_logger("app-state")


@dataclass
class AppState:
    """All session-scoped editor components, wired together"""
    config: Config
    client: BackendClient
    graph: PipelineGraph
    catalog: PluginCatalog
    forms: FormEngine
    controller: EditingController
    canvas: CanvasAdapter
    session: PipelineSession

    async def startup(self) -> None:
        """Populate the plugin catalog; a failure leaves it empty and propagates"""
        await self.catalog.load()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "AppState":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


def build_app_state(
    config: Optional[Config] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    client=None,
    rng: Optional[random.Random] = None
) -> AppState:
    """
    Build the editor's component graph.

    Args:
        config: Configuration (defaults to the global YAML config)
        transport: Optional httpx transport, e.g. an ASGI app in tests
        client: Prebuilt backend client; overrides config/transport
        rng: Random source for node placement

    Returns:
        AppState: Wired components
    """
    config = config or get_config()
    if client is None:
        client = BackendClient.from_config(config, transport=transport)

    graph = PipelineGraph()
    catalog = PluginCatalog(client)
    forms = FormEngine(client)
    controller = EditingController(graph, forms, catalog, client, config, rng=rng)
    canvas = CanvasAdapter(graph, controller, snap_grid=config.snap_grid)
    session = PipelineSession(client, graph, config)

    logger.info(f"Editor state initialized against {config.api_base_url}")
    return AppState(
        config=config,
        client=client,
        graph=graph,
        catalog=catalog,
        forms=forms,
        controller=controller,
        canvas=canvas,
        session=session,
    )
