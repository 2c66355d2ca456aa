# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Tests for the plugin catalog cache
"""

import asyncio

import pytest
from unittest.mock import AsyncMock

from pipeline_studio.core.errors import CatalogLoadError, ServiceUnavailableError
from pipeline_studio.graph.models import ConnectorInfo, NodeRole, TransformerInfo
from pipeline_studio.services.catalog_service import PluginCatalog


@pytest.mark.asyncio
async def test_load_populates_both_lists(client):
    """load fills connectors and transformers in backend order"""
    catalog = PluginCatalog(client)
    await catalog.load()

    assert catalog.is_loaded
    assert [c.type for c in catalog.connectors] == ["csv", "jdbc", "http"]
    assert [t.type for t in catalog.transformers] == ["filter", "aggregate"]


@pytest.mark.asyncio
async def test_read_write_filters(client):
    """Connectors are filtered by read and write support"""
    catalog = PluginCatalog(client)
    await catalog.load()

    assert [c.type for c in catalog.connectors_supporting_read()] == ["csv", "jdbc", "http"]
    assert [c.type for c in catalog.connectors_supporting_write()] == ["csv", "jdbc"]


@pytest.mark.asyncio
async def test_both_lists_fetched_concurrently():
    """Both catalog requests are in flight at the same time"""
    started = []
    release = asyncio.Event()

    async def list_connectors():
        started.append("connectors")
        await release.wait()
        return [ConnectorInfo(type="csv", display_name="CSV", supports_read=True)]

    async def list_transformers():
        started.append("transformers")
        await release.wait()
        return []

    client = AsyncMock()
    client.list_connectors = list_connectors
    client.list_transformers = list_transformers
    catalog = PluginCatalog(client)

    task = asyncio.ensure_future(catalog.load())
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert sorted(started) == ["connectors", "transformers"]

    release.set()
    await task
    assert catalog.is_loaded


@pytest.mark.asyncio
async def test_partial_failure_keeps_previous_contents(client, fake_backend):
    """A failed reload keeps the previously loaded catalog"""
    catalog = PluginCatalog(client)
    await catalog.load()
    before = (catalog.connectors, catalog.transformers)

    fake_backend.fail.add("transformers")
    with pytest.raises(CatalogLoadError, match="Failed to load plugin catalog"):
        await catalog.reload()

    assert (catalog.connectors, catalog.transformers) == before


@pytest.mark.asyncio
async def test_failed_first_load_leaves_catalog_empty(client, fake_backend):
    """A failed first load leaves the catalog empty and unloaded"""
    fake_backend.fail.add("connectors")
    catalog = PluginCatalog(client)

    with pytest.raises(CatalogLoadError):
        await catalog.load()

    assert not catalog.is_loaded
    assert catalog.connectors == ()
    assert catalog.transformers == ()


@pytest.mark.asyncio
async def test_programming_errors_are_not_wrapped():
    """Non-service exceptions propagate unwrapped"""
    client = AsyncMock()
    client.list_connectors = AsyncMock(side_effect=TypeError("boom"))
    client.list_transformers = AsyncMock(return_value=[])

    with pytest.raises(TypeError):
        await PluginCatalog(client).load()


@pytest.mark.asyncio
async def test_lookups_and_display_names():
    """Display names fall back to the raw type until the catalog loads"""
    client = AsyncMock()
    client.list_connectors = AsyncMock(return_value=[ConnectorInfo(type="csv", display_name="CSV")])
    client.list_transformers = AsyncMock(side_effect=ServiceUnavailableError("down"))
    catalog = PluginCatalog(client)

    with pytest.raises(CatalogLoadError):
        await catalog.load()
    assert catalog.display_name_for(NodeRole.SOURCE, "csv") == "csv"

    client.list_transformers = AsyncMock(return_value=[TransformerInfo(type="filter", display_name="Filter")])
    await catalog.load()

    assert catalog.find_connector("csv").display_name == "CSV"
    assert catalog.find_connector("kafka") is None
    assert catalog.display_name_for(NodeRole.TARGET, "csv") == "CSV"
    assert catalog.display_name_for(NodeRole.TRANSFORMER, "filter") == "Filter"
    assert catalog.display_name_for(NodeRole.TRANSFORMER, "custom") == "custom"
