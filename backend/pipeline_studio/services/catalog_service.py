# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Plugin Catalog - session cache of connector and transformer descriptors.

Loaded once at startup; reload() is the only refresh path.
"""

import asyncio
from typing import List, Optional, Tuple

from pipeline_studio.core.errors import CatalogLoadError, StudioError, sanitize_error_for_user
from pipeline_studio.core.logging import get_service_logger
from pipeline_studio.graph.models import ConnectorInfo, NodeRole, TransformerInfo

logger = get_service_logger("catalog")


class PluginCatalog:
    """
    Holds the connector and transformer lists for the session.

    Responsibilities:
    - Fetch both lists concurrently
    - Keep the previous contents when a load fails
    - Filter connectors for the SOURCE and TARGET palettes
    """

    def __init__(self, client):
        self.client = client
        self._connectors: Tuple[ConnectorInfo, ...] = ()
        self._transformers: Tuple[TransformerInfo, ...] = ()
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def connectors(self) -> Tuple[ConnectorInfo, ...]:
        return self._connectors

    @property
    def transformers(self) -> Tuple[TransformerInfo, ...]:
        return self._transformers

    async def load(self) -> None:
        """
        Fetch connectors and transformers together.

        Both calls must succeed; otherwise CatalogLoadError is raised and
        the cache keeps what it had before.
        """
        results = await asyncio.gather(
            self.client.list_connectors(),
            self.client.list_transformers(),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            for failure in failures:
                if not isinstance(failure, StudioError):
                    raise failure
            reason = "; ".join(sanitize_error_for_user(f, include_type=False) for f in failures)
            logger.error(f"Plugin catalog load failed: {reason}")
            raise CatalogLoadError(f"Failed to load plugin catalog: {reason}") from failures[0]

        connectors, transformers = results
        self._connectors = tuple(connectors)
        self._transformers = tuple(transformers)
        self._loaded = True
        logger.info(f"Loaded plugin catalog: {len(self._connectors)} connectors, {len(self._transformers)} transformers")

    async def reload(self) -> None:
        await self.load()

    def connectors_supporting_read(self) -> List[ConnectorInfo]:
        return [c for c in self._connectors if c.supports_read]

    def connectors_supporting_write(self) -> List[ConnectorInfo]:
        return [c for c in self._connectors if c.supports_write]

    def find_connector(self, connector_type: str) -> Optional[ConnectorInfo]:
        for connector in self._connectors:
            if connector.type == connector_type:
                return connector
        return None

    def find_transformer(self, transformer_type: str) -> Optional[TransformerInfo]:
        for transformer in self._transformers:
            if transformer.type == transformer_type:
                return transformer
        return None

    def display_name_for(self, role: NodeRole, plugin_type: str) -> str:
        """Catalog display name for a plugin, falling back to the raw type"""
        if role == NodeRole.TRANSFORMER:
            info = self.find_transformer(plugin_type)
        else:
            info = self.find_connector(plugin_type)
        return info.display_name if info else plugin_type
