# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Backend Client - HTTP access to the pipeline, connector and transformer APIs.

Single responsibility: turn HTTP calls into typed models and HTTP failures
into editor errors. Callers decide what a failure means for their state.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from pipeline_studio.core.config import Config
from pipeline_studio.core.errors import NotFoundError, ServiceUnavailableError, sanitize_error_for_user
from pipeline_studio.core.logging import get_service_logger
from pipeline_studio.forms.schema import ConfigSchema
from pipeline_studio.graph.models import (
    ConnectionTestResult,
    ConnectorInfo,
    ExecutionResult,
    Pipeline,
    TransformerInfo,
)

logger = get_service_logger("backend-client")

M = TypeVar("M", bound=BaseModel)


class BackendClient:
    """
    Thin async client over the backend REST API.

    Raises:
        NotFoundError: the backend answered 404
        ServiceUnavailableError: any other HTTP status error, transport
            failure, or a response body that doesn't parse
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        long_timeout: float = 600.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.long_timeout = long_timeout
        self.client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_config(cls, config: Config, transport: Optional[httpx.AsyncBaseTransport] = None) -> "BackendClient":
        return cls(
            config.api_base_url,
            timeout=config.http_timeout,
            long_timeout=config.http_timeout_long,
            transport=transport,
        )

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close HTTP client"""
        await self.client.aclose()

    # ------------------------------------------------------------------
    # Pipelines
    # ------------------------------------------------------------------

    async def list_pipelines(self) -> List[Pipeline]:
        data = await self._request("GET", "/pipelines")
        return self._parse_list(Pipeline, data, "/pipelines")

    async def get_pipeline(self, pipeline_id: str) -> Pipeline:
        data = await self._request("GET", f"/pipelines/{pipeline_id}", resource=("Pipeline", pipeline_id))
        return self._parse(Pipeline, data, f"/pipelines/{pipeline_id}")

    async def create_pipeline(self, pipeline: Pipeline) -> Pipeline:
        data = await self._request("POST", "/pipelines", json=pipeline.to_payload())
        return self._parse(Pipeline, data, "/pipelines")

    async def update_pipeline(self, pipeline_id: str, pipeline: Pipeline) -> Pipeline:
        data = await self._request(
            "PUT",
            f"/pipelines/{pipeline_id}",
            json=pipeline.to_payload(),
            resource=("Pipeline", pipeline_id),
        )
        return self._parse(Pipeline, data, f"/pipelines/{pipeline_id}")

    async def delete_pipeline(self, pipeline_id: str) -> None:
        await self._request("DELETE", f"/pipelines/{pipeline_id}", resource=("Pipeline", pipeline_id))

    async def execute_pipeline(self, pipeline_id: str) -> ExecutionResult:
        data = await self._request(
            "POST",
            f"/pipelines/{pipeline_id}/execute",
            resource=("Pipeline", pipeline_id),
            timeout=self.long_timeout,
        )
        return self._parse(ExecutionResult, data, f"/pipelines/{pipeline_id}/execute")

    async def list_executions(self, pipeline_id: str) -> List[ExecutionResult]:
        path = f"/pipelines/{pipeline_id}/executions"
        data = await self._request("GET", path, resource=("Pipeline", pipeline_id))
        return self._parse_list(ExecutionResult, data, path)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def list_connectors(self) -> List[ConnectorInfo]:
        data = await self._request("GET", "/connectors")
        return self._parse_list(ConnectorInfo, data, "/connectors")

    async def get_connector_schema(self, connector_type: str) -> ConfigSchema:
        path = f"/connectors/{connector_type}/schema"
        data = await self._request("GET", path, resource=("Connector", connector_type))
        return self._parse(ConfigSchema, data, path)

    async def test_connection(self, connector_type: str, config: Dict[str, Any]) -> ConnectionTestResult:
        data = await self._request("POST", "/connectors/test", json={"type": connector_type, "config": config})
        return self._parse(ConnectionTestResult, data, "/connectors/test")

    async def list_transformers(self) -> List[TransformerInfo]:
        data = await self._request("GET", "/transformers")
        return self._parse_list(TransformerInfo, data, "/transformers")

    async def get_transformer_schema(self, transformer_type: str) -> ConfigSchema:
        path = f"/transformers/{transformer_type}/schema"
        data = await self._request("GET", path, resource=("Transformer", transformer_type))
        return self._parse(ConfigSchema, data, path)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        resource: Optional[tuple] = None,
        **kwargs: Any
    ) -> Any:
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404 and resource is not None:
                raise NotFoundError(*resource) from e
            logger.warning(f"{method} {path} failed with HTTP {status}")
            raise ServiceUnavailableError(
                f"{method} {path} failed with HTTP {status}",
                service="backend",
                details={"status": status, "body": e.response.text[:500]},
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ServiceUnavailableError(
                f"{method} {path} failed: {sanitize_error_for_user(e)}",
                service="backend",
            ) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ServiceUnavailableError(f"Non-JSON response from {path}", service="backend") from e

    @staticmethod
    def _parse(model: Type[M], data: Any, path: str) -> M:
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise ServiceUnavailableError(
                f"Malformed response from {path}: {e.error_count()} validation errors",
                service="backend",
            ) from e

    @staticmethod
    def _parse_list(model: Type[M], data: Any, path: str) -> List[M]:
        try:
            return TypeAdapter(List[model]).validate_python(data or [])
        except PydanticValidationError as e:
            raise ServiceUnavailableError(
                f"Malformed response from {path}: {e.error_count()} validation errors",
                service="backend",
            ) from e
