# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Pipeline Session - lifecycle of the pipeline open in the editor.

States: NO_PIPELINE -> EDITING -> EXECUTING -> EDITING.
execute() always saves the in-memory graph first and sends nothing to the
engine if that save fails.
"""

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from pipeline_studio.core.config import Config
from pipeline_studio.core.errors import (
    ConflictError,
    NoPipelineOpenError,
    PersistenceError,
    StudioError,
    ValidationError,
    sanitize_error_for_user,
)
from pipeline_studio.core.logging import get_service_logger, log_event
from pipeline_studio.graph.exceptions import StructuralViolation
from pipeline_studio.graph.model import PipelineGraph
from pipeline_studio.graph.models import ExecutionResult, ExecutionStatus, Pipeline

logger = get_service_logger("session")


class SessionState(str, Enum):
    NO_PIPELINE = "NO_PIPELINE"
    EDITING = "EDITING"
    EXECUTING = "EXECUTING"


class PipelineSession:
    """
    Owns the current pipeline and orders persistence and execution.

    Responsibilities:
    - Create, open, save and delete pipeline records
    - Replace the graph wholesale when another pipeline is opened
    - Run save-then-execute as one strictly ordered sequence
    """

    def __init__(
        self,
        client,
        graph: PipelineGraph,
        config: Config,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.client = client
        self.graph = graph
        self.config = config
        self._sleep = sleep

        self._pipeline: Optional[Pipeline] = None
        self._saved_version = graph.version
        self._state = SessionState.NO_PIPELINE
        self.state_history: List[Tuple[SessionState, SessionState]] = []
        self.last_result: Optional[ExecutionResult] = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def pipeline_id(self) -> Optional[str]:
        return self._pipeline.id if self._pipeline else None

    @property
    def pipeline(self) -> Optional[Pipeline]:
        """Current pipeline with the live graph folded in"""
        if self._pipeline is None:
            return None
        snapshot = self.graph.snapshot()
        return self._pipeline.model_copy(update={
            "nodes": list(snapshot.nodes),
            "edges": list(snapshot.edges),
        })

    @property
    def dirty(self) -> bool:
        """True when the graph changed since it was last created, opened or saved"""
        return self._pipeline is not None and self.graph.version != self._saved_version

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def create(self, name: str, description: Optional[str] = None) -> Pipeline:
        """Create an empty pipeline on the backend and make it current"""
        self._ensure_not_executing("create")
        try:
            draft = Pipeline(name=name, description=description)
        except PydanticValidationError:
            raise ValidationError("Pipeline name must not be empty", field="name") from None

        try:
            created = await self.client.create_pipeline(draft)
        except StudioError as e:
            logger.error(f"Failed to create pipeline {name!r}: {e.message}")
            raise PersistenceError("create", e.message) from e

        self._install(created, "create")
        log_event(logger, "pipeline_created", pipeline_id=created.id)
        return self.pipeline

    async def open(self, pipeline_id: str) -> Pipeline:
        """Fetch a pipeline and replace the current one; unsaved edits are dropped"""
        self._ensure_not_executing("open")
        try:
            loaded = await self.client.get_pipeline(pipeline_id)
        except StudioError as e:
            logger.error(f"Failed to open pipeline {pipeline_id}: {e.message}")
            raise PersistenceError("open", e.message, pipeline_id=pipeline_id) from e

        if self.dirty:
            logger.warning(f"Discarding unsaved changes to pipeline {self.pipeline_id}")
        self._install(loaded, "open")
        log_event(logger, "pipeline_opened", pipeline_id=pipeline_id, nodes=len(loaded.nodes), edges=len(loaded.edges))
        return self.pipeline

    async def save(self) -> Pipeline:
        """Persist the current graph snapshot under the current pipeline id"""
        if self._pipeline is None:
            raise NoPipelineOpenError()

        pipeline_id = self._pipeline.id
        sent_version = self.graph.version
        definition = self.pipeline

        try:
            saved = await self.client.update_pipeline(pipeline_id, definition)
        except StudioError as e:
            logger.error(f"Failed to save pipeline {pipeline_id}: {e.message}")
            raise PersistenceError("save", e.message, pipeline_id=pipeline_id) from e

        # Keep the local graph; only take server-owned header fields
        self._pipeline = self._pipeline.model_copy(update={
            "status": saved.status,
            "created_at": saved.created_at or self._pipeline.created_at,
            "updated_at": saved.updated_at or self._pipeline.updated_at,
        })
        self._saved_version = sent_version
        log_event(logger, "pipeline_saved", pipeline_id=pipeline_id, graph_version=sent_version)
        return self.pipeline

    async def execute(self) -> ExecutionResult:
        """
        Save, then run the pipeline remotely and wait for a terminal status.

        A failed save aborts before any execution request. Transport failures
        after that are reported as a FAILED result rather than raised.
        """
        if self._pipeline is None:
            raise NoPipelineOpenError()
        self._ensure_not_executing("execute")

        # EXECUTING covers the save too; open/create/execute are refused until it ends
        pipeline_id = self._pipeline.id
        self._transition(SessionState.EXECUTING)
        try:
            await self.save()
            result = await self._run(pipeline_id)
        finally:
            self._transition(SessionState.EDITING)

        self.last_result = result
        log_event(
            logger,
            "pipeline_executed",
            pipeline_id=pipeline_id,
            execution_id=result.execution_id,
            status=result.status.value,
            records=result.total_records_processed,
        )
        return result

    async def delete(self, pipeline_id: str) -> None:
        """Delete a pipeline record; deleting the current one closes it"""
        is_current = pipeline_id == self.pipeline_id
        if is_current:
            self._ensure_not_executing("delete")

        try:
            await self.client.delete_pipeline(pipeline_id)
        except StudioError as e:
            logger.error(f"Failed to delete pipeline {pipeline_id}: {e.message}")
            raise PersistenceError("delete", e.message, pipeline_id=pipeline_id) from e

        if is_current:
            self._pipeline = None
            self.graph.load([], [])
            self._saved_version = self.graph.version
            self._transition(SessionState.NO_PIPELINE)
        log_event(logger, "pipeline_deleted", pipeline_id=pipeline_id, was_current=is_current)

    async def list_pipelines(self) -> List[Pipeline]:
        try:
            return await self.client.list_pipelines()
        except StudioError as e:
            raise PersistenceError("list", e.message) from e

    async def list_executions(self, pipeline_id: Optional[str] = None) -> List[ExecutionResult]:
        pipeline_id = pipeline_id or self.pipeline_id
        if pipeline_id is None:
            raise NoPipelineOpenError()
        try:
            return await self.client.list_executions(pipeline_id)
        except StudioError as e:
            raise PersistenceError("list executions of", e.message, pipeline_id=pipeline_id) from e

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run(self, pipeline_id: str) -> ExecutionResult:
        try:
            result = await self.client.execute_pipeline(pipeline_id)
            polls = 0
            while not result.is_terminal:
                if polls >= self.config.execution_poll_limit:
                    return self._failed_result(
                        pipeline_id,
                        f"Execution {result.execution_id} did not finish after {polls} status checks",
                        execution_id=result.execution_id,
                        start_time=result.start_time,
                    )
                await self._sleep(self.config.execution_poll_interval)
                polls += 1
                result = await self._poll(pipeline_id, result)
            return result
        except StudioError as e:
            logger.error(f"Execution of pipeline {pipeline_id} failed: {e.message}")
            return self._failed_result(pipeline_id, sanitize_error_for_user(e, include_type=False))

    async def _poll(self, pipeline_id: str, current: ExecutionResult) -> ExecutionResult:
        for execution in await self.client.list_executions(pipeline_id):
            if execution.execution_id == current.execution_id:
                return execution
        return current

    @staticmethod
    def _failed_result(
        pipeline_id: str,
        message: str,
        execution_id: str = "",
        start_time: Optional[str] = None
    ) -> ExecutionResult:
        now = datetime.now(timezone.utc).isoformat()
        return ExecutionResult(
            execution_id=execution_id,
            pipeline_id=pipeline_id,
            status=ExecutionStatus.FAILED,
            start_time=start_time or now,
            end_time=now,
            error_message=message,
        )

    def _install(self, pipeline: Pipeline, operation: str) -> None:
        if not pipeline.id:
            raise PersistenceError(operation, "backend returned a pipeline without an id")
        try:
            self.graph.load(pipeline.nodes, pipeline.edges)
        except StructuralViolation as e:
            raise PersistenceError(operation, f"invalid pipeline graph: {e.message}", pipeline_id=pipeline.id) from e

        self._pipeline = pipeline.model_copy(update={"nodes": [], "edges": []})
        self._saved_version = self.graph.version
        self._transition(SessionState.EDITING)

    def _ensure_not_executing(self, operation: str) -> None:
        if self._state == SessionState.EXECUTING:
            raise ConflictError(f"Cannot {operation} while an execution is in flight", resource="pipeline")

    def _transition(self, new_state: SessionState) -> None:
        old_state = self._state
        self._state = new_state
        self.state_history.append((old_state, new_state))
        log_event(logger, "session_transition", level="DEBUG", from_state=old_state.value, to_state=new_state.value)
