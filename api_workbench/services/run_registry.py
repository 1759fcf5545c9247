"""
In-memory registry of collection runs started through the API.

Each run gets its own CollectionRunner and therefore its own run scope
and cancellation token. The registry belongs to the application state.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Mapping, Sequence

import httpx

from ..schemas.request import RequestDefinition
from .collection_runner import CollectionRunner


logger = logging.getLogger(__name__)


@dataclass
class RunHandle:
    run_id: str
    collection_id: int | None
    total: int
    runner: CollectionRunner
    task: asyncio.Task | None


class RunRegistry:
    """
    Keeps track of runs by ID.

    Finished runs stay readable until more than ``retention`` of them have
    accumulated; the oldest are then dropped along with their results.
    """

    def __init__(self, retention: int = 20):
        self.retention = retention
        self._runs: dict[str, RunHandle] = {}

    def start(
        self,
        requests: Sequence[RequestDefinition],
        environment: Mapping[str, str],
        client: httpx.AsyncClient | None = None,
        delay_ms: int = 0,
        enable_chaining: bool = True,
        collection_id: int | None = None,
    ) -> RunHandle:
        """Create a runner and start it on the running event loop."""
        runner = CollectionRunner(environment=environment, client=client)
        task = runner.start(requests, delay_ms, enable_chaining)
        handle = RunHandle(
            run_id=uuid.uuid4().hex,
            collection_id=collection_id,
            total=len(requests),
            runner=runner,
            task=task,
        )
        self._runs[handle.run_id] = handle
        logger.info("Registered run %s (%d request(s))", handle.run_id, handle.total)
        if task is not None:
            task.add_done_callback(lambda done: self._on_finished(handle.run_id, done))
        return handle

    def get(self, run_id: str) -> RunHandle | None:
        return self._runs.get(run_id)

    def active_for_collection(self, collection_id: int) -> RunHandle | None:
        for handle in self._runs.values():
            if handle.collection_id == collection_id and handle.runner.is_running:
                return handle
        return None

    def stop_all(self) -> None:
        for handle in self._runs.values():
            handle.runner.stop()

    def _on_finished(self, run_id: str, task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error("Run %s crashed", run_id, exc_info=task.exception())
        self.evict_finished()

    def evict_finished(self) -> list[str]:
        """
        Drop the oldest finished runs beyond the retention count.

        Returns:
            IDs of the evicted runs
        """
        finished = [
            run_id for run_id, handle in self._runs.items()
            if not handle.runner.is_running and (handle.task is None or handle.task.done())
        ]
        evicted = finished[:max(len(finished) - self.retention, 0)]
        for run_id in evicted:
            del self._runs[run_id]
        if evicted:
            logger.debug("Evicted %d finished run(s)", len(evicted))
        return evicted
