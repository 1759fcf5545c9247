"""
Collection runner.

Executes a list of request definitions strictly one after another,
chaining values extracted from each response into a run-scoped copy of
the environment variables. Cancellation is cooperative: ``stop()`` only
prevents the next step from starting.
"""

import asyncio
import logging
import time
from typing import Any, Mapping, Sequence

import httpx

from ..schemas.request import RequestDefinition
from ..schemas.response import ResponseSuccess
from ..schemas.runner import RunResult
from .assertions import stringify_value
from .http_executor import execute_request
from .variable_resolver import clean_key


logger = logging.getLogger(__name__)


class CancellationToken:
    """Stop flag owned by a single run."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def extract_run_variables(payload: Any, run_variables: dict[str, str]) -> dict[str, str]:
    """
    Overwrite run-scope variables with same-named values from a response.

    Only names already in ``run_variables`` are considered. Each is looked
    up as a top-level key of the payload, then inside a nested ``data``
    object. Null values are ignored.

    Returns:
        The variables that were updated
    """
    if not isinstance(payload, dict):
        return {}

    nested = payload.get("data")
    if not isinstance(nested, dict):
        nested = {}

    extracted: dict[str, str] = {}
    for key in list(run_variables):
        name = clean_key(key)
        if payload.get(name) is not None:
            extracted[name] = stringify_value(payload[name])
        elif nested.get(name) is not None:
            extracted[name] = stringify_value(nested[name])

    run_variables.update(extracted)
    return extracted


class CollectionRunner:
    """
    Sequential runner over request definitions.

    The runner snapshots ``environment`` when a run starts; the mapping
    itself is never modified. Results are appended as each step finishes
    and can be read while the run is in progress.
    """

    def __init__(
        self,
        environment: Mapping[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._environment = environment if environment is not None else {}
        self._client = client
        self._token: CancellationToken | None = None
        self._task: asyncio.Task | None = None
        self._run_variables: dict[str, str] = {}
        self.results: list[RunResult] = []
        self.current_index = -1

    @property
    def is_running(self) -> bool:
        return self._token is not None

    @property
    def run_variables(self) -> dict[str, str]:
        return dict(self._run_variables)

    def start(
        self,
        requests: Sequence[RequestDefinition],
        delay_ms: int = 0,
        enable_chaining: bool = True,
    ) -> asyncio.Task | None:
        """
        Start a run in the background on the current event loop.

        Returns:
            The task running the collection, or None if a run is already
            in progress
        """
        if self.is_running:
            logger.info("Run already in progress; start ignored")
            return None

        token = CancellationToken()
        self._token = token
        self._run_variables = dict(self._environment)
        self.results = []
        self.current_index = 0

        logger.info("Starting run of %d request(s) with %dms delay", len(requests), delay_ms)
        self._task = asyncio.create_task(
            self._run(list(requests), delay_ms, enable_chaining, token, self.results, self._run_variables)
        )
        return self._task

    async def run(
        self,
        requests: Sequence[RequestDefinition],
        delay_ms: int = 0,
        enable_chaining: bool = True,
    ) -> list[RunResult]:
        """Start a run and wait for it to finish or stop."""
        task = self.start(requests, delay_ms, enable_chaining)
        if task is None:
            return self.results
        return await task

    def stop(self) -> None:
        """Request a cooperative stop; the in-flight step still completes."""
        if self._token is not None:
            logger.info("Stop requested at step %d", self.current_index)
            self._token.cancel()
        self._token = None
        self.current_index = -1

    async def _run(
        self,
        requests: list[RequestDefinition],
        delay_ms: int,
        enable_chaining: bool,
        token: CancellationToken,
        results: list[RunResult],
        run_variables: dict[str, str],
    ) -> list[RunResult]:
        try:
            for index, request in enumerate(requests):
                if token.cancelled:
                    break
                if self._token is token:
                    self.current_index = index

                result = await self._execute_step(request, run_variables)
                results.append(result)
                logger.info(
                    "Step %d/%d %s %s -> %s",
                    index + 1, len(requests), result.method, result.url, result.status or result.error,
                )

                if enable_chaining and isinstance(result.response_data, dict):
                    extracted = extract_run_variables(result.response_data, run_variables)
                    if extracted:
                        logger.debug("Extracted variables: %s", ", ".join(sorted(extracted)))

                if delay_ms > 0 and index < len(requests) - 1 and not token.cancelled:
                    await asyncio.sleep(delay_ms / 1000)
        finally:
            if self._token is token:
                self._token = None
                self.current_index = -1
        logger.info("Run finished with %d result(s)", len(results))
        return results

    async def _execute_step(self, request: RequestDefinition, run_variables: dict[str, str]) -> RunResult:
        start_time = time.perf_counter()
        try:
            built, response = await execute_request(request, run_variables, self._client)
        except Exception as e:
            logger.exception("Step %s %s failed unexpectedly", request.method, request.url)
            return RunResult(
                endpoint_id=request.id,
                name=request.name,
                method=request.method,
                url=request.url,
                status=None,
                status_text="Error",
                time=int((time.perf_counter() - start_time) * 1000),
                error=f"An unexpected error occurred: {e}",
            )

        if isinstance(response, ResponseSuccess):
            return RunResult(
                endpoint_id=request.id,
                name=request.name,
                method=request.method,
                url=built.url,
                status=response.status,
                status_text=response.status_text,
                time=response.time,
                response_data=response.data,
                test_results=response.test_results,
            )

        return RunResult(
            endpoint_id=request.id,
            name=request.name,
            method=request.method,
            url=built.url,
            status=None,
            status_text="Error",
            time=int((time.perf_counter() - start_time) * 1000),
            error=response.message,
        )
