"""
Collection run API routes.

Starts sequential runs over saved requests in the background and exposes
their progress. Runs live in memory for the lifetime of the application.
"""

import httpx
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_http_client, get_run_registry
from ..exceptions import BadRequestError, ConflictError, ResourceNotFoundError
from ..models.request import Request
from ..schemas.request import RequestDefinition
from ..schemas.runner import RunCreate, RunStatus
from ..services.environment_service import get_environment_variables
from ..services.run_registry import RunHandle, RunRegistry
from .collections import get_collection_or_404


router = APIRouter(prefix="/api/runs", tags=["runs"])


def _run_status(handle: RunHandle) -> RunStatus:
    runner = handle.runner
    return RunStatus(
        run_id=handle.run_id,
        is_running=runner.is_running,
        current_index=runner.current_index,
        total=handle.total,
        results=list(runner.results),
        run_variables=runner.run_variables,
    )


def _get_run(registry: RunRegistry, run_id: str) -> RunHandle:
    handle = registry.get(run_id)
    if handle is None:
        raise ResourceNotFoundError("Run", run_id)
    return handle


def _load_requests(db: Session, run_data: RunCreate) -> list[Request]:
    if run_data.request_ids is not None:
        rows = []
        for request_id in run_data.request_ids:
            db_request = db.get(Request, request_id)
            if db_request is None:
                raise ResourceNotFoundError("Request", request_id)
            rows.append(db_request)
        return rows
    return list(get_collection_or_404(db, run_data.collection_id).requests)


@router.post("", response_model=RunStatus, status_code=status.HTTP_202_ACCEPTED)
async def start_run(
    run_data: RunCreate,
    db: Session = Depends(get_db),
    client: httpx.AsyncClient | None = Depends(get_http_client),
    registry: RunRegistry = Depends(get_run_registry),
):
    """
    Start a run over a collection or an explicit list of requests.

    The run proceeds in the background; poll ``GET /api/runs/{run_id}``
    for results. A collection can only have one active run at a time.
    """
    if run_data.collection_id is None and run_data.request_ids is None:
        raise BadRequestError("Either collection_id or request_ids is required")

    rows = _load_requests(db, run_data)
    if not rows:
        raise BadRequestError("Nothing to run")

    if run_data.collection_id is not None and registry.active_for_collection(run_data.collection_id):
        raise ConflictError(f"Collection {run_data.collection_id} already has a run in progress")

    variables = get_environment_variables(db, run_data.environment_id)
    requests = [RequestDefinition.model_validate(row) for row in rows]

    handle = registry.start(
        requests,
        variables,
        client=client,
        delay_ms=run_data.delay_ms,
        enable_chaining=run_data.enable_chaining,
        collection_id=run_data.collection_id,
    )
    return _run_status(handle)


@router.get("/{run_id}", response_model=RunStatus)
def get_run(run_id: str, registry: RunRegistry = Depends(get_run_registry)):
    """Get the progress and results of a run."""
    return _run_status(_get_run(registry, run_id))


@router.post("/{run_id}/stop", response_model=RunStatus)
def stop_run(run_id: str, registry: RunRegistry = Depends(get_run_registry)):
    """
    Stop a run.

    The step in flight still completes and its result is kept; no further
    step starts.
    """
    handle = _get_run(registry, run_id)
    handle.runner.stop()
    return _run_status(handle)
