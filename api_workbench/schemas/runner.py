"""
Pydantic schemas for collection runs.

Defines the per-step run result and the API payloads used to start and
inspect a run.
"""

from pydantic import BaseModel, Field, JsonValue, computed_field

from .response import TestResult


class RunResult(BaseModel):
    """Outcome of one step of a collection run."""
    endpoint_id: int | None = None
    name: str = ""
    method: str
    url: str
    status: int | None = None
    status_text: str = ""
    time: int = 0
    error: str | None = None
    response_data: JsonValue = None
    test_results: list[TestResult] = []

    @computed_field
    @property
    def passed(self) -> bool:
        return self.status is not None and 200 <= self.status < 400


class RunCreate(BaseModel):
    """
    Schema for starting a run.

    Either a collection or an explicit, ordered list of saved request IDs
    selects the participating requests.
    """
    collection_id: int | None = None
    request_ids: list[int] | None = None
    environment_id: int | None = None
    delay_ms: int = Field(default=0, ge=0)
    enable_chaining: bool = True


class RunStatus(BaseModel):
    """Snapshot of a run, observable while it is in progress."""
    run_id: str
    is_running: bool
    current_index: int
    total: int
    results: list[RunResult]
    run_variables: dict[str, str]
