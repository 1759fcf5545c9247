"""
Pydantic schemas for execution results.

A single execution yields exactly one of ``ResponseSuccess`` or
``ResponseFailure``; there is no partial shape.
"""

from datetime import datetime
from typing import Literal, Union

from pydantic import BaseModel, JsonValue


class TestResult(BaseModel):
    """Outcome of one assertion, in assertion-list order."""
    __test__ = False

    assertion_id: str
    name: str
    passed: bool
    message: str


class ResponseSuccess(BaseModel):
    """A response that came back from the server with a status code."""
    status: int
    status_text: str
    time: int
    size: int
    data: JsonValue = None
    timestamp: datetime
    test_results: list[TestResult] = []


class ResponseFailure(BaseModel):
    """A transport-level failure; no status code was received."""
    error: Literal[True] = True
    message: str


ResponseResult = Union[ResponseSuccess, ResponseFailure]
