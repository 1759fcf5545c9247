"""
Pydantic schemas for request execution.

Defines the payloads for executing, previewing and importing requests.
"""

from typing import Any

from pydantic import BaseModel

from .request import RequestDefinition


class ExecuteOptions(BaseModel):
    """Schema for execution options."""
    environment_id: int | None = None


class ExecuteDraft(BaseModel):
    """Schema for executing or previewing an unsaved request definition."""
    request: RequestDefinition
    environment_id: int | None = None


class BuildPreview(BaseModel):
    """
    The request as it would be sent, without sending it.

    ``warnings`` lists placeholders and path params that stayed unresolved.
    """
    method: str
    url: str
    headers: dict[str, str]
    body_mode: str
    body: Any = None
    curl: str
    warnings: list[str] = []


class CurlImport(BaseModel):
    """Schema for importing a cURL command."""
    command: str
