"""
FastAPI dependencies shared by the routers.
"""

from typing import AsyncIterator

import httpx
from fastapi import Request

from .services.run_registry import RunRegistry


async def get_http_client() -> AsyncIterator[httpx.AsyncClient | None]:
    """
    Transport used for executions.

    None lets the engine open a short-lived client per call with the
    configured timeout; tests override this with a mock transport.
    """
    yield None


def get_run_registry(request: Request) -> RunRegistry:
    """The run registry owned by the application."""
    return request.app.state.run_registry
