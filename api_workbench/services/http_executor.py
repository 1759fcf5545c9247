"""
HTTP execution service for request definitions.

Builds the concrete request, injects authorization and hands it to the
response normalizer. Used both for single executions and by the
collection runner for each step.
"""

import logging
from typing import Mapping

import httpx

from ..schemas.request import RequestDefinition
from ..schemas.response import ResponseFailure, ResponseResult
from .auth import inject
from .request_builder import BuiltRequest, build
from .response_normalizer import execute


logger = logging.getLogger(__name__)

# Protocols that need a socket or event stream rather than a single request
STREAMING_PROTOCOLS = ("WS", "SSE")


def prepare(request: RequestDefinition, variables: Mapping[str, str]) -> BuiltRequest:
    """Build a request and apply its auth strategy."""
    built = build(request, variables)
    built.url = inject(built.headers, request.auth, variables, request, built.url)
    return built


async def execute_request(
    request: RequestDefinition,
    variables: Mapping[str, str],
    client: httpx.AsyncClient | None = None,
) -> tuple[BuiltRequest, ResponseResult]:
    """
    Execute a request definition against a variable set.

    Args:
        request: The request definition (read-only)
        variables: Variable set used for template resolution
        client: Optional httpx client shared across calls

    Returns:
        Tuple of (the built request as sent, the normalized result)
    """
    built = prepare(request, variables)
    if request.protocol in STREAMING_PROTOCOLS:
        logger.info("Skipping %s request %s: not executable over HTTP", request.protocol, built.url)
        return built, ResponseFailure(
            message=f"{request.protocol} requests need a streaming connection and cannot be sent as a single HTTP request"
        )
    result = await execute(built, request.assertions, client)
    return built, result
