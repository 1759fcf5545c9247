"""
Response normalization service.

Performs the network call for a built request with httpx, measures
latency and size, and deep-parses the body into structured data. Every
outcome is returned as a ResponseSuccess or ResponseFailure; transport
errors never propagate to the caller.
"""

import json
import logging
import time
from datetime import datetime, timezone
from typing import Iterable

import httpx
from pydantic import JsonValue

from ..config import get_settings
from ..schemas.request import Assertion
from ..schemas.response import ResponseFailure, ResponseResult, ResponseSuccess
from .assertions import evaluate
from .request_builder import BuiltRequest, JsonPayload, MultipartPayload, NoPayload, RawPayload


logger = logging.getLogger(__name__)

# Separates an embedded JSON payload from a stack trace in error text
STACK_TRACE_MARKER = "\n    at "


def _reject_constant(name: str):
    raise ValueError(f"Invalid JSON constant: {name}")


def _loads(text: str) -> JsonValue:
    """
    Parse strict JSON.

    ``NaN`` and ``Infinity`` are rejected, and nesting too deep for the
    decoder is reported as ``ValueError`` like any other malformed input.
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except RecursionError:
        raise ValueError("JSON nested too deeply") from None


def _dumps(value: JsonValue) -> str | None:
    try:
        return json.dumps(value)
    except (ValueError, RecursionError):
        return None


def _recover_embedded_json(text: str, depth: int, max_depth: int) -> JsonValue:
    """
    Recover a JSON object or array embedded in plain text.

    ``ValidationError: {"field": "email"}\\n    at handler (file.js:10)``
    becomes ``{"errorType": "ValidationError", "errorDetails": {...},
    "stackTrace": ["at handler (file.js:10)"]}``.
    """
    brace = min((i for i in (text.find("{"), text.find("[")) if i != -1), default=-1)
    if brace == -1:
        return text

    marker = text.find(STACK_TRACE_MARKER, brace)
    if marker != -1:
        candidate = text[brace:marker]
        stack_trace = [line.strip() for line in text[marker:].strip().split("\n")]
    else:
        candidate = text[brace:]
        stack_trace = []

    try:
        parsed = _loads(candidate)
    except ValueError:
        return text

    error_type = text[:brace].strip()
    if error_type.endswith(":"):
        error_type = error_type[:-1]

    return {
        "errorType": error_type,
        "errorDetails": deep_parse(parsed, max_depth, depth + 1),
        "stackTrace": stack_trace,
    }


def deep_parse(value: JsonValue, max_depth: int | None = None, depth: int = 0) -> JsonValue:
    """
    Recursively recover structured data from JSON-bearing strings.

    Strings are parsed as JSON and the result parsed again, so JSON-encoded
    JSON collapses fully. Strings that are not JSON but embed an object or
    array are wrapped into an ``errorType``/``errorDetails``/``stackTrace``
    object. Anything that cannot be recovered is returned unchanged. Objects
    and arrays nested beyond ``max_depth`` are kept as their JSON text.
    """
    if max_depth is None:
        max_depth = get_settings().deep_parse_max_depth
    if depth > max_depth:
        if isinstance(value, (list, dict)):
            text = _dumps(value)
            return text if text is not None else value
        return value

    if isinstance(value, str):
        try:
            parsed = _loads(value)
        except ValueError:
            return _recover_embedded_json(value, depth, max_depth)
        return deep_parse(parsed, max_depth, depth + 1)
    if isinstance(value, list):
        return [deep_parse(item, max_depth, depth + 1) for item in value]
    if isinstance(value, dict):
        return {key: deep_parse(item, max_depth, depth + 1) for key, item in value.items()}
    return value


def _request_kwargs(built: BuiltRequest) -> dict:
    kwargs: dict = {"method": built.method, "url": built.url, "headers": built.headers}
    body = built.body
    if isinstance(body, NoPayload):
        pass
    elif isinstance(body, RawPayload):
        kwargs["content"] = body.content.encode("utf-8")
    elif isinstance(body, JsonPayload):
        kwargs["json"] = body.value
    elif isinstance(body, MultipartPayload):
        if body.fields:
            kwargs["files"] = body.fields
    else:
        raise ValueError(f"Unsupported body payload: {type(body).__name__}")
    return kwargs


def _response_size(response: httpx.Response) -> int:
    content_length = response.headers.get("content-length")
    if content_length is not None:
        try:
            return int(content_length)
        except ValueError:
            pass
    return len(response.content)


async def _send(client: httpx.AsyncClient, built: BuiltRequest) -> tuple[httpx.Response, int]:
    start_time = time.perf_counter()
    response = await client.request(**_request_kwargs(built))
    await response.aread()
    elapsed_ms = int((time.perf_counter() - start_time) * 1000)
    return response, elapsed_ms


async def execute(
    built: BuiltRequest,
    assertions: Iterable[Assertion] = (),
    client: httpx.AsyncClient | None = None,
) -> ResponseResult:
    """
    Execute a built request and normalize the outcome.

    Args:
        built: Request produced by the request builder and auth injector
        assertions: Assertions evaluated against a successful response
        client: httpx client to use; a short-lived one is created if omitted

    Returns:
        ResponseSuccess with test results attached, or ResponseFailure
    """
    logger.debug("Executing %s %s", built.method, built.url)
    try:
        if client is None:
            settings = get_settings()
            async with httpx.AsyncClient(
                timeout=settings.request_timeout,
                follow_redirects=settings.follow_redirects,
                verify=settings.verify_ssl,
            ) as own_client:
                response, elapsed_ms = await _send(own_client, built)
        else:
            response, elapsed_ms = await _send(client, built)
    except httpx.TimeoutException as e:
        logger.warning("Request to %s timed out: %s", built.url, e)
        return ResponseFailure(message=f"Request timed out: {e}")
    except httpx.ConnectError as e:
        logger.warning("Failed to connect to %s: %s", built.url, e)
        return ResponseFailure(message=f"Failed to connect to server: {e}")
    except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
        logger.warning("Invalid URL %s: %s", built.url, e)
        return ResponseFailure(message=f"Invalid URL: {e}")
    except httpx.HTTPError as e:
        logger.warning("HTTP error for %s: %s", built.url, e)
        return ResponseFailure(message=f"HTTP error occurred: {e}")
    except Exception as e:
        logger.exception("Unexpected error executing %s %s", built.method, built.url)
        return ResponseFailure(message=f"An unexpected error occurred: {e}")

    fields = dict(
        status=response.status_code,
        status_text=response.reason_phrase or "",
        time=elapsed_ms,
        size=_response_size(response),
        timestamp=datetime.now(timezone.utc),
    )
    try:
        result = ResponseSuccess(data=deep_parse(response.text), **fields)
    except (ValueError, RecursionError):
        # pydantic rejects values nested beyond its recursion limit
        logger.warning("Response from %s kept as text: too deeply nested", built.url)
        result = ResponseSuccess(data=response.text, **fields)
    result.test_results = evaluate(result, list(assertions))
    return result
