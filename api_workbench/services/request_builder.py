"""
Request building service.

Combines a request definition with a variable set into the concrete URL,
header map and body payload handed to the transport. Building never
raises: unresolved tokens stay visible in the output.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Union
from urllib.parse import parse_qsl, urlencode

from ..schemas.request import FormDataBody, GraphQLBody, RawBody, RequestDefinition
from .variable_resolver import resolve


# Methods that never carry a body
BODYLESS_METHODS = ("GET", "HEAD")


@dataclass
class NoPayload:
    """Nothing is sent."""


@dataclass
class RawPayload:
    content: str


@dataclass
class JsonPayload:
    value: dict[str, Any]


@dataclass
class MultipartPayload:
    """
    Ordered multipart fields in httpx ``files`` form.

    Text fields use a ``None`` filename so they render as plain form
    values inside the multipart body.
    """
    fields: list[tuple[str, tuple]] = field(default_factory=list)


BodyPayload = Union[NoPayload, RawPayload, JsonPayload, MultipartPayload]


@dataclass
class BuiltRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: BodyPayload


def find_header(headers: Mapping[str, str], name: str) -> str | None:
    """Return the actual key of a header, compared case-insensitively."""
    lowered = name.lower()
    for key in headers:
        if key.lower() == lowered:
            return key
    return None


def remove_header(headers: dict[str, str], name: str) -> None:
    for key in [k for k in headers if k.lower() == name.lower()]:
        del headers[key]


def build_url(request: RequestDefinition, variables: Mapping[str, str]) -> str:
    """
    Resolve the URL template and merge query-type params into it.

    A query param replaces a same-named key already present in the URL;
    other literal query keys are kept in their original order.
    """
    url = resolve(request.url, variables, request)
    query_params = [p for p in request.params if p.type == "query" and p.key]
    if not query_params:
        return url

    base, _, existing_query = url.partition("?")
    pairs = parse_qsl(existing_query, keep_blank_values=True)
    for param in query_params:
        value = resolve(param.value, variables, request)
        positions = [i for i, (key, _) in enumerate(pairs) if key == param.key]
        if positions:
            pairs[positions[0]] = (param.key, value)
            for index in reversed(positions[1:]):
                del pairs[index]
        else:
            pairs.append((param.key, value))

    query = urlencode(pairs)
    return f"{base}?{query}" if query else base


def build_headers(request: RequestDefinition, variables: Mapping[str, str]) -> dict[str, str]:
    """Resolve header values in order; blank keys are skipped, last write wins."""
    headers: dict[str, str] = {}
    for header in request.headers:
        if not header.key.strip():
            continue
        existing = find_header(headers, header.key)
        if existing is not None:
            del headers[existing]
        headers[header.key] = resolve(header.value, variables, request)
    return headers


def _parse_graphql_variables(text: str) -> dict[str, Any]:
    if not text.strip():
        return {}
    try:
        parsed = json.loads(text)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def build_body(
    request: RequestDefinition,
    variables: Mapping[str, str],
    headers: dict[str, str],
) -> BodyPayload:
    """
    Build the body payload for the request's body mode.

    ``headers`` is adjusted in place: raw bodies default the Content-Type to
    JSON and multipart bodies drop it so the transport sets the boundary.
    """
    body = request.body
    if isinstance(body, RawBody):
        content = resolve(body.raw, variables, request)
        if not content:
            return NoPayload()
        if find_header(headers, "Content-Type") is None:
            headers["Content-Type"] = "application/json"
        return RawPayload(content=content)

    if isinstance(body, FormDataBody):
        remove_header(headers, "Content-Type")
        fields: list[tuple[str, tuple]] = []
        for form_field in body.formdata:
            if not form_field.key:
                continue
            if form_field.type == "file":
                if form_field.file_content is None:
                    continue
                fields.append((
                    form_field.key,
                    (
                        form_field.file_name or form_field.key,
                        form_field.file_content,
                        form_field.content_type or "application/octet-stream",
                    ),
                ))
            else:
                fields.append((form_field.key, (None, resolve(form_field.value, variables, request))))
        return MultipartPayload(fields=fields)

    if isinstance(body, GraphQLBody):
        query = resolve(body.graphql.query, variables, request)
        graphql_variables = _parse_graphql_variables(resolve(body.graphql.variables, variables, request))
        return JsonPayload(value={"query": query, "variables": graphql_variables})

    raise ValueError(f"Unsupported body mode: {body.mode}")


def build(request: RequestDefinition, variables: Mapping[str, str]) -> BuiltRequest:
    """
    Build the concrete request from a definition and a variable set.

    Args:
        request: The request definition (not modified)
        variables: Variable name to value mapping

    Returns:
        BuiltRequest with the final URL, header map and body payload
    """
    url = build_url(request, variables)
    headers = build_headers(request, variables)
    if request.method in BODYLESS_METHODS:
        body = NoPayload()
    else:
        body = build_body(request, variables, headers)
    return BuiltRequest(method=request.method, url=url, headers=headers, body=body)
