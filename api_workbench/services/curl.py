"""
cURL import and export.

``parse_curl`` turns a pasted ``curl ...`` command line into a request
definition; ``to_curl`` renders a built request as a copyable command.
"""

import re
import shlex

from ..schemas.request import Header, RawBody, RequestDefinition
from .request_builder import BuiltRequest, RawPayload
from .url_params import sync_params


METHOD_FLAGS = ("-X", "--request")
HEADER_FLAGS = ("-H", "--header")
DATA_FLAGS = ("-d", "--data", "--data-raw", "--data-binary")

# Methods whose body is included in an exported command
BODY_METHODS = ("POST", "PUT", "PATCH")

URL_PATTERN = re.compile(r'^https?://', re.IGNORECASE)


def parse_curl(command: str) -> RequestDefinition | None:
    """
    Parse a cURL command line into a request definition.

    Args:
        command: Text starting with ``curl``; line continuations are allowed

    Returns:
        The parsed request, or None when the text is not a curl command
    """
    if not command or not command.strip().lower().startswith("curl"):
        return None

    normalized = command.replace("\\\n", " ").replace("\n", " ").strip()
    try:
        tokens = shlex.split(normalized)
    except ValueError:
        return None

    method: str | None = None
    url = ""
    headers: list[Header] = []
    body: str | None = None

    args = iter(tokens[1:])
    for token in args:
        if token in METHOD_FLAGS:
            method = next(args, "").upper()
        elif token in HEADER_FLAGS:
            key, sep, value = next(args, "").partition(":")
            if sep:
                headers.append(Header(key=key.strip(), value=value.strip()))
        elif token in DATA_FLAGS:
            if body is None:
                body = next(args, "")
            else:
                next(args, None)
        elif not url and URL_PATTERN.match(token):
            url = token

    if method is None:
        method = "POST" if body is not None else "GET"
    if method not in ("GET", "POST", "PUT", "DELETE", "PATCH"):
        method = "GET"

    return RequestDefinition(
        method=method,
        url=url,
        headers=headers,
        params=sync_params(url, []),
        body=RawBody(raw=body or ""),
    )


def to_curl(built: BuiltRequest) -> str:
    """Render a built request as a multi-line cURL command."""
    lines = [f"curl -X {built.method.upper()} {shlex.quote(built.url)}"]
    for key, value in built.headers.items():
        if key and value:
            lines.append(f"  -H {shlex.quote(f'{key}: {value}')}")
    if isinstance(built.body, RawPayload) and built.method.upper() in BODY_METHODS:
        lines.append(f"  -d {shlex.quote(built.body.content)}")
    return " \\\n".join(lines)
