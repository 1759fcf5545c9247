"""
Keeps a request's params list in sync with its URL.

Every ``:name`` token in the URL has exactly one path-type param. Query
params found in a literal ``?...`` suffix are listed next, followed by
manually added query params whose keys the URL does not mention.
"""

import re
from urllib.parse import parse_qsl

from ..schemas.request import RequestParam


PATH_TOKEN_PATTERN = re.compile(r':([a-zA-Z0-9_]+)')


def parse_url_params(url: str) -> list[RequestParam]:
    """Detect path tokens and literal query params in a URL."""
    params: list[RequestParam] = []
    seen_paths: set[str] = set()
    base, _, query = url.partition("?")
    # Ignore the scheme separator and host:port
    path = re.sub(r'^[a-zA-Z][\w+.-]*://[^/]*', '', base)
    for name in PATH_TOKEN_PATTERN.findall(path):
        if name not in seen_paths:
            seen_paths.add(name)
            params.append(RequestParam(key=name, value="", type="path"))
    if query:
        for key, value in parse_qsl(query, keep_blank_values=True):
            params.append(RequestParam(key=key, value=value, type="query"))
    return params


def sync_params(url: str, existing: list[RequestParam]) -> list[RequestParam]:
    """
    Recompute the params list after the URL changed.

    Path param values and manual query params survive the sync; path
    params whose token disappeared from the URL are dropped.
    """
    detected = parse_url_params(url or "")
    existing_paths = {p.key: p for p in existing if p.type == "path"}
    existing_queries = {p.key: p for p in existing if p.type == "query"}

    path_params = []
    query_params = []
    for param in detected:
        if param.type == "path":
            match = existing_paths.get(param.key)
            path_params.append(param.model_copy(update={"value": match.value}) if match else param)
        else:
            match = existing_queries.get(param.key)
            if match:
                query_params.append(match.model_copy(update={"value": param.value or match.value}))
            else:
                query_params.append(param)

    url_query_keys = {p.key for p in query_params}
    manual = [p for p in existing if p.type == "query" and p.key not in url_query_keys]
    return path_params + query_params + manual
