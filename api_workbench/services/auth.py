"""
Authorization injection.

Applies the request's auth strategy to an already built header map and
URL. Headers set explicitly by the user always win: when injection would
collide with one, it is silently skipped.
"""

import base64
from typing import Mapping
from urllib.parse import quote

from ..schemas.request import ApiKeyAuth, BasicAuth, BearerAuth, NoAuth, RequestDefinition
from .request_builder import find_header
from .variable_resolver import resolve


# Punctuation left unescaped when the API key goes into the query string
URI_SAFE = "!~*'()"


def inject(
    headers: dict[str, str],
    auth,
    variables: Mapping[str, str],
    request: RequestDefinition | None,
    url: str,
) -> str:
    """
    Inject authorization into ``headers`` (in place) or into the URL.

    Args:
        headers: Header map produced by the request builder
        auth: One of NoAuth, BearerAuth, BasicAuth, ApiKeyAuth
        variables: Variable set used to resolve auth fields
        request: Request whose path params bind :name tokens
        url: The built URL

    Returns:
        The URL, with the API key appended when it goes into the query string
    """
    if isinstance(auth, NoAuth):
        return url

    if isinstance(auth, BearerAuth):
        token = resolve(auth.token, variables, request)
        if token and find_header(headers, "Authorization") is None:
            headers["Authorization"] = f"Bearer {token}"
        return url

    if isinstance(auth, BasicAuth):
        if find_header(headers, "Authorization") is None:
            username = resolve(auth.username, variables, request)
            password = resolve(auth.password, variables, request)
            credentials = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
            headers["Authorization"] = f"Basic {credentials}"
        return url

    if isinstance(auth, ApiKeyAuth):
        if not auth.key:
            return url
        key = resolve(auth.key, variables, request)
        value = resolve(auth.value, variables, request)
        if auth.add_to == "header":
            if key not in headers:
                headers[key] = value
            return url
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}{quote(key, safe=URI_SAFE)}={quote(value, safe=URI_SAFE)}"

    raise ValueError(f"Unsupported auth type: {getattr(auth, 'type', auth)!r}")
