"""
Variable resolution service for request templates.

Replaces three kinds of tokens in a template string, in this order:

1. Dynamic tokens such as ``{{$timestamp}}`` or ``{{$randomUUID}}``,
   evaluated fresh on every call.
2. Named variables ``{{name}}`` from a variable set.
3. Path params ``:name`` bound to the request's path-type params.

Each step is a single regex pass, so substituted values are never
scanned again by the same step. Unknown tokens are left in place.
"""

import random
import re
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Mapping

from ..schemas.request import RequestDefinition


# {{$name}} dynamic tokens
DYNAMIC_PATTERN = re.compile(r'\{\{\$(\w+)\}\}')

# {{name}} placeholders; the name may not contain braces
VARIABLE_PATTERN = re.compile(r'\{\{([^{}]+)\}\}')

# :name path tokens
PATH_PARAM_PATTERN = re.compile(r':(\w+)')

FIRST_NAMES = ["James", "Mary", "John", "Patricia", "Robert", "Jennifer", "Michael", "Linda"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis"]


def _iso_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


DYNAMIC_TOKENS: dict[str, Callable[[], str]] = {
    "timestamp": lambda: str(int(datetime.now(timezone.utc).timestamp())),
    "isoTimestamp": _iso_timestamp,
    "randomUUID": lambda: str(uuid.uuid4()),
    "randomInt": lambda: str(random.randint(0, 999)),
    "randomBool": lambda: random.choice(["true", "false"]),
    "randomEmail": lambda: f"user{random.randint(0, 9999)}@example.com",
    "randomFirstName": lambda: random.choice(FIRST_NAMES),
    "randomLastName": lambda: random.choice(LAST_NAMES),
}


def clean_key(key: str) -> str:
    """Strip stray braces from a variable name."""
    return key.replace("{", "").replace("}", "")


def resolve_dynamic(template: str) -> str:
    """Replace every known ``{{$token}}`` with a freshly generated value."""

    def replace_match(match: re.Match) -> str:
        generator = DYNAMIC_TOKENS.get(match.group(1))
        return generator() if generator else match.group(0)

    return DYNAMIC_PATTERN.sub(replace_match, template)


def substitute(template: str, variables: Mapping[str, str]) -> str:
    """
    Replace ``{{name}}`` placeholders with values from ``variables``.

    Matching is exact and case-sensitive. Placeholders without a matching
    key are kept as-is.

    Example:
        >>> substitute("Hello {{name}}", {"name": "World"})
        'Hello World'
        >>> substitute("Hello {{name}}", {})
        'Hello {{name}}'
    """
    if not template:
        return template

    lookup = {clean_key(key): value for key, value in variables.items()}

    def replace_match(match: re.Match) -> str:
        name = match.group(1)
        if name in lookup:
            return lookup[name]
        return match.group(0)

    return VARIABLE_PATTERN.sub(replace_match, template)


def substitute_path_params(template: str, request: RequestDefinition | None) -> str:
    """Replace ``:name`` tokens with non-empty path param values."""
    if not template or request is None:
        return template

    path_values = {p.key: p.value for p in request.params if p.type == "path" and p.key}
    if not path_values:
        return template

    def replace_match(match: re.Match) -> str:
        value = path_values.get(match.group(1))
        return value if value else match.group(0)

    return PATH_PARAM_PATTERN.sub(replace_match, template)


def resolve(
    text: str | None,
    variables: Mapping[str, str],
    request: RequestDefinition | None = None,
) -> str:
    """
    Resolve a template string against a variable set and a request.

    Args:
        text: Template that may contain dynamic tokens, {{variables}} and :params
        variables: Variable name to value mapping
        request: Request whose path-type params bind :name tokens

    Returns:
        The resolved string; unresolved tokens remain literally in the output
    """
    result = text or ""
    result = resolve_dynamic(result)
    result = substitute(result, variables)
    return substitute_path_params(result, request)


def extract_variables(template: str) -> List[str]:
    """
    Extract all variable names from a template string.

    Example:
        >>> extract_variables("Hello {{name}}, your id is {{id}}")
        ['name', 'id']
    """
    if not template:
        return []

    return [name for name in VARIABLE_PATTERN.findall(template) if not name.startswith("$")]


def find_unresolved(resolved: str) -> List[str]:
    """List the placeholders and path tokens still present after resolution."""
    if not resolved:
        return []
    unresolved = [f"{{{{{name}}}}}" for name in VARIABLE_PATTERN.findall(resolved)]
    # Skip the scheme separator and ports, which look like path tokens
    path_part = re.sub(r'^[a-zA-Z][\w+.-]*://[^/]*', '', resolved)
    unresolved.extend(f":{name}" for name in PATH_PARAM_PATTERN.findall(path_part) if not name.isdigit())
    return unresolved
