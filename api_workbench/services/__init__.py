# Services package

from .variable_resolver import resolve, extract_variables, find_unresolved
from .request_builder import build, BuiltRequest
from .auth import inject
from .response_normalizer import deep_parse, execute
from .assertions import evaluate
from .http_executor import prepare, execute_request
from .collection_runner import CollectionRunner, CancellationToken, extract_run_variables
from .history_service import record_response
from .url_params import sync_params
from .curl import parse_curl, to_curl

__all__ = [
    "resolve",
    "extract_variables",
    "find_unresolved",
    "build",
    "BuiltRequest",
    "inject",
    "deep_parse",
    "execute",
    "evaluate",
    "prepare",
    "execute_request",
    "CollectionRunner",
    "CancellationToken",
    "extract_run_variables",
    "record_response",
    "sync_params",
    "parse_curl",
    "to_curl",
]
