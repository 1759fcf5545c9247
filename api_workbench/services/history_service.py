"""
History service for request executions.

Produces the new ``last_response`` and bounded ``history`` values for a
request definition after it was executed. Storing them is up to the
caller.
"""

from ..config import get_settings
from ..schemas.request import HistoryEntry, RequestDefinition, RequestFields
from ..schemas.response import ResponseSuccess


def record_response(
    request: RequestDefinition,
    response: ResponseSuccess,
    limit: int | None = None,
) -> tuple[ResponseSuccess, list[HistoryEntry]]:
    """
    Prepend an execution to a request's history.

    Args:
        request: The executed request definition
        response: The response it received
        limit: Maximum history length (most recent first); defaults to settings

    Returns:
        Tuple of (new last_response, new history list)
    """
    if limit is None:
        limit = get_settings().history_limit

    snapshot = RequestFields(**{name: getattr(request, name) for name in RequestFields.model_fields})
    entry = HistoryEntry(request=snapshot, response=response, timestamp=response.timestamp)
    history = [entry, *request.history][:limit]
    return response, history
