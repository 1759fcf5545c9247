"""
Request execution API routes.

Executes saved and unsaved request definitions against an environment,
previews the built request without sending it, and imports cURL
commands. A transport failure is a normal result (``error: true``), not
an HTTP error.
"""

import logging
from typing import Union

import httpx
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_http_client
from ..exceptions import BadRequestError
from ..schemas.execute import BuildPreview, CurlImport, ExecuteDraft, ExecuteOptions
from ..schemas.request import RequestDefinition
from ..schemas.response import ResponseFailure, ResponseSuccess
from ..services.curl import parse_curl, to_curl
from ..services.environment_service import get_environment_variables
from ..services.history_service import record_response
from ..services.http_executor import execute_request, prepare
from ..services.request_builder import JsonPayload, MultipartPayload, NoPayload, RawPayload
from ..services.variable_resolver import find_unresolved
from .requests import get_request_or_404


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/execute", tags=["execute"])


def _body_preview(body) -> tuple[str, object]:
    if isinstance(body, NoPayload):
        return "none", None
    if isinstance(body, RawPayload):
        return "raw", body.content
    if isinstance(body, JsonPayload):
        return "json", body.value
    if isinstance(body, MultipartPayload):
        fields = []
        for key, (file_name, content, *_) in body.fields:
            if file_name is None:
                fields.append({"key": key, "value": content})
            else:
                fields.append({"key": key, "file_name": file_name, "size": len(content)})
        return "formdata", fields
    raise ValueError(f"Unsupported body payload: {type(body).__name__}")


@router.post("/build", response_model=BuildPreview)
def build_request_preview(draft: ExecuteDraft, db: Session = Depends(get_db)):
    """
    Build a request without sending it.

    Returns the final URL, headers and body along with warnings for
    placeholders that stayed unresolved.
    """
    variables = get_environment_variables(db, draft.environment_id)
    built = prepare(draft.request, variables)
    body_mode, body = _body_preview(built.body)

    warnings = [f"Unresolved in URL: {token}" for token in find_unresolved(built.url)]
    for key, value in built.headers.items():
        warnings.extend(f"Unresolved in header {key}: {token}" for token in find_unresolved(value))
    if isinstance(built.body, RawPayload):
        warnings.extend(f"Unresolved in body: {token}" for token in find_unresolved(built.body.content))

    return BuildPreview(
        method=built.method,
        url=built.url,
        headers=built.headers,
        body_mode=body_mode,
        body=body,
        curl=to_curl(built),
        warnings=warnings,
    )


@router.post("/curl", response_model=RequestDefinition)
def import_curl(curl_import: CurlImport):
    """Parse a cURL command into an unsaved request definition."""
    request = parse_curl(curl_import.command)
    if request is None:
        raise BadRequestError("Not a valid curl command")
    return request


@router.post("", response_model=Union[ResponseSuccess, ResponseFailure])
async def execute_draft_request(
    draft: ExecuteDraft,
    db: Session = Depends(get_db),
    client: httpx.AsyncClient | None = Depends(get_http_client),
):
    """
    Execute an unsaved request definition.

    Variables come from the given environment or the active one.
    """
    variables = get_environment_variables(db, draft.environment_id)
    _, result = await execute_request(draft.request, variables, client)
    return result


@router.post("/{request_id}", response_model=Union[ResponseSuccess, ResponseFailure])
async def execute_saved_request(
    request_id: int,
    options: ExecuteOptions | None = None,
    db: Session = Depends(get_db),
    client: httpx.AsyncClient | None = Depends(get_http_client),
):
    """
    Execute a saved request definition by ID.

    A successful response becomes the request's last response and is
    prepended to its history.
    """
    db_request = get_request_or_404(db, request_id)
    definition = RequestDefinition.model_validate(db_request)

    environment_id = options.environment_id if options else None
    variables = get_environment_variables(db, environment_id)

    _, result = await execute_request(definition, variables, client)

    if isinstance(result, ResponseSuccess):
        last_response, history = record_response(definition, result)
        db_request.last_response = last_response.model_dump(mode="json")
        db_request.history = [entry.model_dump(mode="json") for entry in history]
        db.commit()
        logger.debug("Recorded response %d for request %d", result.status, request_id)

    return result
