"""
Pydantic schemas for request definitions.

A request definition is the unit of execution: a templated URL, headers,
params, a body in one of three modes, an authorization strategy and a
list of assertions. Body and auth are closed tagged unions keyed on
``mode`` and ``type`` respectively.
"""

import uuid
from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import Base64Bytes, BaseModel, ConfigDict, Field, field_validator

from .response import ResponseSuccess


# HTTP methods supported by the system
HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]

# WS and SSE requests ignore the method
Protocol = Literal["REST", "WS", "SSE", "GRAPHQL"]

ParamType = Literal["path", "query"]

AssertionType = Literal["status_code", "response_time", "body_contains", "json_value"]


def new_assertion_id() -> str:
    """Generate a short opaque id for an assertion."""
    return uuid.uuid4().hex[:7]


class Header(BaseModel):
    key: str = ""
    value: str = ""


class RequestParam(BaseModel):
    key: str = ""
    value: str = ""
    type: ParamType = "query"


class FormField(BaseModel):
    """
    One multipart form field.

    Text fields carry a template in ``value``. File fields carry the raw
    file bytes (base64 in JSON) which are sent as-is.
    """
    key: str = ""
    value: str = ""
    type: Literal["text", "file"] = "text"
    file_name: str | None = None
    file_content: Base64Bytes | None = None
    content_type: str | None = None


# Body variants

class RawBody(BaseModel):
    mode: Literal["raw"] = "raw"
    raw: str = ""


class FormDataBody(BaseModel):
    mode: Literal["formdata"] = "formdata"
    formdata: list[FormField] = []


class GraphQLQuery(BaseModel):
    query: str = ""
    variables: str = ""


class GraphQLBody(BaseModel):
    mode: Literal["graphql"] = "graphql"
    graphql: GraphQLQuery = Field(default_factory=GraphQLQuery)


RequestBody = Annotated[
    Union[RawBody, FormDataBody, GraphQLBody],
    Field(discriminator="mode"),
]


# Auth variants

class NoAuth(BaseModel):
    type: Literal["none"] = "none"


class BearerAuth(BaseModel):
    type: Literal["bearer"] = "bearer"
    token: str = ""


class BasicAuth(BaseModel):
    type: Literal["basic"] = "basic"
    username: str = ""
    password: str = ""


class ApiKeyAuth(BaseModel):
    type: Literal["apikey"] = "apikey"
    key: str = ""
    value: str = ""
    add_to: Literal["header", "query"] = "header"


AuthConfig = Annotated[
    Union[NoAuth, BearerAuth, BasicAuth, ApiKeyAuth],
    Field(discriminator="type"),
]


class Assertion(BaseModel):
    """A typed check evaluated against a successful response."""
    id: str = Field(default_factory=new_assertion_id)
    type: AssertionType
    property: str | None = None
    expected: str = ""


def _check_assertion_ids(assertions: list[Assertion] | None) -> list[Assertion] | None:
    if assertions:
        ids = [a.id for a in assertions]
        if len(ids) != len(set(ids)):
            raise ValueError("assertion ids must be unique within a request")
    return assertions


class RequestFields(BaseModel):
    """Editable fields shared by every request schema."""
    name: str = ""
    method: HttpMethod = "GET"
    protocol: Protocol = "REST"
    url: str = ""
    headers: list[Header] = []
    params: list[RequestParam] = []
    body: RequestBody = Field(default_factory=RawBody)
    auth: AuthConfig = Field(default_factory=NoAuth)
    assertions: list[Assertion] = []

    unique_assertion_ids = field_validator("assertions")(_check_assertion_ids)


class HistoryEntry(BaseModel):
    """Snapshot of a request as sent together with the response it got."""
    request: RequestFields
    response: ResponseSuccess
    timestamp: datetime


class RequestDefinition(RequestFields):
    """
    Request definition as consumed by the execution engine.

    ``id`` is None for unsaved drafts. The engine treats the definition as
    read-only input.
    """
    id: int | None = None
    last_response: ResponseSuccess | None = None
    history: list[HistoryEntry] = []

    model_config = ConfigDict(from_attributes=True)


class RequestCreate(RequestFields):
    """Schema for creating a new request."""
    collection_id: int | None = None


class RequestUpdate(BaseModel):
    """Schema for updating an existing request. All fields are optional."""
    name: str | None = None
    method: HttpMethod | None = None
    protocol: Protocol | None = None
    url: str | None = None
    headers: list[Header] | None = None
    params: list[RequestParam] | None = None
    body: RequestBody | None = None
    auth: AuthConfig | None = None
    assertions: list[Assertion] | None = None
    collection_id: int | None = None
    sort_order: int | None = None

    unique_assertion_ids = field_validator("assertions")(_check_assertion_ids)


class RequestResponse(RequestDefinition):
    """Schema for a stored request including system-generated fields."""
    id: int
    collection_id: int | None
    sort_order: int
    created_at: datetime
    updated_at: datetime
