"""
Pydantic schemas package.

Exports all schemas for API request/response validation and for the
execution engine's data model.
"""

from .response import (
    TestResult,
    ResponseSuccess,
    ResponseFailure,
    ResponseResult,
)

from .request import (
    HttpMethod,
    Protocol,
    Header,
    RequestParam,
    FormField,
    RawBody,
    FormDataBody,
    GraphQLQuery,
    GraphQLBody,
    RequestBody,
    NoAuth,
    BearerAuth,
    BasicAuth,
    ApiKeyAuth,
    AuthConfig,
    Assertion,
    new_assertion_id,
    RequestFields,
    HistoryEntry,
    RequestDefinition,
    RequestCreate,
    RequestUpdate,
    RequestResponse,
)

from .collection import (
    CollectionCreate,
    CollectionUpdate,
    CollectionResponse,
    CollectionWithRequests,
)

from .environment import (
    VariableCreate,
    VariableUpdate,
    VariableResponse,
    EnvironmentCreate,
    EnvironmentUpdate,
    EnvironmentResponse,
)

from .execute import (
    ExecuteOptions,
    ExecuteDraft,
    BuildPreview,
    CurlImport,
)

from .runner import (
    RunResult,
    RunCreate,
    RunStatus,
)

__all__ = [
    # Result schemas
    "TestResult",
    "ResponseSuccess",
    "ResponseFailure",
    "ResponseResult",
    # Request schemas
    "HttpMethod",
    "Protocol",
    "Header",
    "RequestParam",
    "FormField",
    "RawBody",
    "FormDataBody",
    "GraphQLQuery",
    "GraphQLBody",
    "RequestBody",
    "NoAuth",
    "BearerAuth",
    "BasicAuth",
    "ApiKeyAuth",
    "AuthConfig",
    "Assertion",
    "new_assertion_id",
    "RequestFields",
    "HistoryEntry",
    "RequestDefinition",
    "RequestCreate",
    "RequestUpdate",
    "RequestResponse",
    # Collection schemas
    "CollectionCreate",
    "CollectionUpdate",
    "CollectionResponse",
    "CollectionWithRequests",
    # Environment schemas
    "VariableCreate",
    "VariableUpdate",
    "VariableResponse",
    "EnvironmentCreate",
    "EnvironmentUpdate",
    "EnvironmentResponse",
    # Execute schemas
    "ExecuteOptions",
    "ExecuteDraft",
    "BuildPreview",
    "CurlImport",
    # Run schemas
    "RunResult",
    "RunCreate",
    "RunStatus",
]
