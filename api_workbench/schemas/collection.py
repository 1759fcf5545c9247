"""
Pydantic schemas for collections.

A collection groups request definitions in run order.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .request import RequestResponse


class CollectionBase(BaseModel):
    name: str
    description: str = ""


class CollectionCreate(CollectionBase):
    """Schema for creating a new collection."""
    pass


class CollectionUpdate(BaseModel):
    """Schema for updating an existing collection. All fields are optional."""
    name: str | None = None
    description: str | None = None


class CollectionResponse(CollectionBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CollectionWithRequests(CollectionResponse):
    """Collection including its requests in run order."""
    requests: list[RequestResponse] = []
