"""
Pydantic schemas for environments and variables.

An environment's variables form the environment scope that templates
resolve against.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class VariableBase(BaseModel):
    key: str = Field(min_length=1)
    value: str = ""


class VariableCreate(VariableBase):
    """Schema for creating a new variable."""
    pass


class VariableUpdate(BaseModel):
    """Schema for updating an existing variable. All fields are optional."""
    key: str | None = Field(default=None, min_length=1)
    value: str | None = None


class VariableResponse(VariableBase):
    id: int
    environment_id: int

    model_config = ConfigDict(from_attributes=True)


class EnvironmentBase(BaseModel):
    name: str


class EnvironmentCreate(EnvironmentBase):
    """Schema for creating a new environment with its initial variables."""
    is_active: bool = False
    variables: list[VariableCreate] = []


class EnvironmentUpdate(BaseModel):
    """Schema for updating an existing environment. All fields are optional."""
    name: str | None = None
    is_active: bool | None = None


class EnvironmentResponse(EnvironmentBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
    variables: list[VariableResponse] = []

    model_config = ConfigDict(from_attributes=True)
