"""
Environment and Variable models.

An environment is the persistent variable scope that request templates
resolve against. Collection runs copy it into their own run scope and
never write back.
"""

from datetime import datetime
from typing import List

from sqlalchemy import String, Text, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database import Base


class Environment(Base):
    """
    SQLAlchemy model for environments.

    Only one environment is active at a time; the active one is used when
    an execution or run does not name an environment. Deleting an
    environment cascades to all its variables.

    Attributes:
        id: Unique identifier for the environment
        name: Human-readable name for the environment
        is_active: Whether this environment is the default variable source
        created_at: Timestamp when the environment was created
        updated_at: Timestamp when the environment was last updated
        variables: Variables in this environment
    """
    __tablename__ = "environments"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    variables: Mapped[List["Variable"]] = relationship(
        "Variable",
        back_populates="environment",
        cascade="all, delete-orphan",
        passive_deletes=True
    )


class Variable(Base):
    """
    SQLAlchemy model for environment variables.

    ``key`` is referenced as ``{{key}}`` in templates and is also the name
    a collection run may overwrite from a response.
    """
    __tablename__ = "variables"

    id: Mapped[int] = mapped_column(primary_key=True)
    environment_id: Mapped[int] = mapped_column(
        ForeignKey("environments.id", ondelete="CASCADE")
    )
    key: Mapped[str] = mapped_column(String(255))
    value: Mapped[str] = mapped_column(Text, default="")

    environment: Mapped["Environment"] = relationship(
        "Environment",
        back_populates="variables"
    )
