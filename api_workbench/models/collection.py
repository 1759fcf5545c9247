"""
Collection model for grouping request definitions.

A collection is an ordered list of requests that can be run in sequence.
"""

from datetime import datetime
from typing import List, TYPE_CHECKING

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database import Base

if TYPE_CHECKING:
    from .request import Request


class Collection(Base):
    """
    SQLAlchemy model for collections.

    Deleting a collection cascades to all contained requests.

    Attributes:
        id: Unique identifier for the collection
        name: Human-readable name for the collection
        description: Free-form description
        created_at: Timestamp when the collection was created
        updated_at: Timestamp when the collection was last updated
        requests: Requests in this collection, in run order
    """
    __tablename__ = "collections"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    requests: Mapped[List["Request"]] = relationship(
        "Request",
        backref="collection",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[Request.sort_order, Request.id]",
    )
