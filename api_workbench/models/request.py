"""
Request model for storing request definitions.

Structured parts of a definition (headers, params, body, auth, assertions,
last response and history) are stored as JSON documents.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class Request(Base):
    """
    SQLAlchemy model for request definitions.

    Attributes:
        id: Unique identifier for the request
        name: Human-readable name for the request
        method: HTTP method (GET, POST, PUT, DELETE, PATCH)
        protocol: REST, WS, SSE or GRAPHQL
        url: Target URL template with {{variable}} and :param tokens
        headers: Ordered list of {key, value} header entries
        params: Ordered list of {key, value, type} path/query params
        body: Tagged body document ({mode: raw|formdata|graphql, ...})
        auth: Tagged auth document ({type: none|bearer|basic|apikey, ...})
        assertions: Ordered list of assertions
        last_response: Most recent successful response, if any
        history: Up to ten prior executions, most recent first
        collection_id: Optional reference to the owning collection
        sort_order: Order within the collection
        created_at: Timestamp when the request was created
        updated_at: Timestamp when the request was last updated
    """
    __tablename__ = "requests"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), default="")
    method: Mapped[str] = mapped_column(String(10), default="GET")
    protocol: Mapped[str] = mapped_column(String(10), default="REST")
    url: Mapped[str] = mapped_column(Text, default="")
    headers: Mapped[list] = mapped_column(JSON, default=list)
    params: Mapped[list] = mapped_column(JSON, default=list)
    body: Mapped[dict] = mapped_column(JSON, default=dict)
    auth: Mapped[dict] = mapped_column(JSON, default=dict)
    assertions: Mapped[list] = mapped_column(JSON, default=list)
    last_response: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    history: Mapped[list] = mapped_column(JSON, default=list)
    collection_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=True
    )
    sort_order: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)
