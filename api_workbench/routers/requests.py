"""
Request management API routes.

Provides CRUD operations for request definitions. Every write that
touches the URL or the params re-syncs the params list so each ``:name``
token in the URL has exactly one path param.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel

from ..database import get_db
from ..exceptions import ResourceNotFoundError
from ..models.collection import Collection
from ..models.request import Request
from ..schemas.request import RequestCreate, RequestParam, RequestUpdate, RequestResponse
from ..services.url_params import sync_params


router = APIRouter(prefix="/api/requests", tags=["requests"])


class ReorderRequest(BaseModel):
    """Schema for reordering requests."""
    request_ids: list[int]


def get_request_or_404(db: Session, request_id: int) -> Request:
    db_request = db.query(Request).filter(Request.id == request_id).first()
    if db_request is None:
        raise ResourceNotFoundError("Request", request_id)
    return db_request


def _check_collection(db: Session, collection_id: int | None) -> None:
    if collection_id is not None and db.get(Collection, collection_id) is None:
        raise ResourceNotFoundError("Collection", collection_id)


def _synced_params(url: str, params: list[dict]) -> list[dict]:
    existing = [RequestParam.model_validate(p) for p in params]
    return [p.model_dump() for p in sync_params(url, existing)]


@router.post("/reorder", status_code=status.HTTP_200_OK)
def reorder_requests(reorder_data: ReorderRequest, db: Session = Depends(get_db)):
    """Set the run order of requests to the order of the given IDs."""
    for index, request_id in enumerate(reorder_data.request_ids):
        db_request = db.query(Request).filter(Request.id == request_id).first()
        if db_request:
            db_request.sort_order = index
    db.commit()
    return {"message": "Requests reordered successfully"}


@router.post("", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
def create_request(request_data: RequestCreate, db: Session = Depends(get_db)):
    """
    Create a new request definition.

    Path params are derived from the URL; assertions without an ID get one.
    """
    _check_collection(db, request_data.collection_id)

    data = request_data.model_dump(mode="json")
    data["params"] = _synced_params(data["url"], data["params"])

    sort_order = 0
    if request_data.collection_id is not None:
        sort_order = db.query(Request).filter(Request.collection_id == request_data.collection_id).count()

    db_request = Request(**data, sort_order=sort_order)
    db.add(db_request)
    db.commit()
    db.refresh(db_request)
    return db_request


@router.get("", response_model=list[RequestResponse])
def list_requests(collection_id: int | None = None, db: Session = Depends(get_db)):
    """List saved requests, optionally only those of one collection."""
    query = db.query(Request)
    if collection_id is not None:
        query = query.filter(Request.collection_id == collection_id)
    return query.order_by(Request.sort_order, Request.id).all()


@router.get("/{request_id}", response_model=RequestResponse)
def get_request(request_id: int, db: Session = Depends(get_db)):
    """Get a single request definition by ID."""
    return get_request_or_404(db, request_id)


@router.put("/{request_id}", response_model=RequestResponse)
def update_request(
    request_id: int,
    request_data: RequestUpdate,
    db: Session = Depends(get_db)
):
    """Update an existing request; only provided fields change."""
    db_request = get_request_or_404(db, request_id)

    update_data = {
        field: value
        for field, value in request_data.model_dump(exclude_unset=True, mode="json").items()
        if value is not None or field == "collection_id"
    }
    if "collection_id" in update_data:
        _check_collection(db, update_data["collection_id"])

    if "url" in update_data or "params" in update_data:
        update_data["params"] = _synced_params(
            update_data.get("url", db_request.url),
            update_data.get("params", db_request.params or []),
        )

    for field, value in update_data.items():
        setattr(db_request, field, value)

    db.commit()
    db.refresh(db_request)
    return db_request


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_request(request_id: int, db: Session = Depends(get_db)):
    """Delete a request definition by ID."""
    db_request = get_request_or_404(db, request_id)
    db.delete(db_request)
    db.commit()
    return None
