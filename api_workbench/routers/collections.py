"""
Collection management API routes.

Collections group request definitions in the order a run executes them.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import ErrorResponse, ResourceNotFoundError
from ..models.collection import Collection
from ..schemas.collection import (
    CollectionCreate,
    CollectionUpdate,
    CollectionResponse,
    CollectionWithRequests,
)


router = APIRouter(prefix="/api/collections", tags=["collections"])


def get_collection_or_404(db: Session, collection_id: int) -> Collection:
    db_collection = db.query(Collection).filter(Collection.id == collection_id).first()
    if db_collection is None:
        raise ResourceNotFoundError("Collection", collection_id)
    return db_collection


@router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
def create_collection(collection_data: CollectionCreate, db: Session = Depends(get_db)):
    """Create a new, empty collection."""
    db_collection = Collection(**collection_data.model_dump())
    db.add(db_collection)
    db.commit()
    db.refresh(db_collection)
    return db_collection


@router.get("", response_model=list[CollectionResponse])
def list_collections(db: Session = Depends(get_db)):
    """List all collections."""
    return db.query(Collection).order_by(Collection.id).all()


@router.get(
    "/{collection_id}",
    response_model=CollectionWithRequests,
    responses={404: {"model": ErrorResponse}},
)
def get_collection(collection_id: int, db: Session = Depends(get_db)):
    """Get a collection with its requests in run order."""
    return get_collection_or_404(db, collection_id)


@router.put("/{collection_id}", response_model=CollectionResponse)
def update_collection(
    collection_id: int,
    collection_data: CollectionUpdate,
    db: Session = Depends(get_db)
):
    """Rename or re-describe a collection."""
    db_collection = get_collection_or_404(db, collection_id)
    for field, value in collection_data.model_dump(exclude_unset=True).items():
        setattr(db_collection, field, value)
    db.commit()
    db.refresh(db_collection)
    return db_collection


@router.delete("/{collection_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_collection(collection_id: int, db: Session = Depends(get_db)):
    """Delete a collection and every request in it."""
    db_collection = get_collection_or_404(db, collection_id)
    db.delete(db_collection)
    db.commit()
    return None
