# Apartment catalog: public, filtered and paginated.
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from .. import models, schemas

router = APIRouter()

PAGE_SIZE = 6


# Blank, zero or non-numeric query values fall back to the default
def _int_or(value: Optional[str], default: Optional[int]) -> Optional[int]:
    try:
        parsed = int(value) if value is not None else 0
    except ValueError:
        return default
    return parsed or default


@router.get("/apartments", response_model=schemas.ApartmentPage)
def list_apartments(
    page: Optional[str] = Query(None),
    min_rent: Optional[str] = Query(None, alias="minRent"),
    max_rent: Optional[str] = Query(None, alias="maxRent"),
    db: Session = Depends(get_db),
) -> schemas.ApartmentPage:
    """
    One page of apartments with min_rent <= rent <= max_rent.

    - page defaults to 1 (values below 1 are clamped)
    - minRent defaults to 0; maxRent of 0 or omitted means no upper bound
    - totalPages is computed from the filtered count, not the whole collection
    """
    current_page = max(_int_or(page, 1), 1)
    lower = _int_or(min_rent, 0)
    upper = _int_or(max_rent, None)

    q = db.query(models.Apartment).filter(models.Apartment.rent >= lower)
    if upper is not None:
        q = q.filter(models.Apartment.rent <= upper)

    total = q.count()
    items = (
        q.order_by(models.Apartment.id.asc())
        .offset((current_page - 1) * PAGE_SIZE)
        .limit(PAGE_SIZE)
        .all()
    )
    return schemas.ApartmentPage(
        total_pages=math.ceil(total / PAGE_SIZE),
        current_page=current_page,
        apartments=[schemas.ApartmentRead.model_validate(a) for a in items],
    )
