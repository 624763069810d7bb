# Coupons: public listing, admin creation, and the stateless validity check used at checkout.
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db import get_db
from .. import models, schemas
from ..errors import ConflictError, ValidationError
from ..rate_limit import rate_limit
from .auth import get_verified_identity, require_admin

router = APIRouter()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; stored values are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_coupon(db: Session, code: Optional[str], now: Optional[datetime] = None) -> schemas.CouponValidation:
    """
    Check a coupon code against the stored record at call time.

    - unknown code -> valid=False, "Coupon not found"
    - expiry < now -> valid=False, "Coupon expired"
    - otherwise valid=True with the discount as a float
    """
    code = code.strip() if code else code
    if not code:
        raise ValidationError("Coupon code is required")

    coupon = db.query(models.Coupon).filter(models.Coupon.code == code).first()
    if coupon is None:
        return schemas.CouponValidation(valid=False, message="Coupon not found")

    now = now or datetime.now(timezone.utc)
    if _as_utc(coupon.expiry) < now:
        return schemas.CouponValidation(valid=False, message="Coupon expired")

    return schemas.CouponValidation(
        valid=True,
        discount_percentage=float(coupon.discount_percentage),
        message="Coupon applied",
    )


@router.get("/coupons", response_model=List[schemas.CouponRead])
def list_coupons(db: Session = Depends(get_db)) -> List[models.Coupon]:
    return db.query(models.Coupon).order_by(models.Coupon.id.asc()).all()


@router.get(
    "/validate-coupon",
    response_model=schemas.CouponValidation,
    dependencies=[Depends(get_verified_identity)],
)
def check_coupon(
    code: Optional[str] = Query(None),
    db: Session = Depends(get_db),
) -> schemas.CouponValidation:
    return validate_coupon(db, code)


@router.post(
    "/coupons",
    response_model=schemas.CouponRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("write"))],
)
def create_coupon(
    payload: schemas.CouponCreate,
    db: Session = Depends(get_db),
    admin: schemas.VerifiedIdentity = Depends(require_admin),
) -> models.Coupon:
    obj = models.Coupon(
        code=payload.code,
        discount_percentage=payload.discount_percentage,
        expiry=_as_utc(payload.expiry),
        description=payload.description,
        created_at=datetime.now(timezone.utc),
    )
    db.add(obj)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Coupon code already exists") from exc
    db.refresh(obj)
    return obj
