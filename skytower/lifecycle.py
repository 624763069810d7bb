# Agreement lifecycle manager: submit/accept/reject and the role promotion tied to acceptance.
#
#   NoAgreement --submit--> pending --accept--> checked (+ owner promoted guest -> member)
#                                   --reject--> checked (no role change)
#
# Both terminal actions store "checked"; only the owner's role tells them apart.
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models, roles, schemas
from .errors import ConflictError, Forbidden, NotFound, UpstreamError, ValidationError

logger = logging.getLogger("skytower.agreements")

PENDING = "pending"
CHECKED = "checked"


def _find_agreement(db: Session, user_email: str) -> Optional[models.Agreement]:
    return db.query(models.Agreement).filter(models.Agreement.user_email == user_email).first()


def submit(db: Session, identity: schemas.VerifiedIdentity, payload: schemas.AgreementCreate) -> models.Agreement:
    """
    Create a pending agreement for the caller.

    The lookup gives a readable error for the common case; the unique constraint on
    agreements.user_email is what actually guarantees one agreement per user when
    two submissions race.
    """
    if payload.user_email != identity.email:
        raise Forbidden("Forbidden: can only apply on your own behalf")

    if _find_agreement(db, payload.user_email) is not None:
        raise ConflictError("User already has an agreement.")

    obj = models.Agreement(
        user_email=payload.user_email,
        block=payload.block,
        floor=payload.floor,
        apartment_no=payload.apartment_no,
        rent=payload.rent,
        status=PENDING,
        created_at=datetime.now(timezone.utc),
    )
    db.add(obj)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("User already has an agreement.") from exc
    db.refresh(obj)
    logger.info("agreements.submitted", extra={"agreement_id": obj.id, "email": obj.user_email})
    return obj


def accept(db: Session, agreement_id: int, email: Optional[str] = None) -> schemas.AcceptResult:
    """
    Mark a pending agreement checked and promote its owner to member.

    The owner is taken from the agreement itself; a caller-supplied email must match it.
    Both writes commit in one transaction. An unknown id or an already checked
    agreement is a no-op reported through zero counts.
    """
    obj = db.get(models.Agreement, agreement_id)
    if obj is None:
        return schemas.AcceptResult(agreement_result=schemas.UpdateResult(), user_result=schemas.UpdateResult())

    if email and email != obj.user_email:
        raise ValidationError("email does not match the agreement's owner")

    if obj.status != PENDING:
        return schemas.AcceptResult(
            agreement_result=schemas.UpdateResult(matched_count=1, modified_count=0),
            user_result=schemas.UpdateResult(),
        )

    obj.status = CHECKED
    obj.checked_at = datetime.now(timezone.utc)
    db.add(obj)
    user_result = roles.promote_to_member(db, obj.user_email)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise UpstreamError(f"accept agreement {agreement_id} failed: {exc}") from exc

    logger.info(
        "agreements.accepted",
        extra={
            "agreement_id": agreement_id,
            "email": obj.user_email,
            "promoted": bool(user_result.modified_count),
        },
    )
    return schemas.AcceptResult(
        agreement_result=schemas.UpdateResult(matched_count=1, modified_count=1),
        user_result=user_result,
    )


def reject(db: Session, agreement_id: int) -> schemas.UpdateResult:
    """Mark a pending agreement checked. Never touches roles."""
    obj = db.get(models.Agreement, agreement_id)
    if obj is None:
        return schemas.UpdateResult()
    if obj.status != PENDING:
        return schemas.UpdateResult(matched_count=1, modified_count=0)

    obj.status = CHECKED
    obj.checked_at = datetime.now(timezone.utc)
    db.add(obj)
    db.commit()
    logger.info("agreements.rejected", extra={"agreement_id": agreement_id, "email": obj.user_email})
    return schemas.UpdateResult(matched_count=1, modified_count=1)


def list_for_user(db: Session, email: Optional[str] = None) -> List[models.Agreement]:
    q = db.query(models.Agreement)
    if email:
        q = q.filter(models.Agreement.user_email == email)
    return q.order_by(models.Agreement.created_at.desc(), models.Agreement.id.desc()).all()


def list_mine_as_member(db: Session, email: str) -> models.Agreement:
    # Re-check the stored role; a token alone is not enough to read tenancy data
    if roles.get_role(db, email) != "member":
        raise Forbidden("Access denied. Only members allowed.")
    obj = _find_agreement(db, email)
    if obj is None:
        raise NotFound("Agreement not found")
    return obj
