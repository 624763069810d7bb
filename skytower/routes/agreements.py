# Agreement endpoints: thin HTTP layer over the lifecycle manager.
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from .. import lifecycle, models, roles, schemas
from ..errors import Forbidden, ValidationError
from ..rate_limit import rate_limit
from .auth import get_verified_identity, require_admin

router = APIRouter()


@router.get("/agreements", response_model=List[schemas.AgreementRead])
def list_agreements(
    email: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    identity: schemas.VerifiedIdentity = Depends(get_verified_identity),
) -> List[models.Agreement]:
    """
    Admins may list every agreement or filter by email.
    Everyone else only sees their own, whether or not email is given.
    """
    email = schemas.normalize_email(email)
    if roles.get_role(db, identity.email) != "admin":
        if email and email != identity.email:
            raise Forbidden("Forbidden: can only access your own records")
        email = identity.email
    return lifecycle.list_for_user(db, email)


@router.get("/member-agreements", response_model=schemas.AgreementRead)
def get_member_agreement(
    email: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    identity: schemas.VerifiedIdentity = Depends(get_verified_identity),
) -> models.Agreement:
    email = schemas.normalize_email(email)
    if not email:
        raise ValidationError("Email is required")
    if email != identity.email:
        raise Forbidden("Forbidden: can only access your own records")
    return lifecycle.list_mine_as_member(db, email)


@router.post(
    "/agreements",
    response_model=schemas.AgreementRead,
    dependencies=[Depends(rate_limit("write"))],
)
def submit_agreement(
    payload: schemas.AgreementCreate,
    db: Session = Depends(get_db),
    identity: schemas.VerifiedIdentity = Depends(get_verified_identity),
) -> models.Agreement:
    return lifecycle.submit(db, identity, payload)


@router.patch("/agreements/{agreement_id}/accept", response_model=schemas.AcceptResult)
def accept_agreement(
    agreement_id: int,
    payload: Optional[schemas.AgreementAccept] = Body(None),
    db: Session = Depends(get_db),
    admin: schemas.VerifiedIdentity = Depends(require_admin),
) -> schemas.AcceptResult:
    email = payload.email if payload else None
    return lifecycle.accept(db, agreement_id, email)


@router.patch("/agreements/{agreement_id}/reject", response_model=schemas.UpdateResult)
def reject_agreement(
    agreement_id: int,
    db: Session = Depends(get_db),
    admin: schemas.VerifiedIdentity = Depends(require_admin),
) -> schemas.UpdateResult:
    return lifecycle.reject(db, agreement_id)
