# Role store: the users table is the single source of truth for authorization decisions.
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models, schemas
from .errors import ValidationError

logger = logging.getLogger("skytower.roles")


def get_user(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email).first()


def get_role(db: Session, email: str) -> Optional[str]:
    user = get_user(db, email)
    return user.role if user else None


def find_users(db: Session, email: Optional[str] = None, role: Optional[str] = None) -> List[models.User]:
    q = db.query(models.User)
    if email:
        q = q.filter(models.User.email == email)
    if role:
        role = schemas.normalize_role(role)
        if role not in schemas.ROLES:
            raise ValidationError(f"role must be one of: {', '.join(schemas.ROLES)}")
        q = q.filter(models.User.role == role)
    return q.order_by(models.User.id.asc()).all()


def register(
    db: Session,
    payload: schemas.UserCreate,
    identity: schemas.VerifiedIdentity,
) -> Tuple[models.User, bool]:
    """
    Idempotent self-registration.

    Returns (user, created). An existing email is returned untouched; a concurrent
    insert that loses the unique-email race re-reads the winner instead of failing.
    New accounts always start as guest regardless of what the client sends.
    """
    existing = get_user(db, payload.email)
    if existing:
        return existing, False

    user = models.User(
        email=payload.email,
        role="guest",
        name=payload.name,
        photo=payload.photo,
        subject=identity.subject,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = get_user(db, payload.email)
        if existing is None:
            raise
        return existing, False
    db.refresh(user)
    logger.info("users.registered", extra={"email": user.email, "user_id": user.id})
    return user, True


def set_role(db: Session, email: str, role: str) -> schemas.UpdateResult:
    """
    Direct admin override of a user's role (the only path that can demote).

    The role must belong to the closed set; "user" is accepted as an alias of guest.
    """
    role = schemas.normalize_role(role)
    if role not in schemas.ROLES:
        raise ValidationError(f"role must be one of: {', '.join(schemas.ROLES)}")

    user = get_user(db, email)
    if user is None:
        return schemas.UpdateResult(matched_count=0, modified_count=0)
    if user.role == role:
        return schemas.UpdateResult(matched_count=1, modified_count=0)

    previous = user.role
    user.role = role
    db.add(user)
    db.commit()
    logger.info("users.role_changed", extra={"email": email, "from_role": previous, "to_role": role})
    return schemas.UpdateResult(matched_count=1, modified_count=1)


def promote_to_member(db: Session, email: str) -> schemas.UpdateResult:
    """
    Stage the guest -> member promotion in the caller's transaction (no commit).

    Members and admins are matched but left unchanged, so the lifecycle can only
    advance a role, never demote it.
    """
    user = get_user(db, email)
    if user is None:
        return schemas.UpdateResult(matched_count=0, modified_count=0)
    if user.role != "guest":
        return schemas.UpdateResult(matched_count=1, modified_count=0)
    user.role = "member"
    db.add(user)
    return schemas.UpdateResult(matched_count=1, modified_count=1)
