# User endpoints: self-registration, lookup, and the admin role override.
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ..db import get_db
from .. import roles, schemas
from ..errors import Forbidden, ValidationError
from ..rate_limit import rate_limit
from .auth import get_verified_identity, require_admin

router = APIRouter()


@router.get("/users", response_model=Union[Optional[schemas.UserRead], List[schemas.UserRead]])
def get_users(
    email: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    identity: schemas.VerifiedIdentity = Depends(get_verified_identity),
):
    """
    Look up users.

    - email only: the single matching user, or null
    - otherwise: every user matching the given filters
    """
    email = schemas.normalize_email(email)
    users = roles.find_users(db, email=email, role=role)
    if email and not role:
        return schemas.UserRead.model_validate(users[0]) if users else None
    return [schemas.UserRead.model_validate(u) for u in users]


@router.post(
    "/users",
    response_model=Union[schemas.UserCreatedResponse, schemas.UserExistsResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("register"))],
)
def register_user(
    payload: schemas.UserCreate,
    response: Response,
    db: Session = Depends(get_db),
    identity: schemas.VerifiedIdentity = Depends(get_verified_identity),
):
    if payload.email != identity.email:
        raise Forbidden("Forbidden: can only register your own account")

    user, created = roles.register(db, payload, identity)
    if not created:
        response.status_code = status.HTTP_200_OK
        return schemas.UserExistsResponse(message="User already exists", user=schemas.UserRead.model_validate(user))
    return schemas.UserCreatedResponse(message="User created", inserted_id=user.id)


@router.patch("/users", response_model=schemas.UpdateResult)
def update_user_role(
    payload: schemas.RoleUpdate,
    email: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    admin: schemas.VerifiedIdentity = Depends(require_admin),
) -> schemas.UpdateResult:
    email = schemas.normalize_email(email)
    if not email:
        raise ValidationError("Email is required")
    return roles.set_role(db, email, payload.role)
