# Authorization gate: bearer credential -> verified identity -> (optional) stored role check.
# Identity verification and role authorization fail independently (401/403 vs 403 "<role> only").
from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from ..db import get_db
from .. import roles, schemas
from ..errors import Forbidden, Unauthorized
from ..identity import IdentityError, IdentityVerifier

logger = logging.getLogger("skytower.auth")


# ----------------
# Helpers
# ----------------
def bearer_token_from_auth_header(authorization: Optional[str]) -> str:
    if not authorization:
        raise Unauthorized("Authorization header missing")
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise Unauthorized("Invalid Authorization header")
    return parts[1].strip()


def authorize(
    db: Session,
    authorization: Optional[str],
    verifier: IdentityVerifier,
    required_role: Optional[str] = None,
) -> schemas.VerifiedIdentity:
    """
    Gate a request.

    1. Presence/shape of the "Bearer <token>" header (401, verifier not called)
    2. Token verification by the identity provider (403)
    3. When required_role is given, the stored role must match it (403 "<role> only")

    Read-only.
    """
    token = bearer_token_from_auth_header(authorization)
    try:
        identity = verifier.verify(token)
    except IdentityError as exc:
        logger.info("auth.verify_failed", extra={"reason": str(exc)})
        raise Forbidden("Forbidden") from exc

    if required_role is not None:
        role = roles.get_role(db, identity.email)
        if role != required_role:
            logger.info(
                "auth.role_denied",
                extra={"email": identity.email, "required_role": required_role, "role": role},
            )
            raise Forbidden(f"Forbidden: {required_role} only")
    return identity


# ----------------
# Dependencies
# ----------------
def get_identity_verifier(request: Request) -> IdentityVerifier:
    return request.app.state.identity_verifier


def get_verified_identity(
    db: Session = Depends(get_db),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> schemas.VerifiedIdentity:
    return authorize(db, authorization, verifier)


def require_role(role: str) -> Callable[..., schemas.VerifiedIdentity]:
    def _dependency(
        db: Session = Depends(get_db),
        verifier: IdentityVerifier = Depends(get_identity_verifier),
        authorization: Optional[str] = Header(default=None, alias="Authorization"),
    ) -> schemas.VerifiedIdentity:
        return authorize(db, authorization, verifier, required_role=role)

    return _dependency


require_admin = require_role("admin")


def ensure_self_or_admin(db: Session, identity: schemas.VerifiedIdentity, email: str) -> None:
    """Personal records are readable by their owner and by admins only."""
    if email == identity.email:
        return
    if roles.get_role(db, identity.email) != "admin":
        raise Forbidden("Forbidden: can only access your own records")
