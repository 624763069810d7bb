# Identity verifier: adapter over the external identity provider's bearer tokens.
# Tokens are JWTs signed by the provider; we only verify them, we never issue them.
from __future__ import annotations

from typing import List, Optional

import jwt

from .schemas import VerifiedIdentity


class IdentityError(Exception):
    """Raised when a presented token cannot be verified."""


class IdentityVerifier:
    def __init__(
        self,
        secret: str,
        algorithms: Optional[List[str]] = None,
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
    ) -> None:
        self.secret = secret
        self.algorithms = algorithms or ["HS256"]
        self.audience = audience
        self.issuer = issuer

    def verify(self, token: str) -> VerifiedIdentity:
        """
        Validate signature, expiry and (when configured) audience/issuer.

        Returns the verified subject and email; any failure raises IdentityError.
        """
        options = {"require": ["sub", "exp"]}
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options=options,
            )
        except jwt.ExpiredSignatureError as exc:
            raise IdentityError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise IdentityError("Invalid token") from exc

        email = payload.get("email")
        if not email:
            raise IdentityError("Token has no email claim")
        return VerifiedIdentity(subject=str(payload["sub"]), email=email)
