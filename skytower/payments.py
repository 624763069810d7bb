# Billing bridge: Stripe PaymentIntent creation plus the append-only payment ledger.
# When STRIPE_SECRET_KEY is blank the gateway runs in deterministic offline mode for local/dev and CI.
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

import stripe
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from .db import get_db
from . import models, schemas
from .errors import UpstreamError, ValidationError
from .rate_limit import rate_limit
from .routes.auth import ensure_self_or_admin, get_verified_identity

logger = logging.getLogger("skytower.payments")

router = APIRouter()


class PaymentGateway:
    def __init__(self, secret_key: str = "", currency: str = "usd") -> None:
        self.secret_key = secret_key
        self.currency = currency

    def enabled(self) -> bool:
        """
        True only when STRIPE_SECRET_KEY is set.

        When False, create_payment_intent() returns synthetic values and makes no network calls.
        """
        return bool(self.secret_key)

    def create_payment_intent(self, amount_cents: int, payer_email: str) -> str:
        """
        Create a PaymentIntent and return its client_secret.

        - Production: Stripe with automatic_payment_methods for the PaymentElement.
        - Offline: a synthetic, unique client secret.
        """
        if not self.enabled():
            return f"pi_test_{uuid4().hex}_secret_test"

        try:
            pi = stripe.PaymentIntent.create(
                amount=int(amount_cents),
                currency=self.currency,
                metadata={"payer_email": payer_email},
                automatic_payment_methods={"enabled": True},
                api_key=self.secret_key,
            )
        except stripe.StripeError as exc:
            raise UpstreamError(f"Stripe PaymentIntent.create failed: {exc}") from exc

        client_secret: Optional[str] = getattr(pi, "client_secret", None)
        if not client_secret:
            raise UpstreamError("Stripe PaymentIntent missing client_secret")
        return client_secret


def get_payment_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway


@router.post("/create-payment-intent", response_model=schemas.PaymentIntentResponse)
def create_payment_intent(
    payload: schemas.PaymentIntentRequest,
    gateway: PaymentGateway = Depends(get_payment_gateway),
    identity: schemas.VerifiedIdentity = Depends(get_verified_identity),
) -> schemas.PaymentIntentResponse:
    # Rent is in whole currency units; Stripe wants the smallest unit
    amount_cents = int(round(payload.rent * 100))
    client_secret = gateway.create_payment_intent(amount_cents, identity.email)
    logger.info("payments.intent_created", extra={"email": identity.email, "amount_cents": amount_cents})
    return schemas.PaymentIntentResponse(client_secret=client_secret)


@router.get("/payments", response_model=List[schemas.PaymentRead])
def list_payments(
    email: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    identity: schemas.VerifiedIdentity = Depends(get_verified_identity),
) -> List[models.Payment]:
    """Payment history for one payer, newest first."""
    email = schemas.normalize_email(email)
    if not email:
        raise ValidationError("Email is required")
    ensure_self_or_admin(db, identity, email)
    return (
        db.query(models.Payment)
        .filter(models.Payment.email == email)
        .order_by(models.Payment.created_at.desc(), models.Payment.id.desc())
        .all()
    )


@router.post(
    "/payments",
    response_model=schemas.PaymentRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("write"))],
)
def record_payment(
    payload: schemas.PaymentCreate,
    db: Session = Depends(get_db),
    identity: schemas.VerifiedIdentity = Depends(get_verified_identity),
) -> models.Payment:
    ensure_self_or_admin(db, identity, payload.email)
    obj = models.Payment(
        email=payload.email,
        amount=payload.amount,
        month=payload.month,
        transaction_id=payload.transaction_id,
        created_at=datetime.now(timezone.utc),
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    logger.info("payments.recorded", extra={"email": obj.email, "payment_id": obj.id})
    return obj
