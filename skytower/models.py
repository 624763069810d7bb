# SQLAlchemy ORM models for the SkyTower tables (users, apartments, agreements, coupons, payments, announcements).
# Keep business logic out of models; the lifecycle manager and route handlers own it.
from sqlalchemy import Column, DateTime, Float, Index, Integer, String, Text, func
from sqlalchemy.orm import declarative_mixin

from .db import Base


@declarative_mixin
class TimestampMixin:
    """Common UTC-aware timestamps automatically managed by the database.

    - created_at: set on insert
    - updated_at: set on insert and updated on each modification
    """
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class User(Base, TimestampMixin):
    """Registered account and the authoritative role used by the authorization gate.

    Roles:
    - guest: registered, no accepted agreement yet
    - member: resident with an accepted agreement
    - admin: building management
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(String(20), nullable=False, default="guest", index=True)
    name = Column(String(255), nullable=True)
    photo = Column(String(1024), nullable=True)
    # identity-provider subject recorded at self-registration
    subject = Column(String(255), nullable=True, index=True)


class Apartment(Base):
    """Catalog entry. Read-only through the API; seeded by operators."""
    __tablename__ = "apartments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    block = Column(String(20), nullable=False)
    floor = Column(Integer, nullable=False)
    apartment_no = Column(String(20), nullable=False)
    rent = Column(Integer, nullable=False, index=True)
    image = Column(String(1024), nullable=True)


class Agreement(Base):
    """A user's application to rent one apartment.

    Status transitions:
    pending -> checked   (accept or reject, admin only; checked is terminal)

    user_email is unique: a user holds at most one agreement, enforced by the database.
    """
    __tablename__ = "agreements"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_email = Column(String(255), nullable=False, unique=True, index=True)
    block = Column(String(20), nullable=False)
    floor = Column(Integer, nullable=False)
    apartment_no = Column(String(20), nullable=False)
    rent = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    checked_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_agreements_status", "status"),
    )


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    code = Column(String(64), nullable=False, unique=True, index=True)
    discount_percentage = Column(Float, nullable=False)
    expiry = Column(DateTime(timezone=True), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Payment(Base):
    """Append-only ledger entry; never updated after insert."""
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    month = Column(String(20), nullable=True)
    transaction_id = Column(String(255), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Ledger is always read per payer, newest first
    __table_args__ = (
        Index("ix_payments_email_created_at", "email", "created_at"),
    )


class Announcement(Base):
    """Append-only notice shown on the resident dashboard."""
    __tablename__ = "announcements"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    importance = Column(String(20), nullable=True)
    type = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
