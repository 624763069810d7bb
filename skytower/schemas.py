# Pydantic models (request/response DTOs) used by the API layer.
# Field aliases keep the camelCase wire names the web client sends and expects.
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# User roles within the system
Role = Literal["guest", "member", "admin"]
ROLES = ("guest", "member", "admin")


def normalize_email(v):
    # Normalize email input to lowercase without surrounding whitespace
    if isinstance(v, str):
        v = v.strip().lower()
    return v


def normalize_role(v):
    # The web client historically sends "user" for a plain registered account
    if isinstance(v, str):
        v = v.strip().lower()
        if v == "user":
            return "guest"
    return v


def number_to_str(v):
    # Apartment numbers and blocks may arrive as JSON numbers
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    if isinstance(v, str):
        return v.strip()
    return v


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# Identity
# Output of the identity verifier: stable subject id + email
class VerifiedIdentity(BaseModel):
    subject: str
    email: str

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return normalize_email(v)


# Users
class UserCreate(CamelModel):
    email: EmailStr
    name: Optional[str] = None
    photo: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return normalize_email(v)


class UserRead(CamelModel):
    id: int
    email: str
    role: str
    name: Optional[str] = None
    photo: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class UserCreatedResponse(CamelModel):
    message: str
    inserted_id: int = Field(..., alias="insertedId")


class UserExistsResponse(CamelModel):
    message: str
    user: UserRead


# Request payload for the direct admin role edit
class RoleUpdate(CamelModel):
    role: Role

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, v: str) -> str:
        return normalize_role(v)


# Mirrors a document-store update result so the client can tell a no-op from a write
class UpdateResult(CamelModel):
    acknowledged: bool = True
    matched_count: int = Field(0, alias="matchedCount")
    modified_count: int = Field(0, alias="modifiedCount")


# Apartments
class ApartmentRead(CamelModel):
    id: int
    block: str
    floor: int
    apartment_no: str = Field(..., alias="apartmentNo")
    rent: int
    image: Optional[str] = None


class ApartmentPage(CamelModel):
    total_pages: int = Field(..., alias="totalPages")
    current_page: int = Field(..., alias="currentPage")
    apartments: List[ApartmentRead]


# Agreements
# Request payload for submitting an agreement; status and createdAt are never taken from the client
class AgreementCreate(CamelModel):
    user_email: EmailStr = Field(..., alias="userEmail")
    block: str = Field(..., min_length=1, max_length=20)
    floor: int = Field(..., ge=0)
    apartment_no: str = Field(..., alias="apartmentNo", min_length=1, max_length=20)
    rent: int = Field(..., gt=0)

    @field_validator("user_email", mode="before")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("block", "apartment_no", mode="before")
    @classmethod
    def _to_str(cls, v):
        return number_to_str(v)


class AgreementRead(CamelModel):
    id: int
    user_email: str = Field(..., alias="userEmail")
    block: str
    floor: int
    apartment_no: str = Field(..., alias="apartmentNo")
    rent: int
    status: Literal["pending", "checked"]
    created_at: datetime = Field(..., alias="createdAt")
    checked_at: Optional[datetime] = Field(default=None, alias="checkedAt")


# Optional body for accept; when present it must match the agreement's owner
class AgreementAccept(CamelModel):
    email: Optional[EmailStr] = None

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v):
        return normalize_email(v)


class AcceptResult(CamelModel):
    agreement_result: UpdateResult = Field(..., alias="agreementResult")
    user_result: UpdateResult = Field(..., alias="userResult")


# Announcements
class AnnouncementCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    importance: Optional[str] = None
    type: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip()
        return v


class AnnouncementRead(CamelModel):
    id: int
    title: str
    description: str
    importance: Optional[str] = None
    type: Optional[str] = None
    created_at: datetime = Field(..., alias="createdAt")


class CreatedResponse(CamelModel):
    message: str
    inserted_id: int = Field(..., alias="insertedId")


# Coupons
class CouponCreate(CamelModel):
    code: str = Field(..., min_length=1, max_length=64)
    discount_percentage: float = Field(..., alias="discountPercentage", gt=0, le=100)
    expiry: datetime
    description: Optional[str] = None

    @field_validator("code", mode="before")
    @classmethod
    def strip_code(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip()
        return v


class CouponRead(CamelModel):
    id: int
    code: str
    discount_percentage: float = Field(..., alias="discountPercentage")
    expiry: datetime
    description: Optional[str] = None


class CouponValidation(CamelModel):
    valid: bool
    discount_percentage: Optional[float] = Field(default=None, alias="discountPercentage")
    message: str


# Payments
class PaymentIntentRequest(CamelModel):
    rent: float = Field(..., gt=0)


# Client secret for the Stripe PaymentElement on the web client
class PaymentIntentResponse(CamelModel):
    client_secret: str = Field(..., alias="clientSecret")


class PaymentCreate(CamelModel):
    email: EmailStr
    amount: float = Field(..., gt=0)
    month: Optional[str] = None
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return normalize_email(v)


class PaymentRead(CamelModel):
    id: int
    email: str
    amount: float
    month: Optional[str] = None
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")
    created_at: datetime = Field(..., alias="createdAt")
