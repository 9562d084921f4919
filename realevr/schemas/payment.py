"""
Pydantic schemas for Flutterwave payment initiation and verification.
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional
import enum
from realevr.models.user import MembershipPlan
from realevr.schemas.base import CamelModel


class PaymentType(str, enum.Enum):
    """What a payment is for."""
    PROPERTY_DEPOSIT = "PropertyDeposit"
    VIEWING_FEE = "ViewingFee"
    SUBSCRIPTION = "Subscription"


def _upper_currency(v):
    if v is None:
        return v
    if len(v) != 3 or not v.isalpha():
        raise ValueError("Currency must be a 3-letter ISO code")
    return v.upper()


class DepositRequest(CamelModel):
    """Body of POST /pay-property-deposit."""

    property_id: int = Field(..., gt=0)
    amount: float = Field(..., gt=0)
    currency: Optional[str] = None
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    phone_number: str = Field(..., min_length=5, max_length=30)
    redirect_url: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return _upper_currency(v)


class DepositResponse(CamelModel):
    status: str = "success"
    tx_ref: str
    payment_link: str
    amount: float
    currency: str
    property_id: int


class VerifyPaymentRequest(CamelModel):
    """Body of POST /verify-payment."""

    transaction_id: str = Field(..., min_length=1, description="Flutterwave transaction id")
    tx_ref: Optional[str] = None
    expected_amount: Optional[float] = Field(None, gt=0)
    currency: Optional[str] = None
    payment_type: Optional[PaymentType] = None
    property_id: Optional[int] = None
    membership_plan: Optional[MembershipPlan] = None

    @field_validator("transaction_id", mode="before")
    @classmethod
    def coerce_transaction_id(cls, v):
        """Flutterwave callbacks send the id as a number."""
        return str(v) if isinstance(v, int) else v

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return _upper_currency(v)


class VerifyPaymentResponse(CamelModel):
    status: str
    verified: bool
    transaction_id: str
    tx_ref: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    payment_type: Optional[PaymentType] = None
    membership_activated: bool = False
    message: str
