"""
Payment endpoints backed by Flutterwave.
"""

from fastapi import APIRouter, Depends
from typing import Optional

from realevr.schemas.payment import (
    DepositRequest,
    DepositResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse
)
from realevr.schemas.user import UserInDB
from realevr.services.payment import PaymentService
from realevr.utils.dependencies import get_optional_current_user, get_payment_service


router = APIRouter(tags=["Payments"])


@router.post(
    "/pay-property-deposit",
    response_model=DepositResponse,
    summary="Start a property deposit payment",
    description="Creates a Flutterwave hosted checkout and returns its payment link"
)
async def pay_property_deposit(
    request: DepositRequest,
    payment_service: PaymentService = Depends(get_payment_service)
) -> DepositResponse:
    return await payment_service.initiate_deposit(request)


@router.post(
    "/verify-payment",
    response_model=VerifyPaymentResponse,
    summary="Verify a completed payment",
    description=(
        "Checks the transaction with Flutterwave. A verified Subscription payment "
        "activates the requested membership plan for the signed-in user."
    )
)
async def verify_payment(
    request: VerifyPaymentRequest,
    current_user: Optional[UserInDB] = Depends(get_optional_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> VerifyPaymentResponse:
    return await payment_service.verify_payment(request, current_user)
