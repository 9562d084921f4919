"""
Payment service backed by the Flutterwave v3 API.
Creates hosted-checkout payments for property deposits and verifies completed transactions.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
import asyncio
import logging
import secrets

import httpx

from realevr.config import settings
from realevr.schemas.payment import (
    DepositRequest,
    DepositResponse,
    PaymentType,
    VerifyPaymentRequest,
    VerifyPaymentResponse
)
from realevr.schemas.user import UserInDB
from realevr.services.auth import AuthService
from realevr.storage.base import BaseStorage
from realevr.utils.exceptions import (
    PaymentGatewayError,
    PaymentNotConfiguredError,
    PropertyNotFoundError
)

logger = logging.getLogger(__name__)


def generate_tx_ref() -> str:
    """Transaction reference: RealEVR-<ms timestamp>-<6 random digits>."""
    millis = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"RealEVR-{millis}-{secrets.randbelow(1_000_000):06d}"


class FlutterwaveClient:
    """
    Minimal async client for the Flutterwave v3 REST API.
    Network failures and 5xx responses are retried with bounded exponential backoff.
    """

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.flutterwave.com/v3",
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        retry_max_delay: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={"Authorization": f"Bearer {secret_key}"},
            transport=transport
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _retry_delay(self, attempt: int) -> float:
        return min(self.retry_base_delay * (2 ** attempt), self.retry_max_delay)

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Send a request and return the decoded JSON body.

        Raises:
            PaymentGatewayError: On a 4xx response other than 429, or once retries are exhausted
        """
        attempt = 0
        while True:
            try:
                response = await self._client.request(method, path, json=json)
                if response.status_code != 429 and response.status_code < 500:
                    break
                failure = f"Flutterwave returned HTTP {response.status_code}"
            except httpx.TransportError as e:
                failure = f"Could not reach Flutterwave: {e}"

            if attempt >= self.max_retries:
                logger.error(f"{method} {path} failed after {attempt + 1} attempts: {failure}")
                raise PaymentGatewayError(failure)

            delay = self._retry_delay(attempt)
            logger.warning(f"{method} {path} failed ({failure}), retrying in {delay:.1f}s")
            await asyncio.sleep(delay)
            attempt += 1

        try:
            body = response.json()
        except ValueError:
            raise PaymentGatewayError("Flutterwave returned an invalid response")

        if response.is_error:
            message = body.get("message") if isinstance(body, dict) else None
            logger.warning(f"{method} {path} rejected with HTTP {response.status_code}: {message}")
            raise PaymentGatewayError(message or f"Flutterwave returned HTTP {response.status_code}")

        return body

    async def create_payment(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/payments", json=payload)

    async def verify_transaction(self, transaction_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/transactions/{transaction_id}/verify")


class PaymentService:
    """
    Property deposits and payment verification, including membership activation
    for verified subscription payments.
    """

    def __init__(self, storage: BaseStorage, client: Optional[FlutterwaveClient], auth_service: AuthService):
        self.storage = storage
        self.client = client
        self.auth_service = auth_service

    def _require_client(self) -> FlutterwaveClient:
        if self.client is None:
            raise PaymentNotConfiguredError()
        return self.client

    async def initiate_deposit(self, request: DepositRequest) -> DepositResponse:
        """
        Create a hosted-checkout payment for a property deposit.

        Raises:
            PaymentNotConfiguredError: If no Flutterwave key is configured
            PropertyNotFoundError: If the property doesn't exist
            PaymentGatewayError: If Flutterwave rejects the payment or is unreachable
        """
        client = self._require_client()

        prop = await self.storage.get_property(request.property_id)
        if prop is None:
            raise PropertyNotFoundError(request.property_id)

        tx_ref = generate_tx_ref()
        currency = request.currency or settings.default_currency
        payload = {
            "tx_ref": tx_ref,
            "amount": request.amount,
            "currency": currency,
            "payment_options": "card,mobilemoney,ussd",
            "customer": {
                "email": request.email,
                "phonenumber": request.phone_number,
                "name": request.name,
            },
            "customizations": {
                "title": "Property Deposit",
                "description": f"Deposit for {prop.title}",
            },
            "meta": {
                "property_id": prop.id,
                "payment_type": PaymentType.PROPERTY_DEPOSIT.value,
            },
        }
        if request.redirect_url:
            payload["redirect_url"] = request.redirect_url

        body = await client.create_payment(payload)
        link = (body.get("data") or {}).get("link")
        if body.get("status") != "success" or not link:
            raise PaymentGatewayError(body.get("message") or "Flutterwave did not return a payment link")

        logger.info(f"Deposit payment {tx_ref} created for property {prop.id}: {request.amount} {currency}")
        return DepositResponse(
            tx_ref=tx_ref,
            payment_link=link,
            amount=request.amount,
            currency=currency,
            property_id=prop.id
        )

    async def verify_payment(
        self,
        request: VerifyPaymentRequest,
        current_user: Optional[UserInDB] = None
    ) -> VerifyPaymentResponse:
        """
        Verify a transaction with Flutterwave and check it against what the client expected.

        A verified Subscription payment by an authenticated user activates the
        requested membership plan.

        Raises:
            PaymentNotConfiguredError: If no Flutterwave key is configured
            PaymentGatewayError: If Flutterwave rejects the request or is unreachable
        """
        client = self._require_client()
        body = await client.verify_transaction(request.transaction_id)
        data = body.get("data") or {}

        amount = data.get("amount")
        currency = data.get("currency")
        tx_ref = data.get("tx_ref")

        problem = None
        if body.get("status") != "success" or data.get("status") != "successful":
            problem = f"Transaction status is {data.get('status') or body.get('status') or 'unknown'}"
        elif request.tx_ref and tx_ref != request.tx_ref:
            problem = "Transaction reference does not match"
        elif request.currency and (currency or "").upper() != request.currency:
            problem = "Transaction currency does not match"
        elif request.expected_amount is not None and (amount is None or float(amount) < request.expected_amount):
            problem = "Transaction amount is less than expected"

        verified = problem is None
        membership_activated = False
        message = "Payment verified successfully"

        if verified and request.payment_type == PaymentType.SUBSCRIPTION:
            if current_user is not None and request.membership_plan is not None:
                await self.auth_service.activate_membership(current_user.id, request.membership_plan)
                membership_activated = True
                message = f"Payment verified, {request.membership_plan.value} membership activated"
            else:
                message = "Payment verified, membership not activated without a signed-in user and plan"

        if verified:
            logger.info(f"Payment {request.transaction_id} verified ({amount} {currency})")
        else:
            message = problem
            logger.warning(f"Payment {request.transaction_id} not verified: {problem}")

        return VerifyPaymentResponse(
            status="success" if verified else "failed",
            verified=verified,
            transaction_id=request.transaction_id,
            tx_ref=tx_ref,
            amount=float(amount) if amount is not None else None,
            currency=currency,
            payment_type=request.payment_type,
            membership_activated=membership_activated,
            message=message
        )
