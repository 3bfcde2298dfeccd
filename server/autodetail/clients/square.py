"""Square Payments API client."""

import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import httpx

from ..core.observability import get_logger
from .base import BaseAPIClient, IntegrationError

logger = get_logger(__name__, integration="square")

SQUARE_API_VERSION = "2024-12-18"
SQUARE_PRODUCTION_URL = "https://connect.squareup.com/v2"
SQUARE_SANDBOX_URL = "https://connect.squareupsandbox.com/v2"


def to_minor_units(amount: Decimal) -> int:
    """Dollars to cents, rounding half up."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class SquareClient(BaseAPIClient):
    """Charges card nonces produced by the Square Web Payments SDK."""

    service_name = "Square"

    def __init__(
        self,
        access_token: str,
        location_id: str,
        environment: str = "sandbox",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.access_token = access_token
        self.location_id = location_id
        self.environment = environment

    @property
    def base_url(self) -> str:
        if self.environment == "production":
            return SQUARE_PRODUCTION_URL
        return SQUARE_SANDBOX_URL

    def _headers(self) -> dict[str, str]:
        return {
            "Square-Version": SQUARE_API_VERSION,
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    async def create_payment(
        self,
        source_id: str,
        amount: Decimal,
        reference_id: str,
        note: str,
        buyer_email: Optional[str] = None,
        currency: str = "USD",
        idempotency_key: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Charge ``amount`` against a card nonce.

        Returns:
            The ``payment`` object from Square's response.

        Raises:
            IntegrationError: On network failure or a non-2xx response; Square's
                error list is attached for declines.
        """
        body: dict[str, Any] = {
            "idempotency_key": idempotency_key or str(uuid.uuid4()),
            "source_id": source_id,
            "amount_money": {"amount": to_minor_units(amount), "currency": currency},
            "location_id": self.location_id,
            "reference_id": reference_id,
            "note": note,
            "autocomplete": True,
        }
        if buyer_email:
            body["buyer_email_address"] = buyer_email

        response = await self._request(
            "POST", f"{self.base_url}/payments", headers=self._headers(), json=body
        )

        if response.status_code not in (200, 201):
            try:
                errors = response.json().get("errors", [])
            except ValueError:
                errors = []
            message = errors[0].get("detail", "Payment rejected") if errors else response.text
            logger.warning(
                "Square payment rejected",
                status_code=response.status_code,
                reference_id=reference_id,
                codes=[error.get("code") for error in errors],
            )
            raise IntegrationError(self.service_name, message, response.status_code, errors)

        payment = self._json(response).get("payment", {})
        logger.info(
            "Square payment created",
            payment_id=payment.get("id"),
            status=payment.get("status"),
            reference_id=reference_id,
        )
        return payment
