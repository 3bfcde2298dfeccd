"""Telnyx messaging client."""

from typing import Optional

import httpx

from ..core.observability import get_logger
from .base import BaseAPIClient, IntegrationError

logger = get_logger(__name__, integration="telnyx")

TELNYX_MESSAGES_URL = "https://api.telnyx.com/v2/messages"


class TelnyxClient(BaseAPIClient):
    service_name = "Telnyx"

    def __init__(
        self,
        api_key: str,
        from_number: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key
        self.from_number = from_number

    async def send_sms(self, to_number: str, text: str) -> Optional[str]:
        """Send an SMS. ``to_number`` must be E.164 (``+15551234567``)."""
        if not to_number.startswith("+"):
            raise IntegrationError(self.service_name, f"Phone number not in E.164 format: {to_number}")

        response = await self._request(
            "POST",
            TELNYX_MESSAGES_URL,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={"from": self.from_number, "to": to_number, "text": text},
        )

        if response.status_code not in (200, 201, 202):
            raise IntegrationError(self.service_name, response.text, response.status_code)

        message_id = self._json(response).get("data", {}).get("id")
        logger.info("SMS sent", to=to_number, message_id=message_id)
        return message_id
