"""Email (Brevo) and SMS (Telnyx) notifications for bookings, quotes and payments."""

import logging
import re
from decimal import Decimal
from html import escape
from typing import Any, Optional

from ..clients import BrevoClient, IntegrationError, TelnyxClient
from ..core.observability import metrics_collector

logger = logging.getLogger(__name__)

NEW_BOOKING = "new_booking"
NEW_QUOTE = "new_quote"
PAYMENT_REMINDER = "payment_reminder"
DEPOSIT_PAID = "deposit_paid"
PAYMENT_RECEIVED = "payment_received"

NOTIFICATION_TYPES = (NEW_BOOKING, NEW_QUOTE, PAYMENT_REMINDER, DEPOSIT_PAID, PAYMENT_RECEIVED)


def to_e164(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number for SMS.

    Numbers already starting with ``+`` keep their digits. Ten digit numbers
    are treated as US numbers, as are eleven digit numbers starting with 1.
    Anything else is unusable and returns None.
    """
    if not phone:
        return None

    digits = re.sub(r"\D", "", phone)
    if phone.strip().startswith("+") and 8 <= len(digits) <= 15:
        return f"+{digits}"
    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    return None


def _money(value: Any) -> str:
    return f"${Decimal(str(value or 0)):.2f}"


def _first_name(name: Optional[str]) -> str:
    return (name or "").split(" ")[0] or "there"


class NotificationService:
    """
    Sends notifications for booking lifecycle events.

    A channel without credentials is skipped. Delivery failures are logged
    and counted but never raised: a booking must not fail because an email
    bounced.
    """

    def __init__(
        self,
        email_client: Optional[BrevoClient] = None,
        sms_client: Optional[TelnyxClient] = None,
        admin_email: Optional[str] = None,
        admin_phone: Optional[str] = None,
        business_name: str = "Showers Auto Detail",
    ):
        self.email_client = email_client
        self.sms_client = sms_client
        self.admin_email = admin_email or None
        self.admin_phone = to_e164(admin_phone)
        self.business_name = business_name

    async def send(self, notification_type: str, data: dict[str, Any]) -> None:
        """Dispatch one notification; unknown types are logged and ignored."""
        handler = {
            NEW_BOOKING: self._new_booking,
            NEW_QUOTE: self._new_quote,
            PAYMENT_REMINDER: self._payment_reminder,
            DEPOSIT_PAID: self._deposit_paid,
            PAYMENT_RECEIVED: self._payment_received,
        }.get(notification_type)

        if handler is None:
            logger.warning("Unknown notification type", extra={"type": notification_type})
            return

        logger.info(
            "Sending notification",
            extra={"type": notification_type, "booking_id": data.get("booking_id")}
        )
        await handler(data)

    async def _new_booking(self, data: dict[str, Any]) -> None:
        summary = (
            f"New booking #{data.get('booking_id')}: {data.get('customer_name')} "
            f"({data.get('vehicle_type')}) {data.get('service_name') or ''} on "
            f"{data.get('booking_date')} at {data.get('booking_time')}. "
            f"Total {_money(data.get('total_amount'))}, deposit {_money(data.get('deposit_amount'))}."
        )
        addons = data.get("addons") or []
        addon_lines = "".join(
            f"<li>{escape(str(addon['name']))} ({_money(addon['price'])})</li>" for addon in addons
        )

        await self._email_admin(
            f"New booking from {data.get('customer_name')}",
            f"<p>{escape(summary)}</p>"
            f"<p>Email: {escape(str(data.get('customer_email')))}<br>"
            f"Phone: {escape(str(data.get('customer_phone')))}</p>"
            + (f"<ul>{addon_lines}</ul>" if addon_lines else ""),
        )
        await self._sms_admin(summary)

        if data.get("customer_email"):
            await self._email(
                data["customer_email"],
                f"Your {self.business_name} booking request",
                f"<p>Hi {escape(_first_name(data.get('customer_name')))},</p>"
                f"<p>Thanks for booking {escape(str(data.get('service_name') or 'a detail'))} on "
                f"{escape(str(data.get('booking_date')))} at {escape(str(data.get('booking_time')))}.</p>"
                f"<p>Your total is {_money(data.get('total_amount'))}. Secure your appointment with a "
                f"{_money(data.get('deposit_amount'))} deposit: "
                f"<a href=\"{escape(str(data.get('payment_link')))}\">pay deposit</a></p>",
                to_name=data.get("customer_name"),
            )

    async def _new_quote(self, data: dict[str, Any]) -> None:
        summary = (
            f"New quote request from {data.get('name')} ({data.get('email')}"
            f"{', ' + data['phone'] if data.get('phone') else ''}): "
            f"{data.get('service_type') or 'service not specified'}"
            f"{' for a ' + data['vehicle_type'] if data.get('vehicle_type') else ''}."
        )
        await self._email_admin(
            f"New quote request from {data.get('name')}",
            f"<p>{escape(summary)}</p><p>{escape(str(data.get('message') or ''))}</p>",
        )
        await self._sms_admin(summary)

    async def _payment_reminder(self, data: dict[str, Any]) -> None:
        link = data.get("payment_link")
        text = (
            f"Hi {_first_name(data.get('customer_name'))}, a reminder from {self.business_name}: "
            f"your {_money(data.get('deposit_amount'))} deposit for "
            f"{data.get('service_name') or 'your detail'} is still due. Pay here: {link}"
        )
        if data.get("customer_email"):
            await self._email(
                data["customer_email"],
                f"Deposit reminder from {self.business_name}",
                f"<p>{escape(text)}</p>",
                to_name=data.get("customer_name"),
            )
        await self._sms(data.get("customer_phone"), text)

    async def _deposit_paid(self, data: dict[str, Any]) -> None:
        if data.get("customer_email"):
            await self._email(
                data["customer_email"],
                f"Deposit received: your {self.business_name} appointment is confirmed",
                f"<p>Hi {escape(_first_name(data.get('customer_name')))},</p>"
                f"<p>We received your {_money(data.get('amount'))} deposit. See you on "
                f"{escape(str(data.get('booking_date')))} at {escape(str(data.get('booking_time')))}.</p>"
                f"<p>Remaining balance: {_money(data.get('remaining_balance'))}</p>",
                to_name=data.get("customer_name"),
            )
        await self._email_admin(
            f"Deposit paid for booking #{data.get('booking_id')}",
            f"<p>{escape(str(data.get('customer_name')))} paid a {_money(data.get('amount'))} deposit "
            f"(Square payment {escape(str(data.get('payment_id')))}).</p>",
        )

    async def _payment_received(self, data: dict[str, Any]) -> None:
        if data.get("customer_email"):
            await self._email(
                data["customer_email"],
                f"Thank you for choosing {self.business_name}",
                f"<p>Hi {escape(_first_name(data.get('customer_name')))},</p>"
                f"<p>We received your final payment of {_money(data.get('amount'))}. "
                f"Your booking is paid in full.</p>",
                to_name=data.get("customer_name"),
            )
        await self._sms_admin(
            f"Final payment of {_money(data.get('amount'))} received for booking "
            f"#{data.get('booking_id')} ({data.get('customer_name')})."
        )

    async def _email_admin(self, subject: str, html: str) -> None:
        if self.admin_email:
            await self._email(self.admin_email, subject, html)

    async def _sms_admin(self, text: str) -> None:
        if self.admin_phone:
            await self._sms(self.admin_phone, text)

    async def _email(self, to_email: str, subject: str, html: str, to_name: Optional[str] = None) -> None:
        if self.email_client is None:
            metrics_collector.record_notification("email", "skipped")
            return

        try:
            await self.email_client.send_email(to_email, subject, html, to_name=to_name)
            metrics_collector.record_notification("email", "sent")
        except IntegrationError as e:
            metrics_collector.record_notification("email", "failed")
            logger.error(
                "Email notification failed",
                extra={"subject": subject, "status_code": e.status_code, "error": e.message}
            )
        except Exception as e:
            metrics_collector.record_notification("email", "failed")
            logger.error(
                "Email notification failed unexpectedly",
                extra={"subject": subject, "error": str(e)},
                exc_info=True
            )

    async def _sms(self, phone: Optional[str], text: str) -> None:
        if self.sms_client is None:
            metrics_collector.record_notification("sms", "skipped")
            return

        number = to_e164(phone)
        if number is None:
            metrics_collector.record_notification("sms", "skipped")
            logger.warning("SMS skipped, phone number unusable", extra={"phone": phone})
            return

        try:
            await self.sms_client.send_sms(number, text)
            metrics_collector.record_notification("sms", "sent")
        except IntegrationError as e:
            metrics_collector.record_notification("sms", "failed")
            logger.error(
                "SMS notification failed",
                extra={"status_code": e.status_code, "error": e.message}
            )
        except Exception as e:
            metrics_collector.record_notification("sms", "failed")
            logger.error(
                "SMS notification failed unexpectedly",
                extra={"error": str(e)},
                exc_info=True
            )
