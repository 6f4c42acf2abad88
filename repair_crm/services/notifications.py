"""
Customer status notifications.

SMS goes through Twilio's REST API and email through SendGrid's v3 API, both
over plain HTTP with ``requests``. Delivery problems surface as
NotificationError; callers log them and carry on so that a failed message
never fails the write that triggered it.
"""
import logging
from typing import Optional

import requests
from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from repair_crm.config import Settings
from repair_crm.models.customer import CommunicationPreference
from repair_crm.models.work_order import WorkOrder

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"
SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"


class NotificationError(Exception):
    """A notification could not be delivered."""


class NotificationConfigError(NotificationError):
    """The provider for a channel is not configured."""


def build_status_message(customer_name: str, vehicle_name: str, status: str, shop_name: str) -> str:
    return (
        f"Hello {customer_name}, the status of your {vehicle_name} "
        f"has been updated to: {status}. - {shop_name}"
    )


class StatusNotifier:
    """Sends work order status updates over the customer's preferred channel."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.timeout = settings.notification_timeout

    @property
    def sms_enabled(self) -> bool:
        s = self.settings
        return bool(s.twilio_account_sid and s.twilio_auth_token and s.twilio_phone_number)

    @property
    def email_enabled(self) -> bool:
        return bool(self.settings.sendgrid_api_key and self.settings.sendgrid_from_email)

    def send_sms(self, to: str, body: str) -> str:
        """Send a text message. Returns the provider's message id."""
        if not self.sms_enabled:
            raise NotificationConfigError("Twilio credentials are not set")

        url = TWILIO_MESSAGES_URL.format(sid=self.settings.twilio_account_sid)
        try:
            response = requests.post(
                url,
                data={"To": to, "From": self.settings.twilio_phone_number, "Body": body},
                auth=(self.settings.twilio_account_sid, self.settings.twilio_auth_token),
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json().get("sid", "")
        except (requests.RequestException, ValueError) as exc:
            raise NotificationError(f"SMS delivery failed: {exc}") from exc

    def send_email(self, to: str, subject: str, body: str) -> str:
        """Send a plain-text email. Returns the provider's message id."""
        if not self.email_enabled:
            raise NotificationConfigError("SendGrid is not configured")

        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.settings.sendgrid_from_email, "name": self.settings.shop_name},
            "subject": subject,
            "content": [{"type": "text/plain", "value": body}],
        }
        headers = {
            "Authorization": f"Bearer {self.settings.sendgrid_api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = requests.post(SENDGRID_SEND_URL, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.headers.get("X-Message-Id", "")
        except requests.RequestException as exc:
            raise NotificationError(f"Email delivery failed: {exc}") from exc

    async def notify_status_change(self, work_order: WorkOrder) -> Optional[str]:
        """
        Tell the customer about the work order's current status.

        Returns the channel used ("sms" or "email"), or None when nothing was
        sent. Delivery failures are logged, never raised.
        """
        customer = work_order.customer
        vehicle = work_order.vehicle
        if customer is None or vehicle is None:
            return None

        message = build_status_message(
            customer.name, vehicle.display_name, work_order.status.value, self.settings.shop_name
        )
        preference = customer.communication_preference

        try:
            if preference == CommunicationPreference.SMS and customer.phone:
                await run_in_threadpool(self.send_sms, customer.phone, message)
                logger.info("Sent SMS status update for work order #%s", work_order.id)
                return "sms"

            if preference == CommunicationPreference.EMAIL and customer.email:
                subject = f"Update on your {vehicle.display_name}"
                await run_in_threadpool(self.send_email, customer.email, subject, message)
                logger.info("Sent email status update for work order #%s", work_order.id)
                return "email"
        except NotificationError as exc:
            logger.error("Failed to notify customer #%s about work order #%s: %s",
                         customer.id, work_order.id, exc)
        except Exception:
            logger.exception("Unexpected error notifying customer #%s about work order #%s",
                             customer.id, work_order.id)

        return None


def get_notifier(request: Request) -> StatusNotifier:
    """Dependency returning the app's notifier."""
    return request.app.state.notifier
