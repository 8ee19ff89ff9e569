"""Outbound notification dispatch.

The notification service is an external collaborator reached over HTTP.
Its only contract here is the request payload and a success/failure answer;
every failure turns into ``False`` and a log line, never an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from vetclinic.core.config import settings
from vetclinic.db.models.appointment import Appointment

logger = logging.getLogger(__name__)

SEND_PATH = "/api/v1/notifications/send"
DATE_FORMAT = "%Y-%m-%d %H:%M"


class NotificationService:
    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        channel: str = "TELEGRAM",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.channel = channel
        self._transport = transport

    async def send_notification(
        self,
        recipient: str | None,
        template_name: str,
        parameters: dict[str, str],
    ) -> bool:
        """Make one bounded attempt; True only on a 2xx acknowledgement."""
        if not recipient or not recipient.strip():
            logger.warning("Skipping %s notification: recipient has no contact", template_name)
            return False

        payload = {
            "channel": self.channel,
            "recipient": recipient.strip(),
            "templateName": template_name,
            "data": {str(k): str(v) for k, v in parameters.items()},
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            ) as client:
                response = await client.post(SEND_PATH, json=payload)
        except httpx.HTTPError:
            logger.exception("Error communicating with notification service")
            return False

        if response.is_success:
            logger.info("Notification %s sent to %s", template_name, payload["recipient"])
            return True

        logger.error(
            "Failed to send notification. Status: %s. Error: %s",
            response.status_code,
            response.text,
        )
        return False


@dataclass(frozen=True)
class BookingNotification:
    recipient: str | None
    parameters: dict[str, str]


def booking_notification(appointment: Appointment) -> BookingNotification:
    """Snapshot what the reminder needs while the ORM session is still open."""
    pet = appointment.pet
    return BookingNotification(
        recipient=pet.owner.phone_number,
        parameters={
            "petName": pet.name,
            "vetName": appointment.vet.last_name,
            "date": appointment.scheduled_at.strftime(DATE_FORMAT),
        },
    )


async def dispatch_booking_notification(
    notifier: NotificationService,
    notification: BookingNotification,
    template_name: str,
) -> bool:
    # Runs after the response is sent; nothing may escape from here.
    try:
        return await notifier.send_notification(
            notification.recipient,
            template_name,
            notification.parameters,
        )
    except Exception:
        logger.exception("Booking notification dispatch failed")
        return False


def get_notification_service() -> NotificationService:
    return NotificationService(
        base_url=settings.notification_service_url,
        timeout=settings.notification_timeout_seconds,
        channel=settings.notification_channel,
    )
