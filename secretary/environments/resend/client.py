"""
Resend Email Transport - plaintext delivery for digests and welcome mail.

The Resend SDK is synchronous, so each send runs in a worker thread to
keep the event loop free for the rest of the digest run.

Reference: https://resend.com/docs/api-reference/emails/send-email
"""

import asyncio
import logging
from typing import Optional

import resend
from resend.exceptions import ResendError

from secretary.core.config import settings
from secretary.environments.base import (
    EmailTransport,
    EmailMessage,
    EmailDeliveryError,
)


logger = logging.getLogger("secretary.environments.resend")


class ResendEmailTransport(EmailTransport):
    """
    Sends one message per call through the Resend API.

    Example:
        transport = ResendEmailTransport()
        message_id = await transport.send(EmailMessage(
            from_address="school-secretary <digest@yourdomain.com>",
            to="student@example.edu",
            subject="Your Monday, Oct 19",
            text="Good morning!...",
        ))
    """

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or settings.RESEND_API_KEY

        if not self.api_key:
            logger.warning("RESEND_API_KEY not set; sends will be rejected")

    def _send_sync(self, message: EmailMessage) -> str:
        resend.api_key = self.api_key
        params = {
            "from": message.from_address,
            "to": [message.to],
            "subject": message.subject,
            "text": message.text,
        }
        response = resend.Emails.send(params)
        return response.get("id", "") if response else ""

    async def send(self, message: EmailMessage) -> str:
        """
        Deliver a message.

        Returns:
            The Resend message id

        Raises:
            EmailDeliveryError: If the API key is missing or Resend rejects
                the message
        """
        if not self.api_key:
            raise EmailDeliveryError("Email send failed: RESEND_API_KEY is not configured")

        try:
            message_id = await asyncio.to_thread(self._send_sync, message)
        except ResendError as e:
            logger.error(f"Resend rejected message to {message.to}: {e}")
            raise EmailDeliveryError(
                f"Email send failed ({getattr(e, 'code', None)}): {e}",
                status_code=getattr(e, "code", None),
                response=str(e),
            ) from e

        logger.info("Email sent", extra={"to": message.to, "message_id": message_id})
        return message_id
