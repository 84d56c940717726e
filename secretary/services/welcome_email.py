"""
Welcome email sent once a user signs up for the digest.

Delivery is best effort: signup has already succeeded by the time this
runs, so a transport failure is logged and swallowed here.
"""

import logging

from secretary.core.config import settings
from secretary.environments.base import EmailDeliveryError, EmailMessage, EmailTransport


logger = logging.getLogger("secretary.services.welcome_email")


WELCOME_SUBJECT = "Tomorrow morning, we've got you"

WELCOME_BODY = """Hey!

You're all set. Starting tomorrow at 8am, you'll wake up to a simple rundown of what's due — today and this week.

No more checking five tabs. No more "wait, when was that due?"

We'll see you in the morning.

—school-secretary"""


def build_welcome_message(email: str) -> EmailMessage:
    return EmailMessage(
        from_address=settings.WELCOME_FROM_ADDRESS,
        to=email,
        subject=WELCOME_SUBJECT,
        text=WELCOME_BODY,
    )


async def send_welcome_email(transport: EmailTransport, email: str) -> bool:
    """
    Returns:
        True if the transport accepted the message
    """
    try:
        await transport.send(build_welcome_message(email))
    except EmailDeliveryError as e:
        logger.warning(f"Welcome email not sent: {e}", extra={"to": email})
        return False
    return True
