"""
Resend Module - email transport.
"""

from secretary.environments.resend.client import ResendEmailTransport

__all__ = ["ResendEmailTransport"]
