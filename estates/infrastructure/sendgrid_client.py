"""SendGrid email client for sending emails."""

import asyncio
import logging
from functools import partial
from typing import Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content, ReplyTo

from estates.core.errors import DependencyUnavailableError
from estates.settings import settings

logger = logging.getLogger(__name__)


class SendGridClient:
    """Client for sending emails via SendGrid.

    Falls back to global settings when credentials are not passed in.
    """

    def __init__(
        self,
        api_key: str | None = None,
        from_email: str | None = None,
    ):
        """Initialize SendGrid client.

        Args:
            api_key: SendGrid API key (defaults to global settings.sendgrid_api_key)
            from_email: Default sender email (defaults to global settings.sendgrid_from_email)
        """
        self.api_key = api_key or settings.sendgrid_api_key
        self.default_from_email = from_email or settings.sendgrid_from_email

        if not self.api_key:
            raise ValueError("SendGrid API key must be provided or set in SENDGRID_API_KEY")
        if not self.default_from_email:
            raise ValueError("Sender email must be provided or set in SENDGRID_FROM_EMAIL")
        self.client = SendGridAPIClient(self.api_key)

    def _build_message(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        from_email: Optional[str] = None,
        text_content: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> Mail:
        message = Mail(
            from_email=Email(from_email or self.default_from_email, settings.app_name),
            to_emails=To(to_email),
            subject=subject,
            plain_text_content=text_content,
            html_content=Content("text/html", html_content),
        )
        if reply_to:
            message.reply_to = ReplyTo(reply_to)
        return message

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        from_email: Optional[str] = None,
        text_content: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> dict:
        """
        Send an email via SendGrid.

        The SendGrid SDK is synchronous, so the request runs in the default
        executor and the event loop stays free.

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML email body
            from_email: Sender email (defaults to instance default_from_email)
            text_content: Plain text email body (optional)
            reply_to: Reply-to email address (optional)

        Returns:
            Response dict with status and message_id

        Raises:
            DependencyUnavailableError: If SendGrid rejects or cannot be reached
        """
        message = self._build_message(
            to_email, subject, html_content,
            from_email=from_email, text_content=text_content, reply_to=reply_to,
        )
        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(None, partial(self.client.send, message))
        except Exception as e:
            logger.warning(
                "SendGrid send failed",
                extra={"to": to_email, "subject": subject, "error": str(e)},
            )
            raise DependencyUnavailableError(f"Failed to send email to {to_email}") from e

        logger.info(
            "Email sent",
            extra={"to": to_email, "subject": subject, "status_code": response.status_code},
        )
        return {
            "status": "success",
            "message_id": response.headers.get("X-Message-Id"),
            "status_code": response.status_code,
        }


# Singleton instance
_sendgrid_client: Optional[SendGridClient] = None


def get_sendgrid_client() -> SendGridClient | None:
    """Get or create SendGrid client singleton.

    Returns None when email is not configured; callers treat that as
    "skip email delivery".
    """
    global _sendgrid_client
    if not settings.is_email_configured:
        return None
    if _sendgrid_client is None:
        _sendgrid_client = SendGridClient()
    return _sendgrid_client
