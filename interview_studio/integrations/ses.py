"""SES integration for sending candidate invitation emails."""

from pathlib import Path
from typing import Optional

import boto3
import jinja2
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from interview_studio.config.settings import settings

logger = structlog.get_logger()

TEMPLATE_DIR = Path(__file__).parent.parent / "config" / "templates"


class SESService:
    """Service for sending emails via AWS SES."""

    def __init__(self, from_email: Optional[str] = None, from_name: Optional[str] = None, client=None):
        """Initialize SES client.

        Args:
            from_email: Override sender email (defaults to settings.SES_FROM_EMAIL)
            from_name: Override sender name (defaults to settings.SES_FROM_NAME)
            client: Pre-built boto3 SES client
        """
        if client is None:
            client_kwargs = {"region_name": settings.SES_REGION}
            if settings.SES_ACCESS_KEY_ID and settings.SES_SECRET_ACCESS_KEY:
                client_kwargs["aws_access_key_id"] = settings.SES_ACCESS_KEY_ID
                client_kwargs["aws_secret_access_key"] = settings.SES_SECRET_ACCESS_KEY
            client = boto3.client("ses", **client_kwargs)

        self.client = client
        self.from_email = from_email or settings.SES_FROM_EMAIL
        self.from_name = from_name or settings.SES_FROM_NAME
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=jinja2.select_autoescape(["html"]),
            keep_trailing_newline=True,
        )

    async def send_email(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> str:
        """Send an email via SES.

        Returns:
            SES message ID
        """
        body = {"Html": {"Data": html_body, "Charset": "utf-8"}}
        if text_body:
            body["Text"] = {"Data": text_body, "Charset": "utf-8"}

        params = {
            "Source": f"{self.from_name} <{self.from_email}>",
            "Destination": {"ToAddresses": [to]},
            "Message": {
                "Subject": {"Data": subject, "Charset": "utf-8"},
                "Body": body,
            },
        }
        if reply_to:
            params["ReplyToAddresses"] = [reply_to]

        try:
            response = self.client.send_email(**params)
        except (ClientError, BotoCoreError) as e:
            logger.error("SES send failed", error=str(e), to=to)
            raise SESError(f"Email send failed: {str(e)}") from e

        message_id = response["MessageId"]
        logger.info("Email sent", message_id=message_id, to=to, subject=subject)
        return message_id

    def _render_template(self, name: str, **kwargs) -> str:
        """Render a template from the templates directory; HTML output is autoescaped."""
        return self.env.get_template(name).render(**kwargs)

    async def send_interview_invite(
        self,
        to: str,
        interview_title: str,
        interview_url: str,
        inviter_name: str,
        inviter_email: Optional[str] = None,
        company_name: Optional[str] = None,
    ) -> str:
        """Send a candidate invitation email."""
        company_name = company_name or settings.SES_FROM_NAME
        template_vars = {
            "interview_title": interview_title,
            "interview_url": interview_url,
            "inviter_name": inviter_name,
            "company_name": company_name,
        }

        html_body = self._render_template("interview_invite.html", **template_vars)
        text_body = self._render_template("interview_invite.txt", **template_vars)

        return await self.send_email(
            to=to,
            subject=f"You're invited: {interview_title} ({company_name})",
            html_body=html_body,
            text_body=text_body,
            reply_to=inviter_email,
        )


class SESError(Exception):
    """Raised when SES operations fail."""
    pass
