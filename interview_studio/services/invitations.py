"""Candidate invitations for live interviews."""

import re
from typing import Optional

import structlog
from pydantic import EmailStr, TypeAdapter, ValidationError

from interview_studio.config.settings import settings
from interview_studio.integrations.ses import SESError, SESService
from interview_studio.middleware.error_handler import ValidationAPIError
from interview_studio.schemas.interviews import Interview, InvitationResult, InviteResponse
from interview_studio.services.session import Identity
from interview_studio.services.store import InterviewStore

logger = structlog.get_logger()

EMAIL_ADDRESS = TypeAdapter(EmailStr)
SEPARATORS = re.compile(r"[,;\s]+")


def invite_link(interview: Interview) -> str:
    return f"{settings.FRONTEND_URL}/interview/{interview.invite_token}"


def parse_emails(text: str) -> list[str]:
    """
    Split a free-form list of addresses.

    Commas, semicolons, spaces and new lines all separate addresses.
    Duplicates are dropped (first occurrence wins).

    Raises:
        ValidationAPIError: If any address is malformed or none is given
    """
    emails = []
    invalid = []
    for raw in SEPARATORS.split(text):
        candidate = raw.strip()
        if not candidate:
            continue
        try:
            email = EMAIL_ADDRESS.validate_python(candidate).lower()
        except ValidationError:
            invalid.append(candidate)
            continue
        if email not in emails:
            emails.append(email)

    if invalid:
        raise ValidationAPIError(f"Invalid email address: {', '.join(invalid)}", field="emails")
    if not emails:
        raise ValidationAPIError("Enter at least one email address", field="emails")
    return emails


class InvitationService:
    """Records invitations and emails them when SES is enabled."""

    def __init__(self, store: InterviewStore, mailer: Optional[SESService] = None):
        self.store = store
        self.mailer = mailer

    @classmethod
    def from_settings(cls, store: InterviewStore) -> "InvitationService":
        return cls(store, SESService() if settings.SES_ENABLED else None)

    async def send(self, interview: Interview, emails: list[str], inviter: Identity) -> InviteResponse:
        if interview.status != "live":
            raise ValidationAPIError("Only live interviews can receive invitations", field="status")

        link = invite_link(interview)
        results = []
        for email in emails:
            invitation_id = self.store.add_invitation(interview.id, email)
            if self.mailer is None:
                results.append(InvitationResult(email=email, status="queued"))
                continue

            try:
                message_id = await self.mailer.send_interview_invite(
                    to=email,
                    interview_title=interview.title,
                    interview_url=link,
                    inviter_name=inviter.display_name,
                    inviter_email=inviter.email,
                )
            except SESError as e:
                logger.warning(
                    "Invitation email failed",
                    interview_id=interview.id,
                    email=email,
                    error=str(e),
                )
                results.append(InvitationResult(email=email, status="failed", error=str(e)))
                continue

            self.store.mark_invitation_sent(invitation_id, message_id)
            results.append(InvitationResult(email=email, status="sent", message_id=message_id))

        logger.info(
            "Invitations processed",
            interview_id=interview.id,
            total=len(results),
            sent=sum(1 for r in results if r.status == "sent"),
        )
        return InviteResponse(invite_link=link, results=results)
