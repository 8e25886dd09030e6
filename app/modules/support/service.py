import logging
from datetime import datetime, timezone
from app.core.config import settings
from app.core.errors import ValidationError, DownstreamError
from app.modules.support.schemas import SupportTicketCreate, ALLOWED_ATTACHMENT_TYPES
from app.modules.support.templates import render_ticket, render_confirmation
from app.platform.ports.mailer import MailerPort, MailMessage, MailAttachment

log = logging.getLogger(__name__)

def check_attachments(attachments: list[MailAttachment]) -> None:
    if len(attachments) > settings.SUPPORT_MAX_ATTACHMENTS:
        raise ValidationError(f"Too many attachments (max {settings.SUPPORT_MAX_ATTACHMENTS})")
    for a in attachments:
        if a.content_type not in ALLOWED_ATTACHMENT_TYPES:
            raise ValidationError("Invalid file type. Only PNG, JPG, WEBP, PDF, CSV, and XLSX files are allowed.")
        if len(a.data) > settings.SUPPORT_MAX_ATTACHMENT_BYTES:
            raise ValidationError(f"Attachment {a.filename} exceeds {settings.SUPPORT_MAX_ATTACHMENT_BYTES // (1024 * 1024)}MB")

class SupportService:
    def __init__(self, mailer: MailerPort):
        self.mailer = mailer

    async def create_ticket(
        self,
        ticket: SupportTicketCreate,
        attachments: list[MailAttachment] | None = None,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> dict:
        if ticket.website and ticket.website.strip():
            log.warning("Support ticket rejected by honeypot (ip=%s)", ip_address)
            raise ValidationError("Invalid submission detected")
        attachments = attachments or []
        check_attachments(attachments)

        submitted_at = datetime.now(timezone.utc)
        inbox = MailMessage(
            to=[settings.SUPPORT_INBOX],
            subject=f"[PixelPim Support] {ticket.priority.value} - {ticket.subject}",
            html=render_ticket(
                ticket,
                attachment_count=len(attachments),
                submitted_at=submitted_at,
                user_agent=user_agent,
                ip_address=ip_address,
            ),
            reply_to=str(ticket.email),
            attachments=attachments,
        )
        confirmation = MailMessage(
            to=[str(ticket.email)],
            subject="PixelPim Support - Ticket Received",
            html=render_confirmation(ticket),
        )
        try:
            await self.mailer.send(inbox)
            await self.mailer.send(confirmation)
        except DownstreamError:
            raise
        except Exception as e:
            log.exception("Failed to process support ticket from %s", ticket.email)
            raise DownstreamError("Failed to submit support ticket. Please try again later.") from e

        log.info("Support ticket '%s' submitted by %s with %s attachments", ticket.subject, ticket.email, len(attachments))
        return {
            "success": True,
            "message": "Support ticket submitted successfully. We will respond within one business day.",
        }
