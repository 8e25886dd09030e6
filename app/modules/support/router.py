from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import ValidationError as PydanticValidationError
from app.core.config import settings
from app.core.errors import ValidationError, validation_error_from
from app.modules.support.schemas import SupportTicketCreate, SupportTicketResult
from app.modules.support.service import SupportService
from app.platform.ports.mailer import MailerPort, MailAttachment
from app.platform.provider_registry import get_mailer

router = APIRouter()

def svc(mailer: MailerPort = Depends(get_mailer)) -> SupportService:
    return SupportService(mailer)

@router.post("/tickets", response_model=SupportTicketResult)
async def create_support_ticket(
    request: Request,
    subject: str = Form(...),
    category: str = Form(...),
    priority: str = Form(...),
    name: str = Form(...),
    email: str = Form(...),
    description: str = Form(...),
    workspace: str | None = Form(None),
    url: str | None = Form(None),
    steps: str | None = Form(None),
    expected: str | None = Form(None),
    actual: str | None = Form(None),
    website: str | None = Form(None),
    attachments: list[UploadFile] | None = File(None),
    service: SupportService = Depends(svc),
):
    try:
        ticket = SupportTicketCreate(
            subject=subject, category=category, priority=priority, name=name, email=email,
            description=description, workspace=workspace, url=url, steps=steps,
            expected=expected, actual=actual, website=website,
        )
    except PydanticValidationError as e:
        raise validation_error_from(e)

    files = attachments or []
    if len(files) > settings.SUPPORT_MAX_ATTACHMENTS:
        raise ValidationError(f"Too many attachments (max {settings.SUPPORT_MAX_ATTACHMENTS})")
    mail_attachments = [
        MailAttachment(
            filename=f.filename or "attachment",
            content_type=f.content_type or "application/octet-stream",
            data=await f.read(),
        )
        for f in files
    ]
    ip_address = request.client.host if request.client else None
    return await service.create_ticket(ticket, mail_attachments, request.headers.get("user-agent"), ip_address)
