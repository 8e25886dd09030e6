import pytest
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import DownstreamError, ValidationError
from app.modules.support.schemas import SupportTicketCreate
from app.modules.support.service import SupportService
from app.platform.ports.mailer import MailAttachment


def ticket(**overrides) -> SupportTicketCreate:
    data = {
        "subject": "Upload stuck at 99%",
        "category": "Assets & Uploading",
        "priority": "High",
        "name": "Sam <script>",
        "email": "sam@example.com",
        "description": "Large PNG never finishes.",
    }
    data.update(overrides)
    return SupportTicketCreate(**data)


def png(name: str = "screen.png", size: int = 10) -> MailAttachment:
    return MailAttachment(filename=name, content_type="image/png", data=b"x" * size)


async def test_ticket_goes_to_inbox_and_submitter(mailer):
    result = await SupportService(mailer).create_ticket(ticket(), [png()], "pytest-agent", "127.0.0.1")

    assert result["success"] is True
    inbox, confirmation = mailer.sent
    assert inbox.subject == "[PixelPim Support] High - Upload stuck at 99%"
    assert inbox.reply_to == "sam@example.com"
    assert [a.filename for a in inbox.attachments] == ["screen.png"]
    assert "Sam &lt;script&gt;" in inbox.html
    assert "<script>" not in inbox.html
    assert confirmation.to == ["sam@example.com"]
    assert confirmation.subject == "PixelPim Support - Ticket Received"


async def test_honeypot_rejects_without_sending(mailer):
    with pytest.raises(ValidationError, match="Invalid submission detected"):
        await SupportService(mailer).create_ticket(ticket(website="http://spam.example"))
    assert mailer.sent == []


async def test_blank_honeypot_is_ignored(mailer):
    await SupportService(mailer).create_ticket(ticket(website="   "))
    assert len(mailer.sent) == 2


async def test_disallowed_attachment_type(mailer):
    exe = MailAttachment(filename="run.exe", content_type="application/x-msdownload", data=b"MZ")
    with pytest.raises(ValidationError, match="Invalid file type"):
        await SupportService(mailer).create_ticket(ticket(), [exe])


async def test_too_many_attachments(mailer):
    with pytest.raises(ValidationError, match="Too many attachments"):
        await SupportService(mailer).create_ticket(ticket(), [png(f"{i}.png") for i in range(11)])


async def test_attachment_size_cap(mailer, monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "SUPPORT_MAX_ATTACHMENT_BYTES", 5)
    with pytest.raises(ValidationError):
        await SupportService(mailer).create_ticket(ticket(), [png(size=6)])


async def test_mailer_failure_is_a_downstream_error(mailer):
    mailer.fail = True
    with pytest.raises(DownstreamError):
        await SupportService(mailer).create_ticket(ticket())


@pytest.mark.parametrize("field,value", [("priority", "Whenever"), ("category", "Gossip"), ("email", "not-an-email")])
def test_form_values_are_validated(field, value):
    with pytest.raises(PydanticValidationError):
        ticket(**{field: value})
