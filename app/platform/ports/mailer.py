from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

@dataclass(frozen=True)
class MailAttachment:
    filename: str
    content_type: str
    data: bytes

@dataclass
class MailMessage:
    to: list[str]
    subject: str
    html: str
    text: str | None = None
    reply_to: str | None = None
    attachments: list[MailAttachment] = field(default_factory=list)

@runtime_checkable
class MailerPort(Protocol):
    async def send(self, message: MailMessage) -> None: ...
