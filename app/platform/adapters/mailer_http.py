import base64
import logging
import httpx
from app.core.config import settings
from app.core.errors import DownstreamError
from app.platform.ports.mailer import MailerPort, MailMessage

log = logging.getLogger("mailer.http")

class HttpMailer(MailerPort):
    """Posts messages to a transactional-mail HTTP API (JSON body, bearer key)."""

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        sender: str | None = None,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url or settings.MAIL_API_URL
        self.api_key = api_key or settings.MAIL_API_KEY
        self.sender = sender or settings.MAIL_FROM
        self.timeout = timeout
        self.transport = transport
        if not self.api_url:
            log.error("MAIL_API_URL not configured; support mail will fail until it is set")

    def _payload(self, message: MailMessage) -> dict:
        payload = {
            "from": self.sender,
            "to": message.to,
            "subject": message.subject,
            "html": message.html,
        }
        if message.text:
            payload["text"] = message.text
        if message.reply_to:
            payload["reply_to"] = message.reply_to
        if message.attachments:
            payload["attachments"] = [
                {
                    "filename": a.filename,
                    "content_type": a.content_type,
                    "content": base64.b64encode(a.data).decode(),
                }
                for a in message.attachments
            ]
        return payload

    async def send(self, message: MailMessage) -> None:
        if not self.api_url:
            raise DownstreamError("Mail provider is not configured")
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, json=self._payload(message), headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.error("Mail API rejected message: %s", e.response.text)
            raise DownstreamError("Mail provider rejected the message") from e
        except httpx.HTTPError as e:
            log.error("Mail API unreachable: %s", e)
            raise DownstreamError("Mail provider unavailable") from e
        log.debug("[HTTP MAILER] sent to=%s subject=%s", message.to, message.subject)
