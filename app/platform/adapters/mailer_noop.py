import logging
from app.platform.ports.mailer import MailerPort, MailMessage

log = logging.getLogger("mailer.noop")

class NoopMailer(MailerPort):
    async def send(self, message: MailMessage) -> None:
        log.info(
            "[NOOP MAILER] to=%s subject=%s attachments=%s",
            message.to, message.subject, [a.filename for a in message.attachments],
        )
