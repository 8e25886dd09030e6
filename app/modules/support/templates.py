import html
from datetime import datetime
from string import Template
from app.modules.support.schemas import SupportTicketCreate

TICKET_HTML = Template("""\
<div style="font-family: Arial, sans-serif; max-width: 640px; margin: 0 auto;">
  <h2 style="color: #064f2c; margin-top: 0;">$subject</h2>
  <table style="border-collapse: collapse; width: 100%;">
    <tr><td><strong>Category</strong></td><td>$category</td></tr>
    <tr><td><strong>Priority</strong></td><td>$priority</td></tr>
    <tr><td><strong>From</strong></td><td>$name &lt;$email&gt;</td></tr>
    <tr><td><strong>Workspace</strong></td><td>$workspace</td></tr>
    <tr><td><strong>Page URL</strong></td><td>$url</td></tr>
    <tr><td><strong>Submitted</strong></td><td>$submitted_at</td></tr>
  </table>
  <h3>Description</h3>
  <p style="white-space: pre-wrap;">$description</p>
  <h3>Steps to reproduce</h3>
  <p style="white-space: pre-wrap;">$steps</p>
  <h3>Expected</h3>
  <p style="white-space: pre-wrap;">$expected</p>
  <h3>Actual</h3>
  <p style="white-space: pre-wrap;">$actual</p>
  <hr>
  <p style="color: #666; font-size: 12px;">Attachments: $attachment_count &middot; User agent: $user_agent &middot; IP: $ip_address</p>
</div>
""")

CONFIRMATION_HTML = Template("""\
<div style="font-family: Arial, sans-serif; max-width: 640px; margin: 0 auto;">
  <h2 style="color: #064f2c;">We received your request</h2>
  <p>Hi $name,</p>
  <p>Thanks for contacting PixelPim support. Your ticket has been received.</p>
  <p><strong>Subject:</strong> $subject</p>
  <ul>
    <li>Our team reviews new tickets within one business day</li>
    <li>You'll receive a follow-up email from our team</li>
  </ul>
</div>
""")

def _field(value: str | None) -> str:
    return html.escape(value) if value else "&mdash;"

def render_ticket(ticket: SupportTicketCreate, *, attachment_count: int, submitted_at: datetime,
                  user_agent: str | None = None, ip_address: str | None = None) -> str:
    return TICKET_HTML.substitute(
        subject=html.escape(ticket.subject),
        category=html.escape(ticket.category.value),
        priority=html.escape(ticket.priority.value),
        name=html.escape(ticket.name),
        email=html.escape(str(ticket.email)),
        workspace=_field(ticket.workspace),
        url=_field(ticket.url),
        submitted_at=submitted_at.isoformat(),
        description=html.escape(ticket.description),
        steps=_field(ticket.steps),
        expected=_field(ticket.expected),
        actual=_field(ticket.actual),
        attachment_count=attachment_count,
        user_agent=_field(user_agent),
        ip_address=_field(ip_address),
    )

def render_confirmation(ticket: SupportTicketCreate) -> str:
    return CONFIRMATION_HTML.substitute(name=html.escape(ticket.name), subject=html.escape(ticket.subject))
