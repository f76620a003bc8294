"""Mail delivery — template rendering, console outbox, best-effort notify()."""

from app.core.errors import ExternalServiceError
from app.infrastructure.mailer import ConsoleMailSender, render_email
from app.services.notifications import notify


class _BrokenSender:
    async def send(self, *, to, subject, html):
        raise ExternalServiceError("SMTP", "relay refused")


def test_templates_autoescape_context():
    html = render_email("welcome.html", firstname="<b>Ada</b>", role="Agent")
    assert "&lt;b&gt;Ada&lt;/b&gt;" in html
    assert "agent account" in html


async def test_notify_records_in_console_outbox():
    mail = ConsoleMailSender()
    sent = await notify(
        mail, to="ada@example.com", subject="Welcome", template="newsletter_welcome.html",
    )
    assert sent is True
    assert mail.outbox[0].to == "ada@example.com"
    assert "newsletter" in mail.outbox[0].html


async def test_notify_swallows_delivery_failure():
    sent = await notify(
        _BrokenSender(), to="x@example.com", subject="Hi", template="newsletter_welcome.html",
    )
    assert sent is False


async def test_notify_reports_missing_template():
    sent = await notify(ConsoleMailSender(), to="x@example.com", subject="Hi", template="nope.html")
    assert sent is False
