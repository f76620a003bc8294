"""Notifications — best-effort templated email after a committed change.

Invariants:
    - notify() never raises: delivery and template failures are logged and reported as False
    - Called only after the triggering change is committed
"""

import logging

from jinja2 import TemplateError

from app.core.errors import HouseHunterError
from app.core.repository_protocols import MailSender
from app.infrastructure.mailer import render_email

logger = logging.getLogger(__name__)


async def notify(
    mail: MailSender, *, to: str, subject: str, template: str, **context,
) -> bool:
    """Render template and send it; returns whether the mail went out."""
    try:
        html = render_email(template, **context)
        await mail.send(to=to, subject=subject, html=html)
    except (HouseHunterError, TemplateError, OSError) as e:
        logger.warning(
            f"Mail '{subject}' to {to} not sent: {e}",
            extra={"resource": template},
        )
        return False
    return True
