"""
Notification service.
Transactional email goes through Resend; bodies are Django templates under
notifications/templates/notifications/.
"""

import logging

import resend
from django.conf import settings
from django.template.loader import render_to_string

from apps.authentication.models import normalize_email

logger = logging.getLogger("spst.notifications")


def normalize_recipients(to) -> list:
    """Lower-case, trim, drop blanks and duplicates (order kept)."""
    if isinstance(to, str):
        to = [to]
    out = []
    for addr in to or []:
        email = normalize_email(addr)
        if email and "@" in email and email not in out:
            out.append(email)
    return out


class NotificationService:
    """Send email notifications. Fails silently and never blocks the main flow."""

    def __init__(self, api_key=None, sender=None):
        self._api_key = api_key
        self._sender  = sender

    @property
    def api_key(self) -> str:
        return settings.RESEND_API_KEY if self._api_key is None else self._api_key

    @property
    def sender(self) -> str:
        return self._sender or settings.RESEND_NOREPLY_FROM

    def send_email(self, to, subject: str, html: str, reply_to=None) -> bool:
        """Send one message to all recipients. Returns True on success."""
        recipients = normalize_recipients(to)
        if not recipients:
            logger.info("Email '%s' skipped: no recipients", subject)
            return False
        if not self.api_key:
            logger.warning("RESEND_API_KEY not set, email '%s' to %s not sent", subject, recipients)
            return False

        params = {
            "from":    self.sender,
            "to":      recipients,
            "subject": subject,
            "html":    html,
        }
        if reply_to:
            params["reply_to"] = reply_to

        resend.api_key = self.api_key
        try:
            result = resend.Emails.send(params)
        except Exception as exc:
            logger.warning("Email '%s' to %s failed: %s", subject, recipients, exc)
            return False

        logger.info("Email '%s' sent to %s (id=%s)", subject, recipients, (result or {}).get("id"))
        return True

    def send_template(self, to, subject: str, template: str, context: dict, reply_to=None) -> bool:
        html = render_to_string(f"notifications/{template}", context)
        return self.send_email(to, subject, html, reply_to=reply_to)
