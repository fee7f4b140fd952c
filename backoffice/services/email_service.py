"""
Outbound email.

Delivery is best effort: send() reports success as a bool and
never raises, so callers decide what a failed send means for
them (a warning for welcome emails, a fallback for OTPs).
Providers are tried in order and skipped when unconfigured.
"""

import html
import logging
from email.utils import parseaddr

import httpx

from backoffice.config import Settings, get_settings

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"
SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


class EmailSender:

    def __init__(self, settings: Settings | None = None, client: httpx.Client | None = None):
        self.settings = settings or get_settings()
        self.client = client

    @property
    def configured(self) -> bool:
        return bool(self.settings.RESEND_API_KEY or self.settings.SENDGRID_API_KEY)

    def _post(self, url: str, api_key: str, payload: dict) -> httpx.Response:
        headers = {"Authorization": f"Bearer {api_key}"}
        if self.client is not None:
            return self.client.post(url, json=payload, headers=headers)
        with httpx.Client(timeout=self.settings.EMAIL_TIMEOUT_SECONDS) as client:
            return client.post(url, json=payload, headers=headers)

    def _send_via_resend(self, to: str, subject: str, body: str) -> bool:
        response = self._post(RESEND_URL, self.settings.RESEND_API_KEY, {
            "from": self.settings.EMAIL_FROM,
            "to": to,
            "subject": subject,
            "html": body,
        })
        if response.is_error:
            logger.error("Resend API error %s: %s", response.status_code, response.text)
            return False
        return True

    def _send_via_sendgrid(self, to: str, subject: str, body: str) -> bool:
        _, sender = parseaddr(self.settings.EMAIL_FROM)
        response = self._post(SENDGRID_URL, self.settings.SENDGRID_API_KEY, {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": sender},
            "subject": subject,
            "content": [{"type": "text/html", "value": body}],
        })
        if response.is_error:
            logger.error("SendGrid API error %s: %s", response.status_code, response.text)
            return False
        return True

    def send(self, to: str, subject: str, body: str) -> bool:
        providers = []
        if self.settings.RESEND_API_KEY:
            providers.append(("Resend", self._send_via_resend))
        if self.settings.SENDGRID_API_KEY:
            providers.append(("SendGrid", self._send_via_sendgrid))

        if not providers:
            logger.warning(
                "No email service configured. Set RESEND_API_KEY or SENDGRID_API_KEY."
            )
            return False

        for name, send in providers:
            try:
                if send(to, subject, body):
                    logger.info("Email sent to %s via %s", to, name)
                    return True
            except httpx.HTTPError as e:
                logger.error("%s email sending error: %s", name, e)
            logger.warning("%s failed, trying other providers...", name)
        return False


def get_email_sender() -> EmailSender:
    """FastAPI dependency; tests override it with a recording fake."""
    return EmailSender()


# --- Templates ---

_LAYOUT = """\
<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>{title}</title></head>
<body style="margin:0;background-color:#f1f3f6;font-family:'Segoe UI',Arial,sans-serif;">
  <div style="max-width:620px;margin:40px auto;background:#fff;border-radius:12px;border:1px solid #dcdcdc;">
    <div style="background-color:#0b0f1a;color:#fff;text-align:center;padding:30px 20px;">
      <h1 style="margin:0;font-size:22px;">{title}</h1>
    </div>
    <div style="padding:30px 40px;color:#333;font-size:15px;line-height:1.6;">
{content}
    </div>
  </div>
</body>
</html>
"""


def welcome_email_html(name: str, email: str, temporary_password: str, login_url: str) -> str:
    content = (
        f"<p>Hello {html.escape(name)},</p>\n"
        "<p>An account has been created for you. Sign in with:</p>\n"
        f"<p><strong>Email:</strong> {html.escape(email)}<br>\n"
        f"<strong>Temporary password:</strong> {html.escape(temporary_password)}</p>\n"
        f'<p><a href="{html.escape(login_url, quote=True)}">Sign in</a> '
        "and change your password from your profile page.</p>"
    )
    return _LAYOUT.format(title="Your Account is Ready", content=content)


def otp_email_html(name: str, otp: str, ttl_minutes: int) -> str:
    content = (
        f"<p>Hello {html.escape(name)},</p>\n"
        "<p>Use this code to reset your password:</p>\n"
        f'<p style="font-size:32px;letter-spacing:8px;font-weight:bold;text-align:center;">{html.escape(otp)}</p>\n'
        f"<p>The code expires in {ttl_minutes} minutes. "
        "If you did not request a password reset, ignore this email.</p>"
    )
    return _LAYOUT.format(title="Password Reset Code", content=content)
