"""Transactional email delivery.

Invitation emails are rendered from a jinja2 template and delivered over
SMTP. Without SMTP settings the message is logged instead of sent, which is
what local development and tests rely on.
"""

import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import jinja2

import config

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when the SMTP server refuses or cannot be reached."""

    pass


INVITATION_SUBJECT = "You're Invited to Join MTSS as a Teacher"

INVITATION_TEMPLATE = jinja2.Template(
    """<!DOCTYPE html>
<html>
<head>
  <style>
    body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
    .container { max-width: 600px; margin: 0 auto; padding: 20px; }
    .header { background: #1e3a5f; color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }
    .content { background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }
    .button { display: inline-block; background: #d4af37; color: #1e3a5f; padding: 15px 30px; text-decoration: none; border-radius: 5px; font-weight: bold; margin: 20px 0; }
    .footer { text-align: center; margin-top: 20px; color: #666; font-size: 12px; }
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>Welcome to MTSS</h1>
      <p>{{ school_name }}</p>
    </div>
    <div class="content">
      <h2>You're Invited!</h2>
      <p>You have been invited to join {{ school_name }} as a teacher on our educational platform.</p>
      <p>Click the button below to complete your registration:</p>
      <p style="text-align: center;"><a href="{{ invite_link }}" class="button">Complete Registration</a></p>
      <p>Or copy and paste this link into your browser:</p>
      <p style="word-break: break-all; background: #eee; padding: 10px; border-radius: 5px;">{{ invite_link }}</p>
      <p><strong>This invitation will expire in {{ expiry_days }} days.</strong></p>
    </div>
    <div class="footer">
      <p>&copy; {{ year }} {{ school_name }}</p>
      <p>"We Strive for Excellence"</p>
    </div>
  </div>
</body>
</html>""",
    autoescape=True,
)


def render_invitation_email(invite_link: str) -> str:
    return INVITATION_TEMPLATE.render(
        invite_link=invite_link,
        school_name=config.SCHOOL_NAME,
        expiry_days=config.INVITATION_EXPIRY_DAYS,
        year=datetime.now().year,
    )


class EmailSender:
    """Sends HTML email through an SMTP relay."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
    ):
        self.host = host if host is not None else config.SMTP_HOST
        self.port = port or config.SMTP_PORT
        self.username = username if username is not None else config.SMTP_USER
        self.password = password if password is not None else config.SMTP_PASSWORD
        self.sender = sender or config.EMAIL_FROM

    @property
    def is_configured(self) -> bool:
        return bool(self.host)

    def send(self, to: str, subject: str, html: str) -> bool:
        """Send one message.

        Returns:
            True if handed to the SMTP server, False if only logged.

        Raises:
            EmailDeliveryError: If SMTP delivery fails.
        """
        if not self.is_configured:
            logger.warning("SMTP not configured; email not sent. To=%s, Subject=%s", to, subject)
            return False

        msg = MIMEMultipart()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html"))

        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as server:
                server.starttls()
                if self.username:
                    server.login(self.username, self.password or "")
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", to, e)
            raise EmailDeliveryError(str(e)) from e

        logger.info("Email sent to %s: %s", to, subject)
        return True

    def send_invitation(self, to: str, invite_link: str) -> bool:
        return self.send(to, INVITATION_SUBJECT, render_invitation_email(invite_link))
