"""
Outgoing mail over SMTP
"""
import os
import logging
import smtplib
from email.message import EmailMessage

logger = logging.getLogger(__name__)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
MAIL_FROM = os.getenv("MAIL_FROM", "contact@mydayiart.com")


class Mailer:
    """Sends HTML mail through the configured SMTP relay."""

    def __init__(
        self,
        host: str = SMTP_HOST,
        port: int = SMTP_PORT,
        user: str = SMTP_USER,
        password: str = SMTP_PASSWORD,
        sender: str = MAIL_FROM,
        timeout: float = 10,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.timeout = timeout

    def send(self, to: str, subject: str, html: str) -> None:
        if not self.host:
            if ENVIRONMENT == "production":
                raise RuntimeError("SMTP_HOST must be set in production to send mail")
            # Development mode - log the message instead of sending it
            logger.warning(f"SMTP_HOST not set - not sending mail to {to}: {subject}\n{html}")
            return

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(html, subtype="html")

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password)
            smtp.send_message(message)

        logger.info(f"Sent mail to {to}: {subject}")


def get_mailer() -> Mailer:
    return Mailer()
