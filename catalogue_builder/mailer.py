"""
Outbound email with the catalogue attached, sent over SMTP with aiosmtplib.
"""

from __future__ import annotations

from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from .errors import DeliveryUnsupported
from .logging_utils import get_logger
from .models import CatalogueConfig

logger = get_logger(__name__)

EMAIL_SUBJECT = "Your PDF Catalogue"
EMAIL_BODY = "Here’s your requested PDF."


class Mailer:
    """Service for sending the catalogue via SMTP"""

    def __init__(
        self,
        host: str,
        port: int,
        username: str | None,
        password: str | None,
        sender_name: str = "Bloudan Catalogue",
        start_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender_name = sender_name
        self.start_tls = start_tls

    @classmethod
    def from_config(cls, config: CatalogueConfig) -> "Mailer":
        return cls(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_user,
            password=config.smtp_password,
            sender_name=config.sender_name,
        )

    @property
    def sender(self) -> str:
        return f'"{self.sender_name}" <{self.username}>'

    def build_message(
        self,
        to_email: str,
        subject: str,
        body: str,
        attachment: bytes,
        filename: str,
    ) -> MIMEMultipart:
        message = MIMEMultipart()
        message["From"] = self.sender
        message["To"] = to_email
        message["Subject"] = subject
        message.attach(MIMEText(body, "plain", "utf-8"))

        part = MIMEApplication(attachment, _subtype="pdf")
        part.add_header("Content-Disposition", "attachment", filename=filename)
        message.attach(part)
        return message

    async def send_with_attachment(
        self,
        to_email: str,
        attachment: bytes,
        filename: str,
        subject: str = EMAIL_SUBJECT,
        body: str = EMAIL_BODY,
    ) -> None:
        """
        Send one message with a PDF attachment. Raises on SMTP failure so the
        calling job can log the outcome.
        """
        if not self.username or not self.password:
            raise DeliveryUnsupported("SMTP credentials are not configured")

        message = self.build_message(to_email, subject, body, attachment, filename)
        await aiosmtplib.send(
            message,
            hostname=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            start_tls=self.start_tls,
        )
        logger.info("Email sent successfully to %s (%s)", to_email, filename)


__all__ = ["Mailer", "EMAIL_SUBJECT", "EMAIL_BODY"]
