# services/notifier.py
"""
SMTP delivery for submission confirmation emails
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate
from typing import Any, Dict, Optional

import aiosmtplib

from core.results import NotificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SMTPSettings:
    """Connection and sender settings for outbound mail"""
    host: str
    port: int
    from_address: str
    from_name: str = 'CIUS'
    username: Optional[str] = None
    password: Optional[str] = None
    reply_to: Optional[str] = None
    timeout: float = 30.0
    validate_certs: bool = True

    @property
    def domain(self) -> str:
        return self.from_address.rsplit('@', 1)[-1]

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'SMTPSettings':
        return cls(
            host=config['SMTP_HOST'],
            port=int(config['SMTP_PORT']),
            from_address=config['MAIL_FROM_ADDRESS'],
            from_name=config.get('MAIL_FROM_NAME', 'CIUS'),
            username=config.get('SMTP_USERNAME'),
            password=config.get('SMTP_PASSWORD'),
            reply_to=config.get('MAIL_REPLY_TO'),
            timeout=float(config.get('SMTP_TIMEOUT', 30)),
            validate_certs=config.get('SMTP_VALIDATE_CERTS', True)
        )


class SMTPNotifier:
    """
    Sends single HTML emails over SMTP

    Any delivery problem (connection, authentication, rejection, timeout) is
    raised as NotificationError.
    """

    def __init__(self, settings: SMTPSettings):
        self.settings = settings

    def build_message(self, to: str, subject: str, html: str) -> MIMEMultipart:
        """Create the MIME message with standard headers"""
        settings = self.settings

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = formataddr((settings.from_name, settings.from_address))
        msg['To'] = to
        msg['Date'] = formatdate(localtime=True)
        msg['Message-ID'] = f"<{uuid.uuid4()}@{settings.domain}>"

        if settings.reply_to:
            msg['Reply-To'] = settings.reply_to

        msg.attach(MIMEText(html, 'html', 'utf-8'))
        return msg

    def send(self, to: str, subject: str, html: str) -> Dict[str, Any]:
        """
        Deliver one email

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body

        Returns:
            Dict with success flag and message id

        Raises:
            NotificationError: If the message could not be delivered
        """
        msg = self.build_message(to, subject, html)

        try:
            asyncio.run(self._send_async(msg))
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as e:
            raise NotificationError(f"Failed to send '{subject}' email") from e

        logger.info(f"Email sent: subject='{subject}' message_id={msg['Message-ID']}")
        return {'success': True, 'message_id': msg['Message-ID']}

    async def _send_async(self, msg: MIMEMultipart) -> None:
        settings = self.settings

        smtp = aiosmtplib.SMTP(
            hostname=settings.host,
            port=settings.port,
            timeout=settings.timeout,
            use_tls=settings.port == 465,  # Implicit TLS for port 465
            start_tls=False,
            validate_certs=settings.validate_certs
        )

        await smtp.connect()
        try:
            # STARTTLS on submission port
            if settings.port == 587:
                await smtp.starttls()

            if settings.username and settings.password:
                await smtp.login(settings.username, settings.password)

            await smtp.send_message(msg)
        finally:
            if smtp.is_connected:
                await smtp.quit()
