from __future__ import annotations

import asyncio
import smtplib
import ssl
from email.mime.text import MIMEText
from email.utils import formataddr

from loguru import logger

from rental_admin import settings

# Socket timeout per SMTP operation. A send abandoned by the dispatcher keeps running
# in its worker thread, so an email marked as timed out may still be delivered.
SMTP_TIMEOUT = settings.EFFECT_TIMEOUT


class SmtpEmailChannel:
    """
    Plain-text email over SMTP.
    smtplib is blocking, so each send runs in a worker thread.
    """

    def __init__(
        self,
        host: str = settings.smtp_host,
        port: int = settings.smtp_port,
        secure: bool = settings.smtp_secure,
        user: str = settings.smtp_user,
        password: str = settings.smtp_password,
        sender_name: str = settings.company_name,
    ) -> None:
        self.host = host
        self.port = port
        self.secure = secure
        self.user = user
        self.password = password
        self.sender_name = sender_name

    def _build(self, title: str, message: str, recipient: str) -> MIMEText:
        mime = MIMEText(message, "plain", "utf-8")
        mime["From"] = formataddr((self.sender_name, self.user))
        mime["To"] = recipient
        mime["Subject"] = title
        return mime

    def _send_sync(self, title: str, message: str, recipient: str) -> None:
        mime = self._build(title, message, recipient)
        context = ssl.create_default_context()
        if self.secure:
            server = smtplib.SMTP_SSL(
                self.host, self.port, timeout=SMTP_TIMEOUT, context=context
            )
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT)
        with server:
            if not self.secure:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls(context=context)
                    server.ehlo()
            if self.user:
                server.login(self.user, self.password)
            server.sendmail(self.user, [recipient], mime.as_string())

    async def send(self, title: str, message: str, recipient: str) -> bool:
        """Send one email. SMTP errors propagate to the caller."""
        await asyncio.to_thread(self._send_sync, title, message, recipient)
        logger.info("Email '{}' sent to {}", title, recipient)
        return True


email_channel = SmtpEmailChannel()
