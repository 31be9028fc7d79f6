"""
SMTP email sender adapter - Implements EmailSender protocol.

Builds a multipart message with the rendered confirmation attached and
delivers it through an authenticated SMTP session. smtplib is blocking,
so delivery runs in a worker thread; the caller bounds it with a timeout.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from src.domain.exceptions import DependencyError
from src.domain.ports import RenderedDocument

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """
    Implements EmailSender protocol via smtplib.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        use_tls: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender
        self._use_tls = use_tls
        self._timeout = timeout

    async def send_confirmation(
        self,
        recipient: str,
        subject: str,
        body: str,
        attachment: RenderedDocument,
    ) -> None:
        """
        Send the confirmation email.

        Raises:
            DependencyError: On an unencodable header or any SMTP protocol
                or connection failure
        """
        try:
            message = self.build_message(recipient, subject, body, attachment)
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError, ValueError) as e:
            logger.error("SMTP delivery to %s failed: %s", recipient, e)
            raise DependencyError("Failed to send confirmation email") from e

    def build_message(
        self,
        recipient: str,
        subject: str,
        body: str,
        attachment: RenderedDocument,
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content(body)

        maintype, _, subtype = attachment.content_type.partition("/")
        message.add_attachment(
            attachment.content,
            maintype=maintype,
            subtype=subtype or "octet-stream",
            filename=attachment.filename,
        )
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            if self._use_tls:
                smtp.starttls()
            smtp.login(self._username, self._password)
            smtp.send_message(message)
