"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging confirmation emails instead of delivering
them. Selected with MAIL_BACKEND=console for local development.
"""

import logging

from src.domain.ports import RenderedDocument

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    async def send_confirmation(
        self,
        recipient: str,
        subject: str,
        body: str,
        attachment: RenderedDocument,
    ) -> None:
        """
        Log the confirmation email (simulates delivery).

        The message is logged at INFO level to be visible in container logs.
        """
        logger.info(
            "[CONFIRMATION] To: %s Subject: %s Attachment: %s (%d bytes)",
            recipient,
            subject,
            attachment.filename,
            len(attachment.content),
        )
