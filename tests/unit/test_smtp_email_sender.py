"""
Unit tests for SmtpEmailSender adapter.

smtplib.SMTP is patched, so no network connection is made.
"""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from src.adapters.smtp.smtp import SmtpEmailSender
from src.domain.exceptions import DependencyError
from src.domain.ports import RenderedDocument

pytestmark = pytest.mark.anyio

DOCUMENT = RenderedDocument(filename="confirmation-abc.pdf", content=b"%PDF-1.4 data")


def make_sender(use_tls: bool = True) -> SmtpEmailSender:
    return SmtpEmailSender(
        host="smtp.example.com",
        port=587,
        username="mailer",
        password="secret",
        sender="events@example.com",
        use_tls=use_tls,
        timeout=5,
    )


class TestBuildMessage:
    """Tests for the MIME message layout."""

    def test_headers(self) -> None:
        message = make_sender().build_message("a@x.com", "Registration Confirmed - Hack2025", "Hi", DOCUMENT)

        assert message["From"] == "events@example.com"
        assert message["To"] == "a@x.com"
        assert message["Subject"] == "Registration Confirmed - Hack2025"

    def test_pdf_attachment(self) -> None:
        message = make_sender().build_message("a@x.com", "subject", "Hi", DOCUMENT)

        attachments = list(message.iter_attachments())
        assert len(attachments) == 1
        assert attachments[0].get_filename() == "confirmation-abc.pdf"
        assert attachments[0].get_content_type() == "application/pdf"
        assert attachments[0].get_content() == b"%PDF-1.4 data"

    def test_body_text(self) -> None:
        message = make_sender().build_message("a@x.com", "subject", "Hello Asha", DOCUMENT)
        body = message.get_body(preferencelist=("plain",))
        assert "Hello Asha" in body.get_content()


class TestSendConfirmation:
    """Tests for delivery over SMTP."""

    async def test_sends_with_starttls_and_login(self) -> None:
        with patch("src.adapters.smtp.smtp.smtplib.SMTP") as smtp_class:
            smtp = smtp_class.return_value.__enter__.return_value

            await make_sender().send_confirmation("a@x.com", "subject", "body", DOCUMENT)

        smtp_class.assert_called_once_with("smtp.example.com", 587, timeout=5)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("mailer", "secret")
        smtp.send_message.assert_called_once()

    async def test_skips_starttls_when_disabled(self) -> None:
        with patch("src.adapters.smtp.smtp.smtplib.SMTP") as smtp_class:
            smtp = smtp_class.return_value.__enter__.return_value

            await make_sender(use_tls=False).send_confirmation("a@x.com", "subject", "body", DOCUMENT)

        smtp.starttls.assert_not_called()

    @pytest.mark.parametrize(
        "error",
        [
            smtplib.SMTPAuthenticationError(535, b"bad credentials"),
            smtplib.SMTPRecipientsRefused({"a@x.com": (550, b"no such user")}),
            ConnectionRefusedError("connection refused"),
        ],
    )
    async def test_failures_raise_dependency_error(self, error: Exception) -> None:
        with patch("src.adapters.smtp.smtp.smtplib.SMTP") as smtp_class:
            smtp = MagicMock()
            smtp.send_message.side_effect = error
            smtp_class.return_value.__enter__.return_value = smtp

            with pytest.raises(DependencyError) as exc_info:
                await make_sender().send_confirmation("a@x.com", "subject", "body", DOCUMENT)

        assert exc_info.value.__cause__ is error

    async def test_unencodable_subject_raises_dependency_error(self) -> None:
        """A header with a line break is wrapped before any connection is opened."""
        with patch("src.adapters.smtp.smtp.smtplib.SMTP") as smtp_class:
            with pytest.raises(DependencyError) as exc_info:
                await make_sender().send_confirmation(
                    "a@x.com", "Registration Confirmed - Hack\n2025", "body", DOCUMENT
                )

        assert isinstance(exc_info.value.__cause__, ValueError)
        smtp_class.assert_not_called()
