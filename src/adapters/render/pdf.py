"""
PDF confirmation renderer adapter - Implements ConfirmationRenderer protocol.

Draws a one-page A4 confirmation with reportlab and embeds a QR code
(generated with qrcode) that encodes the same payload as JSON. Everything
is rendered into memory buffers; no temporary files are written.
"""

import asyncio
import logging
from io import BytesIO

import qrcode
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from src.domain.exceptions import DependencyError
from src.domain.ports import ConfirmationPayload, RenderedDocument

logger = logging.getLogger(__name__)

_ACCENT = HexColor("#2c3e50")
_QR_SIZE = 180  # points


class PdfConfirmationRenderer:
    """
    Implements ConfirmationRenderer protocol via reportlab + qrcode.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, currency_symbol: str = "Rs.") -> None:
        self._currency_symbol = currency_symbol

    async def render(self, payload: ConfirmationPayload) -> RenderedDocument:
        """
        Render the confirmation PDF.

        Raises:
            DependencyError: If QR or PDF generation fails
        """
        try:
            content = await asyncio.to_thread(self.render_pdf, payload)
        except (ValueError, OSError) as e:
            logger.error("Rendering confirmation for %s failed: %s", payload.registration_id, e)
            raise DependencyError("Failed to render confirmation document") from e

        return RenderedDocument(
            filename=f"confirmation-{payload.registration_id}.pdf",
            content=content,
            content_type="application/pdf",
        )

    def render_pdf(self, payload: ConfirmationPayload) -> bytes:
        """Synchronously draw the confirmation and return the PDF bytes."""
        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        width, height = A4

        pdf.setTitle(f"Registration Confirmation - {payload.event}")
        pdf.setFillColor(_ACCENT)
        pdf.setFont("Helvetica-Bold", 22)
        pdf.drawCentredString(width / 2, height - 80, "Registration Confirmation")

        pdf.setFont("Helvetica", 13)
        lines = [
            ("Name", payload.student_name),
            ("College", payload.college),
            ("Event", payload.event),
            ("Amount", f"{self._currency_symbol} {payload.amount}"),
            ("UTR Number", payload.utr_number),
            ("Registered", payload.registration_date.strftime("%d %b %Y")),
        ]
        y = height - 140
        for label, value in lines:
            pdf.setFont("Helvetica-Bold", 13)
            pdf.drawString(72, y, f"{label}:")
            pdf.setFont("Helvetica", 13)
            pdf.drawString(180, y, str(value))
            y -= 24

        qr_image = ImageReader(BytesIO(self.render_qr_png(payload)))
        qr_top = y - 20
        pdf.drawImage(qr_image, (width - _QR_SIZE) / 2, qr_top - _QR_SIZE, _QR_SIZE, _QR_SIZE)

        pdf.setFont("Helvetica", 11)
        pdf.drawCentredString(width / 2, qr_top - _QR_SIZE - 20, f"Registration ID: {payload.registration_id}")

        pdf.showPage()
        pdf.save()
        return buffer.getvalue()

    @staticmethod
    def render_qr_png(payload: ConfirmationPayload) -> bytes:
        """Encode the payload JSON as a QR code PNG."""
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(payload.to_qr_data())
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buffer = BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()
