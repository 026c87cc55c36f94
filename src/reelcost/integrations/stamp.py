"""Stamping approved invoice PDFs with their project bookkeeping footer."""

import io
import logging

from PyPDF2 import PdfReader, PdfWriter
from reportlab.pdfgen import canvas

from reelcost.domain.entities import Invoice, InvoiceAllocation, Project
from reelcost.domain.errors import ExternalServiceError
from reelcost.utils.amount_parser import format_amount

logger = logging.getLogger(__name__)

FOOTER_HEIGHT = 50
FONT_SIZE = 10
MARGIN_X = 20


def build_stamp_lines(
    project: Project, invoice: Invoice, allocations: list[InvoiceAllocation]
) -> tuple[str, str]:
    """Return the two footer lines for an invoice.

    Allocations are summarized as ``<account>: <amount>`` pairs, amounts in
    Czech grouping (``5 000``, ``1 200,5``).
    """
    header = (
        f"Project: {project.name} (#{project.id})  |  "
        f"Internal Invoice ID: #{invoice.internal_id}"
    )
    summary = " | ".join(
        f"{a.budget_line.account_number if a.budget_line else '?'}: {format_amount(a.amount)}"
        for a in allocations
    )
    return header, f"Allocations: {summary}"


def _footer_overlay(width: float, height: float, lines: tuple[str, str]) -> PdfReader:
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=(width, height))
    c.setFillColorRGB(1, 1, 1, alpha=0.9)
    c.rect(0, 0, width, FOOTER_HEIGHT, stroke=0, fill=1)

    c.setFillColorRGB(0, 0, 0)
    c.setFont("Helvetica-Bold", FONT_SIZE)
    c.drawString(MARGIN_X, 30, lines[0])

    c.setFillColorRGB(0.2, 0.2, 0.2)
    c.setFont("Helvetica", FONT_SIZE - 1)
    c.drawString(MARGIN_X, 15, lines[1])

    c.showPage()
    c.save()
    buffer.seek(0)
    return PdfReader(buffer)


def stamp_invoice_pdf(
    pdf_bytes: bytes,
    project: Project,
    invoice: Invoice,
    allocations: list[InvoiceAllocation],
) -> bytes:
    """Draw the bookkeeping footer onto the first page of an invoice PDF.

    Args:
        pdf_bytes: Original PDF document
        project: Project the invoice belongs to
        invoice: Invoice being stamped
        allocations: Its allocations, with budget lines joined

    Returns:
        Stamped PDF bytes

    Raises:
        ExternalServiceError: If the PDF cannot be read or written
    """
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        writer = PdfWriter()
        for index, page in enumerate(reader.pages):
            if index == 0:
                box = page.mediabox
                overlay = _footer_overlay(
                    float(box.width),
                    float(box.height),
                    build_stamp_lines(project, invoice, allocations),
                )
                page.merge_page(overlay.pages[0])
            writer.add_page(page)

        output = io.BytesIO()
        writer.write(output)
        return output.getvalue()
    except Exception as e:
        logger.error("Error stamping PDF of invoice %s: %s", invoice.id, e)
        raise ExternalServiceError("Failed to generate PDF stamp.") from e
