from __future__ import annotations

import base64
import io
import uuid
from datetime import datetime, timezone
from urllib.parse import quote

import qrcode
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from eventtix.core.config import settings
from eventtix.models.ticket import Ticket

TICKET_CODE_LENGTH = 12


def make_ticket_code() -> str:
    """12 uppercase hex characters taken from a random UUID. Uniqueness is enforced by the DB."""
    return uuid.uuid4().hex[:TICKET_CODE_LENGTH].upper()


def _base_url() -> str:
    return (settings.PUBLIC_BASE_URL or "http://localhost:8000").rstrip("/")


def ticket_url(code: str) -> str:
    return f"{_base_url()}/ticket/{quote(code)}"


def verification_url(code: str) -> str:
    return f"{_base_url()}/api/verify-ticket?code={quote(code)}"


def qr_png_bytes(data: str) -> bytes:
    qr = qrcode.QRCode(version=None, box_size=10, border=2)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def qr_data_url(data: str) -> str:
    return "data:image/png;base64," + base64.b64encode(qr_png_bytes(data)).decode("ascii")


def ticket_view(ticket: Ticket, currency: str) -> dict:
    """Everything the ticket page needs for the ticket's current state.

    Only a verified ticket gets a QR credential. Pending and verified tickets
    offer the copy-link button; rejected ones offer nothing.
    """
    is_verified = ticket.status == "verified"
    is_pending = ticket.status == "pending"
    return {
        "ticket": ticket,
        "status": ticket.status,
        "status_text": ticket.status.upper(),
        "is_verified": is_verified,
        "is_pending": is_pending,
        "is_rejected": ticket.status == "rejected",
        "currency": currency,
        "ticket_url": ticket_url(ticket.ticket_code),
        "qr_data_url": qr_data_url(verification_url(ticket.ticket_code)) if is_verified else None,
        "show_copy_link": is_verified or is_pending,
    }


def render_ticket_pdf_bytes(*, ticket: Ticket, currency: str, event_title: str = "") -> bytes:
    """Return an A4 PDF with the ticket details and the verification QR code. Pure function."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    w, h = A4

    # Header
    c.setFont("Helvetica-Bold", 18)
    c.drawString(40, h - 60, event_title or "Event Ticket")
    c.setFont("Helvetica", 11)
    c.drawString(40, h - 80, f"Ticket Code: {ticket.ticket_code}")

    # Buyer block
    c.setFont("Helvetica-Bold", 12)
    c.drawString(40, h - 120, "Ticket holder")
    c.setFont("Helvetica", 11)
    c.drawString(40, h - 138, ticket.buyer_name)
    c.drawString(40, h - 154, ticket.buyer_email)

    # Ticket block
    c.setFont("Helvetica-Bold", 12)
    c.drawString(40, h - 190, "Ticket")
    c.setFont("Helvetica", 11)
    c.drawString(40, h - 208, f"Category: {ticket.category}")
    c.drawString(40, h - 224, f"Quantity: {ticket.quantity}")
    c.drawString(40, h - 240, f"Total Paid: {ticket.total_price} {currency}")
    c.drawString(40, h - 256, f"Status: {ticket.status.upper()}")

    qr = ImageReader(io.BytesIO(qr_png_bytes(verification_url(ticket.ticket_code))))
    c.drawImage(qr, w - 220, h - 260, width=180, height=180)
    c.setFont("Helvetica", 9)
    c.drawString(w - 220, h - 272, "Present this QR code at the venue for entry.")

    # Footer
    c.drawString(40, 40, "This ticket is valid only while its verification check succeeds.")
    c.drawString(40, 26, f"Generated: {datetime.now(timezone.utc).isoformat()}")

    c.showPage()
    c.save()
    return buf.getvalue()
