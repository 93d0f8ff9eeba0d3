"""Tests for ticket codes, URLs and the ticket credential renderers."""

import re
from decimal import Decimal

from eventtix.models.ticket import Ticket
from eventtix.services.ticket_service import (
    make_ticket_code,
    render_ticket_pdf_bytes,
    ticket_url,
    ticket_view,
    verification_url,
)


def _ticket(status="pending"):
    return Ticket(
        ticket_code="ABC123XYZ000",
        buyer_name="Ada Buyer",
        buyer_email="ada@example.com",
        category="VIP",
        quantity=2,
        total_price=Decimal("241.00"),
        status=status,
    )


def test_ticket_code_format():
    codes = {make_ticket_code() for _ in range(50)}

    assert len(codes) == 50
    assert all(re.fullmatch(r"[0-9A-F]{12}", c) for c in codes)


def test_urls_use_public_base():
    assert ticket_url("ABC") == "http://testserver/ticket/ABC"
    assert verification_url("ABC") == "http://testserver/api/verify-ticket?code=ABC"


def test_view_by_status():
    pending = ticket_view(_ticket("pending"), "USD")
    verified = ticket_view(_ticket("verified"), "USD")
    rejected = ticket_view(_ticket("rejected"), "USD")

    assert pending["qr_data_url"] is None and pending["show_copy_link"]
    assert verified["qr_data_url"].startswith("data:image/png;base64,")
    assert verified["status_text"] == "VERIFIED"
    assert rejected["qr_data_url"] is None and not rejected["show_copy_link"]


def test_pdf():
    pdf = render_ticket_pdf_bytes(ticket=_ticket("verified"), currency="USD", event_title="Gala")

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000
