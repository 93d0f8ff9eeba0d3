"""HTTP contract tests for /api/buy-ticket and /api/verify-ticket."""

from eventtix.models.ticket import Ticket
from eventtix.services import purchase_service, storage_service

from conftest import purchase_form, slip_file


class TestBuyTicket:
    """Tests for POST /api/buy-ticket"""

    def test_success_payload(self, client, db, event):
        r = client.post("/api/buy-ticket", data=purchase_form(quantity=2, totalPrice="100"), files=slip_file())

        assert r.status_code == 200
        body = r.json()
        assert body["success"] is True
        assert len(body["ticketCode"]) == 12
        assert body["message"].startswith("Your ticket purchase is being processed")
        assert db.query(Ticket).filter_by(ticket_code=body["ticketCode"], status="pending").count() == 1

    def test_missing_fields(self, client, event):
        r = client.post("/api/buy-ticket", data=purchase_form())

        assert r.status_code == 400
        assert r.json() == {"error": "Missing required fields"}

    def test_invalid_category(self, client, event):
        r = client.post("/api/buy-ticket", data=purchase_form(category="Balcony"), files=slip_file())

        assert r.status_code == 400
        assert r.json() == {"error": "Invalid ticket category"}

    def test_sold_out(self, client, event):
        assert client.post("/api/buy-ticket", data=purchase_form(quantity=2), files=slip_file()).status_code == 200

        r = client.post("/api/buy-ticket", data=purchase_form(quantity=1), files=slip_file())

        assert r.status_code == 400
        assert r.json() == {"error": "This ticket category is sold out"}

    def test_insufficient_inventory(self, client, event):
        r = client.post("/api/buy-ticket", data=purchase_form(quantity=3), files=slip_file())

        assert r.status_code == 400
        assert r.json() == {"error": "Only 2 ticket(s) remaining for this category"}

    def test_storage_failure_is_generic_500(self, client, db, event, monkeypatch):
        def broken(**kwargs):
            raise OSError("/secret/path is read-only")

        monkeypatch.setattr(storage_service, "store_bytes", broken)

        r = client.post("/api/buy-ticket", data=purchase_form(), files=slip_file())

        assert r.status_code == 500
        assert r.json() == {"error": "Failed to process ticket purchase"}
        assert db.query(Ticket).count() == 0

    def test_unexpected_failure_is_generic_500(self, client, event, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("db exploded")

        monkeypatch.setattr("eventtix.api.routes.tickets.purchase_ticket", boom)

        r = client.post("/api/buy-ticket", data=purchase_form(), files=slip_file())

        assert r.status_code == 500
        assert r.json() == {"error": "Failed to process ticket purchase"}

    def test_conflict_is_409(self, client, event, monkeypatch):
        monkeypatch.setattr(purchase_service, "make_ticket_code", lambda: "ABC123XYZ000")
        client.post("/api/buy-ticket", data=purchase_form(category="VIP"), files=slip_file())

        r = client.post("/api/buy-ticket", data=purchase_form(category="VIP"), files=slip_file())

        assert r.status_code == 409
        assert "error" in r.json()


class TestVerifyTicket:
    """Tests for GET /api/verify-ticket"""

    def _buy(self, client, monkeypatch, code="ABC123XYZ000"):
        monkeypatch.setattr(purchase_service, "make_ticket_code", lambda: code)
        r = client.post("/api/buy-ticket", data=purchase_form(quantity=2), files=slip_file())
        assert r.status_code == 200
        return code

    def test_no_code(self, client):
        r = client.get("/api/verify-ticket")

        assert r.status_code == 400
        assert r.json() == {"valid": False, "error": "No ticket code provided"}

    def test_unknown_code(self, client):
        r = client.get("/api/verify-ticket", params={"code": "NOPE00000000"})

        assert r.status_code == 404
        assert r.json() == {"valid": False, "error": "Ticket not found"}

    def test_pending_then_verified(self, client, db, event, monkeypatch):
        code = self._buy(client, monkeypatch)

        r = client.get("/api/verify-ticket", params={"code": code})
        assert r.status_code == 400
        assert r.json() == {"valid": False, "status": "pending", "error": "Ticket is pending"}

        ticket = db.query(Ticket).filter_by(ticket_code=code).one()
        ticket.status = "verified"
        db.commit()

        r = client.get("/api/verify-ticket", params={"code": code})
        assert r.status_code == 200
        assert r.json() == {
            "valid": True,
            "ticket": {
                "buyerName": "Ada Buyer",
                "buyerEmail": "ada@example.com",
                "quantity": 2,
                "totalPrice": 100.0,
                "ticketCode": code,
                "status": "verified",
            },
        }


class TestBuyTicketAfterCommit:
    def test_notification_failure_still_returns_code(self, client, db, event, monkeypatch):
        def broken(db, ticket):
            raise RuntimeError("outbox unavailable")

        monkeypatch.setattr(purchase_service, "notify_purchase_received", broken)

        r = client.post("/api/buy-ticket", data=purchase_form(), files=slip_file())

        assert r.status_code == 200
        code = r.json()["ticketCode"]
        assert db.query(Ticket).filter_by(ticket_code=code).count() == 1
