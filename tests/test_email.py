"""Tests for the email outbox."""

import pytest

from eventtix.core.config import settings
from eventtix.models.email_log import EmailLog
from eventtix.services import email_service


@pytest.fixture
def sent(monkeypatch):
    calls = []

    def fake_send(to_email, subject, body):
        calls.append((to_email, subject))

    monkeypatch.setattr(email_service, "send_email", fake_send)
    return calls


class TestQueueEmail:
    def test_disabled_keeps_queued(self, db, sent):
        eid = email_service.queue_email(db, "a@example.com", "Hi", "Body")

        log = db.get(EmailLog, eid)
        assert log.status == "queued"
        assert log.attempts == 0
        assert sent == []

    def test_enabled_sends_immediately(self, db, sent, monkeypatch):
        monkeypatch.setattr(settings, "EMAIL_ENABLED", True)

        eid = email_service.queue_email(db, "a@example.com", "Hi", "Body", kind="purchase_received")

        log = db.get(EmailLog, eid)
        assert log.status == "sent"
        assert log.attempts == 1
        assert log.sent_at is not None
        assert sent == [("a@example.com", "Hi")]

    def test_failure_is_recorded(self, db, monkeypatch):
        monkeypatch.setattr(settings, "EMAIL_ENABLED", True)

        def broken(*args):
            raise ConnectionRefusedError("smtp down")

        monkeypatch.setattr(email_service, "send_email", broken)

        eid = email_service.queue_email(db, "a@example.com", "Hi", "Body")

        log = db.get(EmailLog, eid)
        assert log.status == "failed"
        assert "smtp down" in log.last_error


class TestProcessPending:
    def test_retries_queued_and_failed(self, db, sent):
        email_service.queue_email(db, "a@example.com", "One", "Body")
        email_service.queue_email(db, "b@example.com", "Two", "Body")

        result = email_service.process_pending_emails(db)

        assert result == {"processed": 2, "sent": 2, "failed": 0}
        assert db.query(EmailLog).filter_by(status="sent").count() == 2

    def test_gives_up_after_max_attempts(self, db, monkeypatch):
        def broken(*args):
            raise RuntimeError("nope")

        monkeypatch.setattr(email_service, "send_email", broken)
        email_service.queue_email(db, "a@example.com", "One", "Body")

        for _ in range(3):
            email_service.process_pending_emails(db, max_attempts=2)

        log = db.query(EmailLog).one()
        assert log.attempts == 2
        assert log.status == "failed"


class TestSendGrid:
    def test_error_response_raises(self, monkeypatch):
        class FakeResponse:
            status_code = 401
            text = "unauthorized"

        monkeypatch.setattr(settings, "SENDGRID_API_KEY", "key")
        monkeypatch.setattr(email_service.requests, "post", lambda *a, **kw: FakeResponse())

        with pytest.raises(RuntimeError, match="SendGrid error 401"):
            email_service.send_email("a@example.com", "Hi", "Body")

    def test_plain_text_payload(self, monkeypatch):
        captured = {}

        class Accepted:
            status_code = 202
            text = ""

        def fake_post(url, json, headers, timeout):
            captured.update(json)
            return Accepted()

        monkeypatch.setattr(settings, "SENDGRID_API_KEY", "key")
        monkeypatch.setattr(email_service.requests, "post", fake_post)

        email_service.send_email("a@example.com", "Hi", "Body")

        assert captured["personalizations"] == [{"to": [{"email": "a@example.com"}]}]
        assert captured["content"] == [{"type": "text/plain", "value": "Body"}]
        assert "attachments" not in captured


class TestNotifications:
    def test_status_change_kinds(self, db, sent):
        class T:
            buyer_name = "Ada"
            buyer_email = "ada@example.com"
            ticket_code = "ABC123XYZ000"
            status = "pending"

        ticket = T()
        assert email_service.notify_status_changed(db, ticket) is None

        ticket.status = "rejected"
        email_service.notify_status_changed(db, ticket)

        log = db.query(EmailLog).one()
        assert log.kind == "ticket_rejected"
        assert log.ticket_code == "ABC123XYZ000"
