"""Pytest configuration and shared fixtures."""

import os

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_ENABLED"] = "false"

import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eventtix.main import app
from eventtix.core.config import settings
from eventtix.core.security import create_access_token, hash_password
from eventtix.db.session import Base, get_db
from eventtix.models.user import User
from eventtix.services.event_config_service import load_event_settings, update_event_config
from eventtix.services.purchase_service import PurchaseRequest, ReceiptUpload

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "MEDIA_LOCAL_DIR", str(tmp_path / "media"))
    monkeypatch.setattr(settings, "EMAIL_ENABLED", False)
    monkeypatch.setattr(settings, "PUBLIC_BASE_URL", "http://testserver")
    monkeypatch.setattr(settings, "GCS_BUCKET_NAME", "")


@pytest.fixture
def media_dir(tmp_path):
    return tmp_path / "media"


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def event(db):
    """Event with a two-seat General tier and a VIP tier."""
    update_event_config(db, {
        "content": "Annual gala.\n\nDoors open at 7pm.",
        "currency": "USD",
        "bankAccountName": "Gala Org",
        "bankAccountNumber": "123-456",
        "ticketCategories": [
            {"name": "General", "price": Decimal("50"), "limit": 2},
            {"name": "VIP", "price": Decimal("120.50"), "limit": 5},
        ],
    })
    return load_event_settings(db)


@pytest.fixture
def admin_user(db):
    user = User(
        id=str(uuid.uuid4()),
        email="admin@example.com",
        full_name="Admin",
        role="admin",
        password_hash=hash_password("secret-pass"),
        is_active=True,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {create_access_token(admin_user.id)}"}


def make_request(category="General", quantity=1, **overrides) -> PurchaseRequest:
    fields = dict(
        buyer_name="Ada Buyer",
        buyer_email="ada@example.com",
        buyer_phone="+100000",
        category=category,
        quantity=quantity,
        receipt=ReceiptUpload(filename="slip.png", content_type="image/png", content=PNG_BYTES),
    )
    fields.update(overrides)
    return PurchaseRequest(**fields)


def purchase_form(category="General", quantity=1, **overrides) -> dict:
    form = {
        "buyerName": "Ada Buyer",
        "buyerEmail": "ada@example.com",
        "buyerPhone": "+100000",
        "category": category,
        "quantity": str(quantity),
    }
    form.update(overrides)
    return form


def slip_file(content=PNG_BYTES, content_type="image/png") -> dict:
    return {"bankTransferSlip": ("slip.png", content, content_type)}
