"""Tests for loading and updating the event configuration."""

from decimal import Decimal

import pytest
from sqlalchemy import text

from eventtix.core.errors import InvalidCategoryError, ValidationError
from eventtix.models.event_config import TicketCategory
from eventtix.services.event_config_service import (
    Category,
    EventSettings,
    load_event_settings,
    update_event_config,
)
from eventtix.services.purchase_service import purchase_ticket
from eventtix.services.storage_service import save_upload

from conftest import PNG_BYTES, make_request


class TestLoad:
    def test_defaults_without_row(self, db):
        event = load_event_settings(db)

        assert event == EventSettings()
        assert event.categories == {}
        assert event.ticket_label == "Buy Tickets"

    def test_categories_keep_display_order(self, event):
        assert list(event.categories) == ["General", "VIP"]
        assert event.categories["VIP"].price == Decimal("120.50")

    def test_lookup_is_exact(self, event):
        with pytest.raises(InvalidCategoryError):
            event.category("general")

    def test_negative_category_values_rejected(self):
        with pytest.raises(ValueError):
            Category(id=1, name="X", price=Decimal("-1"), limit=1)


class TestUpdate:
    def test_partial_update_keeps_other_fields(self, db, event):
        updated = update_event_config(db, {"ticketLabel": "Reserve"})

        assert updated.ticket_label == "Reserve"
        assert updated.bank_account_name == "Gala Org"
        assert list(updated.categories) == ["General", "VIP"]

    def test_reorder_reuses_rows(self, db, event):
        general_id = event.categories["General"].id

        updated = update_event_config(db, {"ticketCategories": [
            {"name": "VIP", "price": Decimal("100"), "limit": 5},
            {"name": "General", "price": Decimal("45"), "limit": 3},
        ]})

        assert list(updated.categories) == ["VIP", "General"]
        assert updated.categories["General"].id == general_id
        assert updated.categories["General"].price == Decimal("45")
        assert db.query(TicketCategory).count() == 2

    def test_duplicate_names(self, db, event):
        with pytest.raises(ValidationError, match="unique"):
            update_event_config(db, {"ticketCategories": [
                {"name": "VIP", "price": 1, "limit": 1},
                {"name": "VIP ", "price": 1, "limit": 1},
            ]})

    def test_blank_name(self, db, event):
        with pytest.raises(ValidationError):
            update_event_config(db, {"ticketCategories": [{"name": "  ", "price": 1, "limit": 1}]})

    def test_remove_unsold_category(self, db, event):
        updated = update_event_config(db, {"ticketCategories": [{"name": "General", "price": 50, "limit": 2}]})

        assert list(updated.categories) == ["General"]

    def test_remove_category_with_active_ticket(self, db, event):
        purchase_ticket(db, event, make_request(category="VIP"))

        with pytest.raises(ValidationError, match="VIP"):
            update_event_config(db, {"ticketCategories": [{"name": "General", "price": 50, "limit": 2}]})

        db.rollback()
        assert list(load_event_settings(db).categories) == ["General", "VIP"]

    def test_lowering_limit_below_sold(self, db, event):
        purchase_ticket(db, event, make_request(quantity=2))

        updated = update_event_config(db, {"ticketCategories": [
            {"name": "General", "price": 50, "limit": 1},
            {"name": "VIP", "price": "120.50", "limit": 5},
        ]})

        assert updated.categories["General"].limit == 1

    def test_blank_featured_image_clears_it(self, db, event):
        db.execute(text("PRAGMA foreign_keys=ON"))
        media = save_upload(db, folder="public", filename="hero.png", content=PNG_BYTES,
                            mime_type="image/png", is_public=True)
        db.commit()
        assert update_event_config(db, {"featuredImageId": media.id}).featured_image_id == media.id

        updated = update_event_config(db, {"featuredImageId": ""})

        assert updated.featured_image_id is None
