"""
Tests for client/subscription patches
"""
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from clientdesk.domain.patches import ClientPatch, NewClient, SubscriptionPatch


def test_new_client_strips_name_and_blanks():
    """Blank optional strings become null on insert"""
    row = NewClient(name="  Acme  ", email="", phone="+1 555").to_row()

    assert row == {
        "name": "Acme",
        "email": None,
        "phone": "+1 555",
        "company": None,
        "source": None,
        "status": "active",
    }


def test_new_client_requires_name():
    with pytest.raises(ValidationError, match="Client name cannot be empty"):
        NewClient(name="   ")


def test_client_patch_changes_only_set_fields():
    """Omitted fields are not part of the change set; explicit null is"""
    patch = ClientPatch(phone="+1 555", notes=None)

    assert patch.changes() == {"phone": "+1 555", "notes": None}
    assert ClientPatch().is_empty() is True
    assert patch.is_empty() is False


def test_client_patch_rejects_unknown_field():
    with pytest.raises(ValidationError):
        ClientPatch(balance=10)


def test_client_patch_name_cannot_be_cleared():
    with pytest.raises(ValidationError):
        ClientPatch(name=None)
    with pytest.raises(ValidationError):
        ClientPatch(name=" ")


def test_client_patch_status_values():
    assert ClientPatch(status="archived").changes() == {"status": "archived"}
    with pytest.raises(ValidationError):
        ClientPatch(status="deleted")
    with pytest.raises(ValidationError):
        ClientPatch(status=None)


def test_client_patch_allowed_fields():
    assert set(ClientPatch.allowed_fields()) == {
        "name", "source", "status", "email", "phone", "address", "company", "notes",
    }


def test_subscription_patch_amount_normalized():
    """Comma decimal separator is accepted"""
    assert SubscriptionPatch(amount="49,90").changes() == {"amount": Decimal("49.90")}
    assert SubscriptionPatch(amount=50).changes() == {"amount": Decimal("50")}


@pytest.mark.parametrize("amount", ["-5", "abc", "1.999", -1, None])
def test_subscription_patch_invalid_amount(amount):
    with pytest.raises(ValidationError):
        SubscriptionPatch(amount=amount)


def test_subscription_patch_currency():
    assert SubscriptionPatch(currency=" eur ").changes() == {"currency": "EUR"}
    with pytest.raises(ValidationError):
        SubscriptionPatch(currency="EURO")
    with pytest.raises(ValidationError):
        SubscriptionPatch(currency=None)


def test_subscription_patch_cycle_and_active():
    assert SubscriptionPatch(cycle="one-time", active=False).changes() == {"cycle": "one-time", "active": False}
    with pytest.raises(ValidationError):
        SubscriptionPatch(cycle="weekly")
    with pytest.raises(ValidationError):
        SubscriptionPatch(active=None)


def test_subscription_patch_dates_in_row_form():
    """Dates leave the patch as ISO strings; null clears the date"""
    assert SubscriptionPatch(next_payment_date=date(2026, 11, 1)).changes() == {"next_payment_date": "2026-11-01"}
    assert SubscriptionPatch(next_payment_date="2026-12-31").changes() == {"next_payment_date": "2026-12-31"}
    assert SubscriptionPatch(next_payment_date=None).changes() == {"next_payment_date": None}
