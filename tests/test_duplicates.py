"""Tests for duplicate detection."""

from decimal import Decimal

import pytest

from reelcost.domain.duplicates import is_duplicate
from reelcost.domain.errors import DuplicateError
from reelcost.integrations.extraction import ExtractionResult


@pytest.fixture
def existing(make_invoice):
    return make_invoice(ico="12345678", variable_symbol="100", amount_with_vat="1210")


def test_same_vendor_and_variable_symbol_is_duplicate(temp_db, existing):
    assert is_duplicate(temp_db, existing.project_id, "12345678", "100", None)


def test_variable_symbol_is_normalized(temp_db, existing):
    assert is_duplicate(temp_db, existing.project_id, "123 456 78", " 1 00 ", None)


def test_different_variable_symbol_without_amount_match(temp_db, existing):
    assert not is_duplicate(temp_db, existing.project_id, "12345678", "101", None)


def test_variable_symbol_decides_over_amount(temp_db, existing):
    # Same amount, but a different VS is a different invoice
    assert not is_duplicate(temp_db, existing.project_id, "12345678", "101", Decimal("1210"))


def test_amount_fallback_without_variable_symbol(temp_db, existing):
    assert is_duplicate(temp_db, existing.project_id, "12345678", None, Decimal("1210.00"))
    assert not is_duplicate(temp_db, existing.project_id, "12345678", "  ", Decimal("999"))


def test_no_vendor_identity_is_never_duplicate(temp_db, existing):
    assert not is_duplicate(temp_db, existing.project_id, None, "100", Decimal("1210"))
    assert not is_duplicate(temp_db, existing.project_id, "n/a", "100", Decimal("1210"))


def test_no_signals_is_never_duplicate(temp_db, existing):
    assert not is_duplicate(temp_db, existing.project_id, "12345678", None, None)


def test_duplicates_are_project_scoped(temp_db, project_service, existing):
    other_project = project_service.create_project("Other Show")
    assert not is_duplicate(temp_db, other_project, "12345678", "100", None)


def test_create_invoice_rejects_duplicate(invoice_service, existing):
    with pytest.raises(DuplicateError, match="12345678"):
        invoice_service.create_invoice(
            ExtractionResult(ico="12345678", variable_symbol="100"),
            user_id="lp1",
            project_id=existing.project_id,
        )
    assert len(invoice_service.list_invoices(project_id=existing.project_id)) == 1


def test_edits_are_not_rechecked(invoice_service, existing, make_invoice):
    other = make_invoice(ico="12345678", variable_symbol="200")
    from reelcost.domain.entities import InvoiceEdits

    updated = invoice_service.update_fields(other.id, InvoiceEdits(variable_symbol="100"))
    assert updated.variable_symbol == "100"
