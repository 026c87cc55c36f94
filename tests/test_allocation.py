"""Tests for the allocation reconciler."""

from datetime import datetime
from decimal import Decimal

import pytest

from reelcost.domain.allocation import TOLERANCE, compute_balance
from reelcost.domain.entities import Invoice, InvoiceAllocation, InvoiceStatus
from reelcost.domain.errors import InvoiceLockedError, NotFoundError, ValidationError
from reelcost.integrations.extraction import ExtractionResult


def _invoice(net):
    return Invoice(
        id=1,
        project_id=1,
        internal_id=1,
        user_id="lp1",
        ico="12345678",
        company_name=None,
        bank_account=None,
        iban=None,
        variable_symbol=None,
        description=None,
        amount_with_vat=None,
        amount_without_vat=net,
        currency="CZK",
        confidence=None,
        raw_text=None,
        status=InvoiceStatus.DRAFT,
        rejection_reason=None,
        file_name=None,
        file_mime_type=None,
        has_file=False,
        created_at=datetime(2024, 1, 1),
    )


def _allocations(*amounts):
    return [
        InvoiceAllocation(
            id=i, invoice_id=1, budget_line_id=1, amount=Decimal(a), created_at=datetime(2024, 1, 1)
        )
        for i, a in enumerate(amounts, start=1)
    ]


def test_tolerance_is_one_unit():
    assert TOLERANCE == Decimal("1.0")


@pytest.mark.parametrize(
    "net, amounts, unallocated, balanced",
    [
        ("1000", ["800"], "200", False),
        ("1000", ["600", "399.5"], "0.5", True),
        ("1000", ["1000"], "0", True),
        ("1000", ["1001"], "-1", True),
        ("1000", ["1001.01"], "-1.01", False),
        ("1000", [], "1000", False),
    ],
)
def test_compute_balance(net, amounts, unallocated, balanced):
    balance = compute_balance(_invoice(Decimal(net)), _allocations(*amounts))
    assert balance.unallocated == Decimal(unallocated)
    assert balance.is_balanced is balanced
    assert balance.total_allocated == sum((Decimal(a) for a in amounts), Decimal("0"))


def test_missing_net_amount_counts_as_zero():
    assert compute_balance(_invoice(None), []).is_balanced is True
    balance = compute_balance(_invoice(None), _allocations("50"))
    assert balance.unallocated == Decimal("-50")
    assert balance.is_balanced is False


def test_adding_and_removing_moves_unallocated_by_amount(
    allocation_service, budget_lines, make_invoice
):
    invoice = make_invoice(amount_without_vat="1000")
    before = allocation_service.balance(invoice.id).unallocated

    allocation_id = allocation_service.add_allocation(
        invoice.id, budget_lines["2001"].id, Decimal("333.33")
    )
    after_add = allocation_service.balance(invoice.id).unallocated
    assert before - after_add == Decimal("333.33")

    allocation_service.remove_allocation(allocation_id)
    assert allocation_service.balance(invoice.id).unallocated == before


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
def test_add_allocation_requires_positive_amount(
    allocation_service, budget_lines, make_invoice, amount
):
    invoice = make_invoice()
    with pytest.raises(ValidationError):
        allocation_service.add_allocation(invoice.id, budget_lines["1001"].id, amount)


def test_add_allocation_unknown_line(allocation_service, make_invoice):
    invoice = make_invoice()
    with pytest.raises(NotFoundError):
        allocation_service.add_allocation(invoice.id, 9999, Decimal("10"))


def test_add_allocation_unknown_invoice(allocation_service, budget_lines):
    with pytest.raises(NotFoundError):
        allocation_service.add_allocation(9999, budget_lines["1001"].id, Decimal("10"))


def test_add_allocation_rejects_line_of_other_project(
    allocation_service, budget_service, project_service, budget_xml, make_invoice
):
    other_project = project_service.create_project("Other Show")
    budget_service.upload_budget(other_project, "v1", budget_xml, activate=True)
    foreign_line = budget_service.get_active_budget_lines(other_project)[0]
    invoice = make_invoice()

    with pytest.raises(ValidationError, match="does not belong"):
        allocation_service.add_allocation(invoice.id, foreign_line.id, Decimal("10"))


def test_add_allocation_rejects_inbox_invoice(
    allocation_service, invoice_service, budget_lines
):
    invoice = invoice_service.create_invoice(
        ExtractionResult(ico="11111111", amount_without_vat=Decimal("10")), user_id="lp1"
    )
    with pytest.raises(ValidationError, match="not assigned"):
        allocation_service.add_allocation(invoice.id, budget_lines["1001"].id, Decimal("10"))


def test_no_cap_on_line_allocation(allocation_service, budget_lines, make_invoice):
    invoice = make_invoice(amount_without_vat="1000000")
    line = budget_lines["1001"]
    allocation_service.add_allocation(invoice.id, line.id, Decimal("900000"))
    assert len(allocation_service.list_allocations(invoice.id)) == 1


def test_list_allocations_joins_budget_line(allocation_service, budget_lines, make_invoice):
    invoice = make_invoice()
    allocation_service.add_allocation(invoice.id, budget_lines["2005"].id, Decimal("250"))

    (allocation,) = allocation_service.list_allocations(invoice.id)
    assert allocation.budget_line.account_number == "2005"
    assert allocation.budget_line.account_description == "Grip equipment"


def test_locked_invoice_rejects_allocation_changes(
    allocation_service, invoice_service, budget_lines, make_invoice, line_producer, producer
):
    invoice = make_invoice(amount_without_vat="500")
    allocation_id = allocation_service.add_allocation(
        invoice.id, budget_lines["1001"].id, Decimal("500")
    )
    invoice_service.submit(invoice.id, line_producer)
    invoice_service.final_approve(invoice.id, producer)

    with pytest.raises(InvoiceLockedError):
        allocation_service.add_allocation(invoice.id, budget_lines["2001"].id, Decimal("1"))
    with pytest.raises(InvoiceLockedError):
        allocation_service.remove_allocation(allocation_id)
    assert len(allocation_service.list_allocations(invoice.id)) == 1


def test_suggestions_come_from_vendor_history(allocation_service, budget_lines, make_invoice):
    older = make_invoice(variable_symbol="1")
    newer = make_invoice(variable_symbol="2")
    other_vendor = make_invoice(ico="87654321", variable_symbol="3")
    allocation_service.add_allocation(older.id, budget_lines["1001"].id, Decimal("10"))
    allocation_service.add_allocation(newer.id, budget_lines["2001"].id, Decimal("10"))
    allocation_service.add_allocation(newer.id, budget_lines["1001"].id, Decimal("10"))
    allocation_service.add_allocation(other_vendor.id, budget_lines["2005"].id, Decimal("10"))

    lines = allocation_service.suggest_lines_for_vendor(older.project_id, "IČO 123 456 78")
    assert [line.account_number for line in lines] == ["2001", "1001"]


def test_suggestions_never_cross_projects(
    allocation_service,
    budget_service,
    project_service,
    budget_xml,
    budget_lines,
    make_invoice,
):
    other_project = project_service.create_project("Other Show")
    budget_service.upload_budget(other_project, "v1", budget_xml, activate=True)
    foreign_line = budget_service.get_active_budget_lines(other_project)[0]

    foreign_invoice = make_invoice(variable_symbol="9", project_id=other_project)
    allocation_service.add_allocation(foreign_invoice.id, foreign_line.id, Decimal("10"))
    local_invoice = make_invoice(variable_symbol="9")

    assert allocation_service.suggest_lines_for_vendor(local_invoice.project_id, "12345678") == []
    suggested = allocation_service.suggest_lines_for_vendor(other_project, "12345678")
    assert [line.id for line in suggested] == [foreign_line.id]


def test_suggestions_use_only_last_fifteen_invoices(
    allocation_service, budget_lines, make_invoice
):
    oldest = make_invoice(variable_symbol="old")
    allocation_service.add_allocation(oldest.id, budget_lines["2005"].id, Decimal("10"))
    for n in range(15):
        invoice = make_invoice(variable_symbol=f"new-{n}")
        allocation_service.add_allocation(invoice.id, budget_lines["1001"].id, Decimal("10"))

    lines = allocation_service.suggest_lines_for_vendor(oldest.project_id, "12345678")
    assert [line.account_number for line in lines] == ["1001"]


def test_suggestions_need_vendor_identity(allocation_service, sample_project):
    assert allocation_service.suggest_lines_for_vendor(sample_project.id, "") == []
    assert allocation_service.suggest_lines_for_vendor(sample_project.id, None) == []


def test_preselect_forces_zero_amount(allocation_service, budget_lines, make_invoice):
    earlier = make_invoice(variable_symbol="1")
    allocation_service.add_allocation(earlier.id, budget_lines["2001"].id, Decimal("1000"))
    current = make_invoice(variable_symbol="2")

    draft = allocation_service.preselect_line(current.id)
    assert draft.budget_line.id == budget_lines["2001"].id
    assert draft.amount == Decimal("0")


def test_preselect_skips_allocated_invoice(allocation_service, budget_lines, make_invoice):
    earlier = make_invoice(variable_symbol="1")
    allocation_service.add_allocation(earlier.id, budget_lines["2001"].id, Decimal("1000"))
    current = make_invoice(variable_symbol="2")
    allocation_service.add_allocation(current.id, budget_lines["1001"].id, Decimal("5"))

    assert allocation_service.preselect_line(current.id) is None


def test_preselect_without_history(allocation_service, sample_budget, make_invoice):
    invoice = make_invoice(variable_symbol="1")
    assert allocation_service.preselect_line(invoice.id) is None
