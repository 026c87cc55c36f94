"""Allocation of invoice net amounts to budget lines."""

import logging
from decimal import Decimal
from typing import Optional

from reelcost.database.base import Database
from reelcost.domain.entities import (
    AllocationDraft,
    Balance,
    BudgetLine,
    Invoice,
    InvoiceAllocation,
)
from reelcost.domain.errors import (
    InvoiceLockedError,
    NotFoundError,
    ValidationError,
    allocation_not_found,
    budget_line_not_found,
    invoice_locked,
    invoice_not_found,
)
from reelcost.utils.normalize import normalize_ico

logger = logging.getLogger(__name__)

# Largest unallocated remainder (in currency units) still counted as balanced
TOLERANCE = Decimal("1.0")

# How many of a vendor's recent invoices feed line suggestions
SUGGESTION_HISTORY = 15


def compute_balance(invoice: Invoice, allocations: list[InvoiceAllocation]) -> Balance:
    """Reconcile allocations against an invoice's net amount.

    A missing net amount counts as zero.

    Args:
        invoice: Invoice whose ``amount_without_vat`` is the target
        allocations: Allocations of that invoice

    Returns:
        Balance with the allocated total and the signed remainder
    """
    net_amount = invoice.amount_without_vat or Decimal("0")
    total_allocated = sum((a.amount for a in allocations), Decimal("0"))
    unallocated = net_amount - total_allocated
    return Balance(
        total_allocated=total_allocated,
        unallocated=unallocated,
        is_balanced=abs(unallocated) <= TOLERANCE,
    )


class AllocationService:
    """Service for managing invoice allocations."""

    def __init__(self, db: Database):
        """Initialize allocation service.

        Args:
            db: Database instance
        """
        self.db = db

    def _get_invoice(self, invoice_id: int) -> Invoice:
        invoice = self.db.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(invoice_not_found(invoice_id))
        return invoice

    def add_allocation(self, invoice_id: int, budget_line_id: int, amount: Decimal) -> int:
        """Charge part of an invoice to a budget line.

        No cap is applied: a line may be over-allocated across invoices, which
        shows up as a negative remaining amount in the cost report.

        Args:
            invoice_id: Invoice ID
            budget_line_id: Budget line ID
            amount: Positive amount to allocate

        Returns:
            Allocation ID

        Raises:
            ValidationError: If amount is not positive, or the line is outside
                the invoice's project
            NotFoundError: If invoice or budget line doesn't exist
            InvoiceLockedError: If the invoice is final approved
        """
        amount = Decimal(amount)
        if amount <= 0:
            raise ValidationError("Allocation amount must be greater than zero")

        invoice = self._get_invoice(invoice_id)
        if invoice.is_locked:
            raise InvoiceLockedError(invoice_locked(invoice_id))
        if invoice.project_id is None:
            raise ValidationError(
                f"Invoice {invoice_id} is not assigned to a project and cannot be allocated"
            )

        line_project_id = self.db.get_budget_line_project_id(budget_line_id)
        if line_project_id is None:
            raise NotFoundError(budget_line_not_found(budget_line_id))
        if line_project_id != invoice.project_id:
            raise ValidationError(
                f"Budget line {budget_line_id} does not belong to project {invoice.project_id}"
            )

        allocation_id = self.db.create_allocation(invoice_id, budget_line_id, amount)
        logger.info(
            "Allocated %s of invoice %s to budget line %s", amount, invoice_id, budget_line_id
        )
        return allocation_id

    def remove_allocation(self, allocation_id: int) -> None:
        """Delete an allocation.

        Raises:
            NotFoundError: If allocation doesn't exist
            InvoiceLockedError: If its invoice is final approved
        """
        allocation = self.db.get_allocation(allocation_id)
        if allocation is None:
            raise NotFoundError(allocation_not_found(allocation_id))
        invoice = self._get_invoice(allocation.invoice_id)
        if invoice.is_locked:
            raise InvoiceLockedError(invoice_locked(invoice.id))
        self.db.delete_allocation(allocation_id)
        logger.info("Removed allocation %s from invoice %s", allocation_id, invoice.id)

    def list_allocations(self, invoice_id: int) -> list[InvoiceAllocation]:
        """List allocations of an invoice with their budget lines."""
        self._get_invoice(invoice_id)
        return self.db.list_allocations(invoice_id)

    def balance(self, invoice_id: int) -> Balance:
        """Compute the current balance of an invoice."""
        invoice = self._get_invoice(invoice_id)
        return compute_balance(invoice, self.db.list_allocations(invoice_id))

    def suggest_lines_for_vendor(
        self,
        project_id: int,
        ico: Optional[str],
        exclude_invoice_id: Optional[int] = None,
    ) -> list[BudgetLine]:
        """Suggest budget lines from a vendor's allocation history.

        Looks at the vendor's most recent invoices in the project and returns
        the distinct lines they were charged to, most recently used first.
        Lines of other projects are never returned.

        Args:
            project_id: Project ID
            ico: Vendor IČO, normalized here
            exclude_invoice_id: Invoice to leave out of the history (usually
                the one being allocated)

        Returns:
            Suggested budget lines, possibly empty
        """
        normalized_ico = normalize_ico(ico)
        if not normalized_ico:
            return []
        invoice_ids = self.db.list_vendor_invoice_ids(
            project_id,
            normalized_ico,
            limit=SUGGESTION_HISTORY,
            exclude_invoice_id=exclude_invoice_id,
        )
        return self.db.list_allocated_lines(invoice_ids, project_id)

    def preselect_line(self, invoice_id: int) -> Optional[AllocationDraft]:
        """Propose the top suggested line for an unallocated invoice.

        The proposed amount is always zero, so the user has to enter it.

        Returns:
            Draft allocation, or None when the invoice already has allocations
            or the vendor has no history
        """
        invoice = self._get_invoice(invoice_id)
        if invoice.project_id is None or self.db.list_allocations(invoice_id):
            return None
        suggestions = self.suggest_lines_for_vendor(
            invoice.project_id, invoice.ico, exclude_invoice_id=invoice_id
        )
        if not suggestions:
            return None
        return AllocationDraft(budget_line=suggestions[0], amount=Decimal("0"))
