"""Invoice domain service."""

import dataclasses
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from reelcost.database.base import Database
from reelcost.domain.allocation import TOLERANCE, compute_balance
from reelcost.domain.duplicates import is_duplicate
from reelcost.domain.entities import Actor, Invoice, InvoiceEdits, InvoiceStatus
from reelcost.domain.errors import (
    DuplicateError,
    InvoiceLockedError,
    NotFoundError,
    ValidationError,
    duplicate_invoice,
    invoice_locked,
    invoice_not_found,
    project_not_found,
    unbalanced_invoice,
)
from reelcost.domain.lifecycle import SKIP_BALANCE_CHECK, check_transition, has_capability
from reelcost.integrations.extraction import ExtractionResult
from reelcost.utils.normalize import normalize_ico, normalize_variable_symbol

logger = logging.getLogger(__name__)


def _normalized(values: dict[str, Any]) -> dict[str, Any]:
    """Apply identifier and currency normalization to field values."""
    values = dict(values)
    if "ico" in values:
        values["ico"] = normalize_ico(values["ico"]) or None
    if "variable_symbol" in values:
        values["variable_symbol"] = normalize_variable_symbol(values["variable_symbol"]) or None
    if values.get("currency"):
        values["currency"] = values["currency"].strip().upper()
    for name in ("amount_with_vat", "amount_without_vat"):
        if values.get(name) is not None:
            values[name] = Decimal(values[name])
    return values


EDITABLE_FIELDS = frozenset(
    field.name for field in dataclasses.fields(InvoiceEdits) if field.name != "cleared"
)


def _edit_values(edits: Optional[InvoiceEdits]) -> dict[str, Any]:
    """Validate and normalize an edit set into column values."""
    if edits is None:
        return {}
    unknown = set(edits.cleared) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot clear unknown field(s): {', '.join(sorted(unknown))}")
    both = [name for name in edits.cleared if getattr(edits, name) is not None]
    if both:
        raise ValidationError(f"Field(s) both set and cleared: {', '.join(sorted(both))}")
    return _normalized(edits.as_values())


class InvoiceService:
    """Service for invoices and their approval lifecycle."""

    def __init__(self, db: Database):
        """Initialize invoice service.

        Args:
            db: Database instance
        """
        self.db = db

    def _get_invoice(self, invoice_id: int) -> Invoice:
        invoice = self.db.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(invoice_not_found(invoice_id))
        return invoice

    def create_invoice(
        self,
        extraction: ExtractionResult,
        user_id: str,
        project_id: Optional[int] = None,
        file_content: Optional[bytes] = None,
        file_name: Optional[str] = None,
        file_mime_type: Optional[str] = None,
    ) -> Invoice:
        """Record extracted fields as a new draft invoice.

        Invoices created in a project get the project's next internal ID.
        Without a project the invoice lands in the global inbox.

        Args:
            extraction: Extracted (or manually entered) fields
            user_id: Submitting user
            project_id: Optional project ID
            file_content: Source document bytes
            file_name: Source document name
            file_mime_type: Source document MIME type

        Returns:
            The created invoice

        Raises:
            ValidationError: If user ID is empty
            NotFoundError: If project doesn't exist
            DuplicateError: If the project already has a matching invoice
        """
        if not user_id or not user_id.strip():
            raise ValidationError("User ID cannot be empty")
        if project_id is not None and self.db.get_project(project_id) is None:
            raise NotFoundError(project_not_found(project_id))

        values = _normalized(
            {
                "ico": extraction.ico,
                "company_name": extraction.company_name,
                "bank_account": extraction.bank_account,
                "iban": extraction.iban,
                "variable_symbol": extraction.variable_symbol,
                "description": extraction.description,
                "amount_with_vat": extraction.amount_with_vat,
                "amount_without_vat": extraction.amount_without_vat,
                "currency": extraction.currency,
                "confidence": extraction.confidence,
                "raw_text": extraction.raw_text,
                "file_name": file_name,
                "file_mime_type": file_mime_type,
            }
        )

        if is_duplicate(
            self.db,
            project_id,
            values["ico"],
            values["variable_symbol"],
            values["amount_with_vat"],
        ):
            raise DuplicateError(duplicate_invoice(values["ico"], values["variable_symbol"]))

        invoice_id = self.db.create_invoice(
            user_id=user_id,
            project_id=project_id,
            values=values,
            file_content=file_content,
        )
        invoice = self._get_invoice(invoice_id)
        logger.info(
            "Created draft invoice %s (project %s, internal #%s)",
            invoice.id,
            project_id,
            invoice.internal_id,
        )
        return invoice

    def get_invoice(self, invoice_id: int) -> Optional[Invoice]:
        """Get invoice by ID."""
        return self.db.get_invoice(invoice_id)

    def get_file_content(self, invoice_id: int) -> Optional[bytes]:
        """Load the source document of an invoice."""
        return self.db.get_invoice_file_content(invoice_id)

    def list_invoices(
        self,
        project_id: Optional[int] = None,
        status: Optional[InvoiceStatus] = None,
        since: Optional[date] = None,
        until: Optional[date] = None,
        unassigned: bool = False,
    ) -> list[Invoice]:
        """List invoices with optional filters.

        Args:
            project_id: Optional project filter
            status: Optional status filter
            since: Optional earliest creation date (inclusive)
            until: Optional latest creation date (inclusive)
            unassigned: If True, list the global inbox instead

        Returns:
            Invoices, newest first
        """
        if since is not None and until is not None and since > until:
            raise ValidationError("Start date must be on or before end date")
        return self.db.list_invoices(
            project_id=project_id,
            status=status,
            start_date=since,
            end_date=until,
            unassigned=unassigned,
        )

    def next_draft(self, project_id: int, after_invoice_id: Optional[int] = None) -> Optional[Invoice]:
        """Pick the draft to review after the given one.

        The position is taken from the full project list, so the reviewed
        invoice need not be a draft any more.

        Returns:
            The next draft in list order, wrapping around, or None when no
            other draft is left
        """
        invoices = self.db.list_invoices(project_id=project_id)
        ids = [invoice.id for invoice in invoices]
        if after_invoice_id in ids:
            start = ids.index(after_invoice_id) + 1
            invoices = invoices[start:] + invoices[: start - 1]
        drafts = [invoice for invoice in invoices if invoice.status == InvoiceStatus.DRAFT]
        return drafts[0] if drafts else None

    def delete_invoice(self, invoice_id: int) -> None:
        """Delete an invoice and its allocations.

        Raises:
            NotFoundError: If invoice doesn't exist
            InvoiceLockedError: If the invoice is final approved
        """
        invoice = self._get_invoice(invoice_id)
        if invoice.is_locked:
            raise InvoiceLockedError(invoice_locked(invoice_id))
        self.db.delete_invoice(invoice_id)
        logger.info("Deleted invoice %s", invoice_id)

    def update_fields(self, invoice_id: int, edits: InvoiceEdits) -> Invoice:
        """Save field edits without changing status.

        Raises:
            NotFoundError: If invoice doesn't exist
            InvoiceLockedError: If the invoice is final approved
        """
        invoice = self._get_invoice(invoice_id)
        if invoice.is_locked:
            raise InvoiceLockedError(invoice_locked(invoice_id))
        values = _edit_values(edits)
        if not values:
            return invoice
        self.db.update_invoice(invoice_id, values)
        return self._get_invoice(invoice_id)

    def assign_to_project(self, invoice_id: int, project_id: int) -> Invoice:
        """Move an inbox invoice into a project.

        The invoice receives the project's next internal ID.

        Raises:
            NotFoundError: If invoice or project doesn't exist
            ValidationError: If the invoice already belongs to a project
        """
        invoice = self._get_invoice(invoice_id)
        if invoice.project_id is not None:
            raise ValidationError(
                f"Invoice {invoice_id} already belongs to project {invoice.project_id}"
            )
        if self.db.get_project(project_id) is None:
            raise NotFoundError(project_not_found(project_id))
        internal_id = self.db.assign_invoice_to_project(invoice_id, project_id)
        logger.info(
            "Assigned invoice %s to project %s as #%s", invoice_id, project_id, internal_id
        )
        return self._get_invoice(invoice_id)

    def _transition(
        self,
        invoice: Invoice,
        target: InvoiceStatus,
        values: dict[str, Any],
    ) -> Invoice:
        """Persist edits together with the new status in one write."""
        self.db.update_invoice(invoice.id, {**values, "status": target})
        logger.info(
            "Invoice %s moved from %s to %s", invoice.id, invoice.status.value, target.value
        )
        return self._get_invoice(invoice.id)

    def submit(self, invoice_id: int, actor: Actor, edits: Optional[InvoiceEdits] = None) -> Invoice:
        """Approve a draft invoice.

        The invoice must be balanced against its (possibly edited) net
        amount, unless the actor's role may skip that check.

        Raises:
            InvalidTransitionError: If the invoice is not a draft
            PermissionDeniedError: If the actor's role may not approve
            ValidationError: If the invoice has no project or is unbalanced
        """
        invoice = self._get_invoice(invoice_id)
        check_transition(invoice, InvoiceStatus.APPROVED, actor)
        if invoice.project_id is None:
            raise ValidationError(
                f"Invoice {invoice_id} must be assigned to a project before approval"
            )

        values = _edit_values(edits)
        if not has_capability(actor.role, SKIP_BALANCE_CHECK):
            edited = dataclasses.replace(
                invoice,
                amount_without_vat=values.get("amount_without_vat", invoice.amount_without_vat),
            )
            balance = compute_balance(edited, self.db.list_allocations(invoice_id))
            if not balance.is_balanced:
                raise ValidationError(
                    unbalanced_invoice(invoice_id, balance.unallocated, TOLERANCE)
                )

        values["rejection_reason"] = None
        return self._transition(invoice, InvoiceStatus.APPROVED, values)

    def final_approve(
        self, invoice_id: int, actor: Actor, edits: Optional[InvoiceEdits] = None
    ) -> Invoice:
        """Give an approved invoice its final approval, locking it."""
        invoice = self._get_invoice(invoice_id)
        check_transition(invoice, InvoiceStatus.FINAL_APPROVED, actor)
        values = _edit_values(edits)
        return self._transition(invoice, InvoiceStatus.FINAL_APPROVED, values)

    def reject(
        self,
        invoice_id: int,
        actor: Actor,
        reason: str,
        edits: Optional[InvoiceEdits] = None,
    ) -> Invoice:
        """Send an approved invoice back with a reason.

        Raises:
            ValidationError: If the reason is empty or whitespace
        """
        invoice = self._get_invoice(invoice_id)
        check_transition(invoice, InvoiceStatus.REJECTED, actor)
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("Rejection reason cannot be empty")
        values = _edit_values(edits)
        values["rejection_reason"] = reason
        return self._transition(invoice, InvoiceStatus.REJECTED, values)

    def resubmit(
        self, invoice_id: int, actor: Actor, edits: Optional[InvoiceEdits] = None
    ) -> Invoice:
        """Return a rejected invoice to draft.

        Only the original submitter may do this. The rejection reason stays
        visible until the invoice is approved again.
        """
        invoice = self._get_invoice(invoice_id)
        check_transition(invoice, InvoiceStatus.DRAFT, actor)
        values = _edit_values(edits)
        return self._transition(invoice, InvoiceStatus.DRAFT, values)
