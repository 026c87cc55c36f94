"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class InvalidTransitionError(ValidationError):
    """Requested status change is not defined for the invoice's current status."""


class InvoiceLockedError(ValidationError):
    """Invoice is final-approved and no longer accepts changes."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class ParseError(DomainError):
    """Uploaded content could not be turned into domain records."""


class DuplicateError(DomainError):
    """Candidate invoice matches one that is already recorded."""


class ExternalServiceError(DomainError):
    """A collaborator (extraction, stamping, storage) failed."""


class PermissionDeniedError(DomainError):
    """Actor lacks the role or ownership the operation requires."""


def project_not_found(project_id: int) -> str:
    """Return message for missing project."""
    return f"Project {project_id} not found"


def budget_not_found(budget_id: int) -> str:
    """Return message for missing budget."""
    return f"Budget {budget_id} not found"


def budget_line_not_found(budget_line_id: int) -> str:
    """Return message for missing budget line."""
    return f"Budget line {budget_line_id} not found"


def invoice_not_found(invoice_id: int) -> str:
    """Return message for missing invoice."""
    return f"Invoice {invoice_id} not found"


def allocation_not_found(allocation_id: int) -> str:
    """Return message for missing allocation."""
    return f"Allocation {allocation_id} not found"


def invoice_locked(invoice_id: int) -> str:
    """Return message for edits attempted on a final-approved invoice."""
    return f"Invoice {invoice_id} is final approved and cannot be changed"


def unbalanced_invoice(invoice_id: int, unallocated: Decimal, tolerance: Decimal) -> str:
    """Return message naming the exact allocation shortfall or excess."""
    if unallocated > 0:
        detail = f"{unallocated} is still unallocated"
    else:
        detail = f"allocations exceed the net amount by {-unallocated}"
    return (
        f"Invoice {invoice_id} is not balanced: {detail} "
        f"(tolerance {tolerance})"
    )


def duplicate_invoice(ico: str, variable_symbol: str | None) -> str:
    """Return message for a duplicate invoice candidate."""
    if variable_symbol:
        return f"Duplicate invoice: vendor {ico} with variable symbol {variable_symbol} already exists"
    return f"Duplicate invoice: vendor {ico} with the same amount already exists"


def budget_delete_blocked(budget_id: int, allocation_count: int) -> str:
    """Return message when a budget's lines still carry allocations."""
    return (
        f"Cannot delete budget {budget_id}: its lines carry {allocation_count} "
        f"allocation{'s' if allocation_count != 1 else ''}. "
        "Please remove them first."
    )
