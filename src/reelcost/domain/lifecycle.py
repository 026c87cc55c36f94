"""Invoice status transitions and role capabilities.

The tables here are the only place that decides who may move an invoice
between statuses. Services call ``check_transition`` and never compare role
strings themselves.
"""

from reelcost.domain.entities import Actor, Invoice, InvoiceStatus, ProjectRole
from reelcost.domain.errors import (
    InvalidTransitionError,
    InvoiceLockedError,
    PermissionDeniedError,
    invoice_locked,
)

ALLOWED_TRANSITIONS = {
    InvoiceStatus.DRAFT: [InvoiceStatus.APPROVED],
    InvoiceStatus.APPROVED: [InvoiceStatus.FINAL_APPROVED, InvoiceStatus.REJECTED],
    InvoiceStatus.REJECTED: [InvoiceStatus.DRAFT],
    InvoiceStatus.FINAL_APPROVED: [],
}

# Roles allowed per transition. Transitions missing here are owner-only.
TRANSITION_ROLES = {
    (InvoiceStatus.DRAFT, InvoiceStatus.APPROVED): {
        ProjectRole.LINE_PRODUCER,
        ProjectRole.ACCOUNTANT,
        ProjectRole.PRODUCER,
    },
    (InvoiceStatus.APPROVED, InvoiceStatus.FINAL_APPROVED): {ProjectRole.PRODUCER},
    (InvoiceStatus.APPROVED, InvoiceStatus.REJECTED): {ProjectRole.PRODUCER},
}

SKIP_BALANCE_CHECK = "skip_balance_check"

ROLE_CAPABILITIES = {
    ProjectRole.LINE_PRODUCER: frozenset(),
    ProjectRole.ACCOUNTANT: frozenset(),
    ProjectRole.PRODUCER: frozenset({SKIP_BALANCE_CHECK}),
}


def has_capability(role: ProjectRole, capability: str) -> bool:
    """Return True if the role carries the named capability."""
    return capability in ROLE_CAPABILITIES.get(ProjectRole(role), frozenset())


def check_transition(invoice: Invoice, target: InvoiceStatus, actor: Actor) -> None:
    """Verify that ``actor`` may move ``invoice`` to ``target``.

    Raises:
        InvoiceLockedError: If the invoice is final approved
        InvalidTransitionError: If the status change is not in the table
        PermissionDeniedError: If the actor's role or ownership does not allow it
    """
    current = invoice.status
    if invoice.is_locked:
        raise InvoiceLockedError(invoice_locked(invoice.id))
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Invoice {invoice.id} cannot move from {current.value} to {target.value}"
        )

    roles = TRANSITION_ROLES.get((current, target))
    if roles is None:
        if actor.user_id != invoice.user_id:
            raise PermissionDeniedError(
                f"Only the original submitter can move invoice {invoice.id} "
                f"from {current.value} to {target.value}"
            )
        return

    if ProjectRole(actor.role) not in roles:
        allowed = ", ".join(sorted(role.value for role in roles))
        raise PermissionDeniedError(
            f"Role '{ProjectRole(actor.role).value}' cannot move invoice {invoice.id} "
            f"from {current.value} to {target.value} (allowed: {allowed})"
        )
