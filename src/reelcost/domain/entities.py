"""Domain model entities for reelcost.

These are pure data classes representing business concepts, independent of
database schema. Services and the CLI only ever see these; ORM rows are
converted by the mappers in the database layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class InvoiceStatus(str, Enum):
    """Lifecycle status of an invoice."""

    DRAFT = "draft"
    APPROVED = "approved"
    FINAL_APPROVED = "final_approved"
    REJECTED = "rejected"


class ProjectRole(str, Enum):
    """Team role a user holds on a project."""

    LINE_PRODUCER = "lineproducer"
    PRODUCER = "producer"
    ACCOUNTANT = "accountant"


@dataclass(frozen=True)
class Project:
    """Production project domain entity."""

    id: int
    name: str
    currency: str
    company_name: Optional[str]
    ico: Optional[str]
    description: Optional[str]
    created_by: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class ProjectAssignment:
    """A user's role on a project."""

    id: int
    project_id: int
    user_id: str
    role: ProjectRole


@dataclass(frozen=True)
class Budget:
    """Budget version domain entity."""

    id: int
    project_id: int
    version_name: str
    raw_content: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class BudgetLine:
    """One ledgered account/category entry of a budget."""

    id: int
    budget_id: int
    account_number: str
    account_description: str
    category_number: str
    category_description: str
    original_amount: Decimal


@dataclass(frozen=True)
class ParsedBudgetLine:
    """Budget line read from a budget definition, not yet persisted."""

    account_number: str
    account_description: str
    category_number: str
    category_description: str
    original_amount: Decimal


@dataclass(frozen=True)
class Invoice:
    """Invoice domain entity.

    ``file_content`` is deliberately absent: source bytes are loaded on demand
    through ``InvoiceService.get_file_content``.
    """

    id: int
    project_id: Optional[int]
    internal_id: Optional[int]
    user_id: str
    ico: Optional[str]
    company_name: Optional[str]
    bank_account: Optional[str]
    iban: Optional[str]
    variable_symbol: Optional[str]
    description: Optional[str]
    amount_with_vat: Optional[Decimal]
    amount_without_vat: Optional[Decimal]
    currency: Optional[str]
    confidence: Optional[float]
    raw_text: Optional[str]
    status: InvoiceStatus
    rejection_reason: Optional[str]
    file_name: Optional[str]
    file_mime_type: Optional[str]
    has_file: bool
    created_at: datetime

    @property
    def is_locked(self) -> bool:
        return self.status == InvoiceStatus.FINAL_APPROVED


@dataclass(frozen=True)
class InvoiceAllocation:
    """Portion of an invoice's net amount charged against one budget line."""

    id: int
    invoice_id: int
    budget_line_id: int
    amount: Decimal
    created_at: datetime
    budget_line: Optional[BudgetLine] = None


@dataclass(frozen=True)
class InvoiceEdits:
    """Field values an editing actor wants saved on an invoice.

    Only fields that are not ``None`` are written, so an edit never blanks a
    value by omission. Fields named in ``cleared`` are explicitly emptied.
    """

    ico: Optional[str] = None
    company_name: Optional[str] = None
    bank_account: Optional[str] = None
    iban: Optional[str] = None
    variable_symbol: Optional[str] = None
    description: Optional[str] = None
    amount_with_vat: Optional[Decimal] = None
    amount_without_vat: Optional[Decimal] = None
    currency: Optional[str] = None
    cleared: frozenset[str] = frozenset()

    def as_values(self) -> dict:
        """Return the set and cleared fields as a column → value mapping."""
        values = {
            name: value
            for name, value in self.__dict__.items()
            if name != "cleared" and value is not None
        }
        values.update((name, None) for name in self.cleared)
        return values


@dataclass(frozen=True)
class Actor:
    """The user performing an operation, in the role they hold on the project."""

    user_id: str
    role: ProjectRole


@dataclass(frozen=True)
class Balance:
    """Reconciliation of an invoice's allocations against its net amount."""

    total_allocated: Decimal
    unallocated: Decimal
    is_balanced: bool


@dataclass(frozen=True)
class AllocationDraft:
    """A proposed allocation the user still has to confirm."""

    budget_line: BudgetLine
    amount: Decimal


@dataclass(frozen=True)
class BudgetLineReport:
    """Budget line with its derived spending figures."""

    line: BudgetLine
    spent_amount: Decimal
    remaining_amount: Decimal


@dataclass(frozen=True)
class CostReport:
    """Spending of a project's active budget."""

    project_id: int
    budget_id: Optional[int]
    lines: list[BudgetLineReport] = field(default_factory=list)
    total_budget: Decimal = Decimal("0")
    total_spent: Decimal = Decimal("0")
    total_remaining: Decimal = Decimal("0")
