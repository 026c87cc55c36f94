"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from reelcost.domain.entities import (
    Project,
    ProjectAssignment,
    ProjectRole,
    Budget,
    BudgetLine,
    ParsedBudgetLine,
    Invoice,
    InvoiceAllocation,
    InvoiceStatus,
)


class Database(ABC):
    """Abstract database interface for reelcost.

    Implementations own transactions: every mutating call either commits as
    a whole or leaves storage untouched.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Project operations
    @abstractmethod
    def create_project(
        self,
        name: str,
        currency: str = "CZK",
        company_name: Optional[str] = None,
        ico: Optional[str] = None,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> int:
        """Create a project. Returns project ID."""
        pass

    @abstractmethod
    def get_project(self, project_id: int) -> Optional[Project]:
        """Get project by ID."""
        pass

    @abstractmethod
    def list_projects(self) -> list[Project]:
        """List all projects."""
        pass

    @abstractmethod
    def delete_project(self, project_id: int) -> None:
        """Delete a project together with its budgets and assignments."""
        pass

    # Project assignment operations
    @abstractmethod
    def add_project_assignment(self, project_id: int, user_id: str, role: ProjectRole) -> int:
        """Assign a user to a project in a role. Returns assignment ID."""
        pass

    @abstractmethod
    def get_project_assignment(self, project_id: int, user_id: str) -> Optional[ProjectAssignment]:
        """Get a user's assignment on a project."""
        pass

    @abstractmethod
    def list_project_assignments(self, project_id: int) -> list[ProjectAssignment]:
        """List all assignments of a project."""
        pass

    @abstractmethod
    def remove_project_assignment(self, assignment_id: int) -> None:
        """Remove an assignment."""
        pass

    # Budget operations
    @abstractmethod
    def create_budget(self, project_id: int, version_name: str, raw_content: Optional[str]) -> int:
        """Create an inactive budget without lines. Returns budget ID."""
        pass

    @abstractmethod
    def add_budget_lines(self, budget_id: int, lines: list[ParsedBudgetLine]) -> int:
        """Insert all lines of a budget in one transaction. Returns count inserted."""
        pass

    @abstractmethod
    def get_budget(self, budget_id: int, include_content: bool = False) -> Optional[Budget]:
        """Get budget by ID, optionally loading its raw source."""
        pass

    @abstractmethod
    def list_budgets(self, project_id: int) -> list[Budget]:
        """List budgets of a project, newest first."""
        pass

    @abstractmethod
    def delete_budget(self, budget_id: int) -> None:
        """Delete a budget and its lines."""
        pass

    @abstractmethod
    def activate_budget(self, project_id: int, budget_id: int) -> None:
        """Deactivate every budget of the project and activate one, atomically."""
        pass

    @abstractmethod
    def get_active_budget(self, project_id: int) -> Optional[Budget]:
        """Get the active budget of a project, if any."""
        pass

    @abstractmethod
    def list_budget_lines(self, budget_id: int) -> list[BudgetLine]:
        """List lines of a budget in account order."""
        pass

    @abstractmethod
    def get_budget_line(self, budget_line_id: int) -> Optional[BudgetLine]:
        """Get budget line by ID."""
        pass

    @abstractmethod
    def get_budget_line_project_id(self, budget_line_id: int) -> Optional[int]:
        """Get the ID of the project owning a budget line."""
        pass

    @abstractmethod
    def get_spent_amounts(self, budget_id: int) -> dict[int, Decimal]:
        """Sum allocations per line of a budget.

        Returns a mapping of budget line ID to allocated total; lines without
        allocations are absent.
        """
        pass

    @abstractmethod
    def count_budget_allocations(self, budget_id: int) -> int:
        """Count allocations referencing any line of a budget."""
        pass

    # Invoice operations
    @abstractmethod
    def create_invoice(
        self,
        user_id: str,
        project_id: Optional[int],
        values: dict[str, Any],
        file_content: Optional[bytes] = None,
        status: InvoiceStatus = InvoiceStatus.DRAFT,
    ) -> int:
        """Create an invoice. Returns invoice ID.

        When ``project_id`` is set, the next project-scoped internal ID is
        computed and stored in the same transaction as the insert.
        """
        pass

    @abstractmethod
    def get_invoice(self, invoice_id: int) -> Optional[Invoice]:
        """Get invoice by ID, without its file content."""
        pass

    @abstractmethod
    def get_invoice_file_content(self, invoice_id: int) -> Optional[bytes]:
        """Load the stored source document of an invoice."""
        pass

    @abstractmethod
    def list_invoices(
        self,
        project_id: Optional[int] = None,
        status: Optional[InvoiceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        unassigned: bool = False,
    ) -> list[Invoice]:
        """List invoices with optional filters.

        Args:
            project_id: Optional project filter
            status: Optional status filter
            start_date: Optional earliest creation date
            end_date: Optional latest creation date
            unassigned: If True, only invoices in the global inbox (no project)
        """
        pass

    @abstractmethod
    def update_invoice(self, invoice_id: int, values: dict[str, Any]) -> None:
        """Write field values (status included) in one transaction."""
        pass

    @abstractmethod
    def assign_invoice_to_project(self, invoice_id: int, project_id: int) -> int:
        """Move an inbox invoice into a project. Returns its new internal ID."""
        pass

    @abstractmethod
    def delete_invoice(self, invoice_id: int) -> None:
        """Delete an invoice and its allocations."""
        pass

    @abstractmethod
    def invoice_matches(
        self,
        project_id: Optional[int],
        ico: str,
        variable_symbol: Optional[str] = None,
        amount_with_vat: Optional[Decimal] = None,
    ) -> bool:
        """Check for an invoice of the vendor in the project matching VS or amount.

        Exactly one of ``variable_symbol`` and ``amount_with_vat`` is compared;
        the variable symbol wins when both are given.
        """
        pass

    @abstractmethod
    def list_vendor_invoice_ids(
        self,
        project_id: int,
        ico: str,
        limit: int,
        exclude_invoice_id: Optional[int] = None,
    ) -> list[int]:
        """List IDs of a vendor's most recent invoices in a project, newest first."""
        pass

    # Allocation operations
    @abstractmethod
    def create_allocation(self, invoice_id: int, budget_line_id: int, amount: Decimal) -> int:
        """Create an allocation. Returns allocation ID."""
        pass

    @abstractmethod
    def get_allocation(self, allocation_id: int) -> Optional[InvoiceAllocation]:
        """Get allocation by ID."""
        pass

    @abstractmethod
    def delete_allocation(self, allocation_id: int) -> None:
        """Delete an allocation."""
        pass

    @abstractmethod
    def list_allocations(self, invoice_id: int) -> list[InvoiceAllocation]:
        """List allocations of an invoice joined with their budget lines."""
        pass

    @abstractmethod
    def list_line_allocations(self, budget_line_id: int) -> list[tuple[InvoiceAllocation, Invoice]]:
        """List allocations charged to a budget line with their invoices."""
        pass

    @abstractmethod
    def list_allocated_lines(self, invoice_ids: list[int], project_id: int) -> list[BudgetLine]:
        """List distinct budget lines allocated by the given invoices.

        Lines are ordered by the position of the first invoice (in
        ``invoice_ids`` order) that used them, and restricted to budgets owned
        by ``project_id``.
        """
        pass
