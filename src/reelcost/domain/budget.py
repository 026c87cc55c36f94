"""Budget domain service."""

import logging
from decimal import Decimal
from typing import Optional

from reelcost.database.base import Database
from reelcost.domain.entities import (
    Budget,
    BudgetLine,
    BudgetLineReport,
    CostReport,
    Invoice,
    InvoiceAllocation,
)
from reelcost.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    budget_delete_blocked,
    budget_line_not_found,
    budget_not_found,
    project_not_found,
)
from reelcost.utils.budget_parser import parse_budget_definition

logger = logging.getLogger(__name__)


class BudgetService:
    """Service for managing budget versions and their lines."""

    def __init__(self, db: Database):
        """Initialize budget service.

        Args:
            db: Database instance
        """
        self.db = db

    def upload_budget(
        self,
        project_id: int,
        version_name: str,
        raw_content: str,
        activate: bool = False,
    ) -> int:
        """Parse a budget definition and store it as a new version.

        The definition is fully parsed before anything is written. If the
        lines cannot be stored, the new budget row is removed again.

        Args:
            project_id: Project ID
            version_name: Label of the budget version
            raw_content: Budget definition (XML export)
            activate: If True, make the new version the active one

        Returns:
            Budget ID

        Raises:
            ParseError: If the definition is invalid or has no valid lines
            NotFoundError: If project doesn't exist
            ValidationError: If version name is empty
        """
        if not version_name or not version_name.strip():
            raise ValidationError("Budget version name cannot be empty")
        if self.db.get_project(project_id) is None:
            raise NotFoundError(project_not_found(project_id))

        lines = parse_budget_definition(raw_content)

        budget_id = self.db.create_budget(project_id, version_name.strip(), raw_content)
        try:
            self.db.add_budget_lines(budget_id, lines)
        except Exception:
            logger.warning("Storing lines of budget %s failed, removing it", budget_id)
            self.db.delete_budget(budget_id)
            raise

        logger.info(
            "Uploaded budget %s '%s' for project %s with %d lines",
            budget_id,
            version_name,
            project_id,
            len(lines),
        )
        if activate:
            self.activate_budget(project_id, budget_id)
        return budget_id

    def activate_budget(self, project_id: int, budget_id: int) -> None:
        """Make a budget the project's only active budget.

        Raises:
            NotFoundError: If the budget doesn't belong to the project
        """
        self.db.activate_budget(project_id, budget_id)
        logger.info("Activated budget %s for project %s", budget_id, project_id)

    def get_budget(self, budget_id: int, include_content: bool = False) -> Optional[Budget]:
        """Get budget by ID.

        Args:
            budget_id: Budget ID
            include_content: If True, load the raw definition as well

        Returns:
            Budget or None if not found
        """
        return self.db.get_budget(budget_id, include_content=include_content)

    def list_budgets(self, project_id: int) -> list[Budget]:
        """List budget versions of a project, newest first."""
        return self.db.list_budgets(project_id)

    def get_active_budget(self, project_id: int) -> Optional[Budget]:
        """Get the active budget of a project."""
        return self.db.get_active_budget(project_id)

    def get_active_budget_lines(self, project_id: int) -> list[BudgetLine]:
        """List lines of the project's active budget, empty when none is active."""
        budget = self.db.get_active_budget(project_id)
        if budget is None:
            return []
        return self.db.list_budget_lines(budget.id)

    def list_budget_lines(self, budget_id: int) -> list[BudgetLine]:
        """List lines of a budget."""
        if self.db.get_budget(budget_id) is None:
            raise NotFoundError(budget_not_found(budget_id))
        return self.db.list_budget_lines(budget_id)

    def delete_budget(self, budget_id: int) -> None:
        """Delete a budget version.

        Raises:
            NotFoundError: If budget doesn't exist
            DependencyError: If any of its lines carry allocations
        """
        if self.db.get_budget(budget_id) is None:
            raise NotFoundError(budget_not_found(budget_id))
        allocation_count = self.db.count_budget_allocations(budget_id)
        if allocation_count:
            raise DependencyError(budget_delete_blocked(budget_id, allocation_count))
        self.db.delete_budget(budget_id)
        logger.info("Deleted budget %s", budget_id)

    def cost_report(self, project_id: int, text_filter: Optional[str] = None) -> CostReport:
        """Report spending per line of the project's active budget.

        Spent amounts count allocations of invoices in any status. Lines
        allocated beyond their original amount get a negative remainder.

        Args:
            project_id: Project ID
            text_filter: Optional case-insensitive text matched against
                account number and descriptions

        Returns:
            CostReport, empty when no budget is active
        """
        if self.db.get_project(project_id) is None:
            raise NotFoundError(project_not_found(project_id))
        budget = self.db.get_active_budget(project_id)
        if budget is None:
            return CostReport(project_id=project_id, budget_id=None)

        spent = self.db.get_spent_amounts(budget.id)
        needle = text_filter.strip().lower() if text_filter else ""

        reports = []
        for line in self.db.list_budget_lines(budget.id):
            if needle and not _line_matches(line, needle):
                continue
            spent_amount = spent.get(line.id, Decimal("0"))
            reports.append(
                BudgetLineReport(
                    line=line,
                    spent_amount=spent_amount,
                    remaining_amount=line.original_amount - spent_amount,
                )
            )

        total_budget = sum((r.line.original_amount for r in reports), Decimal("0"))
        total_spent = sum((r.spent_amount for r in reports), Decimal("0"))
        return CostReport(
            project_id=project_id,
            budget_id=budget.id,
            lines=reports,
            total_budget=total_budget,
            total_spent=total_spent,
            total_remaining=total_budget - total_spent,
        )

    def line_allocations(self, budget_line_id: int) -> list[tuple[InvoiceAllocation, Invoice]]:
        """List the allocations charged to one budget line with their invoices."""
        if self.db.get_budget_line(budget_line_id) is None:
            raise NotFoundError(budget_line_not_found(budget_line_id))
        return self.db.list_line_allocations(budget_line_id)


def _line_matches(line: BudgetLine, needle: str) -> bool:
    haystack = " ".join(
        [
            line.account_number,
            line.account_description,
            line.category_number,
            line.category_description,
        ]
    ).lower()
    return needle in haystack
