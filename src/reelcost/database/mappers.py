"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so schema details (deferred
columns, string-typed enums) never leak into the domain.
"""

from typing import Optional

from reelcost.domain import entities as domain
from reelcost.database.models import (
    Project as ORMProject,
    ProjectAssignment as ORMProjectAssignment,
    Budget as ORMBudget,
    BudgetLine as ORMBudgetLine,
    Invoice as ORMInvoice,
    InvoiceAllocation as ORMInvoiceAllocation,
)


def project_to_domain(orm_project: ORMProject) -> domain.Project:
    """Convert SQLAlchemy Project model to domain Project entity."""
    return domain.Project(
        id=orm_project.id,
        name=orm_project.name,
        currency=orm_project.currency,
        company_name=orm_project.company_name,
        ico=orm_project.ico,
        description=orm_project.description,
        created_by=orm_project.created_by,
        created_at=orm_project.created_at,
    )


def assignment_to_domain(orm_assignment: ORMProjectAssignment) -> domain.ProjectAssignment:
    """Convert SQLAlchemy ProjectAssignment model to domain entity."""
    return domain.ProjectAssignment(
        id=orm_assignment.id,
        project_id=orm_assignment.project_id,
        user_id=orm_assignment.user_id,
        role=domain.ProjectRole(orm_assignment.role),
    )


def budget_to_domain(orm_budget: ORMBudget, include_content: bool = False) -> domain.Budget:
    """Convert SQLAlchemy Budget model to domain Budget entity.

    The raw source is only read when asked for, since it is a deferred column.
    """
    return domain.Budget(
        id=orm_budget.id,
        project_id=orm_budget.project_id,
        version_name=orm_budget.version_name,
        raw_content=orm_budget.raw_content if include_content else None,
        is_active=orm_budget.is_active,
        created_at=orm_budget.created_at,
    )


def budget_line_to_domain(orm_line: ORMBudgetLine) -> domain.BudgetLine:
    """Convert SQLAlchemy BudgetLine model to domain BudgetLine entity."""
    return domain.BudgetLine(
        id=orm_line.id,
        budget_id=orm_line.budget_id,
        account_number=orm_line.account_number,
        account_description=orm_line.account_description,
        category_number=orm_line.category_number,
        category_description=orm_line.category_description,
        original_amount=orm_line.original_amount,
    )


def invoice_to_domain(orm_invoice: ORMInvoice) -> domain.Invoice:
    """Convert SQLAlchemy Invoice model to domain Invoice entity."""
    return domain.Invoice(
        id=orm_invoice.id,
        project_id=orm_invoice.project_id,
        internal_id=orm_invoice.internal_id,
        user_id=orm_invoice.user_id,
        ico=orm_invoice.ico,
        company_name=orm_invoice.company_name,
        bank_account=orm_invoice.bank_account,
        iban=orm_invoice.iban,
        variable_symbol=orm_invoice.variable_symbol,
        description=orm_invoice.description,
        amount_with_vat=orm_invoice.amount_with_vat,
        amount_without_vat=orm_invoice.amount_without_vat,
        currency=orm_invoice.currency,
        confidence=orm_invoice.confidence,
        raw_text=orm_invoice.raw_text,
        status=domain.InvoiceStatus(orm_invoice.status),
        rejection_reason=orm_invoice.rejection_reason,
        file_name=orm_invoice.file_name,
        file_mime_type=orm_invoice.file_mime_type,
        has_file=orm_invoice.has_file,
        created_at=orm_invoice.created_at,
    )


def allocation_to_domain(
    orm_allocation: ORMInvoiceAllocation, orm_line: Optional[ORMBudgetLine] = None
) -> domain.InvoiceAllocation:
    """Convert SQLAlchemy InvoiceAllocation model to domain entity.

    Args:
        orm_allocation: Allocation row
        orm_line: Joined budget line row, when the query fetched one
    """
    return domain.InvoiceAllocation(
        id=orm_allocation.id,
        invoice_id=orm_allocation.invoice_id,
        budget_line_id=orm_allocation.budget_line_id,
        amount=orm_allocation.amount,
        created_at=orm_allocation.created_at,
        budget_line=budget_line_to_domain(orm_line) if orm_line is not None else None,
    )
