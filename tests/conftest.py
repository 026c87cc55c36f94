"""Shared pytest fixtures for reelcost tests."""

import tempfile
import os
from decimal import Decimal
from pathlib import Path
import pytest

from reelcost.database.factories import create_sqlite_database
from reelcost.domain.allocation import AllocationService
from reelcost.domain.budget import BudgetService
from reelcost.domain.entities import Actor, ProjectRole
from reelcost.domain.invoice import InvoiceService
from reelcost.domain.project import ProjectService
from reelcost.integrations.extraction import ExtractionResult


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def project_service(temp_db):
    """Create a ProjectService with a temporary database."""
    return ProjectService(temp_db)


@pytest.fixture
def budget_service(temp_db):
    """Create a BudgetService with a temporary database."""
    return BudgetService(temp_db)


@pytest.fixture
def allocation_service(temp_db):
    """Create an AllocationService with a temporary database."""
    return AllocationService(temp_db)


@pytest.fixture
def invoice_service(temp_db):
    """Create an InvoiceService with a temporary database."""
    return InvoiceService(temp_db)


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def budget_xml(fixtures_dir):
    """Return the sample budget definition."""
    return (fixtures_dir / "budget_v1.xml").read_text(encoding="utf-8")


@pytest.fixture
def sample_project(project_service):
    """Create a project with a producer, a line producer and an accountant."""
    project_id = project_service.create_project(
        name="Summer Feature", company_name="Reel Pictures s.r.o.", created_by="producer1"
    )
    project_service.assign_user(project_id, "lp1", ProjectRole.LINE_PRODUCER)
    project_service.assign_user(project_id, "acc1", ProjectRole.ACCOUNTANT)
    return project_service.get_project(project_id)


@pytest.fixture
def sample_budget(budget_service, sample_project, budget_xml):
    """Upload and activate the sample budget for the sample project."""
    budget_id = budget_service.upload_budget(
        sample_project.id, "Shooting budget v1", budget_xml, activate=True
    )
    return budget_service.get_budget(budget_id)


@pytest.fixture
def budget_lines(budget_service, sample_project, sample_budget):
    """Return active budget lines keyed by account number."""
    lines = budget_service.get_active_budget_lines(sample_project.id)
    return {line.account_number: line for line in lines}


@pytest.fixture
def make_invoice(invoice_service, sample_project):
    """Return a factory creating draft invoices in the sample project."""

    def _make(
        ico="12345678",
        variable_symbol=None,
        amount_with_vat=None,
        amount_without_vat="1000",
        user_id="lp1",
        project_id=None,
        **fields,
    ):
        extraction = ExtractionResult(
            ico=ico,
            variable_symbol=variable_symbol,
            amount_with_vat=Decimal(amount_with_vat) if amount_with_vat is not None else None,
            amount_without_vat=(
                Decimal(amount_without_vat) if amount_without_vat is not None else None
            ),
            **fields,
        )
        return invoice_service.create_invoice(
            extraction,
            user_id=user_id,
            project_id=project_id if project_id is not None else sample_project.id,
        )

    return _make


@pytest.fixture
def line_producer():
    return Actor(user_id="lp1", role=ProjectRole.LINE_PRODUCER)


@pytest.fixture
def accountant():
    return Actor(user_id="acc1", role=ProjectRole.ACCOUNTANT)


@pytest.fixture
def producer():
    return Actor(user_id="producer1", role=ProjectRole.PRODUCER)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
