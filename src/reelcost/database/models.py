"""SQLAlchemy models for reelcost database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Float,
    ForeignKey,
    DateTime,
    Numeric,
    Boolean,
    LargeBinary,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, deferred, relationship, sessionmaker, Session

Base = declarative_base()

MONEY = Numeric(14, 2)


class Project(Base):
    """Production project model."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    currency = Column(String(3), default="CZK", nullable=False)
    company_name = Column(String, nullable=True)
    ico = Column(String, nullable=True)
    description = Column(String, nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    budgets = relationship("Budget", back_populates="project", cascade="all, delete-orphan")
    assignments = relationship(
        "ProjectAssignment", back_populates="project", cascade="all, delete-orphan"
    )
    invoices = relationship("Invoice", back_populates="project")


class ProjectAssignment(Base):
    """Team role of a user on a project."""

    __tablename__ = "project_assignments"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    user_id = Column(String, nullable=False)
    role = Column(String, nullable=False)

    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_user"),)

    # Relationships
    project = relationship("Project", back_populates="assignments")


class Budget(Base):
    """Budget version model."""

    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    version_name = Column(String, nullable=False)
    raw_content = deferred(Column(Text, nullable=True))
    is_active = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    project = relationship("Project", back_populates="budgets")
    lines = relationship("BudgetLine", back_populates="budget", cascade="all, delete-orphan")


class BudgetLine(Base):
    """Budget line model."""

    __tablename__ = "budget_lines"

    id = Column(Integer, primary_key=True)
    budget_id = Column(Integer, ForeignKey("budgets.id"), nullable=False)
    account_number = Column(String, nullable=False)
    account_description = Column(String, nullable=False, default="")
    category_number = Column(String, nullable=False, default="")
    category_description = Column(String, nullable=False, default="")
    original_amount = Column(MONEY, nullable=False, default=0)

    # Relationships
    budget = relationship("Budget", back_populates="lines")
    allocations = relationship("InvoiceAllocation", back_populates="budget_line")


class Invoice(Base):
    """Invoice model.

    ``file_content`` is deferred so list queries never pull document bytes.
    """

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    internal_id = Column(Integer, nullable=True)
    user_id = Column(String, nullable=False)
    ico = Column(String, nullable=True)
    company_name = Column(String, nullable=True)
    bank_account = Column(String, nullable=True)
    iban = Column(String, nullable=True)
    variable_symbol = Column(String, nullable=True)
    description = Column(String, nullable=True)
    amount_with_vat = Column(MONEY, nullable=True)
    amount_without_vat = Column(MONEY, nullable=True)
    currency = Column(String(3), nullable=True)
    confidence = Column(Float, nullable=True)
    raw_text = Column(Text, nullable=True)
    status = Column(String, default="draft", nullable=False)
    rejection_reason = Column(String, nullable=True)
    file_name = Column(String, nullable=True)
    file_mime_type = Column(String, nullable=True)
    file_content = deferred(Column(LargeBinary, nullable=True))
    has_file = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Unique constraint on project_id + internal_id
    __table_args__ = (
        UniqueConstraint("project_id", "internal_id", name="uq_project_internal_id"),
    )

    # Relationships
    project = relationship("Project", back_populates="invoices")
    allocations = relationship(
        "InvoiceAllocation", back_populates="invoice", cascade="all, delete-orphan"
    )


class InvoiceAllocation(Base):
    """Allocation of part of an invoice to a budget line."""

    __tablename__ = "invoice_allocations"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False)
    budget_line_id = Column(Integer, ForeignKey("budget_lines.id"), nullable=False)
    amount = Column(MONEY, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    invoice = relationship("Invoice", back_populates="allocations")
    budget_line = relationship("BudgetLine", back_populates="allocations")


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Make SQLite enforce foreign keys like other backends do."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
