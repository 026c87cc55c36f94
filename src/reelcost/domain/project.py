"""Project domain service."""

import logging
from typing import Optional

from reelcost.database.base import Database
from reelcost.domain.entities import Actor, Project, ProjectAssignment, ProjectRole
from reelcost.domain.errors import (
    DependencyError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    project_not_found,
)
from reelcost.utils.normalize import normalize_ico

logger = logging.getLogger(__name__)


class ProjectService:
    """Service for managing projects and their team roles."""

    def __init__(self, db: Database):
        """Initialize project service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_project(
        self,
        name: str,
        currency: str = "CZK",
        company_name: Optional[str] = None,
        ico: Optional[str] = None,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> int:
        """Create a project.

        The creator, when given, is assigned the producer role.

        Returns:
            Project ID

        Raises:
            ValidationError: If name or currency is invalid
        """
        if not name or not name.strip():
            raise ValidationError("Project name cannot be empty")
        currency = (currency or "").strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            raise ValidationError(f"Invalid currency code: '{currency}'")

        project_id = self.db.create_project(
            name=name.strip(),
            currency=currency,
            company_name=company_name,
            ico=normalize_ico(ico) or None,
            description=description,
            created_by=created_by,
        )
        if created_by:
            self.db.add_project_assignment(project_id, created_by, ProjectRole.PRODUCER)
        logger.info("Created project %s '%s'", project_id, name)
        return project_id

    def get_project(self, project_id: int) -> Optional[Project]:
        """Get project by ID."""
        return self.db.get_project(project_id)

    def list_projects(self) -> list[Project]:
        """List all projects."""
        return self.db.list_projects()

    def delete_project(self, project_id: int) -> None:
        """Delete a project with its budgets and assignments.

        Raises:
            NotFoundError: If project doesn't exist
            DependencyError: If the project still has invoices
        """
        if self.db.get_project(project_id) is None:
            raise NotFoundError(project_not_found(project_id))
        invoice_count = len(self.db.list_invoices(project_id=project_id))
        if invoice_count:
            raise DependencyError(
                f"Cannot delete project {project_id}: it has {invoice_count} "
                f"invoice{'s' if invoice_count != 1 else ''}. Please delete them first."
            )
        self.db.delete_project(project_id)
        logger.info("Deleted project %s", project_id)

    def assign_user(self, project_id: int, user_id: str, role: ProjectRole) -> int:
        """Give a user a role on a project.

        Returns:
            Assignment ID

        Raises:
            NotFoundError: If project doesn't exist
            ValidationError: If user ID or role is invalid
            ConflictError: If the user is already on the project
        """
        if self.db.get_project(project_id) is None:
            raise NotFoundError(project_not_found(project_id))
        if not user_id or not user_id.strip():
            raise ValidationError("User ID cannot be empty")
        try:
            role = ProjectRole(role)
        except ValueError:
            valid = ", ".join(r.value for r in ProjectRole)
            raise ValidationError(f"Unknown role '{role}'. Valid roles: {valid}")
        return self.db.add_project_assignment(project_id, user_id.strip(), role)

    def list_assignments(self, project_id: int) -> list[ProjectAssignment]:
        """List team roles of a project."""
        return self.db.list_project_assignments(project_id)

    def remove_user(self, project_id: int, user_id: str) -> None:
        """Remove a user from a project.

        Raises:
            NotFoundError: If the user holds no role on the project
        """
        assignment = self.db.get_project_assignment(project_id, user_id)
        if assignment is None:
            raise NotFoundError(f"User '{user_id}' is not assigned to project {project_id}")
        self.db.remove_project_assignment(assignment.id)

    def role_for(self, project_id: int, user_id: str) -> Actor:
        """Resolve the acting identity of a user on a project.

        Raises:
            PermissionDeniedError: If the user holds no role on the project
        """
        assignment = self.db.get_project_assignment(project_id, user_id)
        if assignment is None:
            raise PermissionDeniedError(
                f"User '{user_id}' has no role on project {project_id}"
            )
        return Actor(user_id=user_id, role=assignment.role)
