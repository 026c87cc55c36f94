"""Project management commands."""

import click

from reelcost.cli.error_handling import handle_domain_error
from reelcost.domain.entities import ProjectRole
from reelcost.domain.errors import DomainError
from reelcost.domain.project import ProjectService


@click.group()
def project_group():
    """Manage projects and their team."""
    pass


@project_group.command("create")
@click.argument("name", metavar="PROJECT_NAME")
@click.option("--currency", default="CZK", show_default=True, help="ISO currency code")
@click.option("--company", help="Production company name")
@click.option("--ico", help="Production company IČO")
@click.option("--description", help="Project description")
@click.pass_context
def create_project(
    ctx,
    name: str,
    currency: str,
    company: str | None,
    ico: str | None,
    description: str | None,
):
    """Create a new project.

    The acting user (--user), when given, becomes the project's producer.

    Examples:
        reelcost --user jana project create "Summer Feature"
        reelcost project create "Ad Spot" --currency EUR --company "Reel s.r.o."
    """
    service = ProjectService(ctx.obj["db"])
    try:
        project_id = service.create_project(
            name=name,
            currency=currency,
            company_name=company,
            ico=ico,
            description=description,
            created_by=ctx.obj.get("user"),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created project '{name}' (ID: {project_id})")


@project_group.command("list")
@click.pass_context
def list_projects(ctx):
    """List all projects."""
    service = ProjectService(ctx.obj["db"])

    projects = service.list_projects()
    if not projects:
        click.echo("No projects found.")
        return

    click.echo("\nProjects:")
    click.echo("-" * 60)
    for p in projects:
        company = f" | {p.company_name}" if p.company_name else ""
        click.echo(f"ID: {p.id:3d} | {p.name:25s} | {p.currency}{company}")


@project_group.command("show")
@click.argument("project_id", type=int)
@click.pass_context
def show_project(ctx, project_id: int):
    """Show a project with its team."""
    service = ProjectService(ctx.obj["db"])

    p = service.get_project(project_id)
    if p is None:
        click.echo(f"Error: Project {project_id} not found", err=True)
        ctx.exit(1)

    click.echo(f"Project {p.id}: {p.name}")
    click.echo(f"  Currency:    {p.currency}")
    if p.company_name:
        click.echo(f"  Company:     {p.company_name}")
    if p.ico:
        click.echo(f"  IČO:         {p.ico}")
    if p.description:
        click.echo(f"  Description: {p.description}")

    assignments = service.list_assignments(project_id)
    if assignments:
        click.echo("  Team:")
        for a in assignments:
            click.echo(f"    {a.user_id:20s} {a.role.value}")


@project_group.command("delete")
@click.argument("project_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_project(ctx, project_id: int, yes: bool):
    """Delete a project with its budgets and team.

    Projects that still have invoices cannot be deleted.
    """
    service = ProjectService(ctx.obj["db"])

    p = service.get_project(project_id)
    if p is None:
        click.echo(f"Error: Project {project_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Are you sure you want to delete project '{p.name}' (ID: {project_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_project(project_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted project '{p.name}'")


@project_group.command("assign")
@click.argument("project_id", type=int)
@click.argument("user_id")
@click.argument("role", type=click.Choice([r.value for r in ProjectRole]))
@click.pass_context
def assign_user(ctx, project_id: int, user_id: str, role: str):
    """Give USER_ID a ROLE on a project.

    Examples:
        reelcost project assign 1 petr lineproducer
        reelcost project assign 1 eva accountant
    """
    service = ProjectService(ctx.obj["db"])
    try:
        service.assign_user(project_id, user_id, ProjectRole(role))
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Assigned '{user_id}' to project {project_id} as {role}")


@project_group.command("unassign")
@click.argument("project_id", type=int)
@click.argument("user_id")
@click.pass_context
def unassign_user(ctx, project_id: int, user_id: str):
    """Remove USER_ID from a project."""
    service = ProjectService(ctx.obj["db"])
    try:
        service.remove_user(project_id, user_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Removed '{user_id}' from project {project_id}")


def register_commands(cli):
    """Register project commands with main CLI."""
    cli.add_command(project_group, name="project")
