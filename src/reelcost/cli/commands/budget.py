"""Budget management commands."""

from pathlib import Path

import click

from reelcost.cli.error_handling import handle_domain_error
from reelcost.domain.budget import BudgetService
from reelcost.domain.errors import DomainError
from reelcost.utils.amount_parser import format_amount


@click.group()
def budget_group():
    """Manage project budgets."""
    pass


@budget_group.command("upload")
@click.argument("project_id", type=int)
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--name", "version_name", help="Version name (defaults to the file name)")
@click.option("--activate", is_flag=True, help="Make the new version the active budget")
@click.pass_context
def upload_budget(ctx, project_id: int, file_path: str, version_name: str | None, activate: bool):
    """Upload a budget definition (XML export) as a new version.

    Examples:
        reelcost budget upload 1 budget_v2.xml --activate
        reelcost budget upload 1 export.xml --name "Shooting budget v3"
    """
    service = BudgetService(ctx.obj["db"])
    path = Path(file_path)

    try:
        raw_content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        click.echo(f"Error: Could not read {path.name} as UTF-8: {e}", err=True)
        ctx.exit(1)

    try:
        budget_id = service.upload_budget(
            project_id,
            version_name or path.stem,
            raw_content,
            activate=activate,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    lines = service.list_budget_lines(budget_id)
    click.echo(f"Uploaded budget '{version_name or path.stem}' (ID: {budget_id}) with {len(lines)} lines")
    if activate:
        click.echo("Budget is now active")


@budget_group.command("list")
@click.argument("project_id", type=int)
@click.pass_context
def list_budgets(ctx, project_id: int):
    """List budget versions of a project."""
    service = BudgetService(ctx.obj["db"])

    budgets = service.list_budgets(project_id)
    if not budgets:
        click.echo("No budgets found.")
        return

    click.echo("\nBudgets:")
    click.echo("-" * 60)
    for b in budgets:
        marker = "*" if b.is_active else " "
        click.echo(
            f"{marker} ID: {b.id:3d} | {b.version_name:30s} | {b.created_at:%Y-%m-%d}"
        )


@budget_group.command("activate")
@click.argument("project_id", type=int)
@click.argument("budget_id", type=int)
@click.pass_context
def activate_budget(ctx, project_id: int, budget_id: int):
    """Make a budget version the project's active budget."""
    service = BudgetService(ctx.obj["db"])
    try:
        service.activate_budget(project_id, budget_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Budget {budget_id} is now active for project {project_id}")


@budget_group.command("lines")
@click.argument("project_id", type=int)
@click.pass_context
def list_lines(ctx, project_id: int):
    """List lines of the project's active budget."""
    service = BudgetService(ctx.obj["db"])

    lines = service.get_active_budget_lines(project_id)
    if not lines:
        click.echo("No active budget.")
        return

    for line in lines:
        click.echo(
            f"ID: {line.id:4d} | {line.account_number:8s} | "
            f"{line.account_description[:30]:30s} | {line.category_description[:20]:20s} | "
            f"{format_amount(line.original_amount):>14s}"
        )


@budget_group.command("delete")
@click.argument("budget_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_budget(ctx, budget_id: int, yes: bool):
    """Delete a budget version.

    Budgets whose lines carry allocations cannot be deleted. Use
    'allocation remove' to remove them first.
    """
    service = BudgetService(ctx.obj["db"])

    budget = service.get_budget(budget_id)
    if budget is None:
        click.echo(f"Error: Budget {budget_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Are you sure you want to delete budget '{budget.version_name}' (ID: {budget_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_budget(budget_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted budget '{budget.version_name}'")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
