"""Cost report commands."""

import click

from reelcost.cli.error_handling import handle_domain_error
from reelcost.domain.budget import BudgetService
from reelcost.domain.errors import DomainError
from reelcost.utils.amount_parser import format_amount


@click.group()
def report_group():
    """Budget spending reports."""
    pass


@report_group.command("cost")
@click.argument("project_id", type=int)
@click.option("--filter", "text_filter", help="Only lines whose account or description contains TEXT")
@click.pass_context
def cost_report(ctx, project_id: int, text_filter: str | None):
    """Show original, spent and remaining amount per budget line.

    Examples:
        reelcost report cost 1
        reelcost report cost 1 --filter camera
    """
    service = BudgetService(ctx.obj["db"])
    try:
        report = service.cost_report(project_id, text_filter=text_filter)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if report.budget_id is None:
        click.echo("No active budget.")
        return

    click.echo(
        f"{'Account':8s} | {'Description':30s} | {'Budget':>14s} | {'Spent':>14s} | {'Remaining':>14s}"
    )
    click.echo("-" * 92)
    for r in report.lines:
        click.echo(
            f"{r.line.account_number:8s} | {r.line.account_description[:30]:30s} | "
            f"{format_amount(r.line.original_amount):>14s} | "
            f"{format_amount(r.spent_amount):>14s} | "
            f"{format_amount(r.remaining_amount):>14s}"
        )
    click.echo("-" * 92)
    click.echo(
        f"{'Total':8s} | {'':30s} | {format_amount(report.total_budget):>14s} | "
        f"{format_amount(report.total_spent):>14s} | {format_amount(report.total_remaining):>14s}"
    )


@report_group.command("line")
@click.argument("budget_line_id", type=int)
@click.pass_context
def line_detail(ctx, budget_line_id: int):
    """List the invoices charged to one budget line."""
    service = BudgetService(ctx.obj["db"])
    try:
        rows = service.line_allocations(budget_line_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not rows:
        click.echo("No allocations on this line.")
        return

    for allocation, invoice in rows:
        vendor = invoice.company_name or invoice.ico or "?"
        click.echo(
            f"#{invoice.internal_id:<5} | {invoice.status.value:14s} | {vendor[:25]:25s} | "
            f"{format_amount(allocation.amount):>14s}"
        )


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
