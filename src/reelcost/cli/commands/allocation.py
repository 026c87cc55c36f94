"""Allocation commands."""

import click

from reelcost.cli.error_handling import handle_domain_error
from reelcost.domain.allocation import AllocationService
from reelcost.domain.errors import DomainError
from reelcost.utils.amount_parser import format_amount, parse_amount


@click.group()
def allocation_group():
    """Allocate invoices to budget lines."""
    pass


@allocation_group.command("add")
@click.argument("invoice_id", type=int)
@click.argument("budget_line_id", type=int)
@click.argument("amount")
@click.pass_context
def add_allocation(ctx, invoice_id: int, budget_line_id: int, amount: str):
    """Charge AMOUNT of an invoice's net amount to a budget line.

    Examples:
        reelcost allocation add 5 12 "7 500"
        reelcost allocation add 5 14 2500,50
    """
    service = AllocationService(ctx.obj["db"])
    try:
        value = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount '{amount}': {e}", err=True)
        ctx.exit(1)

    try:
        allocation_id = service.add_allocation(invoice_id, budget_line_id, value)
        balance = service.balance(invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created allocation {allocation_id}")
    click.echo(f"Unallocated: {format_amount(balance.unallocated)}")


@allocation_group.command("remove")
@click.argument("allocation_id", type=int)
@click.pass_context
def remove_allocation(ctx, allocation_id: int):
    """Remove an allocation."""
    service = AllocationService(ctx.obj["db"])
    try:
        service.remove_allocation(allocation_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Removed allocation {allocation_id}")


@allocation_group.command("list")
@click.argument("invoice_id", type=int)
@click.pass_context
def list_allocations(ctx, invoice_id: int):
    """List allocations of an invoice."""
    service = AllocationService(ctx.obj["db"])
    try:
        allocations = service.list_allocations(invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not allocations:
        click.echo("No allocations found.")
        return

    for a in allocations:
        line = a.budget_line
        click.echo(
            f"ID: {a.id:4d} | {line.account_number:8s} | "
            f"{line.account_description[:30]:30s} | {format_amount(a.amount):>14s}"
        )


@allocation_group.command("balance")
@click.argument("invoice_id", type=int)
@click.pass_context
def show_balance(ctx, invoice_id: int):
    """Show how much of an invoice is still unallocated."""
    service = AllocationService(ctx.obj["db"])
    try:
        balance = service.balance(invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Allocated:   {format_amount(balance.total_allocated)}")
    click.echo(f"Unallocated: {format_amount(balance.unallocated)}")
    click.echo("Balanced" if balance.is_balanced else "Not balanced")


@allocation_group.command("suggest")
@click.argument("invoice_id", type=int)
@click.pass_context
def suggest_lines(ctx, invoice_id: int):
    """Suggest budget lines from the vendor's earlier invoices."""
    db = ctx.obj["db"]
    service = AllocationService(db)

    invoice = db.get_invoice(invoice_id)
    if invoice is None:
        click.echo(f"Error: Invoice {invoice_id} not found", err=True)
        ctx.exit(1)
    if invoice.project_id is None:
        click.echo("No suggestions for invoices outside a project.")
        return

    lines = service.suggest_lines_for_vendor(
        invoice.project_id, invoice.ico, exclude_invoice_id=invoice_id
    )
    if not lines:
        click.echo("No suggestions.")
        return

    preselected = service.preselect_line(invoice_id)
    for line in lines:
        marker = "*" if preselected and preselected.budget_line.id == line.id else " "
        click.echo(
            f"{marker} ID: {line.id:4d} | {line.account_number:8s} | {line.account_description}"
        )
    if preselected:
        click.echo("\n* preselected; enter the amount with 'allocation add'")


def register_commands(cli):
    """Register allocation commands with main CLI."""
    cli.add_command(allocation_group, name="allocation")
