"""Invoice commands: ingestion, review and approval."""

from pathlib import Path

import click

from reelcost.cli.actor_resolution import require_user, resolve_actor_or_exit
from reelcost.cli.error_handling import handle_domain_error
from reelcost.domain.allocation import AllocationService
from reelcost.domain.entities import Invoice, InvoiceEdits, InvoiceStatus
from reelcost.domain.errors import DomainError
from reelcost.domain.ingestion import DocumentProgress, DocumentStatus, IngestionService
from reelcost.domain.invoice import InvoiceService
from reelcost.domain.project import ProjectService
from reelcost.integrations.extraction import (
    ExtractionResult,
    HttpExtractor,
    extraction_settings_from_env,
)
from reelcost.integrations.stamp import stamp_invoice_pdf
from reelcost.utils.amount_parser import format_amount, parse_amount
from reelcost.utils.date_parser import parse_date


# --clear choices mapped to invoice fields
CLEARABLE_OPTIONS = {
    "ico": "ico",
    "company": "company_name",
    "bank-account": "bank_account",
    "iban": "iban",
    "vs": "variable_symbol",
    "description": "description",
    "amount": "amount_with_vat",
    "net": "amount_without_vat",
    "currency": "currency",
}


def edit_options(func):
    """Attach the invoice field options shared by edit and transition commands."""
    options = [
        click.option("--ico", help="Vendor IČO"),
        click.option("--company", help="Vendor company name"),
        click.option("--bank-account", help="Vendor bank account"),
        click.option("--iban", help="Vendor IBAN"),
        click.option("--vs", "variable_symbol", help="Variable symbol"),
        click.option("--description", help="Invoice description"),
        click.option("--amount", help="Gross amount with VAT (e.g., '12 100,00')"),
        click.option("--net", help="Net amount without VAT"),
        click.option("--currency", help="ISO currency code"),
        click.option(
            "--clear",
            multiple=True,
            type=click.Choice(list(CLEARABLE_OPTIONS)),
            help="Empty a wrongly extracted field (repeatable)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _edits_from_options(ctx, options: dict) -> InvoiceEdits:
    amounts = {}
    for name, key in (("amount", "amount_with_vat"), ("net", "amount_without_vat")):
        if options.get(name) is not None:
            try:
                amounts[key] = parse_amount(options[name])
            except ValueError as e:
                click.echo(f"Error: Invalid {name} '{options[name]}': {e}", err=True)
                ctx.exit(1)
    return InvoiceEdits(
        ico=options.get("ico"),
        company_name=options.get("company"),
        bank_account=options.get("bank_account"),
        iban=options.get("iban"),
        variable_symbol=options.get("variable_symbol"),
        description=options.get("description"),
        currency=options.get("currency"),
        cleared=frozenset(CLEARABLE_OPTIONS[name] for name in options.get("clear") or ()),
        **amounts,
    )


def _get_invoice_or_exit(ctx, service: InvoiceService, invoice_id: int) -> Invoice:
    invoice = service.get_invoice(invoice_id)
    if invoice is None:
        click.echo(f"Error: Invoice {invoice_id} not found", err=True)
        ctx.exit(1)
    return invoice


def _amount(value) -> str:
    return format_amount(value) if value is not None else "-"


def _echo_invoice_row(invoice: Invoice) -> None:
    number = f"#{invoice.internal_id}" if invoice.internal_id is not None else "inbox"
    vendor = invoice.company_name or invoice.ico or "?"
    click.echo(
        f"ID: {invoice.id:4d} | {number:>6s} | {invoice.status.value:14s} | "
        f"{vendor[:25]:25s} | {invoice.variable_symbol or '-':12s} | "
        f"{_amount(invoice.amount_with_vat):>14s} {invoice.currency or ''}"
    )


@click.group()
def invoice_group():
    """Manage invoices."""
    pass


@invoice_group.command("ingest")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--project", "project_id", type=int, help="Project ID (omit for the global inbox)")
@click.pass_context
def ingest(ctx, files: tuple[str, ...], project_id: int | None):
    """Extract invoice documents and save them as drafts.

    Documents are processed one at a time. Duplicates are skipped and
    failures reported; the remaining files are still processed.

    Examples:
        reelcost --user petr invoice ingest scan1.pdf scan2.jpg --project 1
        reelcost --user petr invoice ingest rental.csv
    """
    user = require_user(ctx)
    extractor = ctx.obj.get("extractor")
    try:
        if extractor is None:
            extractor = HttpExtractor(extraction_settings_from_env())
    except DomainError as e:
        handle_domain_error(ctx, e)

    def show_progress(item: DocumentProgress) -> None:
        if item.status == DocumentStatus.ANALYZING:
            click.echo(f"Analyzing {item.name}...")
        elif item.status == DocumentStatus.SAVED:
            number = item.invoice.internal_id
            click.echo(
                f"  Saved as invoice {item.invoice.id}"
                + (f" (#{number})" if number is not None else " (inbox)")
            )
        elif item.status == DocumentStatus.DUPLICATE:
            click.echo(f"  Skipped: {item.error}")
        elif item.status == DocumentStatus.ERROR:
            click.echo(f"  Error: {item.error}", err=True)

    service = IngestionService(ctx.obj["db"], extractor, on_progress=show_progress)
    report = service.ingest_files(list(files), user_id=user, project_id=project_id)

    click.echo(
        f"\nProcessed {len(report.items)} documents: "
        f"{report.count(DocumentStatus.SAVED)} saved, "
        f"{report.count(DocumentStatus.DUPLICATE)} duplicate, "
        f"{report.count(DocumentStatus.ERROR)} failed"
    )
    if report.count(DocumentStatus.ERROR):
        ctx.exit(1)


@invoice_group.command("add")
@click.option("--project", "project_id", type=int, help="Project ID (omit for the global inbox)")
@edit_options
@click.pass_context
def add_invoice(ctx, project_id: int | None, **options):
    """Enter an invoice manually as a draft.

    Examples:
        reelcost --user petr invoice add --project 1 --ico 12345678 --vs 2024001 --amount 12100 --net 10000
    """
    user = require_user(ctx)
    edits = _edits_from_options(ctx, options)
    service = InvoiceService(ctx.obj["db"])
    try:
        invoice = service.create_invoice(
            ExtractionResult(**edits.as_values()),
            user_id=user,
            project_id=project_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    number = f" (#{invoice.internal_id})" if invoice.internal_id is not None else ""
    click.echo(f"Created invoice {invoice.id}{number}")


@invoice_group.command("list")
@click.option("--project", "project_id", type=int, help="Filter by project ID")
@click.option(
    "--status",
    type=click.Choice([s.value for s in InvoiceStatus]),
    help="Filter by status",
)
@click.option("--since", help="Created on or after (YYYY-MM-DD or 'last month', etc.)")
@click.option("--until", help="Created on or before")
@click.option("--inbox", is_flag=True, help="Show only invoices without a project")
@click.pass_context
def list_invoices(
    ctx,
    project_id: int | None,
    status: str | None,
    since: str | None,
    until: str | None,
    inbox: bool,
):
    """List invoices.

    Examples:
        reelcost invoice list --project 1 --status draft
        reelcost invoice list --inbox
        reelcost invoice list --project 1 --since "this month"
    """
    service = InvoiceService(ctx.obj["db"])

    start = end = None
    try:
        if since:
            start = parse_date(since)
        if until:
            end = parse_date(until)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    try:
        invoices = service.list_invoices(
            project_id=project_id,
            status=InvoiceStatus(status) if status else None,
            since=start,
            until=end,
            unassigned=inbox,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not invoices:
        click.echo("No invoices found.")
        return

    for invoice in invoices:
        _echo_invoice_row(invoice)


@invoice_group.command("show")
@click.argument("invoice_id", type=int)
@click.pass_context
def show_invoice(ctx, invoice_id: int):
    """Show an invoice with its allocations and balance."""
    db = ctx.obj["db"]
    invoice = _get_invoice_or_exit(ctx, InvoiceService(db), invoice_id)

    click.echo(f"Invoice {invoice.id}")
    click.echo(f"  Project:      {invoice.project_id if invoice.project_id is not None else 'inbox'}")
    if invoice.internal_id is not None:
        click.echo(f"  Internal ID:  #{invoice.internal_id}")
    click.echo(f"  Status:       {invoice.status.value}")
    if invoice.rejection_reason:
        click.echo(f"  Rejected:     {invoice.rejection_reason}")
    click.echo(f"  Vendor:       {invoice.company_name or '-'} (IČO {invoice.ico or '-'})")
    click.echo(f"  Bank account: {invoice.bank_account or '-'}")
    click.echo(f"  IBAN:         {invoice.iban or '-'}")
    click.echo(f"  VS:           {invoice.variable_symbol or '-'}")
    click.echo(f"  Description:  {invoice.description or '-'}")
    click.echo(f"  With VAT:     {_amount(invoice.amount_with_vat)} {invoice.currency or ''}")
    click.echo(f"  Without VAT:  {_amount(invoice.amount_without_vat)} {invoice.currency or ''}")
    if invoice.confidence is not None:
        click.echo(f"  Confidence:   {invoice.confidence:.0%}")
    if invoice.file_name:
        click.echo(f"  File:         {invoice.file_name}")

    allocation_service = AllocationService(db)
    allocations = allocation_service.list_allocations(invoice_id)
    if allocations:
        click.echo("  Allocations:")
        for a in allocations:
            click.echo(
                f"    [{a.id}] {a.budget_line.account_number} "
                f"{a.budget_line.account_description}: {format_amount(a.amount)}"
            )
    balance = allocation_service.balance(invoice_id)
    state = "balanced" if balance.is_balanced else "not balanced"
    click.echo(f"  Unallocated:  {format_amount(balance.unallocated)} ({state})")


@invoice_group.command("edit")
@click.argument("invoice_id", type=int)
@edit_options
@click.pass_context
def edit_invoice(ctx, invoice_id: int, **options):
    """Edit invoice fields without changing its status.

    Examples:
        reelcost invoice edit 5 --vs 20240017 --net "10 000"
        reelcost invoice edit 5 --clear iban
    """
    service = InvoiceService(ctx.obj["db"])
    edits = _edits_from_options(ctx, options)
    try:
        service.update_fields(invoice_id, edits)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated invoice {invoice_id}")


@invoice_group.command("submit")
@click.argument("invoice_id", type=int)
@edit_options
@click.pass_context
def submit_invoice(ctx, invoice_id: int, **options):
    """Approve a draft invoice.

    The invoice must be fully allocated (within 1 unit) unless the acting
    role may skip the balance check.
    """
    service = InvoiceService(ctx.obj["db"])
    invoice = _get_invoice_or_exit(ctx, service, invoice_id)
    actor = resolve_actor_or_exit(ctx, invoice.project_id)
    edits = _edits_from_options(ctx, options)
    try:
        service.submit(invoice_id, actor, edits)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Invoice {invoice_id} approved")


@invoice_group.command("approve")
@click.argument("invoice_id", type=int)
@edit_options
@click.pass_context
def final_approve_invoice(ctx, invoice_id: int, **options):
    """Give an approved invoice its final approval (producer only)."""
    service = InvoiceService(ctx.obj["db"])
    invoice = _get_invoice_or_exit(ctx, service, invoice_id)
    actor = resolve_actor_or_exit(ctx, invoice.project_id)
    edits = _edits_from_options(ctx, options)
    try:
        service.final_approve(invoice_id, actor, edits)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Invoice {invoice_id} final approved")


@invoice_group.command("reject")
@click.argument("invoice_id", type=int)
@click.option("--reason", required=True, help="Why the invoice is sent back")
@edit_options
@click.pass_context
def reject_invoice(ctx, invoice_id: int, reason: str, **options):
    """Send an approved invoice back to its submitter (producer only)."""
    service = InvoiceService(ctx.obj["db"])
    invoice = _get_invoice_or_exit(ctx, service, invoice_id)
    actor = resolve_actor_or_exit(ctx, invoice.project_id)
    edits = _edits_from_options(ctx, options)
    try:
        service.reject(invoice_id, actor, reason, edits)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Invoice {invoice_id} rejected")


@invoice_group.command("resubmit")
@click.argument("invoice_id", type=int)
@edit_options
@click.pass_context
def resubmit_invoice(ctx, invoice_id: int, **options):
    """Return a rejected invoice to draft (original submitter only)."""
    service = InvoiceService(ctx.obj["db"])
    invoice = _get_invoice_or_exit(ctx, service, invoice_id)
    actor = resolve_actor_or_exit(ctx, invoice.project_id)
    edits = _edits_from_options(ctx, options)
    try:
        service.resubmit(invoice_id, actor, edits)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Invoice {invoice_id} returned to draft")


@invoice_group.command("next")
@click.argument("project_id", type=int)
@click.option("--after", "after_invoice_id", type=int, help="Invoice just reviewed")
@click.pass_context
def next_draft(ctx, project_id: int, after_invoice_id: int | None):
    """Show the next draft waiting for review."""
    service = InvoiceService(ctx.obj["db"])
    invoice = service.next_draft(project_id, after_invoice_id)
    if invoice is None:
        click.echo("No drafts left.")
        return
    _echo_invoice_row(invoice)


@invoice_group.command("assign")
@click.argument("invoice_id", type=int)
@click.argument("project_id", type=int)
@click.pass_context
def assign_invoice(ctx, invoice_id: int, project_id: int):
    """Move an inbox invoice into a project."""
    service = InvoiceService(ctx.obj["db"])
    try:
        invoice = service.assign_to_project(invoice_id, project_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Invoice {invoice_id} assigned to project {project_id} as #{invoice.internal_id}")


@invoice_group.command("stamp")
@click.argument("invoice_id", type=int)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Output file (defaults to <name>_stamped.pdf)",
)
@click.pass_context
def stamp_invoice(ctx, invoice_id: int, output: str | None):
    """Write the invoice PDF with a project and allocation footer."""
    db = ctx.obj["db"]
    service = InvoiceService(db)
    invoice = _get_invoice_or_exit(ctx, service, invoice_id)

    if invoice.project_id is None:
        click.echo(f"Error: Invoice {invoice_id} is not assigned to a project", err=True)
        ctx.exit(1)
    if invoice.file_mime_type != "application/pdf" or not invoice.has_file:
        click.echo(f"Error: Invoice {invoice_id} has no stored PDF", err=True)
        ctx.exit(1)

    try:
        pdf_bytes = service.get_file_content(invoice_id)
        project = ProjectService(db).get_project(invoice.project_id)
        allocations = AllocationService(db).list_allocations(invoice_id)
        stamped = stamp_invoice_pdf(pdf_bytes, project, invoice, allocations)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if output is None:
        stem = Path(invoice.file_name or f"invoice_{invoice_id}.pdf").stem
        output = f"{stem}_stamped.pdf"
    Path(output).write_bytes(stamped)
    click.echo(f"Wrote {output}")


@invoice_group.command("delete")
@click.argument("invoice_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_invoice(ctx, invoice_id: int, yes: bool):
    """Delete an invoice and its allocations."""
    service = InvoiceService(ctx.obj["db"])
    _get_invoice_or_exit(ctx, service, invoice_id)

    if not yes and not click.confirm(f"Are you sure you want to delete invoice {invoice_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_invoice(invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted invoice {invoice_id}")


def register_commands(cli):
    """Register invoice commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
