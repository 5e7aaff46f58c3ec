"""
Command-line interface for statement deduplication, pending reconciliation
and fixed-expense detection.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import load_config, generate_default_config, ReconConfig
from .matching.engine import PendingReconciler, TransactionDeduplicator
from .matching.normalizer import extract_core_merchant_name
from .models.merchant import FixedExpense, FixedExpenseReport
from .models.transaction import ReconciliationResult
from .parsers.csv_parser import TransactionCSVParser
from .recurring.detector import FixedExpenseDetector
from .reports.excel_generator import ExcelReportGenerator
from .utils.logging_config import level_from_name, setup_logging

console = Console()


@click.group()
@click.version_option(version=__version__)
def main():
    """Statement deduplication and fixed-expense detection tool."""
    pass


def _setup(config: Optional[Path], verbose: bool) -> ReconConfig:
    recon_config = load_config(config)
    level = logging.DEBUG if verbose else level_from_name(recon_config.logging.level)
    setup_logging(level, log_format=recon_config.logging.format)
    return recon_config


def _fail(e: Exception, verbose: bool) -> None:
    console.print(f"[red]Error: {escape(str(e))}[/red]")
    if verbose:
        console.print_exception()
    sys.exit(1)


def _default_output(recon_config: ReconConfig, kind: str) -> Path:
    now = datetime.now()
    return Path(
        recon_config.output.excel.filename_template.format(
            kind=kind, date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")
        )
    )


@main.command()
@click.argument("new_file", type=click.Path(exists=True, path_type=Path))
@click.argument("existing_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("--date-window", type=int, default=None, help="Override date window in days")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def dedupe(
    new_file: Path,
    existing_file: Path,
    config: Optional[Path],
    date_window: Optional[int],
    verbose: bool,
):
    """
    Find new transactions that duplicate already stored ones.

    NEW_FILE: CSV of incoming transactions
    EXISTING_FILE: CSV of stored transactions
    """
    try:
        recon_config = _setup(config, verbose)
        if date_window is not None:
            recon_config.matching.date_window_days = date_window

        parser = TransactionCSVParser(recon_config)
        new_txns = parser.parse_file(new_file)
        existing_txns = parser.parse_file(existing_file)

        result = TransactionDeduplicator(recon_config).deduplicate(new_txns, existing_txns)

        table = Table(title="Deduplication Summary")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("New Transactions", str(len(new_txns)))
        table.add_row("Existing Transactions", str(len(existing_txns)))
        table.add_row("Duplicates", str(result.duplicates_found))
        table.add_row("Unique", str(len(result.unique_transactions)))
        console.print(table)

        for example in result.duplicate_examples:
            console.print(f"  [yellow]duplicate[/yellow] {example}")

    except Exception as e:
        _fail(e, verbose)


@main.command()
@click.argument("new_file", type=click.Path(exists=True, path_type=Path))
@click.argument("existing_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option("--date-window", type=int, default=None, help="Override date window in days")
@click.option(
    "--tie-break",
    type=click.Choice(["first", "closest_date"]),
    default=None,
    help="How to choose between several window matches",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--dry-run", is_flag=True, help="Show summary without generating report")
def reconcile(
    new_file: Path,
    existing_file: Path,
    config: Optional[Path],
    output: Optional[Path],
    date_window: Optional[int],
    tie_break: Optional[str],
    verbose: bool,
    dry_run: bool,
):
    """
    Reconcile incoming pending/posted transactions with stored ones.

    NEW_FILE: CSV of incoming transactions
    EXISTING_FILE: CSV of stored transactions (with id and is_pending columns)
    """
    try:
        recon_config = _setup(config, verbose)
        if date_window is not None:
            recon_config.matching.date_window_days = date_window
        if tie_break is not None:
            recon_config.matching.tie_break = tie_break

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Parsing transaction files...", total=None)
            parser = TransactionCSVParser(recon_config)
            new_txns = parser.parse_file(new_file)
            existing_txns = parser.parse_existing_file(existing_file)
            progress.update(task, completed=True)

            task = progress.add_task("Reconciling pending transactions...", total=None)
            result = PendingReconciler(recon_config).reconcile(new_txns, existing_txns)
            progress.update(task, completed=True)

        _display_reconciliation(result)

        if dry_run:
            console.print("\n[yellow]Dry run - no report generated[/yellow]")
            return

        output = output or _default_output(recon_config, "reconciliation")
        report_path = ExcelReportGenerator(recon_config).generate_reconciliation_report(
            result,
            output,
            new_filename=new_file.name,
            existing_filename=existing_file.name,
        )
        console.print(f"\n[green]Report generated: {report_path}[/green]")

    except Exception as e:
        _fail(e, verbose)


@main.command("fixed-expenses")
@click.argument("history_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option(
    "--as-of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Reference date for subscription candidates (YYYY-MM-DD)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--dry-run", is_flag=True, help="Show results without generating report")
def fixed_expenses(
    history_file: Path,
    config: Optional[Path],
    output: Optional[Path],
    as_of: Optional[datetime],
    verbose: bool,
    dry_run: bool,
):
    """
    Score recurring merchants and list fixed expenses.

    HISTORY_FILE: CSV of expense history
    """
    try:
        recon_config = _setup(config, verbose)
        transactions = TransactionCSVParser(recon_config).parse_file(history_file)

        reference: Optional[date] = as_of.date() if as_of else None
        report = FixedExpenseDetector(recon_config).detect(transactions, as_of=reference)

        _display_fixed_expenses(report)

        if dry_run:
            console.print("\n[yellow]Dry run - no report generated[/yellow]")
            return

        output = output or _default_output(recon_config, "fixed_expenses")
        report_path = ExcelReportGenerator(recon_config).generate_fixed_expense_report(
            report, output, history_filename=history_file.name
        )
        console.print(f"\n[green]Report generated: {report_path}[/green]")

    except Exception as e:
        _fail(e, verbose)


@main.command()
@click.argument("merchants", nargs=-1, required=True)
def normalize(merchants: tuple[str, ...]):
    """Show the core name used for matching each MERCHANTS string."""
    table = Table(title="Merchant Core Names")
    table.add_column("Raw")
    table.add_column("Core", style="cyan")
    for merchant in merchants:
        table.add_row(merchant, extract_core_merchant_name(merchant) or "-")
    console.print(table)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _display_reconciliation(result: ReconciliationResult) -> None:
    """Display reconciliation summary in console."""
    stats = result.stats
    table = Table(title="Pending Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total New", str(stats.total_new))
    table.add_row("Pending Reconciled", str(stats.pending_reconciled))
    table.add_row("Duplicates Skipped", str(stats.exact_duplicates_skipped))
    table.add_row("New Posted Added", str(stats.new_posted_added))
    table.add_row("New Pending Added", str(stats.new_pending_added))
    table.add_row("Pending IDs To Delete", ", ".join(result.pending_ids_to_delete) or "-")

    console.print(table)


def _display_fixed_expenses(report: FixedExpenseReport) -> None:
    """Display detected fixed expenses in console."""
    table = Table(title="Fixed Expenses")
    table.add_column("Merchant")
    table.add_column("Monthly", justify="right")
    table.add_column("Day", justify="right")
    table.add_column("Months", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Source")

    for expense in report.expenses:
        table.add_row(*_expense_row(expense))

    console.print(table)
    console.print(f"Total monthly: [bold]${report.total_monthly:,.2f}[/bold]")

    if report.ambiguous:
        console.print(
            f"\n[yellow]{len(report.ambiguous)} ambiguous merchant(s) need review:[/yellow]"
        )
        for scored in report.ambiguous:
            console.print(
                f"  {scored.summary.original_name} (score {scored.rule_score.score:.2f})"
            )

    if report.subscription_candidates:
        console.print("\n[cyan]Recent subscription candidates:[/cyan]")
        for candidate in report.subscription_candidates:
            console.print(f"  {candidate.merchant_name} ${candidate.monthly_amount:,.2f}")


def _expense_row(expense: FixedExpense) -> list[str]:
    return [
        expense.merchant_name + (" (maybe)" if expense.is_maybe else ""),
        f"${expense.monthly_amount:,.2f}",
        str(expense.avg_day_of_month),
        str(expense.months_tracked),
        f"{expense.score:.2f}",
        expense.source,
    ]


if __name__ == "__main__":
    main()
