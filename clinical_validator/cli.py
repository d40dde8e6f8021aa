"""Command Line Interface for Clinical Validator.

This module provides a CLI using Typer for validating healthcare values and
records and for running the healthcare date utilities.

Exit codes:
    0 - value/record valid (or utility succeeded)
    1 - value/record invalid, or input unusable
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from clinical_validator.adapters.entrypoints import AGE_OUTPUT_FORMATS, parse_json_object
from clinical_validator.domain import datetime_utils
from clinical_validator.domain.enums import DataType, IntervalType
from clinical_validator.domain.models import RecordValidationResult, ValidationResult
from clinical_validator.domain.ports import DateUtilityError
from clinical_validator.infrastructure.logging_config import setup_logging
from clinical_validator.infrastructure.settings import settings
from clinical_validator.main import create_validator

app = typer.Typer(
    name="clinical-validator",
    help="Clinical Validator: healthcare identifier validation and date utilities",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)


def _load_json_argument(raw: str) -> str:
    """Return JSON text from an inline argument or an ``@path`` reference."""
    if raw.startswith("@"):
        path = Path(raw[1:])
        if not path.exists():
            console.print(f"[red]✗[/red] File not found: {path}")
            raise typer.Exit(code=1)
        return path.read_text(encoding="utf-8")
    return raw


def _print_result(label: str, result: ValidationResult) -> None:
    status = "[green]✓ valid[/green]" if result.valid else "[red]✗ invalid[/red]"
    console.print(f"[bold]{label}:[/bold] {status}")
    if result.formatted:
        console.print(f"  [dim]Formatted:[/dim] {result.formatted}")
    for error in result.errors:
        console.print(f"  [red]error:[/red] {error}")
    for warning in result.warnings:
        console.print(f"  [yellow]warning:[/yellow] {warning}")


def _print_record(result: RecordValidationResult) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Field")
    table.add_column("Status")
    table.add_column("Formatted")
    table.add_column("Messages")
    for name, verdict in result.field_validations.items():
        messages = [f"[red]{e}[/red]" for e in verdict.errors] + [f"[yellow]{w}[/yellow]" for w in verdict.warnings]
        table.add_row(
            name,
            "[green]valid[/green]" if verdict.valid else "[red]invalid[/red]",
            verdict.formatted or "",
            "\n".join(messages),
        )
    console.print(table)
    for error in result.errors:
        console.print(f"[red]✗[/red] {error}")
    status = "[green]✓ Record valid[/green]" if result.record_valid else "[red]✗ Record invalid[/red]"
    console.print(
        f"{status} ({result.summary.errors} errors, {result.summary.warnings} warnings)"
    )


@app.command()
def validate(
    data_type: str = typer.Argument(..., help=f"Data type ({', '.join(t.value for t in DataType)})"),
    value: str = typer.Argument(..., help="Value to validate"),
    rules: Optional[str] = typer.Option(None, "--rules", "-r", help="Rule overrides as a JSON object"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Validate a single value.

    Examples:
        clinical-validator validate NPI 1234567897
        clinical-validator validate AMOUNT --rules '{"allow_negative": false}' -- -50
    """
    parsed_rules = parse_json_object(rules, what="rules")
    if parsed_rules.is_failure():
        result = ValidationResult.invalid(f"invalid rules payload: {parsed_rules.error}")
    else:
        result = create_validator().validate(data_type, value, parsed_rules.value)

    if as_json:
        typer.echo(result.model_dump_json())
    else:
        _print_result(data_type.upper(), result)

    if not result.valid:
        raise typer.Exit(code=1)


@app.command("validate-record")
def validate_record(
    record: str = typer.Argument(..., help="Record as a JSON object, or @path to a JSON file"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Validate every recognized field of a record.

    Examples:
        clinical-validator validate-record '{"mrn": "1234567", "dob": "1985-03-15"}'
        clinical-validator validate-record @patient.json --json
    """
    parsed = parse_json_object(_load_json_argument(record), what="record")
    if parsed.is_failure():
        result = RecordValidationResult(errors=[f"record validation error: {parsed.error}"])
    else:
        result = create_validator().validate_record(parsed.value)

    if as_json:
        typer.echo(result.model_dump_json())
    else:
        _print_record(result)

    if not result.record_valid:
        raise typer.Exit(code=1)


@app.command()
def age(
    birth_date: str = typer.Argument(..., help="Birth date (YYYY-MM-DD or MM/DD/YYYY)"),
    reference_date: Optional[str] = typer.Option(None, "--reference", help="Reference date (defaults to today)"),
    output_format: str = typer.Option("full", "--format", "-f", help="years, months, days, group or full"),
) -> None:
    """Calculate age at a reference date."""
    try:
        result = datetime_utils.calculate_age(birth_date, reference_date)
    except DateUtilityError as e:
        console.print(f"[red]✗[/red] {str(e)}")
        raise typer.Exit(code=1)

    fmt = output_format.strip().lower()
    if fmt in AGE_OUTPUT_FORMATS:
        values = {
            "years": result.age_precise_years,
            "months": result.age_in_months,
            "days": result.age_in_days,
            "group": result.age_group.value,
        }
        typer.echo(str(values[fmt]))
        return

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_row("Birth date:", result.birth_date.isoformat())
    table.add_row("Reference date:", result.reference_date.isoformat())
    table.add_row("Age (years):", f"[bold]{result.age_precise_years}[/bold]")
    table.add_row("Age (months):", str(result.age_in_months))
    table.add_row("Age (weeks):", str(result.age_in_weeks))
    table.add_row("Age (days):", f"{result.age_in_days:,}")
    table.add_row("Age group:", result.age_group.value)
    console.print(table)


@app.command("date-range")
def date_range(
    start_date: str = typer.Argument(..., help="Start date (YYYY-MM-DD)"),
    end_date: str = typer.Argument(..., help="End date (YYYY-MM-DD)"),
    interval: IntervalType = typer.Option(IntervalType.MONTH, "--interval", "-i", help="Period size"),
    simple: bool = typer.Option(False, "--simple", help="Print one 'period: start to end' line per period"),
) -> None:
    """Split a date window into consecutive periods."""
    try:
        result = datetime_utils.create_date_range(start_date, end_date, interval)
    except DateUtilityError as e:
        console.print(f"[red]✗[/red] {str(e)}")
        raise typer.Exit(code=1)

    if simple:
        typer.echo(result.to_simple_text())
        return

    table = Table(show_header=True, header_style="bold", title=f"{result.total_periods} periods")
    table.add_column("Period")
    table.add_column("Start")
    table.add_column("End")
    for period in result.ranges:
        table.add_row(period.period, period.start_date.isoformat(), period.end_date.isoformat())
    console.print(table)


@app.command()
def metrics(
    admit_date: str = typer.Argument(..., help="Admission date (YYYY-MM-DD)"),
    discharge_date: Optional[str] = typer.Option(None, "--discharge", help="Discharge date (YYYY-MM-DD)"),
    birth_date: Optional[str] = typer.Option(None, "--birth", help="Birth date (YYYY-MM-DD)"),
) -> None:
    """Length of stay, age at admission and admission timing (JSON)."""
    try:
        result = datetime_utils.healthcare_date_metrics(admit_date, discharge_date, birth_date)
    except DateUtilityError as e:
        console.print(f"[red]✗[/red] {str(e)}")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(result.model_dump(mode="json", exclude_none=True), indent=2))


@app.command()
def info() -> None:
    """Display configuration information."""
    config = settings.validator_config
    info_table = Table(show_header=False, box=None, padding=(0, 2))
    info_table.add_row("Application:", settings.app_name)
    info_table.add_row("Version:", settings.app_version)
    info_table.add_row("Log Level:", settings.log_level)
    info_table.add_row("Record Mode:", config.record_mode.value)
    info_table.add_row("Max Amount:", f"${config.max_amount:,.2f}")
    info_table.add_row("Allow Negative:", "Yes" if config.allow_negative else "No")
    info_table.add_row("NPI Issuer Prefix:", "Yes" if config.npi_issuer_prefix else "No")
    info_table.add_row("Max Plausible Age:", str(config.max_plausible_age))
    info_table.add_row("Supported Types:", ", ".join(t.value for t in DataType))
    console.print(info_table)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn
    uvicorn.run(
        "clinical_validator.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
    )


@app.callback(invoke_without_command=True)
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    version: bool = typer.Option(False, "--version", help="Show version information"),
) -> None:
    """Clinical Validator: healthcare identifier validation and date utilities."""
    if version:
        console.print(f"Clinical Validator v{settings.app_version}")
        raise typer.Exit()
    if verbose:
        setup_logging(use_json=settings.json_logs, log_level="DEBUG")
        console.print("[dim]Verbose logging enabled[/dim]")


if __name__ == "__main__":
    app()
