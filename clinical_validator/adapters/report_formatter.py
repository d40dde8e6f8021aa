"""Report Formatter - HTML email bodies and text executive summaries.

This module turns query results and validation verdicts into something a
person can read: an HTML document suitable for an email body, or a short
plain-text executive summary.

Security Impact:
    - Every value and header is HTML-escaped; query results may contain
      user-entered text

Architecture:
    - Tabular data is handled with pandas (summary statistics and table
      rendering via DataFrame.to_html)
    - No I/O: callers decide whether the output is emailed, saved or printed
"""

import html
import json
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Optional

import pandas as pd

from clinical_validator.domain.models import RecordValidationResult
from clinical_validator.domain.rules import format_currency

logger = logging.getLogger(__name__)

DEFAULT_MAX_TABLE_ROWS = 100
MAX_LIST_RECORDS = 50
MAX_SUMMARY_FIELDS = 3

AMOUNT_TOKENS = ("amount", "cost", "price", "payment")
RATE_TOKENS = ("rate", "percentage", "percent")

EMAIL_STYLE = """
    body { font-family: Arial, sans-serif; margin: 20px; }
    h1 { color: #2c3e50; border-bottom: 2px solid #3498db; padding-bottom: 10px; }
    h2 { color: #34495e; margin-top: 25px; }
    table { border-collapse: collapse; width: 100%; margin: 15px 0; }
    th { background-color: #3498db; color: white; padding: 12px; text-align: left; }
    td { padding: 10px; border-bottom: 1px solid #ddd; }
    tr:nth-child(even) { background-color: #f8f9fa; }
    .summary { background-color: #e8f4fd; padding: 15px; border-radius: 5px; margin: 15px 0; }
    .metric { display: inline-block; margin: 10px 15px; }
    .metric-value { font-size: 1.2em; font-weight: bold; color: #2c3e50; }
    .timestamp { color: #7f8c8d; font-size: 0.9em; }
    .valid { color: #27ae60; font-weight: bold; }
    .invalid { color: #c0392b; font-weight: bold; }
"""


def humanize(name: Any) -> str:
    """``claim_amount`` -> ``Claim Amount``."""
    return str(name).replace('_', ' ').title()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_value(name: Any, value: Any) -> str:
    """Format a cell according to its column name.

    Amount-like columns render as currency, rate-like columns as a
    percentage, other floats with two decimals.
    """
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    if isinstance(value, (list, dict)):
        return json.dumps(value, indent=2, default=str)
    if _is_number(value):
        lowered = str(name).lower()
        if any(token in lowered for token in AMOUNT_TOKENS):
            return format_currency_float(value)
        if any(token in lowered for token in RATE_TOKENS):
            return f"{value:.1f}%"
        if isinstance(value, float):
            return f"{value:.2f}"
    return str(value)


def format_currency_float(value: float) -> str:
    return format_currency(Decimal(str(value)))


def _document(title: str, body: str, generated_at: Optional[datetime] = None) -> str:
    generated = (generated_at or datetime.now()).strftime('%Y-%m-%d %H:%M:%S')
    return (
        "<html>\n<head>\n"
        f"<meta charset=\"utf-8\">\n<title>{html.escape(title)}</title>\n"
        f"<style>{EMAIL_STYLE}</style>\n"
        "</head>\n<body>\n"
        f"<h1>{html.escape(title)}</h1>\n"
        f"<p class=\"timestamp\">Generated: {generated}</p>\n"
        f"{body}"
        "</body>\n</html>\n"
    )


def error_page(message: str) -> str:
    """Minimal HTML page reporting a formatting failure."""
    return f"<html><body><h1>Error</h1><p>{html.escape(message)}</p></body></html>"


def numeric_columns(df: pd.DataFrame) -> list[str]:
    """Columns whose non-null values all parse as numbers (booleans excluded)."""
    columns = []
    for column in df.columns:
        series = df[column].dropna()
        if series.empty or series.map(lambda v: isinstance(v, bool)).any():
            continue
        converted = pd.to_numeric(series, errors="coerce")
        if converted.notna().all():
            columns.append(column)
    return columns


def _summary_block(df: pd.DataFrame) -> str:
    parts = [
        '<div class="summary">\n<h2>Summary</h2>\n',
        '<div class="metric"><div>Total Records</div>'
        f'<div class="metric-value">{len(df)}</div></div>\n',
    ]
    for column in numeric_columns(df)[:MAX_SUMMARY_FIELDS]:
        values = pd.to_numeric(df[column], errors="coerce").dropna()
        parts.append(
            f'<div class="metric"><div>{html.escape(humanize(column))}</div>'
            f'<div class="metric-value">Avg: {values.mean():.2f}</div>'
            f'<div>Min: {values.min():.2f} | Max: {values.max():.2f}</div></div>\n'
        )
    parts.append("</div>\n")
    return "".join(parts)


def _table_block(df: pd.DataFrame, max_rows: int) -> str:
    shown = df.head(max_rows)
    formatted = pd.DataFrame({
        humanize(column): [format_value(column, v) for v in shown[column].tolist()]
        for column in shown.columns
    })
    body = "<h2>Detailed Data</h2>\n" + formatted.to_html(index=False, escape=True, border=0, na_rep="")
    if len(df) > max_rows:
        body += f"\n<p><em>Showing first {max_rows} of {len(df)} records</em></p>"
    return body + "\n"


def _list_block(records: list) -> str:
    parts = ["<h2>Records</h2>\n"]
    for i, record in enumerate(records[:MAX_LIST_RECORDS], 1):
        parts.append(f"<h3>Record {i}</h3>\n<ul>\n")
        if isinstance(record, dict):
            for key, value in record.items():
                parts.append(
                    f"<li><strong>{html.escape(humanize(key))}:</strong> "
                    f"{html.escape(format_value(key, value))}</li>\n"
                )
        else:
            parts.append(f"<li>{html.escape(str(record))}</li>\n")
        parts.append("</ul>\n")
    if len(records) > MAX_LIST_RECORDS:
        parts.append(f"<p><em>Showing first {MAX_LIST_RECORDS} of {len(records)} records</em></p>\n")
    return "".join(parts)


def _key_value_block(data: dict) -> str:
    rows = "".join(
        f"<tr><th>{html.escape(humanize(key))}</th>"
        f"<td>{html.escape(format_value(key, value))}</td></tr>\n"
        for key, value in data.items()
    )
    return f"<h2>Data</h2>\n<table>\n{rows}</table>\n"


def format_data_for_email(
    data: Any,
    format_type: str = "table",
    title: str = "Data Report",
    include_summary: bool = True,
    max_rows: int = DEFAULT_MAX_TABLE_ROWS,
    generated_at: Optional[datetime] = None,
) -> str:
    """Render query results as an HTML email body.

    Parameters:
        data: List of records (dicts), a single dict, or any scalar
        format_type: ``table`` or ``list`` (lists of records only)
        title: Report heading
        include_summary: Add record count and numeric column statistics
        max_rows: Row limit for table rendering
        generated_at: Timestamp shown in the header (defaults to now)

    Returns:
        str: Complete HTML document
    """
    if isinstance(data, list):
        if not data:
            body = "<p><em>No records</em></p>\n"
        else:
            records = [item if isinstance(item, dict) else {"value": item} for item in data]
            df = pd.DataFrame.from_records(records)
            body = _summary_block(df) if include_summary else ""
            if (format_type or "table").strip().lower() == "list":
                body += _list_block(data)
            else:
                body += _table_block(df, max_rows)
    elif isinstance(data, dict):
        body = _key_value_block(data)
    else:
        body = f'<div class="summary"><h2>Result</h2><p>{html.escape(str(data))}</p></div>\n'

    logger.debug(f"Formatted email report '{title}' ({format_type})")
    return _document(title, body, generated_at)


def format_validation_report(
    result: RecordValidationResult,
    title: str = "Validation Report",
    generated_at: Optional[datetime] = None,
) -> str:
    """Render a record validation verdict as an HTML document.

    Parameters:
        result: Output of IdentifierValidator.validate_record
        title: Report heading
        generated_at: Timestamp shown in the header (defaults to now)

    Returns:
        str: Complete HTML document
    """
    status_class = "valid" if result.record_valid else "invalid"
    status_text = "VALID" if result.record_valid else "INVALID"
    body = (
        '<div class="summary">\n<h2>Summary</h2>\n'
        f'<div class="metric"><div>Status</div><div class="metric-value {status_class}">{status_text}</div></div>\n'
        f'<div class="metric"><div>Fields Checked</div><div class="metric-value">{len(result.field_validations)}</div></div>\n'
        f'<div class="metric"><div>Errors</div><div class="metric-value">{result.summary.errors}</div></div>\n'
        f'<div class="metric"><div>Warnings</div><div class="metric-value">{result.summary.warnings}</div></div>\n'
        "</div>\n"
    )
    for message in result.errors:
        body += f'<p class="invalid">{html.escape(message)}</p>\n'

    if result.field_validations:
        rows = pd.DataFrame([
            {
                "Field": name,
                "Status": "valid" if verdict.valid else "invalid",
                "Errors": "; ".join(verdict.errors),
                "Warnings": "; ".join(verdict.warnings),
                "Formatted": verdict.formatted or "",
            }
            for name, verdict in result.field_validations.items()
        ])
        body += "<h2>Field Results</h2>\n" + rows.to_html(index=False, escape=True, border=0) + "\n"

    return _document(title, body, generated_at)


def _first_numeric(records: list, fields: Iterable[str]) -> Optional[tuple[str, pd.Series]]:
    """The first candidate field present in the records with numeric values."""
    df = pd.DataFrame.from_records([r for r in records if isinstance(r, dict)])
    for field_name in fields:
        if field_name in df.columns:
            values = pd.to_numeric(df[field_name], errors="coerce").dropna()
            if not values.empty:
                return field_name, values
    return None


def create_executive_summary(
    data: Any,
    analysis_type: str = "general",
    key_metrics: Iterable[str] = (),
    generated_at: Optional[datetime] = None,
) -> str:
    """Produce a plain-text executive summary of healthcare records.

    Parameters:
        data: List of records
        analysis_type: ``claims``, ``patients``, ``utilization`` or ``general``
        key_metrics: Metric names to restate as key findings when present
        generated_at: Timestamp shown in the header (defaults to now)

    Returns:
        str: Summary with KEY FINDINGS, RECOMMENDATIONS and METRICS sections
    """
    kind = (analysis_type or "general").strip().lower()
    findings: list[str] = []
    recommendations: list[str] = []
    metrics: dict[str, Any] = {}

    if isinstance(data, list) and data:
        metrics["total_records"] = len(data)

        if kind == "claims":
            findings.append(f"Analyzed {len(data)} claims records")
            found = _first_numeric(data, ("amount", "claim_amount", "payment_amount", "total_amount"))
            if found is not None:
                field_name, amounts = found
                metrics[f"total_{field_name}"] = round(float(amounts.sum()), 2)
                metrics[f"average_{field_name}"] = round(float(amounts.mean()), 2)
                metrics[f"max_{field_name}"] = round(float(amounts.max()), 2)
                findings.append(f"Total {humanize(field_name).lower()}: {format_currency_float(float(amounts.sum()))}")
                findings.append(f"Average {humanize(field_name).lower()}: {format_currency_float(float(amounts.mean()))}")
            recommendations.append("Monitor high-value claims for potential fraud")
            recommendations.append("Review claims processing efficiency")

        elif kind == "patients":
            findings.append(f"Patient cohort includes {len(data)} individuals")
            found = _first_numeric(data, ("age", "age_years", "patient_age"))
            if found is not None:
                _, ages = found
                avg_age = float(ages.mean())
                pediatric = int((ages < 18).sum())
                geriatric = int((ages >= 65).sum())
                metrics["average_age"] = round(avg_age, 1)
                metrics["pediatric_patients"] = pediatric
                metrics["geriatric_patients"] = geriatric
                findings.append(f"Average patient age: {avg_age:.1f} years")
                if geriatric > len(ages) * 0.3:
                    recommendations.append("Consider geriatric care protocols")
                if pediatric > 0:
                    recommendations.append("Ensure pediatric specialists available")

        elif kind == "utilization":
            findings.append(f"Utilization data covers {len(data)} episodes")
            found = _first_numeric(data, ("length_of_stay", "los", "days", "visits"))
            if found is not None:
                field_name, values = found
                metrics[f"average_{field_name}"] = round(float(values.mean()), 1)
                findings.append(f"Average {field_name.replace('_', ' ')}: {float(values.mean()):.1f}")
            recommendations.append("Monitor for outliers in utilization patterns")
            recommendations.append("Identify opportunities for care coordination")

        else:
            findings.append(f"Dataset contains {len(data)} records")

    for metric in key_metrics:
        if metric in metrics:
            findings.append(f"{humanize(metric)}: {metrics[metric]}")

    generated = (generated_at or datetime.now()).strftime('%Y-%m-%d %H:%M:%S')
    lines = [
        f"EXECUTIVE SUMMARY: Healthcare Intelligence Summary - {kind.title()}",
        f"Generated: {generated}",
        "",
        "KEY FINDINGS:",
        *[f"• {finding}" for finding in findings],
        "",
        "RECOMMENDATIONS:",
        *[f"• {rec}" for rec in recommendations],
        "",
        "METRICS:",
        *[f"• {humanize(k)}: {v}" for k, v in metrics.items()],
    ]
    return "\n".join(lines)
