"""Tabular batch validation.

Runs whole-record validation over every row of a pandas DataFrame, for
callers that pull a result set into memory before reporting on it.
"""

import logging
from typing import Optional

import pandas as pd

from clinical_validator.domain.validator import IdentifierValidator

logger = logging.getLogger(__name__)

RESULT_COLUMNS = ["record_valid", "errors", "warnings", "messages"]


def validate_dataframe(
    df: pd.DataFrame,
    validator: Optional[IdentifierValidator] = None,
) -> pd.DataFrame:
    """Validate each row of a DataFrame as a record.

    Column names are resolved through the record field aliases, so
    unrecognized columns are ignored. Missing cells (NaN/None) count as empty
    values.

    Parameters:
        df: One record per row
        validator: Validator to use (a default IdentifierValidator if None)

    Returns:
        pd.DataFrame: Indexed like ``df`` with columns ``record_valid``,
        ``errors`` and ``warnings`` (counts) and ``messages`` (list of
        ``"field: message"`` strings, errors first)
    """
    validator = validator or IdentifierValidator()
    rows = []
    for record in df.astype(object).where(df.notna(), None).to_dict(orient="records"):
        result = validator.validate_record(record)
        messages = [
            f"{name}: {message}"
            for name, verdict in result.field_validations.items()
            for message in verdict.errors
        ] + [
            f"{name}: {message}"
            for name, verdict in result.field_validations.items()
            for message in verdict.warnings
        ]
        rows.append({
            "record_valid": result.record_valid,
            "errors": result.summary.errors,
            "warnings": result.summary.warnings,
            "messages": messages,
        })

    results = pd.DataFrame(rows, index=df.index, columns=RESULT_COLUMNS)
    if not results.empty:
        invalid = int((~results["record_valid"].astype(bool)).sum())
        logger.info(f"Validated {len(results)} rows: {invalid} invalid")
    return results
