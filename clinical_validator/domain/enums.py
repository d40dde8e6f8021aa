"""Domain enumerations for healthcare data validation.

These enums are the tagged variants the validator dispatches on. Every
validation rule, date interval and record mode is addressed by one of these
members rather than by free-form string comparison.
"""

from enum import Enum
from typing import Optional


class DataType(str, Enum):
    """Healthcare data types understood by the identifier validator."""
    MRN = "MRN"
    NPI = "NPI"
    ICD10 = "ICD10"
    CPT = "CPT"
    HCPCS = "HCPCS"
    DATE_OF_BIRTH = "DATE_OF_BIRTH"
    PHONE = "PHONE"
    EMAIL = "EMAIL"
    SSN = "SSN"
    AMOUNT = "AMOUNT"

    @classmethod
    def parse(cls, tag: Optional[str]) -> Optional["DataType"]:
        """Resolve a caller-supplied type tag.

        Matching is case-insensitive and ignores surrounding whitespace.
        A few common spellings ("ICD-10", "DOB") are accepted as well.

        Parameters:
            tag: Raw data type tag

        Returns:
            Matching DataType, or None if the tag is not recognized
        """
        if tag is None:
            return None
        normalized = str(tag).strip().upper()
        normalized = _TAG_SPELLINGS.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return None


_TAG_SPELLINGS = {
    "ICD-10": "ICD10",
    "ICD_10": "ICD10",
    "DOB": "DATE_OF_BIRTH",
    "DATE-OF-BIRTH": "DATE_OF_BIRTH",
}


class RecordMode(str, Enum):
    """How whole-record validation applies rules to each field.

    FULL reuses the single-field rule set exactly. SIMPLIFIED reproduces the
    legacy batch behaviour: format checks for MRN, NPI (no checksum) and
    ICD-10 only, with every other recognized field accepted as-is.
    """
    FULL = "full"
    SIMPLIFIED = "simplified"


class IntervalType(str, Enum):
    """Period granularity for date range enumeration."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class AgeGroup(str, Enum):
    """Age bands used in patient cohort analysis."""
    INFANT = "Infant (0-1)"
    TODDLER = "Toddler (1-4)"
    CHILD = "Child (5-12)"
    ADOLESCENT = "Adolescent (13-17)"
    ADULT = "Adult (18-64)"
    SENIOR = "Senior (65+)"


class StayCategory(str, Enum):
    """Length-of-stay buckets for inpatient encounters."""
    SAME_DAY = "Same Day"
    SHORT = "Short Stay (1-2 days)"
    MEDIUM = "Medium Stay (3-7 days)"
    LONG = "Long Stay (8-30 days)"
    EXTENDED = "Extended Stay (30+ days)"


class AgeRiskCategory(str, Enum):
    """Age-based clinical risk categories at admission."""
    PEDIATRIC = "Pediatric"
    ADULT = "Adult"
    GERIATRIC = "Geriatric"
