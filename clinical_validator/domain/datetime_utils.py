"""Healthcare Date Utilities.

Age calculation, date range enumeration and admission metrics used by
cohort and utilization reports. All functions are pure; "today" is always a
parameter with a default.

Architecture:
    - Raises DateUtilityError for unusable input; the JSON entry points turn
      that into an ``{"error": ...}`` payload
    - Results are Pydantic models so they serialize the same way everywhere
"""

import calendar
import logging
import re
from datetime import MAXYEAR, date, datetime, timedelta
from typing import Optional, Sequence, Union

from pydantic import BaseModel, Field, computed_field

from clinical_validator.domain.enums import (
    AgeGroup,
    AgeRiskCategory,
    IntervalType,
    StayCategory,
)
from clinical_validator.domain.ports import DateUtilityError

logger = logging.getLogger(__name__)

ISO_FORMAT = "%Y-%m-%d"
US_FORMAT = "%m/%d/%Y"
DOB_FORMATS = (ISO_FORMAT, US_FORMAT)

# strptime accepts single-digit months and days; the accepted grammars do not.
_FORMAT_PATTERNS = {
    ISO_FORMAT: re.compile(r'^[0-9]{4}-[0-9]{2}-[0-9]{2}$'),
    US_FORMAT: re.compile(r'^[0-9]{2}/[0-9]{2}/[0-9]{4}$'),
}
_FORMAT_NAMES = {ISO_FORMAT: "YYYY-MM-DD", US_FORMAT: "MM/DD/YYYY"}

DateInput = Union[str, date]


class AgeResult(BaseModel):
    """Age of a patient at a reference date, in several units."""
    birth_date: date
    reference_date: date
    age_in_days: int
    age_in_years: int = Field(..., description="Whole years using 365.25-day years")
    age_in_months: int = Field(..., description="Whole months using 30.44-day months")
    age_in_weeks: int
    age_precise_years: int = Field(..., description="Calendar-correct completed years")
    age_group: AgeGroup


class DatePeriod(BaseModel):
    """One period of an enumerated date range."""
    start_date: date
    end_date: date
    period: str


class DateRange(BaseModel):
    """Consecutive periods covering a requested window."""
    interval_type: IntervalType
    ranges: list[DatePeriod] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_periods(self) -> int:
        return len(self.ranges)

    def to_simple_text(self) -> str:
        """Render one ``period: start to end`` line per period."""
        return "\n".join(
            f"{r.period}: {r.start_date.isoformat()} to {r.end_date.isoformat()}"
            for r in self.ranges
        )


class DateMetrics(BaseModel):
    """Stay and timing metrics for a single admission."""
    admit_date: date
    discharge_date: Optional[date] = None
    birth_date: Optional[date] = None
    length_of_stay_days: Optional[int] = None
    los_category: Optional[StayCategory] = None
    age_at_admission: Optional[int] = None
    age_risk_category: Optional[AgeRiskCategory] = None
    admit_day_of_week: str
    admit_month: str
    admit_quarter: str
    admit_timing: str


def parse_date(value: DateInput, formats: Sequence[str] = (ISO_FORMAT,)) -> date:
    """Parse a date string against the accepted formats, in order.

    Parameters:
        value: Date string (or an existing date, returned unchanged)
        formats: strptime formats to try

    Returns:
        date: Parsed date

    Raises:
        DateUtilityError: If no format matches
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for fmt in formats:
        pattern = _FORMAT_PATTERNS.get(fmt)
        if pattern is not None and not pattern.match(text):
            continue
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    readable = " or ".join(_FORMAT_NAMES.get(fmt, fmt) for fmt in formats)
    raise DateUtilityError(f"Invalid date '{text}'. Use {readable}")


def completed_years(birth: date, on: date) -> int:
    """Calendar-correct age in whole years."""
    years = on.year - birth.year
    if (on.month, on.day) < (birth.month, birth.day):
        years -= 1
    return years


def age_group_for(years: int) -> AgeGroup:
    if years < 1:
        return AgeGroup.INFANT
    if years < 5:
        return AgeGroup.TODDLER
    if years < 13:
        return AgeGroup.CHILD
    if years < 18:
        return AgeGroup.ADOLESCENT
    if years < 65:
        return AgeGroup.ADULT
    return AgeGroup.SENIOR


def calculate_age(
    birth_date: DateInput,
    reference_date: Optional[DateInput] = None,
    today: Optional[date] = None,
) -> AgeResult:
    """Calculate a patient's age at a reference date.

    Parameters:
        birth_date: Birth date (YYYY-MM-DD or MM/DD/YYYY)
        reference_date: Date to measure age at; an empty or unparseable
            reference falls back to today
        today: Override for the current date

    Returns:
        AgeResult: Age in days, weeks, months, years and age group

    Raises:
        DateUtilityError: If the birth date is unparseable or after the reference
    """
    birth = parse_date(birth_date, DOB_FORMATS)
    today = today or date.today()

    reference = today
    if reference_date:
        try:
            reference = parse_date(reference_date, DOB_FORMATS)
        except DateUtilityError:
            logger.debug("Unparseable reference date, using today")

    if reference < birth:
        raise DateUtilityError("Reference date is before birth date")

    days = (reference - birth).days
    precise = completed_years(birth, reference)
    return AgeResult(
        birth_date=birth,
        reference_date=reference,
        age_in_days=days,
        age_in_years=int(days // 365.25),
        age_in_months=int(days // 30.44),
        age_in_weeks=days // 7,
        age_precise_years=precise,
        age_group=age_group_for(precise),
    )


def _month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def _next_month(day: date, months: int = 1) -> Optional[date]:
    """First day of the month ``months`` after ``day``; None past year 9999."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    if year > MAXYEAR:
        return None
    return date(year, month_index % 12 + 1, 1)


def _shift(day: date, days: int) -> Optional[date]:
    try:
        return day + timedelta(days=days)
    except OverflowError:
        return None


def create_date_range(
    start_date: DateInput,
    end_date: DateInput,
    interval_type: Union[str, IntervalType] = IntervalType.MONTH,
) -> DateRange:
    """Split ``[start_date, end_date]`` into consecutive periods.

    Weeks start on Monday and quarters on Jan/Apr/Jul/Oct. Every period is
    clipped to the requested window.

    Parameters:
        start_date: First day of the window (YYYY-MM-DD)
        end_date: Last day of the window (YYYY-MM-DD)
        interval_type: day, week, month, quarter or year

    Returns:
        DateRange: The enumerated periods

    Raises:
        DateUtilityError: On unparseable dates, start after end, or an
            unknown interval type
    """
    start = parse_date(start_date)
    end = parse_date(end_date)
    if start > end:
        raise DateUtilityError("Start date must be before end date")

    try:
        if isinstance(interval_type, IntervalType):
            interval = interval_type
        else:
            interval = IntervalType(str(interval_type).strip().lower())
    except ValueError:
        valid = ", ".join(i.value for i in IntervalType)
        raise DateUtilityError(f"Unknown interval type '{interval_type}'. Use one of: {valid}")

    periods: list[DatePeriod] = []

    def add(period_start: date, period_end: date, label: str) -> None:
        periods.append(DatePeriod(
            start_date=max(period_start, start),
            end_date=min(period_end, end),
            period=label,
        ))

    # Each step yields None once it would leave the calendar (after 9999-12-31).
    current: Optional[date]
    if interval == IntervalType.DAY:
        current = start
        while current is not None and current <= end:
            add(current, current, current.isoformat())
            current = _shift(current, 1)

    elif interval == IntervalType.WEEK:
        current = start - timedelta(days=start.weekday())
        while current is not None and current <= end:
            add(current, _shift(current, 6) or date.max, f"Week of {current.isoformat()}")
            current = _shift(current, 7)

    elif interval == IntervalType.MONTH:
        current = start.replace(day=1)
        while current is not None and current <= end:
            add(current, _month_end(current), current.strftime("%Y-%m"))
            current = _next_month(current)

    elif interval == IntervalType.QUARTER:
        current = date(start.year, (start.month - 1) // 3 * 3 + 1, 1)
        while current is not None and current <= end:
            following = _next_month(current, 3)
            quarter_end = following - timedelta(days=1) if following else date.max
            add(current, quarter_end, f"{current.year} Q{(current.month - 1) // 3 + 1}")
            current = following

    elif interval == IntervalType.YEAR:
        current = date(start.year, 1, 1)
        while current is not None and current <= end:
            add(current, date(current.year, 12, 31), str(current.year))
            current = date(current.year + 1, 1, 1) if current.year < MAXYEAR else None

    return DateRange(interval_type=interval, ranges=periods)


def stay_category_for(days: int) -> StayCategory:
    if days == 0:
        return StayCategory.SAME_DAY
    if days <= 2:
        return StayCategory.SHORT
    if days <= 7:
        return StayCategory.MEDIUM
    if days <= 30:
        return StayCategory.LONG
    return StayCategory.EXTENDED


def age_risk_category_for(years: int) -> AgeRiskCategory:
    if years < 18:
        return AgeRiskCategory.PEDIATRIC
    if years >= 65:
        return AgeRiskCategory.GERIATRIC
    return AgeRiskCategory.ADULT


def healthcare_date_metrics(
    admit_date: DateInput,
    discharge_date: Optional[DateInput] = None,
    birth_date: Optional[DateInput] = None,
) -> DateMetrics:
    """Compute stay length, age at admission and admission timing.

    Parameters:
        admit_date: Admission date (YYYY-MM-DD)
        discharge_date: Optional discharge date (YYYY-MM-DD)
        birth_date: Optional birth date (YYYY-MM-DD)

    Returns:
        DateMetrics: Metrics for the admission

    Raises:
        DateUtilityError: On unparseable dates, discharge before admission,
            or birth after admission
    """
    admit = parse_date(admit_date)
    metrics = {
        "admit_date": admit,
        "admit_day_of_week": admit.strftime("%A"),
        "admit_month": admit.strftime("%B"),
        "admit_quarter": f"Q{(admit.month - 1) // 3 + 1}",
        "admit_timing": "Weekend" if admit.weekday() >= 5 else "Weekday",
    }

    if discharge_date:
        discharge = parse_date(discharge_date)
        if discharge < admit:
            raise DateUtilityError("Discharge date is before admit date")
        los_days = (discharge - admit).days
        metrics.update(
            discharge_date=discharge,
            length_of_stay_days=los_days,
            los_category=stay_category_for(los_days),
        )

    if birth_date:
        birth = parse_date(birth_date)
        if birth > admit:
            raise DateUtilityError("Birth date is after admit date")
        age_at_admit = completed_years(birth, admit)
        metrics.update(
            birth_date=birth,
            age_at_admission=age_at_admit,
            age_risk_category=age_risk_category_for(age_at_admit),
        )

    return DateMetrics(**metrics)
