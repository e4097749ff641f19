"""
Reporting periods and time-bucketed aggregation.

This module resolves a report period (today, month, quarter, year or a custom
range) into a concrete date window, filters records by that window and buckets
income and expenses into calendar months, quarters or years for trend and
comparison reporting.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Literal, Optional, Sequence, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .exceptions import InvalidArgumentError
from .records import Expense, Mortgage, RentPayment, parse_timestamp

PeriodSelector = Literal["today", "month", "quarter", "year", "custom"]
PeriodType = Literal["month", "quarter", "year"]

T = TypeVar("T")


class ReportRequest(BaseModel):
    """The reporting window a caller asks for."""

    model_config = ConfigDict(frozen=True)

    period: PeriodSelector = Field(default="year", description="Period selector")
    custom_start: Optional[datetime] = Field(
        default=None, description="Start of a custom range"
    )
    custom_end: Optional[datetime] = Field(default=None, description="End of a custom range")

    @field_validator("custom_start", "custom_end", mode="before")
    @classmethod
    def parse_bound(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator("custom_end")
    @classmethod
    def validate_range(
        cls, v: Optional[datetime], info: ValidationInfo
    ) -> Optional[datetime]:
        start = info.data.get("custom_start")
        if v is not None and start is not None and v < start:
            raise ValueError("custom_end must be on or after custom_start")
        return v


class DateRange(BaseModel):
    """Inclusive date window."""

    model_config = ConfigDict(frozen=True)

    start_date: datetime
    end_date: datetime

    def contains(self, moment: Optional[datetime]) -> bool:
        return moment is not None and self.start_date <= moment <= self.end_date


class TrendMonth(BaseModel):
    """Income and costs for one calendar month."""

    model_config = ConfigDict(frozen=True)

    month: str = Field(..., description="Month key, YYYY-MM")
    month_label: str = Field(..., description="Short label, e.g. 'Jan 2024'")
    income: float = 0.0
    expenses: float = 0.0
    mortgage: float = 0.0
    total_costs: float = 0.0
    cash_flow: float = 0.0


class ExpenseCategorySummary(BaseModel):
    """Expense totals for one category."""

    model_config = ConfigDict(frozen=True)

    category: str
    total: float
    count: int
    average: float


class PeriodBucket(BaseModel):
    """Expense totals for one month, quarter or year."""

    key: str
    count: int = 0
    total: float = 0.0
    categories: Dict[str, float] = Field(default_factory=dict)


class IncomeStatusMonth(BaseModel):
    """Rent collected in a month, split by payment status."""

    month: str
    total: float = 0.0
    paid: float = 0.0
    pending: float = 0.0
    late: float = 0.0


class ExpenseCategoryTrend(BaseModel):
    """Per-category expenses by month."""

    trend: List[Dict[str, Any]] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)


def date_range(request: Optional[ReportRequest] = None, now: Optional[datetime] = None) -> DateRange:
    """
    Resolve a report request into a concrete window.

    Args:
        request: Period selection (defaults to year-to-date)
        now: Current moment (defaults to ``datetime.now()``)

    Returns:
        DateRange ending at ``now`` except for custom ranges
    """
    request = request or ReportRequest()
    now = now or datetime.now()
    midnight = datetime(now.year, now.month, now.day)

    if request.period == "custom":
        start = request.custom_start or datetime(now.year, 1, 1)
        end = request.custom_end or now
        if end < start:
            raise InvalidArgumentError("Custom range ends before it starts")
        return DateRange(start_date=start, end_date=end)
    if request.period == "today":
        return DateRange(start_date=midnight, end_date=now)
    if request.period == "month":
        return DateRange(start_date=datetime(now.year, now.month, 1), end_date=now)
    if request.period == "quarter":
        quarter = (now.month - 1) // 3
        return DateRange(start_date=datetime(now.year, quarter * 3 + 1, 1), end_date=now)
    return DateRange(start_date=datetime(now.year, 1, 1), end_date=now)


def filter_by_date_range(
    records: Optional[Iterable[T]],
    start: datetime,
    end: datetime,
    date_field: str = "date",
) -> List[T]:
    """
    Keep records whose ``date_field`` falls within [start, end].

    Records with a missing or unreadable date are excluded.
    """
    if not records:
        return []
    window = DateRange(start_date=start, end_date=end)
    return [r for r in records if window.contains(_record_date(r, date_field))]


def months_in_period(start: datetime, end: datetime) -> int:
    """Number of calendar months the window touches, at least 1."""
    return max(1, (end.year - start.year) * 12 + (end.month - start.month) + 1)


def month_key(moment: datetime) -> str:
    return f"{moment.year}-{moment.month:02d}"


def iter_months(start: datetime, end: datetime) -> List[Tuple[int, int]]:
    """Every (year, month) from start to end inclusive, in order."""
    months = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        months.append((year, month))
        month += 1
        if month > 12:
            month = 1
            year += 1
    return months


def monthly_trend(
    expenses: Optional[Sequence[Expense]],
    rent_payments: Optional[Sequence[RentPayment]],
    start: datetime,
    end: datetime,
    mortgages: Optional[Sequence[Mortgage]] = None,
) -> List[TrendMonth]:
    """
    Bucket income and expenses into every calendar month of a window.

    Months without activity are zero-filled. When mortgages are given, each
    month also carries their combined monthly payment.

    Returns:
        Chronological list of TrendMonth rows
    """
    monthly_mortgage = sum(m.monthly_payment for m in mortgages or [])

    buckets: Dict[str, Dict[str, float]] = {}
    labels: Dict[str, str] = {}
    for year, month in iter_months(start, end):
        first = datetime(year, month, 1)
        key = month_key(first)
        buckets[key] = {"income": 0.0, "expenses": 0.0}
        labels[key] = first.strftime("%b %Y")

    for payment in filter_by_date_range(rent_payments, start, end, "paid_date"):
        key = month_key(payment.paid_date)
        if key in buckets:
            buckets[key]["income"] += payment.amount

    for expense in filter_by_date_range(expenses, start, end, "date"):
        key = month_key(expense.date)
        if key in buckets:
            buckets[key]["expenses"] += expense.amount

    trend = []
    for key, totals in buckets.items():
        total_costs = monthly_mortgage + totals["expenses"]
        trend.append(
            TrendMonth(
                month=key,
                month_label=labels[key],
                income=totals["income"],
                expenses=totals["expenses"],
                mortgage=monthly_mortgage,
                total_costs=total_costs,
                cash_flow=totals["income"] - total_costs,
            )
        )
    return trend


def expense_breakdown(
    expenses: Optional[Sequence[Expense]], start: datetime, end: datetime
) -> List[ExpenseCategorySummary]:
    """Totals per expense category within a window, largest first."""
    by_category: Dict[str, List[float]] = {}
    for expense in filter_by_date_range(expenses, start, end, "date"):
        by_category.setdefault(expense.category or "other", []).append(expense.amount)

    summaries = [
        ExpenseCategorySummary(
            category=category,
            total=sum(amounts),
            count=len(amounts),
            average=sum(amounts) / len(amounts),
        )
        for category, amounts in by_category.items()
    ]
    return sorted(summaries, key=lambda s: s.total, reverse=True)


def period_key(moment: datetime, period_type: PeriodType) -> str:
    """Bucket key for a moment: YYYY-MM, YYYY-Qn or YYYY."""
    if period_type == "month":
        return month_key(moment)
    if period_type == "quarter":
        return f"{moment.year}-Q{(moment.month - 1) // 3 + 1}"
    if period_type == "year":
        return str(moment.year)
    raise InvalidArgumentError(f"Unsupported period type: {period_type}")


def aggregate_expenses_by_period(
    expenses: Optional[Sequence[Expense]], period_type: PeriodType = "month"
) -> Dict[str, PeriodBucket]:
    """Group expenses into month, quarter or year buckets (undated ones are skipped)."""
    if period_type not in ("month", "quarter", "year"):
        raise InvalidArgumentError(f"Unsupported period type: {period_type}")

    buckets: Dict[str, PeriodBucket] = {}
    for expense in expenses or []:
        if expense.date is None:
            continue
        key = period_key(expense.date, period_type)
        bucket = buckets.setdefault(key, PeriodBucket(key=key))
        bucket.count += 1
        bucket.total += expense.amount
        bucket.categories[expense.category] = (
            bucket.categories.get(expense.category, 0.0) + expense.amount
        )
    return dict(sorted(buckets.items()))


def income_trend_by_status(
    rent_payments: Optional[Sequence[RentPayment]], start: datetime, end: datetime
) -> List[IncomeStatusMonth]:
    """Rent by month within a window, split into paid, pending and late."""
    months: Dict[str, IncomeStatusMonth] = {}
    for payment in filter_by_date_range(rent_payments, start, end, "paid_date"):
        key = month_key(payment.paid_date)
        row = months.setdefault(key, IncomeStatusMonth(month=key))
        row.total += payment.amount
        if payment.status in ("paid", "pending", "late"):
            setattr(row, payment.status, getattr(row, payment.status) + payment.amount)
    return [months[key] for key in sorted(months)]


def expense_trend_by_category(
    expenses: Optional[Sequence[Expense]], start: datetime, end: datetime
) -> ExpenseCategoryTrend:
    """Per-category expense totals for each month with activity."""
    months: Dict[str, Dict[str, float]] = {}
    categories: List[str] = []
    for expense in filter_by_date_range(expenses, start, end, "date"):
        key = month_key(expense.date)
        row = months.setdefault(key, {})
        row[expense.category] = row.get(expense.category, 0.0) + expense.amount
        if expense.category not in categories:
            categories.append(expense.category)

    trend = [{"month": key, **months[key]} for key in sorted(months)]
    return ExpenseCategoryTrend(trend=trend, categories=categories)


def _record_date(record: Any, date_field: str) -> Optional[datetime]:
    if isinstance(record, dict):
        return parse_timestamp(record.get(date_field))
    return parse_timestamp(getattr(record, date_field, None))
