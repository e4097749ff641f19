"""
Portfolio metrics for rental property analytics.

This module aggregates property, mortgage, expense, rent-payment and tenant
records into point-in-time and period-filtered metrics: value, debt, equity,
LTV, NOI, cap rate, cash flow, ROI, cash-on-cash return and IRR, both for the
portfolio as a whole and property by property. Properties are also graded
with 0-100 performance and risk scores.

Ratios (LTV, equity percentage, cap rate, cash-on-cash, IRR) are fractions,
so 0.25 means 25%. ROI is the one exception and is reported in percent.
"""

import math
import operator
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from .assumptions import DEFAULT_ASSUMPTIONS, FinancialAssumptions
from .exceptions import InvalidArgumentError
from .irr import irr_or_none
from .records import (
    Expense,
    Mortgage,
    Property,
    RentPayment,
    Tenant,
    records_for_property,
)
from .time_periods import filter_by_date_range, months_in_period

RankingMetric = Literal["roi", "equity", "income"]
RiskLevel = Literal["Low", "Medium", "High"]

SECONDS_PER_YEAR = 365.25 * 24 * 60 * 60


class PortfolioReport(BaseModel):
    """Portfolio performance over a reporting window."""

    start_date: datetime
    end_date: datetime
    total_value: float = Field(..., description="Sum of current property values")
    total_debt: float = Field(..., description="Sum of mortgage balances")
    total_equity: float
    ltv: float = Field(..., description="Debt over value (fraction)")
    equity_percentage: float = Field(..., description="Equity over value (fraction)")
    total_income: float = Field(..., description="Rent paid within the window")
    total_expenses: float = Field(..., description="Expenses dated within the window")
    cash_flow: float = Field(..., description="Income minus expenses")
    roi: float = Field(
        ..., description="Cash flow over value x 100 x 12 (percent, monthly annualized)"
    )
    months_in_period: int
    days_in_period: int
    total_mortgage_cost: float = Field(
        ..., description="Monthly debt service times months in the window"
    )
    cash_flow_after_debt: float
    expense_ratio: float = Field(
        ..., description="Expenses plus debt service over income (fraction)"
    )
    property_count: int


class PropertyMetrics(BaseModel):
    """Per-property performance over a reporting window."""

    property_id: str
    address: str = ""
    city: str = ""
    value: float
    purchase_price: float
    debt: float
    equity: float
    equity_percentage: float
    ltv: float
    income: float
    expenses: float
    noi: float = Field(..., description="Income minus operating expenses")
    cap_rate: float = Field(..., description="NOI x 12 over purchase price")
    monthly_payment: float = Field(..., description="Combined monthly mortgage payment")
    cash_flow: float = Field(..., description="NOI minus monthly mortgage payment")
    annual_cash_flow: float
    cash_invested: float
    cash_on_cash: float
    roi: float = Field(..., description="Cash flow over value x 100 x 12 (percent)")
    years_owned: float
    irr: Optional[float] = Field(default=None, description="None when undeterminable")


class PropertyAnalytics(BaseModel):
    """Annualized metrics for one property based on its current tenants."""

    property_id: str
    address: str = ""
    current_value: float
    purchase_price: float
    total_mortgage_balance: float
    equity: float
    ltv: float
    monthly_rent: float
    annual_income: float
    annual_expenses: float
    annual_noi: float
    monthly_noi: float
    monthly_mortgage_payment: float
    annual_cash_flow: float
    monthly_cash_flow: float
    cap_rate: float
    cash_invested: float
    cash_on_cash: float
    total_appreciation: float
    annual_appreciation: float
    appreciation_rate: float = Field(..., description="Compound annual appreciation")
    years_owned: float
    irr: Optional[float] = None


class PortfolioAnalytics(BaseModel):
    """Annualized portfolio metrics with per-property detail."""

    total_value: float
    total_debt: float
    total_equity: float
    portfolio_ltv: float
    total_annual_income: float
    total_annual_expenses: float
    annual_noi: float
    monthly_noi: float
    portfolio_cap_rate: float = Field(..., description="Annual NOI over total value")
    average_cap_rate: float
    average_cash_on_cash: float
    average_irr: Optional[float] = Field(
        default=None, description="Mean of determinable property IRRs"
    )
    property_count: int
    property_metrics: List[PropertyAnalytics] = Field(default_factory=list)


class PortfolioSummary(BaseModel):
    """Dashboard snapshot of the portfolio."""

    total_value: float
    total_debt: float
    total_equity: float
    ltv: float
    total_monthly_income: float = Field(..., description="Sum of market rents")
    total_monthly_expenses: float = Field(..., description="Expenses in the current month")
    net_cash_flow: float
    property_count: int
    mortgage_count: int


class KpiAlert(BaseModel):
    """A property metric that crossed its threshold."""

    property_id: str
    property_address: str
    kpi_id: str
    kpi_name: str
    actual_value: float
    threshold: float
    severity: Literal["info", "warning"]


class PerformanceEntry(BaseModel):
    property_id: str
    address: str
    score: float
    value: float
    income: float
    expenses: float


class PerformanceComparison(BaseModel):
    """Properties ranked by a metric and split into halves."""

    metric: RankingMetric
    top_performers: List[PerformanceEntry]
    bottom_performers: List[PerformanceEntry]


class PropertyScore(BaseModel):
    """Performance and risk grades for one property."""

    property_id: str
    address: str = ""
    annual_roi: float = Field(
        ..., description="Annual cash flow plus appreciation over cash invested (percent)"
    )
    expense_ratio: float = Field(..., description="Annual expenses over annual income")
    debt_service_coverage: Optional[float] = Field(
        default=None, description="Annual NOI over annual debt service; None without debt"
    )
    performance_score: int = Field(..., ge=0, le=100, description="Higher is better")
    risk_score: int = Field(..., ge=0, le=100, description="Higher is riskier")
    risk_level: RiskLevel


class InvestmentScorecard(BaseModel):
    properties: List[PropertyScore] = Field(default_factory=list)
    average_performance_score: float = 0.0
    average_risk_score: float = 0.0
    high_risk: List[str] = Field(default_factory=list, description="Ids rated High risk")


def years_between(start: Optional[datetime], end: datetime) -> float:
    """Elapsed years (365.25-day years), 0 when the start is unknown or later."""
    if start is None or end <= start:
        return 0.0
    return (end - start).total_seconds() / SECONDS_PER_YEAR


def property_irr_cash_flows(
    cash_invested: float,
    annual_cash_flow: float,
    years_owned: float,
    current_value: float,
    max_years: int = 30,
) -> List[float]:
    """
    Build the IRR cash-flow vector for a held property.

    The initial outlay is followed by one annual cash flow per whole year owned
    (capped at ``max_years``); the current value is added to the last year as
    a terminal sale value.
    """
    terms = int(math.floor(min(years_owned, max_years)))
    flows = [-cash_invested] + [annual_cash_flow] * terms
    if len(flows) > 1:
        flows[-1] += current_value
    return flows


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def _points(value: float, tiers: Sequence[Tuple[float, int]], beats: Callable) -> int:
    for threshold, points in tiers:
        if beats(value, threshold):
            return points
    return 0


def performance_score(
    annual_roi: float, cap_rate: float, ltv: float, monthly_cash_flow: float
) -> int:
    """
    Score a property from 0 to 100.

    ROI (percent) earns up to 40 points, cap rate up to 30, a low LTV up to 20
    and monthly cash flow up to 10. Cap rate and LTV are fractions.
    """
    score = _points(annual_roi, ((20.0, 40), (15.0, 30), (10.0, 20), (5.0, 10)), operator.ge)
    score += _points(cap_rate, ((0.06, 30), (0.05, 25), (0.04, 15), (0.03, 5)), operator.ge)
    score += _points(ltv, ((0.60, 20), (0.70, 15), (0.80, 10), (0.90, 5)), operator.le)
    score += _points(monthly_cash_flow, ((1000.0, 10), (500.0, 7), (0.0, 3)), operator.gt)
    return min(100, score)


def property_risk_score(
    ltv: float,
    monthly_noi: float,
    annual_roi: float,
    annual_noi: float,
    annual_debt_service: float,
) -> int:
    """
    Score a property's risk from 0 to 100 (higher is riskier).

    Leverage, thin or negative NOI, a weak ROI and poor debt service coverage
    each add points. Coverage is not rated when there is no debt service.
    """
    score = _points(ltv, ((0.90, 35), (0.80, 20), (0.70, 10)), operator.gt)
    score += _points(monthly_noi, ((0.0, 40), (500.0, 20), (1000.0, 10)), operator.lt)
    score += _points(annual_roi, ((5.0, 20), (10.0, 10)), operator.lt)
    if annual_debt_service > 0:
        coverage = annual_noi / annual_debt_service
        score += _points(coverage, ((1.2, 15), (1.5, 10)), operator.lt)
    return min(100, score)


def risk_level(score: float) -> RiskLevel:
    if score > 60:
        return "High"
    if score > 30:
        return "Medium"
    return "Low"


def score_property(metrics: PropertyAnalytics) -> PropertyScore:
    """Grade one property from its annualized metrics."""
    annual_roi = (
        _ratio(metrics.annual_cash_flow + metrics.annual_appreciation, metrics.cash_invested)
        * 100
    )
    annual_debt_service = metrics.monthly_mortgage_payment * 12
    risk = property_risk_score(
        metrics.ltv,
        metrics.monthly_noi,
        annual_roi,
        metrics.annual_noi,
        annual_debt_service,
    )
    return PropertyScore(
        property_id=metrics.property_id,
        address=metrics.address,
        annual_roi=annual_roi,
        expense_ratio=_ratio(metrics.annual_expenses, metrics.annual_income),
        debt_service_coverage=metrics.annual_noi / annual_debt_service
        if annual_debt_service > 0
        else None,
        performance_score=performance_score(
            annual_roi, metrics.cap_rate, metrics.ltv, metrics.monthly_cash_flow
        ),
        risk_score=risk,
        risk_level=risk_level(risk),
    )


class PortfolioMetricsCalculator:
    """Calculator for portfolio and per-property performance metrics."""

    def __init__(self, assumptions: Optional[FinancialAssumptions] = None):
        """Initialize the calculator.

        Args:
            assumptions: Financial assumptions (down payment, IRR solver, KPI thresholds)
        """
        self.assumptions = assumptions or DEFAULT_ASSUMPTIONS

    def generate_portfolio_report(
        self,
        properties: Sequence[Property],
        mortgages: Sequence[Mortgage],
        expenses: Sequence[Expense],
        rent_payments: Sequence[RentPayment],
        start: datetime,
        end: datetime,
    ) -> PortfolioReport:
        """
        Calculate portfolio performance over an inclusive window.

        ROI annualizes the window's cash flow by multiplying by 12 whatever the
        window length, so it is a true annual figure only for one-month windows.

        Args:
            properties: Properties in the portfolio
            mortgages: Mortgages, matched to properties by property id
            expenses: Expenses, filtered by ``date``
            rent_payments: Rent payments, filtered by ``paid_date``
            start: Window start (inclusive)
            end: Window end (inclusive)

        Returns:
            PortfolioReport for the window
        """
        by_property = self._mortgages_by_property(mortgages)

        total_value = 0.0
        total_debt = 0.0
        monthly_debt_service = 0.0
        for prop in properties:
            total_value += prop.current_value
            for mortgage in by_property.get(prop.id, []):
                total_debt += mortgage.current_balance
                monthly_debt_service += mortgage.monthly_payment

        total_income = sum(
            p.amount for p in filter_by_date_range(rent_payments, start, end, "paid_date")
        )
        total_expenses = sum(
            e.amount for e in filter_by_date_range(expenses, start, end, "date")
        )

        total_equity = total_value - total_debt
        cash_flow = total_income - total_expenses
        months = months_in_period(start, end)
        total_mortgage_cost = monthly_debt_service * months

        return PortfolioReport(
            start_date=start,
            end_date=end,
            total_value=total_value,
            total_debt=total_debt,
            total_equity=total_equity,
            ltv=_ratio(total_debt, total_value),
            equity_percentage=_ratio(total_equity, total_value),
            total_income=total_income,
            total_expenses=total_expenses,
            cash_flow=cash_flow,
            roi=_ratio(cash_flow, total_value) * 100 * 12,
            months_in_period=months,
            days_in_period=max(0, (end - start).days),
            total_mortgage_cost=total_mortgage_cost,
            cash_flow_after_debt=cash_flow - total_mortgage_cost,
            expense_ratio=_ratio(total_expenses + total_mortgage_cost, total_income),
            property_count=len(properties),
        )

    def generate_property_comparison(
        self,
        properties: Sequence[Property],
        mortgages: Sequence[Mortgage],
        expenses: Sequence[Expense],
        rent_payments: Sequence[RentPayment],
        start: datetime,
        end: datetime,
        as_of: Optional[datetime] = None,
    ) -> List[PropertyMetrics]:
        """
        Calculate window metrics for each property.

        Args:
            properties: Properties to compare
            mortgages: Mortgages, all of a property's mortgages are summed
            expenses: Expenses, filtered by ``date``
            rent_payments: Rent payments, filtered by ``paid_date``
            start: Window start (inclusive)
            end: Window end (inclusive)
            as_of: Moment used for years owned (defaults to ``end``)

        Returns:
            One PropertyMetrics per property, in input order
        """
        as_of = as_of or end
        by_property = self._mortgages_by_property(mortgages)
        period_expenses = filter_by_date_range(expenses, start, end, "date")
        period_payments = filter_by_date_range(rent_payments, start, end, "paid_date")

        results = []
        for prop in properties:
            prop_mortgages = by_property.get(prop.id, [])
            debt = sum(m.current_balance for m in prop_mortgages)
            monthly_payment = sum(m.monthly_payment for m in prop_mortgages)
            income = sum(p.amount for p in records_for_property(period_payments, prop.id))
            spent = sum(e.amount for e in records_for_property(period_expenses, prop.id))

            noi = income - spent
            cash_flow = noi - monthly_payment
            annual_cash_flow = cash_flow * 12
            cash_invested = prop.purchase_price * self.assumptions.down_payment_ratio
            years_owned = years_between(prop.purchase_date, as_of)
            equity = prop.current_value - debt

            flows = property_irr_cash_flows(
                cash_invested,
                annual_cash_flow,
                years_owned,
                prop.current_value,
                self.assumptions.max_irr_years,
            )

            results.append(
                PropertyMetrics(
                    property_id=prop.id,
                    address=prop.address,
                    city=prop.city,
                    value=prop.current_value,
                    purchase_price=prop.purchase_price,
                    debt=debt,
                    equity=equity,
                    equity_percentage=_ratio(equity, prop.current_value),
                    ltv=_ratio(debt, prop.current_value),
                    income=income,
                    expenses=spent,
                    noi=noi,
                    cap_rate=_ratio(noi * 12, prop.purchase_price),
                    monthly_payment=monthly_payment,
                    cash_flow=cash_flow,
                    annual_cash_flow=annual_cash_flow,
                    cash_invested=cash_invested,
                    cash_on_cash=_ratio(annual_cash_flow, cash_invested),
                    roi=_ratio(cash_flow, prop.current_value) * 100 * 12,
                    years_owned=years_owned,
                    irr=irr_or_none(flows, self.assumptions),
                )
            )
        return results

    def calculate_portfolio_metrics(
        self,
        properties: Sequence[Property],
        mortgages: Sequence[Mortgage],
        expenses: Sequence[Expense],
        tenants: Sequence[Tenant],
        as_of: Optional[datetime] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> PortfolioAnalytics:
        """
        Calculate annualized metrics from current tenants and recorded expenses.

        Income is the active tenants' monthly rent times 12. Expenses are all of
        a property's expenses, or only those in [start, end] when both are given.

        Args:
            properties: Properties in the portfolio
            mortgages: Mortgages, summed per property
            expenses: Operating expenses
            tenants: Tenants (only active ones count toward income)
            as_of: Moment used for years owned (defaults to now)
            start: Optional expense window start
            end: Optional expense window end

        Returns:
            PortfolioAnalytics with per-property detail
        """
        as_of = as_of or datetime.now()
        if start is not None and end is not None:
            expenses = filter_by_date_range(expenses, start, end, "date")
        by_property = self._mortgages_by_property(mortgages)

        metrics: List[PropertyAnalytics] = []
        for prop in properties:
            prop_mortgages = by_property.get(prop.id, [])
            balance = sum(m.current_balance for m in prop_mortgages)
            monthly_payment = sum(m.monthly_payment for m in prop_mortgages)
            monthly_rent = sum(
                t.monthly_rent for t in records_for_property(tenants, prop.id) if t.is_active
            )
            annual_income = monthly_rent * 12
            annual_expenses = sum(e.amount for e in records_for_property(expenses, prop.id))

            annual_noi = annual_income - annual_expenses
            annual_cash_flow = annual_noi - monthly_payment * 12
            cash_invested = prop.purchase_price * self.assumptions.down_payment_ratio
            years_owned = years_between(prop.purchase_date, as_of)

            total_appreciation = prop.current_value - prop.purchase_price
            if years_owned > 0 and prop.purchase_price > 0 and prop.current_value > 0:
                appreciation_rate = (prop.current_value / prop.purchase_price) ** (
                    1 / years_owned
                ) - 1
            else:
                appreciation_rate = 0.0

            flows = property_irr_cash_flows(
                cash_invested,
                annual_cash_flow,
                years_owned,
                prop.current_value,
                self.assumptions.max_irr_years,
            )

            metrics.append(
                PropertyAnalytics(
                    property_id=prop.id,
                    address=prop.address,
                    current_value=prop.current_value,
                    purchase_price=prop.purchase_price,
                    total_mortgage_balance=balance,
                    equity=prop.current_value - balance,
                    ltv=_ratio(balance, prop.current_value),
                    monthly_rent=monthly_rent,
                    annual_income=annual_income,
                    annual_expenses=annual_expenses,
                    annual_noi=annual_noi,
                    monthly_noi=annual_noi / 12,
                    monthly_mortgage_payment=monthly_payment,
                    annual_cash_flow=annual_cash_flow,
                    monthly_cash_flow=annual_noi / 12 - monthly_payment,
                    cap_rate=_ratio(annual_noi, prop.purchase_price),
                    cash_invested=cash_invested,
                    cash_on_cash=_ratio(annual_cash_flow, cash_invested),
                    total_appreciation=total_appreciation,
                    annual_appreciation=total_appreciation / years_owned
                    if years_owned > 0
                    else 0.0,
                    appreciation_rate=appreciation_rate,
                    years_owned=years_owned,
                    irr=irr_or_none(flows, self.assumptions),
                )
            )

        total_value = sum(m.current_value for m in metrics)
        total_debt = sum(m.total_mortgage_balance for m in metrics)
        total_income = sum(m.annual_income for m in metrics)
        total_expenses = sum(m.annual_expenses for m in metrics)
        annual_noi = total_income - total_expenses
        irrs = [m.irr for m in metrics if m.irr is not None]

        return PortfolioAnalytics(
            total_value=total_value,
            total_debt=total_debt,
            total_equity=total_value - total_debt,
            portfolio_ltv=_ratio(total_debt, total_value),
            total_annual_income=total_income,
            total_annual_expenses=total_expenses,
            annual_noi=annual_noi,
            monthly_noi=annual_noi / 12,
            portfolio_cap_rate=_ratio(annual_noi, total_value),
            average_cap_rate=_mean([m.cap_rate for m in metrics]),
            average_cash_on_cash=_mean([m.cash_on_cash for m in metrics]),
            average_irr=sum(irrs) / len(irrs) if irrs else None,
            property_count=len(metrics),
            property_metrics=metrics,
        )

    def calculate_summary(
        self,
        properties: Sequence[Property],
        mortgages: Sequence[Mortgage],
        expenses: Sequence[Expense],
        as_of: Optional[datetime] = None,
    ) -> PortfolioSummary:
        """
        Dashboard snapshot: market rent as income, this month's expenses as costs.

        Args:
            properties: Properties in the portfolio
            mortgages: All mortgages (balances are summed regardless of property)
            expenses: Expenses; only those in the calendar month of ``as_of`` count
            as_of: Reference moment (defaults to now)
        """
        as_of = as_of or datetime.now()
        total_value = sum(p.current_value for p in properties)
        total_debt = sum(m.current_balance for m in mortgages)
        monthly_income = sum(p.market_rent for p in properties)
        monthly_expenses = sum(
            e.amount
            for e in expenses
            if e.date is not None
            and e.date.year == as_of.year
            and e.date.month == as_of.month
        )

        return PortfolioSummary(
            total_value=total_value,
            total_debt=total_debt,
            total_equity=total_value - total_debt,
            ltv=_ratio(total_debt, total_value),
            total_monthly_income=monthly_income,
            total_monthly_expenses=monthly_expenses,
            net_cash_flow=monthly_income - monthly_expenses,
            property_count=len(properties),
            mortgage_count=len(mortgages),
        )

    def check_kpi_thresholds(
        self,
        properties: Sequence[Property],
        mortgages: Sequence[Mortgage],
        expenses: Sequence[Expense],
        tenants: Sequence[Tenant],
        as_of: Optional[datetime] = None,
    ) -> List[KpiAlert]:
        """
        Flag properties with negative cash flow, high LTV or a low cap rate.

        Cash flow and cap rate use active tenants' rent and the trailing twelve
        months of expenses before ``as_of``. Properties without a purchase
        price are not rated on cap rate.
        """
        as_of = as_of or datetime.now()
        trailing = filter_by_date_range(expenses, as_of - timedelta(days=365), as_of, "date")
        by_property = self._mortgages_by_property(mortgages)
        a = self.assumptions

        alerts: List[KpiAlert] = []
        for prop in properties:
            prop_mortgages = by_property.get(prop.id, [])
            debt = sum(m.current_balance for m in prop_mortgages)
            monthly_payment = sum(m.monthly_payment for m in prop_mortgages)
            monthly_rent = sum(
                t.monthly_rent for t in records_for_property(tenants, prop.id) if t.is_active
            )
            annual_expenses = sum(e.amount for e in records_for_property(trailing, prop.id))

            checks = [
                (
                    "negative-cf",
                    "Negative Cash Flow",
                    monthly_rent - annual_expenses / 12 - monthly_payment,
                    a.negative_cash_flow_threshold,
                    "below",
                    "warning",
                ),
                (
                    "high-ltv",
                    "High LTV",
                    _ratio(debt, prop.current_value),
                    a.high_ltv_threshold,
                    "above",
                    "warning",
                ),
            ]
            if prop.purchase_price > 0:
                checks.append(
                    (
                        "low-cap",
                        "Low Cap Rate",
                        (monthly_rent * 12 - annual_expenses) / prop.purchase_price,
                        a.low_cap_rate_threshold,
                        "below",
                        "info",
                    )
                )

            for kpi_id, name, actual, threshold, direction, severity in checks:
                triggered = actual < threshold if direction == "below" else actual > threshold
                if triggered:
                    alerts.append(
                        KpiAlert(
                            property_id=prop.id,
                            property_address=prop.address,
                            kpi_id=kpi_id,
                            kpi_name=name,
                            actual_value=actual,
                            threshold=threshold,
                            severity=severity,
                        )
                    )
        return alerts

    def generate_performance_comparison(
        self,
        properties: Sequence[Property],
        mortgages: Sequence[Mortgage],
        expenses: Sequence[Expense],
        rent_payments: Sequence[RentPayment],
        metric: str = "roi",
    ) -> PerformanceComparison:
        """
        Rank properties by ROI (percent), equity or income.

        The top half receives the extra property when the count is odd.
        """
        if metric not in ("roi", "equity", "income"):
            raise InvalidArgumentError(f"Unsupported ranking metric: {metric}")

        by_property = self._mortgages_by_property(mortgages)
        entries = []
        for prop in properties:
            income = sum(p.amount for p in records_for_property(rent_payments, prop.id))
            spent = sum(e.amount for e in records_for_property(expenses, prop.id))
            debt = sum(m.current_balance for m in by_property.get(prop.id, []))

            if metric == "roi":
                score = _ratio(income - spent, prop.current_value) * 100
            elif metric == "equity":
                score = prop.current_value - debt
            else:
                score = income

            entries.append(
                PerformanceEntry(
                    property_id=prop.id,
                    address=prop.address,
                    score=score,
                    value=prop.current_value,
                    income=income,
                    expenses=spent,
                )
            )

        entries.sort(key=lambda entry: entry.score, reverse=True)
        half = math.ceil(len(entries) / 2)
        return PerformanceComparison(
            metric=metric,
            top_performers=entries[:half],
            bottom_performers=entries[half:],
        )

    def generate_investment_scores(
        self,
        properties: Sequence[Property],
        mortgages: Sequence[Mortgage],
        expenses: Sequence[Expense],
        tenants: Sequence[Tenant],
        as_of: Optional[datetime] = None,
    ) -> InvestmentScorecard:
        """
        Grade every property's performance and risk.

        Scores are built on the annualized metrics of
        ``calculate_portfolio_metrics`` with the trailing twelve months of
        expenses before ``as_of``.
        """
        as_of = as_of or datetime.now()
        analytics = self.calculate_portfolio_metrics(
            properties,
            mortgages,
            expenses,
            tenants,
            as_of=as_of,
            start=as_of - timedelta(days=365),
            end=as_of,
        )
        scores = [score_property(m) for m in analytics.property_metrics]
        return InvestmentScorecard(
            properties=scores,
            average_performance_score=_mean([s.performance_score for s in scores]),
            average_risk_score=_mean([s.risk_score for s in scores]),
            high_risk=[s.property_id for s in scores if s.risk_level == "High"],
        )

    @staticmethod
    def _mortgages_by_property(mortgages: Sequence[Mortgage]) -> Dict[str, List[Mortgage]]:
        grouped: Dict[str, List[Mortgage]] = {}
        for mortgage in mortgages or []:
            if not mortgage.property_id:
                continue
            grouped.setdefault(mortgage.property_id, []).append(mortgage)
        return grouped


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0

