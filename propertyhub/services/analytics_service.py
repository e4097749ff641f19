"""
Analytics service for building dashboard reports from raw store records.

This service coordinates the calculation engines for one request: it parses
the raw record dictionaries handed over by the record store, resolves the
reporting window and assembles the portfolio report, property comparison,
expense breakdown and monthly trend. Refinance, debt paydown and tax reports
are separate entry points, as are growth scenarios and investment scores.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from propertyhub.models.assumptions import DEFAULT_ASSUMPTIONS, FinancialAssumptions
from propertyhub.models.debt_paydown import (
    DebtPaydownStrategist,
    StrategyComparison,
    loans_from_mortgages,
)
from propertyhub.models.exceptions import InvalidArgumentError
from propertyhub.models.portfolio_metrics import (
    InvestmentScorecard,
    KpiAlert,
    PortfolioMetricsCalculator,
    PortfolioReport,
    PropertyMetrics,
)
from propertyhub.models.records import (
    Expense,
    InsurancePolicy,
    Mortgage,
    Property,
    RentPayment,
    Tenant,
)
from propertyhub.models.refinance import (
    RefinanceAnalyzer,
    RefinanceComparison,
    RefinanceScenario,
)
from propertyhub.models.renewals import (
    LeaseExpiration,
    PolicyRenewal,
    RenewalMonitor,
    premium_totals_by_property,
)
from propertyhub.models.scenario_projection import (
    SCENARIO_TEMPLATES,
    PortfolioBaseline,
    ScenarioAnalysis,
    ScenarioOutcome,
    ScenarioProjector,
)
from propertyhub.models.tax_report import (
    DepreciationEntry,
    TaxDeductionReport,
    TaxReportGenerator,
    TaxSummary,
)
from propertyhub.models.time_periods import (
    DateRange,
    ExpenseCategorySummary,
    ReportRequest,
    TrendMonth,
    date_range,
    expense_breakdown,
    monthly_trend,
)

logger = logging.getLogger(__name__)

Rows = Optional[Sequence[Dict[str, Any]]]


class AnalyticsReport(BaseModel):
    """Everything the analytics dashboard shows for one window."""

    window: DateRange
    portfolio: PortfolioReport
    properties: List[PropertyMetrics] = Field(default_factory=list)
    expense_breakdown: List[ExpenseCategorySummary] = Field(default_factory=list)
    trend: List[TrendMonth] = Field(default_factory=list)
    alerts: List[KpiAlert] = Field(default_factory=list)


class TaxReport(BaseModel):
    depreciation: List[DepreciationEntry]
    deductions: TaxDeductionReport
    summary: TaxSummary


class RenewalReport(BaseModel):
    """Policies and leases running out, soonest first."""

    insurance: List[PolicyRenewal] = Field(default_factory=list)
    leases: List[LeaseExpiration] = Field(default_factory=list)
    annual_premiums: Dict[str, float] = Field(default_factory=dict)


class ScenarioReport(BaseModel):
    """Growth scenarios projected from one baseline."""

    baseline: PortfolioBaseline
    scenarios: List[ScenarioAnalysis] = Field(default_factory=list)
    comparison: List[ScenarioOutcome] = Field(default_factory=list)


class AnalyticsService:
    """Service for running analytics over snapshots of store records."""

    def __init__(self, assumptions: Optional[FinancialAssumptions] = None) -> None:
        """Initialize the analytics service."""
        self.assumptions = assumptions or DEFAULT_ASSUMPTIONS
        self.metrics = PortfolioMetricsCalculator(self.assumptions)
        self.refinance_analyzer = RefinanceAnalyzer(self.assumptions)
        self.tax_reports = TaxReportGenerator(self.assumptions)
        self.renewal_monitor = RenewalMonitor(self.assumptions)
        self.projector = ScenarioProjector(self.assumptions)
        self.logger = logging.getLogger(__name__)

    def build_report(
        self,
        properties: Rows,
        mortgages: Rows = None,
        expenses: Rows = None,
        rent_payments: Rows = None,
        tenants: Rows = None,
        request: Optional[ReportRequest] = None,
        now: Optional[datetime] = None,
    ) -> AnalyticsReport:
        """Build the analytics report for a period.

        Args:
            properties: Property rows
            mortgages: Mortgage rows
            expenses: Expense rows
            rent_payments: Rent payment rows
            tenants: Tenant rows (used for KPI alerts)
            request: Reporting period (defaults to year-to-date)
            now: Current moment (defaults to now)

        Returns:
            AnalyticsReport for the resolved window
        """
        request = request or ReportRequest()
        try:
            window = date_range(request, now)
            self.logger.info(
                f"Building {request.period} report for {window.start_date:%Y-%m-%d} "
                f"to {window.end_date:%Y-%m-%d}"
            )

            props = Property.from_rows(properties)
            loans = Mortgage.from_rows(mortgages)
            costs = Expense.from_rows(expenses)
            payments = RentPayment.from_rows(rent_payments)
            occupants = Tenant.from_rows(tenants)

            if not props:
                self.logger.warning("No properties supplied; report will be empty")

            start, end = window.start_date, window.end_date
            report = AnalyticsReport(
                window=window,
                portfolio=self.metrics.generate_portfolio_report(
                    props, loans, costs, payments, start, end
                ),
                properties=self.metrics.generate_property_comparison(
                    props, loans, costs, payments, start, end
                ),
                expense_breakdown=expense_breakdown(costs, start, end),
                trend=monthly_trend(costs, payments, start, end, loans),
                alerts=self.metrics.check_kpi_thresholds(
                    props, loans, costs, occupants, end
                ),
            )

            self.logger.info(
                f"Report built for {len(props)} properties "
                f"with {len(report.alerts)} alerts"
            )
            return report

        except Exception as e:
            self.logger.error(f"Report for period {request.period} failed: {str(e)}")
            raise

    def refinance(
        self,
        mortgage: Dict[str, Any],
        scenarios: Optional[Sequence[Dict[str, Any]]] = None,
    ) -> RefinanceComparison:
        """Compare refinance scenarios (or the default ones) for a mortgage row."""
        loan = Mortgage.model_validate(mortgage)
        offers = [RefinanceScenario.model_validate(s) for s in scenarios or []]
        self.logger.info(
            f"Comparing {len(offers) or 'default'} refinance scenarios "
            f"for mortgage {loan.id}"
        )
        return self.refinance_analyzer.compare(loan, offers or None)

    def debt_paydown(
        self, mortgages: Rows, extra_payment: float, rollover: bool = False
    ) -> StrategyComparison:
        """Compare snowball and avalanche paydown of the given mortgage rows."""
        loans = loans_from_mortgages(
            Mortgage.from_rows(mortgages), self.assumptions.default_term_months
        )
        self.logger.info(
            f"Comparing paydown strategies for {len(loans)} loans, extra {extra_payment}"
        )
        strategist = DebtPaydownStrategist(self.assumptions, rollover=rollover)
        return strategist.compare_strategies(loans, extra_payment)

    def tax_report(
        self, properties: Rows, mortgages: Rows = None, expenses: Rows = None
    ) -> TaxReport:
        """Depreciation schedule, deduction report and tax summary."""
        props = Property.from_rows(properties)
        loans = Mortgage.from_rows(mortgages)
        costs = Expense.from_rows(expenses)
        return TaxReport(
            depreciation=self.tax_reports.generate_depreciation_schedule(props),
            deductions=self.tax_reports.generate_tax_deduction_report(costs, props),
            summary=self.tax_reports.generate_tax_summary(props, loans, costs),
        )

    def renewals(
        self,
        policies: Rows,
        tenants: Rows = None,
        as_of: Optional[datetime] = None,
    ) -> RenewalReport:
        """Insurance renewals and lease expirations as of a moment."""
        coverage = InsurancePolicy.from_rows(policies)
        report = RenewalReport(
            insurance=self.renewal_monitor.insurance_renewals(coverage, as_of),
            leases=self.renewal_monitor.lease_expirations(Tenant.from_rows(tenants), as_of),
            annual_premiums=premium_totals_by_property(coverage),
        )
        expired = [r.policy_id for r in report.insurance if r.status == "expired"]
        if expired:
            self.logger.warning(f"Expired insurance policies: {', '.join(expired)}")
        return report

    def scenarios(
        self,
        properties: Rows,
        mortgages: Rows = None,
        expenses: Rows = None,
        rent_payments: Rows = None,
        scenarios: Optional[Sequence[Dict[str, Any]]] = None,
        as_of: Optional[datetime] = None,
    ) -> ScenarioReport:
        """Project growth scenarios (the three templates by default).

        Args:
            properties: Property rows
            mortgages: Mortgage rows
            expenses: Expense rows
            rent_payments: Rent payment rows
            scenarios: Parameter overrides, one dict per scenario
            as_of: End of the trailing year the baseline is built from

        Returns:
            ScenarioReport with one analysis per scenario
        """
        if scenarios and not all(isinstance(s, dict) for s in scenarios):
            raise InvalidArgumentError("Each scenario must be an object")
        requested = list(scenarios or [{"template": key} for key in SCENARIO_TEMPLATES])

        try:
            params = [self.projector.resolve_parameters(s) for s in requested]
            baseline = self.projector.build_baseline(
                Property.from_rows(properties),
                Mortgage.from_rows(mortgages),
                Expense.from_rows(expenses),
                RentPayment.from_rows(rent_payments),
                as_of,
            )
            self.logger.info(
                f"Projecting {len(params)} scenarios for "
                f"{baseline.property_count} properties"
            )
            analyses = [self.projector.analyze(baseline, p) for p in params]
            return ScenarioReport(
                baseline=baseline,
                scenarios=analyses,
                comparison=self.projector.compare(analyses),
            )

        except Exception as e:
            self.logger.error(f"Scenario projection failed: {str(e)}")
            raise

    def investment_scores(
        self,
        properties: Rows,
        mortgages: Rows = None,
        expenses: Rows = None,
        tenants: Rows = None,
        as_of: Optional[datetime] = None,
    ) -> InvestmentScorecard:
        """Performance and risk scores for every property."""
        scorecard = self.metrics.generate_investment_scores(
            Property.from_rows(properties),
            Mortgage.from_rows(mortgages),
            Expense.from_rows(expenses),
            Tenant.from_rows(tenants),
            as_of,
        )
        if scorecard.high_risk:
            self.logger.warning(f"High risk properties: {', '.join(scorecard.high_risk)}")
        return scorecard
