"""Calculation engines and data models for portfolio analytics."""

from .assumptions import DEFAULT_ASSUMPTIONS, FinancialAssumptions
from .debt_paydown import (
    DebtPaydownStrategist,
    Loan,
    LoanPayoff,
    PayoffStatus,
    StrategyComparison,
    StrategyResult,
    loans_from_mortgages,
    simulate_payoff,
)
from .exceptions import AnalyticsError, InvalidArgumentError
from .irr import calculate_irr, calculate_npv, is_determinable
from .mortgage_amortization import (
    AmortizationCalculator,
    AmortizationStep,
    ScheduleRow,
    monthly_rate_from_annual_percent,
)
from .portfolio_metrics import (
    InvestmentScorecard,
    KpiAlert,
    PerformanceComparison,
    PortfolioAnalytics,
    PortfolioMetricsCalculator,
    PortfolioReport,
    PortfolioSummary,
    PropertyAnalytics,
    PropertyMetrics,
)
from .records import (
    Expense,
    InsurancePolicy,
    Mortgage,
    Property,
    RentPayment,
    Tenant,
)
from .refinance import (
    RefinanceAnalyzer,
    RefinanceComparison,
    RefinanceResult,
    RefinanceScenario,
)
from .renewals import RenewalMonitor
from .scenario_projection import ScenarioAnalysis, ScenarioParameters, ScenarioProjector
from .tax_report import TaxReportGenerator
from .time_periods import (
    DateRange,
    ReportRequest,
    TrendMonth,
    date_range,
    expense_breakdown,
    filter_by_date_range,
    monthly_trend,
)

__all__ = [
    "DEFAULT_ASSUMPTIONS",
    "FinancialAssumptions",
    "AnalyticsError",
    "InvalidArgumentError",
    "Property",
    "Mortgage",
    "Expense",
    "RentPayment",
    "Tenant",
    "InsurancePolicy",
    "AmortizationCalculator",
    "AmortizationStep",
    "ScheduleRow",
    "monthly_rate_from_annual_percent",
    "calculate_irr",
    "calculate_npv",
    "is_determinable",
    "PortfolioMetricsCalculator",
    "PortfolioReport",
    "PortfolioSummary",
    "PortfolioAnalytics",
    "PropertyAnalytics",
    "PropertyMetrics",
    "KpiAlert",
    "PerformanceComparison",
    "InvestmentScorecard",
    "ReportRequest",
    "DateRange",
    "TrendMonth",
    "date_range",
    "filter_by_date_range",
    "monthly_trend",
    "expense_breakdown",
    "RefinanceAnalyzer",
    "RefinanceScenario",
    "RefinanceResult",
    "RefinanceComparison",
    "DebtPaydownStrategist",
    "Loan",
    "LoanPayoff",
    "PayoffStatus",
    "StrategyResult",
    "StrategyComparison",
    "loans_from_mortgages",
    "simulate_payoff",
    "TaxReportGenerator",
    "RenewalMonitor",
    "ScenarioProjector",
    "ScenarioParameters",
    "ScenarioAnalysis",
]
