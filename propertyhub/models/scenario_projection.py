"""
What-if projections for the whole portfolio.

A scenario grows rent, expenses and property values at constant annual rates
and walks the combined mortgage balance down with the current monthly
payments. The final month is summarized, scored for risk and turned into
recommendations, and several scenarios can be compared side by side.

Growth rates and LTV are fractions. ``percent_growth`` is the one value
reported in percent.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .assumptions import DEFAULT_ASSUMPTIONS, FinancialAssumptions
from .exceptions import InvalidArgumentError
from .mortgage_amortization import AmortizationCalculator
from .portfolio_metrics import RiskLevel, risk_level
from .records import Expense, Mortgage, Property, RentPayment, records_for_property
from .time_periods import filter_by_date_range

logger = logging.getLogger(__name__)

SCENARIO_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "conservative": {
        "name": "Conservative",
        "description": "Lower growth, higher stability focus",
        "rent_growth": 0.02,
        "expense_growth": 0.03,
        "property_appreciation": 0.02,
    },
    "moderate": {
        "name": "Moderate",
        "description": "Balanced growth and stability",
        "rent_growth": 0.035,
        "expense_growth": 0.025,
        "property_appreciation": 0.035,
    },
    "aggressive": {
        "name": "Aggressive",
        "description": "Higher growth, optimization focus",
        "rent_growth": 0.05,
        "expense_growth": 0.02,
        "property_appreciation": 0.05,
    },
}


class ScenarioParameters(BaseModel):
    """Growth assumptions for one projection."""

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    name: str = "Custom"
    description: str = ""
    template: str = "custom"
    rent_growth: float = Field(..., gt=-1, description="Annual rent growth")
    expense_growth: float = Field(..., gt=-1, description="Annual expense growth")
    property_appreciation: float = Field(..., gt=-1, description="Annual value growth")
    months: int = Field(..., ge=1, le=600, description="Projection horizon")
    debt_rate: float = Field(..., ge=0, le=100, description="Annual rate in percent")


class PortfolioBaseline(BaseModel):
    """Current totals the projection starts from."""

    total_value: float
    total_debt: float
    annual_rent: float
    annual_expenses: float
    monthly_payment: float = Field(..., description="Combined mortgage payment")
    property_count: int

    @property
    def monthly_noi(self) -> float:
        return (self.annual_rent - self.annual_expenses) / 12


class ProjectionPoint(BaseModel):
    month: int
    years: float
    value: float
    debt: float
    equity: float
    annual_rent: float
    annual_expenses: float
    monthly_noi: float
    ltv: float
    cap_rate: float = Field(..., description="Annual NOI over projected value")


class ScenarioSummary(BaseModel):
    start_value: float
    end_value: float
    total_appreciation: float
    percent_growth: float
    start_debt: float
    end_debt: float
    debt_reduction: float
    start_equity: float
    end_equity: float
    equity_growth: float
    start_ltv: float
    end_ltv: float
    ltv_improvement: float = Field(..., description="Start LTV minus end LTV")
    debt_amortizes: bool = Field(
        ..., description="False when payments never cover the interest on the debt"
    )


class CashFlowTrend(BaseModel):
    start_monthly_noi: float
    end_monthly_noi: float
    total_noi: float = Field(..., description="NOI summed over every projected month")


class ScenarioRecommendation(BaseModel):
    type: str
    message: str
    priority: Literal["high", "medium"]


class RiskFactor(BaseModel):
    name: str
    impact: RiskLevel


class ScenarioRisk(BaseModel):
    score: int = Field(..., ge=0, le=100, description="Higher is riskier")
    level: RiskLevel
    factors: List[RiskFactor]


class ScenarioAnalysis(BaseModel):
    """A projection with its summary, risk and recommendations."""

    parameters: ScenarioParameters
    projections: List[ProjectionPoint]
    summary: ScenarioSummary
    cash_flow: CashFlowTrend
    recommendations: List[ScenarioRecommendation] = Field(default_factory=list)
    risk: ScenarioRisk


class ScenarioOutcome(BaseModel):
    """Final month of one scenario, for side-by-side comparison."""

    name: str
    template: str
    end: ProjectionPoint
    risk_score: int
    risk_level: RiskLevel


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


class ScenarioProjector:
    """Projector for portfolio growth scenarios."""

    def __init__(self, assumptions: Optional[FinancialAssumptions] = None):
        self.assumptions = assumptions or DEFAULT_ASSUMPTIONS

    def resolve_parameters(
        self, overrides: Optional[Dict[str, Any]] = None
    ) -> ScenarioParameters:
        """
        Build scenario parameters from a template name and overrides.

        Args:
            overrides: Parameter values; ``template`` selects conservative,
                moderate or aggressive growth rates as the starting point

        Returns:
            Validated ScenarioParameters

        Raises:
            InvalidArgumentError: If the template is unknown
        """
        values = dict(overrides or {})
        key = str(values.pop("template", None) or "custom").strip().lower()

        a = self.assumptions
        params: Dict[str, Any] = {
            "rent_growth": a.scenario_rent_growth,
            "expense_growth": a.scenario_expense_growth,
            "property_appreciation": a.scenario_appreciation,
            "months": a.scenario_months,
            "debt_rate": a.scenario_debt_rate,
        }
        if key != "custom":
            if key not in SCENARIO_TEMPLATES:
                raise InvalidArgumentError(f"Unknown scenario template: {key}")
            params.update(SCENARIO_TEMPLATES[key])
        params["template"] = key
        params.update({k: v for k, v in values.items() if v is not None})
        return ScenarioParameters.model_validate(params)

    def build_baseline(
        self,
        properties: Sequence[Property],
        mortgages: Sequence[Mortgage],
        expenses: Sequence[Expense],
        rent_payments: Sequence[RentPayment],
        as_of: Optional[datetime] = None,
    ) -> PortfolioBaseline:
        """
        Total the portfolio's value, debt and trailing twelve months of cash.

        Rent and expenses are the records dated in the year before ``as_of``.
        Records that belong to no listed property are left out.
        """
        as_of = as_of or datetime.now()
        year_ago = as_of - timedelta(days=365)
        rents = filter_by_date_range(rent_payments, year_ago, as_of, "paid_date")
        costs = filter_by_date_range(expenses, year_ago, as_of, "date")

        value = debt = payment = rent = spent = 0.0
        for prop in properties:
            loans = records_for_property(mortgages or [], prop.id)
            value += prop.current_value
            debt += sum(m.current_balance for m in loans)
            payment += sum(m.monthly_payment for m in loans)
            rent += sum(r.amount for r in records_for_property(rents, prop.id))
            spent += sum(e.amount for e in records_for_property(costs, prop.id))

        return PortfolioBaseline(
            total_value=value,
            total_debt=debt,
            annual_rent=rent,
            annual_expenses=spent,
            monthly_payment=payment,
            property_count=len(properties),
        )

    def project(
        self, baseline: PortfolioBaseline, params: ScenarioParameters
    ) -> List[ProjectionPoint]:
        """
        Project month 0 through ``params.months``.

        Values grow by compounding the annual rates over fractional years. The
        debt is reduced each month by the principal share of the combined
        payment at ``params.debt_rate``. Unpaid interest is not capitalized,
        so the debt never grows.
        """
        debt = baseline.total_debt
        points: List[ProjectionPoint] = []
        for month in range(params.months + 1):
            if month > 0:
                step = AmortizationCalculator.amortization_month(
                    debt, params.debt_rate, params.months, payment=baseline.monthly_payment
                )
                debt = max(0.0, debt - step.principal)

            years = month / 12
            value = baseline.total_value * (1 + params.property_appreciation) ** years
            rent = baseline.annual_rent * (1 + params.rent_growth) ** years
            costs = baseline.annual_expenses * (1 + params.expense_growth) ** years
            points.append(
                ProjectionPoint(
                    month=month,
                    years=years,
                    value=value,
                    debt=debt,
                    equity=value - debt,
                    annual_rent=rent,
                    annual_expenses=costs,
                    monthly_noi=(rent - costs) / 12,
                    ltv=_ratio(debt, value),
                    cap_rate=_ratio(rent - costs, value),
                )
            )
        return points

    @staticmethod
    def assess_risk(end: ProjectionPoint) -> ScenarioRisk:
        """Score the final month: leverage and thin NOI add to a base rate risk."""
        score = 10
        if end.ltv > 0.85:
            score += 30
        elif end.ltv > 0.75:
            score += 15
        if end.monthly_noi < 0:
            score += 40
        elif end.monthly_noi < 500:
            score += 15
        score = min(100, score)

        if end.ltv > 0.85:
            leverage: RiskLevel = "High"
        elif end.ltv > 0.75:
            leverage = "Medium"
        else:
            leverage = "Low"
        return ScenarioRisk(
            score=score,
            level=risk_level(score),
            factors=[
                RiskFactor(name="Leverage Risk", impact=leverage),
                RiskFactor(
                    name="Cash Flow Risk", impact="High" if end.monthly_noi < 500 else "Low"
                ),
                RiskFactor(name="Rate Risk", impact="Medium"),
            ],
        )

    @staticmethod
    def recommend(
        summary: ScenarioSummary, cash_flow: CashFlowTrend, months: int
    ) -> List[ScenarioRecommendation]:
        recommendations = []
        if summary.percent_growth > 5:
            recommendations.append(
                ScenarioRecommendation(
                    type="strong_appreciation",
                    message="Strong property appreciation projected. "
                    "Consider leveraging equity for new acquisitions.",
                    priority="high",
                )
            )
        if summary.ltv_improvement > 0.10:
            recommendations.append(
                ScenarioRecommendation(
                    type="ltv_improvement",
                    message="Significant LTV improvement. "
                    "Portfolio leverage position will strengthen.",
                    priority="medium",
                )
            )
        start, end = cash_flow.start_monthly_noi, cash_flow.end_monthly_noi
        if end > start:
            if start > 0:
                growth = f"grow {(end - start) / start * 100:.1f}%"
            else:
                growth = f"improve by ${end - start:,.0f} a month"
            recommendations.append(
                ScenarioRecommendation(
                    type="cash_flow_growth",
                    message=f"Cash flow expected to {growth}. Strong ongoing income projection.",
                    priority="medium",
                )
            )
        if months >= 60 and summary.end_ltv > 0.75:
            recommendations.append(
                ScenarioRecommendation(
                    type="refinance_opportunity",
                    message="Consider refinancing opportunities to reduce debt burden.",
                    priority="high",
                )
            )
        return recommendations

    def analyze(
        self, baseline: PortfolioBaseline, params: ScenarioParameters
    ) -> ScenarioAnalysis:
        """Project a scenario and summarize where it ends up."""
        projections = self.project(baseline, params)
        end = projections[-1]

        first_step = AmortizationCalculator.amortization_month(
            baseline.total_debt,
            params.debt_rate,
            params.months,
            payment=baseline.monthly_payment,
        )
        start_ltv = _ratio(baseline.total_debt, baseline.total_value)
        start_equity = baseline.total_value - baseline.total_debt
        summary = ScenarioSummary(
            start_value=baseline.total_value,
            end_value=end.value,
            total_appreciation=end.value - baseline.total_value,
            percent_growth=_ratio(end.value - baseline.total_value, baseline.total_value) * 100,
            start_debt=baseline.total_debt,
            end_debt=end.debt,
            debt_reduction=baseline.total_debt - end.debt,
            start_equity=start_equity,
            end_equity=end.equity,
            equity_growth=end.equity - start_equity,
            start_ltv=start_ltv,
            end_ltv=end.ltv,
            ltv_improvement=start_ltv - end.ltv,
            debt_amortizes=baseline.total_debt <= 0 or first_step.covers_interest,
        )
        cash_flow = CashFlowTrend(
            start_monthly_noi=baseline.monthly_noi,
            end_monthly_noi=end.monthly_noi,
            total_noi=sum(p.monthly_noi for p in projections[1:]),
        )
        if not summary.debt_amortizes:
            logger.warning(
                f"Scenario {params.name}: payments of {baseline.monthly_payment} "
                f"do not cover interest on {baseline.total_debt}"
            )

        return ScenarioAnalysis(
            parameters=params,
            projections=projections,
            summary=summary,
            cash_flow=cash_flow,
            recommendations=self.recommend(summary, cash_flow, params.months),
            risk=self.assess_risk(end),
        )

    @staticmethod
    def compare(analyses: Sequence[ScenarioAnalysis]) -> List[ScenarioOutcome]:
        """Line up the final month of each analysed scenario."""
        return [
            ScenarioOutcome(
                name=a.parameters.name,
                template=a.parameters.template,
                end=a.projections[-1],
                risk_score=a.risk.score,
                risk_level=a.risk.level,
            )
            for a in analyses
        ]
