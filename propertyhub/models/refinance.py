"""
Refinance scenario analysis.

Compares a mortgage's current payment with candidate rate/term/closing-cost
scenarios: new payment, monthly savings, break-even month, total savings over
the current loan's remaining term and a Good / Marginal / Poor recommendation.
"""

import logging
import math
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .assumptions import DEFAULT_ASSUMPTIONS, FinancialAssumptions
from .mortgage_amortization import (
    AmortizationCalculator,
    ScheduleRow,
    monthly_rate_from_annual_percent,
)
from .records import Mortgage

logger = logging.getLogger(__name__)

Recommendation = Literal["Current", "Good", "Marginal", "Poor"]


class RefinanceScenario(BaseModel):
    """A candidate refinance offer."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", description="Scenario label")
    rate: float = Field(..., ge=0, le=100, description="Annual rate in percent")
    term_years: int = Field(..., ge=1, le=50, description="New loan term in years")
    closing_costs: float = Field(default=0.0, ge=0, description="Closing costs")


class RefinanceResult(BaseModel):
    """Outcome of one scenario against the current loan."""

    model_config = ConfigDict(frozen=True)

    name: str
    rate: float
    term_years: Optional[int] = None
    closing_costs: float = 0.0
    monthly_payment: float
    monthly_savings: float
    break_even_months: float = Field(
        ..., description="Months to recoup closing costs; +inf when savings <= 0"
    )
    total_savings: float = Field(
        ..., description="Savings over the current remaining term less closing costs"
    )
    recommendation: Recommendation

    @computed_field
    @property
    def breaks_even(self) -> bool:
        return math.isfinite(self.break_even_months)


class RefinanceComparison(BaseModel):
    """Scenario results with the current loan as the first row."""

    current_balance: float
    current_rate: float
    current_payment: float
    remaining_term_months: int
    scenarios: List[RefinanceResult]
    best_scenario: Optional[RefinanceResult] = None
    average_monthly_savings: float = 0.0


class AmortizationPreview(BaseModel):
    """First and last year of a scenario's new schedule."""

    scenario: RefinanceScenario
    first_year: List[ScheduleRow]
    last_year: List[ScheduleRow]


class RefinanceAnalyzer:
    """Analyzer for refinance scenarios."""

    def __init__(self, assumptions: Optional[FinancialAssumptions] = None):
        self.assumptions = assumptions or DEFAULT_ASSUMPTIONS

    def remaining_term(self, mortgage: Mortgage) -> int:
        """Remaining months on a mortgage, falling back to the default term."""
        return mortgage.remaining_term_months or self.assumptions.default_term_months

    def current_payment(self, mortgage: Mortgage) -> float:
        """
        Recompute the current level payment from balance, rate and remaining term.

        The stored ``monthly_payment`` may include escrow or be stale, so it is
        not used for comparisons.
        """
        return AmortizationCalculator.monthly_payment(
            mortgage.current_balance,
            monthly_rate_from_annual_percent(mortgage.interest_rate),
            self.remaining_term(mortgage),
        )

    def recommend(
        self, break_even_months: float, total_savings: float, remaining_term: int
    ) -> Recommendation:
        """
        Classify a scenario.

        Good: total savings above the floor and break-even inside
        ``refinance_good_break_even_ratio`` of the remaining term.
        Marginal: total savings above the floor but a late break-even.
        Poor: everything else.
        """
        if total_savings <= self.assumptions.refinance_min_total_savings:
            return "Poor"
        cutoff = self.assumptions.refinance_good_break_even_ratio * remaining_term
        if break_even_months < cutoff:
            return "Good"
        return "Marginal"

    def analyze_scenario(
        self, mortgage: Mortgage, scenario: RefinanceScenario
    ) -> RefinanceResult:
        """
        Evaluate one scenario against the current loan.

        Args:
            mortgage: Current mortgage
            scenario: Candidate rate, term and closing costs

        Returns:
            RefinanceResult for the scenario
        """
        remaining = self.remaining_term(mortgage)
        new_payment = AmortizationCalculator.monthly_payment(
            mortgage.current_balance,
            monthly_rate_from_annual_percent(scenario.rate),
            scenario.term_years * 12,
        )
        monthly_savings = self.current_payment(mortgage) - new_payment

        if monthly_savings > 0:
            break_even = float(math.ceil(scenario.closing_costs / monthly_savings))
        else:
            break_even = math.inf

        total_savings = monthly_savings * remaining - scenario.closing_costs

        return RefinanceResult(
            name=scenario.name or f"{scenario.rate}% / {scenario.term_years}yr",
            rate=scenario.rate,
            term_years=scenario.term_years,
            closing_costs=scenario.closing_costs,
            monthly_payment=new_payment,
            monthly_savings=monthly_savings,
            break_even_months=break_even,
            total_savings=total_savings,
            recommendation=self.recommend(break_even, total_savings, remaining),
        )

    def generate_refinance_scenarios(
        self, mortgage: Mortgage, scenarios: Sequence[RefinanceScenario]
    ) -> List[RefinanceResult]:
        """Evaluate scenarios in order, without the baseline row."""
        return [self.analyze_scenario(mortgage, s) for s in scenarios]

    def default_scenarios(self, mortgage: Mortgage) -> List[RefinanceScenario]:
        """Three starter offers: rate -0.5% and -1.0% over 30 years, -0.5% over 20."""
        closing = self.assumptions.default_closing_costs
        rate = mortgage.interest_rate
        offers = [(0.5, 30), (1.0, 30), (0.5, 20)]
        return [
            RefinanceScenario(
                name=f"Scenario {i}",
                rate=max(2.0, rate - cut),
                term_years=years,
                closing_costs=closing,
            )
            for i, (cut, years) in enumerate(offers, start=1)
        ]

    def compare(
        self,
        mortgage: Mortgage,
        scenarios: Optional[Sequence[RefinanceScenario]] = None,
    ) -> RefinanceComparison:
        """
        Compare scenarios (default ones when none are given) with the current loan.

        The best scenario is the "Good" one with the largest total savings.
        """
        scenarios = list(scenarios) if scenarios else self.default_scenarios(mortgage)
        current_payment = self.current_payment(mortgage)
        remaining = self.remaining_term(mortgage)

        baseline = RefinanceResult(
            name="Current",
            rate=mortgage.interest_rate,
            term_years=None,
            closing_costs=0.0,
            monthly_payment=current_payment,
            monthly_savings=0.0,
            break_even_months=0.0,
            total_savings=0.0,
            recommendation="Current",
        )
        results = self.generate_refinance_scenarios(mortgage, scenarios)

        good = [r for r in results if r.recommendation == "Good"]
        best = max(good, key=lambda r: r.total_savings) if good else None
        average = (
            sum(r.monthly_savings for r in results) / len(results) if results else 0.0
        )

        if best is None:
            logger.info(
                "No refinance scenario qualifies as Good for mortgage %s", mortgage.id
            )

        return RefinanceComparison(
            current_balance=mortgage.current_balance,
            current_rate=mortgage.interest_rate,
            current_payment=current_payment,
            remaining_term_months=remaining,
            scenarios=[baseline] + results,
            best_scenario=best,
            average_monthly_savings=average,
        )

    def amortization_preview(
        self, mortgage: Mortgage, scenario: RefinanceScenario, months: int = 12
    ) -> AmortizationPreview:
        """First and last ``months`` rows of the refinanced loan's schedule."""
        schedule = AmortizationCalculator.generate_amortization_schedule(
            mortgage.current_balance, scenario.rate, scenario.term_years * 12
        )
        return AmortizationPreview(
            scenario=scenario,
            first_year=schedule[:months],
            last_year=schedule[-months:] if schedule else [],
        )
