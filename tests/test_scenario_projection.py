"""
Tests for portfolio growth scenarios.

This module tests parameter resolution from templates, the trailing-year
baseline, the month-by-month projection with its debt walk, the risk score
and the recommendations.
"""

import math
from datetime import datetime

import pytest
from pydantic import ValidationError

from propertyhub.models.assumptions import FinancialAssumptions
from propertyhub.models.exceptions import InvalidArgumentError
from propertyhub.models.records import Property
from propertyhub.models.scenario_projection import (
    SCENARIO_TEMPLATES,
    PortfolioBaseline,
    ProjectionPoint,
    ScenarioProjector,
)


@pytest.fixture
def projector():
    return ScenarioProjector()


@pytest.fixture
def baseline(projector, properties, mortgages, expenses, rent_payments, as_of):
    return projector.build_baseline(properties, mortgages, expenses, rent_payments, as_of)


def _point(ltv, monthly_noi):
    return ProjectionPoint(
        month=60,
        years=5.0,
        value=100000,
        debt=100000 * ltv,
        equity=100000 * (1 - ltv),
        annual_rent=0,
        annual_expenses=0,
        monthly_noi=monthly_noi,
        ltv=ltv,
        cap_rate=0,
    )


class TestResolveParameters:
    """Test cases for building scenario parameters."""

    def test_defaults_come_from_assumptions(self, projector):
        """Test that a bare scenario uses the configured growth rates."""
        params = projector.resolve_parameters()

        assert params.template == "custom"
        assert params.rent_growth == 0.035
        assert params.expense_growth == 0.025
        assert params.property_appreciation == 0.035
        assert params.months == 60
        assert params.debt_rate == 5.0

    def test_configured_defaults(self):
        """Test that overridden assumptions change the defaults."""
        assumptions = FinancialAssumptions(scenario_months=12, scenario_debt_rate=6.5)
        params = ScenarioProjector(assumptions).resolve_parameters()

        assert params.months == 12
        assert params.debt_rate == 6.5

    def test_template_rates(self, projector):
        """Test that a template supplies its growth rates and name."""
        params = projector.resolve_parameters({"template": "Aggressive"})

        assert params.template == "aggressive"
        assert params.name == "Aggressive"
        assert params.rent_growth == 0.05
        assert params.expense_growth == 0.02
        assert params.property_appreciation == 0.05

    def test_overrides_win_over_template(self, projector):
        """Test that explicit values replace template values."""
        params = projector.resolve_parameters(
            {"template": "conservative", "months": 24, "rent_growth": 0.01}
        )

        assert params.months == 24
        assert params.rent_growth == 0.01
        assert params.expense_growth == 0.03

    def test_unknown_template(self, projector):
        """Test that an unknown template is rejected."""
        with pytest.raises(InvalidArgumentError):
            projector.resolve_parameters({"template": "moonshot"})

    @pytest.mark.parametrize(
        "overrides",
        [
            {"rent_growth": math.nan},
            {"property_appreciation": math.inf},
            {"expense_growth": -1.5},
            {"months": 0},
            {"unknown_knob": 1},
        ],
    )
    def test_invalid_parameters(self, projector, overrides):
        """Test that non-finite, out-of-range and unknown values are rejected."""
        with pytest.raises(ValidationError):
            projector.resolve_parameters(overrides)


class TestBaseline:
    """Test cases for the trailing-year baseline."""

    def test_totals(self, baseline):
        """Test the baseline built from the shared fixtures."""
        assert baseline.total_value == 650000
        assert baseline.total_debt == 430000
        assert baseline.monthly_payment == 3000
        assert baseline.annual_rent == 25800
        assert baseline.annual_expenses == 1840
        assert baseline.monthly_noi == pytest.approx(23960 / 12)
        assert baseline.property_count == 2

    def test_old_records_are_left_out(
        self, projector, properties, mortgages, expenses, rent_payments
    ):
        """Test that records older than a year do not count."""
        baseline = projector.build_baseline(
            properties, mortgages, expenses, rent_payments, datetime(2025, 7, 1)
        )

        assert baseline.annual_rent == 0
        assert baseline.annual_expenses == 0
        assert baseline.total_debt == 430000

    def test_unassigned_records_are_ignored(self, projector, as_of):
        """Test that a property without an id collects nothing."""
        prop = Property.model_validate({"current_value": 100000})
        baseline = projector.build_baseline([prop], [], [], [], as_of)

        assert baseline.total_value == 100000
        assert baseline.total_debt == 0


class TestProjection:
    """Test cases for the month-by-month projection."""

    def test_month_zero_is_the_baseline(self, projector, baseline):
        """Test that the first point reproduces today's numbers."""
        points = projector.project(baseline, projector.resolve_parameters())

        assert len(points) == 61
        assert points[0].value == 650000
        assert points[0].debt == 430000
        assert points[0].monthly_noi == pytest.approx(baseline.monthly_noi)
        assert points[0].ltv == pytest.approx(430000 / 650000)

    def test_growth_compounds_annually(self, projector, baseline):
        """Test five years of compound growth."""
        points = projector.project(baseline, projector.resolve_parameters())
        end = points[-1]

        assert end.years == 5.0
        assert end.value == pytest.approx(650000 * 1.035**5)
        assert end.annual_rent == pytest.approx(25800 * 1.035**5)
        assert end.annual_expenses == pytest.approx(1840 * 1.025**5)

    def test_debt_walk_matches_closed_form(self, projector, baseline):
        """Test that the debt follows the annuity balance recurrence."""
        points = projector.project(baseline, projector.resolve_parameters())
        r = 0.05 / 12
        growth = (1 + r) ** 60
        expected = 430000 * growth - 3000 * (growth - 1) / r

        assert points[-1].debt == pytest.approx(expected, rel=1e-9)
        assert all(a.debt > b.debt for a, b in zip(points, points[1:]))

    def test_debt_is_never_negative(self, projector):
        """Test that a large payment clears the debt and stops at zero."""
        baseline = PortfolioBaseline(
            total_value=200000,
            total_debt=10000,
            annual_rent=0,
            annual_expenses=0,
            monthly_payment=5000,
            property_count=1,
        )
        points = projector.project(baseline, projector.resolve_parameters({"months": 12}))

        assert points[3].debt == 0.0
        assert points[-1].debt == 0.0
        assert points[-1].equity == pytest.approx(points[-1].value)

    def test_payment_below_interest_holds_debt(self, projector):
        """Test that interest shortfalls are not added to the debt."""
        baseline = PortfolioBaseline(
            total_value=150000,
            total_debt=100000,
            annual_rent=12000,
            annual_expenses=0,
            monthly_payment=500,
            property_count=1,
        )
        params = projector.resolve_parameters({"debt_rate": 12.0, "months": 24})
        analysis = projector.analyze(baseline, params)

        assert all(p.debt == 100000 for p in analysis.projections)
        assert not analysis.summary.debt_amortizes

    def test_empty_portfolio(self, projector):
        """Test that an empty baseline projects zeros without dividing by zero."""
        baseline = PortfolioBaseline(
            total_value=0,
            total_debt=0,
            annual_rent=0,
            annual_expenses=0,
            monthly_payment=0,
            property_count=0,
        )
        analysis = projector.analyze(baseline, projector.resolve_parameters())

        assert analysis.summary.percent_growth == 0.0
        assert analysis.summary.end_ltv == 0.0
        assert analysis.summary.debt_amortizes
        assert analysis.recommendations == []


class TestAnalysis:
    """Test cases for summaries, risk and recommendations."""

    def test_moderate_summary(self, projector, baseline):
        """Test the summary of the moderate template."""
        analysis = projector.analyze(
            baseline, projector.resolve_parameters({"template": "moderate"})
        )
        summary = analysis.summary

        assert summary.percent_growth == pytest.approx((1.035**5 - 1) * 100)
        assert summary.debt_reduction == pytest.approx(430000 - analysis.projections[-1].debt)
        assert summary.start_equity == 220000
        assert summary.equity_growth == pytest.approx(summary.end_equity - 220000)
        assert summary.ltv_improvement == pytest.approx(summary.start_ltv - summary.end_ltv)
        assert summary.debt_amortizes
        assert analysis.cash_flow.total_noi == pytest.approx(
            sum(p.monthly_noi for p in analysis.projections[1:])
        )

    def test_moderate_recommendations(self, projector, baseline):
        """Test that growth, deleveraging and rising NOI are all called out."""
        analysis = projector.analyze(
            baseline, projector.resolve_parameters({"template": "moderate"})
        )

        types = [r.type for r in analysis.recommendations]
        assert types == ["strong_appreciation", "ltv_improvement", "cash_flow_growth"]
        assert analysis.risk.score == 10
        assert analysis.risk.level == "Low"

    def test_refinance_recommended_for_high_end_ltv(self, projector):
        """Test the refinance hint on a long, highly leveraged projection."""
        baseline = PortfolioBaseline(
            total_value=100000,
            total_debt=95000,
            annual_rent=12000,
            annual_expenses=12000,
            monthly_payment=0,
            property_count=1,
        )
        analysis = projector.analyze(
            baseline, projector.resolve_parameters({"property_appreciation": 0.0})
        )

        assert "refinance_opportunity" in [r.type for r in analysis.recommendations]
        assert analysis.risk.level == "Medium"

    @pytest.mark.parametrize(
        "ltv,noi,score,level",
        [
            (0.50, 2000, 10, "Low"),
            (0.80, 300, 40, "Medium"),
            (0.90, -100, 80, "High"),
            (0.90, 600, 40, "Medium"),
        ],
    )
    def test_risk_score(self, ltv, noi, score, level):
        """Test leverage and cash-flow risk on the final month."""
        risk = ScenarioProjector.assess_risk(_point(ltv, noi))

        assert risk.score == score
        assert risk.level == level
        assert [f.name for f in risk.factors] == ["Leverage Risk", "Cash Flow Risk", "Rate Risk"]

    def test_compare_templates(self, projector, baseline):
        """Test the side-by-side outcome of every template."""
        analyses = [
            projector.analyze(baseline, projector.resolve_parameters({"template": key}))
            for key in SCENARIO_TEMPLATES
        ]
        outcomes = ScenarioProjector.compare(analyses)

        assert [o.template for o in outcomes] == ["conservative", "moderate", "aggressive"]
        assert outcomes[2].end.value > outcomes[1].end.value > outcomes[0].end.value
        assert all(o.end.month == 60 for o in outcomes)
