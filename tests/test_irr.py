"""Tests for net present value and the IRR solver."""

import math

import pytest

from propertyhub.models.assumptions import FinancialAssumptions
from propertyhub.models.irr import (
    calculate_irr,
    calculate_npv,
    irr_or_none,
    is_determinable,
)


class TestNpv:
    """Test cases for calculate_npv."""

    def test_zero_rate_is_plain_sum(self):
        """Test that discounting at 0% sums the flows."""
        assert calculate_npv(0.0, [-100, 30, 40, 50]) == pytest.approx(20.0)

    def test_first_flow_is_undiscounted(self):
        """Test that t=0 is not discounted."""
        assert calculate_npv(0.5, [-100]) == pytest.approx(-100.0)

    def test_discounting(self):
        """Test a single discounted period."""
        assert calculate_npv(0.1, [0, 110]) == pytest.approx(100.0)

    def test_empty_flows(self):
        """Test that no flows have zero value."""
        assert calculate_npv(0.1, []) == 0.0


class TestIrr:
    """Test cases for calculate_irr."""

    def test_single_period_irr(self):
        """Test that paying 100 for 110 a year later yields 10%."""
        irr = calculate_irr([-100, 110])

        assert irr == pytest.approx(0.10, abs=1e-5)

    def test_multi_period_irr_zeroes_npv(self):
        """Test that the solved rate makes NPV vanish."""
        flows = [-60000, 6000, 6000, 6000, 6000, 86000]
        irr = calculate_irr(flows)

        assert is_determinable(irr)
        assert abs(calculate_npv(irr, flows)) < 1.0

    def test_negative_irr(self):
        """Test a losing investment."""
        irr = calculate_irr([-100, 50])

        assert irr == pytest.approx(-0.5, abs=1e-5)

    def test_no_sign_change_is_undeterminable(self):
        """Test that all-positive flows have no IRR."""
        assert math.isnan(calculate_irr([100, 10, 10]))
        assert math.isnan(calculate_irr([-100, -10]))

    def test_too_few_flows(self):
        """Test that a lone outlay has no IRR."""
        assert math.isnan(calculate_irr([-100]))
        assert math.isnan(calculate_irr([]))

    def test_non_finite_flows(self):
        """Test that infinite flows are rejected."""
        assert math.isnan(calculate_irr([-100, math.inf]))

    def test_iteration_budget_exhausted(self):
        """Test that running out of iterations is reported as NaN."""
        assumptions = FinancialAssumptions(irr_max_iterations=1)

        assert math.isnan(calculate_irr([-100, 110], assumptions))

    def test_custom_bounds_exclude_root(self):
        """Test that a root outside the search interval is not found."""
        assumptions = FinancialAssumptions(irr_lower_bound=0.2, irr_upper_bound=1.0)

        assert math.isnan(calculate_irr([-100, 110], assumptions))

    def test_irr_or_none(self):
        """Test the None sentinel for result models."""
        assert irr_or_none([100, 10]) is None
        assert irr_or_none([-100, 110]) == pytest.approx(0.10, abs=1e-5)

    def test_is_determinable(self):
        """Test the determinability check."""
        assert is_determinable(0.05)
        assert not is_determinable(math.nan)
        assert not is_determinable(None)

    def test_invalid_bounds_rejected(self):
        """Test that an empty search interval is a configuration error."""
        with pytest.raises(ValueError):
            FinancialAssumptions(irr_lower_bound=0.5, irr_upper_bound=0.1)
