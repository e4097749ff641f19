"""
Internal rate of return and net present value.

The IRR solver brackets the root of the NPV curve and bisects it. Bisection is
slower than Newton's method but cannot diverge, which matters for the short,
lumpy cash-flow vectors the dashboard builds (one outlay, a few years of cash
flow, a terminal value). When no root can be bracketed or the iteration budget
runs out the solver returns ``NaN``; callers test it with ``is_determinable``.
"""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from .assumptions import DEFAULT_ASSUMPTIONS, FinancialAssumptions

logger = logging.getLogger(__name__)


def calculate_npv(rate: float, cash_flows: Sequence[float]) -> float:
    """
    Calculate net present value with the first cash flow at t=0.

    Args:
        rate: Periodic discount rate (decimal, > -1)
        cash_flows: Cash flows for t = 0..N

    Returns:
        NPV of the series
    """
    flows = np.asarray(cash_flows, dtype=np.float64)
    if flows.size == 0:
        return 0.0
    periods = np.arange(flows.size, dtype=np.float64)
    return float(np.sum(flows / np.power(1.0 + rate, periods)))


def calculate_irr(
    cash_flows: Sequence[float],
    assumptions: Optional[FinancialAssumptions] = None,
) -> float:
    """
    Find the rate r with sum(CF_t / (1 + r)^t) == 0.

    Searches ``[irr_lower_bound, irr_upper_bound]`` (default -0.99 to 10.0)
    for at most ``irr_max_iterations`` bisection steps (default 1000),
    stopping when |NPV| or the bracket width falls below ``irr_tolerance``
    (default 1e-6).

    Args:
        cash_flows: Cash flows for t = 0..N
        assumptions: Solver bounds and stopping rule

    Returns:
        The IRR as a decimal, or NaN when it cannot be determined
    """
    assumptions = assumptions or DEFAULT_ASSUMPTIONS
    flows = [float(cf) for cf in cash_flows]

    if len(flows) < 2 or not all(math.isfinite(cf) for cf in flows):
        logger.debug("IRR undeterminable: need at least two finite cash flows")
        return math.nan

    low = assumptions.irr_lower_bound
    high = assumptions.irr_upper_bound
    npv_low = calculate_npv(low, flows)
    npv_high = calculate_npv(high, flows)
    tolerance = assumptions.irr_tolerance

    if abs(npv_low) < tolerance:
        return low
    if abs(npv_high) < tolerance:
        return high
    if np.sign(npv_low) == np.sign(npv_high):
        logger.debug("IRR undeterminable: no sign change between %s and %s", low, high)
        return math.nan

    for _ in range(assumptions.irr_max_iterations):
        mid = (low + high) / 2
        npv_mid = calculate_npv(mid, flows)

        if abs(npv_mid) < tolerance or (high - low) / 2 < tolerance:
            return mid

        if np.sign(npv_mid) == np.sign(npv_low):
            low, npv_low = mid, npv_mid
        else:
            high = mid

    logger.debug("IRR did not converge in %d iterations", assumptions.irr_max_iterations)
    return math.nan


def is_determinable(value: Optional[float]) -> bool:
    """Whether an IRR result is a usable number rather than the NaN sentinel."""
    return value is not None and math.isfinite(value)


def irr_or_none(
    cash_flows: Sequence[float],
    assumptions: Optional[FinancialAssumptions] = None,
) -> Optional[float]:
    """IRR for result models, where an undeterminable rate is stored as None."""
    irr = calculate_irr(cash_flows, assumptions)
    return irr if is_determinable(irr) else None
