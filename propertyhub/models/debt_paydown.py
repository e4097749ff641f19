"""
Debt paydown strategies: snowball and avalanche.

Snowball pays the smallest balance first, avalanche the highest rate first.
Two payoff models are available:

- Sequential (default): every loan is simulated on its own at its payment plus
  the extra payment, and the strategy totals are the sums of the per-loan
  results. The extra payment is never redirected from a paid-off loan, so the
  ordering does not change the totals.
- Rollover: loans run concurrently, minimums are paid on each open loan and
  the extra budget plus the payments freed by paid-off loans go to the
  highest-priority open loan. This is the textbook snowball/avalanche and
  the ordering does change interest and payoff time.

Loans whose payment never covers interest are reported as non-amortizing with
infinite months and interest, and simulations that hit the month cap are
reported as exceeding it, never as a finite payoff.
"""

import logging
import math
from enum import Enum
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .assumptions import DEFAULT_ASSUMPTIONS, FinancialAssumptions
from .exceptions import InvalidArgumentError
from .mortgage_amortization import monthly_rate_from_annual_percent
from .records import Mortgage

logger = logging.getLogger(__name__)


class PayoffStatus(str, Enum):
    """How a payoff simulation ended."""

    PAID_OFF = "paid_off"
    NON_AMORTIZING = "non_amortizing"
    EXCEEDS_CAP = "exceeds_cap"


class Loan(BaseModel):
    """A loan to be paid down."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    lender: str = ""
    balance: float = Field(..., ge=0, description="Outstanding balance")
    rate: float = Field(default=0.0, ge=0, description="Annual rate in percent")
    payment: float = Field(default=0.0, ge=0, description="Scheduled monthly payment")
    term: int = Field(default=360, ge=1, description="Remaining term in months")


class LoanPayoff(BaseModel):
    """Result of paying off one loan."""

    model_config = ConfigDict(frozen=True)

    months: float = Field(..., description="Months to payoff; +inf when non-amortizing")
    total_interest: float = Field(..., description="Interest paid; +inf when non-amortizing")
    status: PayoffStatus = PayoffStatus.PAID_OFF

    @computed_field
    @property
    def is_paid_off(self) -> bool:
        return self.status == PayoffStatus.PAID_OFF


class LoanPayoffRow(BaseModel):
    """Per-loan line of a strategy schedule."""

    model_config = ConfigDict(frozen=True)

    loan_id: str
    lender: str
    original_balance: float
    rate: float
    months: float
    total_interest: float
    status: PayoffStatus


class StrategyResult(BaseModel):
    """Outcome of one paydown ordering."""

    strategy: str
    description: str
    rollover: bool = False
    total_months: float
    total_interest: float
    schedule: List[LoanPayoffRow] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def status(self) -> PayoffStatus:
        statuses = {row.status for row in self.schedule}
        if PayoffStatus.NON_AMORTIZING in statuses:
            return PayoffStatus.NON_AMORTIZING
        if PayoffStatus.EXCEEDS_CAP in statuses:
            return PayoffStatus.EXCEEDS_CAP
        return PayoffStatus.PAID_OFF

    @computed_field
    @property
    def is_payable(self) -> bool:
        return self.status == PayoffStatus.PAID_OFF


class StrategyComparison(BaseModel):
    """Snowball and avalanche side by side."""

    extra_payment: float
    snowball: StrategyResult
    avalanche: StrategyResult
    interest_saved_by_avalanche: Optional[float] = Field(
        default=None, description="None unless both strategies pay off"
    )
    months_saved_by_avalanche: Optional[float] = None


def loans_from_mortgages(
    mortgages: Sequence[Mortgage], default_term: int = 360
) -> List[Loan]:
    """Convert mortgage records into loans, dropping ones with no balance."""
    return [
        Loan(
            id=m.id,
            lender=m.lender,
            balance=m.current_balance,
            rate=max(m.interest_rate, 0.0),
            payment=max(m.monthly_payment, 0.0),
            term=m.remaining_term_months or default_term,
        )
        for m in mortgages
        if m.current_balance > 0
    ]


def snowball_order(loans: Sequence[Loan]) -> List[Loan]:
    """Smallest balance first."""
    return sorted(loans, key=lambda loan: loan.balance)


def avalanche_order(loans: Sequence[Loan]) -> List[Loan]:
    """Highest rate first."""
    return sorted(loans, key=lambda loan: loan.rate, reverse=True)


def simulate_payoff(
    balance: float, annual_rate_percent: float, monthly_payment: float, max_months: int = 600
) -> LoanPayoff:
    """
    Simulate paying a balance down month by month.

    Args:
        balance: Starting balance
        annual_rate_percent: Annual rate in percent
        monthly_payment: Payment applied each month
        max_months: Month cap after which the loan is treated as unpayable

    Returns:
        LoanPayoff; non-amortizing loans report infinite months and interest
    """
    monthly_rate = monthly_rate_from_annual_percent(annual_rate_percent)
    remaining = balance
    months = 0
    total_interest = 0.0

    while remaining > 0 and months < max_months:
        interest = remaining * monthly_rate
        principal = monthly_payment - interest
        if principal <= 0:
            logger.debug(
                "Payment %.2f does not cover interest %.2f on balance %.2f",
                monthly_payment,
                interest,
                remaining,
            )
            return LoanPayoff(
                months=math.inf,
                total_interest=math.inf,
                status=PayoffStatus.NON_AMORTIZING,
            )
        remaining -= principal
        total_interest += interest
        months += 1

    status = PayoffStatus.PAID_OFF if remaining <= 0 else PayoffStatus.EXCEEDS_CAP
    return LoanPayoff(months=months, total_interest=total_interest, status=status)


class DebtPaydownStrategist:
    """Simulates snowball and avalanche paydown of a set of loans."""

    def __init__(
        self,
        assumptions: Optional[FinancialAssumptions] = None,
        rollover: bool = False,
    ):
        """Initialize the strategist.

        Args:
            assumptions: Supplies ``max_payoff_months`` (default 600)
            rollover: Redirect freed payments to the next loan instead of
                simulating each loan on its own
        """
        self.assumptions = assumptions or DEFAULT_ASSUMPTIONS
        self.rollover = rollover

    @property
    def max_months(self) -> int:
        return self.assumptions.max_payoff_months

    def calculate_snowball(self, loans: Sequence[Loan], extra_payment: float) -> StrategyResult:
        return self._run(
            "Snowball",
            "Pay smallest balance first (psychological wins)",
            snowball_order,
            loans,
            extra_payment,
        )

    def calculate_avalanche(self, loans: Sequence[Loan], extra_payment: float) -> StrategyResult:
        return self._run(
            "Avalanche",
            "Pay highest rate first (saves most interest)",
            avalanche_order,
            loans,
            extra_payment,
        )

    def compare_strategies(self, loans: Sequence[Loan], extra_payment: float) -> StrategyComparison:
        """Run both orderings and report what avalanche saves over snowball."""
        snowball = self.calculate_snowball(loans, extra_payment)
        avalanche = self.calculate_avalanche(loans, extra_payment)

        interest_saved = None
        months_saved = None
        if snowball.is_payable and avalanche.is_payable:
            interest_saved = snowball.total_interest - avalanche.total_interest
            months_saved = snowball.total_months - avalanche.total_months

        return StrategyComparison(
            extra_payment=extra_payment,
            snowball=snowball,
            avalanche=avalanche,
            interest_saved_by_avalanche=interest_saved,
            months_saved_by_avalanche=months_saved,
        )

    def _run(
        self,
        name: str,
        description: str,
        order: Callable[[Sequence[Loan]], List[Loan]],
        loans: Sequence[Loan],
        extra_payment: float,
    ) -> StrategyResult:
        if not math.isfinite(extra_payment) or extra_payment < 0:
            raise InvalidArgumentError("extra_payment must be a finite number >= 0")

        ordered = order(loans)
        if self.rollover:
            schedule, total_months = self._simulate_rollover(ordered, extra_payment)
            total_interest = sum(row.total_interest for row in schedule)
        else:
            schedule = self._simulate_sequential(ordered, extra_payment)
            total_months = sum(row.months for row in schedule)
            total_interest = sum(row.total_interest for row in schedule)

        warnings = []
        for row in schedule:
            label = row.lender or row.loan_id or "loan"
            if row.status == PayoffStatus.NON_AMORTIZING:
                warnings.append(f"Payment on {label} never covers its interest; it will not pay off")
            elif row.status == PayoffStatus.EXCEEDS_CAP:
                warnings.append(f"{label} is not paid off within {self.max_months} months")

        if warnings:
            logger.warning("%s strategy is not payable: %s", name, "; ".join(warnings))

        return StrategyResult(
            strategy=name,
            description=description,
            rollover=self.rollover,
            total_months=total_months,
            total_interest=total_interest,
            schedule=schedule,
            warnings=warnings,
        )

    def _simulate_sequential(self, ordered: List[Loan], extra_payment: float) -> List[LoanPayoffRow]:
        rows = []
        for loan in ordered:
            result = simulate_payoff(
                loan.balance, loan.rate, loan.payment + extra_payment, self.max_months
            )
            rows.append(
                LoanPayoffRow(
                    loan_id=loan.id,
                    lender=loan.lender,
                    original_balance=loan.balance,
                    rate=loan.rate,
                    months=result.months,
                    total_interest=result.total_interest,
                    status=result.status,
                )
            )
        return rows

    def _simulate_rollover(self, ordered: List[Loan], extra_payment: float):
        balances = [loan.balance for loan in ordered]
        rates = [monthly_rate_from_annual_percent(loan.rate) for loan in ordered]
        interest_paid = [0.0] * len(ordered)
        payoff_month: List[Optional[int]] = [
            0 if balance <= 0 else None for balance in balances
        ]
        budget = sum(loan.payment for loan in ordered) + extra_payment
        month = 0
        stalled = False

        while any(b > 0 for b in balances) and month < self.max_months:
            interest = [b * r if b > 0 else 0.0 for b, r in zip(balances, rates)]
            if budget <= sum(interest):
                stalled = True
                break
            month += 1
            available = budget

            for i, loan in enumerate(ordered):
                if balances[i] <= 0:
                    continue
                pay = min(loan.payment, balances[i] + interest[i], available)
                balances[i] += interest[i] - pay
                interest_paid[i] += interest[i]
                available -= pay

            for i in range(len(ordered)):
                if available <= 0:
                    break
                if balances[i] <= 0:
                    continue
                pay = min(available, balances[i])
                balances[i] -= pay
                available -= pay

            for i, balance in enumerate(balances):
                if balance <= 1e-9 and payoff_month[i] is None:
                    balances[i] = 0.0
                    payoff_month[i] = month

        rows = []
        for i, loan in enumerate(ordered):
            if payoff_month[i] is not None:
                months, interest_total, status = payoff_month[i], interest_paid[i], PayoffStatus.PAID_OFF
            elif stalled:
                months, interest_total, status = math.inf, math.inf, PayoffStatus.NON_AMORTIZING
            else:
                months, interest_total, status = month, interest_paid[i], PayoffStatus.EXCEEDS_CAP
            rows.append(
                LoanPayoffRow(
                    loan_id=loan.id,
                    lender=loan.lender,
                    original_balance=loan.balance,
                    rate=loan.rate,
                    months=months,
                    total_interest=interest_total,
                    status=status,
                )
            )

        if stalled:
            return rows, math.inf
        return rows, float(max((row.months for row in rows), default=0))
