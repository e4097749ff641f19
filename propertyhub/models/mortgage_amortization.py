"""
Mortgage amortization calculations for portfolio analytics.

This module provides the fixed-rate loan math the other engines build on:
payment amounts, single-period interest/principal splits, closed-form
remaining balances and full monthly schedules, plus the simple equity and
return ratios used across the dashboard.

Rates follow two conventions, mirroring how the record store keeps them:
mortgage records carry an annual rate in percent (6.5 means 6.5%), while
``monthly_payment`` and ``remaining_balance`` take the monthly decimal rate.
Use ``monthly_rate_from_annual_percent`` to convert. Values are plain IEEE
doubles and are never rounded here; rounding is a presentation concern.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AmortizationStep(BaseModel):
    """Interest/principal split of one payment."""

    model_config = ConfigDict(frozen=True)

    principal: float = Field(..., ge=0, description="Principal portion (floored at 0)")
    interest: float = Field(..., ge=0, description="Interest portion (floored at 0)")
    total_payment: float = Field(..., ge=0, description="Scheduled payment")
    covers_interest: bool = Field(
        default=True, description="Whether the payment retires any principal"
    )


class ScheduleRow(BaseModel):
    """One month of an amortization schedule."""

    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=1, description="Payment number (1-based)")
    payment: float = Field(..., description="Total payment")
    principal: float = Field(..., description="Principal portion")
    interest: float = Field(..., description="Interest portion")
    balance: float = Field(..., description="Balance after the payment")


def monthly_rate_from_annual_percent(annual_rate_percent: float) -> float:
    """Convert an annual rate in percent (6.0) to a monthly decimal (0.005)."""
    return annual_rate_percent / 100 / 12


class AmortizationCalculator:
    """Calculator for fixed-rate amortization and related ratios."""

    @staticmethod
    def monthly_payment(principal: float, monthly_rate: float, months: int) -> float:
        """
        Calculate the level payment using the standard annuity formula.

        Args:
            principal: Loan principal amount
            monthly_rate: Monthly decimal rate (annual percent / 100 / 12)
            months: Number of monthly payments

        Returns:
            Monthly payment amount, 0 for missing or non-positive inputs
        """
        if not principal or principal <= 0 or not months or months <= 0:
            return 0.0
        if monthly_rate < 0:
            return 0.0
        if monthly_rate == 0:
            return principal / months

        growth = (1 + monthly_rate) ** months
        return principal * monthly_rate * growth / (growth - 1)

    @staticmethod
    def amortization_month(
        balance: float,
        annual_rate_percent: float,
        months: int,
        payment: Optional[float] = None,
    ) -> AmortizationStep:
        """
        Split the next payment on a balance into interest and principal.

        Args:
            balance: Current loan balance
            annual_rate_percent: Annual rate in percent
            months: Remaining number of payments
            payment: Actual monthly payment; the level payment for the
                remaining term when omitted

        Returns:
            AmortizationStep with both portions floored at zero
        """
        if not balance or balance <= 0:
            return AmortizationStep(principal=0.0, interest=0.0, total_payment=0.0)

        monthly_rate = monthly_rate_from_annual_percent(max(annual_rate_percent, 0.0))
        if payment is None:
            if not months or months <= 0:
                return AmortizationStep(principal=0.0, interest=0.0, total_payment=0.0)
            payment = AmortizationCalculator.monthly_payment(balance, monthly_rate, months)
        payment = max(payment, 0.0)
        interest = balance * monthly_rate
        principal = payment - interest

        return AmortizationStep(
            principal=max(0.0, principal),
            interest=max(0.0, interest),
            total_payment=payment,
            covers_interest=principal > 0 or (interest == 0 and payment > 0),
        )

    @staticmethod
    def remaining_balance(
        original_balance: float,
        monthly_rate: float,
        total_months: int,
        payments_made: int,
    ) -> float:
        """
        Calculate the balance left after a number of level payments.

        Args:
            original_balance: Balance when payments started
            monthly_rate: Monthly decimal rate
            total_months: Full term in months
            payments_made: Payments already made

        Returns:
            Remaining balance (0 once the term has been paid)
        """
        if not original_balance or original_balance <= 0 or total_months <= 0:
            return 0.0
        if payments_made <= 0:
            return original_balance
        if payments_made >= total_months:
            return 0.0

        if monthly_rate == 0:
            return original_balance - (original_balance / total_months) * payments_made

        payment = AmortizationCalculator.monthly_payment(
            original_balance, monthly_rate, total_months
        )
        power = (1 + monthly_rate) ** (total_months - payments_made)
        return payment * ((power - 1) / (monthly_rate * power))

    @staticmethod
    def generate_amortization_schedule(
        balance: float, annual_rate_percent: float, months: int
    ) -> List[ScheduleRow]:
        """
        Generate the month-by-month schedule for a level-payment loan.

        Args:
            balance: Starting balance
            annual_rate_percent: Annual rate in percent
            months: Term in months

        Returns:
            List of ``months`` schedule rows; empty for degenerate input
        """
        if not balance or balance <= 0 or not months or months <= 0:
            return []

        monthly_rate = monthly_rate_from_annual_percent(max(annual_rate_percent, 0.0))
        payment = AmortizationCalculator.monthly_payment(balance, monthly_rate, months)

        rows: List[ScheduleRow] = []
        remaining = balance
        for month in range(1, months + 1):
            interest = remaining * monthly_rate
            principal = payment - interest
            remaining -= principal
            rows.append(
                ScheduleRow(
                    month=month,
                    payment=payment,
                    principal=principal,
                    interest=interest,
                    balance=remaining,
                )
            )

        return rows

    @staticmethod
    def calculate_equity(property_value: float, loan_balance: float) -> float:
        """Equity held in a property (may be negative when underwater)."""
        return property_value - loan_balance

    @staticmethod
    def calculate_loan_to_value_ratio(loan_balance: float, property_value: float) -> float:
        """
        Calculate loan-to-value ratio.

        Returns:
            LTV as a fraction, 0 when the property has no value
        """
        if property_value <= 0:
            return 0.0
        return loan_balance / property_value

    @staticmethod
    def calculate_equity_percentage(property_value: float, loan_balance: float) -> float:
        """Equity as a fraction of value, 0 when the property has no value."""
        if property_value <= 0:
            return 0.0
        return (property_value - loan_balance) / property_value

    @staticmethod
    def calculate_appreciation(current_value: float, purchase_price: float) -> float:
        if purchase_price <= 0:
            return 0.0
        return current_value - purchase_price

    @staticmethod
    def calculate_appreciation_percentage(
        current_value: float, purchase_price: float
    ) -> float:
        if purchase_price <= 0:
            return 0.0
        return (current_value - purchase_price) / purchase_price

    @staticmethod
    def calculate_noi(monthly_rent: float, monthly_expenses: float) -> float:
        """Annual net operating income from monthly rent and operating expenses."""
        return (monthly_rent - monthly_expenses) * 12

    @staticmethod
    def calculate_cap_rate(annual_noi: float, purchase_price: float) -> float:
        """Annual NOI over purchase price, as a fraction."""
        if purchase_price <= 0:
            return 0.0
        return annual_noi / purchase_price

    @staticmethod
    def calculate_cash_on_cash(annual_cash_flow: float, cash_invested: float) -> float:
        """Annual cash flow over cash invested, as a fraction."""
        if cash_invested <= 0:
            return 0.0
        return annual_cash_flow / cash_invested
