"""
Named financial assumptions used by the analytics engines.

Every rule of thumb the calculations depend on (down payment share, tax
bracket, depreciation schedule, refinance policy thresholds, simulation
limits) lives here with a documented default, so callers can override any of
them per call instead of relying on constants buried in formulas.
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

if TYPE_CHECKING:
    from propertyhub.config import Settings


class FinancialAssumptions(BaseModel):
    """Overridable assumptions for portfolio analytics."""

    model_config = ConfigDict(frozen=True)

    # Acquisition and returns
    down_payment_ratio: float = Field(
        default=0.20,
        gt=0,
        le=1,
        description="Share of purchase price treated as cash invested",
    )
    max_irr_years: int = Field(
        default=30, ge=1, le=100, description="Holding period cap for IRR cash flows"
    )

    # Taxes and depreciation
    tax_bracket: float = Field(
        default=0.24, ge=0, le=1, description="Marginal tax rate for savings estimates"
    )
    depreciation_years: float = Field(
        default=27.5, gt=0, description="Residential straight-line recovery period"
    )
    building_value_ratio: float = Field(
        default=0.80, ge=0, le=1, description="Depreciable share of purchase price"
    )
    cost_segregation_threshold: float = Field(
        default=500000.0,
        ge=0,
        description="Building value above which cost segregation is flagged",
    )

    # Financing
    default_closing_costs: float = Field(
        default=5000.0, ge=0, description="Closing costs for default refinance scenarios"
    )
    default_term_months: int = Field(
        default=360, ge=1, description="Term used when a mortgage has no remaining term"
    )
    refinance_good_break_even_ratio: float = Field(
        default=0.5,
        gt=0,
        le=1,
        description="Break-even must fall within this share of the remaining term for 'Good'",
    )
    refinance_min_total_savings: float = Field(
        default=0.0, description="Total savings must exceed this for 'Good' or 'Marginal'"
    )
    max_payoff_months: int = Field(
        default=600, ge=1, description="Months after which a payoff is treated as unpayable"
    )

    # Scenario projections
    scenario_months: int = Field(
        default=60, ge=1, le=600, description="Projection horizon in months"
    )
    scenario_rent_growth: float = Field(default=0.035, gt=-1, description="Annual rent growth")
    scenario_expense_growth: float = Field(
        default=0.025, gt=-1, description="Annual expense growth"
    )
    scenario_appreciation: float = Field(default=0.035, gt=-1, description="Annual value growth")
    scenario_debt_rate: float = Field(
        default=5.0,
        ge=0,
        le=100,
        description="Blended annual rate in percent used to walk the debt down",
    )

    # IRR solver
    irr_lower_bound: float = Field(default=-0.99, gt=-1, description="Lowest rate searched")
    irr_upper_bound: float = Field(default=10.0, description="Highest rate searched")
    irr_max_iterations: int = Field(default=1000, ge=1, description="Bisection budget")
    irr_tolerance: float = Field(default=1e-6, gt=0, description="Convergence tolerance")

    # KPI alerts
    high_ltv_threshold: float = Field(default=0.80, ge=0)
    low_cap_rate_threshold: float = Field(default=0.05)
    negative_cash_flow_threshold: float = Field(default=0.0)

    # Renewal windows (days)
    insurance_urgent_days: int = Field(default=30, ge=0)
    insurance_warning_days: int = Field(default=90, ge=0)
    lease_warning_days: int = Field(default=60, ge=0)

    @field_validator("irr_upper_bound")
    @classmethod
    def validate_irr_bounds(cls, v: float, info: ValidationInfo) -> float:
        lower = info.data.get("irr_lower_bound")
        if lower is not None and v <= lower:
            raise ValueError("irr_upper_bound must be greater than irr_lower_bound")
        return v

    @field_validator("insurance_warning_days")
    @classmethod
    def validate_insurance_windows(cls, v: int, info: ValidationInfo) -> int:
        urgent = info.data.get("insurance_urgent_days")
        if urgent is not None and v < urgent:
            raise ValueError("insurance_warning_days must be >= insurance_urgent_days")
        return v

    @classmethod
    def from_settings(cls, settings: "Settings") -> "FinancialAssumptions":
        """Build assumptions from environment-driven application settings."""
        return cls(
            down_payment_ratio=settings.down_payment_ratio,
            tax_bracket=settings.tax_bracket,
            depreciation_years=settings.depreciation_years,
            default_closing_costs=settings.default_closing_costs,
            max_payoff_months=settings.max_payoff_months,
            refinance_good_break_even_ratio=settings.refinance_good_break_even_ratio,
        )


DEFAULT_ASSUMPTIONS = FinancialAssumptions()
