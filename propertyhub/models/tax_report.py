"""
Tax deduction and depreciation estimates for rental properties.

Straight-line residential depreciation on the building share of the purchase
price, deductible expenses grouped by category and property, estimated
mortgage interest, and an estimated tax saving at the assumed bracket. These
are planning estimates, not tax advice.
"""

from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from .assumptions import DEFAULT_ASSUMPTIONS, FinancialAssumptions
from .records import Expense, Mortgage, Property

RECOMMENDED_FORMS = [
    "Schedule E",
    "Form 4562 (Depreciation)",
    "Form 8949 (if selling)",
]


class DepreciationEntry(BaseModel):
    property_id: str
    address: str
    purchase_price: float
    building_value: float
    land_value: float
    annual_depreciation: float
    depreciation_months: float = Field(..., description="Months to fully depreciate")
    cost_segregation_opportunity: bool


class PropertyDeductions(BaseModel):
    property_id: str
    address: str
    deductions: Dict[str, float]
    total: float


class TaxDeductionReport(BaseModel):
    by_category: Dict[str, float]
    by_property: List[PropertyDeductions]
    total_deductions: float


class TaxSummary(BaseModel):
    total_expenses: float
    total_depreciation: float
    total_mortgage_interest: float = Field(
        ..., description="Estimated as balance x annual rate for one year"
    )
    total_deductions: float
    estimated_tax_savings: float
    recommended_forms: List[str] = Field(default_factory=lambda: list(RECOMMENDED_FORMS))


class TaxReportGenerator:
    """Generator for depreciation schedules and deduction summaries."""

    def __init__(self, assumptions: Optional[FinancialAssumptions] = None):
        self.assumptions = assumptions or DEFAULT_ASSUMPTIONS

    def annual_depreciation(self, prop: Property) -> float:
        """Straight-line depreciation of the building share of the purchase price."""
        building = prop.purchase_price * self.assumptions.building_value_ratio
        return building / self.assumptions.depreciation_years

    def generate_depreciation_schedule(self, properties: Sequence[Property]) -> List[DepreciationEntry]:
        schedule = []
        for prop in properties:
            building = prop.purchase_price * self.assumptions.building_value_ratio
            annual = self.annual_depreciation(prop)
            schedule.append(
                DepreciationEntry(
                    property_id=prop.id,
                    address=prop.address,
                    purchase_price=prop.purchase_price,
                    building_value=building,
                    land_value=prop.purchase_price - building,
                    annual_depreciation=annual,
                    depreciation_months=building / annual * 12 if annual > 0 else 0.0,
                    cost_segregation_opportunity=building
                    > self.assumptions.cost_segregation_threshold,
                )
            )
        return schedule

    def generate_tax_deduction_report(
        self, expenses: Sequence[Expense], properties: Sequence[Property]
    ) -> TaxDeductionReport:
        """
        Group deductible expenses by category and by property.

        Expenses for properties that are not in ``properties`` are reported
        with the address "Unknown".
        """
        by_category: Dict[str, float] = {}
        by_property: Dict[str, Dict[str, float]] = {}

        for expense in expenses:
            by_category[expense.category] = by_category.get(expense.category, 0.0) + expense.amount
            categories = by_property.setdefault(expense.property_id, {})
            categories[expense.category] = categories.get(expense.category, 0.0) + expense.amount

        addresses = {p.id: p.address for p in properties}
        property_deductions = [
            PropertyDeductions(
                property_id=property_id,
                address=addresses.get(property_id) or "Unknown",
                deductions=categories,
                total=sum(categories.values()),
            )
            for property_id, categories in by_property.items()
        ]

        return TaxDeductionReport(
            by_category=by_category,
            by_property=property_deductions,
            total_deductions=sum(e.amount for e in expenses),
        )

    def generate_tax_summary(
        self,
        properties: Sequence[Property],
        mortgages: Sequence[Mortgage],
        expenses: Sequence[Expense],
    ) -> TaxSummary:
        total_expenses = sum(e.amount for e in expenses)
        total_depreciation = sum(self.annual_depreciation(p) for p in properties)
        total_interest = sum(m.current_balance * m.interest_rate / 100 for m in mortgages)
        total_deductions = total_expenses + total_depreciation + total_interest

        return TaxSummary(
            total_expenses=total_expenses,
            total_depreciation=total_depreciation,
            total_mortgage_interest=total_interest,
            total_deductions=total_deductions,
            estimated_tax_savings=total_deductions * self.assumptions.tax_bracket,
        )
