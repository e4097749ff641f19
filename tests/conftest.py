"""
Pytest configuration and shared fixtures for the property hub tests.
"""

import os
from datetime import datetime
from unittest.mock import patch

import pytest

from propertyhub.config import reset_global_settings
from propertyhub.models.records import Expense, Mortgage, Property, RentPayment, Tenant


@pytest.fixture
def as_of():
    """Fixed reference moment used across tests."""
    return datetime(2024, 6, 15, 12, 0, 0)


@pytest.fixture
def properties():
    """Two rental properties, one bought 2019 and one 2022."""
    return Property.from_rows(
        [
            {
                "id": 1,
                "address": "12 Oak St",
                "city": "Austin",
                "state": "TX",
                "current_value": 400000,
                "purchase_price": 300000,
                "purchase_date": "2019-06-15",
                "market_rent": 2500,
            },
            {
                "id": 2,
                "address": "88 Pine Ave",
                "city": "Dallas",
                "state": "TX",
                "current_value": 250000,
                "purchase_price": 240000,
                "purchase_date": "2022-01-10",
                "market_rent": 1800,
            },
        ]
    )


@pytest.fixture
def mortgages():
    """Property 1 carries a first mortgage and a HELOC; property 2 one loan."""
    return Mortgage.from_rows(
        [
            {
                "id": "m1",
                "property_id": 1,
                "lender": "First Bank",
                "current_balance": 200000,
                "interest_rate": 6.5,
                "monthly_payment": 1500,
                "remaining_term_months": 300,
            },
            {
                "id": "m2",
                "property_id": 1,
                "lender": "Credit Union",
                "current_balance": 20000,
                "interest_rate": 8.0,
                "monthly_payment": 300,
                "remaining_term_months": 120,
            },
            {
                "id": "m3",
                "property_id": 2,
                "lender": "Mortgage Co",
                "current_balance": 210000,
                "interest_rate": 5.0,
                "monthly_payment": 1200,
                "remaining_term_months": 348,
            },
        ]
    )


@pytest.fixture
def expenses():
    """Expenses spread over the first half of 2024 plus one undated row."""
    return Expense.from_rows(
        [
            {"id": "e1", "property_id": 1, "category": "repairs", "amount": 400, "date": "2024-01-20"},
            {"id": "e2", "property_id": 1, "category": "insurance", "amount": 1200, "date": "2024-03-01"},
            {"id": "e3", "property_id": 2, "category": "repairs", "amount": 150, "date": "2024-03-31"},
            {"id": "e4", "property_id": 2, "category": "", "amount": 90, "date": "2024-06-02"},
            {"id": "e5", "property_id": 2, "category": "taxes", "amount": 3000, "date": ""},
        ]
    )


@pytest.fixture
def rent_payments():
    """Monthly rent for both properties, January through June 2024."""
    rows = []
    for month in range(1, 7):
        rows.append(
            {
                "id": f"r1-{month}",
                "property_id": 1,
                "tenant_id": "t1",
                "amount": 2500,
                "paid_date": f"2024-{month:02d}-01",
                "status": "paid",
            }
        )
        rows.append(
            {
                "id": f"r2-{month}",
                "property_id": 2,
                "tenant_id": "t2",
                "amount": 1800,
                "paid_date": f"2024-{month:02d}-03",
                "status": "late" if month == 4 else "paid",
            }
        )
    return RentPayment.from_rows(rows)


@pytest.fixture
def tenants():
    """One active tenant per property plus a former tenant."""
    return Tenant.from_rows(
        [
            {
                "id": "t1",
                "property_id": 1,
                "name": "Ana Ruiz",
                "monthly_rent": 2500,
                "status": "Active",
                "lease_end_date": "2024-07-31",
            },
            {
                "id": "t2",
                "property_id": 2,
                "name": "Sam Lee",
                "monthly_rent": 1800,
                "status": "active",
                "lease_end_date": "2025-01-31",
            },
            {
                "id": "t0",
                "property_id": 2,
                "name": "Former Tenant",
                "monthly_rent": 1700,
                "status": "inactive",
                "lease_end_date": "2023-12-31",
            },
        ]
    )


@pytest.fixture
def test_env():
    """Environment with a valid SECRET_KEY and fresh global settings."""
    with patch.dict(
        os.environ, {"SECRET_KEY": "test-secret-key-123", "APP_ENV": "testing"}, clear=True
    ):
        reset_global_settings()
        yield
    reset_global_settings()
