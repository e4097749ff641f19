"""Tests for the analytics API endpoints."""

import json

import pytest

from propertyhub import create_app

PROPERTIES = [
    {"id": 1, "address": "12 Oak St", "current_value": 400000, "purchase_price": 300000, "purchase_date": "2019-06-15"},
    {"id": 2, "address": "88 Pine Ave", "current_value": 250000, "purchase_price": 240000, "purchase_date": "2022-01-10"},
]
MORTGAGES = [
    {"id": "m1", "property_id": 1, "lender": "First Bank", "current_balance": 200000, "interest_rate": 7.0, "monthly_payment": 1500, "remaining_term_months": 300},
    {"id": "m3", "property_id": 2, "lender": "Mortgage Co", "current_balance": 210000, "interest_rate": 5.0, "monthly_payment": 1200, "remaining_term_months": 348},
]
EXPENSES = [
    {"id": "e1", "property_id": 1, "category": "repairs", "amount": 400, "date": "2024-01-20"},
    {"id": "e2", "property_id": 2, "category": "insurance", "amount": 1200, "date": "2024-03-01"},
]
RENT_PAYMENTS = [
    {"id": f"r{m}", "property_id": 1, "amount": 2500, "paid_date": f"2024-{m:02d}-01"}
    for m in range(1, 7)
]


@pytest.fixture
def client(test_env):
    """Create a test client with a valid configuration."""
    app = create_app("testing")
    return app.test_client()


class TestReportEndpoint:
    """Test cases for POST /api/analytics/report."""

    def test_custom_period_report(self, client):
        """Test a report over the first half of 2024."""
        response = client.post(
            "/api/analytics/report",
            json={
                "properties": PROPERTIES,
                "mortgages": MORTGAGES,
                "expenses": EXPENSES,
                "rent_payments": RENT_PAYMENTS,
                "period": "custom",
                "custom_start": "2024-01-01",
                "custom_end": "2024-06-30",
            },
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["portfolio"]["total_value"] == 650000
        assert data["portfolio"]["total_income"] == 15000
        assert data["portfolio"]["months_in_period"] == 6
        assert len(data["trend"]) == 6
        assert data["expense_breakdown"][0]["category"] == "insurance"
        assert [p["property_id"] for p in data["properties"]] == ["1", "2"]

    def test_high_ltv_alert(self, client):
        """Test that KPI alerts are included."""
        response = client.post(
            "/api/analytics/report",
            json={
                "properties": PROPERTIES,
                "mortgages": MORTGAGES,
                "period": "custom",
                "custom_start": "2024-01-01",
                "custom_end": "2024-06-30",
            },
        )

        data = json.loads(response.data)
        assert {"property_id": "2", "kpi_id": "high-ltv"} in [
            {"property_id": a["property_id"], "kpi_id": a["kpi_id"]} for a in data["alerts"]
        ]

    def test_unknown_period(self, client):
        """Test that an unknown period is a bad request."""
        response = client.post("/api/analytics/report", json={"period": "decade"})

        assert response.status_code == 400
        assert "error" in json.loads(response.data)

    def test_inverted_custom_range(self, client):
        """Test that a range ending before it starts is a bad request."""
        response = client.post(
            "/api/analytics/report",
            json={"period": "custom", "custom_start": "2024-06-01", "custom_end": "2024-01-01"},
        )

        assert response.status_code == 400

    def test_non_json_body(self, client):
        """Test that a non-object body is a bad request."""
        response = client.post("/api/analytics/report", data="hello")

        assert response.status_code == 400
        assert json.loads(response.data) == {"error": "Request body must be a JSON object"}


class TestRefinanceEndpoint:
    """Test cases for POST /api/analytics/refinance."""

    def test_default_scenarios(self, client):
        """Test the comparison against default scenarios."""
        response = client.post("/api/analytics/refinance", json={"mortgage": MORTGAGES[0]})

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["scenarios"][0]["name"] == "Current"
        assert data["best_scenario"]["name"] == "Scenario 2"

    def test_never_breaks_even_serializes_as_null(self, client):
        """Test that an infinite break-even is null with an explicit flag."""
        response = client.post(
            "/api/analytics/refinance",
            json={
                "mortgage": MORTGAGES[0],
                "scenarios": [{"name": "Worse", "rate": 9.0, "term_years": 30, "closing_costs": 2000}],
            },
        )

        data = json.loads(response.data)
        worse = data["scenarios"][1]
        assert worse["break_even_months"] is None
        assert worse["breaks_even"] is False
        assert worse["recommendation"] == "Poor"

    def test_missing_mortgage(self, client):
        """Test that the mortgage is required."""
        response = client.post("/api/analytics/refinance", json={})

        assert response.status_code == 400


class TestDebtPaydownEndpoint:
    """Test cases for POST /api/analytics/debt-paydown."""

    def test_rollover_comparison(self, client):
        """Test the rollover model through the API."""
        response = client.post(
            "/api/analytics/debt-paydown",
            json={
                "mortgages": [
                    {"id": "a", "current_balance": 5000, "interest_rate": 4, "monthly_payment": 200},
                    {"id": "b", "current_balance": 50000, "interest_rate": 20, "monthly_payment": 900},
                ],
                "extra_payment": 500,
                "rollover": True,
            },
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert [row["loan_id"] for row in data["snowball"]["schedule"]] == ["a", "b"]
        assert [row["loan_id"] for row in data["avalanche"]["schedule"]] == ["b", "a"]
        assert data["interest_saved_by_avalanche"] > 0

    def test_non_amortizing_loan(self, client):
        """Test that an unpayable loan reports null totals and a status."""
        response = client.post(
            "/api/analytics/debt-paydown",
            json={
                "mortgages": [
                    {"id": "c", "lender": "Hard Money", "current_balance": 100000, "interest_rate": 12, "monthly_payment": 500}
                ],
                "extra_payment": 0,
            },
        )

        data = json.loads(response.data)
        assert data["snowball"]["total_interest"] is None
        assert data["snowball"]["status"] == "non_amortizing"
        assert data["snowball"]["is_payable"] is False
        assert data["snowball"]["warnings"]
        assert data["interest_saved_by_avalanche"] is None

    def test_negative_extra_payment(self, client):
        """Test that a negative extra payment is a bad request."""
        response = client.post(
            "/api/analytics/debt-paydown", json={"mortgages": MORTGAGES, "extra_payment": -10}
        )

        assert response.status_code == 400
        assert "extra_payment" in json.loads(response.data)["error"]

    def test_non_numeric_extra_payment(self, client):
        """Test that a non-numeric extra payment is a bad request."""
        response = client.post(
            "/api/analytics/debt-paydown", json={"mortgages": MORTGAGES, "extra_payment": "lots"}
        )

        assert response.status_code == 400

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", '"nan"', '"inf"'])
    def test_non_finite_extra_payment(self, client, raw):
        """Test that NaN and infinite extra payments are bad requests."""
        body = '{"mortgages": %s, "extra_payment": %s}' % (json.dumps(MORTGAGES), raw)
        response = client.post(
            "/api/analytics/debt-paydown", data=body, content_type="application/json"
        )

        assert response.status_code == 400
        assert "finite" in json.loads(response.data)["error"]

    @pytest.mark.parametrize("flag", ["false", "true", 0, 1, None])
    def test_rollover_must_be_boolean(self, client, flag):
        """Test that only a JSON boolean selects the rollover model."""
        response = client.post(
            "/api/analytics/debt-paydown",
            json={"mortgages": MORTGAGES, "extra_payment": 100, "rollover": flag},
        )

        assert response.status_code == 400
        assert "rollover" in json.loads(response.data)["error"]

    def test_rollover_false_keeps_sequential_model(self, client):
        """Test that an explicit false runs the sequential model."""
        response = client.post(
            "/api/analytics/debt-paydown",
            json={"mortgages": MORTGAGES, "extra_payment": 100, "rollover": False},
        )

        assert response.status_code == 200
        assert json.loads(response.data)["snowball"]["rollover"] is False


class TestTaxAndRenewalEndpoints:
    """Test cases for the tax report and renewal endpoints."""

    def test_tax_report(self, client):
        """Test the combined tax report."""
        response = client.post(
            "/api/analytics/tax-report",
            json={"properties": PROPERTIES, "mortgages": MORTGAGES, "expenses": EXPENSES},
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["deductions"]["total_deductions"] == 1600
        assert data["summary"]["recommended_forms"][0] == "Schedule E"

    def test_renewals(self, client):
        """Test insurance renewals as of a given day."""
        response = client.post(
            "/api/analytics/renewals",
            json={
                "insurance_policies": [
                    {"id": "p1", "property_id": 1, "annual_premium": 800, "expiry_date": "2024-07-01"}
                ],
                "as_of": "2024-06-20",
            },
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["insurance"][0]["status"] == "urgent"
        assert data["insurance"][0]["days_until_expiry"] == 11


class TestScenarioAndScoreEndpoints:
    """Test cases for the scenario and investment score endpoints."""

    def test_scenarios(self, client):
        """Test a single template scenario over one year."""
        response = client.post(
            "/api/analytics/scenarios",
            json={
                "properties": PROPERTIES,
                "mortgages": MORTGAGES,
                "expenses": EXPENSES,
                "rent_payments": RENT_PAYMENTS,
                "scenarios": [{"template": "moderate", "months": 12}],
                "as_of": "2024-06-30",
            },
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["baseline"]["total_value"] == 650000
        assert len(data["scenarios"]) == 1
        assert len(data["scenarios"][0]["projections"]) == 13
        assert data["comparison"][0]["template"] == "moderate"
        assert data["scenarios"][0]["risk"]["level"] in ("Low", "Medium", "High")

    def test_scenarios_must_be_a_list(self, client):
        """Test that a bare template name is a bad request."""
        response = client.post(
            "/api/analytics/scenarios",
            json={"properties": PROPERTIES, "scenarios": "moderate"},
        )

        assert response.status_code == 400
        assert "scenarios" in json.loads(response.data)["error"]

    def test_unknown_template(self, client):
        """Test that an unknown template is a bad request."""
        response = client.post(
            "/api/analytics/scenarios",
            json={"properties": PROPERTIES, "scenarios": [{"template": "moonshot"}]},
        )

        assert response.status_code == 400

    def test_investment_scores(self, client):
        """Test the investment scorecard."""
        response = client.post(
            "/api/analytics/investment-scores",
            json={
                "properties": PROPERTIES,
                "mortgages": MORTGAGES,
                "expenses": EXPENSES,
                "tenants": [
                    {"id": "t1", "property_id": 1, "monthly_rent": 2500, "status": "active"},
                    {"id": "t2", "property_id": 2, "monthly_rent": 1800, "status": "active"},
                ],
                "as_of": "2024-06-30",
            },
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert [p["property_id"] for p in data["properties"]] == ["1", "2"]
        assert all(0 <= p["performance_score"] <= 100 for p in data["properties"])
        assert all(0 <= p["risk_score"] <= 100 for p in data["properties"])
