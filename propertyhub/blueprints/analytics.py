"""
Analytics blueprint exposing the calculation engines as JSON endpoints.

The caller posts snapshots of store records and receives derived metrics.
Nothing is persisted. Infinite and undeterminable values (a loan that never
pays off, a refinance that never breaks even) serialize as null next to an
explicit status field.
"""

import logging
import math
from typing import Any

from flask import Blueprint, Response, current_app, jsonify, request
from pydantic import BaseModel, ValidationError

from propertyhub.models.exceptions import AnalyticsError
from propertyhub.models.records import parse_timestamp
from propertyhub.models.time_periods import ReportRequest
from propertyhub.services.analytics_service import AnalyticsService

logger = logging.getLogger(__name__)

analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


def _service() -> AnalyticsService:
    return AnalyticsService(current_app.config.get("ASSUMPTIONS"))


def _json(model: BaseModel) -> Response:
    return Response(model.model_dump_json(), mimetype="application/json")


def _payload() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise AnalyticsError("Request body must be a JSON object")
    return data


@analytics_bp.errorhandler(AnalyticsError)
@analytics_bp.errorhandler(ValidationError)
def handle_bad_request(error: Exception) -> Any:
    """Invalid input is the caller's problem: answer 400."""
    logger.warning(f"Rejected analytics request: {error}")
    return jsonify({"error": str(error)}), 400


@analytics_bp.route("/report", methods=["POST"])
def portfolio_report() -> Any:
    """Portfolio report, property comparison, expense breakdown and trend.

    Returns:
        JSON AnalyticsReport
    """
    data = _payload()
    report_request = ReportRequest(
        period=data.get("period", "year"),
        custom_start=data.get("custom_start"),
        custom_end=data.get("custom_end"),
    )
    report = _service().build_report(
        data.get("properties"),
        data.get("mortgages"),
        data.get("expenses"),
        data.get("rent_payments"),
        data.get("tenants"),
        request=report_request,
    )
    return _json(report)


@analytics_bp.route("/refinance", methods=["POST"])
def refinance() -> Any:
    """Refinance comparison for one mortgage."""
    data = _payload()
    mortgage = data.get("mortgage")
    if not isinstance(mortgage, dict):
        raise AnalyticsError("mortgage must be an object")
    return _json(_service().refinance(mortgage, data.get("scenarios")))


@analytics_bp.route("/debt-paydown", methods=["POST"])
def debt_paydown() -> Any:
    """Snowball vs avalanche comparison."""
    data = _payload()
    try:
        extra_payment = float(data.get("extra_payment", 0) or 0)
    except (TypeError, ValueError):
        raise AnalyticsError("extra_payment must be a number")
    if not math.isfinite(extra_payment):
        raise AnalyticsError("extra_payment must be a finite number")
    rollover = data.get("rollover", False)
    if not isinstance(rollover, bool):
        raise AnalyticsError("rollover must be true or false")
    comparison = _service().debt_paydown(
        data.get("mortgages"), extra_payment, rollover=rollover
    )
    return _json(comparison)


@analytics_bp.route("/tax-report", methods=["POST"])
def tax_report() -> Any:
    """Depreciation, deductions and tax savings estimate."""
    data = _payload()
    return _json(
        _service().tax_report(
            data.get("properties"), data.get("mortgages"), data.get("expenses")
        )
    )


@analytics_bp.route("/renewals", methods=["POST"])
def renewals() -> Any:
    """Upcoming insurance renewals and lease expirations."""
    data = _payload()
    return _json(
        _service().renewals(
            data.get("insurance_policies"),
            data.get("tenants"),
            as_of=parse_timestamp(data.get("as_of")),
        )
    )


@analytics_bp.route("/scenarios", methods=["POST"])
def scenarios() -> Any:
    """Growth projections for the template or caller-supplied scenarios."""
    data = _payload()
    requested = data.get("scenarios")
    if requested is not None and not isinstance(requested, list):
        raise AnalyticsError("scenarios must be a list")
    return _json(
        _service().scenarios(
            data.get("properties"),
            data.get("mortgages"),
            data.get("expenses"),
            data.get("rent_payments"),
            requested,
            as_of=parse_timestamp(data.get("as_of")),
        )
    )


@analytics_bp.route("/investment-scores", methods=["POST"])
def investment_scores() -> Any:
    """Performance and risk scores per property."""
    data = _payload()
    return _json(
        _service().investment_scores(
            data.get("properties"),
            data.get("mortgages"),
            data.get("expenses"),
            data.get("tenants"),
            as_of=parse_timestamp(data.get("as_of")),
        )
    )
