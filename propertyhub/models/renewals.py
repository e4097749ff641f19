"""Upcoming insurance renewals and lease expirations."""

import math
from datetime import datetime
from typing import Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel

from .assumptions import DEFAULT_ASSUMPTIONS, FinancialAssumptions
from .records import InsurancePolicy, Tenant

SECONDS_PER_DAY = 24 * 60 * 60


class PolicyRenewal(BaseModel):
    policy_id: str
    property_id: str
    policy_type: str
    annual_premium: float
    expiry_date: Optional[datetime] = None
    days_until_expiry: Optional[int] = None
    status: Literal["expired", "urgent", "warning", "ok", "unknown"]


class LeaseExpiration(BaseModel):
    tenant_id: str
    property_id: str
    name: str
    lease_end_date: datetime
    days_until_end: int
    status: Literal["expired", "ending_soon", "ok"]


def days_until(moment: datetime, as_of: datetime) -> int:
    """Whole days from ``as_of`` to ``moment``, rounded up."""
    return math.ceil((moment - as_of).total_seconds() / SECONDS_PER_DAY)


class RenewalMonitor:
    """Classifies policies and leases by how soon they run out."""

    def __init__(self, assumptions: Optional[FinancialAssumptions] = None):
        self.assumptions = assumptions or DEFAULT_ASSUMPTIONS

    def insurance_renewals(
        self, policies: Sequence[InsurancePolicy], as_of: Optional[datetime] = None
    ) -> List[PolicyRenewal]:
        """Policies ordered by expiry, soonest first; undated ones last."""
        as_of = as_of or datetime.now()
        renewals = []
        for policy in policies:
            days = None
            status = "unknown"
            if policy.expiry_date is not None:
                days = days_until(policy.expiry_date, as_of)
                if days < 0:
                    status = "expired"
                elif days < self.assumptions.insurance_urgent_days:
                    status = "urgent"
                elif days < self.assumptions.insurance_warning_days:
                    status = "warning"
                else:
                    status = "ok"
            renewals.append(
                PolicyRenewal(
                    policy_id=policy.id,
                    property_id=policy.property_id,
                    policy_type=policy.policy_type,
                    annual_premium=policy.annual_premium,
                    expiry_date=policy.expiry_date,
                    days_until_expiry=days,
                    status=status,
                )
            )
        return sorted(
            renewals,
            key=lambda r: (r.days_until_expiry is None, r.days_until_expiry or 0),
        )

    def lease_expirations(
        self, tenants: Sequence[Tenant], as_of: Optional[datetime] = None
    ) -> List[LeaseExpiration]:
        """Active tenants with a lease end date, soonest first."""
        as_of = as_of or datetime.now()
        expirations = []
        for tenant in tenants:
            if not tenant.is_active or tenant.lease_end_date is None:
                continue
            days = days_until(tenant.lease_end_date, as_of)
            if days < 0:
                status = "expired"
            elif days < self.assumptions.lease_warning_days:
                status = "ending_soon"
            else:
                status = "ok"
            expirations.append(
                LeaseExpiration(
                    tenant_id=tenant.id,
                    property_id=tenant.property_id,
                    name=tenant.name,
                    lease_end_date=tenant.lease_end_date,
                    days_until_end=days,
                    status=status,
                )
            )
        return sorted(expirations, key=lambda e: e.days_until_end)


def premium_totals_by_property(policies: Sequence[InsurancePolicy]) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for policy in policies:
        totals[policy.property_id] = totals.get(policy.property_id, 0.0) + policy.annual_premium
    return totals
