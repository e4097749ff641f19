"""
Record models for portfolio data supplied by the record store.

Records arrive from a spreadsheet-backed store where any cell may be blank,
numeric ids may come back as strings and dates may be free text. These models
normalize that input once, at the boundary, so the calculation engines can
work with clean values:

- identifiers are canonical strings
- missing or unparsable numbers become 0.0
- missing or unparsable dates become None (and are excluded by date filters)
"""

import math
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

RecordT = TypeVar("RecordT", bound="Record")


def parse_identifier(value: Any) -> str:
    """Canonicalize an identifier to a string ("5", 5 and 5.0 are the same id)."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_amount(value: Any) -> float:
    """Parse a numeric cell, substituting 0.0 for blanks and garbage."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "").replace("$", "").rstrip("%")
        if not cleaned:
            return 0.0
        try:
            number = float(cleaned)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a date cell into a naive datetime, or None when it can't be read."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class Record(BaseModel):
    """Base class for store records."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(default="", description="Opaque record identifier")

    @field_validator("id", mode="before")
    @classmethod
    def _canonical_id(cls, v: Any) -> str:
        return parse_identifier(v)

    @classmethod
    def from_rows(
        cls: Type[RecordT], rows: Optional[Iterable[Dict[str, Any]]]
    ) -> List[RecordT]:
        """Build records from raw row dictionaries (None is treated as empty)."""
        return [cls.model_validate(row) for row in rows or []]


class PropertyRecord(Record):
    """Record tied to a property through ``property_id``."""

    property_id: str = Field(default="", description="Owning property id")

    @field_validator("property_id", mode="before")
    @classmethod
    def _canonical_property_id(cls, v: Any) -> str:
        return parse_identifier(v)


class Property(Record):
    """A rental property."""

    address: str = Field(default="", description="Street address")
    city: str = Field(default="", description="City")
    state: str = Field(default="", description="State")
    current_value: float = Field(default=0.0, description="Current market value")
    purchase_price: float = Field(default=0.0, description="Original purchase price")
    purchase_date: Optional[datetime] = Field(default=None, description="Purchase date")
    market_rent: float = Field(default=0.0, description="Expected monthly market rent")

    @field_validator("address", "city", "state", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("current_value", "purchase_price", "market_rent", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> float:
        return parse_amount(v)

    @field_validator("purchase_date", mode="before")
    @classmethod
    def _date(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)


class Mortgage(PropertyRecord):
    """A mortgage secured by a property. Several may share one property."""

    lender: str = Field(default="", description="Lender name")
    current_balance: float = Field(default=0.0, description="Outstanding balance")
    interest_rate: float = Field(
        default=0.0, description="Annual interest rate in percent (6.5 means 6.5%)"
    )
    monthly_payment: float = Field(default=0.0, description="Principal and interest")
    escrow_payment: float = Field(default=0.0, description="Monthly escrow amount")
    remaining_term_months: int = Field(
        default=0, ge=0, description="Remaining term in months (0 when unknown)"
    )

    @field_validator("lender", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator(
        "current_balance",
        "interest_rate",
        "monthly_payment",
        "escrow_payment",
        mode="before",
    )
    @classmethod
    def _amount(cls, v: Any) -> float:
        return parse_amount(v)

    @field_validator("remaining_term_months", mode="before")
    @classmethod
    def _months(cls, v: Any) -> int:
        return max(0, int(parse_amount(v)))


class Expense(PropertyRecord):
    """An operating expense."""

    category: str = Field(default="other", description="Free-text category label")
    amount: float = Field(default=0.0, description="Expense amount")
    date: Optional[datetime] = Field(default=None, description="Date incurred")

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v: Any) -> str:
        text = "" if v is None else str(v).strip()
        return text or "other"

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> float:
        return parse_amount(v)

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)


class RentPayment(PropertyRecord):
    """A rent payment received (or expected) from a tenant."""

    tenant_id: str = Field(default="", description="Paying tenant id")
    amount: float = Field(default=0.0, description="Payment amount")
    paid_date: Optional[datetime] = Field(default=None, description="Payment date")
    status: str = Field(default="unknown", description="paid, pending or late")

    @field_validator("tenant_id", mode="before")
    @classmethod
    def _tenant(cls, v: Any) -> str:
        return parse_identifier(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> str:
        text = "" if v is None else str(v).strip().lower()
        return text or "unknown"

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> float:
        return parse_amount(v)

    @field_validator("paid_date", mode="before")
    @classmethod
    def _date(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)


class Tenant(PropertyRecord):
    """A tenant occupying a property."""

    name: str = Field(default="", description="Tenant name")
    monthly_rent: float = Field(default=0.0, description="Contracted monthly rent")
    status: str = Field(default="inactive", description="active or inactive")
    lease_start_date: Optional[datetime] = Field(default=None)
    lease_end_date: Optional[datetime] = Field(default=None)

    @field_validator("name", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> str:
        text = "" if v is None else str(v).strip().lower()
        return text or "inactive"

    @field_validator("monthly_rent", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> float:
        return parse_amount(v)

    @field_validator("lease_start_date", "lease_end_date", mode="before")
    @classmethod
    def _date(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @property
    def is_active(self) -> bool:
        return self.status == "active"


class InsurancePolicy(PropertyRecord):
    """An insurance policy covering a property."""

    policy_type: str = Field(default="other", description="property, liability, umbrella...")
    provider: str = Field(default="", description="Insurance carrier")
    annual_premium: float = Field(default=0.0, description="Annual premium")
    expiry_date: Optional[datetime] = Field(default=None, description="Policy expiry")

    @field_validator("policy_type", "provider", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("annual_premium", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> float:
        return parse_amount(v)

    @field_validator("expiry_date", mode="before")
    @classmethod
    def _date(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)


def records_for_property(records: Iterable[RecordT], property_id: str) -> List[RecordT]:
    """Return the records whose ``property_id`` matches a property id.

    Records without a property id belong to no property, so a blank id
    matches nothing.
    """
    if not property_id:
        return []
    return [r for r in records if getattr(r, "property_id", None) == property_id]
