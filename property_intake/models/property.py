"""
Target Record Models

The wizard fills a plain dict of accepted values. Once the conversation is
complete, the caller turns that dict into one of these drafts and hands it
to the persistence layer.

DESIGN DECISION: Drafts re-validate everything the normalizers produced.
The wizard is not trusted to be the only source of records.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PropertyDraft(BaseModel):
    """A property (immeuble) ready to be created."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Property name (required)"
    )
    address: Optional[str] = Field(
        default=None,
        max_length=500
    )
    acquisition_date: Optional[date] = None
    purchase_price: Optional[Decimal] = Field(
        default=None,
        ge=0,
        decimal_places=2
    )
    current_value: Optional[Decimal] = Field(
        default=None,
        ge=0,
        decimal_places=2
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=2000
    )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> 'PropertyDraft':
        """Build a draft from a wizard's accumulated record."""
        return cls(**{key: record.get(key) for key in cls.model_fields})

    def to_payload(self) -> dict[str, Any]:
        """
        Convert to the REST payload expected by POST /properties.

        Absent values are omitted rather than sent as null.
        """
        payload = {
            "name": self.name,
            "address": self.address,
            "acquisitionDate": (
                self.acquisition_date.isoformat() if self.acquisition_date else None
            ),
            "purchasePrice": (
                float(self.purchase_price) if self.purchase_price is not None else None
            ),
            "currentValue": (
                float(self.current_value) if self.current_value is not None else None
            ),
            "notes": self.notes,
        }
        return {key: value for key, value in payload.items() if value is not None}


class MortgageDraft(BaseModel):
    """A mortgage (hypothèque) attached to an existing property."""
    model_config = ConfigDict(str_strip_whitespace=True)

    lender: str = Field(..., min_length=1, max_length=200)
    principal: Decimal = Field(..., gt=0, decimal_places=2)
    rate_percent: Decimal = Field(..., ge=0, le=100)
    term_months: int = Field(..., gt=0)
    amortization_months: int = Field(..., gt=0)
    start_date: date
    payment_frequency: int = Field(
        ...,
        gt=0,
        description="Payments per year (12 monthly, 26 biweekly, 52 weekly)"
    )

    @model_validator(mode='after')
    def validate_amortization(self) -> 'MortgageDraft':
        """The amortization period cannot be shorter than the term."""
        if self.amortization_months < self.term_months:
            raise ValueError("Amortization cannot be shorter than the term")
        return self

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> 'MortgageDraft':
        """Build a draft from a wizard's accumulated record."""
        return cls(**{key: record.get(key) for key in cls.model_fields})

    def to_payload(self) -> dict[str, Any]:
        """Convert to the REST payload expected by POST /properties/{id}/mortgages."""
        return {
            "lender": self.lender,
            "principal": float(self.principal),
            "rateAnnual": float(self.rate_percent / 100),
            "termMonths": self.term_months,
            "amortizationMonths": self.amortization_months,
            "startDate": self.start_date.isoformat(),
            "paymentFrequency": self.payment_frequency,
        }


class StoredProperty(BaseModel):
    """A property as returned by the persistence layer."""

    id: int
    draft: PropertyDraft
    created_at: datetime = Field(default_factory=datetime.utcnow)


class StoredMortgage(BaseModel):
    """A mortgage as returned by the persistence layer."""

    id: int
    property_id: int
    draft: MortgageDraft
    created_at: datetime = Field(default_factory=datetime.utcnow)
