"""
Confirmation Summary

Renders a finished record as the message the user reviews before saving.

The builder only sees the record and a fixed field layout. It never looks at
the conversation, so the same record always produces the same text.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict

from property_intake.models.conversation import FieldKind, QuestionSpec


NBSP = "\u00a0"
CENT = Decimal("0.01")


class SummaryField(BaseModel):
    """One line of the summary: which record key, under which label, in which format."""
    model_config = ConfigDict(frozen=True)

    field_id: str
    label: str
    kind: FieldKind = FieldKind.TEXT


def format_amount(value: Any, currency_symbol: str = "$") -> str:
    """Format money the fr-CA way: 1 234 567,89 $ (no-break spaces)."""
    amount = Decimal(str(value)).quantize(CENT)
    grouped = f"{amount:,.2f}"
    return grouped.replace(",", NBSP).replace(".", ",") + NBSP + currency_symbol


def format_percent(value: Any) -> str:
    """Format a rate with a decimal comma and no trailing zeros: 4,25 %."""
    rate = Decimal(str(value)).normalize()
    return format(rate, "f").replace(".", ",") + NBSP + "%"


class SummaryBuilder:
    """
    Builds the confirmation message for one record layout.

    Usage:
        builder = SummaryBuilder.from_questions(PROPERTY_QUESTIONS)
        text = builder.build_summary({"name": "Duplex Ontario"})
    """

    def __init__(
        self,
        fields: Iterable[SummaryField],
        title: str = "Voici le récapitulatif :",
        closing: Optional[str] = "Vérifie les informations avant d'enregistrer.",
        missing_placeholder: str = "—",
        currency_symbol: str = "$",
    ):
        self._fields = tuple(fields)
        self._title = title
        self._closing = closing
        self._missing = missing_placeholder
        self._currency_symbol = currency_symbol

    @classmethod
    def from_questions(
        cls,
        questions: Iterable[QuestionSpec],
        **options,
    ) -> 'SummaryBuilder':
        """Use a question table's order and labels as the layout."""
        fields = [
            SummaryField(field_id=q.field_id, label=q.label, kind=q.kind)
            for q in questions
        ]
        return cls(fields, **options)

    @property
    def fields(self) -> tuple[SummaryField, ...]:
        return self._fields

    def format_value(self, kind: FieldKind, value: Any) -> str:
        """Render one value; absent values become the placeholder."""
        if value is None or value == "":
            return self._missing

        if kind == FieldKind.AMOUNT:
            return format_amount(value, self._currency_symbol)
        if kind == FieldKind.PERCENT:
            return format_percent(value)
        if kind == FieldKind.INTEGER:
            return str(int(value))
        if kind == FieldKind.DATE and isinstance(value, date):
            return value.isoformat()
        return str(value)

    def build_summary(self, record: dict[str, Any]) -> str:
        """One line per field, in layout order."""
        lines = [self._title]
        for field in self._fields:
            value = self.format_value(field.kind, record.get(field.field_id))
            lines.append(f"- {field.label} : {value}")
        if self._closing:
            lines.append("")
            lines.append(self._closing)
        return "\n".join(lines)
