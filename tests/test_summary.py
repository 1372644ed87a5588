"""Tests for the confirmation summary."""

from decimal import Decimal

from property_intake.models.conversation import FieldKind
from property_intake.wizard import MORTGAGE_QUESTIONS, PROPERTY_QUESTIONS
from property_intake.wizard.summary import (
    NBSP,
    SummaryBuilder,
    SummaryField,
    format_amount,
    format_percent,
)


class TestFormatting:
    """Tests for value formatting."""

    def test_amount_groups_thousands(self):
        """Test fr-CA grouping with no-break spaces and a decimal comma."""
        assert format_amount(Decimal("1234567.891")) == f"1{NBSP}234{NBSP}567,89{NBSP}$"

    def test_small_amount(self):
        """Test amounts below a thousand have no grouping."""
        assert format_amount(Decimal("0")) == f"0,00{NBSP}$"
        assert format_amount(Decimal("999.5")) == f"999,50{NBSP}$"

    def test_amount_custom_symbol(self):
        """Test the currency symbol is configurable."""
        assert format_amount(Decimal("10"), "CAD") == f"10,00{NBSP}CAD"

    def test_percent(self):
        """Test rates drop trailing zeros."""
        assert format_percent(Decimal("4.250")) == f"4,25{NBSP}%"
        assert format_percent(Decimal("5.000")) == f"5{NBSP}%"


class TestSummaryBuilder:
    """Tests for SummaryBuilder."""

    def test_layout_follows_questions(self):
        """Test one line per question, in table order."""
        builder = SummaryBuilder.from_questions(PROPERTY_QUESTIONS)
        text = builder.build_summary({})
        lines = text.splitlines()

        assert lines[0] == "Voici le récapitulatif :"
        field_lines = lines[1:1 + len(PROPERTY_QUESTIONS)]
        assert field_lines == [f"- {q.label} : —" for q in PROPERTY_QUESTIONS]
        assert lines[-1] == "Vérifie les informations avant d'enregistrer."

    def test_deterministic(self):
        """Test the same record always renders the same text."""
        builder = SummaryBuilder.from_questions(MORTGAGE_QUESTIONS)
        record = {
            "lender": "Desjardins",
            "principal": Decimal("300000.00"),
            "rate_percent": Decimal("4.250"),
            "term_months": 60,
            "amortization_months": 300,
            "start_date": "2022-04-01",
            "payment_frequency": 12,
        }
        assert builder.build_summary(record) == builder.build_summary(dict(record))

    def test_mortgage_values(self):
        """Test every kind is formatted."""
        builder = SummaryBuilder.from_questions(MORTGAGE_QUESTIONS)
        text = builder.build_summary({
            "lender": "Desjardins",
            "principal": Decimal("300000.00"),
            "rate_percent": Decimal("4.250"),
            "term_months": 60,
            "start_date": "2022-04-01",
        })
        lines = text.splitlines()

        assert "- Prêteur : Desjardins" in lines
        assert f"- Capital : 300{NBSP}000,00{NBSP}$" in lines
        assert f"- Taux annuel : 4,25{NBSP}%" in lines
        assert "- Durée du terme (mois) : 60" in lines
        assert "- Amortissement (mois) : —" in lines
        assert "- Date de début : 2022-04-01" in lines

    def test_unknown_record_keys_ignored(self):
        """Test only layout fields are rendered."""
        builder = SummaryBuilder([SummaryField(field_id="name", label="Nom")], closing=None)
        text = builder.build_summary({"name": "Duplex", "other": "x"})
        assert text == "Voici le récapitulatif :\n- Nom : Duplex"

    def test_placeholder_and_empty_string(self):
        """Test empty strings render as missing."""
        builder = SummaryBuilder(
            [SummaryField(field_id="notes", label="Notes", kind=FieldKind.TEXT)],
            closing=None,
            missing_placeholder="(vide)",
        )
        assert builder.build_summary({"notes": ""}).endswith("- Notes : (vide)")
