"""
Guided Intake Wizard

A linear, single-pass question/answer flow that fills a record from
free-text answers.
"""

from property_intake.wizard.engine import WizardEngine, WizardStateError, is_completed
from property_intake.wizard.normalizers import (
    normalize_amount,
    normalize_date,
    parse_amount,
    parse_date,
    parse_integer,
    parse_percent,
    parse_text,
)
from property_intake.wizard.questions import MORTGAGE_QUESTIONS, PROPERTY_QUESTIONS
from property_intake.wizard.skip import SKIP_PHRASES, is_skip
from property_intake.wizard.summary import SummaryBuilder, SummaryField

__all__ = [
    # Engine
    "WizardEngine",
    "WizardStateError",
    "is_completed",
    # Question tables
    "MORTGAGE_QUESTIONS",
    "PROPERTY_QUESTIONS",
    # Normalizers
    "normalize_amount",
    "normalize_date",
    "parse_amount",
    "parse_date",
    "parse_integer",
    "parse_percent",
    "parse_text",
    # Skip detection
    "SKIP_PHRASES",
    "is_skip",
    # Summary
    "SummaryBuilder",
    "SummaryField",
]
