"""
Field Normalizers

Turn the user's free text into typed values for the accumulated record.

Two layers:
- normalize_* helpers convert text to a value or raise ValueError
- parse_* functions wrap them and ALWAYS return a ParseOutcome

DESIGN DECISION: parse_* never raise for bad input.
A malformed answer is an expected event in a conversation; the engine turns
the Rejected message into a re-prompt instead of an error.

Mandatory fields reject empty answers and skip phrases through the same path
as any other invalid input.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from dateutil import parser as date_parser

from property_intake.models.conversation import Accepted, ParseOutcome, Rejected
from property_intake.wizard.skip import is_skip


SKIP_HINT = " Tu peux aussi répondre « passer » pour laisser ce champ vide."

DATE_FORMAT_HELP = (
    "Utilise le format AAAA-MM-JJ (ex. 2022-03-15) ou JJ/MM/AAAA (ex. 15/03/2022)."
)
AMOUNT_FORMAT_HELP = "Inscris un montant, par exemple 250000 ou 250 000,50 $."

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DAY_FIRST_DATE = re.compile(r"^(\d{1,2})([/-])(\d{1,2})\2(\d{4})$")
_FOUR_DIGIT_YEAR = re.compile(r"\d{4}")

_CURRENCY_MARKERS = ("$", "€", "£", "¥", "₹", "cad", "usd", "eur")
_GROUPING_CHARS = re.compile(r"[\s'’]")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")

CENT = Decimal("0.01")
RATE_QUANTUM = Decimal("0.001")


class FrenchParserInfo(date_parser.parserinfo):
    """dateutil vocabulary for French (and English) month names."""

    JUMP = date_parser.parserinfo.JUMP + ["le", "de", "du", "er"]
    MONTHS = [
        ("jan", "janv", "janvier", "january"),
        ("feb", "fév", "fev", "févr", "fevr", "février", "fevrier", "february"),
        ("mar", "mars", "march"),
        ("apr", "avr", "avril", "april"),
        ("may", "mai"),
        ("jun", "juin", "june"),
        ("jul", "juil", "juillet", "july"),
        ("aug", "aoû", "aou", "août", "aout", "august"),
        ("sep", "sept", "septembre", "september"),
        ("oct", "octobre", "october"),
        ("nov", "novembre", "november"),
        ("dec", "déc", "décembre", "decembre", "december"),
    ]


_PARSER_INFO = FrenchParserInfo(dayfirst=True)
_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


# =============================================================================
# VALUE HELPERS (raise ValueError)
# =============================================================================

def normalize_date(raw: str) -> str:
    """
    Convert a date answer to YYYY-MM-DD.

    Order of attempts:
    1. YYYY-MM-DD, returned verbatim when it is a real date
    2. D/M/YYYY or D-M-YYYY (day first)
    3. Best-effort dateutil parse (French month names, day first),
       only when a four-digit year is present and the day and month
       are both written out

    Raises:
        ValueError: If no attempt produces a real calendar date
    """
    text = raw.strip()

    match = _ISO_DATE.match(text)
    if match:
        date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        return text

    match = _DAY_FIRST_DATE.match(text)
    if match:
        day, month, year = int(match.group(1)), int(match.group(3)), int(match.group(4))
        return date(year, month, day).isoformat()

    if not _FOUR_DIGIT_YEAR.search(text):
        raise ValueError(f"No year in date: {text!r}")

    try:
        parsed = [
            date_parser.parse(text.lower(), parserinfo=_PARSER_INFO, default=default)
            for default in _FILL_DEFAULTS
        ]
    except OverflowError as e:
        raise ValueError(str(e)) from e

    # A part taken from the default shows up as a mismatch
    if parsed[0] != parsed[1]:
        raise ValueError(f"Incomplete date: {text!r}")
    return parsed[0].date().isoformat()


def clean_amount_text(raw: str, comma_groups_thousands: bool = True) -> str:
    """
    Reduce a money-like answer to a plain decimal string.

    - drops whitespace, apostrophes and currency markers
    - when both ',' and '.' appear, the last one is the decimal separator
    - a lone comma followed by exactly three digits groups thousands
      (unless disabled); any other lone comma is a decimal comma
    - several commas or several periods group thousands
    - any remaining non-numeric character is discarded
    """
    text = _GROUPING_CHARS.sub("", raw.strip().lower())
    for marker in _CURRENCY_MARKERS:
        text = text.replace(marker, "")

    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif text.count(",") > 1:
        text = text.replace(",", "")
    elif "," in text:
        head, tail = text.split(",")
        tail_digits = _NON_NUMERIC.sub("", tail)
        groups = comma_groups_thousands and len(tail_digits) == 3 and head
        separator = "" if groups else "."
        text = f"{head}{separator}{tail}"
    elif text.count(".") > 1:
        text = text.replace(".", "")

    return _NON_NUMERIC.sub("", text)


def normalize_amount(
    raw: str,
    quantum: Decimal = CENT,
    comma_groups_thousands: bool = True,
) -> Decimal:
    """
    Convert a money-like answer to a Decimal rounded to `quantum` (cents by default).

    Raises:
        ValueError: If nothing numeric remains or the value is not finite
    """
    text = clean_amount_text(raw, comma_groups_thousands)
    if not text or text in {"-", ".", "-."}:
        raise ValueError(f"No number in answer: {raw!r}")

    try:
        value = Decimal(text)
        if not value.is_finite():
            raise ValueError(f"Non-finite amount: {raw!r}")
        return value.quantize(quantum)
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {raw!r}") from e


# =============================================================================
# PARSERS (never raise)
# =============================================================================

def _check_presence(raw: str, optional: bool, label: str) -> Optional[ParseOutcome]:
    """
    Shared handling of blank and skip answers.

    Returns an outcome when the answer is a skip, None when parsing
    should continue.
    """
    if not is_skip(raw):
        return None
    if optional:
        return Accepted(value=None)
    return Rejected(error_message=f"« {label} » est obligatoire. Merci de répondre à cette question.")


def _with_hint(message: str, optional: bool) -> str:
    return message + SKIP_HINT if optional else message


def parse_text(
    raw: str,
    *,
    optional: bool = False,
    label: str = "Réponse",
    max_length: int = 500,
) -> ParseOutcome:
    """Trim free text; reject blanks and skips on mandatory fields."""
    outcome = _check_presence(raw, optional, label)
    if outcome is not None:
        return outcome

    text = raw.strip()
    if len(text) > max_length:
        return Rejected(error_message=_with_hint(
            f"« {label} » est trop long ({len(text)} caractères, maximum {max_length}).",
            optional,
        ))
    return Accepted(value=text)


def parse_date(
    raw: str,
    *,
    optional: bool = True,
    label: str = "Date",
) -> ParseOutcome:
    """Parse a date answer into YYYY-MM-DD."""
    outcome = _check_presence(raw, optional, label)
    if outcome is not None:
        return outcome

    try:
        return Accepted(value=normalize_date(raw))
    except ValueError:
        return Rejected(error_message=_with_hint(
            f"Je n'ai pas compris cette date. {DATE_FORMAT_HELP}",
            optional,
        ))


def parse_amount(
    raw: str,
    *,
    optional: bool = True,
    label: str = "Montant",
    allow_negative: bool = False,
    allow_zero: bool = True,
) -> ParseOutcome:
    """Parse a money-like answer into a Decimal."""
    outcome = _check_presence(raw, optional, label)
    if outcome is not None:
        return outcome

    try:
        value = normalize_amount(raw)
    except ValueError:
        return Rejected(error_message=_with_hint(
            f"Je n'ai pas compris ce montant. {AMOUNT_FORMAT_HELP}",
            optional,
        ))

    if value < 0 and not allow_negative:
        return Rejected(error_message=_with_hint(
            f"« {label} » doit être un nombre positif.", optional
        ))
    if value == 0 and not allow_zero:
        return Rejected(error_message=_with_hint(
            f"« {label} » doit être supérieur à zéro.", optional
        ))
    return Accepted(value=value)


def parse_integer(
    raw: str,
    *,
    optional: bool = False,
    label: str = "Valeur",
) -> ParseOutcome:
    """Parse a strictly positive whole number (months, payments per year)."""
    outcome = _check_presence(raw, optional, label)
    if outcome is not None:
        return outcome

    try:
        value = normalize_amount(raw)
    except ValueError:
        return Rejected(error_message=_with_hint(
            f"« {label} » doit être un nombre entier, par exemple 60.", optional
        ))

    if value != value.to_integral_value():
        return Rejected(error_message=_with_hint(
            f"« {label} » doit être un nombre entier.", optional
        ))
    if value <= 0:
        return Rejected(error_message=_with_hint(
            f"« {label} » doit être supérieur à zéro.", optional
        ))
    return Accepted(value=int(value))


def parse_percent(
    raw: str,
    *,
    optional: bool = False,
    label: str = "Taux",
) -> ParseOutcome:
    """Parse a percentage between 0 and 100, zero included."""
    outcome = _check_presence(raw, optional, label)
    if outcome is not None:
        return outcome

    message = f"« {label} » doit être un pourcentage entre 0 et 100, par exemple 4,25."
    try:
        value = normalize_amount(
            raw.replace("%", ""),
            quantum=RATE_QUANTUM,
            comma_groups_thousands=False,
        )
    except ValueError:
        return Rejected(error_message=_with_hint(message, optional))

    if not Decimal(0) <= value <= Decimal(100):
        return Rejected(error_message=_with_hint(message, optional))
    return Accepted(value=value)
