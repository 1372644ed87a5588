"""
Question Definition Tables

Each table is the ordered script of one wizard. The engine walks it from the
first entry to the last; field ids are the keys of the accumulated record and
match the fields of the corresponding draft model.
"""

from functools import partial

from property_intake.models.conversation import FieldKind, QuestionSpec
from property_intake.wizard.normalizers import (
    parse_amount,
    parse_date,
    parse_integer,
    parse_percent,
    parse_text,
)


def _question(
    field_id: str,
    prompt_text: str,
    label: str,
    kind: FieldKind,
    is_optional: bool,
    **parse_options,
) -> QuestionSpec:
    parsers = {
        FieldKind.TEXT: parse_text,
        FieldKind.DATE: parse_date,
        FieldKind.AMOUNT: parse_amount,
        FieldKind.INTEGER: parse_integer,
        FieldKind.PERCENT: parse_percent,
    }
    return QuestionSpec(
        field_id=field_id,
        prompt_text=prompt_text,
        label=label,
        kind=kind,
        is_optional=is_optional,
        parse=partial(parsers[kind], optional=is_optional, label=label, **parse_options),
    )


PROPERTY_QUESTIONS: tuple[QuestionSpec, ...] = (
    _question(
        "name",
        "Quel est le nom de l'immeuble? (ex. Duplex Ontario)",
        "Nom",
        FieldKind.TEXT,
        is_optional=False,
        max_length=200,
    ),
    _question(
        "address",
        "Quelle est son adresse?",
        "Adresse",
        FieldKind.TEXT,
        is_optional=True,
    ),
    _question(
        "acquisition_date",
        "Quand l'as-tu acquis? (AAAA-MM-JJ ou JJ/MM/AAAA)",
        "Date d'acquisition",
        FieldKind.DATE,
        is_optional=True,
    ),
    _question(
        "purchase_price",
        "Quel a été le prix d'achat?",
        "Prix d'achat",
        FieldKind.AMOUNT,
        is_optional=True,
    ),
    _question(
        "current_value",
        "Quelle est sa valeur actuelle estimée? Tape « je ne sais pas » si tu l'ignores.",
        "Valeur actuelle",
        FieldKind.AMOUNT,
        is_optional=True,
    ),
    _question(
        "notes",
        "Des notes à ajouter sur cet immeuble?",
        "Notes",
        FieldKind.TEXT,
        is_optional=True,
        max_length=2000,
    ),
)


MORTGAGE_QUESTIONS: tuple[QuestionSpec, ...] = (
    _question(
        "lender",
        "Qui est le prêteur? (ex. Desjardins)",
        "Prêteur",
        FieldKind.TEXT,
        is_optional=False,
        max_length=200,
    ),
    _question(
        "principal",
        "Quel est le capital emprunté?",
        "Capital",
        FieldKind.AMOUNT,
        is_optional=False,
        allow_zero=False,
    ),
    _question(
        "rate_percent",
        "Quel est le taux d'intérêt annuel, en pourcentage? (ex. 4,25)",
        "Taux annuel",
        FieldKind.PERCENT,
        is_optional=False,
    ),
    _question(
        "term_months",
        "Quelle est la durée du terme, en mois? (ex. 60)",
        "Durée du terme (mois)",
        FieldKind.INTEGER,
        is_optional=False,
    ),
    _question(
        "amortization_months",
        "Quelle est la période d'amortissement, en mois? (ex. 300)",
        "Amortissement (mois)",
        FieldKind.INTEGER,
        is_optional=False,
    ),
    _question(
        "start_date",
        "À quelle date le prêt a-t-il commencé?",
        "Date de début",
        FieldKind.DATE,
        is_optional=False,
    ),
    _question(
        "payment_frequency",
        "Combien de paiements par année? (12 mensuel, 26 aux deux semaines, 52 hebdomadaire)",
        "Paiements par année",
        FieldKind.INTEGER,
        is_optional=False,
    ),
)

