"""
Skip Detection

Recognises answers that mean "I'd rather not answer this one".

Matching is deliberately permissive: after trimming and lowercasing, an answer
is a skip if it is empty, equals a known phrase, or contains one. This lets
people answer naturally ("euh, je ne sais pas encore") at the cost of
occasional false positives on long free-text answers that happen to contain a
phrase (an address mentioning "n/a", a street named "Skipper").
"""

from typing import Iterable


SKIP_PHRASES: frozenset[str] = frozenset({
    # French
    "passer",
    "je passe",
    "je ne sais pas",
    "je sais pas",
    "sais pas",
    "aucune idée",
    "aucune idee",
    "inconnu",
    "pas de réponse",
    "plus tard",
    # English
    "skip",
    "n/a",
    "don't know",
    "dont know",
    "unknown",
})


def normalize_answer(raw: str) -> str:
    """Trim, lowercase and unify typographic apostrophes."""
    return raw.strip().lower().replace("’", "'")


def is_skip(raw: str, extra_phrases: Iterable[str] = ()) -> bool:
    """
    Check whether an answer declines the question.

    Args:
        raw: The user's raw answer
        extra_phrases: Additional lowercase phrases to recognise

    Returns:
        True for empty answers and answers containing a skip phrase
    """
    text = normalize_answer(raw)
    if not text:
        return True

    for phrase in SKIP_PHRASES.union(extra_phrases):
        if text == phrase or phrase in text:
            return True
    return False
