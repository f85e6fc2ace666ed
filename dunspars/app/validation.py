"""ABOUTME: Validates user-supplied names against the names stored in the database.
ABOUTME: Suggests close matches when a name is misspelled."""

import difflib

from dunspars.errors import NotFoundError

SIMILARITY_THRESHOLD = 0.75
MAX_SUGGESTIONS = 20


def normalize_name(value: str) -> str:
    """Normalize user input to the stored name format.

    >>> normalize_name(" Mr Mime ")
    'mr-mime'
    """
    return value.strip().lower().replace(" ", "-").replace("_", "-")


def _is_potential_match(value: str, candidate: str) -> bool:
    if value in candidate:
        return True
    if not candidate or candidate[0] != value[0]:
        return False
    return difflib.SequenceMatcher(a=value, b=candidate).ratio() >= SIMILARITY_THRESHOLD


def find_potential_matches(value: str, candidates: list[str]) -> list[str]:
    """List candidates containing value, or starting like it and spelled similarly."""
    if not value:
        return []
    return [c for c in candidates if _is_potential_match(value, c)]


def validate_name(value: str, candidates: list[str], label: str) -> str:
    """Return the normalized name if it is a known candidate.

    Args:
        value: Name as typed by the user.
        candidates: Every valid name.
        label: Resource label used in the error message (e.g. "pokemon").

    Returns:
        The normalized name.

    Raises:
        NotFoundError: If the name is unknown, listing potential matches.
    """
    name = normalize_name(value)
    if name in candidates:
        return name

    message = f"{label.capitalize()} '{name}' not found."
    matches = find_potential_matches(name, candidates)
    if len(matches) > MAX_SUGGESTIONS:
        message += " Potential matches found; too many to display."
    elif matches:
        message += f" Potential matches: {' '.join(matches)}."
    raise NotFoundError(label, name, message)
