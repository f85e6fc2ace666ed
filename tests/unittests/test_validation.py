# ABOUTME: Unit tests for user-supplied name validation.
# ABOUTME: Tests normalization, potential match suggestions and error messages.

import pytest

from dunspars.app.validation import MAX_SUGGESTIONS, find_potential_matches, normalize_name, validate_name
from dunspars.errors import NotFoundError

POKEMON = ["bulbasaur", "charmander", "dunsparce", "dudunsparce", "mr-mime", "pikachu", "raichu"]


class TestNormalizeName:
    """Tests for normalize_name function."""

    def test_spaces_and_case(self) -> None:
        """User input is lowercased and hyphenated."""
        assert normalize_name("Mr Mime") == "mr-mime"
        assert normalize_name("TAPU_KOKO") == "tapu-koko"


class TestFindPotentialMatches:
    """Tests for find_potential_matches function."""

    def test_substring(self) -> None:
        """Candidates containing the value match."""
        assert find_potential_matches("sparce", POKEMON) == ["dunsparce", "dudunsparce"]

    def test_misspelling(self) -> None:
        """Close spellings with the same first letter match."""
        assert "dunsparce" in find_potential_matches("dunspars", POKEMON)

    def test_different_first_letter(self) -> None:
        """Close spellings starting differently don't match."""
        assert find_potential_matches("xikachu", POKEMON) == []

    def test_empty_value(self) -> None:
        """An empty value matches nothing."""
        assert find_potential_matches("", POKEMON) == []


class TestValidateName:
    """Tests for validate_name function."""

    def test_known_name(self) -> None:
        """Known names come back normalized."""
        assert validate_name("Mr Mime", POKEMON, "pokemon") == "mr-mime"

    def test_unknown_with_suggestions(self) -> None:
        """Unknown names list their potential matches."""
        with pytest.raises(NotFoundError) as exc_info:
            validate_name("chu", POKEMON, "pokemon")

        assert str(exc_info.value) == "Pokemon 'chu' not found. Potential matches: pikachu raichu."
        assert exc_info.value.name == "chu"

    def test_unknown_without_suggestions(self) -> None:
        """Unknown names without matches get the plain message."""
        with pytest.raises(NotFoundError, match=r"^Move 'zzz' not found\.$"):
            validate_name("zzz", ["tackle"], "move")

    def test_too_many_suggestions(self) -> None:
        """Long suggestion lists are not printed."""
        candidates = [f"move-{i}" for i in range(MAX_SUGGESTIONS + 1)]

        with pytest.raises(NotFoundError, match="too many to display"):
            validate_name("move", candidates, "move")
