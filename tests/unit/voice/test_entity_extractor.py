"""Tests for timer duration and ingredient extraction."""

import pytest

from souschef.voice.parser.entity_extractor import (
    extract_ingredient,
    extract_minutes,
    words_to_number,
)


class TestWordsToNumber:
    """Digit strings and spoken numbers."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("10", 10.0),
            ("2.5", 2.5),
            ("ten", 10.0),
            ("twenty five", 25.0),
            ("forty-five", 45.0),
            ("an", 1.0),
        ],
    )
    def test_numbers(self, text, expected):
        assert words_to_number(text) == expected

    @pytest.mark.parametrize("text", ["", "lots", "ten pans"])
    def test_not_numbers(self, text):
        assert words_to_number(text) is None


class TestExtractMinutes:
    """Durations normalised to whole minutes."""

    @pytest.mark.parametrize(
        "text,minutes",
        [
            ("set a timer for 10 minutes", 10),
            ("timer 5 mins", 5),
            ("twenty-five min timer", 25),
            ("set a timer for a minute", 1),
            ("two hours", 120),
            ("an hour", 60),
            ("1.5 hours", 90),
            ("half an hour", 30),
            ("a quarter of an hour", 15),
            ("timer for 12", 12),
        ],
    )
    def test_durations(self, text, minutes):
        assert extract_minutes(text) == minutes

    def test_case_insensitive(self):
        assert extract_minutes("Timer For Ten Minutes") == 10

    @pytest.mark.parametrize(
        "text,minutes",
        [
            ("set a timer for 90 seconds", 2),
            ("timer for 30 seconds", 1),
            ("sixty seconds", 1),
            ("timer 45 secs", 1),
            ("set a timer for 120 seconds", 2),
        ],
    )
    def test_seconds_round_up_to_minutes(self, text, minutes):
        assert extract_minutes(text) == minutes

    @pytest.mark.parametrize("text", ["set a timer for 0 minutes", "timer for zero", "0 seconds"])
    def test_explicit_zero_is_kept(self, text):
        assert extract_minutes(text) == 0

    @pytest.mark.parametrize("text", ["set a timer", "next step", ""])
    def test_no_duration(self, text):
        assert extract_minutes(text) is None


class TestExtractIngredient:
    """Ingredient named in a substitution request."""

    @pytest.mark.parametrize(
        "text,ingredient",
        [
            ("substitute for eggs", "eggs"),
            ("replace the butter", "butter"),
            ("swap my heavy cream please", "heavy cream"),
            ("what can I use instead of buttermilk?", "buttermilk"),
            ("substitute sour cream with something else", "sour cream"),
        ],
    )
    def test_ingredients(self, text, ingredient):
        assert extract_ingredient(text) == ingredient

    def test_missing_ingredient(self):
        assert extract_ingredient("substitute") is None

    def test_unrelated_text(self):
        assert extract_ingredient("next step") is None
