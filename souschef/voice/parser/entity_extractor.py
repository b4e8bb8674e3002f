"""Parameter extraction from cooking voice transcripts.

Pulls timer durations and ingredient names out of natural language:
"set a timer for twenty five minutes", "half an hour", "swap the butter".
"""

from __future__ import annotations

import math
import re

UNITS = {
    "zero": 0, "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4,
    "five": 5, "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14,
    "fifteen": 15, "sixteen": 16, "seventeen": 17, "eighteen": 18,
    "nineteen": 19,
}

TENS = {
    "twenty": 20, "thirty": 30, "forty": 40, "fifty": 50,
    "sixty": 60, "seventy": 70, "eighty": 80, "ninety": 90,
}

_NUMBER_WORD = "|".join(sorted([*UNITS, *TENS], key=len, reverse=True))
_NUMBER = rf"(?:\d+(?:\.\d+)?|(?:{_NUMBER_WORD})(?:[\s-]+(?:{_NUMBER_WORD}))?)"
_MINUTE_UNIT = r"(?:minutes?|mins?)"
_HOUR_UNIT = r"(?:hours?|hrs?)"
_SECOND_UNIT = r"(?:seconds?|secs?)"

_HALF_HOUR = re.compile(r"\bhalf\s+(?:an?\s+)?hour\b")
_QUARTER_HOUR = re.compile(r"\b(?:a\s+)?quarter\s+(?:of\s+an?\s+)?hour\b")
_AMOUNT_UNIT = re.compile(
    rf"\b(?P<amount>{_NUMBER})\s*(?:-\s*)?(?P<unit>{_MINUTE_UNIT}|{_HOUR_UNIT}|{_SECOND_UNIT})\b"
)
_TIMER_BARE_NUMBER = re.compile(
    rf"\btimer\s+(?:for\s+)?(?P<amount>{_NUMBER})\b(?!\s*(?:-\s*)?{_SECOND_UNIT}\b)"
)

_SUBSTITUTE = re.compile(
    r"(?:what\s+can\s+i\s+use\s+instead\s+of|what\s+can\s+replace|instead\s+of"
    r"|substitute|replace|swap)\s+(?:for\s+)?(?:the\s+|some\s+|my\s+)?(?P<ingredient>.+)"
)
_TRAILING_FILLER = re.compile(r"\s*(?:please|with\s+something(?:\s+else)?|for\s+me)\s*$")


def words_to_number(text: str) -> float | None:
    """Convert a digit string or number words ("twenty five") to a number."""
    text = text.strip().lower()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        pass

    total = 0
    seen = False
    for word in re.split(r"[\s-]+", text):
        if word in TENS:
            total += TENS[word]
        elif word in UNITS:
            total += UNITS[word]
        else:
            return None
        seen = True
    return float(total) if seen else None


def extract_minutes(text: str) -> int | None:
    """Extract a duration in whole minutes.

    Handles: "10 minutes", "ten minutes", "twenty-five min", "2 hours",
    "an hour", "half an hour", "timer for 7". Seconds round up to the next
    minute ("90 seconds" is 2). An explicit zero is returned as 0 so callers
    can reject it.
    """
    text = text.lower()

    if _HALF_HOUR.search(text):
        return 30
    if _QUARTER_HOUR.search(text):
        return 15

    match = _AMOUNT_UNIT.search(text)
    if match:
        amount = words_to_number(match.group("amount"))
        if amount is not None:
            unit = match.group("unit")
            if re.fullmatch(_HOUR_UNIT, unit):
                return int(round(amount * 60))
            if re.fullmatch(_SECOND_UNIT, unit):
                return math.ceil(amount / 60)
            return int(round(amount))

    match = _TIMER_BARE_NUMBER.search(text)
    if match:
        amount = words_to_number(match.group("amount"))
        if amount is not None:
            return int(round(amount))

    return None


def extract_ingredient(text: str) -> str | None:
    """Extract the ingredient named in a substitution request."""
    match = _SUBSTITUTE.search(text.lower())
    if not match:
        return None
    ingredient = _TRAILING_FILLER.sub("", match.group("ingredient"))
    ingredient = ingredient.strip(" .,!?")
    return ingredient or None
