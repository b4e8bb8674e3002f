"""Command parsing for cooking-mode voice input.

Uses priority-sorted regex patterns to map a transcript to one command.
Specific intents are checked before generic ones ("set a timer for 10
minutes" before the bare "timer" keyword), and the first match wins.
Unrecognised input yields UNKNOWN, which is a normal outcome.
"""

from __future__ import annotations

import re
from typing import Any, Callable

from souschef.voice.models import COMMAND_EXAMPLES, CommandType, VoiceCommand
from souschef.voice.parser.entity_extractor import extract_ingredient, extract_minutes

DEFAULT_TIMER_MINUTES = 5

# Returns the command parameters, or None when the pattern matched but the
# required parameter is missing (the next pattern is tried instead).
Extractor = Callable[[str], "dict[str, Any] | None"]


def _timer_with_duration(text: str) -> dict[str, Any] | None:
    minutes = extract_minutes(text)
    return {"minutes": minutes} if minutes is not None else None


def _timer_default(text: str) -> dict[str, Any] | None:
    return {"minutes": DEFAULT_TIMER_MINUTES}


def _substitution(text: str) -> dict[str, Any] | None:
    ingredient = extract_ingredient(text)
    return {"ingredient": ingredient} if ingredient else None


# Command patterns: (pattern, command, priority, confidence, extractor)
# Higher priority = matched first.
COMMAND_PATTERNS: list[tuple[str, CommandType, int, int, Extractor | None]] = [
    # Timers: explicit duration first, then the keyword alone
    (r"\btimers?\b", CommandType.SET_TIMER, 100, 90, _timer_with_duration),
    (r"\btimers?\b", CommandType.SET_TIMER, 95, 70, _timer_default),

    # Substitutions (need an ingredient)
    (r"\b(?:substitute|replace|swap|instead\s+of)\b", CommandType.SUBSTITUTE, 90, 85, _substitution),

    # Reading
    (r"\bingredients?\b|\bwhat\s+do\s+i\s+need\b", CommandType.READ_INGREDIENTS, 80, 90, None),
    (r"\bwhere\s+am\s+i\b|\b(?:what|which)\s+step\b|\bcurrent\s+step\b", CommandType.CURRENT_STEP, 75, 90, None),

    # Navigation
    (r"\b(?:go\s+back|back|previous(?:\s+step)?|last\s+step)\b", CommandType.PREVIOUS_STEP, 70, 90, None),
    (r"\b(?:next(?:\s+step)?|continue|go\s+on|move\s+on)\b", CommandType.NEXT_STEP, 65, 90, None),
    (
        r"\b(?:read(?:\s+(?:this|it|that|step|the\s+step))?|repeat|say\s+(?:that|it)\s+again|what\s+does\s+it\s+say)\b",
        CommandType.READ_STEP, 60, 90, None,
    ),

    # Help
    (r"\b(?:help|what\s+can\s+i\s+say|(?:voice\s+)?commands)\b", CommandType.HELP, 40, 90, None),
]

# Compiled pattern cache
_compiled_patterns: list[tuple[re.Pattern, CommandType, int, int, Extractor | None]] | None = None


def _get_patterns() -> list[tuple[re.Pattern, CommandType, int, int, Extractor | None]]:
    """Get compiled patterns sorted by priority (highest first)."""
    global _compiled_patterns
    if _compiled_patterns is None:
        _compiled_patterns = sorted(
            [
                (re.compile(p, re.IGNORECASE), command, pri, conf, extractor)
                for p, command, pri, conf, extractor in COMMAND_PATTERNS
            ],
            key=lambda x: x[2],
            reverse=True,
        )
    return _compiled_patterns


def parse(transcript: str) -> VoiceCommand:
    """Parse a transcript (wake word already removed) into a VoiceCommand."""
    text = (transcript or "").strip().lower()
    if not text:
        return VoiceCommand(command=CommandType.UNKNOWN, raw_transcript=transcript or "")

    for pattern, command, _priority, confidence, extractor in _get_patterns():
        match = pattern.search(text)
        if not match:
            continue

        parameters: dict[str, Any] = {}
        if extractor is not None:
            extracted = extractor(text)
            if extracted is None:
                continue
            parameters = extracted

        # A short utterance that is nothing but the command phrase is unambiguous
        if match.group(0) == text:
            confidence = max(confidence, 95)

        return VoiceCommand(
            command=command,
            parameters=parameters,
            raw_transcript=transcript,
            confidence=confidence,
        )

    return VoiceCommand(command=CommandType.UNKNOWN, raw_transcript=transcript)


def is_valid_command(command: VoiceCommand, min_confidence: int = 50) -> bool:
    """Whether a parsed command is confident and complete enough to act on."""
    if command.confidence < min_confidence:
        return False

    if command.command == CommandType.SET_TIMER:
        return bool(command.minutes) and command.minutes > 0

    if command.command == CommandType.SUBSTITUTE:
        return bool(command.ingredient)

    return command.command != CommandType.UNKNOWN


def suggest_closest(text: str) -> str:
    """Suggest what the user might have meant."""
    text_lower = text.lower()

    if any(w in text_lower for w in ("minute", "alarm", "clock", "time")):
        return 'Try: "set a timer for 5 minutes"'
    if any(w in text_lower for w in ("step", "forward", "skip")):
        return 'Try: "next step" or "go back"'
    if any(w in text_lower for w in ("need", "list", "shopping")):
        return 'Try: "what ingredients do I need?"'
    if any(w in text_lower for w in ("use", "without", "out of", "don't have")):
        return 'Try: "substitute for eggs"'

    return "I didn't understand that. Say 'help' for available commands."


def get_command_examples(command: CommandType) -> list[str]:
    """Example phrases for a command, for help display."""
    return COMMAND_EXAMPLES.get(command, [])
