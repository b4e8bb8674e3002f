"""Phrases spoken and shown during cooking mode."""

from __future__ import annotations

from typing import Iterable

from souschef.voice.models import Ingredient

HELP_TEXT_LINES = [
    '"Next" or "Continue" - Go to next step',
    '"Back" or "Previous" - Go to previous step',
    '"Read this" or "Repeat" - Read current step aloud',
    '"Ingredients" - Read the ingredient list',
    '"Where am I" - Tell me current step number',
    '"Timer 5 minutes" - Set a cooking timer',
    '"Substitute for eggs" - Get ingredient substitution',
    '"Help" - Hear available commands',
]

HELP_SPEECH = (
    "You can say: next or continue to go forward. Back or previous to go back. "
    "Read this to hear the current step. Ingredients to hear the ingredient list. "
    "Where am I to know your current step. Timer followed by minutes to set a timer. "
    "Or substitute for an ingredient name to get alternatives."
)

UNKNOWN_COMMAND_SPEECH = "I didn't understand that. Say 'help' for available commands."


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def format_time_for_speech(seconds: int) -> str:
    """'45 seconds', '2 minutes', '5 minutes and 30 seconds'."""
    seconds = max(0, int(seconds))
    mins, secs = divmod(seconds, 60)
    if mins == 0:
        return _plural(secs, "second")
    if secs == 0:
        return _plural(mins, "minute")
    return f"{_plural(mins, 'minute')} and {_plural(secs, 'second')}"


def format_timer_display(seconds: int) -> str:
    """mm:ss, minutes uncapped."""
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins}:{secs:02d}"


def format_step_for_speech(step_number: int, total_steps: int) -> str:
    return f"Step {step_number} of {total_steps}"


def format_instruction_for_speech(instruction: str, step_number: int, total_steps: int) -> str:
    return f"{format_step_for_speech(step_number, total_steps)}. {instruction}"


def format_current_step_speech(step_number: int, total_steps: int) -> str:
    if step_number == total_steps:
        return f"You are on step {step_number}, the final step."
    return f"You are on step {step_number} of {total_steps}."


def format_ingredients_for_speech(ingredients: Iterable[Ingredient]) -> str:
    lines = []
    for ing in ingredients:
        quantity = " ".join(str(part) for part in (ing.amount, ing.unit) if part not in ("", None))
        line = f"{quantity} of {ing.name}" if quantity else ing.name
        if ing.optional:
            line += ", optional"
        lines.append(line)

    if not lines:
        return "No ingredients found for this recipe."
    return f"You will need: {'. '.join(lines)}"


def format_timer_set_speech(minutes: int, timer_name: str | None = None) -> str:
    name = f" for {timer_name}" if timer_name else ""
    return f"Timer set{name} for {_plural(minutes, 'minute')}."


def format_timer_done_speech(timer_name: str | None = None) -> str:
    if timer_name:
        return f"Your {timer_name} timer is complete!"
    return "Your timer is complete!"


def get_voice_help_text() -> str:
    return "\n".join(HELP_TEXT_LINES)
