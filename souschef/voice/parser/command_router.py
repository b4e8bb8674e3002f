"""Route parsed cooking commands to their actions.

The router owns the step cursor of the recipe being cooked, speaks the
answers to read/where/help commands, starts step timers and hands
navigation and substitution to screen callbacks. Invalid commands get the
spoken fallback and report ``success=False`` so no voice use is counted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from souschef.voice.formatting import (
    HELP_SPEECH,
    UNKNOWN_COMMAND_SPEECH,
    format_current_step_speech,
    format_ingredients_for_speech,
    format_instruction_for_speech,
    format_timer_set_speech,
)
from souschef.voice.models import CommandResult, CommandType, Ingredient, VoiceCommand
from souschef.voice.parser.command_parser import is_valid_command, suggest_closest
from souschef.voice.timers import TimerManager

if TYPE_CHECKING:
    from souschef.voice.session import VoiceSessionController

logger = logging.getLogger(__name__)

# Handler type: async function(command) -> CommandResult
HandlerFn = Callable[[VoiceCommand], Awaitable[CommandResult]]
SpeakFn = Callable[[str], Awaitable[Any]]


async def _silent(_: str) -> None:
    return None


class CookingCommandRouter:
    """Dispatches voice commands for one recipe in cooking mode."""

    def __init__(
        self,
        steps: list[str],
        ingredients: list[Ingredient] | None = None,
        timers: TimerManager | None = None,
        speak: SpeakFn = _silent,
        confirm: SpeakFn | None = None,
        hands_free: Callable[[], bool] = lambda: False,
        on_step_change: Callable[[int], Any] | None = None,
        on_finish: Callable[[], Any] | None = None,
        on_substitute: Callable[[str], Any] | None = None,
        min_confidence: int = 50,
    ):
        self.steps = list(steps)
        self.ingredients = list(ingredients or [])
        self.timers = timers or TimerManager()
        self.current_step = 0
        self.finished = False
        self._speak = speak
        self._confirm = confirm
        self._hands_free = hands_free
        self._on_step_change = on_step_change
        self._on_finish = on_finish
        self._on_substitute = on_substitute
        self._min_confidence = min_confidence
        self._handlers: dict[CommandType, HandlerFn] = {
            CommandType.NEXT_STEP: self._next_step,
            CommandType.PREVIOUS_STEP: self._previous_step,
            CommandType.READ_STEP: self._read_step,
            CommandType.CURRENT_STEP: self._current_step,
            CommandType.READ_INGREDIENTS: self._read_ingredients,
            CommandType.SET_TIMER: self._set_timer,
            CommandType.SUBSTITUTE: self._substitute,
            CommandType.HELP: self._help,
        }

    @classmethod
    def for_controller(
        cls,
        controller: VoiceSessionController,
        steps: list[str],
        ingredients: list[Ingredient] | None = None,
        timers: TimerManager | None = None,
        **kwargs: Any,
    ) -> CookingCommandRouter:
        """Build a router speaking through ``controller`` and install it as its handler."""
        if timers is None:
            timers = TimerManager(
                haptics=controller.haptics,
                on_complete=controller.announce_timer_done,
                haptics_config=controller.config.haptics,
            )
        router = cls(
            steps,
            ingredients,
            timers=timers,
            speak=controller.speak_text,
            confirm=controller.speak_confirmation,
            hands_free=lambda: controller.session.wake_word_mode,
            min_confidence=controller.config.commands.min_confidence,
            **kwargs,
        )
        controller.on_command = router.dispatch
        return router

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def register(self, command: CommandType, handler: HandlerFn) -> None:
        """Replace the handler for a command type."""
        self._handlers[command] = handler

    async def dispatch(self, command: VoiceCommand) -> CommandResult:
        """Run the action for ``command``."""
        if not is_valid_command(command, self._min_confidence):
            suggestion = suggest_closest(command.raw_transcript) if command.raw_transcript else None
            message = suggestion or UNKNOWN_COMMAND_SPEECH
            await self._speak(UNKNOWN_COMMAND_SPEECH)
            return CommandResult(
                success=False,
                message=message,
                command=command.command,
                spoken=UNKNOWN_COMMAND_SPEECH,
                error="unrecognized_command",
            )

        handler = self._handlers.get(command.command)
        if handler is None:
            return CommandResult(
                success=False,
                message=f"No handler for {command.command.value}.",
                command=command.command,
                error="no_handler",
            )

        try:
            result = await handler(command)
            result.command = command.command
        except Exception as e:
            logger.exception(f"Cooking command handler failed: {e}")
            result = CommandResult(
                success=False,
                message="Something went wrong. Try again?",
                command=command.command,
                error=str(e),
            )
        return result

    __call__ = dispatch

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _say(self, text: str) -> str:
        await self._speak(text)
        return text

    async def _acknowledge(self, action: str) -> str | None:
        if self._confirm is None or not self._hands_free():
            return None
        return await self._confirm(action)

    async def _next_step(self, command: VoiceCommand) -> CommandResult:
        spoken = await self._acknowledge("next")
        if self.current_step < self.total_steps - 1:
            self.current_step += 1
            _notify(self._on_step_change, self.current_step)
            return CommandResult(True, f"Step {self.current_step + 1}", data={"step": self.current_step}, spoken=spoken)

        self.finished = True
        _notify(self._on_finish)
        return CommandResult(True, "Recipe finished", data={"finished": True}, spoken=spoken)

    async def _previous_step(self, command: VoiceCommand) -> CommandResult:
        spoken = await self._acknowledge("back")
        if self.current_step > 0:
            self.current_step -= 1
            _notify(self._on_step_change, self.current_step)
        return CommandResult(True, f"Step {self.current_step + 1}", data={"step": self.current_step}, spoken=spoken)

    async def _read_step(self, command: VoiceCommand) -> CommandResult:
        if not self.steps:
            return CommandResult(False, "This recipe has no steps.", error="no_steps")
        text = format_instruction_for_speech(
            self.steps[self.current_step], self.current_step + 1, self.total_steps
        )
        return CommandResult(True, text, spoken=await self._say(text))

    async def _current_step(self, command: VoiceCommand) -> CommandResult:
        text = format_current_step_speech(self.current_step + 1, self.total_steps)
        return CommandResult(True, text, data={"step": self.current_step}, spoken=await self._say(text))

    async def _read_ingredients(self, command: VoiceCommand) -> CommandResult:
        text = format_ingredients_for_speech(self.ingredients)
        return CommandResult(True, text, data={"count": len(self.ingredients)}, spoken=await self._say(text))

    async def _set_timer(self, command: VoiceCommand) -> CommandResult:
        minutes = command.minutes
        name = f"Step {self.current_step + 1}"
        timer_id = self.timers.create_timer(name, minutes)

        spoken = await self._acknowledge("timer")
        if spoken is None:
            spoken = await self._say(format_timer_set_speech(minutes, name))
        return CommandResult(
            True,
            f"Timer set for {minutes} minutes",
            data={"timer_id": timer_id, "name": name, "minutes": minutes},
            spoken=spoken,
        )

    async def _substitute(self, command: VoiceCommand) -> CommandResult:
        ingredient = command.ingredient
        if self._on_substitute is None:
            return CommandResult(False, "Substitutions are not available here.", error="no_handler")
        _notify(self._on_substitute, ingredient)
        return CommandResult(True, f"Looking up a substitute for {ingredient}", data={"ingredient": ingredient})

    async def _help(self, command: VoiceCommand) -> CommandResult:
        return CommandResult(True, "Help", spoken=await self._say(HELP_SPEECH))


def _notify(callback: Callable[..., Any] | None, *args: Any) -> None:
    if callback is None:
        return
    try:
        callback(*args)
    except Exception as e:
        logger.warning("Cooking screen callback failed: %s", e, exc_info=True)
