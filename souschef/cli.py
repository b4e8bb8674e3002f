#!/usr/bin/env python3
"""
SousChef Command Line Interface

Main entry point for the `souschef` command.

Usage:
    souschef parse "set a timer for 10 minutes"     # Parse one utterance
    souschef parse --wake "sous chef next step"     # Strip the wake word first
    souschef usage --tier free                       # Today's usage and limits
    souschef check voice_commands --tier free        # Would this feature be allowed?
    souschef record voice_commands                   # Count one use
    souschef timer 5 --name "Pasta"                  # Run a countdown
    souschef listen --recipe lasagna.yaml            # Typed-text cooking session
    souschef --version                               # Show version
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import yaml

from souschef import __version__
from souschef.config_models import load_subscription_config, load_voice_config
from souschef.logging_config import bind_context, setup_logging
from souschef.storage import KeyValueStore
from souschef.subscription.gate import FeatureGate, format_limit
from souschef.subscription.models import Feature, SubscriptionTier
from souschef.subscription.policy import TierPolicy
from souschef.subscription.usage import UsageStore
from souschef.voice.formatting import format_timer_display, format_timer_done_speech, get_voice_help_text
from souschef.voice.models import Ingredient
from souschef.voice.parser.command_parser import is_valid_command, parse
from souschef.voice.parser.command_router import CookingCommandRouter
from souschef.voice.parser.wake_word import WakeWordDetector
from souschef.voice.preferences import VoicePreferences
from souschef.voice.recognition import TextInputEngine, create_recognizer
from souschef.voice.session import VoiceSessionController
from souschef.voice.speech import ConsoleSynthesizer, Speaker
from souschef.voice.timers import TimerManager

DEMO_RECIPE = {
    "title": "Scrambled Eggs",
    "ingredients": [
        {"name": "eggs", "amount": 3, "unit": ""},
        {"name": "butter", "amount": 1, "unit": "tbsp"},
        {"name": "salt", "amount": "a pinch", "unit": ""},
        {"name": "chives", "amount": 1, "unit": "tsp", "optional": True},
    ],
    "steps": [
        "Whisk the eggs with the salt.",
        "Melt the butter in a pan over low heat.",
        "Add the eggs and stir gently until just set.",
        "Sprinkle with chives and serve.",
    ],
}


def _store(args) -> KeyValueStore:
    return KeyValueStore(Path(args.db)) if args.db else KeyValueStore()


def _gate(args) -> FeatureGate:
    config = load_subscription_config()
    return FeatureGate(TierPolicy(config), UsageStore(_store(args), key=config.usage_key))


def _load_recipe(path: str | None) -> dict:
    if not path:
        return DEMO_RECIPE
    with open(path) as f:
        return yaml.safe_load(f) or {}


def cmd_parse(args):
    """Handle parse subcommand."""
    text = args.text
    if args.wake:
        detector = WakeWordDetector.from_config(load_voice_config().wake_word)
        if not detector.matches(text):
            print(json.dumps({"wake_word": False}, indent=2))
            return 1
        text = detector.extract_command(text)

    command = parse(text)
    output = command.to_dict()
    output["valid"] = is_valid_command(command)
    print(json.dumps(output, indent=2))
    return 0 if output["valid"] else 1


def cmd_usage(args):
    """Handle usage subcommand."""
    gate = _gate(args)
    tier = SubscriptionTier.parse(args.tier)
    summary = gate.usage_summary(tier)

    if args.json:
        print(json.dumps({"tier": tier.value, "date": gate.usage.today().date, "features": summary}, indent=2))
        return

    print(f"{tier.display_name} tier, {gate.usage.today().date}")
    for feature, row in summary.items():
        print(f"  {feature:<22} {row['used']:>3} / {format_limit(row['limit']):<9} remaining: {format_limit(row['remaining'])}")


def cmd_check(args):
    """Handle check subcommand."""
    result = _gate(args).check(args.tier, args.feature)
    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.allowed else 1


def cmd_record(args):
    """Handle record subcommand."""
    usage = _gate(args).record(args.feature)
    print(json.dumps(usage.to_dict(), indent=2))


def cmd_timer(args):
    """Handle timer subcommand."""
    try:
        asyncio.run(_run_timer(args.name, args.minutes))
    except KeyboardInterrupt:
        print("\nTimer cancelled.")
        return 130


async def _run_timer(name: str, minutes: float) -> None:
    done = asyncio.Event()
    timers = TimerManager(on_complete=lambda timer: done.set())
    timer_id = timers.create_timer(name, minutes)

    while not done.is_set():
        remaining = timers.get(timer_id).remaining_seconds
        print(f"\r{name}: {format_timer_display(remaining)} ", end="", flush=True)
        try:
            await asyncio.wait_for(done.wait(), timeout=1.0)
        except asyncio.TimeoutError:
            pass

    print(f"\r{name}: {format_timer_display(0)} ")
    print(format_timer_done_speech(name))


def cmd_listen(args):
    """Handle listen subcommand.

    Each typed line is heard as one utterance by a text speech engine that
    drives a real voice session: quota checks, wake word loop, timers and
    spoken replies all behave as they do on a device.
    """
    recipe = _load_recipe(args.recipe)
    try:
        return asyncio.run(_listen(args, recipe))
    except KeyboardInterrupt:
        return 130


async def _listen(args, recipe: dict) -> int:
    config = load_voice_config()
    store = _store(args)
    gate = _gate(args)
    tier = SubscriptionTier.parse(args.tier)
    bind_context(tier=tier.value, recipe=recipe.get("title", "recipe"))

    engine = TextInputEngine()
    recognizer = create_recognizer(
        engine,
        detector=WakeWordDetector.from_config(config.wake_word),
        config=config.recognition,
    )
    controller = VoiceSessionController(
        recognizer,
        speaker=Speaker(ConsoleSynthesizer(), config.tts, config.wake_word),
        gate=gate,
        tier_provider=lambda: tier,
        preferences=VoicePreferences(store),
        config=config,
    )
    router = CookingCommandRouter.for_controller(
        controller,
        recipe.get("steps", []),
        [Ingredient(**item) for item in recipe.get("ingredients", [])],
        on_step_change=lambda step: print(f"[step {step + 1}/{len(recipe.get('steps', []))}]"),
        on_substitute=lambda name: print(f"[substitution lookup: {name}]"),
    )

    print(f"Cooking {recipe.get('title', 'recipe')}. Type what you would say; 'quit' to stop.")
    print(get_voice_help_text())

    if args.hands_free:
        if not await controller.enable_wake_word_mode():
            _print_denial(controller)
            controller.close()
            return 1
    elif controller.session.wake_word_mode:
        await controller.disable_wake_word_mode()

    loop = asyncio.get_running_loop()
    try:
        while not router.finished:
            try:
                line = await loop.run_in_executor(None, input, "> ")
            except EOFError:
                break
            if line.strip().lower() in ("quit", "exit"):
                break

            if not engine.is_recognizing():
                if controller.session.wake_word_mode:
                    await asyncio.sleep(config.recognition.restart_delay_seconds)
                elif not await controller.start_listening():
                    _print_denial(controller)
                    continue

            engine.feed(line)
            await controller.settle()

            if controller.error:
                print(f"[error: {controller.error}]")
                controller.clear_error()

        if router.finished:
            print("Enjoy your meal!")
    finally:
        router.timers.close()
        controller.close()

    return 0


def _print_denial(controller: VoiceSessionController) -> None:
    denied = controller.access_denied
    if denied is None:
        print(f"[voice unavailable: {controller.error}]")
        return
    upgrade = f" Upgrade to {denied.upgrade_required.display_name} for more." if denied.upgrade_required else ""
    print(f"[daily voice limit reached: {denied.current_usage}/{format_limit(denied.limit)}.{upgrade}]")


def cmd_version(args):
    """Handle version subcommand."""
    print(f"souschef {__version__}")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="souschef",
        description="SousChef - Hands-free cooking assistant core",
    )
    parser.add_argument(
        "--version", "-V", action="store_true", help="Show version and exit"
    )
    parser.add_argument(
        "--log-level", default=None, help="Log level (default: $SOUSCHEF_LOG_LEVEL or INFO)"
    )
    parser.add_argument(
        "--json-logs", action="store_true", default=None, help="Emit JSON log lines"
    )
    parser.add_argument(
        "--db", default=None, help="Path to the sqlite store (default: data/souschef.db)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    tiers = [t.value for t in SubscriptionTier]
    features = [f.value for f in Feature]

    # parse
    parse_parser = subparsers.add_parser("parse", help="Parse an utterance into a command")
    parse_parser.add_argument("text", help="Transcript to parse")
    parse_parser.add_argument(
        "--wake", action="store_true", help="Require and strip the wake word first"
    )
    parse_parser.set_defaults(func=cmd_parse)

    # usage
    usage_parser = subparsers.add_parser("usage", help="Show today's usage against tier limits")
    usage_parser.add_argument("--tier", choices=tiers, default="free", help="Subscription tier")
    usage_parser.add_argument("--json", action="store_true", help="Output as JSON")
    usage_parser.set_defaults(func=cmd_usage)

    # check
    check_parser = subparsers.add_parser("check", help="Check whether a feature is allowed now")
    check_parser.add_argument("feature", choices=features, help="Gated feature")
    check_parser.add_argument("--tier", choices=tiers, default="free", help="Subscription tier")
    check_parser.set_defaults(func=cmd_check)

    # record
    record_parser = subparsers.add_parser("record", help="Record one use of a feature")
    record_parser.add_argument("feature", choices=features, help="Gated feature")
    record_parser.set_defaults(func=cmd_record)

    # timer
    timer_parser = subparsers.add_parser("timer", help="Run a cooking timer in the terminal")
    timer_parser.add_argument("minutes", type=float, help="Duration in minutes")
    timer_parser.add_argument("--name", default="Timer", help="Timer name")
    timer_parser.set_defaults(func=cmd_timer)

    # listen
    listen_parser = subparsers.add_parser("listen", help="Cook a recipe with typed voice commands")
    listen_parser.add_argument("--recipe", default=None, help="Recipe YAML (title, steps, ingredients)")
    listen_parser.add_argument("--tier", choices=tiers, default="free", help="Subscription tier")
    listen_parser.add_argument(
        "--hands-free", action="store_true", help="Require the wake word before each command"
    )
    listen_parser.set_defaults(func=cmd_listen)

    args = parser.parse_args()

    # Handle --version at top level
    if args.version:
        cmd_version(args)
        return

    # If no command given, show help
    if not args.command:
        parser.print_help()
        return

    setup_logging(level=args.log_level, json_output=args.json_logs)

    if args.command == "timer" and args.minutes <= 0:
        parser.error("minutes must be positive")

    # Execute command
    result = args.func(args)

    # Commands may return an exit code
    if isinstance(result, int) and result != 0:
        sys.exit(result)


if __name__ == "__main__":
    main()
