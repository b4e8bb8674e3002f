"""Voice Interface - Hands-free control of cooking mode

Philosophy:
    Hands are covered in flour; the recipe should move when you talk to it.
    Say "SousChef, next" and the step advances. Everything else (timers,
    ingredient lists, the current step) is one short phrase away.

Components:
    models.py: Data models (CommandType, VoiceState, VoiceSession, CookingTimer)
    recognition/: Speech engine adapters and the wake word restart loop
    parser/: Wake word detection, command parsing, cooking command routing
    session.py: VoiceSessionController state machine
    timers.py: TimerManager (independent cooking countdowns)
    speech.py: Speaker presets over a TTS engine, haptics
    formatting.py: Spoken phrases (steps, ingredients, timers, help)
    preferences.py: Persisted voice settings

Usage:
    from souschef.voice.recognition import create_recognizer
    from souschef.voice.session import VoiceSessionController
    from souschef.voice.parser.command_router import CookingCommandRouter

    controller = VoiceSessionController(create_recognizer(engine))
    router = CookingCommandRouter.for_controller(controller, steps, ingredients)
    await controller.toggle_listening()
"""
