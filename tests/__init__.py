"""SousChef Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - core/: config loading, storage, scheduling, logging, CLI
  - voice/: parser, wake word, recognizer, speech, timers, session controller
  - subscription/: tier policy, daily usage store, feature gate
- integration/: end-to-end cooking sessions over the typed speech engine

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/voice/

    # Excluding end-to-end sessions
    pytest -m "not integration"
"""
