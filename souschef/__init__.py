"""SousChef - Hands-free cooking assistant core

Components:
    voice/: Speech recognition adapter, wake word detection, command parsing,
            voice session state machine, cooking timers
    subscription/: Tier policy, daily usage metering, feature gate
    storage.py: Local key-value persistence (sqlite)
    scheduling.py: Event-loop and virtual-clock schedulers
    config_models.py: Validated YAML configuration (args/*.yaml)

Usage:
    from souschef.voice.parser.command_parser import parse
    from souschef.subscription.gate import FeatureGate

    command = parse("set a timer for 10 minutes")
    gate = FeatureGate()
    result = gate.check("free", "voice_commands")
"""

import os
from pathlib import Path

__version__ = "0.3.0"

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"
DATA_DIR = Path(os.environ.get("SOUSCHEF_DATA_DIR", PROJECT_ROOT / "data"))

__all__ = [
    "ARGS_DIR",
    "DATA_DIR",
    "PROJECT_ROOT",
    "__version__",
]
