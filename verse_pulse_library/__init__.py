# verse_pulse_library/__init__.py
# Main init for the library
from . import core
from . import simulators
from . import rf_pulses

from .rf_pulses import PulseDescriptor, PulseType, PulseKind, VerseTransformer, apply_verse
from .core.exceptions import (
    VerseValidationError,
    MissingGradientChannelError,
    ModulationLengthMismatchError,
    NegativeDurationError
)
