# verse_pulse_library/core/__init__.py

from .constants import (
    GAMMA_HZ_PER_T_PROTON,
    GAMMA_HZ_PER_G_PROTON,
    VERSE_REFERENCE_DURATION_S,
    PHASE_JUMP_MIN_DEG,
    PHASE_JUMP_MAX_DEG,
    B1_SWEEP_MIN_KHZ,
    B1_SWEEP_MAX_KHZ,
    B1_SWEEP_POINTS
)
from .exceptions import (
    VerseValidationError,
    MissingGradientChannelError,
    ModulationLengthMismatchError,
    NegativeDurationError,
    NonFiniteDurationError,
    InvalidPulseTypeError,
    InvalidPeakB1Error
)
from .bloch_sim import rotate_magnetization_batch, simulate_b1_scaled_pulse

__all__ = [
    # constants
    'GAMMA_HZ_PER_T_PROTON',
    'GAMMA_HZ_PER_G_PROTON',
    'VERSE_REFERENCE_DURATION_S',
    'PHASE_JUMP_MIN_DEG',
    'PHASE_JUMP_MAX_DEG',
    'B1_SWEEP_MIN_KHZ',
    'B1_SWEEP_MAX_KHZ',
    'B1_SWEEP_POINTS',
    # exceptions
    'VerseValidationError',
    'MissingGradientChannelError',
    'ModulationLengthMismatchError',
    'NegativeDurationError',
    'NonFiniteDurationError',
    'InvalidPulseTypeError',
    'InvalidPeakB1Error',
    # bloch_sim
    'rotate_magnetization_batch',
    'simulate_b1_scaled_pulse'
]
