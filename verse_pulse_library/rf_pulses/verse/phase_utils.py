# File: verse_pulse_library/rf_pulses/verse/phase_utils.py
import numpy as np

from verse_pulse_library.core.constants import (
    PHASE_JUMP_MIN_DEG,
    PHASE_JUMP_MAX_DEG,
    PHASE_WRAP_DEG,
)


def round_half_away(values):
    """Rounds to the nearest integer with ties away from zero (np.round rounds ties to even)."""
    values = np.asarray(values, dtype=float)
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def is_phase_modulated(phase_deg):
    """
    True if any rounded phase sample is something other than 0 or 180 degrees.

    Amplitude-modulated pulses only switch between 0 and 180 degrees, so any
    other value means the phase itself carries modulation (adiabatic pulses etc.).
    """
    rounded = round_half_away(phase_deg)
    return bool(np.any((rounded != 0) & (rounded != 180)))


def remove_phase_wraps(phase_deg, jump_min_deg=PHASE_JUMP_MIN_DEG, jump_max_deg=PHASE_JUMP_MAX_DEG):
    """
    Removes spurious +/-360 degree steps from a phase track.

    Every step between neighbouring samples whose magnitude lies strictly
    inside (jump_min_deg, jump_max_deg) is treated as an exact 360 degree wrap,
    and 360*sign(step) is taken off every later sample. The corrections
    accumulate left to right.

    Args:
        phase_deg (array-like): Phase track in degrees, shape (N,).
        jump_min_deg (float): Lower bound (exclusive) of a wrap-sized step.
        jump_max_deg (float): Upper bound (exclusive) of a wrap-sized step.

    Returns:
        np.ndarray: New phase track; the input is left untouched.
    """
    phase_deg = np.asarray(phase_deg, dtype=float)
    if phase_deg.size < 2:
        return phase_deg.copy()

    jumps = np.diff(phase_deg)
    is_wrap = (np.abs(jumps) > jump_min_deg) & (np.abs(jumps) < jump_max_deg)
    corrections = np.where(is_wrap, PHASE_WRAP_DEG * np.sign(jumps), 0.0)
    # Offset carried into sample k is the sum of all wraps before it
    offsets = np.concatenate(([0.0], np.cumsum(corrections)))
    return phase_deg - offsets


def signed_mean_amplitude(amplitude, phase_deg, negative_above_deg):
    """Mean of the amplitude with samples whose rounded phase exceeds ``negative_above_deg`` counted negative."""
    amplitude = np.asarray(amplitude, dtype=float)
    if amplitude.size == 0:
        return 0.0
    sign = np.where(round_half_away(phase_deg) > negative_above_deg, -1.0, 1.0)
    return float(np.sum(amplitude * sign) / amplitude.size)
