# verse_pulse_library/rf_pulses/verse/__init__.py
from .phase_utils import round_half_away, is_phase_modulated, remove_phase_wraps, signed_mean_amplitude
from .verse_transform import VerseTransformer, apply_verse

__all__ = [
    'round_half_away',
    'is_phase_modulated',
    'remove_phase_wraps',
    'signed_mean_amplitude',
    'VerseTransformer',
    'apply_verse'
]
