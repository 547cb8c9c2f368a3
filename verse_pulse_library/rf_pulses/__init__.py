# verse_pulse_library/rf_pulses/__init__.py
from . import verse
from .pulse_descriptor import PulseDescriptor, PulseType, PulseKind
from .waveform import waveform_from_rf, add_gradient_channel
from .verse import VerseTransformer, apply_verse

__all__ = [
    'verse',
    'PulseDescriptor',
    'PulseType',
    'PulseKind',
    'waveform_from_rf',
    'add_gradient_channel',
    'VerseTransformer',
    'apply_verse'
]
