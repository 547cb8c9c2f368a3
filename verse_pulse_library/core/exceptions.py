# verse_pulse_library/core/exceptions.py
"""Errors raised while validating VERSE inputs.

All of them derive from ``ValueError`` so callers that already guard pulse
generation with ``except ValueError`` keep working.
"""


class VerseValidationError(ValueError):
    """Base class for rejected VERSE inputs. Nothing is returned on failure."""


class MissingGradientChannelError(VerseValidationError):
    """The waveform has no gradient channel (fewer than 4 columns)."""


class ModulationLengthMismatchError(VerseValidationError):
    """The modulation function does not match the waveform sample count."""


class NegativeDurationError(VerseValidationError):
    """VERSE rescaling produced a negative time-step."""


class NonFiniteDurationError(VerseValidationError):
    """VERSE rescaling produced an infinite or NaN time-step (alpha of zero)."""


class InvalidPulseTypeError(VerseValidationError):
    """The pulse type is neither a known category nor a flip angle."""


class InvalidPeakB1Error(VerseValidationError):
    """The peak-B1 value supplied for a phase-modulated pulse is unusable."""
