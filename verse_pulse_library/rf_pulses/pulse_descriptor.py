# File: verse_pulse_library/rf_pulses/pulse_descriptor.py
"""Pulse metadata and the waveform container passed through VERSE."""
import copy
import math
import numbers
from enum import Enum

import numpy as np

from verse_pulse_library.core.constants import (
    EXCITATION_FLIP_CYCLES,
    REFOCUSING_FLIP_CYCLES,
    INVERSION_FLIP_CYCLES,
)
from verse_pulse_library.core.exceptions import InvalidPulseTypeError


class PulseKind(Enum):
    EXCITATION = 'exc'
    REFOCUSING = 'ref'
    INVERSION = 'inv'
    FLIP_ANGLE = 'flip'


_KIND_ALIASES = {
    'exc': PulseKind.EXCITATION,
    'excitation': PulseKind.EXCITATION,
    'ref': PulseKind.REFOCUSING,
    'refocusing': PulseKind.REFOCUSING,
    'inv': PulseKind.INVERSION,
    'inversion': PulseKind.INVERSION,
}

_KIND_FLIP_CYCLES = {
    PulseKind.EXCITATION: EXCITATION_FLIP_CYCLES,
    PulseKind.REFOCUSING: REFOCUSING_FLIP_CYCLES,
    PulseKind.INVERSION: INVERSION_FLIP_CYCLES,
}


class PulseType:
    """
    Tagged pulse type: excitation, refocusing, inversion, or an explicit flip angle.

    Build one with the class constructors (``PulseType.excitation()``,
    ``PulseType.flip_angle(30.0)``) or resolve a loose value with
    ``PulseType.from_value``, which accepts the short codes 'exc', 'ref' and
    'inv', the long names, a ``PulseKind`` or a number of degrees.
    """
    __slots__ = ('_kind', '_flip_angle_deg')

    def __init__(self, kind, flip_angle_deg=None):
        if not isinstance(kind, PulseKind):
            raise InvalidPulseTypeError(f"kind must be a PulseKind, got {kind!r}.")
        if kind is PulseKind.FLIP_ANGLE:
            if flip_angle_deg is None or not math.isfinite(flip_angle_deg):
                raise InvalidPulseTypeError(f"A finite flip angle is required, got {flip_angle_deg!r}.")
            flip_angle_deg = float(flip_angle_deg)
        elif flip_angle_deg is not None:
            raise InvalidPulseTypeError(f"{kind.name} pulses do not take an explicit flip angle.")
        self._kind = kind
        self._flip_angle_deg = flip_angle_deg

    @classmethod
    def excitation(cls):
        return cls(PulseKind.EXCITATION)

    @classmethod
    def refocusing(cls):
        return cls(PulseKind.REFOCUSING)

    @classmethod
    def inversion(cls):
        return cls(PulseKind.INVERSION)

    @classmethod
    def flip_angle(cls, degrees):
        return cls(PulseKind.FLIP_ANGLE, degrees)

    @classmethod
    def from_value(cls, value):
        """Resolves a categorical code, a PulseKind or a flip angle in degrees."""
        if isinstance(value, PulseType):
            return value
        if isinstance(value, PulseKind):
            if value is PulseKind.FLIP_ANGLE:
                raise InvalidPulseTypeError("PulseKind.FLIP_ANGLE needs an angle; use PulseType.flip_angle().")
            return cls(value)
        if isinstance(value, str):
            kind = _KIND_ALIASES.get(value.strip().lower())
            if kind is None:
                raise InvalidPulseTypeError(
                    f"Unknown pulse type '{value}'. Expected one of {sorted(_KIND_ALIASES)} or a flip angle in degrees.")
            return cls(kind)
        if isinstance(value, numbers.Real) and not isinstance(value, bool):
            return cls.flip_angle(float(value))
        if isinstance(value, np.ndarray) and value.size == 1 and np.issubdtype(value.dtype, np.number):
            return cls.flip_angle(float(value.reshape(-1)[0]))
        raise InvalidPulseTypeError(f"Cannot interpret {value!r} as a pulse type.")

    @property
    def kind(self):
        return self._kind

    @property
    def flip_cycles(self):
        """Nominal flip angle as a fraction of a full cycle (90 deg -> 0.25)."""
        if self._kind is PulseKind.FLIP_ANGLE:
            return self._flip_angle_deg / 360.0
        return _KIND_FLIP_CYCLES[self._kind]

    @property
    def flip_angle_deg(self):
        return self.flip_cycles * 360.0

    def to_value(self):
        """Inverse of ``from_value``: a short code or the flip angle in degrees."""
        if self._kind is PulseKind.FLIP_ANGLE:
            return self._flip_angle_deg
        return self._kind.value

    def __eq__(self, other):
        if not isinstance(other, PulseType):
            return NotImplemented
        return self._kind is other._kind and self._flip_angle_deg == other._flip_angle_deg

    def __hash__(self):
        return hash((self._kind, self._flip_angle_deg))

    def __repr__(self):
        if self._kind is PulseKind.FLIP_ANGLE:
            return f"PulseType.flip_angle({self._flip_angle_deg})"
        return f"PulseType.{self._kind.name.lower()}()"


class PulseDescriptor:
    """
    An RF pulse waveform with its type tag.

    Attributes:
        waveform (np.ndarray): Shape (N, C); columns are phase (deg), amplitude,
                               duration and, when C >= 4, gradient.
        pulse_type (PulseType): Resolved pulse type.
        tw1 (float or None): Time-B1 product, set by transformations that compute it.
        metadata (dict): Any other fields the caller attaches to the pulse.
    """
    def __init__(self, waveform, pulse_type, tw1=None, metadata=None):
        self.waveform = np.asarray(waveform, dtype=float)
        self.pulse_type = PulseType.from_value(pulse_type)
        self.tw1 = tw1
        self.metadata = dict(metadata) if metadata else {}

    @property
    def n_samples(self):
        return self.waveform.shape[0] if self.waveform.ndim >= 1 else 0

    def replace(self, **changes):
        """Returns a new descriptor; unspecified fields are shallow-copied from this one."""
        fields = {
            'waveform': self.waveform.copy(),
            'pulse_type': self.pulse_type,
            'tw1': self.tw1,
            'metadata': copy.copy(self.metadata),
        }
        unknown = set(changes) - set(fields)
        if unknown:
            raise TypeError(f"Unknown PulseDescriptor fields: {sorted(unknown)}")
        fields.update(changes)
        return PulseDescriptor(**fields)

    @classmethod
    def from_dict(cls, pulse_dict):
        """
        Builds a descriptor from a struct-like dict with 'waveform' and 'type' keys.
        An optional 'tw1' key is kept; every other key lands in ``metadata``.
        """
        missing = [key for key in ('waveform', 'type') if key not in pulse_dict]
        if missing:
            raise KeyError(f"Pulse dict is missing required keys: {missing}")
        metadata = {k: v for k, v in pulse_dict.items() if k not in ('waveform', 'type', 'tw1')}
        return cls(pulse_dict['waveform'], pulse_dict['type'], tw1=pulse_dict.get('tw1'), metadata=metadata)

    def to_dict(self):
        out = dict(self.metadata)
        out['waveform'] = self.waveform.copy()
        out['type'] = self.pulse_type.to_value()
        if self.tw1 is not None:
            out['tw1'] = self.tw1
        return out

    def __repr__(self):
        return (f"PulseDescriptor(n_samples={self.n_samples}, pulse_type={self.pulse_type!r}, "
                f"tw1={self.tw1!r})")
