# File: verse_pulse_library/rf_pulses/verse/verse_transform.py
"""VERSE (Variable-Rate Selective Excitation) of tabulated RF pulse waveforms."""
import math
from typing import Callable, Optional

import numpy as np

from verse_pulse_library.core.constants import (
    PHASE_COL,
    AMPLITUDE_COL,
    DURATION_COL,
    GRADIENT_COL,
    MIN_VERSE_COLUMNS,
    VERSE_REFERENCE_DURATION_S,
    PHASE_JUMP_MIN_DEG,
    PHASE_JUMP_MAX_DEG,
    NEGATIVE_LOBE_PHASE_DEG,
    B1_SWEEP_MIN_KHZ,
    B1_SWEEP_MAX_KHZ,
    B1_SWEEP_POINTS,
)
from verse_pulse_library.core.exceptions import (
    VerseValidationError,
    MissingGradientChannelError,
    ModulationLengthMismatchError,
    NegativeDurationError,
    NonFiniteDurationError,
    InvalidPeakB1Error,
)
from verse_pulse_library.rf_pulses.pulse_descriptor import PulseDescriptor
from verse_pulse_library.rf_pulses.verse.phase_utils import (
    is_phase_modulated,
    remove_phase_wraps,
    signed_mean_amplitude,
)
from verse_pulse_library.simulators.b1_sweep_simulator import (
    B1SweepResult,
    FlipAnglePeakB1Selector,
    simulate_b1_sweep,
)


class VerseTransformer:
    """
    Turns a slice-selective RF pulse into a gradient-modulated one.

    The modulation function alpha scales the RF amplitude and the gradient and
    divides the time-step of every sample, which keeps the RF area and the
    gradient area of each sample unchanged. The result is resampled onto a
    uniform time grid and its time-B1 product (tw1) is recomputed for a
    reference pulse duration.

    For phase-modulated pulses the peak B1 cannot be read off the waveform, so
    a B1 sweep is simulated and a callback picks the peak B1 (kHz) from it.
    """
    def __init__(self,
                 reference_duration_s: float = VERSE_REFERENCE_DURATION_S,
                 phase_jump_window_deg: tuple = (PHASE_JUMP_MIN_DEG, PHASE_JUMP_MAX_DEG),
                 frequency_offset_khz: float = 0.0,
                 b1_sweep_range_khz: tuple = (B1_SWEEP_MIN_KHZ, B1_SWEEP_MAX_KHZ),
                 b1_sweep_points: int = B1_SWEEP_POINTS,
                 simulator: Callable[..., B1SweepResult] = simulate_b1_sweep,
                 device: str = 'cpu',
                 verbose: bool = False):
        """
        Args:
            reference_duration_s (float, optional): Pulse duration the time-B1 product
                refers to. Defaults to VERSE_REFERENCE_DURATION_S (5 ms).
            phase_jump_window_deg (tuple, optional): Open (min, max) range of phase
                steps treated as 360 degree wraps. Defaults to (355, 365).
            frequency_offset_khz (float, optional): Off-resonance used in the B1 sweep.
            b1_sweep_range_khz (tuple, optional): (min, max) peak B1 swept for
                phase-modulated pulses, in kHz.
            b1_sweep_points (int, optional): Number of B1 values in the sweep.
            simulator (callable, optional): B1 sweep service with the signature of
                ``simulate_b1_sweep``.
            device (str, optional): PyTorch device for the sweep simulation.
            verbose (bool, optional): If True, prints progress and warnings.
        """
        if reference_duration_s <= 0:
            raise ValueError("reference_duration_s must be positive.")
        if len(phase_jump_window_deg) != 2 or phase_jump_window_deg[0] >= phase_jump_window_deg[1]:
            raise ValueError("phase_jump_window_deg must be an increasing (min, max) pair.")

        self.reference_duration_s = reference_duration_s
        self.phase_jump_window_deg = tuple(phase_jump_window_deg)
        self.frequency_offset_khz = frequency_offset_khz
        self.b1_sweep_range_khz = tuple(b1_sweep_range_khz)
        self.b1_sweep_points = b1_sweep_points
        self.simulator = simulator
        self.device = device
        self.verbose = verbose

    def transform(self, pulse, alpha, obtain_peak_b1: Optional[Callable[[B1SweepResult], float]] = None):
        """
        Applies the VERSE modulation ``alpha`` to ``pulse``.

        Args:
            pulse (PulseDescriptor or dict): Input pulse. Its waveform must already
                carry a gradient channel (at least 4 columns).
            alpha (array-like): Unitless modulation function, one value per sample.
                Row or column vectors are both accepted.
            obtain_peak_b1 (callable, optional): Called with the B1SweepResult of a
                phase-modulated pulse; returns the chosen peak B1 in kHz for the
                reference duration. Defaults to a FlipAnglePeakB1Selector targeting
                the pulse type's flip angle. Unused for amplitude-modulated pulses.

        Returns:
            PulseDescriptor: New pulse with the resampled waveform (phase, amplitude,
            unit durations, gradient), the same pulse type and metadata, and ``tw1``.

        Raises:
            MissingGradientChannelError: waveform has fewer than 4 columns.
            ModulationLengthMismatchError: alpha does not match the sample count.
            NegativeDurationError: a rescaled time-step is negative.
            NonFiniteDurationError: a rescaled time-step is infinite or NaN.
        """
        pulse = self._as_descriptor(pulse)
        waveform = self._validate_waveform(pulse.waveform)
        alpha = self._normalize_alpha(alpha, waveform.shape[0])

        modulated = self.apply_modulation(waveform, alpha)
        resampled = self.resample_to_uniform_time(modulated)

        phase_modulated = is_phase_modulated(resampled[:, PHASE_COL])
        resampled[:, PHASE_COL] = remove_phase_wraps(resampled[:, PHASE_COL], *self.phase_jump_window_deg)

        peak_amplitude = np.max(resampled[:, AMPLITUDE_COL])
        if peak_amplitude > 0:
            resampled[:, AMPLITUDE_COL] = resampled[:, AMPLITUDE_COL] / peak_amplitude
        elif self.verbose:
            print("Warning: VERSE-modulated amplitude has no positive samples; amplitude left unnormalized.")

        if phase_modulated:
            tw1 = self._phase_modulated_tw1(resampled, pulse, obtain_peak_b1)
        else:
            tw1 = self._amplitude_modulated_tw1(resampled, pulse)

        if self.verbose:
            kind = "phase-modulated" if phase_modulated else "amplitude-modulated"
            print(f"VERSE: {resampled.shape[0]} samples, {kind} {pulse.pulse_type!r}, tw1 = {tw1:.4f}")

        return pulse.replace(waveform=resampled, tw1=tw1)

    @staticmethod
    def apply_modulation(waveform, alpha):
        """
        Scales amplitude and gradient by alpha and divides the duration by it.

        Returns a new array; raises if any rescaled duration is negative or not finite.
        """
        modulated = np.array(waveform, dtype=float)
        modulated[:, AMPLITUDE_COL] = modulated[:, AMPLITUDE_COL] * alpha
        with np.errstate(divide='ignore', invalid='ignore'):
            modulated[:, DURATION_COL] = modulated[:, DURATION_COL] / alpha
        modulated[:, GRADIENT_COL] = modulated[:, GRADIENT_COL] * alpha

        durations = modulated[:, DURATION_COL]
        if np.any(durations < 0):
            raise NegativeDurationError(
                f"Resulting duration cannot be negative (minimum {np.nanmin(durations):.6g} "
                f"at sample {int(np.nanargmin(durations))}).")
        if not np.all(np.isfinite(durations)):
            bad = np.flatnonzero(~np.isfinite(durations))
            raise NonFiniteDurationError(
                f"Resulting duration is not finite at samples {bad.tolist()}; alpha must be non-zero there.")
        return modulated

    @staticmethod
    def resample_to_uniform_time(waveform):
        """
        Resamples every channel from the cumulative (non-linear) time axis onto a
        linear axis with the same end points and sample count. The duration
        channel of the result is all ones.
        """
        n_samples = waveform.shape[0]
        t_nonlin = np.cumsum(waveform[:, DURATION_COL])
        t_lin = np.linspace(t_nonlin[0], t_nonlin[-1], n_samples)

        resampled = np.empty_like(waveform)
        for col in range(waveform.shape[1]):
            if col == DURATION_COL:
                resampled[:, col] = 1.0
            else:
                resampled[:, col] = np.interp(t_lin, t_nonlin, waveform[:, col])
        return resampled

    def _amplitude_modulated_tw1(self, waveform, pulse):
        Tp = self.reference_duration_s
        flip_cycles = pulse.pulse_type.flip_cycles
        int_rf = signed_mean_amplitude(waveform[:, AMPLITUDE_COL], waveform[:, PHASE_COL],
                                       NEGATIVE_LOBE_PHASE_DEG)
        # w1max in Hz
        w1max = flip_cycles / (int_rf * Tp) if int_rf != 0 else 0.0
        return Tp * w1max

    def _phase_modulated_tw1(self, waveform, pulse, obtain_peak_b1):
        Tp = self.reference_duration_s
        b1_min_khz, b1_max_khz = self.b1_sweep_range_khz
        if self.verbose:
            print(f"VERSE: phase-modulated pulse, sweeping peak B1 over {b1_min_khz}-{b1_max_khz} kHz "
                  f"({self.b1_sweep_points} points) for a {Tp * 1000:.2f} ms pulse.")

        sweep = self.simulator(
            waveform, Tp * 1000,
            frequency_offset_khz=self.frequency_offset_khz,
            b1_min_khz=b1_min_khz,
            b1_max_khz=b1_max_khz,
            n_points=self.b1_sweep_points,
            device=self.device,
        )
        if obtain_peak_b1 is None:
            obtain_peak_b1 = FlipAnglePeakB1Selector(pulse.pulse_type.flip_angle_deg)

        w1max_khz = obtain_peak_b1(sweep)
        try:
            w1max_khz = float(w1max_khz)
        except (TypeError, ValueError) as e:
            raise InvalidPeakB1Error(f"Peak B1 must be a number in kHz, got {w1max_khz!r}.") from e
        if not math.isfinite(w1max_khz) or w1max_khz < 0:
            raise InvalidPeakB1Error(f"Peak B1 must be finite and non-negative, got {w1max_khz} kHz.")

        if self.verbose:
            print(f"VERSE: using w1max = {w1max_khz:.4f} kHz")
        return Tp * w1max_khz * 1000

    @staticmethod
    def _as_descriptor(pulse):
        if isinstance(pulse, PulseDescriptor):
            return pulse
        if isinstance(pulse, dict):
            return PulseDescriptor.from_dict(pulse)
        raise TypeError(
            f"The input RF pulse must be a PulseDescriptor or a dict with 'waveform' and 'type' keys, "
            f"got {type(pulse).__name__}.")

    @staticmethod
    def _validate_waveform(waveform):
        if waveform.ndim != 2:
            raise VerseValidationError(f"Waveform must be a 2D (N, C) array, got shape {waveform.shape}.")
        if waveform.shape[1] < MIN_VERSE_COLUMNS:
            raise MissingGradientChannelError(
                f"Input waveform must already have a gradient waveform "
                f"(needs {MIN_VERSE_COLUMNS} columns, got {waveform.shape[1]}).")
        if waveform.shape[0] == 0:
            raise VerseValidationError("Waveform has no samples.")
        return waveform

    @staticmethod
    def _normalize_alpha(alpha, n_samples):
        alpha = np.asarray(alpha, dtype=float)
        if alpha.ndim == 1 and alpha.size == n_samples:
            return alpha.copy()
        if alpha.ndim == 2 and 1 in alpha.shape and alpha.size == n_samples:
            return alpha.reshape(-1).copy()
        if alpha.ndim == 0 and n_samples == 1:
            return alpha.reshape(1)
        raise ModulationLengthMismatchError(
            f"Modulation function of shape {alpha.shape} does not match the "
            f"{n_samples}-sample RF pulse waveform.")


def apply_verse(pulse, alpha, obtain_peak_b1=None, **config):
    """
    Applies VERSE to ``pulse`` with a one-off VerseTransformer.

    Args:
        pulse (PulseDescriptor or dict): Input pulse with a gradient channel.
        alpha (array-like): Modulation function, one value per sample.
        obtain_peak_b1 (callable, optional): Peak-B1 chooser for phase-modulated pulses.
        **config: Keyword arguments for VerseTransformer.

    Returns:
        PulseDescriptor: The VERSE-modulated pulse with its time-B1 product.
    """
    return VerseTransformer(**config).transform(pulse, alpha, obtain_peak_b1=obtain_peak_b1)
