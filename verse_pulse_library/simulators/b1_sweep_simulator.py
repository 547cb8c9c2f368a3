# File: verse_pulse_library/simulators/b1_sweep_simulator.py
"""Peak-B1 calibration sweeps for tabulated RF pulse shapes."""
import numpy as np
import torch

from verse_pulse_library.core.bloch_sim import simulate_b1_scaled_pulse
from verse_pulse_library.core.constants import (
    PHASE_COL,
    AMPLITUDE_COL,
    DURATION_COL,
    B1_SWEEP_MIN_KHZ,
    B1_SWEEP_MAX_KHZ,
    B1_SWEEP_POINTS,
)


class B1SweepResult:
    """
    Magnetization after a pulse as a function of its peak B1.

    Attributes:
        b1_khz (np.ndarray): Swept peak B1 values (kHz), shape (n_points,).
        magnetization (np.ndarray): Final [Mx, My, Mz] per B1 value, shape (3, n_points).
        pulse_duration_ms (float): Duration the pulse was played over (ms).
        frequency_offset_khz (float): Off-resonance of the simulated spin (kHz).
        waveform (np.ndarray): The simulated waveform.
    """
    def __init__(self, b1_khz, magnetization, pulse_duration_ms, frequency_offset_khz, waveform):
        self.b1_khz = b1_khz
        self.magnetization = magnetization
        self.pulse_duration_ms = pulse_duration_ms
        self.frequency_offset_khz = frequency_offset_khz
        self.waveform = waveform

    @property
    def mx(self):
        return self.magnetization[0]

    @property
    def my(self):
        return self.magnetization[1]

    @property
    def mz(self):
        return self.magnetization[2]

    def __len__(self):
        return self.b1_khz.size

    def __str__(self):
        return (f"B1 sweep: {len(self)} points over {self.b1_khz[0]:.3f}-{self.b1_khz[-1]:.3f} kHz, "
                f"{self.pulse_duration_ms:.2f} ms pulse, offset {self.frequency_offset_khz:.3f} kHz")


def simulate_b1_sweep(waveform, pulse_duration_ms,
                      frequency_offset_khz=0.0,
                      b1_min_khz=B1_SWEEP_MIN_KHZ,
                      b1_max_khz=B1_SWEEP_MAX_KHZ,
                      n_points=B1_SWEEP_POINTS,
                      device='cpu'):
    """
    Simulates Mx, My, Mz at the end of a pulse for a range of peak B1 values.

    The waveform's amplitude column is taken as the B1 shape (peak 1) and is
    scaled by each swept B1. Each sample lasts its share of the total
    duration: pulse_duration * duration_i / sum(duration). Relaxation and
    gradients are ignored.

    Args:
        waveform (array-like): Pulse waveform, shape (N, C) with C >= 2
                               (phase in degrees, amplitude[, duration, ...]).
        pulse_duration_ms (float): Total pulse duration in ms.
        frequency_offset_khz (float, optional): Off-resonance (kHz). Defaults to 0.
        b1_min_khz (float, optional): Lowest peak B1 (kHz). Defaults to B1_SWEEP_MIN_KHZ.
        b1_max_khz (float, optional): Highest peak B1 (kHz). Defaults to B1_SWEEP_MAX_KHZ.
        n_points (int, optional): Number of B1 values. Defaults to B1_SWEEP_POINTS.
        device (str, optional): PyTorch device. Defaults to 'cpu'.

    Returns:
        B1SweepResult: Magnetization vs. peak B1.
    """
    waveform = np.asarray(waveform, dtype=float)
    if waveform.ndim != 2 or waveform.shape[1] < 2 or waveform.shape[0] == 0:
        raise ValueError("waveform must have shape (N, C) with N >= 1 and C >= 2.")
    if pulse_duration_ms <= 0:
        raise ValueError("pulse_duration_ms must be positive.")
    if n_points < 2:
        raise ValueError("n_points must be at least 2.")
    if b1_max_khz <= b1_min_khz:
        raise ValueError("b1_max_khz must be greater than b1_min_khz.")

    n_samples = waveform.shape[0]
    if waveform.shape[1] > DURATION_COL:
        durations = waveform[:, DURATION_COL]
    else:
        durations = np.ones(n_samples)
    total = np.sum(durations)
    if total <= 0 or np.any(durations < 0):
        raise ValueError("Sample durations must be non-negative with a positive sum.")
    dt_s = (pulse_duration_ms * 1e-3) * durations / total

    b1_khz = np.linspace(b1_min_khz, b1_max_khz, n_points)
    M = simulate_b1_scaled_pulse(
        amplitude=waveform[:, AMPLITUDE_COL],
        phase_rad=np.deg2rad(waveform[:, PHASE_COL]),
        dt_s=dt_s,
        b1_hz=b1_khz * 1000.0,
        off_resonance_hz=frequency_offset_khz * 1000.0,
        device=device,
        dtype=torch.float64,
    )
    magnetization = M.cpu().numpy().T  # (3, n_points)

    return B1SweepResult(b1_khz, magnetization, pulse_duration_ms, frequency_offset_khz, waveform.copy())


class FlipAnglePeakB1Selector:
    """
    Picks the peak B1 that brings Mz to the value expected for a flip angle.

    Returns the lowest swept B1 at which Mz has come down to cos(flip_angle)
    within ``tolerance``. If Mz never gets there, returns the B1 whose Mz is
    closest to the target.
    """
    def __init__(self, flip_angle_deg, tolerance=1e-3):
        if tolerance < 0:
            raise ValueError("tolerance cannot be negative.")
        self.flip_angle_deg = float(flip_angle_deg)
        self.tolerance = tolerance

    @property
    def target_mz(self):
        return float(np.cos(np.deg2rad(self.flip_angle_deg)))

    def __call__(self, sweep):
        mz = np.asarray(sweep.mz)
        reached = np.flatnonzero(mz <= self.target_mz + self.tolerance)
        if reached.size > 0:
            return float(sweep.b1_khz[reached[0]])
        return float(sweep.b1_khz[np.argmin(np.abs(mz - self.target_mz))])
