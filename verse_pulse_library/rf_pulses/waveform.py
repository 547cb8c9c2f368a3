# File: verse_pulse_library/rf_pulses/waveform.py
import numpy as np

from verse_pulse_library.core.constants import GRADIENT_COL


def waveform_from_rf(rf, durations=None, gradient=None):
    """
    Converts RF samples into a [phase, amplitude, duration(, gradient)] waveform.

    Args:
        rf (array-like): Real or complex RF samples, shape (N,). Any unit;
                         the amplitude column is normalized to a peak of 1.
        durations (array-like, optional): Relative duration of each sample, shape (N,).
                                          Defaults to ones (uniform sampling).
        gradient (float or array-like, optional): Gradient channel. A scalar is
                                                  broadcast to every sample.

    Returns:
        np.ndarray: Waveform of shape (N, 3), or (N, 4) when a gradient is given.
                    Phase is in degrees within [0, 360).
    """
    rf = np.asarray(rf)
    if rf.ndim != 1:
        raise ValueError("rf must be a 1D array of samples.")
    n_samples = rf.size
    if n_samples == 0:
        return np.empty((0, 3)) if gradient is None else np.empty((0, 4))

    amplitude = np.abs(rf).astype(float)
    peak = np.max(amplitude)
    if peak > 0:
        amplitude = amplitude / peak
    # np.angle gives (-180, 180]; fold negative phases onto (180, 360)
    phase_deg = np.mod(np.degrees(np.angle(rf)), 360.0)

    if durations is None:
        durations = np.ones(n_samples)
    else:
        durations = np.asarray(durations, dtype=float).reshape(-1)
        if durations.size != n_samples:
            raise ValueError(f"durations has {durations.size} samples, rf has {n_samples}.")

    waveform = np.column_stack([phase_deg, amplitude, durations])
    if gradient is not None:
        waveform = add_gradient_channel(waveform, gradient)
    return waveform


def add_gradient_channel(waveform, gradient):
    """
    Returns a copy of ``waveform`` whose fourth column is ``gradient``.

    An existing gradient column is replaced; a 3-column waveform gains one.
    """
    waveform = np.asarray(waveform, dtype=float)
    if waveform.ndim != 2 or waveform.shape[1] < GRADIENT_COL:
        raise ValueError("waveform must have shape (N, 3) or wider.")
    n_samples = waveform.shape[0]

    gradient = np.asarray(gradient, dtype=float)
    if gradient.ndim == 0:
        gradient = np.full(n_samples, float(gradient))
    else:
        gradient = gradient.reshape(-1)
        if gradient.size != n_samples:
            raise ValueError(f"gradient has {gradient.size} samples, waveform has {n_samples}.")

    if waveform.shape[1] > GRADIENT_COL:
        out = waveform.copy()
        out[:, GRADIENT_COL] = gradient
        return out
    return np.column_stack([waveform, gradient])
