# verse_pulse_library/examples/verse_gaussian_example.py
"""
Example script demonstrating VERSE on a slice-selective Gaussian pulse.
This script will show how to:
1. Build a Gaussian excitation waveform with a constant slice-select gradient.
2. Lower its peak power with a VERSE modulation function.
3. Compare the time-B1 products before and after.
"""
import numpy as np

from verse_pulse_library.rf_pulses import PulseDescriptor, PulseType, waveform_from_rf, apply_verse


def build_gaussian_waveform(n_samples=400, sigma_factor=2.5, gradient=1.0):
    # Pulse spans +/- sigma_factor standard deviations
    x = np.linspace(-sigma_factor, sigma_factor, n_samples)
    rf = np.exp(-0.5 * x ** 2)
    return waveform_from_rf(rf, gradient=gradient)


def run_verse_example(n_samples=400, min_alpha=0.5, verbose=True):
    pulse = PulseDescriptor(build_gaussian_waveform(n_samples), PulseType.excitation(),
                            metadata={'name': 'gauss'})
    reference = apply_verse(pulse, np.ones(n_samples))

    # Slow down (alpha < 1) around the centre where the RF peaks
    t = np.linspace(-1, 1, n_samples)
    alpha = 1.0 - (1.0 - min_alpha) * np.exp(-(t / 0.3) ** 2)
    versed = apply_verse(pulse, alpha, verbose=verbose)

    if verbose:
        print(f"Reference tw1: {reference.tw1:.4f}")
        print(f"VERSE tw1:     {versed.tw1:.4f}")
        print(f"Gradient range: {np.min(versed.waveform[:, 3]):.3f} to {np.max(versed.waveform[:, 3]):.3f}")
    return reference, versed


if __name__ == "__main__":
    run_verse_example()
