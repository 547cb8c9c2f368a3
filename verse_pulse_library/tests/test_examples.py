# File: verse_pulse_library/tests/test_examples.py
import unittest
import numpy as np

from verse_pulse_library.examples.verse_gaussian_example import build_gaussian_waveform, run_verse_example
from verse_pulse_library.rf_pulses.verse import is_phase_modulated


class TestVerseGaussianExample(unittest.TestCase):

    def test_gaussian_waveform_layout(self):
        waveform = build_gaussian_waveform(n_samples=101, gradient=0.7)
        self.assertEqual(waveform.shape, (101, 4))
        self.assertAlmostEqual(np.max(waveform[:, 1]), 1.0)
        np.testing.assert_array_equal(waveform[:, 0], np.zeros(101))
        np.testing.assert_array_equal(waveform[:, 3], np.full(101, 0.7))

    def test_run_example(self):
        reference, versed = run_verse_example(n_samples=200, min_alpha=0.5, verbose=False)
        self.assertFalse(is_phase_modulated(versed.waveform[:, 0]))
        self.assertGreater(reference.tw1, 0)
        self.assertGreater(versed.tw1, 0)
        # Stretching the peak flattens the normalized shape, raising its mean
        self.assertLess(versed.tw1, reference.tw1)
        self.assertEqual(versed.waveform.shape, (200, 4))
        self.assertLess(np.min(versed.waveform[:, 3]), 0.75)
        self.assertEqual(versed.metadata['name'], 'gauss')


if __name__ == '__main__':
    unittest.main()
