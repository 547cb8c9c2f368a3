# File: verse_pulse_library/tests/test_b1_sweep.py
import unittest
import numpy as np
import torch

from verse_pulse_library.core.bloch_sim import rotate_magnetization_batch, simulate_b1_scaled_pulse
from verse_pulse_library.simulators import B1SweepResult, FlipAnglePeakB1Selector, simulate_b1_sweep


class TestBlochKernel(unittest.TestCase):

    def test_quarter_turn_about_x(self):
        M = torch.tensor([[0.0, 0.0, 1.0]], dtype=torch.float64)
        omega = torch.tensor([[2 * np.pi * 250.0, 0.0, 0.0]], dtype=torch.float64)
        M_new = rotate_magnetization_batch(M, omega, 1e-3)  # 250 Hz for 1 ms = 90 degrees
        np.testing.assert_allclose(M_new.numpy(), [[0.0, -1.0, 0.0]], atol=1e-12)

    def test_zero_field_leaves_magnetization(self):
        M = torch.tensor([[0.3, 0.4, 0.5]], dtype=torch.float64)
        M_new = rotate_magnetization_batch(M, torch.zeros(1, 3, dtype=torch.float64), 1e-3)
        np.testing.assert_allclose(M_new.numpy(), M.numpy())

    def test_shape_checks(self):
        with self.assertRaises(ValueError):
            rotate_magnetization_batch(torch.zeros(3), torch.zeros(3), 1e-3)
        with self.assertRaises(ValueError):
            rotate_magnetization_batch(torch.zeros(2, 3), torch.zeros(3, 3), 1e-3)
        with self.assertRaises(ValueError):
            simulate_b1_scaled_pulse(np.ones(4), np.zeros(3), 1e-3, [100.0])
        with self.assertRaises(ValueError):
            simulate_b1_scaled_pulse(np.ones(2), np.zeros(2), [-1e-3, 1e-3], [100.0])

    def test_norm_is_preserved(self):
        rng = np.random.default_rng(0)
        M = simulate_b1_scaled_pulse(rng.random(20), rng.random(20) * 2 * np.pi, 1e-4,
                                     np.linspace(0, 2000, 7), off_resonance_hz=300.0)
        np.testing.assert_allclose(torch.linalg.norm(M, dim=-1).numpy(), np.ones(7), atol=1e-10)


class TestB1Sweep(unittest.TestCase):

    def setUp(self):
        n = 50
        self.hard = np.column_stack([np.zeros(n), np.ones(n), np.ones(n), np.ones(n)])
        self.duration_ms = 5.0

    def test_hard_pulse_mz_curve(self):
        sweep = simulate_b1_sweep(self.hard, self.duration_ms, b1_min_khz=0.0, b1_max_khz=0.2, n_points=401)
        self.assertIsInstance(sweep, B1SweepResult)
        self.assertEqual(len(sweep), 401)
        self.assertEqual(sweep.magnetization.shape, (3, 401))
        expected_mz = np.cos(2 * np.pi * sweep.b1_khz * 1000.0 * self.duration_ms * 1e-3)
        np.testing.assert_allclose(sweep.mz, expected_mz, atol=1e-9)
        np.testing.assert_allclose(sweep.mx, np.zeros(401), atol=1e-9)

    def test_phase_rotates_axis_not_flip(self):
        shifted = self.hard.copy()
        shifted[:, 0] = 90.0
        a = simulate_b1_sweep(self.hard, self.duration_ms, b1_max_khz=0.2, n_points=41)
        b = simulate_b1_sweep(shifted, self.duration_ms, b1_max_khz=0.2, n_points=41)
        np.testing.assert_allclose(a.mz, b.mz, atol=1e-9)
        self.assertFalse(np.allclose(a.my, b.my))

    def test_durations_weight_samples(self):
        # Half the samples at zero amplitude: only the other half's time counts
        waveform = self.hard.copy()
        waveform[:25, 1] = 0.0
        waveform[:25, 2] = 3.0
        sweep = simulate_b1_sweep(waveform, self.duration_ms, b1_max_khz=0.4, n_points=81)
        on_time_s = self.duration_ms * 1e-3 * 25 / (25 * 3 + 25)
        expected_mz = np.cos(2 * np.pi * sweep.b1_khz * 1000.0 * on_time_s)
        np.testing.assert_allclose(sweep.mz, expected_mz, atol=1e-9)

    def test_off_resonance_reduces_inversion(self):
        on = simulate_b1_sweep(self.hard, self.duration_ms, b1_max_khz=0.2, n_points=401)
        off = simulate_b1_sweep(self.hard, self.duration_ms, frequency_offset_khz=0.2,
                                b1_max_khz=0.2, n_points=401)
        self.assertGreater(np.min(off.mz), np.min(on.mz))
        self.assertEqual(off.frequency_offset_khz, 0.2)

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            simulate_b1_sweep(self.hard, 0.0)
        with self.assertRaises(ValueError):
            simulate_b1_sweep(self.hard, 5.0, n_points=1)
        with self.assertRaises(ValueError):
            simulate_b1_sweep(self.hard, 5.0, b1_min_khz=1.0, b1_max_khz=1.0)
        with self.assertRaises(ValueError):
            simulate_b1_sweep(self.hard[:, :1], 5.0)
        bad = self.hard.copy()
        bad[:, 2] = 0.0
        with self.assertRaises(ValueError):
            simulate_b1_sweep(bad, 5.0, n_points=3)


class TestFlipAngleSelector(unittest.TestCase):

    def setUp(self):
        n = 50
        hard = np.column_stack([np.zeros(n), np.ones(n), np.ones(n), np.ones(n)])
        self.sweep = simulate_b1_sweep(hard, 5.0, b1_max_khz=0.2, n_points=401)

    def test_ninety_degrees(self):
        # 90 degrees in 5 ms needs 50 Hz
        self.assertAlmostEqual(FlipAnglePeakB1Selector(90.0)(self.sweep), 0.05, delta=0.001)

    def test_one_eighty_degrees(self):
        self.assertAlmostEqual(FlipAnglePeakB1Selector(180.0)(self.sweep), 0.1, delta=0.002)

    def test_unreachable_target_falls_back_to_closest(self):
        b1 = np.linspace(0.0, 1.0, 5)
        mz = np.array([1.0, 0.8, 0.5, 0.6, 0.7])
        sweep = B1SweepResult(b1, np.vstack([np.zeros(5), np.zeros(5), mz]), 5.0, 0.0, None)
        self.assertEqual(FlipAnglePeakB1Selector(90.0)(sweep), 0.5)

    def test_negative_tolerance_rejected(self):
        with self.assertRaises(ValueError):
            FlipAnglePeakB1Selector(90.0, tolerance=-0.1)


if __name__ == '__main__':
    unittest.main()
