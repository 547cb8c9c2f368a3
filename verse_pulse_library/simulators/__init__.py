# verse_pulse_library/simulators/__init__.py
from .b1_sweep_simulator import (
    B1SweepResult,
    FlipAnglePeakB1Selector,
    simulate_b1_sweep
)

__all__ = [
    'B1SweepResult',
    'FlipAnglePeakB1Selector',
    'simulate_b1_sweep'
]
