# verse_pulse_library/core/constants.py
# Gyromagnetic ratio for Hydrogen (1H) in Hz/T
GAMMA_HZ_PER_T_PROTON = 42.57747892e6
# For convenience, gamma in Hz/G (1 T = 10000 G)
GAMMA_HZ_PER_G_PROTON = GAMMA_HZ_PER_T_PROTON / 10000.0

# Waveform column layout: [phase (deg), amplitude, duration, gradient]
PHASE_COL = 0
AMPLITUDE_COL = 1
DURATION_COL = 2
GRADIENT_COL = 3
MIN_VERSE_COLUMNS = 4

# Reference pulse duration used for the time-B1 product (5 ms)
VERSE_REFERENCE_DURATION_S = 0.005

# Phase steps inside this open window are treated as exact 360 degree wraps
PHASE_JUMP_MIN_DEG = 355.0
PHASE_JUMP_MAX_DEG = 365.0
PHASE_WRAP_DEG = 360.0

# Rounded phase above this counts as a negative (180 degree) lobe
NEGATIVE_LOBE_PHASE_DEG = 179.0

# Flip angle expressed in cycles (90 deg = 0.25 cycles, 180 deg = 0.5 cycles)
EXCITATION_FLIP_CYCLES = 0.25
REFOCUSING_FLIP_CYCLES = 0.5
INVERSION_FLIP_CYCLES = 0.5

# Peak-B1 sweep used to calibrate phase-modulated pulses
B1_SWEEP_MIN_KHZ = 0.0
B1_SWEEP_MAX_KHZ = 5.0
B1_SWEEP_POINTS = 40000
