"""Physical constants and model heuristics for room mode analysis.

The attenuation, margin, bandwidth and damping values are empirical tuning
knobs of the modal superposition model. They are exposed as module-level
names so callers can override them per call instead of editing the model.
"""

# Speed of sound in air at ~20 °C (m/s)
SPEED_OF_SOUND = 343.0

# Nominal analysis band (Hz)
FREQ_MIN = 20.0
FREQ_MAX = 200.0

# Modes are kept in [FREQ_MIN - LOWER_FREQ_MARGIN, FREQ_MAX + UPPER_FREQ_MARGIN]
LOWER_FREQ_MARGIN = 1.0
UPPER_FREQ_MARGIN = 10.0

# Perceptual weight per mode type
MODE_WEIGHTS = {
    "axial": 1.0,
    "tangential": 0.65,
    "oblique": 0.4,
}

# Contribution scale of a mode evaluated outside its own segment footprint
FIELD_OUTSIDE_ATTENUATION = 0.3
RESPONSE_OUTSIDE_ATTENUATION = 0.35

# Pressure field damping: 1 / (1 + f / DAMPING_FREQUENCY)
DAMPING_FREQUENCY = 40.0

# Lorentzian half-width of every resonance in the frequency response (Hz)
RESONANCE_BANDWIDTH = 4.0

# Number of points in the default frequency sweep (1 Hz spacing over 20-200 Hz)
RESPONSE_STEPS = 181

# Magnitude floor before conversion to dB
MAGNITUDE_FLOOR = 1e-4

# Heatmap defaults
DEFAULT_RESOLUTION = 60
MIN_EXPORT_RESOLUTION = 120
FLAT_FIELD_TOLERANCE = 1e-6
