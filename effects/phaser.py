"""Phaser: cascaded first-order allpass sections with an LFO-swept cutoff.

Each stage pair sweeps between its own fixed endpoints, so the notches
spread across the spectrum instead of bunching up. 1, 2 or 3 notch pairs
(2, 4 or 6 allpass sections) are active.
"""

import logging
import math

import numpy as np

from primitives.coefficients import first_order_allpass_coefficients
from primitives.delay_line import DelayLine, required_capacity
from primitives.filters import BiquadFilter
from shared.validation import ValidationResult, clamp

log = logging.getLogger(__name__)

TWO_PI = 2.0 * np.pi

# (low, high) sweep endpoints in Hz, one pair per allpass section
PHASER_ENDPOINTS = (
    (16.0, 1600.0),
    (33.0, 3300.0),
    (48.0, 4800.0),
    (98.0, 9800.0),
    (160.0, 16000.0),
    (260.0, 20480.0),
)

# Keep sweeps clear of Nyquist, where tan() in the allpass design blows up
MAX_CUTOFF_RATIO = 0.49


def lerp11(a, b, t):
    """Map t in [-1, 1] onto [a, b]."""
    return a + (b - a) * (t * 0.5 + 0.5)


class Phaser:
    def __init__(self, sample_rate: float, feedback: float = 0.5, rate_hz: float = 0.5,
                 depth: float = 1.0, offset: float = 0.0, intensity: float = 1.0,
                 stages: int = 3):
        self.validation = ValidationResult()
        self.sample_rate = sample_rate
        self.feedback = clamp(self.validation, "feedback", feedback, 0.0, 1.0, log)
        self.rate = clamp(self.validation, "rate_hz", rate_hz, 0.0, 50.0, log)
        self.depth = clamp(self.validation, "depth", depth, 0.0, 1.0, log)
        self.offset = clamp(self.validation, "offset", offset, -1.0, 1.0, log)
        self.intensity = clamp(self.validation, "intensity", intensity, 0.0, 1.0, log)
        self.stages = int(clamp(self.validation, "stages", int(stages), 1, 3, log))

        ceiling = MAX_CUTOFF_RATIO * sample_rate
        self.endpoints = []
        for i, (lo, hi) in enumerate(PHASER_ENDPOINTS):
            lo = clamp(self.validation, f"endpoint[{i}].low", lo, hi=ceiling, logger=log)
            hi = clamp(self.validation, f"endpoint[{i}].high", hi, hi=ceiling, logger=log)
            self.endpoints.append((lo, hi))

        self.allpasses = [BiquadFilter(first_order_allpass_coefficients(sample_rate, lo))
                          for lo, _ in self.endpoints]
        self.feedback_buffer = DelayLine(required_capacity(1))
        self.lfo = 0.0
        self._increment = TWO_PI * self.rate / sample_rate

    def process(self, x: float) -> float:
        phased = x + self.feedback * self.feedback_buffer.tap(1)

        sweep = min(1.0, max(-1.0, math.sin(self.lfo) * self.depth + self.offset))
        for i in range(self.stages * 2):
            lo, hi = self.endpoints[i]
            ap = self.allpasses[i]
            ap.set_coefficients(
                first_order_allpass_coefficients(self.sample_rate, lerp11(lo, hi, sweep)))
            phased = ap.process(phased)

        self.lfo += self._increment
        if self.lfo > TWO_PI:
            self.lfo -= TWO_PI

        self.feedback_buffer.push(phased)
        return x + self.intensity * phased

    def reset(self):
        for ap in self.allpasses:
            ap.reset()
        self.feedback_buffer.reset()
        self.lfo = 0.0
