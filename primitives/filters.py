"""Filters: biquad, comb, allpass. Built from scratch."""

import logging
from enum import Enum

from primitives.coefficients import (
    IDENTITY,
    BiquadCoefficients,
    bpf_coefficients,
    butterworth_lpf_coefficients,
    high_shelf_coefficients,
    low_shelf_coefficients,
    second_order_hpf_coefficients,
    second_order_lpf_coefficients,
)
from primitives.delay_line import DelayLine, required_capacity
from shared.validation import ValidationResult, clamp, require_delay

log = logging.getLogger(__name__)

# Ceiling on feedback + damping for the damped comb
DAMPED_LOOP_LIMIT = 0.9999


class BiquadFilter:
    """Second-order section with a wet/dry post-mix: 7 coefficients, 4 state variables.

    Difference equation (Direct Form 1):
        y[n] = a0*x[n] + a1*x[n-1] + a2*x[n-2] - b0*y[n-1] - b1*y[n-2]
        out  = c0*y[n] + d0*x[n]

    Coefficients come from primitives.coefficients; the static methods
    below are shortcuts for the common types.
    """

    def __init__(self, coeffs: BiquadCoefficients = IDENTITY):
        self.coeffs = coeffs
        self.x1 = 0.0  # x[n-1]
        self.x2 = 0.0  # x[n-2]
        self.y1 = 0.0  # y[n-1]
        self.y2 = 0.0  # y[n-2]

    def process(self, x: float) -> float:
        a0, a1, a2, b0, b1, c0, d0 = self.coeffs
        y = a0 * x + a1 * self.x1 + a2 * self.x2 - b0 * self.y1 - b1 * self.y2
        self.x2 = self.x1
        self.x1 = x
        self.y2 = self.y1
        self.y1 = y
        return c0 * y + d0 * x

    def set_coefficients(self, coeffs: BiquadCoefficients):
        """Swap coefficients, keeping the filter history."""
        self.coeffs = coeffs

    def reset(self):
        self.x1 = self.x2 = self.y1 = self.y2 = 0.0

    @staticmethod
    def lowpass(freq, q, sr):
        """Lowpass. freq in Hz, q is resonance (0.707 = Butterworth)."""
        return BiquadFilter(second_order_lpf_coefficients(sr, freq, q))

    @staticmethod
    def highpass(freq, q, sr):
        return BiquadFilter(second_order_hpf_coefficients(sr, freq, q))

    @staticmethod
    def bandpass(freq, q, sr):
        return BiquadFilter(bpf_coefficients(sr, freq, q))

    @staticmethod
    def low_shelf(freq, gain_db, sr):
        """Low shelf, boost/cut below freq. gain_db in dB."""
        return BiquadFilter(low_shelf_coefficients(sr, freq, gain_db))

    @staticmethod
    def high_shelf(freq, gain_db, sr):
        """High shelf, boost/cut above freq. gain_db in dB."""
        return BiquadFilter(high_shelf_coefficients(sr, freq, gain_db))


def lowpass_filter(sr, cutoff):
    """Butterworth lowpass node."""
    return BiquadFilter(butterworth_lpf_coefficients(sr, cutoff))


class CombType(Enum):
    POSITIVE = 1
    NEGATIVE = -1


class _PlainFeedback:
    """y = x + sign * g * y[n-D]"""

    def __init__(self, feedback, polarity):
        self.gain = feedback * polarity.value

    def __call__(self, x, delayed, history):
        return x + self.gain * delayed

    def reset(self):
        pass


class _DampedFeedback:
    """One-pole lowpass inside the loop.

    y = x + g*y[n-D] - d*x[n-1] + d*y[n-1]

    which is H(z) = (1 - d z^-1) / (1 - d z^-1 - g z^-D): each trip around
    the loop loses a little more top end.
    """

    def __init__(self, feedback, damping):
        self.feedback = feedback
        self.damping = damping
        self.inputs = DelayLine(required_capacity(1))

    def __call__(self, x, delayed, history):
        y = (x + self.feedback * delayed
             - self.damping * self.inputs.tap(1)
             + self.damping * history.tap(1))
        self.inputs.push(x)
        return y

    def reset(self):
        self.inputs.reset()


class CombFilter:
    """Feedback comb filter.

    Structure:
        output = input + feedback * output[n - delay]

    An impulse comes back every `delay_samples` samples, scaled by
    `feedback` each time. NEGATIVE polarity flips the sign of the
    recirculated signal (odd harmonics instead of all harmonics). Passing
    `damping` puts a one-pole lowpass in the loop, which is what the
    reverb tails use.

    Out-of-range feedback/damping are clamped and listed in `validation`.
    With damping, feedback is also held below 1 - damping.
    """

    def __init__(self, delay_samples: int, feedback: float = 0.5,
                 polarity: CombType = CombType.POSITIVE, damping=None):
        self.validation = ValidationResult()
        self.delay = require_delay(self.validation, "delay_samples", delay_samples)
        self.feedback = clamp(self.validation, "feedback", feedback, 0.0, 1.0, log)
        self.polarity = polarity
        if damping is None:
            self.damping = None
            self._law = _PlainFeedback(self.feedback, polarity)
        else:
            self.damping = clamp(self.validation, "damping", damping, 0.0, 0.9999, log)
            # g + d < 1 keeps every pole of the damped loop inside the unit circle
            self.feedback = clamp(self.validation, "feedback", self.feedback,
                                  hi=DAMPED_LOOP_LIMIT * (1.0 - self.damping), logger=log)
            self._law = _DampedFeedback(self.feedback, self.damping)
        self.buffer = DelayLine(required_capacity(self.delay))

    @classmethod
    def lpf_comb(cls, delay_samples, feedback, damping):
        return cls(delay_samples, feedback, CombType.POSITIVE, damping=damping)

    def process(self, x: float) -> float:
        y = self._law(x, self.buffer.tap(self.delay), self.buffer)
        self.buffer.push(y)
        return y

    def reset(self):
        self.buffer.reset()
        self._law.reset()


class AllpassFilter:
    """Delay-based allpass filter (Schroeder allpass).

    Structure:
        output = -g * input + input[n - delay] + g * output[n - delay]

    Passes all frequencies at equal amplitude but smears their timing.
    Chain several together to turn a sharp transient into a diffuse cloud.

    Gains above 1 are clamped to 1; negative gains are allowed down to -1.
    """

    def __init__(self, delay_samples: int, gain: float = 0.5):
        self.validation = ValidationResult()
        self.delay = require_delay(self.validation, "delay_samples", delay_samples)
        self.gain = clamp(self.validation, "gain", gain, -1.0, 1.0, log)
        capacity = required_capacity(self.delay)
        self.x_history = DelayLine(capacity)
        self.y_history = DelayLine(capacity)

    def process(self, x: float) -> float:
        y = (-self.gain * x
             + self.x_history.tap(self.delay)
             + self.gain * self.y_history.tap(self.delay))
        self.x_history.push(x)
        self.y_history.push(y)
        return y

    def reset(self):
        self.x_history.reset()
        self.y_history.reset()
