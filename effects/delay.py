"""Feedback delay: the echo unit, and the voice inside the chorus."""

import logging

from primitives.delay_line import DelayLine, required_capacity
from shared.validation import ValidationResult, clamp, require_delay

log = logging.getLogger(__name__)


class FeedbackDelay:
    """y[n] = x[n - d] + feedback * y[n - d]

    `delay_samples` is the default read position; process() accepts a
    per-call delay so a modulated reader (the chorus) can sweep it.
    `max_delay` sizes the buffers for the longest delay that will be asked for.
    """

    def __init__(self, delay_samples: int, feedback: float = 0.0, max_delay=None):
        self.validation = ValidationResult()
        capacity = required_capacity(delay_samples if max_delay is None else max_delay)
        self.delay = require_delay(self.validation, "delay_samples", delay_samples, capacity)
        self.feedback = clamp(self.validation, "feedback", feedback, 0.0, 1.0, log)
        self.x_history = DelayLine(capacity)
        self.y_history = DelayLine(capacity)

    def process(self, x: float, delay=None) -> float:
        d = self.delay if delay is None else delay
        y = self.x_history.tap(d) + self.feedback * self.y_history.tap(d)
        self.x_history.push(x)
        self.y_history.push(y)
        return y

    def reset(self):
        self.x_history.reset()
        self.y_history.reset()


def feedback_delay(sr, delay_ms, feedback):
    """Echo node from a delay time in milliseconds."""
    delay_samples = int(delay_ms / 1000.0 * sr)
    log.debug("delay %.1f ms -> %d samples", delay_ms, delay_samples)
    return FeedbackDelay(delay_samples, feedback)
