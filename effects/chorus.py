"""Three-voice chorus with feedback.

Signal flow (per sample):
    1. Advance three LFO phases (one starts at 0, two at random phases)
    2. fed = input + feedback * output[n - base_delay]
    3. Each voice reads `fed` at base_delay + round(sin(phase) * depth / 2)
    4. output = mix/3 * (voice1 + voice2 + voice3) + fed
"""

import logging
import math

import numpy as np

from effects.delay import FeedbackDelay
from primitives.delay_line import DelayLine, required_capacity
from shared.validation import ValidationResult, clamp

log = logging.getLogger(__name__)

TWO_PI = 2.0 * np.pi
N_VOICES = 3


class Chorus:
    def __init__(self, sample_rate: float, depth_ms: float, rate_hz: float,
                 delay_ms: float, mix: float, feedback: float = 0.0, rng=None):
        self.validation = ValidationResult()
        self.sample_rate = sample_rate
        self.rate = clamp(self.validation, "rate_hz", rate_hz, lo=0.0, logger=log)
        self.mix = clamp(self.validation, "mix", mix, 0.0, 1.0, log)
        self.feedback = clamp(self.validation, "feedback", feedback, 0.0, 0.9999, log)
        self.delay_ms = delay_ms

        self.delay_samples = int(delay_ms / 1000.0 * sample_rate)
        if self.delay_samples < 2:
            self.validation.reject(
                f"chorus base delay of {delay_ms} ms is {self.delay_samples} samples; need >= 2")

        depth = clamp(self.validation, "depth_ms", depth_ms, lo=0.0, logger=log) \
            * sample_rate / 1000.0
        if depth > self.delay_samples:
            depth = self.validation.correct(
                "modulation_depth_samples", depth, self.delay_samples / 2.0,
                "deeper than the base delay, halved", log)
        self.modulation_depth = depth

        horizon = self.delay_samples + math.ceil(depth / 2.0)
        self.voices = [FeedbackDelay(self.delay_samples, 0.0, max_delay=horizon)
                       for _ in range(N_VOICES)]
        self.buffer = DelayLine(required_capacity(self.delay_samples))

        rng = np.random.default_rng() if rng is None else rng
        self.initial_phases = (0.0,
                               float(rng.uniform(0.0, TWO_PI)),
                               float(rng.uniform(0.0, TWO_PI)))
        self.phases = list(self.initial_phases)
        self._increment = TWO_PI * self.rate / sample_rate

        log.debug("chorus: base delay %d samples, depth %.2f samples (%d..%d)",
                  self.delay_samples, depth,
                  self.delay_samples - depth, self.delay_samples + depth)

    def process(self, x: float) -> float:
        offsets = []
        for i in range(N_VOICES):
            phase = self.phases[i] + self._increment
            if phase > TWO_PI:
                phase -= TWO_PI
            self.phases[i] = phase
            offsets.append(round(math.sin(phase) * self.modulation_depth / 2.0))

        fed = x + self.feedback * self.buffer.tap(self.delay_samples)
        wet = 0.0
        for voice, offset in zip(self.voices, offsets):
            wet += voice.process(fed, self.delay_samples + offset)
        y = self.mix * (1.0 / 3.0) * wet + fed

        self.buffer.push(y)
        return y

    def reset(self):
        for voice in self.voices:
            voice.reset()
        self.buffer.reset()
        self.phases = list(self.initial_phases)
