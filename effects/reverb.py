"""Comb/allpass reverbs: four classic topologies.

    COMB_REVERB  4 parallel combs (21, 26, 31, 37 ms), alternating-sign sum * 0.25
    SCHROEDER    4 parallel combs (22.5 ms, x1.5 each) -> 2 series allpasses
    LPF_COMB     6 parallel damped combs, alternating-sign sum * 0.8
    MOORER       6 parallel damped combs, sum * 0.75 -> 1 allpass

Per-comb feedback comes from the target decay time:
    g = 10^(-3 * delay / decay)
so each comb loses 60 dB after `decay_seconds`.
"""

import logging
from enum import Enum

import numpy as np

from primitives.filters import AllpassFilter, CombFilter
from shared.validation import ValidationResult, clamp

log = logging.getLogger(__name__)

COMB_REVERB_DELAYS_MS = (21.0, 26.0, 31.0, 37.0)
FIRST_DELAY_MS = 15.0
DELAY_GROWTH = 1.5
ALLPASS_GAIN = 0.707
ALLPASS_DELAY_RANGE_MS = (2.0, 8.0)


class ReverbType(Enum):
    COMB_REVERB = "comb"
    SCHROEDER = "schroeder"
    LPF_COMB = "lpf_comb"
    MOORER = "moorer"


def decay_gain(delay, decay):
    """Loop gain giving -60 dB after `decay` (same units as `delay`)."""
    return 10.0 ** (-3.0 * delay / decay)


def _growing_delays_ms(count):
    delays = []
    delay_ms = FIRST_DELAY_MS
    for _ in range(count):
        delay_ms *= DELAY_GROWTH
        delays.append(delay_ms)
    return delays


def _random_allpass(sample_rate, rng):
    lo, hi = ALLPASS_DELAY_RANGE_MS
    delay = int(np.floor(rng.uniform(lo, hi) / 1000.0 * sample_rate))
    return AllpassFilter(delay, ALLPASS_GAIN)


def _alternating_sum(combs, x):
    y = 0.0
    for i, comb in enumerate(combs):
        if i % 2 == 0:
            y += comb.process(x)
        else:
            y -= comb.process(x)
    return y


class _CombBank:
    """COMB_REVERB wiring."""

    def __init__(self, reverb, sample_rate, decay, damp, rng):
        reverb.combs = []
        for delay_ms in COMB_REVERB_DELAYS_MS:
            delay_seconds = delay_ms / 1000.0
            delay_samples = int(np.floor(delay_seconds * sample_rate))
            g = decay_gain(delay_seconds, decay)
            log.debug("comb %d samples, g=%.5f", delay_samples, g)
            reverb.combs.append(CombFilter(delay_samples, g))

    def __call__(self, reverb, x):
        return 0.25 * _alternating_sum(reverb.combs, x)


class _Schroeder:
    """SCHROEDER wiring.

    Four allpasses are built. Allpasses 2 and 3 diffuse the comb sum;
    allpasses 0 and 1 run on the dry input and their output is only kept
    in `reverb.diffused_input`, never mixed into the result.
    """

    def __init__(self, reverb, sample_rate, decay, damp, rng):
        decay_samples = int(np.floor(decay * sample_rate))
        reverb.combs = []
        for delay_ms in _growing_delays_ms(4):
            delay_samples = int(np.floor(delay_ms / 1000.0 * sample_rate))
            g = decay_gain(delay_samples, decay_samples)
            log.debug("comb %d samples, g=%.5f", delay_samples, g)
            reverb.combs.append(CombFilter(delay_samples, g))
        reverb.allpasses = [_random_allpass(sample_rate, rng) for _ in range(4)]
        log.info("schroeder: allpasses 0-1 run on the dry input but are not "
                 "mixed into the output")

    def __call__(self, reverb, x):
        side = reverb.allpasses[0].process(x)
        reverb.diffused_input = reverb.allpasses[1].process(side)

        y = _alternating_sum(reverb.combs, x)
        y = reverb.allpasses[2].process(y)
        return reverb.allpasses[3].process(y)


class _DampedBank:
    """LPF_COMB wiring; MOORER adds one allpass after the sum."""

    scale = 0.8
    n_allpasses = 0

    def __init__(self, reverb, sample_rate, decay, damp, rng):
        decay_samples = int(np.floor(decay * sample_rate))
        reverb.combs = []
        for delay_ms in _growing_delays_ms(6):
            delay_samples = int(np.floor(delay_ms / 1000.0 * sample_rate))
            g = decay_gain(delay_samples, decay_samples) * (1.0 - damp)
            log.debug("damped comb %d samples, g=%.5f", delay_samples, g)
            reverb.combs.append(CombFilter.lpf_comb(delay_samples, g, damp))
        reverb.allpasses = [_random_allpass(sample_rate, rng)
                            for _ in range(self.n_allpasses)]

    def __call__(self, reverb, x):
        y = self.scale * _alternating_sum(reverb.combs, x)
        for ap in reverb.allpasses:
            y = ap.process(y)
        return y


class _Moorer(_DampedBank):
    scale = 0.75
    n_allpasses = 1


_TOPOLOGIES = {
    ReverbType.COMB_REVERB: _CombBank,
    ReverbType.SCHROEDER: _Schroeder,
    ReverbType.LPF_COMB: _DampedBank,
    ReverbType.MOORER: _Moorer,
}


class Reverb:
    """One of the four comb/allpass topologies, chosen at construction.

    `damp` only affects LPF_COMB and MOORER. `rng` draws the random
    allpass delays (SCHROEDER, MOORER); pass a seeded
    numpy.random.Generator for reproducible renders.
    """

    def __init__(self, sample_rate: float, decay_seconds: float,
                 reverb_type: ReverbType = ReverbType.COMB_REVERB,
                 damp: float = 0.0, rng=None):
        self.validation = ValidationResult()
        if decay_seconds * sample_rate < 1.0:
            self.validation.reject(
                f"decay_seconds must cover at least one sample, got {decay_seconds}")
        self.sample_rate = sample_rate
        self.decay = decay_seconds
        self.reverb_type = ReverbType(reverb_type)
        self.damp = clamp(self.validation, "damp", damp, 0.0, 0.9999, log)
        self.combs = []
        self.allpasses = []
        self.diffused_input = 0.0

        rng = np.random.default_rng() if rng is None else rng
        self._topology = _TOPOLOGIES[self.reverb_type](
            self, sample_rate, decay_seconds, self.damp, rng)
        for i, comb in enumerate(self.combs):
            self.validation.merge(comb.validation, f"comb[{i}].")
        for i, ap in enumerate(self.allpasses):
            self.validation.merge(ap.validation, f"allpass[{i}].")

    def process(self, x: float) -> float:
        return self._topology(self, x)

    def reset(self):
        for comb in self.combs:
            comb.reset()
        for ap in self.allpasses:
            ap.reset()
        self.diffused_input = 0.0


def comb_reverb(sample_rate, decay):
    return Reverb(sample_rate, decay, ReverbType.COMB_REVERB)


def schroeder_reverb(sample_rate, decay, rng=None):
    return Reverb(sample_rate, decay, ReverbType.SCHROEDER, rng=rng)


def lpf_comb_reverb(sample_rate, decay, damp):
    return Reverb(sample_rate, decay, ReverbType.LPF_COMB, damp)


def moorer_reverb(sample_rate, decay, damp, rng=None):
    return Reverb(sample_rate, decay, ReverbType.MOORER, damp, rng=rng)
