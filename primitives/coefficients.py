"""Biquad coefficient synthesis: bilinear-transform designs.

Every function maps (sample_rate, cutoff_hz, ...) to a BiquadCoefficients
holding a normalized second-order section plus two post-mix terms:

    y   = a0*x + a1*x[n-1] + a2*x[n-2] - b0*y[n-1] - b1*y[n-2]
    out = c0*y + d0*x

Ordinary filters use c0=1, d0=0. The shelving filters are first-order
sections mixed against the dry signal (c0 = 10^(gain/20) - 1, d0 = 1).
"""

from typing import NamedTuple

import numpy as np
from scipy.signal import freqz

from shared.validation import ConfigurationError

SQRT_2 = np.sqrt(2.0)


class BiquadCoefficients(NamedTuple):
    a0: float
    a1: float
    a2: float
    b0: float
    b1: float
    c0: float = 1.0
    d0: float = 0.0

    def frequency_response(self, sample_rate, freqs):
        """Complex response at `freqs` (Hz), including the wet/dry mix."""
        _, h = freqz([self.a0, self.a1, self.a2], [1.0, self.b0, self.b1],
                     worN=np.asarray(freqs, dtype=np.float64), fs=sample_rate)
        return self.c0 * h + self.d0


IDENTITY = BiquadCoefficients(1.0, 0.0, 0.0, 0.0, 0.0)


def _check(sample_rate, cutoff_hz, q=None):
    if sample_rate <= 0:
        raise ConfigurationError(f"sample rate must be positive, got {sample_rate}")
    if not 0.0 < cutoff_hz < sample_rate / 2.0:
        raise ConfigurationError(
            f"cutoff {cutoff_hz} Hz must lie in (0, {sample_rate / 2.0}) Hz")
    if q is not None and q <= 0:
        raise ConfigurationError(f"Q must be positive, got {q}")


def first_order_lpf_coefficients(sample_rate, cutoff_hz):
    _check(sample_rate, cutoff_hz)
    theta = 2.0 * np.pi * cutoff_hz / sample_rate
    gamma = np.cos(theta) / (1.0 + np.sin(theta))
    a0 = (1.0 - gamma) / 2.0
    return BiquadCoefficients(a0, a0, 0.0, -gamma, 0.0)


def first_order_hpf_coefficients(sample_rate, cutoff_hz):
    _check(sample_rate, cutoff_hz)
    theta = 2.0 * np.pi * cutoff_hz / sample_rate
    gamma = np.cos(theta) / (1.0 + np.sin(theta))
    a0 = (1.0 + gamma) / 2.0
    return BiquadCoefficients(a0, -a0, 0.0, -gamma, 0.0)


def second_order_lpf_coefficients(sample_rate, cutoff_hz, q):
    """Resonant low-pass; Q=0.707 is Butterworth, gain at cutoff equals Q."""
    _check(sample_rate, cutoff_hz, q)
    theta = 2.0 * np.pi * cutoff_hz / sample_rate
    d = 1.0 / q
    half_d_sin = (d / 2.0) * np.sin(theta)
    beta = 0.5 * (1.0 - half_d_sin) / (1.0 + half_d_sin)
    gamma = (0.5 + beta) * np.cos(theta)
    a0 = (0.5 + beta - gamma) / 2.0
    return BiquadCoefficients(a0, 2.0 * a0, a0, -2.0 * gamma, 2.0 * beta)


def second_order_hpf_coefficients(sample_rate, cutoff_hz, q):
    _check(sample_rate, cutoff_hz, q)
    theta = 2.0 * np.pi * cutoff_hz / sample_rate
    d = 1.0 / q
    half_d_sin = (d / 2.0) * np.sin(theta)
    beta = 0.5 * (1.0 - half_d_sin) / (1.0 + half_d_sin)
    gamma = (0.5 + beta) * np.cos(theta)
    a0 = (0.5 + beta + gamma) / 2.0
    return BiquadCoefficients(a0, -2.0 * a0, a0, -2.0 * gamma, 2.0 * beta)


def bpf_coefficients(sample_rate, cutoff_hz, q):
    """Band-pass, unity gain at the center frequency."""
    _check(sample_rate, cutoff_hz, q)
    k = np.tan(np.pi * cutoff_hz / sample_rate)
    delta = k * k * q + k + q
    return BiquadCoefficients(
        k / delta,
        0.0,
        -k / delta,
        2.0 * q * (k * k - 1.0) / delta,
        (k * k * q - k + q) / delta,
    )


def notch_coefficients(sample_rate, cutoff_hz, q):
    """Band-stop; zero gain at the center frequency."""
    _check(sample_rate, cutoff_hz, q)
    k = np.tan(np.pi * cutoff_hz / sample_rate)
    delta = k * k * q + k + q
    a0 = q * (k * k + 1.0) / delta
    a1 = 2.0 * q * (k * k - 1.0) / delta
    return BiquadCoefficients(a0, a1, a0, a1, (k * k * q - k + q) / delta)


def first_order_allpass_coefficients(sample_rate, cutoff_hz):
    """90 degrees of phase shift at the cutoff. Used by the phaser sweep."""
    _check(sample_rate, cutoff_hz)
    t = np.tan(np.pi * cutoff_hz / sample_rate)
    alpha = (t - 1.0) / (t + 1.0)
    return BiquadCoefficients(alpha, 1.0, 0.0, alpha, 0.0)


def second_order_allpass_coefficients(sample_rate, cutoff_hz, q):
    _check(sample_rate, cutoff_hz, q)
    bandwidth = cutoff_hz / q
    t = np.tan(np.pi * bandwidth / sample_rate)
    alpha = (t - 1.0) / (t + 1.0)
    beta = -np.cos(2.0 * np.pi * cutoff_hz / sample_rate)
    return BiquadCoefficients(
        -alpha,
        beta * (1.0 - alpha),
        1.0,
        beta * (1.0 - alpha),
        -alpha,
    )


def low_shelf_coefficients(sample_rate, cutoff_hz, gain_db):
    """Boost/cut below cutoff. gain_db=0 gives c0=0, i.e. a straight wire."""
    _check(sample_rate, cutoff_hz)
    theta = 2.0 * np.pi * cutoff_hz / sample_rate
    mu = 10.0 ** (gain_db / 20.0)
    beta = 4.0 / (1.0 + mu)
    delta = beta * np.tan(theta / 2.0)
    gamma = (1.0 - delta) / (1.0 + delta)
    a0 = (1.0 - gamma) / 2.0
    return BiquadCoefficients(a0, a0, 0.0, -gamma, 0.0, mu - 1.0, 1.0)


def high_shelf_coefficients(sample_rate, cutoff_hz, gain_db):
    """Boost/cut above cutoff."""
    _check(sample_rate, cutoff_hz)
    theta = 2.0 * np.pi * cutoff_hz / sample_rate
    mu = 10.0 ** (gain_db / 20.0)
    beta = (1.0 + mu) / 4.0
    delta = beta * np.tan(theta / 2.0)
    gamma = (1.0 - delta) / (1.0 + delta)
    a0 = (1.0 + gamma) / 2.0
    return BiquadCoefficients(a0, -a0, 0.0, -gamma, 0.0, mu - 1.0, 1.0)


def peaking_coefficients(sample_rate, cutoff_hz, q, gain_db):
    """Parametric EQ band.

    Boosts and cuts normalize by different denominators so that a cut is
    the exact inverse of the boost of the same magnitude.
    """
    _check(sample_rate, cutoff_hz, q)
    k = np.tan(np.pi * cutoff_hz / sample_rate)
    v0 = 10.0 ** (gain_db / 20.0)
    d0 = 1.0 + k / q + k * k
    e0 = 1.0 + k / (v0 * q) + k * k
    alpha = 1.0 + v0 * k / q + k * k
    beta = 2.0 * (k * k - 1.0)
    gamma = 1.0 - v0 * k / q + k * k
    delta = 1.0 - k / q + k * k
    eta = 1.0 - k / (v0 * q) + k * k
    if gain_db >= 0.0:
        return BiquadCoefficients(alpha / d0, beta / d0, gamma / d0, beta / d0, delta / d0)
    return BiquadCoefficients(d0 / e0, beta / e0, delta / e0, beta / e0, eta / e0)


def butterworth_lpf_coefficients(sample_rate, cutoff_hz):
    """Second-order Butterworth low-pass with tan pre-warping."""
    _check(sample_rate, cutoff_hz)
    f = np.tan(np.pi * cutoff_hz / sample_rate)
    a0r = 1.0 / (1.0 + SQRT_2 * f + f * f)
    b0 = (2.0 * f * f - 2.0) * a0r
    b1 = (1.0 - SQRT_2 * f + f * f) * a0r
    a0 = f * f * a0r
    return BiquadCoefficients(a0, 2.0 * a0, a0, b0, b1)
