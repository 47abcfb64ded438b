"""Numba whole-buffer kernels: the same recurrences as the per-sample classes.

Each function processes a full audio buffer from a zeroed state and
returns the output. Results match feeding the buffer sample by sample
through the corresponding class in primitives.filters / effects.delay.
"""

import numpy as np
from numba import njit


@njit(cache=True)
def feedback_delay(audio, delay_samples, feedback):
    """y[n] = x[n-d] + feedback * y[n-d]"""
    n = len(audio)
    xbuf = np.zeros(delay_samples)
    ybuf = np.zeros(delay_samples)
    idx = 0
    out = np.zeros(n)
    for i in range(n):
        y = xbuf[idx] + feedback * ybuf[idx]
        xbuf[idx] = audio[i]
        ybuf[idx] = y
        idx = (idx + 1) % delay_samples
        out[i] = y
    return out


@njit(cache=True)
def comb_filter(audio, delay_samples, feedback, sign=1.0):
    """Feedback comb: y[n] = x[n] + sign * feedback * y[n-d]"""
    n = len(audio)
    buf = np.zeros(delay_samples)
    idx = 0
    g = sign * feedback
    out = np.zeros(n)
    for i in range(n):
        y = audio[i] + g * buf[idx]
        buf[idx] = y
        idx = (idx + 1) % delay_samples
        out[i] = y
    return out


@njit(cache=True)
def lpf_comb_filter(audio, delay_samples, feedback, damping):
    """Comb with one-pole damping in the loop.

    y[n] = x[n] + g*y[n-d] - damp*x[n-1] + damp*y[n-1]
    """
    n = len(audio)
    buf = np.zeros(delay_samples)
    idx = 0
    x1 = 0.0
    y1 = 0.0
    out = np.zeros(n)
    for i in range(n):
        x = audio[i]
        y = x + feedback * buf[idx] - damping * x1 + damping * y1
        buf[idx] = y
        idx = (idx + 1) % delay_samples
        x1 = x
        y1 = y
        out[i] = y
    return out


@njit(cache=True)
def allpass(audio, delay_samples, gain):
    """Schroeder allpass: changes phase without changing amplitude spectrum."""
    n = len(audio)
    xbuf = np.zeros(delay_samples)
    ybuf = np.zeros(delay_samples)
    idx = 0
    out = np.zeros(n)
    for i in range(n):
        y = -gain * audio[i] + xbuf[idx] + gain * ybuf[idx]
        xbuf[idx] = audio[i]
        ybuf[idx] = y
        idx = (idx + 1) % delay_samples
        out[i] = y
    return out


@njit(cache=True)
def allpass_chain(audio, delay_times, gain):
    """Chain of allpass filters, builds diffusion."""
    x = audio.copy()
    for s in range(len(delay_times)):
        x = allpass(x, delay_times[s], gain)
    return x


@njit(cache=True)
def biquad(audio, a0, a1, a2, b0, b1, c0=1.0, d0=0.0):
    """Biquad section with wet/dry post-mix (see primitives.coefficients)."""
    n = len(audio)
    x1 = x2 = y1 = y2 = 0.0
    out = np.zeros(n)
    for i in range(n):
        x = audio[i]
        y = a0 * x + a1 * x1 + a2 * x2 - b0 * y1 - b1 * y2
        x2 = x1
        x1 = x
        y2 = y1
        y1 = y
        out[i] = c0 * y + d0 * x
    return out


def biquad_filter(audio, coeffs):
    """Run a BiquadCoefficients over a buffer."""
    return biquad(np.asarray(audio, dtype=np.float64), *coeffs)
