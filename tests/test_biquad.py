"""Test biquad coefficient synthesis and the biquad section.

Run: uv run pytest tests/test_biquad.py

Checks each design against its defining property (gain at cutoff, zero at
the notch, unit magnitude for allpasses) rather than against itself.
"""

import os
import sys

import numpy as np
import pytest
from scipy.signal import butter, lfilter

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from primitives import coefficients as co
from primitives.filters import BiquadFilter, lowpass_filter
from shared.validation import ConfigurationError

SR = 44100
FREQS = np.linspace(20.0, 20000.0, 200)


def make_noise(n=4096, seed=0):
    return np.random.default_rng(seed).standard_normal(n) * 0.3


def run(filt, signal):
    return np.array([filt.process(x) for x in signal])


def magnitude(coeffs, freqs, sr=SR):
    return np.abs(coeffs.frequency_response(sr, freqs))


# ---------------------------------------------------------------------------
# Regression pin
# ---------------------------------------------------------------------------
def test_second_order_lpf_golden_values():
    coeffs = co.second_order_lpf_coefficients(44100, 550, 15.707)
    expected = (
        0.00153054045587,
        0.00306108091173,
        0.00153054045587,
        -1.98890636295658,
        0.99502852478038,
        1.0,
        0.0,
    )
    assert tuple(coeffs) == pytest.approx(expected, rel=1e-6)


def test_second_order_lpf_matches_cookbook_form():
    # Same filter written the audio-EQ-cookbook way
    w0 = 2.0 * np.pi * 550 / SR
    alpha = np.sin(w0) / (2.0 * 15.707)
    a0 = 1.0 + alpha
    coeffs = co.second_order_lpf_coefficients(SR, 550, 15.707)
    assert coeffs.a0 == pytest.approx((1.0 - np.cos(w0)) / 2.0 / a0, rel=1e-12)
    assert coeffs.b0 == pytest.approx(-2.0 * np.cos(w0) / a0, rel=1e-12)
    assert coeffs.b1 == pytest.approx((1.0 - alpha) / a0, rel=1e-12)


# ---------------------------------------------------------------------------
# Defining properties of each design
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("q", [0.5, 0.707, 4.0, 15.707])
def test_second_order_lpf_gain_at_cutoff_equals_q(q):
    coeffs = co.second_order_lpf_coefficients(SR, 1000.0, q)
    assert magnitude(coeffs, [1000.0])[0] == pytest.approx(q, rel=1e-6)
    assert magnitude(coeffs, [0.0])[0] == pytest.approx(1.0, rel=1e-9)


def test_second_order_hpf_blocks_dc_passes_nyquist():
    coeffs = co.second_order_hpf_coefficients(SR, 1000.0, 0.707)
    dc, nyq = magnitude(coeffs, [0.0, SR / 2.0])
    assert dc == pytest.approx(0.0, abs=1e-12)
    assert nyq == pytest.approx(1.0, rel=1e-9)


def test_first_order_pair_is_complementary_at_extremes():
    lpf = co.first_order_lpf_coefficients(SR, 2000.0)
    hpf = co.first_order_hpf_coefficients(SR, 2000.0)
    assert magnitude(lpf, [0.0])[0] == pytest.approx(1.0)
    assert magnitude(lpf, [SR / 2.0])[0] == pytest.approx(0.0, abs=1e-12)
    assert magnitude(hpf, [0.0])[0] == pytest.approx(0.0, abs=1e-12)
    assert magnitude(hpf, [SR / 2.0])[0] == pytest.approx(1.0)


def test_first_order_lpf_half_power_at_cutoff():
    coeffs = co.first_order_lpf_coefficients(SR, 2000.0)
    assert magnitude(coeffs, [2000.0])[0] == pytest.approx(np.sqrt(0.5), rel=1e-6)


def test_bandpass_unity_at_center():
    coeffs = co.bpf_coefficients(SR, 1500.0, 2.0)
    assert magnitude(coeffs, [1500.0])[0] == pytest.approx(1.0, rel=1e-9)
    assert magnitude(coeffs, [0.0])[0] == pytest.approx(0.0, abs=1e-12)


def test_notch_zero_at_center():
    coeffs = co.notch_coefficients(SR, 600.0, 4.0)
    assert magnitude(coeffs, [600.0])[0] == pytest.approx(0.0, abs=1e-9)
    assert magnitude(coeffs, [0.0])[0] == pytest.approx(1.0, rel=1e-9)


@pytest.mark.parametrize("coeffs", [
    co.first_order_allpass_coefficients(SR, 300.0),
    co.first_order_allpass_coefficients(SR, 12000.0),
    co.second_order_allpass_coefficients(SR, 1000.0, 0.707),
    co.second_order_allpass_coefficients(SR, 5000.0, 3.0),
])
def test_allpass_designs_have_unit_magnitude(coeffs):
    np.testing.assert_allclose(magnitude(coeffs, FREQS), 1.0, rtol=1e-9)


def test_first_order_allpass_quarter_turn_at_cutoff():
    coeffs = co.first_order_allpass_coefficients(SR, 1000.0)
    phase = np.angle(coeffs.frequency_response(SR, [1000.0])[0])
    assert phase == pytest.approx(-np.pi / 2.0, abs=1e-9)


@pytest.mark.parametrize("gain_db", [-12.0, 6.0, 12.0])
def test_low_shelf_levels(gain_db):
    coeffs = co.low_shelf_coefficients(SR, 500.0, gain_db)
    assert coeffs.c0 == pytest.approx(10.0 ** (gain_db / 20.0) - 1.0)
    assert coeffs.d0 == 1.0
    dc, nyq = magnitude(coeffs, [0.0, SR / 2.0])
    assert dc == pytest.approx(10.0 ** (gain_db / 20.0), rel=1e-9)
    assert nyq == pytest.approx(1.0, rel=1e-9)


@pytest.mark.parametrize("gain_db", [-12.0, 6.0, 12.0])
def test_high_shelf_levels(gain_db):
    coeffs = co.high_shelf_coefficients(SR, 6000.0, gain_db)
    dc, nyq = magnitude(coeffs, [0.0, SR / 2.0])
    assert dc == pytest.approx(1.0, rel=1e-9)
    assert nyq == pytest.approx(10.0 ** (gain_db / 20.0), rel=1e-9)


def test_flat_shelves_are_a_straight_wire():
    noise = make_noise()
    for design in (co.low_shelf_coefficients, co.high_shelf_coefficients):
        coeffs = design(SR, 800.0, 0.0)
        assert coeffs.c0 == 0.0
        np.testing.assert_array_equal(run(BiquadFilter(coeffs), noise), noise)


@pytest.mark.parametrize("gain_db", [-9.0, 9.0])
def test_peaking_hits_gain_at_center(gain_db):
    coeffs = co.peaking_coefficients(SR, 2000.0, 1.5, gain_db)
    assert magnitude(coeffs, [2000.0])[0] == pytest.approx(10.0 ** (gain_db / 20.0), rel=1e-9)


def test_peaking_cut_is_inverse_of_boost():
    boost = co.peaking_coefficients(SR, 2000.0, 1.5, 9.0)
    cut = co.peaking_coefficients(SR, 2000.0, 1.5, -9.0)
    product = boost.frequency_response(SR, FREQS) * cut.frequency_response(SR, FREQS)
    np.testing.assert_allclose(np.abs(product), 1.0, rtol=1e-9)


def test_peaking_cut_uses_its_own_denominator():
    # Reusing the boost normalization for a cut would give a different section
    k = np.tan(np.pi * 2000.0 / SR)
    v0 = 10.0 ** (-9.0 / 20.0)
    boost_style_a0 = (1.0 + v0 * k / 1.5 + k * k) / (1.0 + k / 1.5 + k * k)
    cut = co.peaking_coefficients(SR, 2000.0, 1.5, -9.0)
    assert cut.a0 != pytest.approx(boost_style_a0, rel=1e-6)
    assert cut.a0 == pytest.approx((1.0 + k / 1.5 + k * k) / (1.0 + k / (v0 * 1.5) + k * k))


def test_peaking_flat_at_zero_gain():
    coeffs = co.peaking_coefficients(SR, 2000.0, 1.5, 0.0)
    np.testing.assert_allclose(magnitude(coeffs, FREQS), 1.0, rtol=1e-9)


def test_butterworth_matches_scipy():
    b, a = butter(2, 550.0 / (SR / 2.0))
    coeffs = co.butterworth_lpf_coefficients(SR, 550.0)
    np.testing.assert_allclose([coeffs.a0, coeffs.a1, coeffs.a2], b, rtol=1e-8)
    np.testing.assert_allclose([1.0, coeffs.b0, coeffs.b1], a, rtol=1e-8)


# ---------------------------------------------------------------------------
# Numerical edges are rejected up front
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("call", [
    lambda: co.second_order_lpf_coefficients(SR, 1000.0, 0.0),
    lambda: co.bpf_coefficients(SR, 1000.0, -1.0),
    lambda: co.peaking_coefficients(SR, 1000.0, 0.0, 3.0),
    lambda: co.first_order_lpf_coefficients(SR, 0.0),
    lambda: co.first_order_allpass_coefficients(SR, SR / 2.0),
    lambda: co.high_shelf_coefficients(SR, 30000.0, 3.0),
    lambda: co.notch_coefficients(0, 1000.0, 1.0),
])
def test_degenerate_designs_raise(call):
    with pytest.raises(ConfigurationError):
        call()


# ---------------------------------------------------------------------------
# The section itself
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("coeffs", [
    co.second_order_lpf_coefficients(SR, 1000.0, 0.707),
    co.notch_coefficients(SR, 600.0, 2.0),
    co.low_shelf_coefficients(SR, 500.0, 6.0),
    co.peaking_coefficients(SR, 3000.0, 2.0, -6.0),
])
def test_process_matches_lfilter(coeffs):
    noise = make_noise()
    expected = coeffs.c0 * lfilter([coeffs.a0, coeffs.a1, coeffs.a2],
                                   [1.0, coeffs.b0, coeffs.b1], noise) + coeffs.d0 * noise
    np.testing.assert_allclose(run(BiquadFilter(coeffs), noise), expected,
                               rtol=1e-9, atol=1e-12)


def test_set_coefficients_keeps_history():
    filt = BiquadFilter.lowpass(1000.0, 0.707, SR)
    run(filt, make_noise(64))
    state = (filt.x1, filt.x2, filt.y1, filt.y2)
    filt.set_coefficients(co.second_order_hpf_coefficients(SR, 200.0, 0.707))
    assert (filt.x1, filt.x2, filt.y1, filt.y2) == state


def test_reset_restores_initial_output():
    filt = BiquadFilter.bandpass(1000.0, 2.0, SR)
    noise = make_noise(512)
    first = run(filt, noise)
    filt.reset()
    np.testing.assert_array_equal(run(filt, noise), first)


def test_silence_in_silence_out():
    for filt in (BiquadFilter.lowpass(1000.0, 0.707, SR),
                 BiquadFilter.highpass(1000.0, 0.707, SR),
                 BiquadFilter.low_shelf(500.0, 12.0, SR),
                 BiquadFilter.high_shelf(2000.0, -12.0, SR),
                 lowpass_filter(SR, 550.0)):
        assert not np.any(run(filt, np.zeros(256)))
