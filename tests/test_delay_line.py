"""Test the delay line primitive.

Run: uv run pytest tests/test_delay_line.py
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from primitives.delay_line import CAPACITY_MARGIN, DelayLine, required_capacity
from shared.validation import ConfigurationError


def filled(values, capacity=None):
    dl = DelayLine(capacity or len(values))
    for v in values:
        dl.push(v)
    return dl


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------
def test_zero_filled_at_construction():
    dl = DelayLine(16)
    assert all(dl.read(n) == 0.0 for n in range(16))
    assert all(dl.tap(d) == 0.0 for d in range(1, 17))


@pytest.mark.parametrize("capacity", [0, -3])
def test_rejects_empty_capacity(capacity):
    with pytest.raises(ConfigurationError):
        DelayLine(capacity)


def test_required_capacity_adds_margin():
    assert required_capacity(40) == 40 + CAPACITY_MARGIN
    assert required_capacity(10, 300, 25) == 300 + CAPACITY_MARGIN
    assert required_capacity(5, margin=0) == 5


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def test_read_zero_is_newest():
    dl = filled([1.0, 2.0, 3.0], capacity=8)
    assert dl.read(0) == 3.0
    assert dl.read(1) == 2.0
    assert dl.read(2) == 1.0
    assert dl.read(3) == 0.0


def test_tap_is_delay_relative_to_next_write():
    dl = filled([1.0, 2.0, 3.0], capacity=8)
    # about to write x[3]; x[3-1] = 3.0, x[3-3] = 1.0
    assert dl.tap(1) == 3.0
    assert dl.tap(3) == 1.0
    for d in range(1, 9):
        assert dl.tap(d) == dl.read(d - 1)


def test_oldest_sample_evicted():
    dl = filled([1.0, 2.0, 3.0, 4.0, 5.0], capacity=4)
    assert [dl.read(n) for n in range(4)] == [5.0, 4.0, 3.0, 2.0]
    assert dl.tap(4) == 2.0


def test_single_echo_at_exact_delay():
    delay = 200
    dl = DelayLine(required_capacity(delay))
    impulse = np.zeros(1000)
    impulse[0] = 1.0
    out = np.zeros_like(impulse)
    for i, x in enumerate(impulse):
        out[i] = dl.tap(delay)
        dl.push(x)
    assert out[delay] == 1.0
    assert np.count_nonzero(out) == 1


@pytest.mark.parametrize("n", [-1, 8, 100])
def test_read_out_of_range(n):
    dl = DelayLine(8)
    with pytest.raises(IndexError):
        dl.read(n)


@pytest.mark.parametrize("d", [0, 9])
def test_tap_out_of_range(d):
    dl = DelayLine(8)
    with pytest.raises(IndexError):
        dl.tap(d)


def test_reset_clears_and_rewinds():
    dl = filled([1.0, 2.0, 3.0], capacity=4)
    dl.reset()
    assert dl.write_idx == 0
    assert not np.any(dl.buffer)
