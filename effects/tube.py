"""Tube preamp models built from waveshapers and biquads.

triode_class_a:
    4x tanh stage -> invert -> HPF 100 Hz -> low shelf 500 Hz -> * 0.7
class_a_tube_pre:
    4x triode (flat shelf) -> low shelf 500 Hz -> high shelf 6 kHz
"""

from engine.chain import Chain, scaled
from primitives.coefficients import (
    high_shelf_coefficients,
    low_shelf_coefficients,
    second_order_hpf_coefficients,
)
from primitives.filters import BiquadFilter
from primitives.waveshaper import ShapeType, Waveshaper

STAGE_POST_GAIN = 0.9


def triode_class_a(sample_rate, gain, saturation, low_shelf_gain):
    stages = [Waveshaper(ShapeType.TANH, gain, STAGE_POST_GAIN, saturation)
              for _ in range(4)]
    stages[-1] = scaled(stages[-1], -1.0)
    return Chain(
        *stages,
        BiquadFilter(second_order_hpf_coefficients(sample_rate, 100.0, 1.0)),
        scaled(BiquadFilter(low_shelf_coefficients(sample_rate, 500.0, low_shelf_gain)), 0.7),
    )


def class_a_tube_pre(sample_rate, gain, saturation, low_shelf_gain, high_shelf_gain):
    triodes = [triode_class_a(sample_rate, gain, saturation, 0.0) for _ in range(4)]
    return Chain(
        *triodes,
        BiquadFilter(low_shelf_coefficients(sample_rate, 500.0, low_shelf_gain)),
        BiquadFilter(high_shelf_coefficients(sample_rate, 6000.0, high_shelf_gain)),
    )
