"""Static nonlinear transfer curves and the waveshaper nodes built on them.

All curves map 0 to 0. Four of them (SIG, TANH, ATAN, FEXP1) take a
`saturation` drive: larger values push the curve harder into its knee.
"""

import logging
import math
from enum import Enum

from shared.validation import ValidationResult, clamp

log = logging.getLogger(__name__)

E = math.e

# math.exp overflows just past this
_EXP_LIMIT = 700.0


def sgn(x):
    """Sign with sgn(0) = 1."""
    return 1.0 if x >= 0.0 else -1.0


def arry(x):
    return (3.0 * x / 2.0) * (1.0 - x * x / 3.0)


def sig(x, saturation):
    # 2 / (1 + e^-z) - 1 == tanh(z / 2), without the overflow
    return math.tanh(saturation * x / 2.0)


def sig2(x):
    # (e^x - 1) / (e^x + 1) == tanh(x / 2)
    return math.tanh(x / 2.0) * (E + 1.0) / (E - 1.0)


def tanh(x, saturation):
    # saturation -> 0 limit is the identity
    if saturation == 0.0:
        return x
    return math.tanh(saturation * x) / math.tanh(saturation)


def atan(x, saturation):
    if saturation == 0.0:
        return x
    return math.atan(saturation * x) / math.atan(saturation)


def fexp1(x, saturation):
    # denominator underflows to 0 long before saturation does
    if saturation < 1e-12:
        return x
    return sgn(x) * ((1.0 - math.exp(-abs(saturation * x)))
                     / (1.0 - math.exp(-saturation)))


def fexp2(x):
    return sgn(x) * ((1.0 - math.exp(min(abs(x), _EXP_LIMIT))) / (E - 1.0))


def exp(x):
    return (E - math.exp(min(1.0 - x, _EXP_LIMIT))) / (E - 1.0)


def atsr(x):
    u = 0.9 * x
    return 2.5 * math.atan(u) + 2.5 * math.sqrt(max(0.0, 1.0 - u * u)) - 2.5


def sqs(x):
    return x * x * sgn(x)


def cube(x):
    return x * x * x


def hclip(x):
    return 0.5 * sgn(x) if abs(x) > 0.5 else x


def hwr(x):
    return 0.5 * (x + abs(x))


def fwr(x):
    return abs(x)


def asqrt(x):
    return sgn(x) * math.sqrt(abs(x))


class ShapeType(Enum):
    ARRY = "arry"
    SIG = "sig"
    SIG2 = "sig2"
    TANH = "tanh"
    ATAN = "atan"
    FEXP1 = "fexp1"
    FEXP2 = "fexp2"
    EXP = "exp"
    ATSR = "atsr"
    SQS = "sqs"
    CUBE = "cube"
    HCLIP = "hclip"
    HWR = "hwr"
    FWR = "fwr"
    ASQRT = "asqrt"


_CURVES = {
    ShapeType.ARRY: arry,
    ShapeType.SIG2: sig2,
    ShapeType.FEXP2: fexp2,
    ShapeType.EXP: exp,
    ShapeType.ATSR: atsr,
    ShapeType.SQS: sqs,
    ShapeType.CUBE: cube,
    ShapeType.HCLIP: hclip,
    ShapeType.HWR: hwr,
    ShapeType.FWR: fwr,
    ShapeType.ASQRT: asqrt,
}

_DRIVEN_CURVES = {
    ShapeType.SIG: sig,
    ShapeType.TANH: tanh,
    ShapeType.ATAN: atan,
    ShapeType.FEXP1: fexp1,
}


def curve(shape: ShapeType, saturation: float = 1.0):
    """Bind a shape (and its drive, if it takes one) to a one-argument function."""
    shape = ShapeType(shape)
    if shape in _DRIVEN_CURVES:
        fn = _DRIVEN_CURVES[shape]
        return lambda x: fn(x, saturation)
    return _CURVES[shape]


def _gains(result, pre_gain, post_gain, saturation):
    return (clamp(result, "pre_gain", pre_gain, lo=0.0, logger=log),
            clamp(result, "post_gain", post_gain, lo=0.0, logger=log),
            clamp(result, "saturation", saturation, lo=0.0, logger=log))


class Waveshaper:
    """y = post_gain * shape(pre_gain * x). Memoryless."""

    def __init__(self, shape: ShapeType, pre_gain: float = 1.0,
                 post_gain: float = 1.0, saturation: float = 1.0):
        self.validation = ValidationResult()
        self.shape = ShapeType(shape)
        self.pre_gain, self.post_gain, self.saturation = _gains(
            self.validation, pre_gain, post_gain, saturation)
        self._curve = curve(self.shape, self.saturation)

    def process(self, x: float) -> float:
        return self._curve(x * self.pre_gain) * self.post_gain

    def reset(self):
        pass


class AsymmetricWaveshaper:
    """Separate curves for the positive and negative half-waves.

    The pre-gain is applied once before the sign test and the post-gain
    once after the curve, so both halves share one gain staging.
    """

    def __init__(self, up_shape: ShapeType, down_shape: ShapeType,
                 pre_gain: float = 1.0, post_gain: float = 1.0,
                 saturation: float = 1.0):
        self.validation = ValidationResult()
        self.up_shape = ShapeType(up_shape)
        self.down_shape = ShapeType(down_shape)
        self.pre_gain, self.post_gain, self.saturation = _gains(
            self.validation, pre_gain, post_gain, saturation)
        self._up = curve(self.up_shape, self.saturation)
        self._down = curve(self.down_shape, self.saturation)

    def process(self, x: float) -> float:
        x = x * self.pre_gain
        y = self._up(x) if x >= 0.0 else self._down(x)
        return y * self.post_gain

    def reset(self):
        pass
