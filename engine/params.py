"""Parameter schemas and defaults for every effect.

This is the shared contract between scripts, chain presets and tests.
All parameter sources produce a dict in this format; engine.chain
validates it through the schema and hands it to the factory.
"""

from effects.chorus import Chorus
from effects.delay import FeedbackDelay
from effects.phaser import Phaser
from effects.reverb import Reverb, ReverbType
from effects.tube import class_a_tube_pre
from primitives import coefficients
from primitives.filters import AllpassFilter, BiquadFilter, CombFilter, CombType
from primitives.waveshaper import AsymmetricWaveshaper, ShapeType, Waveshaper
from shared.params import ParamDef, ParamSchema, ParamType

SR = 44100

_SHAPES = [s.value for s in ShapeType]

# Schema ranges are the outer envelope; nodes apply their own tighter
# clamps (and rejections) on top.

DELAY = ParamSchema([
    ParamDef("delay_ms", ParamType.FLOAT, 250.0, "Time", "Delay (ms)", range=(0.0, 3000.0)),
    ParamDef("feedback", ParamType.FLOAT, 0.4, "Time", "Feedback", range=(0.0, 1.0)),
])

COMB = ParamSchema([
    ParamDef("delay_samples", ParamType.INT, 40, "Comb", "Delay (samples)",
             range=(0, 10 * SR)),
    ParamDef("feedback", ParamType.FLOAT, 0.6, "Comb", "Feedback", range=(0.0, 1.0)),
    ParamDef("polarity", ParamType.CHOICE, "positive", "Comb", "Polarity",
             choices=["positive", "negative"]),
    ParamDef("damping", ParamType.FLOAT, None, "Comb", "Damping", range=(0.0, 0.9999)),
])

ALLPASS = ParamSchema([
    ParamDef("delay_samples", ParamType.INT, 220, "Allpass", "Delay (samples)",
             range=(0, 10 * SR)),
    ParamDef("gain", ParamType.FLOAT, 0.5, "Allpass", "Gain", range=(-1.0, 1.0)),
])

BIQUAD_TYPES = {
    "lpf1": coefficients.first_order_lpf_coefficients,
    "lpf2": coefficients.second_order_lpf_coefficients,
    "hpf1": coefficients.first_order_hpf_coefficients,
    "hpf2": coefficients.second_order_hpf_coefficients,
    "bpf": coefficients.bpf_coefficients,
    "notch": coefficients.notch_coefficients,
    "apf1": coefficients.first_order_allpass_coefficients,
    "apf2": coefficients.second_order_allpass_coefficients,
    "low_shelf": coefficients.low_shelf_coefficients,
    "high_shelf": coefficients.high_shelf_coefficients,
    "peaking": coefficients.peaking_coefficients,
    "butterworth_lpf": coefficients.butterworth_lpf_coefficients,
}

BIQUAD = ParamSchema([
    ParamDef("filter_type", ParamType.CHOICE, "lpf2", "Filter", "Type",
             choices=list(BIQUAD_TYPES)),
    ParamDef("cutoff_hz", ParamType.FLOAT, 1000.0, "Filter", "Cutoff (Hz)",
             range=(1.0, 0.499 * SR)),
    ParamDef("q", ParamType.FLOAT, 0.707, "Filter", "Q", range=(0.01, 100.0)),
    ParamDef("gain_db", ParamType.FLOAT, 0.0, "Filter", "Gain (dB)", range=(-48.0, 48.0)),
])

WAVESHAPER = ParamSchema([
    ParamDef("shape", ParamType.CHOICE, "tanh", "Shape", "Curve", choices=_SHAPES),
    ParamDef("down_shape", ParamType.CHOICE, None, "Shape", "Negative curve",
             choices=_SHAPES),
    ParamDef("pre_gain", ParamType.FLOAT, 1.0, "Gain", "Pre gain", range=(0.0, 100.0)),
    ParamDef("post_gain", ParamType.FLOAT, 1.0, "Gain", "Post gain", range=(0.0, 100.0)),
    ParamDef("saturation", ParamType.FLOAT, 1.0, "Shape", "Saturation", range=(0.0, 100.0)),
])

CHORUS = ParamSchema([
    ParamDef("depth_ms", ParamType.FLOAT, 2.0, "Modulation", "Depth (ms)", range=(0.0, 50.0)),
    ParamDef("rate_hz", ParamType.FLOAT, 0.2, "Modulation", "Rate (Hz)", range=(0.0, 20.0)),
    ParamDef("delay_ms", ParamType.FLOAT, 5.0, "Time", "Delay (ms)", range=(0.0, 100.0)),
    ParamDef("mix", ParamType.FLOAT, 0.7, "Output", "Mix", range=(0.0, 1.0)),
    ParamDef("feedback", ParamType.FLOAT, 0.0, "Time", "Feedback", range=(0.0, 0.9999)),
    ParamDef("seed", ParamType.SEED, None, "Random", "Seed"),
])

PHASER = ParamSchema([
    ParamDef("feedback", ParamType.FLOAT, 0.5, "Sweep", "Feedback", range=(0.0, 1.0)),
    ParamDef("rate_hz", ParamType.FLOAT, 0.5, "Sweep", "Rate (Hz)", range=(0.0, 50.0)),
    ParamDef("depth", ParamType.FLOAT, 1.0, "Sweep", "Depth", range=(0.0, 1.0)),
    ParamDef("offset", ParamType.FLOAT, 0.0, "Sweep", "Offset", range=(-1.0, 1.0)),
    ParamDef("intensity", ParamType.FLOAT, 1.0, "Output", "Intensity", range=(0.0, 1.0)),
    ParamDef("stages", ParamType.INT, 3, "Sweep", "Notch pairs", range=(1, 3)),
])

REVERB = ParamSchema([
    ParamDef("reverb_type", ParamType.CHOICE, "comb", "Topology", "Type",
             choices=[t.value for t in ReverbType]),
    ParamDef("decay_seconds", ParamType.FLOAT, 1.5, "Tail", "Decay (s)", range=(0.0, 60.0)),
    ParamDef("damp", ParamType.FLOAT, 0.0, "Tail", "Damping", range=(0.0, 0.9999)),
    ParamDef("seed", ParamType.SEED, None, "Random", "Seed"),
])

TUBE = ParamSchema([
    ParamDef("gain", ParamType.FLOAT, 1.0, "Drive", "Gain", range=(0.0, 100.0)),
    ParamDef("saturation", ParamType.FLOAT, 1.0, "Drive", "Saturation", range=(0.0, 100.0)),
    ParamDef("low_shelf_gain", ParamType.FLOAT, 0.0, "Tone", "Low shelf (dB)",
             range=(-24.0, 24.0)),
    ParamDef("high_shelf_gain", ParamType.FLOAT, 0.0, "Tone", "High shelf (dB)",
             range=(-24.0, 24.0)),
])


def _delay(p, sr, rng):
    return FeedbackDelay(int(p["delay_ms"] / 1000.0 * sr), p["feedback"])


def _comb(p, sr, rng):
    return CombFilter(p["delay_samples"], p["feedback"],
                      CombType[p["polarity"].upper()], damping=p["damping"])


def _allpass(p, sr, rng):
    return AllpassFilter(p["delay_samples"], p["gain"])


def _biquad(p, sr, rng):
    design = BIQUAD_TYPES[p["filter_type"]]
    cutoff = p["cutoff_hz"]
    if p["filter_type"] == "peaking":
        coeffs = design(sr, cutoff, p["q"], p["gain_db"])
    elif p["filter_type"] in ("low_shelf", "high_shelf"):
        coeffs = design(sr, cutoff, p["gain_db"])
    elif p["filter_type"] in ("lpf2", "hpf2", "bpf", "notch", "apf2"):
        coeffs = design(sr, cutoff, p["q"])
    else:
        coeffs = design(sr, cutoff)
    return BiquadFilter(coeffs)


def _waveshaper(p, sr, rng):
    if p["down_shape"] is not None:
        return AsymmetricWaveshaper(p["shape"], p["down_shape"], p["pre_gain"],
                                    p["post_gain"], p["saturation"])
    return Waveshaper(p["shape"], p["pre_gain"], p["post_gain"], p["saturation"])


def _chorus(p, sr, rng):
    return Chorus(sr, p["depth_ms"], p["rate_hz"], p["delay_ms"], p["mix"],
                  p["feedback"], rng=rng)


def _phaser(p, sr, rng):
    return Phaser(sr, p["feedback"], p["rate_hz"], p["depth"], p["offset"],
                  p["intensity"], p["stages"])


def _reverb(p, sr, rng):
    return Reverb(sr, p["decay_seconds"], ReverbType(p["reverb_type"]), p["damp"], rng=rng)


def _tube(p, sr, rng):
    return class_a_tube_pre(sr, p["gain"], p["saturation"], p["low_shelf_gain"],
                            p["high_shelf_gain"])


# kind -> (schema, factory(params, sample_rate, rng))
EFFECT_SCHEMAS = {
    "delay": (DELAY, _delay),
    "comb": (COMB, _comb),
    "allpass": (ALLPASS, _allpass),
    "biquad": (BIQUAD, _biquad),
    "waveshaper": (WAVESHAPER, _waveshaper),
    "chorus": (CHORUS, _chorus),
    "phaser": (PHASER, _phaser),
    "reverb": (REVERB, _reverb),
    "tube": (TUBE, _tube),
}

# Ranges for exploration (min, max), continuous params only.
PARAM_RANGES = {kind: schema.param_ranges() for kind, (schema, _) in EFFECT_SCHEMAS.items()}


def default_params(kind: str) -> dict:
    """Defaults for one effect kind."""
    return EFFECT_SCHEMAS[kind][0].default_params()
