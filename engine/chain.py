"""Serial composition of nodes and construction from parameter dicts.

Any object with process(x) -> float and reset() is a node.
"""

import logging

import numpy as np

from shared.validation import ConfigurationError, ValidationResult

log = logging.getLogger(__name__)


class Chain:
    """Nodes in series: the output of each is the input of the next.

    chain = Chain(a, b) >> c
    """

    def __init__(self, *nodes):
        self.nodes = list(nodes)
        self.validation = ValidationResult()
        for i, node in enumerate(self.nodes):
            self._absorb(i, node)

    def _absorb(self, i, node):
        child = getattr(node, "validation", None)
        if child is not None:
            self.validation.merge(child, f"[{i}].")

    def __rshift__(self, node):
        if isinstance(node, Chain):
            return Chain(*self.nodes, *node.nodes)
        return Chain(*self.nodes, node)

    def __len__(self):
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def process(self, x: float) -> float:
        for node in self.nodes:
            x = node.process(x)
        return x

    def reset(self):
        for node in self.nodes:
            node.reset()


class Scaled:
    """Fixed output gain around a node."""

    def __init__(self, node, gain: float):
        self.node = node
        self.gain = gain
        self.validation = getattr(node, "validation", ValidationResult())

    def process(self, x: float) -> float:
        return self.node.process(x) * self.gain

    def reset(self):
        self.node.reset()


def scaled(node, gain):
    return Scaled(node, gain)


def build_effect(kind: str, params=None, sample_rate=None, rng=None):
    """Validate `params` against the schema for `kind` and build the node.

    Missing keys take their defaults; out-of-range values are clamped and
    reported on the returned node's `validation`. A `seed` key, when
    present and no `rng` is given, seeds the node's random source.
    """
    from engine.params import EFFECT_SCHEMAS, SR
    sample_rate = SR if sample_rate is None else sample_rate
    if kind not in EFFECT_SCHEMAS:
        raise ConfigurationError(
            f"unknown effect {kind!r}; expected one of {sorted(EFFECT_SCHEMAS)}")
    schema, factory = EFFECT_SCHEMAS[kind]
    merged = schema.default_params()
    cleaned, result = schema.validate_and_clamp(params or {})
    merged.update(cleaned)
    if rng is None and merged.get("seed") is not None:
        rng = np.random.default_rng(merged["seed"])

    node = factory(merged, sample_rate, rng)
    node_result = getattr(node, "validation", None)
    if node_result is not None:
        result.merge(node_result)
    node.validation = result
    if result.corrections:
        log.info("%s built with %d correction(s)", kind, len(result.corrections))
    return node


def build_chain(specs, sample_rate=None, seed=None):
    """Build a Chain from [(kind, params), ...].

    One parent seed spawns an independent generator per node, so adding a
    node to the end leaves the earlier nodes' random draws unchanged.
    """
    children = np.random.SeedSequence(seed).spawn(len(specs))
    nodes = []
    for (kind, params), child in zip(specs, children):
        params = dict(params or {})
        rng = None if params.get("seed") is not None else np.random.default_rng(child)
        nodes.append(build_effect(kind, params, sample_rate, rng))
    return Chain(*nodes)
