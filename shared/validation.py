"""Construction-time validation results for effect nodes.

Out-of-range parameters are clamped rather than rejected. Each clamp is
recorded as a Correction so callers can inspect what changed; invariant
violations (impossible buffer sizes, zero-length delays) raise
ConfigurationError instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum


class ConfigurationError(ValueError):
    """A node cannot be built from the given configuration."""


class Status(Enum):
    OK = "ok"
    CORRECTED = "corrected"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Correction:
    name: str
    requested: object
    applied: object
    reason: str

    def __str__(self):
        return f"{self.name}: {self.requested!r} -> {self.applied!r} ({self.reason})"


@dataclass
class ValidationResult:
    corrections: list[Correction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def status(self) -> Status:
        if self.errors:
            return Status.REJECTED
        if self.corrections:
            return Status.CORRECTED
        return Status.OK

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    def correct(self, name, requested, applied, reason, logger=None):
        """Record a correction and log it at WARNING."""
        c = Correction(name, requested, applied, reason)
        self.corrections.append(c)
        (logger or _log).warning("%s", c)
        return applied

    def reject(self, message: str):
        self.errors.append(message)
        raise ConfigurationError(message)

    def merge(self, other: ValidationResult, prefix: str = ""):
        """Fold a child's result into this one (composite nodes)."""
        for c in other.corrections:
            name = f"{prefix}{c.name}" if prefix else c.name
            self.corrections.append(Correction(name, c.requested, c.applied, c.reason))
        self.errors.extend(other.errors)
        return self

    def __bool__(self):
        return self.status is not Status.REJECTED


_log = logging.getLogger(__name__)


def clamp(result: ValidationResult, name: str, value, lo=None, hi=None, logger=None):
    """Clamp `value` into [lo, hi], recording a correction when it moves.

    Either bound may be None (unbounded on that side).
    """
    applied = value
    if lo is not None and value < lo:
        applied = lo
    elif hi is not None and value > hi:
        applied = hi
    if applied != value:
        if lo is not None and hi is not None:
            reason = f"outside [{lo}, {hi}]"
        elif lo is not None:
            reason = f"below {lo}"
        else:
            reason = f"above {hi}"
        result.correct(name, value, applied, reason, logger)
    return applied


def require_delay(result: ValidationResult, name: str, delay: int, capacity=None):
    """Delay lengths are a caller contract: non-positive or oversize is fatal."""
    if delay < 1:
        result.reject(f"{name} must be at least 1 sample, got {delay}")
    if capacity is not None and delay > capacity:
        result.reject(f"{name} of {delay} samples exceeds buffer capacity {capacity}")
    return int(delay)
