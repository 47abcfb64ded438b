"""Circular buffer delay line: the fundamental DSP building block."""

import numpy as np

from shared.validation import ConfigurationError

# Extra slots allocated past the longest lookback a node asks for.
CAPACITY_MARGIN = 2


def required_capacity(*lookbacks, margin=CAPACITY_MARGIN) -> int:
    """Buffer length needed to serve the longest of `lookbacks`."""
    return int(max(lookbacks)) + margin


class DelayLine:
    """Fixed-capacity circular buffer with integer delay reads.

    The buffer is zero-filled at construction, so every read is defined
    from the first sample on.

    Usage:
        dl = DelayLine(capacity=44100)
        y = dl.tap(delay)                      # value written `delay` samples ago
        dl.push(sample)
        out = dl.read(0)                       # most recently pushed
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ConfigurationError(f"DelayLine capacity must be >= 1, got {capacity}")
        self.buffer = np.zeros(int(capacity), dtype=np.float64)
        self.length = int(capacity)
        self.write_idx = 0

    def push(self, sample: float):
        """Write a sample as the newest entry, evicting the oldest."""
        self.buffer[self.write_idx] = sample
        self.write_idx = (self.write_idx + 1) % self.length

    def read(self, n: int) -> float:
        """Read the sample pushed `n` pushes before the newest one.

        n=0 returns the most recently pushed sample.
        n=1 returns the sample before that, etc.
        """
        if not 0 <= n < self.length:
            raise IndexError(f"read({n}) outside [0, {self.length})")
        return self.buffer[(self.write_idx - 1 - n) % self.length]

    def tap(self, delay: int) -> float:
        """Read the sample `delay` steps behind the write head.

        Called before push(), this is x[n - delay] for the sample about to
        be written. tap(d) == read(d - 1).
        """
        if not 1 <= delay <= self.length:
            raise IndexError(f"tap({delay}) outside [1, {self.length}]")
        return self.buffer[(self.write_idx - delay) % self.length]

    def reset(self):
        """Clear the buffer."""
        self.buffer[:] = 0.0
        self.write_idx = 0
