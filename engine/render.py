"""Offline rendering: push a whole buffer through a node, one sample at a time."""

import logging
import time

import numpy as np

log = logging.getLogger(__name__)


def render(input_audio: np.ndarray, node, chunk_callback=None, chunk_size=4096,
           sample_rate=None) -> np.ndarray:
    """The single entry point for offline processing.

    Args:
        input_audio: mono float array (samples,)
        node: anything with process(x) -> float
        chunk_callback: if provided, called with each rendered chunk (np array).
            Return True to continue, False to stop early.
        chunk_size: samples per chunk when streaming (default 4096 ~ 93ms)
        sample_rate: only used for the timing log line

    Returns:
        mono float64 output, same length as the input (shorter if the
        callback stopped early)
    """
    from engine.params import SR
    sr = SR if sample_rate is None else sample_rate
    audio = np.asarray(input_audio, dtype=np.float64)
    if audio.ndim != 1:
        raise ValueError(f"render expects mono (samples,), got shape {audio.shape}")

    t0 = time.perf_counter()
    out = np.zeros_like(audio)
    process = node.process
    n = len(audio)
    end = n
    for start in range(0, n, chunk_size):
        stop = min(start + chunk_size, n)
        for i in range(start, stop):
            out[i] = process(audio[i])
        if chunk_callback is not None and not chunk_callback(out[start:stop]):
            end = stop
            break

    elapsed = time.perf_counter() - t0
    duration = end / sr
    rtf = duration / elapsed if elapsed > 0 else float('inf')
    log.info("render %.1fs audio in %.3fs (%.0fx RT)", duration, elapsed, rtf)
    return out[:end]
