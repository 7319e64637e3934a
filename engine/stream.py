"""Chunked resampling: feed input in pieces, get output as soon as it is final.

The resampler itself keeps no state; this wrapper holds the unconsumed
input tail and the Continuation between calls. Output is bit-identical to
resampling the concatenated input in one call.
"""

import logging
import math

import numpy as np

from engine.params import validate_params
from engine.resample import (
    design_resampling_filter, max_output_length, resample_into, sample_rate_ratio,
)
from primitives.polyphase import PolyphaseView
from primitives.rational import Rational

log = logging.getLogger(__name__)


class StreamResampler:
    """Stateful front end for resample_into.

    Usage:
        sr = StreamResampler(44100, 16000)
        for chunk in chunks:
            out = sr.process(chunk)
        tail = sr.flush()
    """

    def __init__(self, source_rate: int, target_rate: int,
                 polyphase: PolyphaseView = None, params: dict = None):
        if source_rate < 1 or target_rate < 1:
            raise ValueError(f"sample rates must be positive, got {source_rate} -> {target_rate}")
        self.sample_rates = sample_rate_ratio(source_rate, target_rate)
        if polyphase is None:
            p = validate_params(params or {})
            polyphase = design_resampling_filter(
                self.sample_rates, p["num_phases"], p["taps_per_phase"], p["window"])
        self.polyphase = polyphase
        self.reset()

    def reset(self):
        self._buffer = np.zeros(0)
        self._start_point = Rational(0)
        self.samples_in = 0
        self.samples_out = 0

    def _ready(self) -> int:
        """Output samples whose both candidate windows lie inside the buffer."""
        # last anchor + 1 must be < len(buffer): position * ratio < len - 1
        horizon = Rational(len(self._buffer) - 1) / self.sample_rates - self._start_point
        ready = max(math.ceil(horizon), 0)
        limit = max_output_length(len(self._buffer), self.polyphase,
                                  self.sample_rates, self._start_point)
        return min(ready, limit)

    def _run(self, count: int) -> np.ndarray:
        dtype = np.result_type(self._buffer, self.polyphase.arena, np.float64)
        out = np.zeros(count, dtype=dtype)
        if count == 0:
            return out
        cont = resample_into(out, self._buffer, self.polyphase,
                             self.sample_rates, self._start_point)
        self._buffer = self._buffer[cont.first_input_sample:]
        self._start_point = cont.start_point
        self.samples_out += count
        return out

    def process(self, chunk) -> np.ndarray:
        """Append input, return every output sample it completes."""
        chunk = np.asarray(chunk)
        if chunk.ndim != 1:
            raise ValueError(f"chunk must be 1-D, got shape {chunk.shape}")
        self._buffer = np.concatenate([self._buffer, chunk])
        self.samples_in += len(chunk)
        out = self._run(self._ready())
        log.debug("stream: %d in -> %d out, holding %d input samples",
                  len(chunk), len(out), len(self._buffer))
        return out

    def flush(self) -> np.ndarray:
        """Emit the rest, treating input past the end as silence. Resets."""
        count = max_output_length(len(self._buffer), self.polyphase,
                                  self.sample_rates, self._start_point)
        out = self._run(count)
        log.debug("stream flush: %d samples (total %d in, %d out)",
                  len(out), self.samples_in, self.samples_out)
        self.reset()
        return out
