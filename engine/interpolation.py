"""Integer rate changes: decimate, expand, and polyphase interpolation.

decimate/expand only drop or insert samples; filter around them yourself.
interpolate does expand + lowpass in one pass through a polyphase bank,
addressed by absolute high-rate index so arbitrarily long outputs can be
produced block by block.
"""

import logging

import numpy as np
from numba import njit

from primitives.arithmetic import dot_product
from primitives.polyphase import PolyphaseView

log = logging.getLogger(__name__)


def _check_rate(rate):
    if rate < 1:
        raise ValueError(f"rate must be >= 1, got {rate}")


def decimate(signal, rate: int, out=None) -> np.ndarray:
    """Keep every `rate`th sample: out[i] = signal[i * rate]."""
    _check_rate(rate)
    signal = np.asarray(signal)
    size = (len(signal) + rate - 1) // rate
    if out is None:
        out = np.empty(size, dtype=signal.dtype)
    elif len(out) != size:
        raise ValueError(f"decimate by {rate} of {len(signal)} samples gives {size}, out has {len(out)}")
    out[:] = signal[::rate]
    return out


def expand(signal, rate: int, out=None) -> np.ndarray:
    """Insert rate - 1 zeros after every sample."""
    _check_rate(rate)
    signal = np.asarray(signal)
    size = len(signal) * rate
    if out is None:
        out = np.empty(size, dtype=signal.dtype)
    elif len(out) != size:
        raise ValueError(f"expand by {rate} of {len(signal)} samples gives {size}, out has {len(out)}")
    out[:] = 0
    out[::rate] = signal
    return out


@njit(cache=True)
def _interpolate_kernel(hr_output, lr_input, arena, lengths, hr_offset):
    rate = arena.shape[0]
    phase_size = arena.shape[1]
    n_in = len(lr_input)
    for k in range(len(hr_output)):
        n = hr_offset + k
        lr_idx = n // rate - phase_size + 1
        ph = n % rate
        # Window is right-aligned: its last sample meets the first tap.
        last = lr_idx + phase_size
        first = last - lengths[ph]
        offset = phase_size - lengths[ph]
        lo = max(first, 0)
        hi = min(last, n_in)
        if hi > lo:
            taps = arena[ph, offset + lo - first:offset + hi - first]
            hr_output[k] = dot_product(lr_input[lo:hi], taps)


def interpolate(lr_input, polyphase: PolyphaseView, hr_offset: int = 0,
                hr_length=None, out=None) -> np.ndarray:
    """Chunk of the filtered, zero-stuffed signal at P times the input rate.

    out[k] = full_convolution(expand(lr_input, P), h)[hr_offset + k]

    where P = polyphase.filter_count and h is the filter the bank was built
    from. Samples whose window misses the input entirely keep the value
    already in `out` (zero when allocated here).
    """
    lr_input = np.asarray(lr_input)
    max_size = len(lr_input) * polyphase.filter_count + polyphase.original_size - 1
    if hr_offset < 0:
        raise ValueError(f"hr_offset must be >= 0, got {hr_offset}")
    if out is None:
        if hr_length is None:
            hr_length = max(max_size - hr_offset, 0)
        dtype = np.result_type(lr_input, polyphase.arena, np.float64)
        out = np.zeros(hr_length, dtype=dtype)
    if hr_offset + len(out) > max_size:
        raise ValueError(
            f"requested high-rate samples [{hr_offset}, {hr_offset + len(out)}) "
            f"exceed the full convolution length {max_size}")

    log.debug("interpolate x%d: %d input -> %d output at offset %d",
              polyphase.filter_count, len(lr_input), len(out), hr_offset)
    _interpolate_kernel(out, lr_input, polyphase.arena, polyphase.phase_lengths, hr_offset)
    return out
