"""Arbitrary-ratio resampling through a polyphase bank.

Signal flow, per output sample:
    1. Map the output index to an exact input position (Rational)
    2. Split it into an anchor input sample + fractional part
    3. Scale the fraction by P -> two neighbouring phases + integer weights
    4. Dot product of the input window with each phase (clipped to the input)
    5. Cross-fade the two candidates by their weights

The sample-rate ratio is Rational(source_rate, target_rate): input samples
consumed per output sample. Each call returns a Continuation saying where
the next chunk's input must start, so a stream can be resampled piecewise
with no phase drift.
"""

import logging
import math
import time
from dataclasses import dataclass

import numpy as np
from numba import njit

from primitives.arithmetic import dot_product
from primitives.fir import fir_lowpass_win
from primitives.polyphase import PolyphaseView, polyphase_decompose
from primitives.rational import Rational, as_rational, fits_int64, floor, frac

log = logging.getLogger(__name__)

CONV_FULL = "full"
CONV_CENTRAL = "central"


@dataclass(frozen=True)
class PhaseSample:
    """One polyphase candidate: anchor input sample, phase, integer weight."""
    input_index: int
    phase_index: int
    weight: int


@dataclass(frozen=True)
class Continuation:
    """Where the next chunk picks up.

    first_input_sample: index (in the stream so far) the next input buffer
        must start at.
    start_point: output position to pass as `start_point`, relative to
        that new buffer.
    """
    first_input_sample: int
    start_point: Rational

    def to_dict(self) -> dict:
        return {
            "first_input_sample": self.first_input_sample,
            "start_point": [self.start_point.numerator, self.start_point.denominator],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Continuation":
        return cls(int(d["first_input_sample"]), Rational(*d["start_point"]))


def sample_rate_ratio(source_rate: int, target_rate: int) -> Rational:
    """The `sample_rates` argument for converting source_rate -> target_rate."""
    return Rational(source_rate, target_rate)


# ---------------------------------------------------------------------------
# Exact bookkeeping
# ---------------------------------------------------------------------------

def convolution_length(a: int, b: int, mode: str = CONV_FULL) -> int:
    """Length of convolving a- and b-sample signals."""
    if mode == CONV_FULL:
        return a + b - 1
    if mode == CONV_CENTRAL:
        return max(a, b) - min(a, b) + 1
    raise ValueError(f"Unknown convolution mode '{mode}'. Options: {[CONV_FULL, CONV_CENTRAL]}")


def resampling_length(input_size: int, filter_size: int, num_phases: int,
                      sample_rates, mode: str = CONV_FULL) -> Rational:
    """Output length (exact, possibly fractional) the input supports."""
    sample_rates = as_rational(sample_rates)
    interpolated = num_phases * input_size
    filtered = convolution_length(interpolated, filter_size, mode)
    return Rational(filtered) / sample_rates / num_phases


def resampling_start_point(filter_size: int, num_phases: int, sample_rates,
                           mode: str = CONV_FULL) -> Rational:
    """Output position where the chosen convolution mode begins."""
    sample_rates = as_rational(sample_rates)
    if mode == CONV_FULL:
        return Rational(0)
    if mode == CONV_CENTRAL:
        return Rational(filter_size - 1, num_phases) / sample_rates
    raise ValueError(f"Unknown convolution mode '{mode}'. Options: {[CONV_FULL, CONV_CENTRAL]}")


def resampling_filter_cutoff(sample_rates, num_phases: int) -> float:
    """Normalized cutoff the anti-aliasing filter needs.

    The lower of the two Nyquist limits, scaled down by the phase count
    because the filter runs at P times the input rate.
    """
    sample_rates = as_rational(sample_rates)
    base = 1.0 / num_phases
    rate = min(1.0, 1.0 / float(sample_rates))
    return base * rate


def resampling_delay(filter_size: int, num_phases: int, sample_rates) -> Rational:
    """Group delay of a linear-phase filter, in output samples."""
    sample_rates = as_rational(sample_rates)
    return Rational(filter_size - 1, 2 * num_phases) / sample_rates


def input_position(output_index, sample_rates) -> Rational:
    """Exact input position of an output sample."""
    return as_rational(output_index) * as_rational(sample_rates)


def phase_samples(input_index: Rational, num_phases: int):
    """Split an input position into the two polyphase candidates.

    The weights sum to the reduced denominator of the phase fraction; when
    the position lands exactly on a phase the second weight is zero.
    """
    index_frac = frac(input_index)
    first_phase = floor(index_frac * num_phases)
    second_phase = (first_phase + 1) % num_phases

    t = frac(index_frac * num_phases)
    second_weight = t.numerator
    first_weight = t.denominator - t.numerator

    first_index = floor(input_index)
    second_index = first_index + 1 if second_phase == 0 else first_index
    return (PhaseSample(first_index, first_phase, first_weight),
            PhaseSample(second_index, second_phase, second_weight))


def continuation(next_output_sample, filter_size: int, num_phases: int,
                 sample_rates) -> Continuation:
    """Continuation for the output sample right after a finished chunk."""
    next_output_sample = as_rational(next_output_sample)
    sample_rates = as_rational(sample_rates)
    next_input_sample = next_output_sample * sample_rates
    convolution_offset = Rational(filter_size - 1, num_phases)
    first_input_sample = next_input_sample - convolution_offset

    if first_input_sample <= 0:
        return Continuation(0, next_output_sample)
    input_start_point = frac(first_input_sample) + convolution_offset
    return Continuation(floor(first_input_sample), input_start_point / sample_rates)


# ---------------------------------------------------------------------------
# Kernel
# ---------------------------------------------------------------------------

@njit(cache=True)
def _gcd(a, b):
    while b != 0:
        a, b = b, a % b
    return a


@njit(cache=True)
def _candidate(signal, arena, lengths, phase, anchor):
    """Dot product of the phase with the input window ending at `anchor`."""
    length = lengths[phase]
    offset = arena.shape[1] - length
    first = anchor - length + 1
    lo = max(first, 0)
    hi = min(len(signal), anchor + 1)
    if hi <= lo:
        return 0.0
    taps = arena[phase, offset + lo - first:offset + hi - first]
    return dot_product(signal[lo:hi], taps)


@njit(cache=True)
def _resample_kernel(output, signal, arena, lengths, start_num, start_den, rate_num, rate_den):
    # input position of output k = (start_num + k * start_den) * rate_num / (start_den * rate_den)
    num_phases = arena.shape[0]
    den = start_den * rate_den
    for k in range(len(output)):
        num = (start_num + k * start_den) * rate_num
        anchor = num // den
        scaled = (num % den) * num_phases
        first_phase = scaled // den
        second_phase = (first_phase + 1) % num_phases

        t_num = scaled % den
        g = _gcd(t_num, den)
        second_weight = t_num // g
        first_weight = den // g - second_weight

        second_anchor = anchor + 1 if second_phase == 0 else anchor

        v1 = _candidate(signal, arena, lengths, first_phase, anchor)
        v2 = _candidate(signal, arena, lengths, second_phase, second_anchor)
        w1 = float(first_weight)
        w2 = float(second_weight)
        output[k] = (v1 * w1 + v2 * w2) / (w1 + w2)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def max_output_length(input_size: int, polyphase: PolyphaseView, sample_rates,
                      start_point=0) -> int:
    """Most samples one call may produce from `start_point` on."""
    limit = resampling_length(input_size, polyphase.original_size,
                              polyphase.filter_count, sample_rates, CONV_FULL)
    room = limit - as_rational(start_point)
    return max(math.ceil(room) - 1, 0)


def resample_into(output: np.ndarray, signal, polyphase: PolyphaseView,
                  sample_rates, start_point=0) -> Continuation:
    """Fill `output` with resampled `signal`, return the continuation.

    `polyphase` must hold a lowpass designed for this conversion (see
    resampling_filter_cutoff / design_resampling_filter). `start_point` is
    the output position of output[0]: 0 for a fresh stream, or a previous
    call's Continuation.start_point.
    """
    signal = np.asarray(signal)
    sample_rates = as_rational(sample_rates)
    start_point = as_rational(start_point)
    if sample_rates <= 0:
        raise ValueError(f"sample_rates must be positive, got {sample_rates}")
    if start_point < 0:
        raise ValueError(f"start_point must be >= 0, got {start_point}")
    if polyphase.filter_count < 1:
        raise ValueError("polyphase bank has no phases")

    limit = resampling_length(len(signal), polyphase.original_size,
                              polyphase.filter_count, sample_rates, CONV_FULL)
    if start_point + len(output) >= limit:
        raise ValueError(
            f"{len(output)} samples from {start_point} exceed the resampled "
            f"length {float(limit):.3f} of a {len(signal)}-sample input")

    last_num = (start_point.numerator + max(len(output) - 1, 0) * start_point.denominator) \
        * sample_rates.numerator
    if not fits_int64(last_num * polyphase.filter_count,
                      start_point.denominator * sample_rates.denominator * polyphase.filter_count):
        raise OverflowError(
            f"positions up to {start_point + len(output)} at ratio {sample_rates} "
            f"with {polyphase.filter_count} phases exceed 64-bit range")

    _resample_kernel(output, signal, polyphase.arena, polyphase.phase_lengths,
                     start_point.numerator, start_point.denominator,
                     sample_rates.numerator, sample_rates.denominator)

    return continuation(start_point + len(output), polyphase.original_size,
                        polyphase.filter_count, sample_rates)


def resample(signal, polyphase: PolyphaseView, sample_rates, start_point=0,
             length=None, out=None):
    """Allocating form of resample_into.

    Returns (output, continuation). `length` defaults to every sample the
    input supports from `start_point` on.
    """
    t0 = time.perf_counter()
    signal = np.asarray(signal)
    if out is None:
        if length is None:
            length = max_output_length(len(signal), polyphase, sample_rates, start_point)
        dtype = np.result_type(signal, polyphase.arena, np.float64)
        out = np.zeros(length, dtype=dtype)
    cont = resample_into(out, signal, polyphase, sample_rates, start_point)
    elapsed = time.perf_counter() - t0
    log.debug("resample %d -> %d samples at ratio %s (%d phases, %d taps) in %.4fs",
              len(signal), len(out), as_rational(sample_rates), polyphase.filter_count,
              polyphase.original_size, elapsed)
    return out, cont


def design_resampling_filter(sample_rates, num_phases: int, taps_per_phase: int,
                             window="hamming") -> PolyphaseView:
    """Windowed-sinc anti-aliasing bank for a conversion.

    Scaled by the phase count so the passband gain of the resampler is 1.
    """
    if num_phases < 1 or taps_per_phase < 1:
        raise ValueError(
            f"need num_phases >= 1 and taps_per_phase >= 1, got {num_phases}, {taps_per_phase}")
    cutoff = resampling_filter_cutoff(sample_rates, num_phases)
    taps = fir_lowpass_win(cutoff, num_phases * taps_per_phase, window) * num_phases
    return polyphase_decompose(taps, num_phases)
