"""Band transforms: derive highpass, bandpass and Hilbert filters from a lowpass."""

import numpy as np

from primitives.arithmetic import multiply


def mirror_response(taps: np.ndarray) -> np.ndarray:
    """Flip the response around fs/4: H(w) -> H(pi - w). Lowpass becomes highpass."""
    taps = np.asarray(taps)
    sign = np.where(np.arange(len(taps)) % 2 == 0, 1.0, -1.0)
    return multiply(np.empty(len(taps), dtype=np.result_type(taps, np.float64)), taps, sign)


def complementary_response(taps: np.ndarray) -> np.ndarray:
    """1 - H(w). Needs an odd length so the unit impulse lands on the center tap."""
    taps = np.asarray(taps)
    if len(taps) % 2 != 1:
        raise ValueError(f"complementary response needs an odd tap count, got {len(taps)}")
    out = multiply(np.empty(len(taps), dtype=np.result_type(taps, np.float64)), taps, -1.0)
    out[len(taps) // 2] += 1.0
    return out


def shift_response(taps: np.ndarray, frequency: float) -> np.ndarray:
    """Modulate a lowpass up to `frequency` (normalized, 1 = Nyquist).

    The result is a bandpass centered on `frequency` with twice the
    lowpass bandwidth; the factor 2 keeps passband gain at unity.
    """
    taps = np.asarray(taps)
    center = (len(taps) - 1) / 2.0
    carrier = 2.0 * np.cos(np.pi * frequency * (np.arange(len(taps)) - center))
    return multiply(np.empty(len(taps), dtype=np.result_type(taps, np.float64)), taps, carrier)


def _hilbert_kernel(size: int) -> np.ndarray:
    # 2 * sin(pi * d / 2) for d = n - center: 0 on even offsets, +-2 on odd.
    d = np.arange(size) - size // 2
    kernel = np.zeros(size)
    kernel[d % 4 == 1] = 2.0
    kernel[d % 4 == 3] = -2.0
    return kernel


def halfband_to_hilbert_odd(halfband: np.ndarray) -> np.ndarray:
    """Turn an odd-length halfband lowpass into a Hilbert transformer of the same length."""
    halfband = np.asarray(halfband)
    if len(halfband) % 2 != 1:
        raise ValueError(f"halfband filter must have an odd tap count, got {len(halfband)}")
    out = np.empty(len(halfband), dtype=np.result_type(halfband, np.float64))
    return multiply(out, halfband, _hilbert_kernel(len(halfband)))


def halfband_to_hilbert_even(halfband: np.ndarray) -> np.ndarray:
    """Even-length Hilbert transformer from a halfband of length 2M - 1 (M even).

    Keeps every other tap of the odd-length transformer; the dropped taps
    are the zeros.
    """
    halfband = np.asarray(halfband)
    size = len(halfband)
    if size % 2 != 1 or ((size + 1) // 2) % 2 != 0:
        raise ValueError(
            f"halfband length must be 2M - 1 with M even, got {size}")
    from engine.interpolation import decimate
    return decimate(halfband_to_hilbert_odd(halfband), 2)
