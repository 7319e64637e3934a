"""FIR filter design: windowed sinc, arbitrary response, least squares.

Cutoff frequencies are normalized: 1.0 is the Nyquist frequency of the
rate the filter runs at.
"""

import numpy as np
from scipy import fft, linalg
from scipy.signal import windows


def get_window(name, size: int) -> np.ndarray:
    """Symmetric window of `size` samples. `name` is anything scipy accepts,
    e.g. "hamming", "blackman", ("kaiser", 8.0)."""
    return windows.get_window(name, size, fftbins=False)


def _resolve_window(num_taps_or_window, window):
    if np.ndim(num_taps_or_window) == 0:
        return get_window(window, int(num_taps_or_window))
    return np.asarray(num_taps_or_window, dtype=np.float64)


def fir_lowpass_win(cutoff: float, num_taps_or_window, window="hamming") -> np.ndarray:
    """Windowed-sinc lowpass, normalized to unit gain at DC.

    Pass either a tap count (window picked by name) or the window itself.
    """
    win = _resolve_window(num_taps_or_window, window)
    size = len(win)
    if size < 1:
        raise ValueError("lowpass needs at least one tap")
    if not 0.0 < cutoff <= 1.0:
        raise ValueError(f"cutoff must be in (0, 1], got {cutoff}")
    center = (size - 1) / 2.0
    taps = np.sinc(cutoff * (np.arange(size) - center)) * win
    return taps / np.sum(taps)


def fir_arbitrary_win(response, num_taps_or_window, window="hamming") -> np.ndarray:
    """Linear-phase filter approximating a sampled magnitude response.

    `response` samples the amplitude from DC to Nyquist inclusive. The
    zero-phase impulse response is centered, truncated to the window and
    tapered by it. Odd lengths only (type I).
    """
    response = np.asarray(response, dtype=np.float64)
    win = _resolve_window(num_taps_or_window, window)
    num_taps = len(win)
    if num_taps % 2 != 1:
        raise ValueError(f"arbitrary-response filters need an odd tap count, got {num_taps}")
    if len(response) < 1:
        raise ValueError("response must have at least one sample")

    impulse = fft.irfft(response, n=2 * len(response) - 1)
    impulse = fft.fftshift(impulse)
    half = len(impulse) // 2

    nonzero = min(num_taps, len(impulse))
    taps = np.zeros(num_taps)
    start = (num_taps - nonzero) // 2
    taps[start:start + nonzero] = impulse[half - nonzero // 2:half + nonzero // 2 + 1]
    return taps * win


def fir_least_squares(num_taps: int, response, weight=None, grid_size: int = 0) -> np.ndarray:
    """Type-I linear-phase FIR minimizing the (weighted) squared error.

    The amplitude response of a symmetric filter with half-length L is
    a[0] + 2 * sum(a[k] * cos(k * w)). Both `response` and `weight` are
    callables of normalized frequency in [0, 1]. The default grid is 4L
    points.
    """
    if num_taps < 1 or num_taps % 2 != 1:
        raise ValueError(f"least-squares design needs an odd tap count, got {num_taps}")
    half_len = (num_taps + 1) // 2
    n_grid = 4 * half_len if grid_size == 0 else max(half_len, grid_size)
    if n_grid < 2:
        n_grid = 2

    freqs = np.arange(n_grid) / (n_grid - 1)
    basis = 2.0 * np.cos(np.outer(freqs * np.pi, np.arange(half_len)))
    basis[:, 0] = 1.0
    target = np.array([response(f) for f in freqs], dtype=np.float64)

    if weight is not None:
        w = np.sqrt(np.array([weight(f) for f in freqs], dtype=np.float64))
        basis = basis * w[:, None]
        target = target * w

    half, *_ = linalg.lstsq(basis, target)
    taps = np.empty(num_taps)
    taps[:half_len] = half[::-1]
    taps[half_len - 1:] = half
    return taps
