"""Test decimate, expand and polyphase interpolation.

Run: uv run pytest tests/test_interpolation.py

Key test: any sub-window of the interpolated signal matches the direct
zero-stuffed convolution exactly.
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from engine.interpolation import decimate, expand, interpolate
from primitives.fir import fir_lowpass_win
from primitives.polyphase import polyphase_decompose


# ---------------------------------------------------------------------------
# Test 1: Decimate / expand
# ---------------------------------------------------------------------------
def test_decimate():
    x = np.arange(10.0)
    assert list(decimate(x, 3)) == [0.0, 3.0, 6.0, 9.0]
    assert list(decimate(x, 1)) == list(x)
    out = np.empty(5)
    assert decimate(x, 2, out=out) is out
    assert list(out) == [0.0, 2.0, 4.0, 6.0, 8.0]


def test_expand():
    x = np.array([1.0, 2.0, 3.0])
    assert list(expand(x, 3)) == [1.0, 0.0, 0.0, 2.0, 0.0, 0.0, 3.0, 0.0, 0.0]
    out = np.full(6, 7.0)
    expand(x, 2, out=out)
    assert list(out) == [1.0, 0.0, 2.0, 0.0, 3.0, 0.0]


def test_expand_then_decimate_round_trip():
    rng = np.random.RandomState(3)
    for size in [0, 1, 7, 64]:
        x = rng.randn(size)
        for rate in range(1, 6):
            assert np.array_equal(decimate(expand(x, rate), rate), x)


def test_bad_sizes():
    with pytest.raises(ValueError):
        decimate(np.ones(10), 3, out=np.empty(3))
    with pytest.raises(ValueError):
        expand(np.ones(4), 2, out=np.empty(7))
    with pytest.raises(ValueError):
        decimate(np.ones(4), 0)


# ---------------------------------------------------------------------------
# Test 2: Hand-computed example
# ---------------------------------------------------------------------------
def test_interpolate_small_example():
    # expand([1, 0, 1], 2) = [1, 0, 0, 0, 1, 0]; convolve with [1, 2, 3]
    bank = polyphase_decompose(np.array([1.0, 2.0, 3.0]), 2)
    lr = np.array([1.0, 0.0, 1.0])
    expected = np.array([1.0, 2.0, 3.0, 0.0, 1.0, 2.0, 3.0, 0.0])
    assert np.array_equal(interpolate(lr, bank), expected)

    for offset in range(len(expected)):
        for length in range(len(expected) - offset + 1):
            chunk = interpolate(lr, bank, hr_offset=offset, hr_length=length)
            assert np.array_equal(chunk, expected[offset:offset + length])


# ---------------------------------------------------------------------------
# Test 3: Sub-windows against np.convolve on random data
# ---------------------------------------------------------------------------
def test_interpolate_matches_direct_convolution():
    rng = np.random.RandomState(11)
    for filter_size, rate in [(1, 1), (5, 2), (12, 3), (13, 4), (3, 5)]:
        taps = rng.randn(filter_size)
        lr = rng.randn(17)
        direct = np.convolve(expand(lr, rate), taps)
        bank = polyphase_decompose(taps, rate)
        np.testing.assert_allclose(interpolate(lr, bank), direct, rtol=1e-12, atol=1e-12)

        # Block-wise, as a streaming caller would
        blocks = [interpolate(lr, bank, hr_offset=o, hr_length=min(7, len(direct) - o))
                  for o in range(0, len(direct), 7)]
        np.testing.assert_allclose(np.concatenate(blocks), direct, rtol=1e-12, atol=1e-12)


def test_interpolate_leaves_untouched_samples():
    # Filter [1, 2, 3] at rate 2 on [1, 0, 1]: sample 7 sees no input at all.
    bank = polyphase_decompose(np.array([1.0, 2.0, 3.0]), 2)
    out = np.full(2, -1.0)
    interpolate(np.array([1.0, 0.0, 1.0]), bank, hr_offset=6, out=out)
    assert list(out) == [3.0, -1.0]


def test_interpolated_sine_is_smooth():
    rate = 4
    taps = fir_lowpass_win(1.0 / rate, 64) * rate
    bank = polyphase_decompose(taps, rate)
    n = np.arange(200)
    lr = np.sin(2 * np.pi * 0.05 * n)
    hr = interpolate(lr, bank)
    delay = (len(taps) - 1) / 2
    t = (np.arange(len(hr)) - delay) / rate
    steady = slice(len(taps), len(hr) - len(taps))
    np.testing.assert_allclose(hr[steady], np.sin(2 * np.pi * 0.05 * t[steady]), atol=2e-2)


def test_interpolate_out_of_range():
    bank = polyphase_decompose(np.array([1.0, 2.0, 3.0]), 2)
    with pytest.raises(ValueError):
        interpolate(np.ones(3), bank, hr_offset=5, hr_length=4)
    with pytest.raises(ValueError):
        interpolate(np.ones(3), bank, hr_offset=-1, hr_length=1)


if __name__ == "__main__":
    test_decimate()
    test_expand()
    test_expand_then_decimate_round_trip()
    test_bad_sizes()
    test_interpolate_small_example()
    test_interpolate_matches_direct_convolution()
    test_interpolate_leaves_untouched_samples()
    test_interpolated_sine_is_smooth()
    test_interpolate_out_of_range()
    print("Done!")
