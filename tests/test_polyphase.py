"""Test polyphase decomposition: commutator order and ragged phases.

Run: uv run pytest tests/test_polyphase.py
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from primitives.polyphase import PolyphaseView, phase_lengths, polyphase_decompose


# ---------------------------------------------------------------------------
# Test 1: Re-interleaving the phases gives back the filter, all F and P
# ---------------------------------------------------------------------------
def test_reconstruction():
    rng = np.random.RandomState(7)
    for filter_size in range(1, 25):
        taps = rng.randn(filter_size)
        for num_phases in range(1, 9):
            bank = polyphase_decompose(taps, num_phases)
            assert np.array_equal(bank.reconstruct(), taps), (filter_size, num_phases)

            # Manual commutator: h[i + j*P] is phase i read backwards
            rebuilt = np.full(filter_size, np.nan)
            for i, phase in enumerate(bank):
                for j, tap in enumerate(phase[::-1]):
                    rebuilt[i + j * num_phases] = tap
            assert np.array_equal(rebuilt, taps)


# ---------------------------------------------------------------------------
# Test 2: Sizes and ragged lengths
# ---------------------------------------------------------------------------
def test_sizes():
    bank = polyphase_decompose(np.arange(10.0), 4)
    assert bank.filter_count == 4
    assert bank.original_size == 10
    assert bank.phase_size == 3
    assert list(bank.phase_lengths) == [3, 3, 2, 2]
    assert list(bank[0]) == [8.0, 4.0, 0.0]
    assert list(bank[3]) == [7.0, 3.0]
    # Short phases are padded in front inside the arena
    assert list(bank.arena[3]) == [0.0, 7.0, 3.0]


def test_lengths_differ_by_at_most_one():
    for filter_size in range(1, 40):
        for num_phases in range(1, 12):
            lengths = phase_lengths(filter_size, num_phases)
            assert lengths.sum() == filter_size
            if filter_size >= num_phases:
                assert lengths.max() - lengths.min() <= 1


def test_phases_are_read_only_views():
    arena = np.zeros((2, 3))
    bank = polyphase_decompose([1.0, 2.0, 3.0, 4.0, 5.0], 2, out=arena)
    assert bank.arena is arena
    phase = bank[0]
    assert np.shares_memory(phase, arena)
    with pytest.raises(ValueError):
        phase[0] = 1.0


def test_wrap_existing_arena():
    arena = np.array([[5.0, 3.0, 1.0], [0.0, 4.0, 2.0]])
    bank = PolyphaseView(arena, 5)
    assert np.array_equal(bank.reconstruct(), [1.0, 2.0, 3.0, 4.0, 5.0])


# ---------------------------------------------------------------------------
# Test 3: Bad configuration fails before anything is written
# ---------------------------------------------------------------------------
def test_invalid_configuration():
    with pytest.raises(ValueError):
        polyphase_decompose([1.0, 2.0], 0)
    with pytest.raises(ValueError):
        polyphase_decompose([], 2)
    arena = np.full((3, 3), 9.0)
    with pytest.raises(ValueError):
        polyphase_decompose(np.ones(4), 2, out=arena)
    assert np.all(arena == 9.0)
    with pytest.raises(ValueError):
        PolyphaseView(np.zeros((2, 3)), 9)
    with pytest.raises(IndexError):
        polyphase_decompose(np.ones(4), 2)[2]


if __name__ == "__main__":
    test_reconstruction()
    test_sizes()
    test_lengths_differ_by_at_most_one()
    test_phases_are_read_only_views()
    test_wrap_existing_arena()
    test_invalid_configuration()
    print("Done!")
