"""Polyphase decomposition: one FIR filter split into P interleaved phases.

Interpolating by P means filtering a zero-stuffed signal. Only every Pth
tap of the filter ever meets a nonzero sample, so the filter splits into P
short sub-filters ("phases") and the zeros are never materialized.

Commutator order: phase i holds taps h[i], h[i+P], h[i+2P], ... stored
reversed, so a plain dot product against the input window (oldest sample
first) yields the filtered output.

Storage is a (P, phase_size) arena. Row i holds phase i right-aligned; when
the filter length is not a multiple of P the trailing phases are one tap
short and carry a single zero pad at the front of their row.
"""

import numpy as np


class PolyphaseView:
    """Read-only view of a polyphase arena.

    Usage:
        bank = polyphase_decompose(taps, num_phases=4)
        bank.filter_count      # 4
        bank[1]                # phase 1, reversed, ragged length
        bank.reconstruct()     # original taps
    """

    def __init__(self, arena: np.ndarray, original_size: int):
        if arena.ndim != 2:
            raise ValueError(f"arena must be 2-D (phases, taps), got shape {arena.shape}")
        num_phases, phase_size = arena.shape
        if num_phases < 1:
            raise ValueError("polyphase bank needs at least one phase")
        if not (num_phases * (phase_size - 1) < original_size <= num_phases * phase_size):
            raise ValueError(
                f"original size {original_size} does not fit a "
                f"{num_phases}x{phase_size} arena")
        self._arena = arena
        self._original_size = int(original_size)
        self._lengths = phase_lengths(self._original_size, num_phases)

    @property
    def filter_count(self) -> int:
        """Number of phases P, i.e. the interpolation factor."""
        return self._arena.shape[0]

    @property
    def original_size(self) -> int:
        """Length F of the filter before decomposition."""
        return self._original_size

    @property
    def phase_size(self) -> int:
        """Longest phase, ceil(F / P)."""
        return self._arena.shape[1]

    @property
    def phase_lengths(self) -> np.ndarray:
        return self._lengths

    @property
    def arena(self) -> np.ndarray:
        return self._arena

    def __len__(self):
        return self.filter_count

    def __getitem__(self, index: int) -> np.ndarray:
        if not 0 <= index < self.filter_count:
            raise IndexError(f"phase {index} out of range for {self.filter_count} phases")
        phase = self._arena[index, self.phase_size - self._lengths[index]:]
        phase.flags.writeable = False
        return phase

    def __iter__(self):
        for i in range(self.filter_count):
            yield self[i]

    def reconstruct(self) -> np.ndarray:
        """Re-interleave the phases back into the original filter."""
        taps = np.empty(self._original_size, dtype=self._arena.dtype)
        for i, phase in enumerate(self):
            taps[i::self.filter_count] = phase[::-1]
        return taps

    def __repr__(self):
        return (f"PolyphaseView(filter_count={self.filter_count}, "
                f"original_size={self.original_size}, phase_size={self.phase_size})")


def phase_lengths(filter_size: int, num_phases: int) -> np.ndarray:
    """Taps per phase: ceil((F - i) / P) for phase i."""
    i = np.arange(num_phases, dtype=np.int64)
    return (filter_size - i + num_phases - 1) // num_phases


def polyphase_decompose(taps, num_phases: int, out=None) -> PolyphaseView:
    """Split `taps` into `num_phases` commutator-ordered phases.

    If `out` is given it must be a (num_phases, ceil(F / num_phases)) array;
    it is filled in place and becomes the view's storage.
    """
    taps = np.asarray(taps)
    if taps.ndim != 1 or len(taps) == 0:
        raise ValueError(f"filter must be a non-empty 1-D array, got shape {taps.shape}")
    if num_phases < 1:
        raise ValueError(f"num_phases must be >= 1, got {num_phases}")

    filter_size = len(taps)
    phase_size = -(-filter_size // num_phases)
    if out is None:
        out = np.zeros((num_phases, phase_size), dtype=np.result_type(taps, np.float64))
    elif out.shape != (num_phases, phase_size):
        raise ValueError(f"arena must have shape {(num_phases, phase_size)}, got {out.shape}")

    lengths = phase_lengths(filter_size, num_phases)
    for i in range(num_phases):
        pad = phase_size - lengths[i]
        out[i, :pad] = 0
        out[i, pad:] = taps[i::num_phases][::-1]
    return PolyphaseView(out, filter_size)
