"""Parameter dict schema and defaults for the resampler.

Shared contract between the CLI, presets and scripting. All parameter
sources produce a dict in this format.
"""

SR = 44100


def default_params() -> dict:
    """Good quality for speech and music without being slow."""
    return {
        # Phases in the polyphase bank. More phases = finer fractional
        # positions before the two-phase cross-fade kicks in.
        "num_phases": 32,

        # Taps per phase. Filter length is num_phases * taps_per_phase;
        # longer = steeper anti-aliasing transition, more delay.
        "taps_per_phase": 16,

        # Window for the windowed-sinc lowpass (any scipy window name)
        "window": "hamming",

        # Input samples fed per streaming call (~93ms at 44.1k)
        "chunk_size": 4096,
    }


# Accepted ranges (min, max), inclusive.
PARAM_RANGES = {
    "num_phases": (1, 4096),
    "taps_per_phase": (1, 512),
    "chunk_size": (1, 1 << 24),
}

WINDOWS = ["hamming", "hann", "blackman", "blackmanharris", "nuttall", "boxcar"]


def validate_params(params: dict) -> dict:
    """Fill defaults and check ranges. Returns a new dict."""
    merged = default_params()
    unknown = set(params) - set(merged)
    if unknown:
        raise ValueError(f"Unknown params {sorted(unknown)}. Options: {sorted(merged)}")
    merged.update(params)

    for key, (lo, hi) in PARAM_RANGES.items():
        value = merged[key]
        if not isinstance(value, int) or not lo <= value <= hi:
            raise ValueError(f"{key} must be an int in [{lo}, {hi}], got {value!r}")
    if merged["window"] not in WINDOWS:
        raise ValueError(f"Unknown window '{merged['window']}'. Options: {WINDOWS}")
    return merged
