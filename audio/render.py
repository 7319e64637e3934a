"""Offline WAV resampling: load audio, stream it through the resampler, save.

Usage:
    uv run python audio/render.py input.wav output.wav --rate 16000 [--preset presets/hq.json]

Without --preset, uses default params.
"""

import numpy as np
from scipy.io import wavfile
import argparse
import json
import logging
import os
import sys
import time

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from engine.params import default_params, validate_params
from engine.resample import design_resampling_filter, resampling_delay, sample_rate_ratio
from engine.stream import StreamResampler

log = logging.getLogger("render")


def load_wav(path):
    """Load a WAV file as float64 (samples,) or (samples, channels)."""
    sr, data = wavfile.read(path)

    if data.dtype == np.int16:
        audio = data.astype(np.float64) / 32768.0
    elif data.dtype == np.int32:
        audio = data.astype(np.float64) / 2147483648.0
    elif data.dtype == np.uint8:
        audio = (data.astype(np.float64) - 128.0) / 128.0
    else:
        audio = data.astype(np.float64)
    return audio, sr


def save_wav(path, audio, sr):
    """Save float64 audio as 16-bit WAV, clipping anything outside [-1, 1]."""
    peak = np.max(np.abs(audio)) if audio.size else 0.0
    if peak > 1.0:
        log.warning("peak %.2f exceeds 1.0, clipping", peak)
    wavfile.write(path, sr, (np.clip(audio, -1.0, 1.0) * 32767).astype(np.int16))


def load_preset(path):
    """Load a params dict from JSON."""
    with open(path) as f:
        return json.load(f)


def resample_channel(audio, source_rate, target_rate, polyphase, chunk_size):
    """Stream one channel through a StreamResampler, chunk by chunk."""
    stream = StreamResampler(source_rate, target_rate, polyphase=polyphase)
    pieces = []
    for start in range(0, len(audio), chunk_size):
        pieces.append(stream.process(audio[start:start + chunk_size]))
    pieces.append(stream.flush())
    return np.concatenate(pieces)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Resample a WAV file")
    parser.add_argument("input", help="Input WAV file")
    parser.add_argument("output", help="Output WAV file")
    parser.add_argument("--rate", type=int, required=True, help="Target sample rate in Hz")
    parser.add_argument("--preset", help="JSON preset file (default params if omitted)")
    parser.add_argument("--phases", type=int, help="Override num_phases")
    parser.add_argument("--taps", type=int, help="Override taps_per_phase")
    parser.add_argument("--window", help="Override window")
    parser.add_argument("--chunk", type=int, help="Override chunk_size")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(name)s %(levelname)s: %(message)s")

    params = load_preset(args.preset) if args.preset else default_params()
    for key, value in [("num_phases", args.phases), ("taps_per_phase", args.taps),
                       ("window", args.window), ("chunk_size", args.chunk)]:
        if value is not None:
            params[key] = value
    params = validate_params(params)

    audio, sr = load_wav(args.input)
    log.info("loaded %s: %d samples, %.2fs, %d Hz", args.input, len(audio), len(audio) / sr, sr)

    ratio = sample_rate_ratio(sr, args.rate)
    polyphase = design_resampling_filter(ratio, params["num_phases"],
                                         params["taps_per_phase"], params["window"])
    log.info("ratio %s, %r, delay %.2f output samples",
             ratio, polyphase, float(resampling_delay(polyphase.original_size,
                                                     polyphase.filter_count, ratio)))

    t0 = time.perf_counter()
    channels = audio[:, None] if audio.ndim == 1 else audio
    result = np.column_stack([
        resample_channel(channels[:, c], sr, args.rate, polyphase, params["chunk_size"])
        for c in range(channels.shape[1])
    ])
    if audio.ndim == 1:
        result = result[:, 0]
    elapsed = time.perf_counter() - t0
    duration = len(audio) / sr
    log.info("%.1fs audio in %.3fs (%.0fx RT)", duration, elapsed,
             duration / elapsed if elapsed > 0 else float("inf"))

    save_wav(args.output, result, args.rate)
    log.info("saved %s: %d samples at %d Hz", args.output, len(result), args.rate)


if __name__ == "__main__":
    main()
