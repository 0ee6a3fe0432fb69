"""wavpwl/pwl_to_wav.py — PWL text to 16-bit mono WAV.

The PWL breakpoints are evaluated on the audio sample grid t = i / rate with
straight-line interpolation (no filtering, no dither), divided by the voltage
scale and quantised to int16.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Optional

import numpy as np

from wavpwl.audio_io import AudioSpec, create_wav
from wavpwl.errors import ConfigurationError, PwlFormatError
from wavpwl.pwl_parser import parse_pwl
from wavpwl.series import SampleSeries, evaluate_grid

PCM_FULL_SCALE = 32767.0
RENDER_BLOCK = 65536


def output_sample_count(series: SampleSeries, sample_rate: int) -> int:
    span = series.duration * sample_rate
    if not math.isfinite(span):
        raise PwlFormatError(f"Last breakpoint time {series.duration} s gives no finite sample count")
    return max(0, int(math.ceil(span)))


def to_pcm16(voltages: np.ndarray, voltage_scale: float) -> np.ndarray:
    normalized = np.asarray(voltages, dtype=np.float64) / voltage_scale
    return np.clip(np.rint(normalized * PCM_FULL_SCALE), -32768, 32767).astype(np.int16)


def render_pcm(series: SampleSeries, sample_rate: int, voltage_scale: float = 1.0) -> np.ndarray:
    """Whole-signal render; convenient for small series and tests."""
    n = output_sample_count(series, sample_rate)
    t = np.arange(n, dtype=np.float64) / sample_rate
    return to_pcm16(evaluate_grid(series, t), voltage_scale)


def write_series(series: SampleSeries, output_path, sample_rate: int, voltage_scale: float = 1.0) -> int:
    """Render `series` into a WAV file block by block. Returns samples written."""
    n = output_sample_count(series, sample_rate)
    spec = AudioSpec.mono16(sample_rate)

    print(f"[PWL2WAV]   Duration: {series.duration:.6f} seconds")
    print(f"[PWL2WAV]   Output samples: {n}")
    print(f"[PWL2WAV] Writing WAV file: {output_path}")

    with create_wav(output_path, spec) as sink:
        for start in range(0, n, RENDER_BLOCK):
            stop = min(n, start + RENDER_BLOCK)
            t = np.arange(start, stop, dtype=np.float64) / sample_rate
            sink.write(to_pcm16(evaluate_grid(series, t), voltage_scale))
    return n


def pwl_to_wav(
    input_path,
    output_path,
    sample_rate: int = 44100,
    voltage_scale: float = 1.0,
    column: Optional[str] = None,
) -> int:
    """Parse a PWL file and write it out as mono 16-bit PCM.

    Nothing is written if parsing fails.
    """
    if int(sample_rate) <= 0:
        raise ConfigurationError(f"Sample rate must be positive, got {sample_rate}")
    if voltage_scale == 0:
        raise ConfigurationError("Voltage scale must be nonzero")

    series, _selector = parse_pwl(input_path, column)
    n = write_series(series, Path(output_path), int(sample_rate), float(voltage_scale))
    print("[PWL2WAV] Conversion complete!")
    return n
