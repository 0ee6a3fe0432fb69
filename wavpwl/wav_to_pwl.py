"""wavpwl/wav_to_pwl.py — Audio file to SPICE PWL text.

Streams the first channel of every d-th frame into lines of

    <time>, <voltage>

with both numbers in %.6e notation. Integer PCM is normalised to the signed
full-scale range before scaling; float PCM is taken as already normalised.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TextIO

import numpy as np

from wavpwl.audio_io import AudioSpec, SampleFormat, open_wav
from wavpwl.errors import ConfigurationError, ConversionError, PwlIOError


def _write_rows(out: TextIO, times: np.ndarray, voltages: np.ndarray) -> None:
    out.writelines(f"{t:.6e}, {v:.6e}\n" for t, v in zip(times.tolist(), voltages.tolist()))


def _describe(path, spec: AudioSpec, decimate: int) -> None:
    print(f"[WAV2PWL] Reading WAV file: {path}")
    print(f"[WAV2PWL]   Sample rate: {spec.sample_rate} Hz")
    print(f"[WAV2PWL]   Channels: {spec.channels}")
    print(f"[WAV2PWL]   Bits per sample: {spec.bits_per_sample}")
    print(f"[WAV2PWL]   Sample format: {spec.sample_format.value}")
    print(f"[WAV2PWL]   Decimation: {decimate} (effective rate: {spec.sample_rate // decimate} Hz)")
    if spec.channels > 1:
        print("[WAV2PWL]   Note: using only the first channel for mono output")


def wav_to_pwl(input_path, output_path, voltage_scale: float = 1.0, decimate: int = 1) -> int:
    """Convert an audio file to a PWL text file.

    Returns the number of PWL rows written, ceil(frames / decimate). On any
    failure the partially written output is removed.
    """
    if int(decimate) < 1:
        raise ConfigurationError("Decimation factor must be at least 1")
    decimate = int(decimate)
    output_path = Path(output_path)

    with open_wav(input_path) as (spec, blocks):
        _describe(input_path, spec, decimate)

        if spec.sample_format is SampleFormat.INT:
            gain = voltage_scale / float(1 << (spec.bits_per_sample - 1))
        else:
            gain = float(voltage_scale)

        print(f"[WAV2PWL] Writing PWL file: {output_path}")
        try:
            out = open(output_path, "w", encoding="utf-8", newline="\n")
        except OSError as exc:
            raise PwlIOError(f"Could not create {output_path}: {exc}") from exc

        frame_index = 0
        rows = 0
        try:
            with out:
                for block in blocks:
                    # first frame in this block that lands on the decimation grid
                    offset = (-frame_index) % decimate
                    picked = block[offset::decimate]
                    if picked.size:
                        k = np.arange(rows, rows + picked.size, dtype=np.float64)
                        _write_rows(out, k * decimate / spec.sample_rate, picked.astype(np.float64) * gain)
                        rows += int(picked.size)
                    frame_index += int(block.shape[0])
        except OSError as exc:
            _discard(output_path)
            raise PwlIOError(f"Failed writing {output_path}: {exc}") from exc
        except ConversionError:
            _discard(output_path)
            raise

    print(f"[WAV2PWL] Wrote {rows} PWL points")
    print("[WAV2PWL] Conversion complete!")
    return rows


def _discard(path: Path) -> None:
    try:
        os.remove(path)
    except OSError:
        pass
