"""Audio IO helpers for the converters.

Thin layer over soundfile (libsndfile). Readers get the file's AudioSpec plus
a block iterator over the first channel; writers get a sink that accepts int16
blocks.

Dependencies are intentionally minimal: numpy, soundfile.
"""

from __future__ import annotations

import enum
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np
import soundfile as sf

from wavpwl.errors import PwlFormatError, PwlIOError

BLOCK_FRAMES = 65536

_SUBTYPE_BITS = {
    "PCM_S8": (8, "int"),
    "PCM_U8": (8, "int"),
    "PCM_16": (16, "int"),
    "PCM_24": (24, "int"),
    "PCM_32": (32, "int"),
    "FLOAT": (32, "float"),
    "DOUBLE": (64, "float"),
}


class SampleFormat(enum.Enum):
    INT = "int"
    FLOAT = "float"


@dataclass(frozen=True)
class AudioSpec:
    channels: int
    sample_rate: int
    bits_per_sample: int
    sample_format: SampleFormat

    @classmethod
    def mono16(cls, sample_rate: int) -> "AudioSpec":
        return cls(channels=1, sample_rate=int(sample_rate), bits_per_sample=16, sample_format=SampleFormat.INT)

    @property
    def subtype(self) -> str:
        if self.sample_format is SampleFormat.FLOAT:
            return "DOUBLE" if self.bits_per_sample == 64 else "FLOAT"
        return f"PCM_{self.bits_per_sample}" if self.bits_per_sample > 8 else "PCM_U8"


def _spec_from_info(path: str, f: sf.SoundFile) -> AudioSpec:
    bits_fmt = _SUBTYPE_BITS.get(f.subtype)
    if bits_fmt is None:
        raise PwlFormatError(f"Unsupported sample encoding {f.subtype} in {path}")
    bits, fmt = bits_fmt
    return AudioSpec(
        channels=int(f.channels),
        sample_rate=int(f.samplerate),
        bits_per_sample=bits,
        sample_format=SampleFormat(fmt),
    )


@contextmanager
def open_wav(path: str, block_frames: Optional[int] = None) -> Iterator[Tuple[AudioSpec, Iterator[np.ndarray]]]:
    """Open an audio file for reading first-channel samples.

    Yields (spec, blocks). Integer files produce int64 blocks holding the
    native signed sample value (e.g. -32768..32767 for 16-bit); float files
    produce float64 blocks as stored.
    """
    block_frames = block_frames or BLOCK_FRAMES
    try:
        f = sf.SoundFile(str(path), mode="r")
    except (OSError, RuntimeError) as exc:
        raise PwlIOError(f"Could not open audio file {path}: {exc}") from exc

    with f:
        spec = _spec_from_info(str(path), f)

        def _blocks() -> Iterator[np.ndarray]:
            try:
                if spec.sample_format is SampleFormat.FLOAT:
                    for block in f.blocks(blocksize=block_frames, dtype="float64", always_2d=True):
                        yield block[:, 0]
                else:
                    # libsndfile left-justifies integer PCM in int32
                    shift = 32 - spec.bits_per_sample
                    for block in f.blocks(blocksize=block_frames, dtype="int32", always_2d=True):
                        yield block[:, 0].astype(np.int64) >> shift
            except (OSError, RuntimeError) as exc:
                raise PwlIOError(f"Failed reading samples from {path}: {exc}") from exc

        yield spec, _blocks()


@contextmanager
def create_wav(path: str, spec: AudioSpec) -> Iterator[sf.SoundFile]:
    """Open a WAV file for writing with the given spec; yields the sink."""
    try:
        f = sf.SoundFile(
            str(path),
            mode="w",
            samplerate=spec.sample_rate,
            channels=spec.channels,
            subtype=spec.subtype,
            format="WAV",
        )
    except (OSError, RuntimeError) as exc:
        raise PwlIOError(f"Could not create audio file {path}: {exc}") from exc

    try:
        with f:
            yield f
    except (OSError, RuntimeError) as exc:
        raise PwlIOError(f"Failed writing audio file {path}: {exc}") from exc

