"""
Convert between audio files and SPICE piecewise-linear (PWL) text, and watch
a simulator's PWL output to turn it back into audio as soon as it is written.
"""

from wavpwl.pwl_parser import ColumnSelector, parse_pwl
from wavpwl.pwl_to_wav import pwl_to_wav
from wavpwl.series import Sample, SampleSeries, evaluate
from wavpwl.wav_to_pwl import wav_to_pwl
from wavpwl.watch import WatchController, watch_pwl_to_wav

__all__ = [
    "ColumnSelector",
    "Sample",
    "SampleSeries",
    "WatchController",
    "evaluate",
    "parse_pwl",
    "pwl_to_wav",
    "wav_to_pwl",
    "watch_pwl_to_wav",
]
