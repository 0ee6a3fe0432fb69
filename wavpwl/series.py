"""wavpwl/series.py — Sample series and piecewise-linear evaluation.

A series is the list of PWL breakpoints, (time, voltage) pairs in file order.
Between breakpoints the signal is a straight line; outside the first/last
breakpoint it holds the end value.

Two evaluators share the same bracketing rule:
  evaluate()       one time value, explicit binary search
  evaluate_grid()  numpy array of times, used to render audio
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, NamedTuple, Tuple

import numpy as np

from wavpwl.errors import StructuralError


class Sample(NamedTuple):
    time: float
    voltage: float


@dataclass(frozen=True, eq=False)
class SampleSeries:
    times: np.ndarray
    voltages: np.ndarray

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[float, float]]) -> "SampleSeries":
        data = np.asarray(list(pairs), dtype=np.float64)
        if data.size == 0:
            raise StructuralError("Sample series is empty")
        times = np.ascontiguousarray(data[:, 0])
        voltages = np.ascontiguousarray(data[:, 1])
        times.flags.writeable = False
        voltages.flags.writeable = False
        return cls(times=times, voltages=voltages)

    def __len__(self) -> int:
        return int(self.times.shape[0])

    def __getitem__(self, i: int) -> Sample:
        return Sample(float(self.times[i]), float(self.voltages[i]))

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    @property
    def duration(self) -> float:
        """Time of the last breakpoint (seconds from start)."""
        return float(self.times[-1])


def evaluate(series: SampleSeries, t: float) -> float:
    """Voltage of the PWL signal at time `t`.

    Holds the first/last value outside the breakpoint range. Inside, the
    window [left, right] keeps times[left] <= t < times[right] while it
    narrows, so with repeated times the later breakpoint wins and the final
    interval always has nonzero width.
    """
    times = series.times
    voltages = series.voltages

    if t <= times[0]:
        return float(voltages[0])
    if t >= times[-1]:
        return float(voltages[-1])

    left = 0
    right = len(series) - 1
    while left < right - 1:
        mid = (left + right) // 2
        if times[mid] <= t:
            left = mid
        else:
            right = mid

    t0, v0 = times[left], voltages[left]
    t1, v1 = times[right], voltages[right]
    alpha = (t - t0) / (t1 - t0)
    return float(v0 + alpha * (v1 - v0))


def evaluate_grid(series: SampleSeries, t: np.ndarray) -> np.ndarray:
    """Vectorised evaluate() over an array of times."""
    times = series.times
    voltages = series.voltages
    t = np.asarray(t, dtype=np.float64)

    out = np.empty_like(t)
    below = t <= times[0]
    above = t >= times[-1]
    out[below] = voltages[0]
    out[above & ~below] = voltages[-1]

    inside = ~(below | above)
    if np.any(inside):
        ti = t[inside]
        # last breakpoint with time <= t, same as evaluate()'s `left`
        left = np.searchsorted(times, ti, side="right") - 1
        right = left + 1
        t0 = times[left]
        t1 = times[right]
        v0 = voltages[left]
        v1 = voltages[right]
        out[inside] = v0 + (ti - t0) / (t1 - t0) * (v1 - v0)
    return out
