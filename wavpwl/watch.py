"""wavpwl/watch.py — Convert a simulator's PWL output whenever it shows up.

The producer (a circuit simulator) is not coordinated with: no locks, no
notifications. A file is considered finished once its size has stopped
changing for a few polls:

  WAITING_FOR_FILE   poll existence every poll_interval
  DETECTED_UNSTABLE  poll size every stability_interval; N unchanged nonzero
                     reads -> STABLE, or STABLE anyway after max attempts
  STABLE             grace delay, re-check the file is still there
  CONVERTING         PWL -> WAV; delete the input on success, keep it on
                     failure so the next detection retries it

Time, filesystem probing and deletion are injected so the machine can be
driven by a fake clock in tests.
"""

from __future__ import annotations

import enum
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from wavpwl.config import WatchTiming
from wavpwl.errors import ConversionError, ConversionWarning
from wavpwl.pwl_to_wav import pwl_to_wav


class WatchPhase(enum.Enum):
    WAITING_FOR_FILE = "waiting_for_file"
    DETECTED_UNSTABLE = "detected_unstable"
    STABLE = "stable"
    CONVERTING = "converting"


class Clock:
    """Real time; tests substitute an object with a fake sleep()."""

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


class FileProbe:
    def exists(self, path: Path) -> bool:
        return path.exists()

    def size(self, path: Path) -> Optional[int]:
        """Byte size, or None if the file is gone."""
        try:
            return path.stat().st_size
        except FileNotFoundError:
            return None


@dataclass
class WatchState:
    path: Path
    last_known_size: int = 0
    consecutive_stable_reads: int = 0
    attempts: int = 0
    best_effort: bool = False


@dataclass
class CycleResult:
    converted: bool
    deleted: bool = False
    error: Optional[ConversionError] = None


class WatchController:
    def __init__(
        self,
        path,
        convert: Callable[[Path], object],
        timing: Optional[WatchTiming] = None,
        clock=None,
        probe=None,
        remove: Callable[[Path], None] = os.remove,
    ):
        self.path = Path(path)
        self.convert = convert
        self.timing = timing or WatchTiming()
        self.clock = clock or Clock()
        self.probe = probe or FileProbe()
        self.remove = remove
        self.state = WatchState(self.path)

        # A file that is already there may still be mid-write.
        if self.probe.exists(self.path):
            print("[Watch] File found, waiting for write to complete...")
            self.phase = WatchPhase.DETECTED_UNSTABLE
        else:
            self.phase = WatchPhase.WAITING_FOR_FILE

    def _reset(self) -> None:
        self.state = WatchState(self.path)

    def _sleep_ms(self, ms: int) -> None:
        self.clock.sleep(ms / 1000.0)

    def step(self) -> Optional[CycleResult]:
        """Run one transition. Returns a CycleResult after a conversion attempt."""
        if self.phase is WatchPhase.WAITING_FOR_FILE:
            self._wait_for_file()
        elif self.phase is WatchPhase.DETECTED_UNSTABLE:
            self._check_stability()
        elif self.phase is WatchPhase.STABLE:
            self._grace_delay()
        else:
            return self._convert()
        return None

    def _wait_for_file(self) -> None:
        self._sleep_ms(self.timing.poll_interval_ms)
        if self.probe.exists(self.path):
            print("[Watch] File detected, waiting for write to complete...")
            self._reset()
            self.phase = WatchPhase.DETECTED_UNSTABLE

    def _check_stability(self) -> None:
        self._sleep_ms(self.timing.stability_interval_ms)
        st = self.state
        st.attempts += 1

        size = self.probe.size(self.path)
        if size is None:
            print("[Watch] File disappeared, waiting for it again...")
            self._reset()
            self.phase = WatchPhase.WAITING_FOR_FILE
            return

        if size == st.last_known_size and size > 0:
            st.consecutive_stable_reads += 1
            if st.consecutive_stable_reads >= self.timing.stable_reads_required:
                self.phase = WatchPhase.STABLE
                return
        else:
            st.consecutive_stable_reads = 0
            st.last_known_size = size

        if st.attempts >= self.timing.stability_attempts:
            print("[Watch] File size still changing, converting anyway")
            st.best_effort = True
            self.phase = WatchPhase.STABLE

    def _grace_delay(self) -> None:
        print(f"[Watch] File appears stable, waiting additional {self.timing.grace_delay_ms}ms...")
        self._sleep_ms(self.timing.grace_delay_ms)
        if not self.probe.exists(self.path):
            self._reset()
            self.phase = WatchPhase.WAITING_FOR_FILE
            return
        self.phase = WatchPhase.CONVERTING

    def _convert(self) -> CycleResult:
        print("[Watch] Converting...")
        self._reset()
        self.phase = WatchPhase.WAITING_FOR_FILE
        try:
            self.convert(self.path)
        except ConversionError as exc:
            print(f"[Watch] Error during conversion: {exc}", file=sys.stderr)
            print()
            return CycleResult(converted=False, error=exc)

        print("[Watch] Conversion successful!")
        try:
            self.remove(self.path)
        except OSError as exc:
            warning = ConversionWarning(f"Could not delete input file: {exc}")
            print(f"[Watch] Warning: {warning}", file=sys.stderr)
            print()
            return CycleResult(converted=True, deleted=False, error=warning)

        print("[Watch] Input file deleted, waiting for next export...")
        print()
        return CycleResult(converted=True, deleted=True)

    def run(self, max_conversions: Optional[int] = None) -> None:
        """Loop forever, or until `max_conversions` attempts have been made."""
        attempts = 0
        while max_conversions is None or attempts < max_conversions:
            if self.step() is not None:
                attempts += 1


def watch_pwl_to_wav(
    input_path,
    output_path,
    sample_rate: int = 44100,
    voltage_scale: float = 1.0,
    column: Optional[str] = None,
    timing: Optional[WatchTiming] = None,
) -> None:
    print(f"[Watch] Watching file: {input_path}")
    print(f"[Watch] Will convert to WAV: {output_path}")
    if column is not None:
        print(f"[Watch] Extracting column: {column}")
    print("[Watch] Waiting for file to be created/updated...")
    print("[Watch] Press Ctrl+C to stop watching...")
    print()

    controller = WatchController(
        input_path,
        convert=lambda p: pwl_to_wav(p, output_path, sample_rate, voltage_scale, column),
        timing=timing,
    )
    controller.run()
