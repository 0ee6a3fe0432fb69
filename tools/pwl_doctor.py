"""Setup doctor for wavpwl.

Run:
    python tools/pwl_doctor.py
"""

from __future__ import annotations

import importlib.util
import os
import platform
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass
class CheckResult:
    status: str
    name: str
    detail: str


def _has_module(module_name: str) -> bool:
    return importlib.util.find_spec(module_name) is not None


def _print_results(results: list[CheckResult]) -> int:
    status_icon = {"PASS": "[PASS]", "WARN": "[WARN]", "FAIL": "[FAIL]"}
    fail_count = 0
    warn_count = 0
    for r in results:
        print(f"{status_icon[r.status]} {r.name}: {r.detail}")
        if r.status == "FAIL":
            fail_count += 1
        elif r.status == "WARN":
            warn_count += 1

    print()
    print(f"Summary: {len(results)} checks, {fail_count} fail, {warn_count} warn")
    return 1 if fail_count else 0


def collect_checks(project_root: Path) -> list[CheckResult]:
    results: list[CheckResult] = [
        CheckResult("PASS", "Python", f"{sys.executable} ({sys.version.split()[0]})"),
        CheckResult("PASS", "Platform", f"{platform.system()} {platform.release()} ({platform.machine()})"),
    ]

    missing = False
    for module_name in ("numpy", "soundfile", "yaml"):
        if _has_module(module_name):
            results.append(CheckResult("PASS", f"Module:{module_name}", "installed"))
        else:
            results.append(CheckResult("FAIL", f"Module:{module_name}", "missing"))
            missing = True
    if missing:
        return results

    import soundfile as sf

    if "WAV" in sf.available_formats():
        results.append(CheckResult("PASS", "libsndfile", f"{sf.__libsndfile_version__} (WAV supported)"))
    else:
        results.append(CheckResult("FAIL", "libsndfile", "WAV format not available"))

    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))
    from wavpwl.config import load_config
    from wavpwl.errors import ConversionError

    cfg_env = os.environ.get("WAVPWL_CONFIG", "").strip()
    try:
        cfg = load_config()
    except ConversionError as exc:
        results.append(CheckResult("FAIL", "Config", str(exc)))
        return results

    if cfg.source is None:
        where = cfg_env or str(project_root / "config.yaml")
        results.append(CheckResult("WARN", "Config", f"{where} not found, using built-in defaults"))
    else:
        results.append(CheckResult("PASS", "Config", str(cfg.source)))

    results.append(
        CheckResult(
            "PASS",
            "Defaults",
            f"sample_rate={cfg.sample_rate} voltage_scale={cfg.voltage_scale} "
            f"decimate={cfg.decimate} column={cfg.column or 'auto'}",
        )
    )

    w = cfg.watch
    settle_ms = w.stability_interval_ms * (w.stable_reads_required + 1)
    ceiling_ms = w.stability_interval_ms * w.stability_attempts
    if settle_ms > ceiling_ms:
        results.append(
            CheckResult(
                "WARN",
                "Watch timing",
                f"{w.stable_reads_required} stable reads need {settle_ms}ms but the ceiling is "
                f"{ceiling_ms}ms; every file will be converted via the fallback",
            )
        )
    else:
        results.append(
            CheckResult("PASS", "Watch timing", f"settles in >= {settle_ms}ms, gives up after {ceiling_ms}ms")
        )
    return results


def main() -> int:
    project_root = Path(__file__).resolve().parent.parent
    exit_code = _print_results(collect_checks(project_root))
    if exit_code:
        print("\nRecommended next step: fix FAIL items, then rerun doctor.")
    else:
        print("\nDoctor checks passed. Try:")
        print("  wavpwl watch -i sim/out.txt -o sim/out.wav")
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
