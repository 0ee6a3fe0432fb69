"""Command-line front end: convert between WAV and SPICE PWL.

Examples:
  wavpwl wav2pwl -i tone.wav -o tone.pwl -v 0.5 -d 4
  wavpwl pwl2wav -i out.txt -o out.wav -s 48000 -c out
  wavpwl watch -i sim/out.txt -o sim/out.wav
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from wavpwl.config import Config, load_config
from wavpwl.errors import ConversionError
from wavpwl.pwl_to_wav import pwl_to_wav
from wavpwl.wav_to_pwl import wav_to_pwl
from wavpwl.watch import watch_pwl_to_wav


def _add_pwl_to_wav_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("-i", "--input", required=True, type=Path, help="Input PWL file.")
    p.add_argument("-o", "--output", required=True, type=Path, help="Output WAV file.")
    p.add_argument(
        "-s",
        "--sample-rate",
        type=int,
        default=None,
        help="Sample rate for the output WAV (default: 44100 Hz or config).",
    )
    p.add_argument(
        "-v",
        "--voltage-scale",
        type=float,
        default=None,
        help="Voltage that maps to full-scale PCM (default: 1.0 or config).",
    )
    p.add_argument(
        "-c",
        "--column",
        default=None,
        help='Column name or index to extract (e.g. "out" or "5"). Defaults to "out" if available.',
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wavpwl",
        description="Convert between WAV and SPICE PWL formats.",
    )
    parser.add_argument("--config", default=None, help="Path to a config.yaml with defaults.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("wav2pwl", help="Convert a WAV file to PWL format.")
    p.add_argument("-i", "--input", required=True, type=Path, help="Input WAV file.")
    p.add_argument("-o", "--output", required=True, type=Path, help="Output PWL file.")
    p.add_argument(
        "-v",
        "--voltage-scale",
        type=float,
        default=None,
        help="Peak voltage for full-scale samples (default: 1.0 or config).",
    )
    p.add_argument(
        "-d",
        "--decimate",
        type=int,
        default=None,
        help="Output every Nth sample (default: 1 = no decimation).",
    )

    p = sub.add_parser("pwl2wav", help="Convert a PWL file to WAV once.")
    _add_pwl_to_wav_args(p)

    p = sub.add_parser("watch", help="Watch a PWL file and convert it to WAV whenever it is written.")
    _add_pwl_to_wav_args(p)

    return parser


def _pick(value, default):
    return default if value is None else value


def run(args: argparse.Namespace, cfg: Config) -> None:
    if args.command == "wav2pwl":
        wav_to_pwl(
            args.input,
            args.output,
            voltage_scale=_pick(args.voltage_scale, cfg.voltage_scale),
            decimate=_pick(args.decimate, cfg.decimate),
        )
        return

    sample_rate = _pick(args.sample_rate, cfg.sample_rate)
    voltage_scale = _pick(args.voltage_scale, cfg.voltage_scale)
    column = _pick(args.column, cfg.column)

    if args.command == "pwl2wav":
        pwl_to_wav(args.input, args.output, sample_rate, voltage_scale, column)
    else:
        watch_pwl_to_wav(args.input, args.output, sample_rate, voltage_scale, column, timing=cfg.watch)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = load_config(args.config)
        run(args, cfg)
    except ConversionError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nStopped.", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
