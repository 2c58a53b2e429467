#!/usr/bin/env python3
# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from pytwfl.analysis.fault_location import FaultLocation
from pytwfl.analysis.model.detection import DetectionConfig, DetectionOutcome
from pytwfl.analysis.wave_head_detector import WaveHeadDetector
from pytwfl.config.system_config_settings import SystemConfigSettings
from pytwfl.lib.constants import DEFAULT_END_A_LABEL, DEFAULT_END_B_LABEL, REPORT_DECIMALS
from pytwfl.lib.file_processor import FileProcessor
from pytwfl.lib.types import ExitCode
from pytwfl.startup.startup import StartUp
from pytwfl.version import __version__ as PYTWFL_VERSION
from pytwfl.waveform.errors import WaveformDecodeError
from pytwfl.waveform.parser.model.waveform_record import Phase, WaveformRecord
from pytwfl.waveform.parser.waveform_file import WaveformFile

LOG = logging.getLogger(__name__)

EXIT_OK: ExitCode = ExitCode(0)
EXIT_DETECTED: ExitCode = ExitCode(0)
EXIT_UNDETECTED: ExitCode = ExitCode(1)
EXIT_INPUT_ERROR: ExitCode = ExitCode(2)

DEFAULT_PREVIEW_SAMPLES: int = 10
PHASE_ALL: str = "all"

# argparse dest -> DetectionConfig field
CONFIG_OVERRIDES: dict[str, str] = {
    "sampling_interval_ms": "sampling_interval_ms",
    "wave_speed":           "wave_speed_km_per_ms",
    "line_length":          "line_length_km",
    "first_sigma":          "first_wave_sigma",
    "second_sigma":         "second_wave_sigma",
    "min_gap":              "min_samples_between_waves",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pytwfl",
        description="Traveling-wave fault location from fault-recorder waveform captures.",
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"{PYTWFL_VERSION}",
        help="Show PyTWFL version and exit.",
    )

    parser.add_argument(
        "--log-level",
        default=None,
        choices=["critical", "error", "warning", "info", "debug"],
        help="Log level (default: logging.log_level from system.json).",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # decode
    p_decode = sub.add_parser("decode", help="Decode one capture and print a header summary.")
    p_decode.add_argument("file", help="Waveform capture file (.all)")
    p_decode.add_argument("--preview", type=int, default=DEFAULT_PREVIEW_SAMPLES,
                          help=f"Number of phase A samples to print (default: {DEFAULT_PREVIEW_SAMPLES})")
    p_decode.add_argument("--json", action="store_true", help="Print the decoded record as JSON")
    p_decode.add_argument("--csv", default=None, help="Write the valid samples of all phases to this CSV file")
    p_decode.add_argument("--hexdump", type=int, default=0, metavar="BYTES",
                          help="Print a hexdump of the first BYTES bytes of the file")

    # locate
    p_locate = sub.add_parser("locate", help="Single-ended fault location from one capture.")
    p_locate.add_argument("file", help="Waveform capture file (.all)")
    p_locate.add_argument("--phase", default=Phase.A.value,
                          choices=[p.value for p in Phase] + [PHASE_ALL],
                          help="Phase to analyze (default: A)")
    p_locate.add_argument("--sampling-interval-ms", dest="sampling_interval_ms", type=float, default=None,
                          help="Sampling interval in ms")
    p_locate.add_argument("--wave-speed", dest="wave_speed", type=float, default=None,
                          help="Wave speed in km/ms")
    p_locate.add_argument("--line-length", dest="line_length", type=float, default=None,
                          help="Line length in km")
    p_locate.add_argument("--first-sigma", dest="first_sigma", type=float, default=None,
                          help="Incident-wave threshold multiplier")
    p_locate.add_argument("--second-sigma", dest="second_sigma", type=float, default=None,
                          help="Reflected-wave threshold multiplier")
    p_locate.add_argument("--min-gap", dest="min_gap", type=int, default=None,
                          help="Minimum samples between incident and reflected wave")
    p_locate.add_argument("--json", action="store_true", help="Print outcomes as JSON")

    # double-end
    p_double = sub.add_parser("double-end", help="Double-ended fault location from arrival times.")
    p_double.add_argument("--line-length", dest="line_length", type=float, required=True, help="Line length in km")
    p_double.add_argument("--wave-speed", dest="wave_speed", type=float, required=True, help="Wave speed in km/ms")
    p_double.add_argument("--ta", type=float, required=True, help="Arrival time at end A (ms)")
    p_double.add_argument("--tb", type=float, required=True, help="Arrival time at end B (ms)")
    p_double.add_argument("--end-a", default=DEFAULT_END_A_LABEL, help="Label of end A")
    p_double.add_argument("--end-b", default=DEFAULT_END_B_LABEL, help="Label of end B")
    p_double.add_argument("--json", action="store_true", help="Print the estimate as JSON")

    return parser


def _resolve_config(args: argparse.Namespace) -> DetectionConfig:
    base = SystemConfigSettings.detection_config().model_dump()
    for dest, field in CONFIG_OVERRIDES.items():
        value = getattr(args, dest, None)
        if value is not None:
            base[field] = value
    return DetectionConfig(**base)


def _decode(path: str) -> WaveformRecord:
    return WaveformFile.from_path(path).to_model()


def _cmd_decode(args: argparse.Namespace) -> int:
    record = _decode(args.file)

    if args.json:
        print(record.to_json())
    else:
        hdr = record.waveform_header
        print(f"file           = {record.source_name}")
        print(f"station / line = {hdr.station} / {hdr.line}")
        print(f"timestamp      = {hdr.year:04d}-{hdr.month:02d}-{hdr.day:02d} "
              f"{hdr.hour:02d}:{hdr.minute:02d}:{hdr.second:02d} us={hdr.micro_second or '-'}")
        print(f"gps            = freq {hdr.gps_frequency or '-'}, flag {hdr.gps_flag}")
        print(f"break / start  = {hdr.break_flag} / type {hdr.startup_type} "
              f"({hdr.startup_value_1}, {hdr.startup_value_2}, {hdr.startup_value_3})")
        print(f"samples        = {record.data_length} ({record.encoding.value})")
        preview = record.valid_samples(Phase.A)[: max(0, args.preview)]
        if preview.size:
            print("phase A        = " + ", ".join(f"{v:g}" for v in preview))

    if args.csv:
        rows: list[list[Any]] = [
            [i, float(a), float(b), float(c)]
            for i, (a, b, c) in enumerate(zip(record.valid_samples(Phase.A),
                                              record.valid_samples(Phase.B),
                                              record.valid_samples(Phase.C)))
        ]
        if not FileProcessor(args.csv).write_csv(rows, headers=["index", "A", "B", "C"]):
            print(f"error: failed to write CSV to {args.csv}", file=sys.stderr)
            return EXIT_INPUT_ERROR

    if args.hexdump > 0:
        for line in FileProcessor(args.file).hexdump(limit_bytes=args.hexdump):
            print(line)

    return EXIT_OK


def _print_outcome(outcome: DetectionOutcome) -> None:
    if outcome.is_detected:
        for line in outcome.result.summary_lines():
            print(line)
    else:
        print(f"phase          = {outcome.phase.value}")
        print(f"result         = undetermined ({outcome.reason.value})")


def _cmd_locate(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    record = _decode(args.file)
    detector = WaveHeadDetector(config)

    if args.phase == PHASE_ALL:
        outcomes = detector.detect_all_phases(record)
    else:
        phase = Phase(args.phase)
        outcomes = {phase: detector.detect_record(record, phase)}

    if args.json:
        payload = {p.value: o.model_dump(mode="json") for p, o in outcomes.items()}
        print(json.dumps(payload, indent=2))
    else:
        for i, outcome in enumerate(outcomes.values()):
            if i:
                print()
            _print_outcome(outcome)

    detected = any(o.is_detected for o in outcomes.values())
    return EXIT_DETECTED if detected else EXIT_UNDETECTED


def _cmd_double_end(args: argparse.Namespace) -> int:
    estimate = FaultLocation.double_end_by_times(args.line_length, args.wave_speed, args.ta, args.tb,
                                                 end_a=args.end_a, end_b=args.end_b)
    if args.json:
        print(estimate.model_dump_json(indent=2))
    else:
        d = REPORT_DECIMALS
        print(f"tA             = {args.ta:.{d}f} ms")
        print(f"tB             = {args.tb:.{d}f} ms")
        for line in estimate.summary_lines():
            print(line)
    return EXIT_OK


COMMANDS = {
    "decode":       _cmd_decode,
    "locate":       _cmd_locate,
    "double-end":   _cmd_double_end,
}


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    StartUp.initialize(log_level=args.log_level)
    LOG.debug("pytwfl %s: command=%s", PYTWFL_VERSION, args.command)

    try:
        return COMMANDS[args.command](args)
    except WaveformDecodeError as e:
        LOG.error("Decode failed (%s): %s", e.kind.value, e)
        print(f"error: {e.kind.value}: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except (FileNotFoundError, ValidationError, ValueError) as e:
        LOG.error("%s failed: %s", args.command, e)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR


if __name__ == "__main__":
    sys.exit(main())
