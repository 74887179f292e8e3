"""CLI entrypoints for hostpulse collection and diagnostics."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict, replace
from pathlib import Path

from hostpulse_core import FatalSetupError, build_doctor_payload, load_config

from .runner import run_collection


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _load(args: argparse.Namespace):
    cfg = load_config(Path(args.config).expanduser() if getattr(args, "config", None) else None)
    if getattr(args, "interval", None) is not None:
        cfg.sampling = replace(cfg.sampling, cpu_interval_s=max(0.1, float(args.interval)))
    if getattr(args, "no_html", False):
        cfg.report = replace(cfg.report, write_html=False)
    return cfg


def cmd_collect(args: argparse.Namespace) -> int:
    cfg = _load(args)
    base_dir = Path(args.base_dir).expanduser().resolve() if getattr(args, "base_dir", None) else None
    try:
        result = run_collection(cfg, base_dir=base_dir, crash_hooks=True)
    except FatalSetupError as exc:
        print(f"fatal: {exc}", file=sys.stderr)
        return 1

    snap = result.snapshot
    _print_json(
        {
            "timestamp": snap.timestamp.isoformat(),
            "environment": snap.environment.kind.value,
            "cpu_usage_percent": snap.cpu.usage_percent,
            "memory_used_percent": snap.memory.used_percent if snap.memory else None,
            "primary_volume": snap.disks.primary.mountpoint if snap.disks.primary else None,
            "cpu_temperature": {
                "value_c": snap.cpu_temperature.value_c,
                "provenance": snap.cpu_temperature.provenance.value,
            },
            "alerts": [a.message for a in result.alerts],
            "reports": asdict(result.reports),
            "warnings": result.warnings,
        }
    )
    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    cfg = _load(args)
    _print_json(build_doctor_payload(cfg))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hostpulse", description="Point-in-time host health snapshot")
    parser.add_argument("--config", default=None, help="Path to config.json")
    sub = parser.add_subparsers(dest="command")

    collect_cmd = sub.add_parser("collect", help="Collect one snapshot and write reports")
    collect_cmd.add_argument("--base-dir", default=None, help="Directory holding logs/, reports/ and data/")
    collect_cmd.add_argument("--interval", type=float, default=None, help="CPU sampling interval in seconds")
    collect_cmd.add_argument("--no-html", action="store_true", help="Skip the HTML report")
    collect_cmd.set_defaults(func=cmd_collect)

    doctor_cmd = sub.add_parser("doctor", help="Print environment and data source availability")
    doctor_cmd.set_defaults(func=cmd_doctor)

    parser.set_defaults(func=cmd_collect)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
