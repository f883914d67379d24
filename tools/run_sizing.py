#!/usr/bin/env python3

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

ROOT = Path(__file__).resolve().parents[1]

# Allow running as "python tools/run_sizing.py" (so repo root is importable)
sys.path.insert(0, str(ROOT))

from cable_core import CableSizingEngine, SizingRequest, SizingResult  # noqa: E402
from cable_core.export_payload import build_payload  # noqa: E402
from cable_core.reference_data import default_reference_data, load_reference_data  # noqa: E402


def _read_request(path: Path) -> SizingRequest:
    # YAML is a superset of JSON, one loader covers both
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Request root must be a dict: {path}")
    return SizingRequest.from_dict(data)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Size one cable circuit against the reference catalog.")
    ap.add_argument("--request", required=True, help="Request file (YAML or JSON).")
    ap.add_argument(
        "--reference",
        default=None,
        help="Reference catalog YAML (default: packaged cable_core/data/cop_appendix6.yaml).",
    )
    ap.add_argument("--out", default=None, help="Output JSON path (default: stdout).")
    ap.add_argument("--verbose", action="store_true", help="Log resolution and escalation steps.")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    reference = load_reference_data(args.reference) if args.reference else default_reference_data()
    try:
        request = _read_request(Path(args.request))
    except ValueError as exc:
        ap.error(str(exc))
    outcome = CableSizingEngine(reference).size(request)
    payload = build_payload(outcome, request)

    text = json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
    return 0 if isinstance(outcome, SizingResult) else 2


if __name__ == "__main__":
    raise SystemExit(main())
