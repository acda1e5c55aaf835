#!/usr/bin/env python3
"""Write an enriched ITSM dashboard snapshot as JSON.

Run from ``fastapi-backend/src``::

    python -m generators.generate_itsm_snapshot --window 6m --seed 7 --out snapshot.json
"""
from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional, TypedDict

from dateutil import parser as date_parser

from errors import MetricsError
from generators.snapshot_generator import SnapshotGenerator, utc_today
from generators.sources import SyntheticSource
from reports.derived_metrics import DEFAULT_SLA_TARGET, enrich


class GenerateItsmSnapshotArgs(TypedDict, total=False):
    window: Optional[str]
    start: Optional[str]
    end: Optional[str]
    seed: Optional[int]
    anchor: Optional[str]
    sla_target: float
    out: Optional[str]


def generate_itsm_snapshot(args: GenerateItsmSnapshotArgs) -> dict:
    anchor: date = (
        date_parser.isoparse(args["anchor"]).date() if args.get("anchor") else utc_today()
    )
    generator = SnapshotGenerator(
        source=SyntheticSource(seed=args.get("seed")),
        clock=lambda: anchor,
    )
    snapshot = generator.generate_snapshot(
        args.get("window"), start=args.get("start"), end=args.get("end")
    )
    view = enrich(snapshot, sla_target=args.get("sla_target", DEFAULT_SLA_TARGET))
    return view.model_dump(mode="json", by_alias=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a synthetic ITSM dashboard snapshot")
    parser.add_argument("--window", default=None, help="1m, 3m, 6m, 12m or YYYY-MM..YYYY-MM (default 12m)")
    parser.add_argument("--start", default=None, help="First month of an explicit window (YYYY-MM)")
    parser.add_argument("--end", default=None, help="Last month of an explicit window (YYYY-MM)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible series")
    parser.add_argument("--anchor", default=None, help="Pin the current date (YYYY-MM-DD)")
    parser.add_argument("--sla-target", type=float, default=DEFAULT_SLA_TARGET, help="SLA compliance target %%")
    parser.add_argument("--out", default=None, help="Output JSON path (stdout when omitted)")
    return parser


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        payload = generate_itsm_snapshot(
            GenerateItsmSnapshotArgs(
                window=args.window,
                start=args.start,
                end=args.end,
                seed=args.seed,
                anchor=args.anchor,
                sla_target=args.sla_target,
                out=args.out,
            )
        )
    except MetricsError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except ValueError as exc:
        print(f"error: invalid --anchor: {exc}", file=sys.stderr)
        return 2

    text = json.dumps(payload, indent=2)
    if args.out:
        path = Path(args.out)
        path.write_text(text + "\n", encoding="utf-8")
        print(f"Wrote {path}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
