#!/usr/bin/env python3
"""Synthetic Nanion export generator for manual and performance runs.

Generates workbooks laid out like the instrument export:
- Row 1: instrument title
- Row 2: "Sweeps" label, total sweep count in column B
- Row 3: protocol row ("IV Peak" for activation, "Inact" / "Act" for inactivation)
- Row 4: recording date
- Row 5: "Results" marker
- Row 6: "Parameter" row with the column labels
- Row 7: units
- Row 8+: one row per well
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

PROTOCOL_STRIDES = {"activation": 6, "inactivation": 7}
FIRST_DATA_COLUMN = 5
DATA_POINTS_PER_GROUP = 23


def protocol_row(protocol: str) -> list[Any]:
    if protocol == "activation":
        return ["Protocol", "IV Peak"]
    return ["Protocol", "Inact", "Act"]


def generate_export_rows(
    protocol: str,
    wells: int,
    iv_groups: int,
    seed: int = 42,
) -> list[list[Any]]:
    """Build the full cell grid of one export.

    Args:
        protocol: "activation" or "inactivation"
        wells: number of data rows
        iv_groups: number of IV blocks; drives both the sweep count and the width
        seed: random seed for reproducible values
    """
    rng = np.random.default_rng(seed)
    stride = PROTOCOL_STRIDES[protocol]
    width = FIRST_DATA_COLUMN + stride * iv_groups
    total_sweeps = iv_groups * DATA_POINTS_PER_GROUP

    labels = ["Parameter", "Well", "Compound", "Conc", "Time"]
    for block in range(iv_groups):
        labels.extend(f"B{block + 1}_{k + 1}" for k in range(stride))

    rows: list[list[Any]] = [
        ["Nanion SyncroPatch 384 export", "Chip 1"],
        ["Sweeps", total_sweeps],
        protocol_row(protocol),
        ["Date", pd.Timestamp("2024-03-01").strftime("%Y-%m-%d")],
        ["Results"],
        labels,
        ["Unit", "", "", "uM", "s"] + ["MOhm", "MOhm", "pF", "pA", "pA", "mV", "pA"][:stride] * iv_groups,
    ]

    values = np.round(rng.normal(loc=0.0, scale=250.0, size=(wells, width - FIRST_DATA_COLUMN)), 3)
    for i in range(wells):
        row: list[Any] = [f"{chr(65 + i // 24 % 16)}{i % 24 + 1:02d}", i + 1, "cmpd", 1.0, 0.5 * i]
        row.extend(values[i].tolist())
        rows.append(row)
    return rows


def write_export(output_path: Path, rows: list[list[Any]]) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    width = max(len(r) for r in rows)
    frame = pd.DataFrame([r + [None] * (width - len(r)) for r in rows])
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name="Results", header=False, index=False)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic Nanion patch-clamp exports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 10 activation + 10 inactivation files, 96 wells each
  %(prog)s out/ --files 10

  # one large inactivation file
  %(prog)s out/ --files 1 --protocol inactivation --wells 384 --iv-groups 12
        """,
    )
    parser.add_argument("output_dir", type=Path, help="Directory for the generated workbooks")
    parser.add_argument("--files", type=int, default=5, help="Files per protocol (default: 5)")
    parser.add_argument(
        "--protocol",
        choices=["activation", "inactivation", "both"],
        default="both",
        help="Protocol variant(s) to generate (default: both)",
    )
    parser.add_argument("--wells", type=int, default=96, help="Data rows per file (default: 96)")
    parser.add_argument("--iv-groups", type=int, default=4, help="IV blocks per file (default: 4)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--dry-run", action="store_true", help="Show the plan without writing files")
    args = parser.parse_args()

    if args.files <= 0 or args.wells <= 0 or args.iv_groups <= 0:
        print("Error: --files, --wells and --iv-groups must be positive", file=sys.stderr)
        return 1

    protocols = ["activation", "inactivation"] if args.protocol == "both" else [args.protocol]
    print("Export generation plan:")
    print(f"  Output directory: {args.output_dir}")
    print(f"  Protocols: {', '.join(protocols)}")
    print(f"  Files per protocol: {args.files}")
    print(f"  Wells per file: {args.wells}")
    print(f"  IV groups per file: {args.iv_groups}")
    if args.dry_run:
        print("\n[DRY RUN] Would generate files but not creating them.")
        return 0

    try:
        for protocol in protocols:
            for n in range(args.files):
                path = args.output_dir / f"{protocol}_{n + 1:03d}.xlsx"
                rows = generate_export_rows(protocol, args.wells, args.iv_groups, seed=args.seed + n)
                write_export(path, rows)
                print(f"Created export: {path}")
    except OSError as e:
        print(f"\nError generating exports: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
