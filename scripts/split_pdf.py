#!/usr/bin/env python3
"""Run a split/merge policy on local files without the HTTP service.

Usage:
    python scripts/split_pdf.py split orders.pdf
    python scripts/split_pdf.py classify-split orders.pdf --layout separate
    python scripts/split_pdf.py merge labels.pdf invoices.pdf --strict

Crop geometry and keywords come from the same env vars / .env as the API.
"""
from __future__ import annotations

import argparse
import sys

# Ensure project root is on sys.path
sys.path.insert(0, ".")

from labelsplit.core.errors import LabelSplitError
from labelsplit.core.logging import setup_logging
from labelsplit.core.settings import get_settings
from labelsplit.pipeline.config import crop_config_from_settings, rules_from_settings
from labelsplit.pipeline.runner import build_policy, run_policy

_COMMANDS = {
    "split": "fixed_split",
    "classify-split": "content_gated",
    "merge": "pre_split_merge",
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Split label/invoice PDFs locally.")
    p.add_argument("command", choices=sorted(_COMMANDS))
    p.add_argument("inputs", nargs="+", help="Input PDF(s); merge takes labels then invoices.")
    p.add_argument("--out", default=None, help="Output root (default: OUTPUT_DIR)")
    p.add_argument("--layout", choices=["interleaved", "separate"], default="interleaved")
    p.add_argument(
        "--strict",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="merge: fail on unequal page counts (default: STRICT_MERGE)",
    )
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging()
    settings = get_settings()

    policy = build_policy(
        _COMMANDS[args.command],
        crops=crop_config_from_settings(settings),
        rules=rules_from_settings(settings),
        layout=args.layout,
        strict=settings.strict_merge if args.strict is None else args.strict,
    )
    if len(args.inputs) != policy.input_count:
        print(f"{args.command} expects {policy.input_count} input file(s)", file=sys.stderr)
        return 2

    try:
        result = run_policy(policy, args.inputs, args.out or settings.output_dir)
    except LabelSplitError as exc:
        print(f"error ({exc.kind}): {exc.detail}", file=sys.stderr)
        return 1

    for f in result.files.values():
        print(f"{f.name}: {f.path} ({f.page_count} pages)")
    for page in result.skipped:
        print(f"skipped page {page.source_index + 1}: {page.reason}")
    if result.dropped:
        print(f"dropped {result.dropped} unpaired pages")
    return 0


if __name__ == "__main__":
    sys.exit(main())
