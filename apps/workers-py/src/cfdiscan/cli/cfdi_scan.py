#!/usr/bin/env python3
"""
cfdi_scan.py
------------

Look for CFDI XML invoices in a directory and total their content.

Key behaviors:
- Writes <dir>/<dir-name>.csv with one row per invoice (sorted by date) and
  a final totals row.
- With --rename, moves each XML (and the PDF rendition that shares its name
  or mentions its UUID) to {prefix}{date}_{uuid}{suffix}.
- With --group-rfc, classifies into emitidas/recibidas and
  ingresos/egresos/complementos, and totals only income invoices. Pass an
  empty value (--group-rfc "") to split by type only.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import List, Optional

from cfdiscan.domain.pdf import configure_pdfminer_logging
from cfdiscan.usecases.reconcile import ScanConfig, run_scan


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Find CFDI XML files in a directory and total their content."
    )
    ap.add_argument(
        "-d",
        "--dir",
        default=os.environ.get("CFDI_SCAN_DIR", "."),
        help="Directory holding the CFDI files (default: CFDI_SCAN_DIR or current dir).",
    )
    ap.add_argument(
        "--rename",
        action="store_true",
        help="Rename invoices (and their PDFs) to {date}_{uuid}.",
    )
    ap.add_argument("--prefix", default="", help="Text prepended to renamed files.")
    ap.add_argument("--suffix", default="", help="Text appended to renamed files.")
    ap.add_argument(
        "--group-rfc",
        default=os.environ.get("CFDI_GROUP_RFC"),
        help=(
            "Classify renamed files into subdirectories using this RFC to tell "
            "issued from received invoices; an empty value groups by type only."
        ),
    )
    ap.add_argument(
        "--json-output",
        default=None,
        help="Also write the parsed invoices as JSON to this path.",
    )
    ap.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print what would be moved.",
    )
    ap.add_argument(
        "--debug",
        action="store_true",
        help="Verbose logging, including pdfminer diagnostics.",
    )
    return ap.parse_args(argv)


def build_config(args: argparse.Namespace) -> ScanConfig:
    return ScanConfig(
        directory=Path(args.dir).expanduser(),
        rename=args.rename,
        prefix=args.prefix,
        suffix=args.suffix,
        group_tax_id=args.group_rfc,
        dry_run=args.dry_run,
        json_output=Path(args.json_output) if args.json_output else None,
    )


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format="%(message)s")
    configure_pdfminer_logging(args.debug)
    result = run_scan(build_config(args))
    logging.info(
        "Scanned %d XML files, %d invoices → %s",
        result.discovered,
        len(result.invoices),
        result.csv_path,
    )


if __name__ == "__main__":  # pragma: no cover
    main()
