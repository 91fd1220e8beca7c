"""Scan a CFDI directory: parse, optionally reorganize, aggregate and report.

Stages run in order and share nothing but their return values:

- discover: list the ``*.xml`` files of the directory
- parse_all: turn each file into an InvoiceRecord, skipping non-CFDI XML
- reorganize (only with ``rename``): index companion PDFs, create the
  classification directories, then move every XML and its PDF under a
  canonical ``{date}_{uuid}`` name
- aggregate: sort by issue date and accumulate totals

Any file-system error while moving aborts the scan. Files already moved stay
where they are.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..adapters.base import PageTextExtractor
from ..domain import constants
from ..domain import files as domain_files
from ..domain.cfdi import DocumentType, InvoiceRecord, parse_cfdi
from ..domain.classify import classify, destination_dir, planned_directories
from ..domain.identifiers import IdentifierIndex
from ..domain.pdf import pdf_text_pages
from ..domain.report import AggregateTotals, write_csv, write_json

logger = logging.getLogger(__name__)

ParsedFile = Tuple[Path, InvoiceRecord]


@dataclass
class ScanConfig:
    directory: Path
    rename: bool = False
    prefix: str = ""
    suffix: str = ""
    group_tax_id: Optional[str] = None
    dry_run: bool = False
    json_output: Optional[Path] = None

    @property
    def classified(self) -> bool:
        # An empty tax ID still groups, only without the direction split.
        return self.group_tax_id is not None


@dataclass
class ScanResult:
    invoices: List[InvoiceRecord]
    totals: AggregateTotals
    csv_path: Path
    discovered: int = 0
    moved: List[Tuple[Path, Path]] = field(default_factory=list)


def report_name(directory: Path) -> str:
    return directory.resolve().name or "cfdi"


def discover(directory: Path) -> List[Path]:
    if not directory.exists():
        raise FileNotFoundError(f"Input directory does not exist: {directory}")
    return domain_files.list_files(directory, constants.INVOICE_EXTENSION)


def log_invoice(record: InvoiceRecord) -> None:
    logger.info("   - uuid: %s", record.stamp_uuid)
    logger.info("   - fecha: %s", record.issue_date)
    logger.info("   - version: %s", record.version)
    logger.info("   - emisor: %s", record.issuer_name)
    logger.info("   - receptor: %s", record.recipient_name)
    logger.info("   - importe: %s", record.subtotal)


def parse_all(paths: Sequence[Path]) -> List[ParsedFile]:
    parsed: List[ParsedFile] = []
    for path in paths:
        logger.info(" - %s", path.name)
        text = path.read_text(encoding="utf-8-sig", errors="replace")
        record = parse_cfdi(text, source_name=path.stem)
        if record is None:
            continue
        log_invoice(record)
        parsed.append((path, record))
    return parsed


def canonical_stem(invoice: InvoiceRecord, prefix: str = "", suffix: str = "") -> Optional[str]:
    if not invoice.stamp_uuid or not invoice.issue_day:
        return None
    return domain_files.sanitize_filename(
        f"{prefix}{invoice.issue_day}_{invoice.stamp_uuid}{suffix}"
    )


def build_index(
    directory: Path, companions: Sequence[Path], extract_pages: PageTextExtractor
) -> IdentifierIndex:
    return IdentifierIndex.build(
        [path.name for path in companions],
        lambda name: extract_pages(directory / name),
    )


def find_companion(
    invoice: InvoiceRecord,
    by_stem: Dict[str, Path],
    index: IdentifierIndex,
    directory: Path,
) -> Optional[Path]:
    same_name = by_stem.get(invoice.source_name)
    if same_name is not None and same_name.exists():
        return same_name
    indexed = index.lookup(invoice.stamp_uuid)
    if indexed and (directory / indexed).exists():
        return directory / indexed
    return None


def reorganize(
    parsed: Sequence[ParsedFile],
    config: ScanConfig,
    extract_pages: PageTextExtractor = pdf_text_pages,
) -> Tuple[List[ParsedFile], List[Tuple[Path, Path]]]:
    """Move each invoice, and its companion PDF when one is found, to its canonical place."""
    directory = config.directory
    companions = domain_files.list_files(directory, constants.COMPANION_EXTENSION)
    index = build_index(directory, companions, extract_pages)
    by_stem: Dict[str, Path] = {}
    for path in companions:
        by_stem.setdefault(path.stem, path)

    fragments = [classify(record, config.group_tax_id) for _, record in parsed]
    if not config.dry_run:
        domain_files.ensure_directories(
            directory, planned_directories(config.group_tax_id) + fragments
        )

    moved: List[Tuple[Path, Path]] = []
    result: List[ParsedFile] = []
    for (path, record), fragment in zip(parsed, fragments):
        stem = canonical_stem(record, config.prefix, config.suffix)
        if stem is None:
            logger.warning("Leaving %s in place: missing stamp uuid or date", path.name)
            result.append((path, record))
            continue
        target_dir = destination_dir(directory, fragment)
        companion = find_companion(record, by_stem, index, directory)
        planned = [(path, target_dir / f"{stem}{constants.INVOICE_EXTENSION}")]
        if companion is not None:
            planned.append((companion, target_dir / f"{stem}{companion.suffix.lower()}"))
        for source, destination in planned:
            if config.dry_run:
                logger.info("[DRY] %s -> %s", source, destination)
                continue
            if domain_files.move_file(source, destination):
                logger.info("[MOVE] %s -> %s", source, destination)
                moved.append((source, destination))
        if config.dry_run:
            result.append((path, record))
        else:
            result.append((planned[0][1], replace(record, source_name=stem)))
    return result, moved


def aggregate(
    invoices: Sequence[InvoiceRecord], classified: bool
) -> Tuple[List[InvoiceRecord], AggregateTotals]:
    """Sort by issue date (ties keep discovery order) and sum the totals.

    With classification only income invoices count toward the totals.
    """
    ordered = sorted(invoices, key=lambda rec: rec.issue_date or "")
    totals = AggregateTotals()
    for record in ordered:
        if classified and record.document_type is not DocumentType.INCOME:
            continue
        totals.add(record)
    return ordered, totals


def run_scan(
    config: ScanConfig, extract_pages: PageTextExtractor = pdf_text_pages
) -> ScanResult:
    directory = config.directory
    name = report_name(directory)
    logger.info("Scanning '%s'...", name)
    paths = discover(directory)
    logger.info("%d xml files found.", len(paths))
    parsed = parse_all(paths)
    moved: List[Tuple[Path, Path]] = []
    if config.rename:
        parsed, moved = reorganize(parsed, config, extract_pages)
    invoices, totals = aggregate([record for _, record in parsed], config.classified)
    csv_path = directory / f"{name}.csv"
    write_csv(invoices, totals, csv_path, include_direction_columns=config.classified)
    if config.json_output:
        write_json(invoices, config.json_output)
    logger.info("Done: %d invoices -> %s", len(invoices), csv_path)
    return ScanResult(
        invoices=invoices,
        totals=totals,
        csv_path=csv_path,
        discovered=len(paths),
        moved=moved,
    )
