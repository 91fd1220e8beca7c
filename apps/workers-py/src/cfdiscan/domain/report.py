"""CSV and JSON rendering of scanned invoices and their totals."""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from pathlib import Path
from typing import List, Optional, Sequence

from .cfdi import ZERO, InvoiceRecord

TEXT_FIELDS = [
    "fecha",
    "uuid",
    "version",
    "rfc_emisor",
    "emisor",
    "rfc_receptor",
    "receptor",
]
CLASSIFIED_TEXT_FIELDS = TEXT_FIELDS + ["tipo", "moneda"]
MONEY_FIELDS = ["subtotal", "iva", "retencion_iva", "retencion_isr", "total"]

CENT = Decimal("0.01")
MISSING = "undefined"


@dataclass
class AggregateTotals:
    subtotal: Decimal = ZERO
    iva: Decimal = ZERO
    iva_retention: Decimal = ZERO
    isr_retention: Decimal = ZERO
    total: Decimal = ZERO

    def add(self, invoice: InvoiceRecord) -> None:
        self.subtotal += invoice.subtotal
        self.iva += invoice.iva
        self.iva_retention += invoice.iva_retention
        self.isr_retention += invoice.isr_retention
        self.total += invoice.declared_total

    def values(self) -> List[Decimal]:
        return [self.subtotal, self.iva, self.iva_retention, self.isr_retention, self.total]


def format_money(value: Decimal) -> str:
    """Two decimals, halves rounded away from zero."""
    with localcontext() as ctx:
        # quantize needs a digit for every place down to the cents
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return f"{value.quantize(CENT, rounding=ROUND_HALF_UP):f}"


def text_cell(value: Optional[str]) -> str:
    return MISSING if value is None else str(value)


def header_fields(include_direction_columns: bool) -> List[str]:
    text = CLASSIFIED_TEXT_FIELDS if include_direction_columns else TEXT_FIELDS
    return text + MONEY_FIELDS


def invoice_row(invoice: InvoiceRecord, include_direction_columns: bool) -> List[str]:
    row = [
        text_cell(invoice.issue_date),
        text_cell(invoice.stamp_uuid),
        text_cell(invoice.version),
        text_cell(invoice.issuer_tax_id),
        text_cell(invoice.issuer_name),
        text_cell(invoice.recipient_tax_id),
        text_cell(invoice.recipient_name),
    ]
    if include_direction_columns:
        row.append(text_cell(invoice.document_type_code))
        row.append(text_cell(invoice.currency))
    row.extend(
        format_money(amount)
        for amount in (
            invoice.subtotal,
            invoice.iva,
            invoice.iva_retention,
            invoice.isr_retention,
            invoice.declared_total,
        )
    )
    return row


def format_report(
    invoices: Sequence[InvoiceRecord],
    totals: AggregateTotals,
    include_direction_columns: bool,
) -> str:
    """Render the report: bare header, fully quoted rows, then a totals row."""
    fields = header_fields(include_direction_columns)
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(fields)
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for invoice in invoices:
        writer.writerow(invoice_row(invoice, include_direction_columns))
    blanks = [""] * (len(fields) - len(MONEY_FIELDS))
    writer.writerow(blanks + [format_money(value) for value in totals.values()])
    return buffer.getvalue()


def write_csv(
    invoices: Sequence[InvoiceRecord],
    totals: AggregateTotals,
    output_path: Path,
    include_direction_columns: bool = False,
) -> None:
    content = format_report(invoices, totals, include_direction_columns)
    with output_path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(content)


def write_json(invoices: Sequence[InvoiceRecord], output_path: Path) -> None:
    with output_path.open("w", encoding="utf-8") as fh:
        json.dump([rec.to_dict() for rec in invoices], fh, ensure_ascii=False, indent=2)
