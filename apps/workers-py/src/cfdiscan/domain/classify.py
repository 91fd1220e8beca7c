"""Direction and type classification used to reorganize invoice files."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from . import constants
from .cfdi import DocumentType, InvoiceRecord


def type_branch(document_type: DocumentType) -> str:
    if document_type is DocumentType.INCOME:
        return constants.TYPE_INCOME
    if document_type is DocumentType.EXPENSE:
        return constants.TYPE_EXPENSE
    return constants.TYPE_COMPLEMENT


def direction_branch(invoice: InvoiceRecord, group_tax_id: str) -> Optional[str]:
    wanted = group_tax_id.upper()
    if (invoice.issuer_tax_id or "").upper() == wanted:
        return constants.DIRECTION_ISSUED
    if (invoice.recipient_tax_id or "").upper() == wanted:
        return constants.DIRECTION_RECEIVED
    return None


def classify(invoice: InvoiceRecord, group_tax_id: Optional[str]) -> str:
    """Return the relative directory fragment an invoice belongs in.

    ``None`` disables grouping and yields ``""``. An empty tax ID groups by
    type only. A tax ID matching neither party yields ``"/<type>"``: the
    direction segment is left empty and the file lands next to the type-only
    layout.
    """
    if group_tax_id is None:
        return ""
    branch = type_branch(invoice.document_type)
    if not group_tax_id:
        return branch
    direction = direction_branch(invoice, group_tax_id) or ""
    return f"{direction}/{branch}"


def planned_directories(group_tax_id: Optional[str]) -> List[str]:
    if group_tax_id is None:
        return []
    if not group_tax_id:
        return list(constants.TYPE_BRANCHES)
    planned: List[str] = []
    for direction in constants.DIRECTIONS:
        planned.append(direction)
        planned.extend(f"{direction}/{branch}" for branch in constants.TYPE_BRANCHES)
    return planned


def destination_dir(root: Path, fragment: str) -> Path:
    parts = [part for part in fragment.split("/") if part]
    return root.joinpath(*parts)
