"""Parse CFDI XML documents into flat invoice records."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, Iterable, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from . import constants

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class DocumentType(Enum):
    INCOME = "I"
    EXPENSE = "E"
    PAYMENT = "P"
    UNKNOWN = ""

    @classmethod
    def from_code(cls, code: Optional[str]) -> "DocumentType":
        """Map a TipoDeComprobante letter; unmatched codes are UNKNOWN."""
        if code:
            for member in (cls.INCOME, cls.EXPENSE, cls.PAYMENT):
                if code == member.value:
                    return member
        return cls.UNKNOWN


class TaxKind(Enum):
    IVA = "002"
    ISR = "001"
    OTHER = ""

    @classmethod
    def from_code(cls, code: Optional[str]) -> "TaxKind":
        """Accept both the numeric catalog code and the legacy label."""
        if code in constants.IVA_CODES:
            return cls.IVA
        if code in constants.ISR_CODES:
            return cls.ISR
        return cls.OTHER


@dataclass(frozen=True)
class InvoiceRecord:
    schema_location: str
    source_name: str = ""
    stamp_uuid: Optional[str] = None
    version: Optional[str] = None
    issue_date: Optional[str] = None
    issuer_tax_id: Optional[str] = None
    issuer_name: Optional[str] = None
    recipient_tax_id: Optional[str] = None
    recipient_name: Optional[str] = None
    declared_total: Decimal = ZERO
    subtotal: Decimal = ZERO
    iva: Decimal = ZERO
    iva_retention: Decimal = ZERO
    isr_retention: Decimal = ZERO
    document_type: DocumentType = DocumentType.UNKNOWN
    document_type_code: Optional[str] = None
    currency: Optional[str] = None

    @property
    def issue_day(self) -> Optional[str]:
        if not self.issue_date:
            return None
        return self.issue_date.split("T", 1)[0]

    def to_dict(self) -> Dict[str, Optional[str]]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Decimal):
                data[key] = str(value)
            elif isinstance(value, DocumentType):
                data[key] = value.name.lower()
        return data


def parse_amount(raw: Optional[str]) -> Decimal:
    """Return raw as a Decimal, or zero when it is missing or not a finite number."""
    if raw is None:
        return ZERO
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        logger.debug("Ignoring malformed amount %r", raw)
        return ZERO
    if not value.is_finite():
        logger.debug("Ignoring non-finite amount %r", raw)
        return ZERO
    return value


def attr(tag: Optional[Tag], name: str) -> Optional[str]:
    # CFDI 3.2 uses lowercase attribute names, 3.3 and 4.0 capitalize them.
    if tag is None:
        return None
    wanted = name.lower()
    for key, value in tag.attrs.items():
        if key.lower() == wanted:
            return value
    return None


def children(tag: Optional[Tag], name: str) -> Iterable[Tag]:
    if tag is None:
        return []
    return tag.find_all(name, recursive=False)


def parse_cfdi(xml_text: str, source_name: str = "") -> Optional[InvoiceRecord]:
    """Build an InvoiceRecord from CFDI XML text.

    Returns None when the document is not a CFDI issued under the SAT schema
    (any other XML that happens to live in the scanned directory).
    """
    soup = BeautifulSoup(xml_text, "xml")
    comprobante = soup.find(constants.COMPROBANTE)
    schema_location = attr(comprobante, "xsi:schemaLocation")
    if not schema_location or not schema_location.startswith(constants.SAT_SCHEMA_PREFIX):
        logger.debug("Skip %s: not a SAT CFDI document", source_name or "<text>")
        return None

    subtotal = ZERO
    for conceptos in children(comprobante, constants.CONCEPTOS):
        for concepto in conceptos.find_all(constants.CONCEPTO):
            subtotal += parse_amount(attr(concepto, "Importe"))

    iva = ZERO
    iva_retention = ZERO
    isr_retention = ZERO
    # Only comprobante-level taxes; concept-level ones repeat the same amounts.
    for impuestos in children(comprobante, constants.IMPUESTOS):
        for traslados in children(impuestos, constants.TRASLADOS):
            for traslado in children(traslados, constants.TRASLADO):
                if TaxKind.from_code(attr(traslado, "Impuesto")) is TaxKind.IVA:
                    iva += parse_amount(attr(traslado, "Importe"))
        for retenciones in children(impuestos, constants.RETENCIONES):
            for retencion in retenciones.find_all(constants.RETENCION):
                kind = TaxKind.from_code(attr(retencion, "Impuesto"))
                if kind is TaxKind.IVA:
                    iva_retention += parse_amount(attr(retencion, "Importe"))
                elif kind is TaxKind.ISR:
                    isr_retention += parse_amount(attr(retencion, "Importe"))

    type_code = attr(comprobante, "TipoDeComprobante")
    timbre = soup.find(constants.TIMBRE)
    emisor = soup.find(constants.EMISOR)
    receptor = soup.find(constants.RECEPTOR)
    return InvoiceRecord(
        schema_location=schema_location,
        source_name=source_name,
        stamp_uuid=attr(timbre, "UUID"),
        version=attr(comprobante, "Version"),
        issue_date=attr(comprobante, "Fecha"),
        issuer_tax_id=attr(emisor, "Rfc"),
        issuer_name=attr(emisor, "Nombre"),
        recipient_tax_id=attr(receptor, "Rfc"),
        recipient_name=attr(receptor, "Nombre"),
        declared_total=parse_amount(attr(comprobante, "Total")),
        subtotal=subtotal,
        iva=iva,
        iva_retention=iva_retention,
        isr_retention=isr_retention,
        document_type=DocumentType.from_code(type_code),
        document_type_code=type_code,
        currency=attr(comprobante, "Moneda"),
    )
