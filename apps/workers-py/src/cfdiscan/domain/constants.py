"""Fixed names and codes of the CFDI schema used across the scanner."""

SAT_SCHEMA_PREFIX = "http://www.sat.gob.mx/cfd"

INVOICE_EXTENSION = ".xml"
COMPANION_EXTENSION = ".pdf"

# Element names, always written as prefix:LocalName.
COMPROBANTE = "cfdi:Comprobante"
EMISOR = "cfdi:Emisor"
RECEPTOR = "cfdi:Receptor"
CONCEPTOS = "cfdi:Conceptos"
CONCEPTO = "cfdi:Concepto"
IMPUESTOS = "cfdi:Impuestos"
TRASLADOS = "cfdi:Traslados"
TRASLADO = "cfdi:Traslado"
RETENCIONES = "cfdi:Retenciones"
RETENCION = "cfdi:Retencion"
TIMBRE = "tfd:TimbreFiscalDigital"

IVA_CODES = ("002", "IVA")
ISR_CODES = ("001", "ISR")

DIRECTION_ISSUED = "emitidas"
DIRECTION_RECEIVED = "recibidas"
DIRECTIONS = [DIRECTION_ISSUED, DIRECTION_RECEIVED]

TYPE_INCOME = "ingresos"
TYPE_EXPENSE = "egresos"
TYPE_COMPLEMENT = "complementos"
TYPE_BRANCHES = [TYPE_INCOME, TYPE_EXPENSE, TYPE_COMPLEMENT]
