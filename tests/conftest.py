import sys
import warnings
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

import pytest

warnings.filterwarnings(
    "ignore",
    message=r"builtin type .* has no __module__ attribute",
    category=DeprecationWarning,
)

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "apps" / "workers-py" / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures" / "cfdi"

CFDI_40_SCHEMA = (
    "http://www.sat.gob.mx/cfd/4 http://www.sat.gob.mx/sitio_internet/cfd/4/cfdv40.xsd"
)


def build_cfdi(
    uuid: Optional[str] = "F47AC10B-58CC-4372-A567-0E02B2C3D479",
    fecha: str = "2024-01-05T10:00:00",
    tipo: Optional[str] = "I",
    emisor_rfc: str = "EMI010101AAA",
    receptor_rfc: str = "REC010101BBB",
    conceptos: Sequence[Optional[str]] = ("100.00",),
    traslados: Iterable[Tuple[str, Optional[str]]] = (("002", "16.00"),),
    retenciones: Iterable[Tuple[str, Optional[str]]] = (),
    total: str = "116.00",
    schema: str = CFDI_40_SCHEMA,
) -> str:
    def importe(value: Optional[str]) -> str:
        return "" if value is None else f' Importe="{value}"'

    tipo_attr = "" if tipo is None else f' TipoDeComprobante="{tipo}"'
    items = "\n".join(
        f'    <cfdi:Concepto Cantidad="1" Descripcion="item {i}"{importe(value)}/>'
        for i, value in enumerate(conceptos)
    )
    trasl = "\n".join(
        f'      <cfdi:Traslado Impuesto="{code}"{importe(value)}/>' for code, value in traslados
    )
    ret = "\n".join(
        f'      <cfdi:Retencion Impuesto="{code}"{importe(value)}/>' for code, value in retenciones
    )
    timbre = (
        ""
        if uuid is None
        else (
            '    <tfd:TimbreFiscalDigital xmlns:tfd="http://www.sat.gob.mx/TimbreFiscalDigital"'
            f' Version="1.1" UUID="{uuid}"/>'
        )
    )
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<cfdi:Comprobante xmlns:cfdi="http://www.sat.gob.mx/cfd/4" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" xsi:schemaLocation="{schema}" Version="4.0" Fecha="{fecha}" Moneda="MXN" Total="{total}"{tipo_attr}>
  <cfdi:Emisor Rfc="{emisor_rfc}" Nombre="EMISOR SA"/>
  <cfdi:Receptor Rfc="{receptor_rfc}" Nombre="RECEPTOR SA"/>
  <cfdi:Conceptos>
{items}
  </cfdi:Conceptos>
  <cfdi:Impuestos>
    <cfdi:Retenciones>
{ret}
    </cfdi:Retenciones>
    <cfdi:Traslados>
{trasl}
    </cfdi:Traslados>
  </cfdi:Impuestos>
  <cfdi:Complemento>
{timbre}
  </cfdi:Complemento>
</cfdi:Comprobante>
"""


@pytest.fixture
def cfdi_xml():
    return build_cfdi


@pytest.fixture
def fixture_text():
    def _read(name: str) -> str:
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")

    return _read
