from __future__ import annotations

import logging
import math
import re
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .models import CanonicalRow
from .schema import CANONICAL_NAMES, DERIVED_FIELDS, map_headers


logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})")
_BR_DATE = re.compile(r"^\s*(\d{1,2})/(\d{1,2})/(\d{4})")

ENTITY_FIELDS = ("ID_Transacao", "Produto", "Categoria", "Regiao")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and not math.isfinite(value):
        return True
    return isinstance(value, str) and not value.strip()


def parse_date(value: Any) -> Optional[date]:
    """Aceita YYYY-MM-DD (também com hora depois) e D/M/YYYY ou DD/MM/YYYY.

    Formato brasileiro é dia-primeiro; se o segundo grupo passar de 12 e o
    primeiro não, a data é lida como mês-primeiro. Datas impossíveis -> None.
    """
    if _is_blank(value):
        return None
    if isinstance(value, date):
        return value if type(value) is date else value.date()
    s = str(value)
    m = _ISO_DATE.match(s)
    if m:
        year, month, day = int(m.group(1)), int(m.group(2)), int(m.group(3))
    else:
        m = _BR_DATE.match(s)
        if not m:
            return None
        first, second, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if first > 12 or second <= 12:
            day, month = first, second
        else:
            day, month = second, first
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_quantity(value: Any) -> int:
    if _is_blank(value) or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    m = re.match(r"\s*(\d+)", str(value))
    return int(m.group(1)) if m else 0


def parse_decimal(value: Any) -> float:
    """Número em formato BR ou US; símbolos de moeda e espaços são descartados."""
    if _is_blank(value) or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return max(float(value), 0.0)
    s = re.sub(r"[^0-9,.]", "", str(value))
    if "," in s and "." in s:
        # o último separador é o decimal
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "")
        else:
            s = s.replace(",", "")
    s = s.replace(",", ".")
    m = re.match(r"\d*\.?\d+|\d+", s)
    if not m:
        return 0.0
    try:
        return float(m.group(0))
    except ValueError:
        return 0.0


def normalize_row(raw: Mapping[str, Any], header_map: Mapping[str, str]) -> CanonicalRow:
    fields: Dict[str, Any] = {}
    extras: Dict[str, Any] = {}
    claimed = set()

    for header, value in raw.items():
        target = header_map.get(header, header)
        if target in DERIVED_FIELDS:
            continue
        if target in claimed:
            # campo já preenchido por uma coluna anterior da mesma linha
            extras[header] = value
            continue
        if target in CANONICAL_NAMES:
            claimed.add(target)
        if target == "Data":
            d = parse_date(value)
            if d is not None:
                fields["Data"] = d.isoformat()
                fields["Ano"] = d.year
                fields["Mes"] = d.month
                fields["Trimestre"] = (d.month - 1) // 3 + 1
        elif target == "Quantidade":
            fields["Quantidade"] = parse_quantity(value)
        elif target == "Preco_Unitario":
            fields["Preco_Unitario"] = parse_decimal(value)
        elif target == "Receita_Total":
            fields["Receita_Total"] = parse_decimal(value)
        elif target in ENTITY_FIELDS:
            if not _is_blank(value):
                fields[target] = value if isinstance(value, str) else str(value)
        else:
            extras[header] = value

    qtd = fields.get("Quantidade", 0)
    preco = fields.get("Preco_Unitario", 0.0)
    if not fields.get("Receita_Total") and qtd and preco:
        fields["Receita_Total"] = qtd * preco

    return CanonicalRow(**fields, extras=extras)


def normalize_rows(rows: Iterable[Mapping[str, Any]], header_map: Optional[Mapping[str, str]] = None) -> List[CanonicalRow]:
    rows = list(rows)
    if header_map is None:
        headers: Dict[str, None] = {}
        for r in rows:
            headers.update(dict.fromkeys(r.keys()))
        header_map = map_headers(headers)
    return [normalize_row(r, header_map) for r in rows]


def build_summary(headers: List[str], n_rows: int) -> str:
    return f"Planilha com {n_rows} linhas e {len(headers)} colunas. Colunas: {', '.join(headers)}"


def normalize_sheet(
    headers: Optional[List[str]],
    rows: List[Mapping[str, Any]],
) -> Tuple[Dict[str, str], List[CanonicalRow], str]:
    """Normaliza uma planilha inteira: (mapa de cabeçalhos, linhas canônicas, resumo).

    Sem cabeçalhos explícitos, usa as chaves das linhas na ordem em que aparecem.
    """
    if not headers:
        seen: Dict[str, None] = {}
        for r in rows:
            seen.update(dict.fromkeys(r.keys()))
        headers = list(seen)
    header_map = map_headers(headers)
    out = normalize_rows(rows, header_map)
    logger.debug("cabeçalhos mapeados: %s", header_map)
    return header_map, out, build_summary(headers, len(out))
