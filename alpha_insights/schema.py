from __future__ import annotations

import logging
import re
import unicodedata
from typing import Dict, Iterable, List, Mapping, Tuple


logger = logging.getLogger(__name__)


# Ordem importa: o primeiro campo canônico com variante contida no cabeçalho vence.
# Variantes curtas como "id" ou "dia" ficam de fora (casariam com "quantidade", "media"),
# e ID_Transacao só aceita formas ancoradas em id ("Valor Total da Transação" é receita).
CANONICAL_FIELDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Data", ("data", "date", "dt_")),
    ("ID_Transacao", ("id_transacao", "id_transa", "transaction_id", "id_venda", "order_id", "pedido")),
    ("Categoria", ("categoria", "category", "grupo", "familia")),
    ("Produto", ("produto", "product", "item", "sku")),
    ("Regiao", ("regiao", "region", "estado", "zona")),
    ("Quantidade", ("quantidade", "qtd", "qtde", "quantity", "qty", "unidades")),
    ("Receita_Total", ("receita_total", "valor_total", "total", "revenue", "receita", "faturamento")),
    ("Preco_Unitario", ("preco_unitario", "preco", "price", "valor_unitario", "unit_price")),
)

# Derivados de Data na normalização; nunca lidos da planilha.
DERIVED_FIELDS = ("Ano", "Mes", "Trimestre")

CANONICAL_NAMES = tuple(name for name, _ in CANONICAL_FIELDS) + DERIVED_FIELDS


def clean_header(header: str) -> str:
    s = str(header or "").lower().strip()
    s = "".join(c for c in unicodedata.normalize("NFKD", s) if not unicodedata.combining(c))
    return re.sub(r"[^a-z0-9_]", "_", s)


def normalize_header(header: str) -> str:
    """Nome canônico do cabeçalho, ou o próprio cabeçalho quando nada casa."""
    if header in CANONICAL_NAMES:
        return header
    cleaned = clean_header(header)
    for canonical, variants in CANONICAL_FIELDS:
        if any(v in cleaned for v in variants):
            return canonical
    return header


def map_headers(headers: Iterable[str]) -> Dict[str, str]:
    mapping = {h: normalize_header(h) for h in headers}
    owners = field_owners(mapping)
    for h, target in mapping.items():
        if target in owners and owners[target] != h:
            logger.warning("cabeçalhos %r e %r casam com %s; na mesma linha vale o primeiro", owners[target], h, target)
    return mapping


def field_owners(mapping: Mapping[str, str]) -> Dict[str, str]:
    """Campo canônico -> primeiro cabeçalho (na ordem da planilha) que o preenche."""
    owners: Dict[str, str] = {}
    for h, target in mapping.items():
        if target in CANONICAL_NAMES:
            owners.setdefault(target, h)
    return owners


def unmapped_headers(mapping: Dict[str, str]) -> List[str]:
    return [h for h, target in mapping.items() if target not in CANONICAL_NAMES]
