from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import CanonicalRow, QueryContext


logger = logging.getLogger(__name__)

# (nomes completos, abreviação, número)
MONTHS: Tuple[Tuple[Tuple[str, ...], str, int], ...] = (
    (("janeiro",), "jan", 1),
    (("fevereiro",), "fev", 2),
    (("março", "marco"), "mar", 3),
    (("abril",), "abr", 4),
    (("maio",), "mai", 5),
    (("junho",), "jun", 6),
    (("julho",), "jul", 7),
    (("agosto",), "ago", 8),
    (("setembro",), "set", 9),
    (("outubro",), "out", 10),
    (("novembro",), "nov", 11),
    (("dezembro",), "dez", 12),
)

MONTH_NAMES = {
    1: "Janeiro", 2: "Fevereiro", 3: "Março", 4: "Abril", 5: "Maio", 6: "Junho",
    7: "Julho", 8: "Agosto", 9: "Setembro", 10: "Outubro", 11: "Novembro", 12: "Dezembro",
}

QUANTITY_TERMS = ("quantidade", "quantidades", "qtd", "unidades", "volume")
REVENUE_TERMS = ("receita", "faturamento", "faturou", "vendas", "venda", "valor", "valores")
AVG_PRICE_TERMS = ("preço médio", "preco medio", "ticket", "ticket médio", "ticket medio", "média", "media")
COMPARISON_TERMS = (
    "comparar", "compare", "comparação", "comparacao", "comparativo", "versus", "vs",
    "evolução", "evolucao", "crescimento", "variação", "variacao", "diferença", "diferenca",
    "tendência", "tendencia", "mês a mês", "mes a mes",
)

_YEAR = re.compile(r"\b(20\d{2})\b")
_TOP_N = re.compile(r"(top|maior|melhor|principal)\s*(\d+)")


def _words(terms: Sequence[str]) -> "re.Pattern[str]":
    return re.compile(r"\b(?:" + "|".join(re.escape(t) for t in terms) + r")\b")


_QUANTITY = _words(QUANTITY_TERMS)
_REVENUE = _words(REVENUE_TERMS)
_AVG_PRICE = _words(AVG_PRICE_TERMS)
_COMPARISON = _words(COMPARISON_TERMS)


def _unique(values: Iterable) -> List:
    return list(dict.fromkeys(values))


def extract_years(query: str) -> List[int]:
    return _unique(int(y) for y in _YEAR.findall(query))


def extract_months(query: str, strict: bool = False) -> List[int]:
    """Meses citados na pergunta.

    Por padrão a busca é por substring (\"maior\" casa com \"mai\" e \"maio\");
    com ``strict=True`` nomes e abreviações só casam como palavra inteira.
    """
    t = query.lower()
    found: List[int] = []
    for names, abbr, num in MONTHS:
        terms = names + (abbr,)
        if strict:
            if re.search(r"\b(?:" + "|".join(terms) + r")\b", t):
                found.append(num)
        elif any(term in t for term in terms):
            found.append(num)
    return found


def extract_top_n(query: str) -> Optional[int]:
    m = _TOP_N.search(query.lower())
    if not m:
        return None
    n = int(m.group(2))
    return n if n > 0 else None


def _distinct(rows: Sequence[CanonicalRow], field: str) -> List[str]:
    return _unique(v for v in (getattr(r, field) for r in rows) if v)


def _entities(query_lower: str, rows: Sequence[CanonicalRow], field: str) -> List[str]:
    return [v for v in _distinct(rows, field) if v.lower() in query_lower]


def parse_query(query: str, known_rows: Sequence[CanonicalRow], strict_months: bool = False) -> QueryContext:
    q = query or ""
    ql = q.lower()

    metrics = []
    if _QUANTITY.search(ql):
        metrics.append("quantidade")
    if _REVENUE.search(ql):
        metrics.append("receita")
    if _AVG_PRICE.search(ql):
        metrics.append("preco_medio")

    ctx = QueryContext(
        years=extract_years(q),
        months=extract_months(q, strict=strict_months),
        produtos=_entities(ql, known_rows, "Produto"),
        categorias=_entities(ql, known_rows, "Categoria"),
        regioes=_entities(ql, known_rows, "Regiao"),
        metrics=metrics,
        comparison=bool(_COMPARISON.search(ql)),
        topN=extract_top_n(q),
    )
    logger.debug("contexto da pergunta: %s", ctx.model_dump())
    return ctx
