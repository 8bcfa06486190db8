from typing import Dict, List, Optional, Sequence, Tuple
from collections import defaultdict

from .models import AnalysisResult, CanonicalRow, GroupStats, MonthlyPoint, QueryContext
from .query_parser import MONTH_NAMES


NO_DATA_MESSAGE = "Nenhum dado encontrado para os filtros informados"
OTHERS = "Outros"


def period_label(rows: Sequence[CanonicalRow]) -> Optional[str]:
    years = sorted({r.Ano for r in rows if r.Ano is not None})
    months = sorted({r.Mes for r in rows if r.Mes is not None})
    if not years:
        return None
    if len(years) == 1:
        if len(months) == 1:
            return f"{MONTH_NAMES[months[0]]}/{years[0]}"
        return str(years[0])
    return f"{years[0]} a {years[-1]}"


def grouping_dimension(ctx: QueryContext) -> str:
    # agrupa pela primeira dimensão que a pergunta ainda não fixou
    if not ctx.produtos:
        return "Produto"
    if not ctx.categorias:
        return "Categoria"
    return "Regiao"


def group_by_dimension(rows: Sequence[CanonicalRow], dimension: str, top_n: Optional[int] = None) -> List[GroupStats]:
    buckets: Dict[str, Dict[str, float]] = defaultdict(lambda: {"receita": 0.0, "qtd": 0, "n": 0})
    for r in rows:
        b = buckets[getattr(r, dimension) or OTHERS]
        b["receita"] += r.Receita_Total
        b["qtd"] += r.Quantidade
        b["n"] += 1
    groups = [
        GroupStats(
            nome=name,
            receita_total=vals["receita"],
            quantidade_total=int(vals["qtd"]),
            registros=int(vals["n"]),
            ticket_medio=vals["receita"] / vals["n"],
        )
        for name, vals in buckets.items()
    ]
    # sorted é estável: empates ficam na ordem em que o grupo apareceu
    groups = sorted(groups, key=lambda g: g.receita_total, reverse=True)
    if top_n:
        groups = groups[:top_n]
    return groups


def monthly_evolution(rows: Sequence[CanonicalRow]) -> List[MonthlyPoint]:
    by_month: Dict[int, Dict[str, float]] = defaultdict(lambda: {"receita": 0.0, "qtd": 0, "n": 0})
    for r in rows:
        if r.Mes is None:
            continue
        b = by_month[r.Mes]
        b["receita"] += r.Receita_Total
        b["qtd"] += r.Quantidade
        b["n"] += 1
    return [
        MonthlyPoint(
            mes=m,
            nome_mes=MONTH_NAMES[m],
            receita_total=vals["receita"],
            quantidade_total=int(vals["qtd"]),
            registros=int(vals["n"]),
        )
        for m, vals in sorted(by_month.items())
    ]


def growth_pct(previous: float, current: float) -> Tuple[Optional[str], bool]:
    """Crescimento percentual com duas casas; (None, True) quando a base é zero."""
    if not previous:
        return None, True
    return f"{(current - previous) / previous * 100:.2f}", False


def analyze(rows: Sequence[CanonicalRow], ctx: QueryContext) -> AnalysisResult:
    if not rows:
        return AnalysisResult(total_records=0, mensagem=NO_DATA_MESSAGE)

    receita = sum(r.Receita_Total for r in rows)
    qtd = sum(r.Quantidade for r in rows)
    result = AnalysisResult(
        total_records=len(rows),
        receita_total=receita,
        quantidade_total=qtd,
        ticket_medio=receita / len(rows),
        periodo=period_label(rows),
    )

    if ctx.topN or ctx.comparison:
        dimension = grouping_dimension(ctx)
        result.agrupado_por = dimension
        result.grupos = group_by_dimension(rows, dimension, ctx.topN)

    if ctx.comparison and len({r.Mes for r in rows if r.Mes is not None}) > 1:
        series = monthly_evolution(rows)
        result.evolucao_mensal = series
        if len(series) >= 2:
            prev, last = series[-2], series[-1]
            result.crescimento_pct, result.crescimento_indefinido = growth_pct(prev.receita_total, last.receita_total)

    return result
