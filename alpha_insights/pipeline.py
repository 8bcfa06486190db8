from __future__ import annotations

import logging
from typing import Sequence

from .aggregator import analyze
from .dataset import available_periods
from .filters import filter_data
from .models import AnalysisOutcome, AnalysisResult, CanonicalRow, QueryContext
from .query_parser import parse_query


logger = logging.getLogger(__name__)


def describe_scope(ctx: QueryContext, filtered: int, total: int, file_count: int) -> str:
    if ctx.has_filters():
        return f"Análise filtrada: {filtered} de {total} registros"
    return f"Análise completa de {total} registros de {file_count} planilha(s)"


def run_analysis(
    question: str,
    rows: Sequence[CanonicalRow],
    file_count: int,
    strict_months: bool = False,
) -> AnalysisOutcome:
    """Pergunta -> contexto -> filtro -> agregação, sem nenhuma chamada ao modelo."""
    if not rows:
        logger.info("sem dados carregados para a pergunta")
        return AnalysisOutcome(
            status="no_data",
            question=question,
            context=QueryContext(),
            analysis=analyze([], QueryContext()),
            filtered_records=0,
            total_records=0,
            file_count=file_count,
            scope="Nenhuma planilha enviada",
        )

    ctx = parse_query(question, rows, strict_months=strict_months)
    filtered = filter_data(rows, ctx)
    analysis: AnalysisResult = analyze(filtered, ctx)

    periods = []
    if not filtered and ctx.has_period():
        status = "period_not_found"
        periods = available_periods(rows)
    elif not filtered:
        status = "no_match"
    else:
        status = "ok"

    logger.info("análise %s: %d de %d registros", status, len(filtered), len(rows))
    return AnalysisOutcome(
        status=status,
        question=question,
        context=ctx,
        analysis=analysis,
        filtered_records=len(filtered),
        total_records=len(rows),
        file_count=file_count,
        scope=describe_scope(ctx, len(filtered), len(rows), file_count),
        available_periods=periods,
    )
