from __future__ import annotations

import json

from .models import AnalysisOutcome
from .prompts import get_status_instructions


def build_analysis_block(outcome: AnalysisOutcome) -> str:
    """
    Retorna string:
    Resultado da análise (Análise filtrada: 42 de 500 registros)
    {
      "total_records": 42,
      "receita_total": 215340.5,
      ...
    }
    """
    lines: list[str] = [f"Resultado da análise ({outcome.scope})"]
    payload = outcome.analysis.model_dump(exclude_none=True)
    lines.append(json.dumps(payload, ensure_ascii=False, indent=2))
    if outcome.available_periods:
        lines.append("Períodos disponíveis: " + ", ".join(outcome.available_periods))
    return "\n".join(lines)


def build_narration_prompt(outcome: AnalysisOutcome) -> str:
    parts = []
    instructions = get_status_instructions(outcome.status).strip()
    if instructions:
        parts.append(instructions)
    parts.append(build_analysis_block(outcome))
    parts.append("Pergunta do usuário: " + outcome.question)
    return "\n\n".join(parts)
