from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class CanonicalRow(BaseModel):
    Data: Optional[str] = None  # YYYY-MM-DD
    Ano: Optional[int] = None
    Mes: Optional[int] = None
    Trimestre: Optional[int] = None
    ID_Transacao: Optional[str] = None
    Produto: Optional[str] = None
    Categoria: Optional[str] = None
    Regiao: Optional[str] = None
    Quantidade: int = 0
    Preco_Unitario: float = 0.0
    Receita_Total: float = 0.0
    # colunas sem correspondência canônica: cabeçalho original -> valor bruto
    extras: Dict[str, Any] = Field(default_factory=dict)

    def to_raw(self) -> Dict[str, Any]:
        """Volta ao formato cabeçalho -> valor (campos canônicos + extras)."""
        out = self.model_dump(exclude={"extras"}, exclude_none=True)
        for k, v in self.extras.items():
            out.setdefault(k, v)
        return out


class QueryContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    years: Tuple[int, ...] = ()
    months: Tuple[int, ...] = ()
    produtos: Tuple[str, ...] = ()
    categorias: Tuple[str, ...] = ()
    regioes: Tuple[str, ...] = ()
    metrics: Tuple[Literal["quantidade", "receita", "preco_medio"], ...] = ()
    comparison: bool = False
    topN: Optional[int] = None

    def has_period(self) -> bool:
        return bool(self.years or self.months)

    def has_filters(self) -> bool:
        return bool(self.years or self.months or self.produtos or self.categorias or self.regioes)


class GroupStats(BaseModel):
    nome: str
    receita_total: float
    quantidade_total: int
    registros: int
    ticket_medio: float


class MonthlyPoint(BaseModel):
    mes: int
    nome_mes: str
    receita_total: float
    quantidade_total: int
    registros: int


class AnalysisResult(BaseModel):
    total_records: int = 0
    receita_total: float = 0.0
    quantidade_total: int = 0
    ticket_medio: float = 0.0
    periodo: Optional[str] = None
    agrupado_por: Optional[Literal["Produto", "Categoria", "Regiao"]] = None
    grupos: Optional[List[GroupStats]] = None
    evolucao_mensal: Optional[List[MonthlyPoint]] = None
    crescimento_pct: Optional[str] = None  # ex.: "20.00"
    crescimento_indefinido: bool = False
    mensagem: Optional[str] = None


class StoredSpreadsheet(BaseModel):
    id: str
    file_name: str
    headers: List[str]
    canonical_headers: Dict[str, str]
    rows: List[CanonicalRow]
    summary: str
    created_at: datetime


class AnalysisOutcome(BaseModel):
    status: Literal["ok", "period_not_found", "no_match", "no_data"]
    question: str
    context: QueryContext
    analysis: AnalysisResult
    filtered_records: int
    total_records: int
    file_count: int
    scope: str
    available_periods: List[str] = Field(default_factory=list)
