from __future__ import annotations

import io
from typing import Any, Dict, List, Sequence

import pandas as pd

from .models import CanonicalRow, StoredSpreadsheet
from .query_parser import MONTH_NAMES


CANONICAL_COLUMNS = [
    "Data", "Ano", "Mes", "Trimestre", "ID_Transacao", "Produto", "Categoria", "Regiao",
    "Quantidade", "Preco_Unitario", "Receita_Total",
]


def to_frame(rows: Sequence[CanonicalRow]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=CANONICAL_COLUMNS)
    return pd.DataFrame([r.model_dump(exclude={"extras"}) for r in rows], columns=CANONICAL_COLUMNS)


def available_periods(rows: Sequence[CanonicalRow]) -> List[str]:
    """Meses com dados, em ordem cronológica (ex.: ["Janeiro/2024", "Fevereiro/2024"])."""
    df = to_frame(rows).dropna(subset=["Ano", "Mes"])
    if df.empty:
        return []
    counts = df.groupby(["Ano", "Mes"], sort=True).size()
    return [f"{MONTH_NAMES[int(mes)]}/{int(ano)}" for ano, mes in counts.index]


def dataset_overview(sheets: Sequence[StoredSpreadsheet]) -> Dict[str, Any]:
    rows = [r for s in sheets for r in s.rows]
    df = to_frame(rows)
    return {
        "planilhas": len(sheets),
        "registros": int(len(df)),
        "periodos": available_periods(rows),
        "produtos": int(df["Produto"].nunique()),
        "categorias": int(df["Categoria"].nunique()),
        "regioes": int(df["Regiao"].nunique()),
    }


def frame_to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Linhas cabeçalho -> valor bruto; células vazias viram None."""
    if df is None or df.empty:
        return []
    df = df.astype(object).where(pd.notna(df), None)
    df.columns = [str(c).strip() for c in df.columns]
    return df.to_dict(orient="records")


def read_spreadsheet_bytes(file_name: str, data: bytes) -> pd.DataFrame:
    name = file_name.lower()
    if name.endswith(".csv"):
        text = data.decode("utf-8-sig", errors="ignore")
        # heurística simples: ; mais comum no BR
        sep = ";" if text.count(";") >= text.count(",") else ","
        return pd.read_csv(io.StringIO(text), sep=sep, dtype=str, keep_default_na=False)
    if name.endswith(".xlsx") or name.endswith(".xls"):
        # .xls vai para o xlrd e .xlsx para o openpyxl; falha de motor ou arquivo corrompido vira ValueError
        try:
            return pd.read_excel(io.BytesIO(data))
        except Exception as e:
            raise ValueError(f"Não foi possível ler a planilha Excel: {e}") from e
    raise ValueError("Formato não suportado. Use arquivos CSV, XLS ou XLSX.")
