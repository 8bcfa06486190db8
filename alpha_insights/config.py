"""
Configuração centralizada do Alpha Insights.

Ordem de prioridade para ler configurações:
1) st.secrets (quando rodando no Streamlit)
2) Variáveis de ambiente (os.environ)
3) Arquivo .env (via python-dotenv)
"""
from __future__ import annotations

import os
from typing import Any, List, Optional, Tuple

from dotenv import load_dotenv

# Carrega .env cedo para que os os.environ reflitam valores locais
load_dotenv()

try:
    import streamlit as st  # type: ignore
    _HAS_STREAMLIT = True
except Exception:
    st = None  # type: ignore
    _HAS_STREAMLIT = False


def _secrets_get(path: Tuple[str, ...]) -> Optional[Any]:
    """Obtém um valor dos secrets seguindo um caminho (ex.: ("gemini", "API_KEY")).
    Retorna None se não existir ou se st.secrets não está disponível.
    """
    if not _HAS_STREAMLIT or not hasattr(st, "secrets"):
        return None
    try:
        cur: Any = st.secrets  # type: ignore[attr-defined]
        for key in path:
            if key in cur:
                cur = cur[key]
            else:
                return None
        return cur
    except Exception:
        # sem secrets.toml o Streamlit levanta ao acessar st.secrets
        return None


def _candidates(names: Tuple[str, ...]):
    # raiz dos secrets, seção [gemini] dos secrets e por fim o ambiente
    for name in names:
        yield _secrets_get((name,))
    for name in names:
        yield _secrets_get(("gemini", name))
    for name in names:
        yield os.getenv(name, "").strip("\"' ")


def get_str_setting(*names: str, default: Optional[str] = None) -> Optional[str]:
    """Primeiro valor não vazio entre os nomes, na ordem st.secrets -> os.environ."""
    for val in _candidates(names):
        s = str(val).strip() if val is not None else ""
        if s:
            return s
    return default


def get_list_setting(*names: str) -> List[str]:
    """Lê lista de strings; aceita lista no secrets ou CSV como string."""
    for name in names:
        val = _secrets_get((name,))
        if isinstance(val, (list, tuple)):
            return [str(x).strip() for x in val if str(x).strip()]
    csv = get_str_setting(*names)
    if not csv:
        return []
    return [x.strip() for x in csv.split(",") if x.strip()]


def get_float_setting(name: str, default: float) -> float:
    try:
        return float(get_str_setting(name) or default)
    except ValueError:
        return default


def get_int_setting(name: str, default: int) -> int:
    try:
        return int(get_str_setting(name) or default)
    except ValueError:
        return default


def get_bool_setting(name: str, default: bool = False) -> bool:
    val = get_str_setting(name)
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "sim", "on")


# -------------------- Chaves e parâmetros da aplicação --------------------
def get_gemini_api_key() -> Optional[str]:
    return get_str_setting("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


def get_model_name(default: str = "gemini-2.5-flash") -> str:
    return get_str_setting("MODEL_NAME") or default
