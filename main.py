"""
Alpha Insights - Analista de Vendas
Chat com IA sobre planilhas de vendas enviadas pelo usuário
"""

import logging
from datetime import datetime

import streamlit as st

from alpha_insights.dataset import dataset_overview
from alpha_insights.gemini_client import GeminiClient, NarrationError
from alpha_insights.pipeline import run_analysis
from alpha_insights.serializer import build_narration_prompt
from alpha_insights.settings import get_settings
from alpha_insights.store import SpreadsheetStore
from alpha_insights.uploads import UploadSession


# -------------------------------------------------------
# Boot
# -------------------------------------------------------
settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("alpha_insights.ui")

st.set_page_config(
    page_title="Alpha Insights",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Sessão local: um único dono para os dados enviados nesta aba do navegador
LOCAL_USER = "local"

QUICK_QUESTIONS = (
    ("🔍 Visão Geral", "Qual foi a receita total e o ticket médio?"),
    ("📊 Top Produtos", "Quais os top 5 produtos por receita?"),
    ("📈 Evolução", "Como foi a evolução das vendas mês a mês?"),
)


# -------------------------------------------------------
# Helpers
# -------------------------------------------------------
def create_client() -> GeminiClient | None:
    """Cria o cliente do modelo a partir da configuração (st.secrets ou .env)."""
    if not settings.GEMINI_API_KEY:
        return None
    return GeminiClient(
        api_key=settings.GEMINI_API_KEY,
        model=settings.MODEL_NAME,
        temperature=settings.TEMPERATURE,
        max_tokens=settings.MAX_TOKENS,
        timeout=settings.REQUEST_TIMEOUT,
    )


def display_chat_messages() -> None:
    """Renderiza o histórico de mensagens do chat na interface."""
    for message in st.session_state.messages:
        role = "user" if message.get("role") == "user" else "assistant"
        with st.chat_message(role):
            st.markdown(message.get("content", ""))


def initialize_session() -> None:
    st.session_state.setdefault("messages", [])
    st.session_state.setdefault("store", SpreadsheetStore())
    if "uploads" not in st.session_state:
        st.session_state.uploads = UploadSession(st.session_state.store, LOCAL_USER)
    if "client" not in st.session_state:
        st.session_state.client = create_client()


def answer(question: str, history: list) -> str:
    store: SpreadsheetStore = st.session_state.store
    outcome = run_analysis(
        question,
        store.consolidated_rows(LOCAL_USER),
        store.file_count(LOCAL_USER),
        strict_months=settings.STRICT_MONTH_MATCHING,
    )
    client: GeminiClient | None = st.session_state.client
    if client is None:
        content = "Não foi possível conectar ao modelo: configure GEMINI_API_KEY."
        st.markdown(content)
        return content
    try:
        chunks = client.stream_message(build_narration_prompt(outcome), history)
        return st.write_stream(chunks)
    except NarrationError as e:
        st.error(e.message)
        return e.message


# -------------------------------------------------------
# App principal
# -------------------------------------------------------
def main() -> None:
    initialize_session()
    store: SpreadsheetStore = st.session_state.store

    with st.sidebar:
        st.markdown("### 📚 Planilhas")
        uploads: UploadSession = st.session_state.uploads
        files = st.file_uploader(
            "Envie arquivos CSV, XLS ou XLSX",
            type=["csv", "xls", "xlsx"],
            accept_multiple_files=True,
            key=uploads.uploader_key,
        )
        for problem in uploads.ingest(files):
            st.warning(problem)

        sheets = store.list(LOCAL_USER)
        overview = dataset_overview(sheets)
        st.metric("Registros carregados", f"{overview['registros']:,}".replace(",", "."))
        st.caption(f"Planilhas: {overview['planilhas']} · Produtos: {overview['produtos']}")
        if overview["periodos"]:
            st.caption("Períodos: " + ", ".join(overview["periodos"]))
        if sheets:
            st.dataframe(
                [{"Arquivo": s.file_name, "Linhas": len(s.rows)} for s in sheets],
                use_container_width=True,
                hide_index=True,
            )
            if st.button("Limpar dados"):
                uploads.clear()
                st.rerun()

    st.markdown("## 📊 Alpha Insights")

    if not st.session_state.messages:
        cols = st.columns(len(QUICK_QUESTIONS))
        for i, (col, (label, question)) in enumerate(zip(cols, QUICK_QUESTIONS)):
            with col:
                if st.button(label, use_container_width=True, key=f"chip{i}"):
                    st.session_state.messages.append(
                        {"role": "user", "content": question, "timestamp": datetime.now().strftime("%H:%M")}
                    )
                    st.rerun()
    else:
        display_chat_messages()

    user_input = st.chat_input("O que você quer saber sobre suas vendas?")
    if user_input:
        st.session_state.messages.append(
            {"role": "user", "content": user_input, "timestamp": datetime.now().strftime("%H:%M")}
        )
        st.rerun()

    # Processamento da última mensagem do usuário para gerar resposta
    if st.session_state.messages and st.session_state.messages[-1]["role"] == "user":
        last_user_msg = st.session_state.messages[-1]["content"]
        history = [{"role": m["role"], "content": m["content"]} for m in st.session_state.messages[:-1]]
        with st.chat_message("assistant"):
            content = answer(last_user_msg, history)
        st.session_state.messages.append(
            {"role": "assistant", "content": content, "timestamp": datetime.now().strftime("%H:%M")}
        )
        st.rerun()


if __name__ == "__main__":
    main()
