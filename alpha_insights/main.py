import json
import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from .gemini_client import GeminiClient, NarrationError
from .models import AnalysisOutcome
from .pipeline import run_analysis
from .serializer import build_narration_prompt
from .settings import Settings, get_settings
from .store import SpreadsheetStore


settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Alpha Insights", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

_store = SpreadsheetStore()


class UploadSheet(BaseModel):
    file_name: str
    headers: Optional[List[str]] = None
    rows: List[Dict[str, Any]]


class Ask(BaseModel):
    question: str


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(default_factory=list)


def get_store() -> SpreadsheetStore:
    return _store


def get_app_settings() -> Settings:
    return settings


def get_narrator(cfg: Settings = Depends(get_app_settings)) -> GeminiClient:
    if not cfg.GEMINI_API_KEY:
        raise HTTPException(status_code=500, detail="GEMINI_API_KEY não configurada")
    return GeminiClient(
        api_key=cfg.GEMINI_API_KEY,
        model=cfg.MODEL_NAME,
        temperature=cfg.TEMPERATURE,
        max_tokens=cfg.MAX_TOKENS,
        timeout=cfg.REQUEST_TIMEOUT,
    )


def get_current_user(authorization: Optional[str] = Header(default=None)) -> str:
    # a validação do token é do provedor de autenticação; aqui ele só identifica o dono dos dados
    token = (authorization or "").replace("Bearer ", "").strip()
    if not token:
        raise HTTPException(status_code=401, detail="Não autorizado")
    return token


def _analyze_for(user_id: str, question: str, store: SpreadsheetStore, cfg: Settings) -> AnalysisOutcome:
    rows = store.consolidated_rows(user_id)
    return run_analysis(question, rows, store.file_count(user_id), strict_months=cfg.STRICT_MONTH_MATCHING)


@app.get("/")
def root():
    return {
        "service": "Alpha Insights",
        "version": "1.0.0",
        "endpoints": [
            "/spreadsheets [POST, GET, DELETE]",
            "/analyze [POST]",
            "/chat [POST]",
            "/health [GET]",
        ],
    }


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/spreadsheets")
def upload_spreadsheet(
    body: UploadSheet,
    user_id: str = Depends(get_current_user),
    store: SpreadsheetStore = Depends(get_store),
):
    if not body.rows:
        raise HTTPException(status_code=400, detail="Nenhuma linha enviada")
    logger.info("processando planilha %s (%d linhas)", body.file_name, len(body.rows))
    sheet = store.ingest(user_id, body.file_name, body.rows, body.headers)
    return {
        "id": sheet.id,
        "file_name": sheet.file_name,
        "headers": sheet.headers,
        "canonical_headers": sheet.canonical_headers,
        "rows": len(sheet.rows),
        "summary": sheet.summary,
    }


@app.get("/spreadsheets")
def list_spreadsheets(user_id: str = Depends(get_current_user), store: SpreadsheetStore = Depends(get_store)):
    return [
        {
            "id": s.id,
            "file_name": s.file_name,
            "headers": s.headers,
            "rows": len(s.rows),
            "summary": s.summary,
            "created_at": s.created_at.isoformat(),
        }
        for s in store.list(user_id)
    ]


@app.delete("/spreadsheets")
def clear_spreadsheets(user_id: str = Depends(get_current_user), store: SpreadsheetStore = Depends(get_store)):
    return {"deleted": store.clear(user_id)}


@app.post("/analyze", response_model=AnalysisOutcome)
def analyze_question(
    p: Ask,
    user_id: str = Depends(get_current_user),
    store: SpreadsheetStore = Depends(get_store),
    cfg: Settings = Depends(get_app_settings),
):
    if not p.question.strip():
        raise HTTPException(status_code=400, detail="Pergunta vazia")
    return _analyze_for(user_id, p.question, store, cfg)


@app.post("/chat")
def chat(
    req: ChatRequest,
    user_id: str = Depends(get_current_user),
    store: SpreadsheetStore = Depends(get_store),
    cfg: Settings = Depends(get_app_settings),
    narrator: GeminiClient = Depends(get_narrator),
):
    asked = [i for i, m in enumerate(req.messages) if m.role == "user" and m.content.strip()]
    if not asked:
        raise HTTPException(status_code=400, detail="Pergunta vazia")
    last = asked[-1]
    question = req.messages[last].content
    logger.info("chat: %d mensagens", len(req.messages))

    outcome = _analyze_for(user_id, question, store, cfg)
    # histórico até a última pergunta; ela vai no prompt junto com a análise
    history = [m.model_dump() for m in req.messages[:last]]

    try:
        chunks = narrator.stream_message(build_narration_prompt(outcome), history)
    except NarrationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    def event_stream():
        try:
            for text in chunks:
                yield f"data: {json.dumps({'text': text}, ensure_ascii=False)}\n\n"
        except NarrationError as e:
            yield f"data: {json.dumps({'error': e.message}, ensure_ascii=False)}\n\n"
        yield "data: [DONE]\n\n"

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
