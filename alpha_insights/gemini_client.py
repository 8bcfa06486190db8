import json
import logging
from typing import Any, Dict, Iterator, List, Optional

import requests

from .prompts import get_system_prompt


logger = logging.getLogger(__name__)

BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

RATE_LIMIT_MESSAGE = "Limite de requisições excedido. Tente novamente em alguns instantes."
NO_CREDITS_MESSAGE = "Créditos insuficientes. Adicione créditos ao seu workspace."
GENERIC_MESSAGE = "Erro ao processar sua solicitação"


class NarrationError(Exception):
    """Falha na chamada ao modelo, já com status HTTP e mensagem para o usuário."""

    def __init__(self, status_code: int, message: str, detail: str = ""):
        super().__init__(detail or message)
        self.status_code = status_code
        self.message = message
        self.detail = detail


def _error_for_status(status_code: int, detail: str = "") -> NarrationError:
    if status_code == 429:
        return NarrationError(429, RATE_LIMIT_MESSAGE, detail)
    if status_code == 402:
        return NarrationError(402, NO_CREDITS_MESSAGE, detail)
    return NarrationError(500, GENERIC_MESSAGE, detail)


def _candidate_text(data: Dict[str, Any]) -> str:
    # Formato: {candidates: [{content: {parts: [{text: "..."}]}}]}
    candidates = data.get("candidates") or [{}]
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts)


class GeminiClient:
    """Cliente para a API do Google Gemini (Google AI Studio) que narra análises já calculadas."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        temperature: float = 0.3,
        max_tokens: int = 4096,
        timeout: int = 120,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": api_key,
        }

    def build_payload(self, message: str, conversation_history: Optional[List[Dict[str, str]]] = None) -> Dict[str, Any]:
        contents = []
        for msg in conversation_history or []:
            role = msg.get("role", "user")
            # Gemini usa "user" e "model" (não "assistant")
            if role == "assistant":
                role = "model"
            contents.append({"role": role, "parts": [{"text": msg.get("content", "")}]})
        contents.append({"role": "user", "parts": [{"text": message}]})
        return {
            "systemInstruction": {"parts": [{"text": get_system_prompt()}]},
            "contents": contents,
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens,
                "topP": 0.95,
                "topK": 40,
            },
        }

    def send_message(self, message: str, conversation_history: Optional[list] = None) -> Dict[str, Any]:
        """
        Envia uma mensagem e retorna a resposta completa.

        Returns:
            Dict[str, Any]: {"success", "message", "usage", "model"} ou {"success": False, "error", "message"}
        """
        url = f"{BASE_URL}/{self.model}:generateContent"
        try:
            response = requests.post(
                url,
                headers=self.headers,
                data=json.dumps(self.build_payload(message, conversation_history)),
                timeout=self.timeout,
            )
            if not response.ok:
                raise _error_for_status(response.status_code, response.text)
            response_data = response.json()
            return {
                "success": True,
                "message": _candidate_text(response_data),
                "usage": response_data.get("usageMetadata", {}),
                "model": self.model,
            }
        except NarrationError as e:
            logger.error("erro do modelo (%s): %s", e.status_code, e.detail)
            return {"success": False, "error": e.detail or e.message, "message": e.message}
        except requests.exceptions.RequestException as e:
            logger.error("falha de conexão com o modelo: %s", e)
            return {
                "success": False,
                "error": f"Erro na requisição: {e}",
                "message": "Erro ao conectar com a API. Verifique sua chave de API e conexão com a internet.",
            }
        except ValueError as e:
            return {
                "success": False,
                "error": f"Erro ao decodificar resposta: {e}",
                "message": "Desculpe, ocorreu um erro ao processar a resposta. Tente novamente.",
            }

    def stream_message(self, message: str, conversation_history: Optional[list] = None) -> Iterator[str]:
        """Abre o stream SSE do modelo e devolve um iterador de trechos de texto.

        Erros de conexão ou de status são levantados como NarrationError aqui,
        antes do primeiro trecho.
        """
        url = f"{BASE_URL}/{self.model}:streamGenerateContent"
        logger.info("chamando modelo %s (stream)", self.model)
        try:
            response = requests.post(
                url,
                params={"alt": "sse"},
                headers=self.headers,
                data=json.dumps(self.build_payload(message, conversation_history)),
                timeout=self.timeout,
                stream=True,
            )
        except requests.exceptions.RequestException as e:
            logger.error("falha de conexão com o modelo: %s", e)
            raise NarrationError(500, GENERIC_MESSAGE, str(e)) from e

        logger.info("resposta do modelo: %s", response.status_code)
        if not response.ok:
            detail = response.text
            response.close()
            logger.error("erro do modelo (%s): %s", response.status_code, detail)
            raise _error_for_status(response.status_code, detail)

        return self._iter_chunks(response)

    @staticmethod
    def _iter_chunks(response: requests.Response) -> Iterator[str]:
        with response:
            try:
                for line in response.iter_lines(decode_unicode=True):
                    if not line or not line.startswith("data:"):
                        continue
                    raw = line[len("data:"):].strip()
                    if raw == "[DONE]":
                        break
                    try:
                        text = _candidate_text(json.loads(raw))
                    except ValueError:
                        logger.warning("trecho SSE ignorado: %r", raw[:200])
                        continue
                    if text:
                        yield text
            except requests.exceptions.RequestException as e:
                logger.error("stream do modelo interrompido: %s", e)
                raise NarrationError(500, GENERIC_MESSAGE, str(e)) from e
