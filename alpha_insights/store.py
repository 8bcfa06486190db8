"""
Armazenamento em memória das planilhas normalizadas, separado por usuário.

Faz o papel da tabela de planilhas do banco: cada registro pertence a um único
usuário e a listagem vem da mais recente para a mais antiga.
"""
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from .models import CanonicalRow, StoredSpreadsheet
from .normalizer import normalize_sheet
from .schema import unmapped_headers


logger = logging.getLogger(__name__)


class SpreadsheetStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._by_user: Dict[str, List[StoredSpreadsheet]] = {}

    def ingest(self, user_id: str, file_name: str, rows: List[Mapping[str, Any]], headers: Optional[List[str]] = None) -> StoredSpreadsheet:
        """Normaliza as linhas brutas e guarda a planilha para o usuário."""
        header_map, canonical, summary = normalize_sheet(headers, rows)
        sheet = StoredSpreadsheet(
            id=uuid.uuid4().hex,
            file_name=file_name,
            headers=list(header_map.keys()),
            canonical_headers=header_map,
            rows=canonical,
            summary=summary,
            created_at=datetime.now(timezone.utc),
        )
        logger.info(
            "planilha %s normalizada: %d linhas, sem correspondência: %s",
            file_name,
            len(canonical),
            unmapped_headers(header_map) or "-",
        )
        self.add(user_id, sheet)
        return sheet

    def add(self, user_id: str, sheet: StoredSpreadsheet) -> None:
        with self._lock:
            self._by_user.setdefault(user_id, []).insert(0, sheet)

    def list(self, user_id: str) -> List[StoredSpreadsheet]:
        with self._lock:
            return list(self._by_user.get(user_id, []))

    def clear(self, user_id: str) -> int:
        with self._lock:
            return len(self._by_user.pop(user_id, []))

    def consolidated_rows(self, user_id: str) -> List[CanonicalRow]:
        return [r for s in self.list(user_id) for r in s.rows]

    def file_count(self, user_id: str) -> int:
        return len(self.list(user_id))
