import logging
from typing import List, Set, Tuple

from .dataset import frame_to_records, read_spreadsheet_bytes
from .store import SpreadsheetStore


logger = logging.getLogger(__name__)


class UploadSession:
    """Arquivos do uploader já normalizados nesta sessão do navegador.

    O Streamlit devolve os mesmos arquivos a cada rerun; cada (nome, tamanho)
    entra no store uma única vez. ``clear`` troca a chave do widget para que o
    uploader volte vazio e os arquivos antigos não sejam reenviados.
    """

    def __init__(self, store: SpreadsheetStore, user_id: str):
        self.store = store
        self.user_id = user_id
        self.ingested: Set[Tuple[str, int]] = set()
        self.generation = 0

    @property
    def uploader_key(self) -> str:
        return f"uploader_{self.generation}"

    def ingest(self, files) -> List[str]:
        """Normaliza os arquivos novos; devolve mensagens de erro para a interface."""
        problems: List[str] = []
        for f in files or []:
            key = (f.name, f.size)
            if key in self.ingested:
                continue
            try:
                df = read_spreadsheet_bytes(f.name, f.getvalue())
            except ValueError as e:
                problems.append(f"{f.name}: {e}")
                continue
            # marcado mesmo quando vazio, para não repetir o aviso a cada rerun
            self.ingested.add(key)
            records = frame_to_records(df)
            if not records:
                problems.append(f"{f.name}: planilha vazia")
                continue
            sheet = self.store.ingest(self.user_id, f.name, records, [str(c).strip() for c in df.columns])
            logger.info("planilha %s carregada (%d linhas)", f.name, len(sheet.rows))
        return problems

    def clear(self) -> int:
        removed = self.store.clear(self.user_id)
        self.ingested = set()
        self.generation += 1
        return removed
