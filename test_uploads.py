from alpha_insights.store import SpreadsheetStore
from alpha_insights.uploads import UploadSession


class FakeUpload:
    def __init__(self, name, data):
        self.name = name
        self.data = data
        self.size = len(data)

    def getvalue(self):
        return self.data


CSV = FakeUpload("vendas.csv", "Data;Produto;Qtd\n05/01/2024;Mouse;2\n".encode("utf-8"))


def test_same_file_ingested_once_across_reruns():
    store = SpreadsheetStore()
    uploads = UploadSession(store, "local")
    assert uploads.ingest([CSV]) == []
    assert uploads.ingest([CSV]) == []
    assert store.file_count("local") == 1
    assert store.consolidated_rows("local")[0].Produto == "Mouse"


def test_clear_resets_uploader_so_files_are_not_reingested():
    store = SpreadsheetStore()
    uploads = UploadSession(store, "local")
    uploads.ingest([CSV])
    key_before = uploads.uploader_key

    assert uploads.clear() == 1
    assert store.list("local") == []
    # chave nova: o widget recriado começa vazio
    assert uploads.uploader_key != key_before

    # o novo uploader não devolve nada até o usuário enviar de novo
    uploads.ingest(None)
    assert store.file_count("local") == 0

    uploads.ingest([CSV])
    assert store.file_count("local") == 1


def test_bad_and_empty_files_are_reported():
    store = SpreadsheetStore()
    uploads = UploadSession(store, "local")
    problems = uploads.ingest([
        FakeUpload("notas.pdf", b"%PDF"),
        FakeUpload("vazia.csv", "Produto;Qtd\n".encode("utf-8")),
        FakeUpload("quebrada.xls", b"\xd0\xcf\x11\xe0" + b"\x00" * 60),
    ])
    assert problems[0].startswith("notas.pdf: Formato não suportado")
    assert problems[1] == "vazia.csv: planilha vazia"
    assert problems[2].startswith("quebrada.xls: Não foi possível ler a planilha Excel")
    assert store.file_count("local") == 0
