from datetime import date, datetime
import logging

from alpha_insights.normalizer import (
    normalize_row,
    normalize_rows,
    normalize_sheet,
    parse_date,
    parse_decimal,
    parse_quantity,
)
from alpha_insights.schema import clean_header, map_headers, normalize_header, unmapped_headers


def test_clean_header():
    assert clean_header("  Valor Total (R$) ") == "valor_total__r__"
    assert clean_header("Preço Unitário") == "preco_unitario"


def test_header_scenarios():
    assert normalize_header("Valor Total (R$)") == "Receita_Total"
    assert normalize_header("Qtd Vendida") == "Quantidade"
    assert normalize_header("Data da Venda") == "Data"
    assert normalize_header("Região") == "Regiao"
    assert normalize_header("ID Transação") == "ID_Transacao"
    assert normalize_header("Preço Unitário") == "Preco_Unitario"
    assert normalize_header("Revenue") == "Receita_Total"


def test_header_table_order_resolves_ties():
    # "produto" e "categoria" aparecem; Categoria vem antes na tabela
    assert normalize_header("Categoria do Produto") == "Categoria"
    # "preco" e "total": Receita_Total vem antes de Preco_Unitario
    assert normalize_header("Preço Total") == "Receita_Total"
    # "quantidade" contém "id", mas "id" sozinho não é variante
    assert normalize_header("quantidade vendida") == "Quantidade"
    # "transação" sem id não é identificador
    assert normalize_header("Valor Total da Transação") == "Receita_Total"
    assert normalize_header("Transaction ID") == "ID_Transacao"
    rows = normalize_rows([{"Produto": "Mouse", "Valor Total da Transação": "150,00"}])
    assert rows[0].Receita_Total == 150.0
    assert rows[0].ID_Transacao is None


def test_unknown_header_passes_through():
    assert normalize_header("Vendedor") == "Vendedor"
    mapping = map_headers(["Vendedor", "Produto", "Qtd"])
    assert mapping == {"Vendedor": "Vendedor", "Produto": "Produto", "Qtd": "Quantidade"}
    assert unmapped_headers(mapping) == ["Vendedor"]


def test_canonical_headers_map_to_themselves():
    for h in ("Data", "Ano", "Mes", "Trimestre", "Receita_Total", "Preco_Unitario"):
        assert normalize_header(h) == h


def test_parse_date_formats():
    assert parse_date("2024-3-5") == date(2024, 3, 5)
    assert parse_date("15/03/2024") == date(2024, 3, 15)
    assert parse_date("5/3/2024") == date(2024, 3, 5)
    assert parse_date("2024-03-15 00:00:00") == date(2024, 3, 15)
    assert parse_date(datetime(2024, 1, 2, 10, 30)) == date(2024, 1, 2)


def test_parse_date_second_group_over_12_is_day():
    assert parse_date("03/15/2024") == date(2024, 3, 15)


def test_parse_date_invalid():
    assert parse_date("31/02/2024") is None
    assert parse_date("ontem") is None
    assert parse_date("") is None
    assert parse_date(None) is None


def test_parse_quantity():
    assert parse_quantity("12") == 12
    assert parse_quantity(" 7 un") == 7
    assert parse_quantity(3.0) == 3
    assert parse_quantity("abc") == 0
    assert parse_quantity(None) == 0
    assert parse_quantity(float("nan")) == 0


def test_parse_decimal():
    assert parse_decimal("19,90") == 19.9
    assert parse_decimal("R$ 4990.00") == 4990.0
    assert parse_decimal("1.234,56") == 1234.56
    assert parse_decimal("1,234.56") == 1234.56
    assert parse_decimal(10) == 10.0
    assert parse_decimal("n/a") == 0.0
    assert parse_decimal("") == 0.0


def test_row_date_fields():
    row = normalize_row({"Data": "15/03/2024"}, {"Data": "Data"})
    assert row.Data == "2024-03-15"
    assert (row.Ano, row.Mes, row.Trimestre) == (2024, 3, 1)

    row = normalize_row({"Data": "2024-3-5"}, {"Data": "Data"})
    assert row.Data == "2024-03-05"

    row = normalize_row({"Data": "2024-11-30"}, {"Data": "Data"})
    assert row.Trimestre == 4


def test_row_with_bad_date_is_still_emitted():
    row = normalize_row({"Data": "??", "Produto": "Mouse", "Quantidade": "2"}, {"Data": "Data", "Produto": "Produto", "Quantidade": "Quantidade"})
    assert row.Data is None and row.Ano is None and row.Mes is None and row.Trimestre is None
    assert row.Produto == "Mouse"
    assert row.Quantidade == 2


def test_revenue_derived_when_absent():
    rows = normalize_rows([{"Qtd": "3", "Preço": "10,50"}])
    assert rows[0].Receita_Total == 3 * 10.5


def test_revenue_derived_when_zero():
    rows = normalize_rows([{"Quantidade": "2", "Preco_Unitario": "5", "Receita_Total": "0"}])
    assert rows[0].Receita_Total == 10.0


def test_revenue_not_derived_when_present_or_operand_missing():
    rows = normalize_rows([
        {"Quantidade": "2", "Preco_Unitario": "5", "Receita_Total": "9,99"},
        {"Quantidade": "2"},
        {"Preco_Unitario": "5"},
    ])
    assert rows[0].Receita_Total == 9.99
    assert rows[1].Receita_Total == 0.0
    assert rows[2].Receita_Total == 0.0


def test_extra_columns_kept_aside():
    rows = normalize_rows([{"Produto": "Mouse", "Vendedor": "Ana"}])
    assert rows[0].Produto == "Mouse"
    assert rows[0].extras == {"Vendedor": "Ana"}


def test_numeric_entity_cells_become_text():
    rows = normalize_rows([{"Produto": 1001, "Regiao": None}])
    assert rows[0].Produto == "1001"
    assert rows[0].Regiao is None


def test_normalizing_twice_is_idempotent():
    raw = [
        {"Data": "15/03/2024", "Produto": "Laptop X1", "Qtd": "2", "Preço Unitário": "4.990,00", "Vendedor": "Ana"},
        {"Data": "2024-04-01", "Produto": "Mouse", "Quantidade": "5", "Valor Total": "R$ 250,00"},
    ]
    first = normalize_rows(raw)
    second = normalize_rows([r.to_raw() for r in first])
    assert [r.model_dump() for r in second] == [r.model_dump() for r in first]


def test_normalize_sheet_summary():
    header_map, rows, summary = normalize_sheet(None, [{"Produto": "A", "Qtd": "1"}, {"Produto": "B", "Qtd": "2"}])
    assert header_map == {"Produto": "Produto", "Qtd": "Quantidade"}
    assert len(rows) == 2
    assert summary == "Planilha com 2 linhas e 2 colunas. Colunas: Produto, Qtd"


def test_duplicate_canonical_header_keeps_first_column(caplog):
    with caplog.at_level(logging.WARNING, logger="alpha_insights.schema"):
        rows = normalize_rows([{"ID Produto": "P1", "Produto": "Mouse", "Qtd": "2"}])
    assert rows[0].Produto == "P1"
    assert rows[0].extras == {"Produto": "Mouse"}
    assert rows[0].Quantidade == 2
    assert "ID Produto" in caplog.text
    assert rows[0].to_raw()["Produto"] == "P1"
