import pytest
from pydantic import ValidationError

from alpha_insights.models import CanonicalRow
from alpha_insights.query_parser import extract_months, extract_top_n, extract_years, parse_query


ROWS = [
    CanonicalRow(Produto="Laptop X1", Categoria="Eletrônicos", Regiao="Sudeste"),
    CanonicalRow(Produto="Mouse Óptico", Categoria="Acessórios", Regiao="Sul"),
    CanonicalRow(Produto="Laptop X1", Categoria="Eletrônicos", Regiao="Norte"),
    CanonicalRow(Produto=None, Categoria=None, Regiao=None),
]


def test_plain_question_has_empty_filters():
    ctx = parse_query("Como estão as coisas?", ROWS)
    assert ctx.years == () and ctx.months == ()
    assert ctx.produtos == () and ctx.categorias == () and ctx.regioes == ()
    assert ctx.topN is None
    assert ctx.comparison is False


def test_top_n_scenario():
    ctx = parse_query("Quero o top 3 produtos de 2023", ROWS)
    assert ctx.years == (2023,)
    assert ctx.months == ()
    assert ctx.topN == 3


def test_years_deduplicated_in_order():
    assert extract_years("compare 2024 com 2023 e 2024") == [2024, 2023]
    assert extract_years("pedido 120234") == []


def test_months_full_names_and_abbreviations():
    assert extract_months("vendas em março") == [3]
    assert extract_months("vendas em MARCO") == [3]
    assert extract_months("jan e fev") == [1, 2]
    assert extract_months("de janeiro a dezembro") == [1, 12]


def test_months_loose_substring_quirk():
    # "maior" contém "mai"
    assert extract_months("qual o maior produto") == [5]
    assert extract_months("qual o maior produto", strict=True) == []
    assert extract_months("vendas de mai", strict=True) == [5]


def test_top_n_patterns():
    assert extract_top_n("top 5 produtos") == 5
    assert extract_top_n("os 3 maior3") == 3
    assert extract_top_n("Melhor 2 regiões") == 2
    assert extract_top_n("top produtos") is None
    assert extract_top_n("top 0") is None


def test_metrics_and_comparison():
    ctx = parse_query("Compare a quantidade e a receita; qual o ticket médio?", ROWS)
    assert ctx.metrics == ("quantidade", "receita", "preco_medio")
    assert ctx.comparison is True


def test_metrics_are_whole_words():
    ctx = parse_query("qtdx receitas", ROWS)
    assert ctx.metrics == ()


def test_entities_closed_vocabulary():
    ctx = parse_query("vendas de laptop x1 no sudeste em eletrônicos", ROWS)
    assert ctx.produtos == ("Laptop X1",)
    assert ctx.categorias == ("Eletrônicos",)
    assert ctx.regioes == ("Sudeste",)

    ctx = parse_query("vendas de tablet", ROWS)
    assert ctx.produtos == ()


def test_context_is_immutable():
    ctx = parse_query("top 3", ROWS)
    with pytest.raises(ValidationError):
        ctx.topN = 5


def test_context_lists_cannot_be_mutated():
    ctx = parse_query("vendas de 2024 em março", ROWS)
    with pytest.raises(AttributeError):
        ctx.years.append(2025)
    assert ctx.years == (2024,)
    assert ctx.months == (3,)
