from typing import List, Sequence

from .models import CanonicalRow, QueryContext


# dimensão do contexto -> campo da linha
FILTER_FIELDS = (
    ("years", "Ano"),
    ("months", "Mes"),
    ("produtos", "Produto"),
    ("categorias", "Categoria"),
    ("regioes", "Regiao"),
)


def filter_data(rows: Sequence[CanonicalRow], ctx: QueryContext) -> List[CanonicalRow]:
    """Mantém as linhas que atendem a todas as dimensões não vazias do contexto."""
    active = [(field, set(getattr(ctx, dim))) for dim, field in FILTER_FIELDS if getattr(ctx, dim)]
    if not active:
        return list(rows)
    return [r for r in rows if all(getattr(r, field) in allowed for field, allowed in active)]
