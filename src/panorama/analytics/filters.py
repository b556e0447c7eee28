"""
Motor de filtros del dashboard.

Implementa:
- Predicado por registro (AND entre dimensiones, conjunto vacío = sin filtro)
- Conteo de filtros activos
- Opciones disponibles por dimensión y búsqueda dentro de ellas
"""

from typing import Any, Iterable, Optional

from panorama.config import OPTION_DISPLAY_LIMIT
from panorama.models import (
    CATEGORICAL_DIMENSIONS,
    RANGE_DEFAULTS,
    FilterSelection,
    ProjectRecord,
)


def matches(record: ProjectRecord, selection: FilterSelection) -> bool:
    """True si el registro pasa todos los filtros de la selección."""
    for dimension, attribute in CATEGORICAL_DIMENSIONS.items():
        accepted = getattr(selection, dimension)
        if accepted and getattr(record, attribute) not in accepted:
            return False

    for dimension in RANGE_DEFAULTS:
        if not getattr(selection, dimension).contains(getattr(record, dimension)):
            return False

    return True


def apply_filters(
    records: Iterable[ProjectRecord], selection: FilterSelection
) -> list[ProjectRecord]:
    """Filtra preservando el orden original."""
    return [record for record in records if matches(record, selection)]


def active_filter_count(selection: FilterSelection) -> int:
    """
    Valores categóricos seleccionados + 1 por cada rango distinto de su default.

    La selección por defecto (sin tocar) cuenta 0.
    """
    count = sum(len(getattr(selection, dimension)) for dimension in CATEGORICAL_DIMENSIONS)
    for dimension, default in RANGE_DEFAULTS.items():
        if getattr(selection, dimension).as_tuple() != default:
            count += 1
    return count


def filter_options(records: Iterable[ProjectRecord]) -> dict[str, list[Any]]:
    """
    Valores distintos por dimensión categórica sobre el universo completo.

    Textos y dormitorios en orden ascendente, años de lanzamiento del más
    reciente al más antiguo. Se omiten vacíos y ceros.
    """
    records = list(records)
    options: dict[str, list[Any]] = {}
    for dimension, attribute in CATEGORICAL_DIMENSIONS.items():
        values = {getattr(record, attribute) for record in records}
        values.discard("")
        values.discard(0)
        options[dimension] = sorted(values, reverse=(dimension == "launch_years"))
    return options


def search_options(
    options: list[str], term: str, limit: Optional[int] = OPTION_DISPLAY_LIMIT
) -> list[str]:
    """Búsqueda case-insensitive por substring; sin término devuelve todas (hasta limit)."""
    needle = (term or "").strip().lower()
    found = [option for option in options if needle in str(option).lower()]
    return found[:limit] if limit is not None else found


class FilterEngine:
    """
    Mantiene la selección de filtros vigente.

    Cada cambio reemplaza la selección entera (FilterSelection es inmutable).
    """

    def __init__(self, selection: Optional[FilterSelection] = None):
        self._selection = selection or FilterSelection()

    @property
    def selection(self) -> FilterSelection:
        return self._selection

    @property
    def active_count(self) -> int:
        return active_filter_count(self._selection)

    def toggle(self, dimension: str, value: Any) -> FilterSelection:
        self._selection = self._selection.toggle(dimension, value)
        return self._selection

    def set_range(self, dimension: str, bounds: tuple[float, float]) -> FilterSelection:
        self._selection = self._selection.with_range(dimension, bounds)
        return self._selection

    def replace(self, selection: FilterSelection) -> FilterSelection:
        self._selection = selection
        return self._selection

    def reset(self) -> FilterSelection:
        self._selection = FilterSelection()
        return self._selection

    def matches(self, record: ProjectRecord) -> bool:
        return matches(record, self._selection)

    def apply(self, records: Iterable[ProjectRecord]) -> list[ProjectRecord]:
        return apply_filters(records, self._selection)
