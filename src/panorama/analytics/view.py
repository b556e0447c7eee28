"""
Vista del mercado: snapshot de registros + filtros -> métricas.

Es lo que consume la capa de presentación. Las métricas se recalculan
desde cero cuando cambian los registros o la selección, y se cachean
mientras ninguno de los dos cambie.
"""

from typing import Any, Iterable, Optional

from panorama.analytics.aggregation import compute_metrics, export_rows
from panorama.analytics.filters import FilterEngine, filter_options, search_options
from panorama.models import (
    DerivedMetrics,
    ExportRow,
    FilterSelection,
    ProjectRecord,
    SyncState,
)


class MarketView:
    """Estado derivado del dashboard para un snapshot dado."""

    def __init__(
        self,
        records: Iterable[ProjectRecord] = (),
        selection: Optional[FilterSelection] = None,
    ):
        self._records: tuple[ProjectRecord, ...] = tuple(records)
        self.filters = FilterEngine(selection)
        self._options: Optional[dict[str, list[Any]]] = None
        self._filtered_for: Optional[FilterSelection] = None
        self._filtered: list[ProjectRecord] = []
        self._metrics: Optional[DerivedMetrics] = None

    @classmethod
    def from_state(
        cls, state: SyncState, selection: Optional[FilterSelection] = None
    ) -> "MarketView":
        return cls(state.snapshot.records, selection)

    @property
    def records(self) -> tuple[ProjectRecord, ...]:
        return self._records

    @property
    def selection(self) -> FilterSelection:
        return self.filters.selection

    @property
    def active_filter_count(self) -> int:
        return self.filters.active_count

    def update_records(self, records: Iterable[ProjectRecord]) -> None:
        """Reemplaza el snapshot completo (tras una sincronización)."""
        self._records = tuple(records)
        self._options = None
        self._filtered_for = None
        self._metrics = None

    def toggle(self, dimension: str, value: Any) -> FilterSelection:
        return self.filters.toggle(dimension, value)

    def set_range(self, dimension: str, bounds: tuple[float, float]) -> FilterSelection:
        return self.filters.set_range(dimension, bounds)

    def reset_filters(self) -> FilterSelection:
        return self.filters.reset()

    @property
    def options(self) -> dict[str, list[Any]]:
        if self._options is None:
            self._options = filter_options(self._records)
        return self._options

    def search(self, dimension: str, term: str) -> list[Any]:
        """Opciones de una dimensión que contienen el término (máximo 50)."""
        if dimension not in self.options:
            raise ValueError(f"Dimensión categórica desconocida: {dimension}")
        return search_options(self.options[dimension], term)

    @property
    def filtered(self) -> list[ProjectRecord]:
        selection = self.filters.selection
        if self._filtered_for != selection:
            self._filtered = self.filters.apply(self._records)
            self._filtered_for = selection
            self._metrics = None
        return self._filtered

    @property
    def metrics(self) -> DerivedMetrics:
        filtered = self.filtered
        if self._metrics is None:
            self._metrics = compute_metrics(filtered, self._records)
        return self._metrics

    def export_rows(self) -> list[ExportRow]:
        return export_rows(self.filtered)
