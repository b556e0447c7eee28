"""
Motor de filtros y agregaciones.

Evalúa la selección de filtros sobre el snapshot normalizado y calcula
los KPIs y series que consume el dashboard.
"""

from panorama.analytics.filters import (
    FilterEngine,
    active_filter_count,
    apply_filters,
    filter_options,
    matches,
    search_options,
)
from panorama.analytics.aggregation import (
    compute_kpis,
    compute_metrics,
    developer_year_matrix,
    export_rows,
    group_totals,
    launch_years,
    top_developers,
    top_records,
)
from panorama.analytics.view import MarketView

__all__ = [
    # Filtros
    "FilterEngine",
    "matches",
    "apply_filters",
    "active_filter_count",
    "filter_options",
    "search_options",
    # Agregaciones
    "compute_kpis",
    "compute_metrics",
    "group_totals",
    "top_records",
    "top_developers",
    "launch_years",
    "developer_year_matrix",
    "export_rows",
    # Vista
    "MarketView",
]
