"""
Agregaciones sobre el conjunto filtrado.

Funciones puras: no modifican la colección de entrada. Los rankings son
estables (a igual VGV gana el que apareció primero).
"""

from typing import Iterable, Optional, Sequence

from panorama.config import EXPORT_RECORDS, TOP_DEVELOPERS, TOP_GROUPS, TOP_RECORDS
from panorama.models import (
    DerivedMetrics,
    DeveloperYearRow,
    ExportRow,
    GroupTotal,
    KpiTotals,
    ProjectRecord,
)


def compute_kpis(records: Sequence[ProjectRecord]) -> KpiTotals:
    return KpiTotals(
        launched_value=sum(r.launched_value for r in records),
        sold_value=sum(r.sold_value for r in records),
        total_units=sum(r.total_units for r in records),
        units_sold=sum(r.units_sold for r in records),
        count=len(records),
    )


def group_totals(
    records: Iterable[ProjectRecord], attribute: str, limit: Optional[int] = None
) -> list[GroupTotal]:
    """
    Agrupa por un atributo y suma VGV lanzado/vendido por grupo.

    Args:
        records: Registros filtrados
        attribute: Atributo de ProjectRecord (city, project_type, quality_tier...)
        limit: Top-N; None = todos los grupos

    Returns:
        Grupos ordenados por VGV lanzado descendente
    """
    sums: dict[str, list[float]] = {}
    for record in records:
        key = getattr(record, attribute)
        group = sums.setdefault(key, [0.0, 0.0])
        group[0] += record.launched_value
        group[1] += record.sold_value

    # sorted() es estable también con reverse=True
    ranked = sorted(sums.items(), key=lambda item: item[1][0], reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    return [
        GroupTotal(key=str(key), launched_value=launched, sold_value=sold)
        for key, (launched, sold) in ranked
    ]


def top_records(
    records: Iterable[ProjectRecord], limit: int = TOP_RECORDS
) -> list[ProjectRecord]:
    return sorted(records, key=lambda r: r.launched_value, reverse=True)[:limit]


def top_developers(
    records: Iterable[ProjectRecord], limit: int = TOP_DEVELOPERS
) -> list[str]:
    """Incorporadoras con mayor VGV lanzado; solo se devuelven los nombres."""
    return [group.key for group in group_totals(records, "developer", limit)]


def launch_years(records: Iterable[ProjectRecord]) -> list[int]:
    """Años de lanzamiento distintos (sin ceros), ascendente."""
    return sorted({r.launch_year for r in records if r.launch_year})


def developer_year_matrix(
    records: Iterable[ProjectRecord],
    developers: Sequence[str],
    years: Sequence[int],
) -> list[DeveloperYearRow]:
    """
    VGV lanzado por (año, incorporadora).

    Los años vienen del universo completo, los montos del conjunto filtrado:
    una incorporadora sin lanzamientos en un año vale 0, no falta.
    """
    wanted = set(developers)
    sums: dict[tuple[int, str], float] = {}
    for record in records:
        if record.developer in wanted:
            cell = (record.launch_year, record.developer)
            sums[cell] = sums.get(cell, 0.0) + record.launched_value

    return [
        DeveloperYearRow(
            year=year,
            values={developer: sums.get((year, developer), 0.0) for developer in developers},
        )
        for year in years
    ]


def export_rows(
    records: Iterable[ProjectRecord], limit: int = EXPORT_RECORDS
) -> list[ExportRow]:
    """Ranking para el reporte exportable (top 20 por VGV lanzado)."""
    return [
        ExportRow(
            rank=position,
            name=record.name,
            city=record.city,
            state=record.state,
            developer=record.developer,
            launch_year=record.launch_year,
            launched_value=record.launched_value,
            sold_value=record.sold_value,
        )
        for position, record in enumerate(top_records(records, limit), start=1)
    ]


def compute_metrics(
    filtered: Sequence[ProjectRecord],
    universe: Optional[Sequence[ProjectRecord]] = None,
) -> DerivedMetrics:
    """
    Calcula todas las métricas del dashboard.

    Args:
        filtered: Registros que pasaron los filtros
        universe: Colección completa (define los años de la matriz); default = filtered
    """
    universe = filtered if universe is None else universe
    developers = top_developers(filtered)

    return DerivedMetrics(
        kpis=compute_kpis(filtered),
        by_city=group_totals(filtered, "city", TOP_GROUPS),
        by_type=group_totals(filtered, "project_type"),
        by_quality_tier=group_totals(filtered, "quality_tier", TOP_GROUPS),
        top_records=top_records(filtered),
        top_developers=developers,
        developer_by_year=developer_year_matrix(
            filtered, developers, launch_years(universe)
        ),
    )
