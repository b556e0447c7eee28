"""
Métricas derivadas del conjunto filtrado.

Son snapshots de solo lectura: se recalculan completos cuando cambian
los registros o la selección de filtros.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from panorama.models.project import ProjectRecord


class KpiTotals(BaseModel):
    """Totales escalares del conjunto filtrado."""

    model_config = ConfigDict(frozen=True)

    launched_value: float = Field(0.0, description="Suma de VGV lanzado")
    sold_value: float = Field(0.0, description="Suma de VGV vendido")
    total_units: int = Field(0, description="Suma de unidades")
    units_sold: int = Field(0, description="Suma de unidades vendidas")
    count: int = Field(0, description="Cantidad de empreendimentos")

    @computed_field
    @property
    def sold_percentage(self) -> Optional[float]:
        """Porcentaje del VGV lanzado que ya fue vendido (None si no hay VGV)."""
        if self.launched_value <= 0:
            return None
        return self.sold_value / self.launched_value * 100


class GroupTotal(BaseModel):
    """Suma de VGV para un valor de una dimensión (ciudad, tipo, padrão)."""

    model_config = ConfigDict(frozen=True)

    key: str
    launched_value: float = 0.0
    sold_value: float = 0.0


class DeveloperYearRow(BaseModel):
    """Fila de la matriz incorporadora x año: VGV lanzado por incorporadora."""

    model_config = ConfigDict(frozen=True)

    year: int
    values: dict[str, float] = Field(default_factory=dict)


class ExportRow(BaseModel):
    """Fila del ranking exportable (reporte)."""

    model_config = ConfigDict(frozen=True)

    rank: int
    name: str
    city: str
    state: str
    developer: str
    launch_year: int
    launched_value: float
    sold_value: float


class DerivedMetrics(BaseModel):
    """Todo lo que consume la capa de presentación."""

    model_config = ConfigDict(frozen=True)

    kpis: KpiTotals = Field(default_factory=KpiTotals)
    by_city: list[GroupTotal] = Field(default_factory=list)
    by_type: list[GroupTotal] = Field(default_factory=list)
    by_quality_tier: list[GroupTotal] = Field(default_factory=list)
    top_records: list[ProjectRecord] = Field(default_factory=list)
    top_developers: list[str] = Field(default_factory=list)
    developer_by_year: list[DeveloperYearRow] = Field(default_factory=list)
