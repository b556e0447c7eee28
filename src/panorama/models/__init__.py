"""
Modelos de datos del sistema.

- ProjectRecord: empreendimento normalizado
- FilterSelection: filtros activos del dashboard
- DerivedMetrics: KPIs y series agrupadas
- SyncState: snapshot de datos + estado de conexión
"""

from panorama.models.project import ProjectRecord
from panorama.models.filters import (
    CATEGORICAL_DIMENSIONS,
    RANGE_DEFAULTS,
    FilterSelection,
    NumericRange,
)
from panorama.models.metrics import (
    DerivedMetrics,
    DeveloperYearRow,
    ExportRow,
    GroupTotal,
    KpiTotals,
)
from panorama.models.sync import DatasetSnapshot, ProgressEvent, SyncState

__all__ = [
    # Registros
    "ProjectRecord",
    # Filtros
    "CATEGORICAL_DIMENSIONS",
    "RANGE_DEFAULTS",
    "FilterSelection",
    "NumericRange",
    # Métricas
    "DerivedMetrics",
    "DeveloperYearRow",
    "ExportRow",
    "GroupTotal",
    "KpiTotals",
    # Sincronización
    "DatasetSnapshot",
    "ProgressEvent",
    "SyncState",
]
