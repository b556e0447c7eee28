"""
Estado de la sincronización con GeoBrain.

El snapshot de registros y el estado de conexión se reemplazan enteros;
los lectores nunca ven una actualización a medias.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from panorama.models.project import ProjectRecord


class ProgressEvent(BaseModel):
    """Avance de la descarga paginada."""

    model_config = ConfigDict(frozen=True)

    loaded: int = Field(..., description="Registros acumulados")
    total: int = Field(..., description="Total informado por meta (o acumulado si falta)")
    page: int = Field(..., description="Página recién descargada")

    @computed_field
    @property
    def percent(self) -> Optional[float]:
        if self.total <= 0:
            return None
        return self.loaded / self.total * 100


class DatasetSnapshot(BaseModel):
    """Colección normalizada confirmada por la última sincronización exitosa."""

    model_config = ConfigDict(frozen=True)

    records: tuple[ProjectRecord, ...] = ()
    synced_at: Optional[datetime] = None


class SyncState(BaseModel):
    """Lo que ve el consumidor: datos, conexión, error y progreso."""

    model_config = ConfigDict(frozen=True)

    snapshot: DatasetSnapshot = Field(default_factory=DatasetSnapshot)
    is_connected: bool = True
    is_syncing: bool = False
    last_error: Optional[str] = None
    last_progress: Optional[ProgressEvent] = None
