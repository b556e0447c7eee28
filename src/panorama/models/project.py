"""
ProjectRecord: empreendimento normalizado.

Forma canónica de un registro del catálogo de GeoBrain, independiente
de cómo cada cuenta/versión de la API nombre sus campos.
"""

from pydantic import BaseModel, ConfigDict, Field

from panorama.config import UNKNOWN


class ProjectRecord(BaseModel):
    """
    Empreendimento normalizado.

    Inmutable una vez creado: la colección completa se reemplaza al final
    de cada sincronización, nunca se modifica registro a registro.
    """

    model_config = ConfigDict(frozen=True)

    # Identificación
    id: str = Field(..., description="ID del upstream o posición en la página si falta")
    name: str = Field(UNKNOWN, description="Nombre del empreendimento")

    # Ubicación
    city: str = Field(UNKNOWN, description="Ciudad")
    state: str = Field(UNKNOWN, description="Estado (UF)")
    neighborhood: str = Field(UNKNOWN, description="Barrio")

    # Clasificación
    developer: str = Field(UNKNOWN, description="Incorporadora / constructora")
    project_type: str = Field("Vertical", description="Tipo de empreendimento")
    quality_tier: str = Field("Standard", description="Padrão de acabado")
    unit_type: str = Field("Padrao", description="Tipología de la unidad")
    bedrooms: int = Field(2, description="Cantidad de dormitorios")
    status: str = Field("Comercializacao", description="Etapa comercial")
    launch_year: int = Field(..., description="Año de lanzamiento")

    # Valores (VGV = valor general de ventas)
    launched_value: float = Field(0.0, description="VGV lanzado")
    sold_value: float = Field(0.0, description="VGV vendido")
    units_sold: int = Field(0, description="Unidades vendidas")
    total_units: int = Field(0, description="Unidades totales")
    average_price: float = Field(0.0, description="Ticket medio por unidad")
    private_area: float = Field(0.0, description="Área privativa media (m²)")
    price_per_area: float = Field(0.0, description="Valor por m²")

    # Metadatos
    updated_at: str = Field(..., description="Timestamp ISO de la última actualización")
