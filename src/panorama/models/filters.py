"""
Selección de filtros del dashboard.

Dimensiones categóricas: conjunto de valores aceptados (vacío = sin filtro).
Dimensiones numéricas: rango inclusivo [min, max] con un default de dominio completo.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from panorama.config import (
    AVERAGE_PRICE_RANGE,
    PRICE_PER_AREA_RANGE,
    PRIVATE_AREA_RANGE,
)

# Campo de la selección -> atributo del ProjectRecord
CATEGORICAL_DIMENSIONS: dict[str, str] = {
    "states": "state",
    "cities": "city",
    "neighborhoods": "neighborhood",
    "quality_tiers": "quality_tier",
    "statuses": "status",
    "project_types": "project_type",
    "unit_types": "unit_type",
    "bedrooms": "bedrooms",
    "launch_years": "launch_year",
    "developers": "developer",
}

# Dimensión numérica -> rango completo por defecto
RANGE_DEFAULTS: dict[str, tuple[float, float]] = {
    "private_area": PRIVATE_AREA_RANGE,
    "average_price": AVERAGE_PRICE_RANGE,
    "price_per_area": PRICE_PER_AREA_RANGE,
}


class NumericRange(BaseModel):
    """Rango inclusivo sobre una dimensión numérica."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float

    @classmethod
    def of(cls, bounds: tuple[float, float]) -> "NumericRange":
        low, high = bounds
        return cls(min=low, max=high)

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def as_tuple(self) -> tuple[float, float]:
        return (self.min, self.max)


class FilterSelection(BaseModel):
    """
    Estado de filtros seleccionado por el usuario.

    Es inmutable: toggle() y with_range() devuelven una selección nueva.
    FilterSelection() es el estado "limpiar filtros".
    """

    model_config = ConfigDict(frozen=True)

    # Categóricos
    states: frozenset[str] = Field(default_factory=frozenset)
    cities: frozenset[str] = Field(default_factory=frozenset)
    neighborhoods: frozenset[str] = Field(default_factory=frozenset)
    quality_tiers: frozenset[str] = Field(default_factory=frozenset)
    statuses: frozenset[str] = Field(default_factory=frozenset)
    project_types: frozenset[str] = Field(default_factory=frozenset)
    unit_types: frozenset[str] = Field(default_factory=frozenset)
    bedrooms: frozenset[int] = Field(default_factory=frozenset)
    launch_years: frozenset[int] = Field(default_factory=frozenset)
    developers: frozenset[str] = Field(default_factory=frozenset)

    # Numéricos
    private_area: NumericRange = Field(
        default_factory=lambda: NumericRange.of(PRIVATE_AREA_RANGE),
        description="Área privativa (m²)",
    )
    average_price: NumericRange = Field(
        default_factory=lambda: NumericRange.of(AVERAGE_PRICE_RANGE),
        description="Ticket medio",
    )
    price_per_area: NumericRange = Field(
        default_factory=lambda: NumericRange.of(PRICE_PER_AREA_RANGE),
        description="Valor por m²",
    )

    def toggle(self, dimension: str, value: Any) -> "FilterSelection":
        """Agrega el valor a la dimensión si no estaba, o lo quita si estaba."""
        if dimension not in CATEGORICAL_DIMENSIONS:
            raise ValueError(f"Dimensión categórica desconocida: {dimension}")

        current: frozenset = getattr(self, dimension)
        updated = current - {value} if value in current else current | {value}
        return self.model_copy(update={dimension: updated})

    def with_range(
        self, dimension: str, bounds: tuple[float, float]
    ) -> "FilterSelection":
        """Reemplaza el rango de una dimensión numérica."""
        if dimension not in RANGE_DEFAULTS:
            raise ValueError(f"Dimensión numérica desconocida: {dimension}")
        return self.model_copy(update={dimension: NumericRange.of(bounds)})
