"""
Normalización de registros crudos de GeoBrain.

Cada campo canónico tiene una lista ordenada de alias aceptados en el
upstream y un valor por defecto. El nombre canónico siempre figura entre
los alias, así que normalizar un registro ya normalizado no lo cambia.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from panorama.config import UNKNOWN
from panorama.models import ProjectRecord

# Prefijo numérico al estilo parseFloat: "3 quartos" -> 3, "120.5m2" -> 120.5
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


@dataclass(frozen=True)
class FieldRule:
    """Regla de resolución de un campo canónico."""

    aliases: tuple[str, ...]
    kind: str  # "text" | "int" | "float"
    default: Any = None
    # Default que depende del momento de normalización (año actual, ahora)
    default_factory: Optional[Callable[[datetime], Any]] = None

    def resolve_default(self, now: datetime) -> Any:
        if self.default_factory is not None:
            return self.default_factory(now)
        return self.default


FIELD_RULES: dict[str, FieldRule] = {
    "name": FieldRule(("nome", "empreendimento", "name"), "text", UNKNOWN),
    "city": FieldRule(("cidade", "city"), "text", UNKNOWN),
    "state": FieldRule(("estado", "uf", "state"), "text", UNKNOWN),
    "neighborhood": FieldRule(("bairro", "neighborhood"), "text", UNKNOWN),
    "developer": FieldRule(
        ("incorporadora", "construtora", "developer"), "text", UNKNOWN
    ),
    "project_type": FieldRule(("tipo", "type", "project_type"), "text", "Vertical"),
    "quality_tier": FieldRule(("padrao", "standard", "quality_tier"), "text", "Standard"),
    "unit_type": FieldRule(
        ("tipologia", "tipo_imovel", "property_type", "unit_type"), "text", "Padrao"
    ),
    "bedrooms": FieldRule(("quartos", "dormitorios", "bedrooms"), "int", 2),
    "launched_value": FieldRule(
        ("vgv_total", "vgv", "total_value", "launched_value"), "float", 0.0
    ),
    "sold_value": FieldRule(("vgv_vendido", "sold_value"), "float", 0.0),
    "units_sold": FieldRule(("unidades_vendidas", "sold_units", "units_sold"), "int", 0),
    "total_units": FieldRule(
        ("total_unidades", "unidades", "total_units"), "int", 0
    ),
    "average_price": FieldRule(
        ("preco_medio", "ticket_medio", "average_price"), "float", 0.0
    ),
    "private_area": FieldRule(
        ("area_privativa", "m2", "private_area"), "float", 0.0
    ),
    "price_per_area": FieldRule(
        ("valor_m2", "price_per_sqm", "price_per_area"), "float", 0.0
    ),
    "status": FieldRule(("status",), "text", "Comercializacao"),
    "launch_year": FieldRule(
        ("ano_lancamento", "ano", "launch_year"),
        "int",
        default_factory=lambda now: now.year,
    ),
    "updated_at": FieldRule(
        ("updated_at", "data_atualizacao"),
        "text",
        default_factory=lambda now: now.isoformat(),
    ),
}


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _first_present(raw: dict[str, Any], aliases: tuple[str, ...]) -> Any:
    for alias in aliases:
        value = raw.get(alias)
        if not _is_absent(value):
            return value
    return None


def to_float(value: Any) -> float:
    """Parseo permisivo: lo no numérico vale 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # int de JSON fuera del rango de float
            return 0.0
        return number if math.isfinite(number) else 0.0
    if not isinstance(value, str):
        return 0.0

    text = value.replace("R$", "").strip()
    try:
        number = float(text)
    except ValueError:
        number = None

    # Formato brasileño: 1.234.567,89
    if number is None and "," in text:
        try:
            number = float(text.replace(".", "").replace(",", "."))
        except ValueError:
            number = None

    if number is None:
        match = _LEADING_NUMBER.match(text)
        number = float(match.group(0)) if match else 0.0

    return number if math.isfinite(number) else 0.0


def to_int(value: Any) -> int:
    """Como to_float pero truncando (parseInt)."""
    return int(to_float(value))


def normalize_record(
    raw: dict[str, Any], index: int, now: Optional[datetime] = None
) -> ProjectRecord:
    """
    Mapea un registro crudo a ProjectRecord. Nunca falla.

    Args:
        raw: Registro tal como vino de la API
        index: Posición en la sincronización (ID de respaldo)
        now: Momento de normalización para los defaults dependientes del tiempo
    """
    now = now or datetime.now()
    values: dict[str, Any] = {}

    raw_id = _first_present(raw, ("id",))
    values["id"] = str(raw_id) if raw_id is not None else str(index)

    for field_name, rule in FIELD_RULES.items():
        value = _first_present(raw, rule.aliases)
        if value is None:
            values[field_name] = rule.resolve_default(now)
        elif rule.kind == "int":
            values[field_name] = to_int(value)
        elif rule.kind == "float":
            values[field_name] = to_float(value)
        else:
            values[field_name] = str(value).strip()

    return ProjectRecord(**values)


def normalize_records(
    raw_records: list[dict[str, Any]], now: Optional[datetime] = None
) -> list[ProjectRecord]:
    """Normaliza una pasada completa; el índice sirve de ID cuando falta."""
    now = now or datetime.now()
    return [
        normalize_record(raw if isinstance(raw, dict) else {}, index, now)
        for index, raw in enumerate(raw_records)
    ]
