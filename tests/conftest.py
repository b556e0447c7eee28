"""Root conftest: credenciales falsas y fábrica de registros."""

import os

# Evita que los tests usen credenciales reales o un .env local
os.environ["GEOBRAIN_EMAIL"] = "tests@panorama.local"
os.environ["GEOBRAIN_PASSWORD"] = "not-a-real-password"
os.environ["GEOBRAIN_BASE_URL"] = "http://127.0.0.1:9/public-api"

import pytest

from panorama.models import ProjectRecord


_RECORD_DEFAULTS = {
    "name": "Residencial Teste",
    "city": "Campinas",
    "state": "SP",
    "neighborhood": "Cambuí",
    "developer": "Construtora A",
    "project_type": "Vertical",
    "quality_tier": "Standard",
    "unit_type": "Padrao",
    "bedrooms": 2,
    "status": "Comercializacao",
    "launch_year": 2023,
    "launched_value": 0.0,
    "sold_value": 0.0,
    "units_sold": 0,
    "total_units": 0,
    "average_price": 400_000.0,
    "private_area": 70.0,
    "price_per_area": 6_000.0,
    "updated_at": "2024-01-01T00:00:00",
}


@pytest.fixture
def make_record():
    """Fábrica de ProjectRecord con valores razonables y overrides por keyword."""
    counter = {"next": 0}

    def _make(**overrides) -> ProjectRecord:
        counter["next"] += 1
        values = {**_RECORD_DEFAULTS, "id": str(counter["next"]), **overrides}
        return ProjectRecord(**values)

    return _make
