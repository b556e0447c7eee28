"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> panorama/ -> src/ -> raíz del proyecto
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # GeoBrain API
    geobrain_base_url: str = Field(
        "https://geobrain.com.br/public-api",
        description="URL base de la API pública de GeoBrain",
    )
    geobrain_email: str = Field(..., description="Email de la cuenta de GeoBrain")
    geobrain_password: str = Field(..., description="Password de la cuenta de GeoBrain")
    request_timeout: float = Field(30.0, gt=0, description="Timeout por request (segundos)")

    # Token
    token_safety_buffer: float = Field(
        60.0, ge=0, description="Margen antes del vencimiento real del token (segundos)"
    )
    token_fallback_ttl: float = Field(
        50 * 60.0,
        gt=0,
        description="Vida asumida del token si no se puede leer el claim exp (segundos)",
    )

    # Paginación
    page_size: int = Field(100, ge=1, description="Registros por página")
    auth_retry_limit: int = Field(
        2, ge=0, description="Reintentos con re-login ante un 401 por request"
    )

    # Sincronización periódica
    sync_interval_seconds: int = Field(
        300, ge=1, description="Intervalo de re-sincronización automática (segundos)"
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema

# Valor por defecto para campos de texto sin dato en ningún alias
UNKNOWN = "N/A"

# Rangos completos (sin filtro) de las dimensiones numéricas
PRIVATE_AREA_RANGE = (0.0, 2000.0)
AVERAGE_PRICE_RANGE = (0.0, 100_000_000.0)
PRICE_PER_AREA_RANGE = (0.0, 100_000.0)

# Tamaños de los rankings
TOP_GROUPS = 8
TOP_RECORDS = 10
EXPORT_RECORDS = 20
TOP_DEVELOPERS = 6

# Máximo de opciones mostradas por lista de filtro
OPTION_DISPLAY_LIMIT = 50
