"""
Módulo de sincronización con la API de GeoBrain.

Provee login con token bearer, descarga paginada del catálogo,
normalización de registros y el orquestador (a demanda + periódico).
"""

from panorama.sync.errors import (
    AuthError,
    DecodeError,
    FetchError,
    SyncCancelledError,
    SyncError,
)
from panorama.sync.session import Credential, SessionManager
from panorama.sync.normalizer import FIELD_RULES, normalize_record, normalize_records
from panorama.sync.fetcher import PaginatedFetcher
from panorama.sync.orchestrator import CatalogSynchronizer

__all__ = [
    # Errores
    "SyncError",
    "AuthError",
    "FetchError",
    "DecodeError",
    "SyncCancelledError",
    # Componentes
    "Credential",
    "SessionManager",
    "PaginatedFetcher",
    "CatalogSynchronizer",
    # Normalización
    "FIELD_RULES",
    "normalize_record",
    "normalize_records",
]
