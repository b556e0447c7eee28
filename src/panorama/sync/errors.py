"""
Errores de la sincronización con GeoBrain.

AuthError y FetchError llegan al consumidor como un único fallo visible;
DecodeError se resuelve localmente con el vencimiento por defecto.
"""

from typing import Optional


class SyncError(Exception):
    """Base de todos los errores de sincronización."""


class AuthError(SyncError):
    """Login fallido, o 401 persistente tras agotar los re-logins."""


class FetchError(SyncError):
    """Fallo HTTP no relacionado con autenticación al pedir una página."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class DecodeError(SyncError):
    """El token no trae un claim exp legible."""


class SyncCancelledError(SyncError):
    """La sincronización fue cancelada entre dos páginas."""
