"""
Gestión del token bearer de la API de GeoBrain.

Implementa:
- Login contra /auth/login con las credenciales configuradas
- Vencimiento leído del claim exp del JWT (con margen de seguridad)
- Deduplicación de refrescos concurrentes: un solo login en vuelo
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Optional

import aiohttp
import structlog
from jose import JWTError, jwt

from panorama.config import get_settings
from panorama.sync.errors import AuthError, DecodeError

logger = structlog.get_logger()


def retrieve_task_exception(task: asyncio.Future) -> None:
    """Marca como leído el error de una tarea compartida aunque todos sus llamadores se hayan ido."""
    if not task.cancelled():
        task.exception()


@dataclass
class Credential:
    """Token vigente. Solo lo modifica SessionManager."""

    token: Optional[str] = None
    expires_at: float = 0.0  # epoch en segundos
    refresh: Optional[asyncio.Task] = None


class SessionManager:
    """
    Dueño exclusivo de la credencial de GeoBrain.

    Se construye explícitamente y se pasa a quien lo necesite; no hay
    una instancia global compartida por el proceso.
    """

    LOGIN_PATH = "/auth/login"

    def __init__(
        self,
        http: aiohttp.ClientSession,
        base_url: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        safety_buffer: Optional[float] = None,
        fallback_ttl: Optional[float] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        settings = get_settings()
        self._http = http
        self.base_url = (base_url or settings.geobrain_base_url).rstrip("/")
        self._email = email or settings.geobrain_email
        self._password = password or settings.geobrain_password
        self.safety_buffer = (
            safety_buffer if safety_buffer is not None else settings.token_safety_buffer
        )
        self.fallback_ttl = (
            fallback_ttl if fallback_ttl is not None else settings.token_fallback_ttl
        )
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._clock = clock
        self._credential = Credential()

    @property
    def expires_at(self) -> float:
        return self._credential.expires_at

    def is_token_expired(self) -> bool:
        """True si no hay token o si faltan menos de safety_buffer segundos para que venza."""
        if not self._credential.token:
            return True
        return self._clock() >= self._credential.expires_at - self.safety_buffer

    def invalidate(self) -> None:
        """Descarta el token actual (ej: el servidor respondió 401)."""
        self._credential.token = None

    async def ensure_valid_token(self) -> str:
        """Devuelve un token vigente, logueando si hace falta."""
        if self.is_token_expired():
            return await self.login()
        return self._credential.token

    async def login(self) -> str:
        """
        Obtiene un token nuevo.

        Si ya hay un login en vuelo, todos los llamadores esperan ese mismo
        resultado (éxito o error) en lugar de lanzar otro request.

        Raises:
            AuthError: Si el endpoint no responde o devuelve un status no exitoso
        """
        refresh = self._credential.refresh
        if refresh is None:
            refresh = asyncio.ensure_future(self._refresh_token())
            refresh.add_done_callback(retrieve_task_exception)
            self._credential.refresh = refresh
        else:
            logger.debug("Login en curso, esperando resultado compartido")
        # shield: cancelar a un llamador no cancela el login de los demás
        return await asyncio.shield(refresh)

    async def _refresh_token(self) -> str:
        try:
            token = await self._request_token()
            expires_at = self._parse_token_expiry(token)
            self._credential.token, self._credential.expires_at = token, expires_at
            logger.info(
                "Login exitoso en GeoBrain",
                expires_in=round(expires_at - self._clock()),
            )
            return token
        except AuthError as e:
            logger.error("Login en GeoBrain falló", error=str(e))
            raise
        finally:
            self._credential.refresh = None

    async def _request_token(self) -> str:
        url = f"{self.base_url}{self.LOGIN_PATH}"
        payload = {"email": self._email, "password": self._password}

        try:
            async with self._http.post(
                url,
                json=payload,
                headers={"Accept": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if not 200 <= response.status < 300:
                    raise AuthError(f"Login failed: {response.status}")
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AuthError(f"No se pudo contactar el login de GeoBrain: {e}") from e
        except ValueError as e:
            raise AuthError("Respuesta de login no es JSON válido") from e

        token = None
        if isinstance(data, dict):
            token = data.get("token") or data.get("access_token")
        if not token or not isinstance(token, str):
            raise AuthError("La respuesta de login no contiene token")
        return token

    def _parse_token_expiry(self, token: str) -> float:
        """Vencimiento del token en epoch (segundos); fallback si el claim no se puede leer."""
        try:
            return self._decode_expiry(token)
        except DecodeError as e:
            logger.warning(
                "No se pudo leer exp del token, usando vencimiento por defecto",
                error=str(e),
                fallback_ttl=self.fallback_ttl,
            )
            return self._clock() + self.fallback_ttl

    @staticmethod
    def _decode_expiry(token: str) -> float:
        # Solo leemos el claim: la firma la valida el servidor
        try:
            claims = jwt.get_unverified_claims(token)
            return float(claims["exp"])
        except (JWTError, KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"Token sin claim exp legible: {type(e).__name__}") from e
