"""
Descarga paginada del catálogo de empreendimentos.

Recorre /empreendimentos página a página (en secuencia: la página N+1
depende de lo que informó la página N) y reintenta con re-login ante 401.
"""

import asyncio
from typing import Any, Callable, Optional

import aiohttp
import structlog
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from panorama.config import get_settings
from panorama.models import ProgressEvent, ProjectRecord
from panorama.sync.errors import AuthError, FetchError, SyncCancelledError
from panorama.sync.normalizer import normalize_records
from panorama.sync.session import SessionManager

logger = structlog.get_logger()

ProgressCallback = Callable[[ProgressEvent], None]


class _Unauthorized(Exception):
    """El servidor respondió 401 a un request de página."""


class PaginatedFetcher:
    """
    Cliente autenticado del endpoint de catálogo.

    Corta la paginación cuando:
    - una página viene vacía
    - meta.last_page indica que era la última
    - sin meta, la página trajo menos registros que page_size
    """

    CATALOG_PATH = "/empreendimentos"

    def __init__(
        self,
        http: aiohttp.ClientSession,
        session: SessionManager,
        base_url: Optional[str] = None,
        page_size: Optional[int] = None,
        auth_retry_limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self._http = http
        self.session = session
        self.base_url = (base_url or settings.geobrain_base_url).rstrip("/")
        self.page_size = page_size or settings.page_size
        self.auth_retry_limit = (
            auth_retry_limit if auth_retry_limit is not None else settings.auth_retry_limit
        )
        self.timeout = timeout if timeout is not None else settings.request_timeout

    async def fetch_all(
        self,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> list[ProjectRecord]:
        """Descarga todas las páginas y devuelve los registros normalizados."""
        raw_records = await self.fetch_raw(on_progress, cancel_event)
        return normalize_records(raw_records)

    async def fetch_raw(
        self,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> list[dict[str, Any]]:
        """
        Descarga todas las páginas sin normalizar.

        Args:
            on_progress: Se invoca tras cada página con (loaded, total, page)
            cancel_event: Si se setea, la descarga se corta antes de la siguiente página

        Returns:
            Lista de registros crudos en el orden del servidor

        Raises:
            AuthError: Login fallido o 401 persistente
            FetchError: Cualquier otro status no exitoso (se descarta lo acumulado)
            SyncCancelledError: cancel_event seteado entre páginas
        """
        records: list[dict[str, Any]] = []
        page = 1

        while True:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Descarga cancelada", page=page, loaded=len(records))
                raise SyncCancelledError(f"Sincronización cancelada antes de la página {page}")

            payload = await self._request_page(page)
            data = payload.get("data") if isinstance(payload, dict) else None

            # Página vacía: se corta antes de mirar el tamaño de página
            if not isinstance(data, list) or not data:
                logger.info("Página vacía, fin del catálogo", page=page)
                break

            records.extend(data)
            meta = payload.get("meta")
            if not isinstance(meta, dict):
                meta = None

            total = self._best_total(meta, len(records))
            logger.info(
                "Página descargada",
                page=page,
                count=len(data),
                loaded=len(records),
                total=total,
            )
            if on_progress:
                self._emit_progress(
                    on_progress, ProgressEvent(loaded=len(records), total=total, page=page)
                )

            if not self._has_more(page, len(data), meta):
                break
            page += 1

        return records

    @staticmethod
    def _emit_progress(on_progress: ProgressCallback, event: ProgressEvent) -> None:
        # El progreso es solo informativo: un observador roto no corta la descarga
        try:
            on_progress(event)
        except Exception:
            logger.warning("Callback de progreso falló", page=event.page, exc_info=True)

    @staticmethod
    def _best_total(meta: Optional[dict], loaded: int) -> int:
        try:
            total = int((meta or {}).get("total") or 0)
        except (TypeError, ValueError):
            total = 0
        return total or loaded

    def _has_more(self, page: int, count: int, meta: Optional[dict]) -> bool:
        last_page = (meta or {}).get("last_page")
        if last_page is not None:
            try:
                return page < int(last_page)
            except (TypeError, ValueError):
                logger.warning("meta.last_page inválido", last_page=last_page)
        return count >= self.page_size

    async def _request_page(self, page: int) -> Any:
        """Pide una página; ante 401 renueva el token y reintenta (hasta auth_retry_limit veces)."""
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.auth_retry_limit + 1),
                retry=retry_if_exception_type(_Unauthorized),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            "401 en página, renovando token",
                            page=page,
                            attempt=attempt.retry_state.attempt_number,
                        )
                        self.session.invalidate()
                        await self.session.login()
                    return await self._get_page(page)
        except _Unauthorized as e:
            raise AuthError(
                f"API respondió 401 en la página {page} tras {self.auth_retry_limit} re-logins"
            ) from e

    async def _get_page(self, page: int) -> Any:
        token = await self.session.ensure_valid_token()
        url = f"{self.base_url}{self.CATALOG_PATH}"
        params = {"page": page, "per_page": self.page_size}
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
        }

        try:
            async with self._http.get(
                url,
                params=params,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status == 401:
                    raise _Unauthorized(page)
                if not 200 <= response.status < 300:
                    raise FetchError(f"API Error: {response.status}", status=response.status)
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(f"Error de red en la página {page}: {e}") from e
        except ValueError as e:
            raise FetchError(f"La página {page} no devolvió JSON válido") from e
