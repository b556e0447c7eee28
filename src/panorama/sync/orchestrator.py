"""
Orquestador de sincronización del catálogo.

Compone SessionManager + PaginatedFetcher + normalizador en una única
operación "traer el dataset completo", invocable a demanda o desde el
timer periódico. Nunca corre más de una pasada a la vez.
"""

import asyncio
import time
from datetime import datetime
from typing import Callable, Optional

import aiohttp
import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from panorama.config import get_settings
from panorama.models import DatasetSnapshot, ProgressEvent, ProjectRecord, SyncState
from panorama.sync.errors import SyncCancelledError, SyncError
from panorama.sync.fetcher import PaginatedFetcher, ProgressCallback
from panorama.sync.session import SessionManager, retrieve_task_exception

logger = structlog.get_logger()

SYNC_JOB_ID = "geobrain-catalog-sync"
DEFAULT_ERROR_MESSAGE = "Error al conectar con la API de GeoBrain."

SyncedCallback = Callable[[list[ProjectRecord]], None]


class CatalogSynchronizer:
    """
    Punto de entrada para sincronizar el catálogo de GeoBrain.

    Uso:
        async with CatalogSynchronizer() as sync:
            records = await sync.synchronize()
            sync.start_periodic()

    Flujo de una pasada:
    1. Asegurar token vigente (SessionManager)
    2. Descargar todas las páginas (PaginatedFetcher)
    3. Normalizar y reemplazar el snapshot entero

    Si la pasada falla, el snapshot anterior queda intacto y el error
    se publica en state.last_error.
    """

    def __init__(
        self,
        http: Optional[aiohttp.ClientSession] = None,
        session: Optional[SessionManager] = None,
        fetcher: Optional[PaginatedFetcher] = None,
        interval_seconds: Optional[int] = None,
    ):
        self.settings = get_settings()
        self._http = http
        self._owns_http = False
        self._session = session
        self._fetcher = fetcher
        self.interval_seconds = interval_seconds or self.settings.sync_interval_seconds

        self._state = SyncState()
        self._inflight: Optional[asyncio.Task] = None
        self._scheduler: Optional[AsyncIOScheduler] = None

    async def __aenter__(self):
        """Context manager entry: abre la sesión HTTP y arma los componentes."""
        if self._http is None:
            self._http = aiohttp.ClientSession()
            self._owns_http = True
        if self._session is None:
            self._session = SessionManager(self._http)
        if self._fetcher is None:
            self._fetcher = PaginatedFetcher(self._http, self._session)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit: detiene el timer y cierra la sesión HTTP propia."""
        self.stop_periodic()
        if self._owns_http and self._http is not None:
            await self._http.close()
            self._http = None
            self._owns_http = False

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def records(self) -> tuple[ProjectRecord, ...]:
        """Último snapshot confirmado (solo lectura)."""
        return self._state.snapshot.records

    @property
    def is_syncing(self) -> bool:
        return self._inflight is not None

    async def synchronize(
        self,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> list[ProjectRecord]:
        """
        Sincroniza el dataset completo.

        Si ya hay una pasada en curso, espera su resultado en lugar de
        lanzar un segundo recorrido de páginas (on_progress de este
        llamador no se invoca en ese caso).

        Raises:
            AuthError, FetchError: Lo que haya fallado en la descarga
            SyncCancelledError: cancel_event seteado entre páginas
        """
        if self._fetcher is None:
            raise RuntimeError(
                "Sincronizador no inicializado. Usa 'async with CatalogSynchronizer():'"
            )

        inflight = self._inflight
        if inflight is None:
            inflight = asyncio.ensure_future(self._run(on_progress, cancel_event))
            inflight.add_done_callback(retrieve_task_exception)
            self._inflight = inflight
        else:
            logger.info("Sincronización en curso, esperando su resultado")

        records = await asyncio.shield(inflight)
        return list(records)

    async def _run(
        self,
        on_progress: Optional[ProgressCallback],
        cancel_event: Optional[asyncio.Event],
    ) -> tuple[ProjectRecord, ...]:
        started = time.monotonic()
        self._state = self._state.model_copy(
            update={"is_syncing": True, "last_error": None, "last_progress": None}
        )
        logger.info("Iniciando sincronización del catálogo")

        def track_progress(event: ProgressEvent) -> None:
            self._state = self._state.model_copy(update={"last_progress": event})
            if on_progress:
                on_progress(event)

        try:
            records = tuple(
                await self._fetcher.fetch_all(
                    on_progress=track_progress, cancel_event=cancel_event
                )
            )
        except SyncCancelledError as e:
            self._state = self._state.model_copy(
                update={"is_syncing": False, "last_error": str(e)}
            )
            logger.info("Sincronización cancelada", error=str(e))
            raise
        except SyncError as e:
            self._state = self._state.model_copy(
                update={
                    "is_syncing": False,
                    "is_connected": False,
                    "last_error": str(e) or DEFAULT_ERROR_MESSAGE,
                }
            )
            logger.error(
                "Sincronización falló",
                error=str(e),
                error_type=type(e).__name__,
                duration=round(time.monotonic() - started, 2),
            )
            raise
        except Exception as e:
            self._state = self._state.model_copy(
                update={"is_syncing": False, "last_error": DEFAULT_ERROR_MESSAGE}
            )
            logger.exception("Error inesperado en la sincronización", error=str(e))
            raise
        finally:
            self._inflight = None
            if self._state.is_syncing:
                self._state = self._state.model_copy(update={"is_syncing": False})

        # Reemplazo atómico: los lectores ven el snapshot viejo o el nuevo
        self._state = SyncState(
            snapshot=DatasetSnapshot(records=records, synced_at=datetime.now()),
            is_connected=True,
            is_syncing=False,
            last_progress=self._state.last_progress,
        )
        logger.info(
            "Sincronización completada",
            records=len(records),
            duration=round(time.monotonic() - started, 2),
        )
        return records

    def start_periodic(
        self,
        interval_seconds: Optional[int] = None,
        on_synced: Optional[SyncedCallback] = None,
    ) -> AsyncIOScheduler:
        """
        Programa la re-sincronización automática (por defecto cada 5 minutos).

        Debe llamarse con el event loop corriendo.

        Args:
            interval_seconds: Intervalo entre pasadas; default = settings
            on_synced: Se invoca con los registros tras cada pasada programada exitosa
        """
        if self._scheduler is not None:
            return self._scheduler

        interval = interval_seconds or self.interval_seconds
        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            self._scheduled_sync,
            IntervalTrigger(seconds=interval),
            kwargs={"on_synced": on_synced},
            id=SYNC_JOB_ID,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("Sincronización periódica activa", interval_seconds=interval)
        return scheduler

    def stop_periodic(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Sincronización periódica detenida")

    async def _scheduled_sync(self, on_synced: Optional[SyncedCallback] = None) -> None:
        # Sin reintento automático: el próximo tick vuelve a intentar
        try:
            records = await self.synchronize()
        except SyncError as e:
            logger.warning("Sincronización programada falló", error=str(e))
            return

        if on_synced:
            on_synced(records)
