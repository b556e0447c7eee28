"""
Script para sincronizar el catálogo de GeoBrain y mostrar el resumen del mercado.

Uso:
    python -m panorama.scripts.run_sync
    python -m panorama.scripts.run_sync --state SP --city "São Paulo" --year 2024
    python -m panorama.scripts.run_sync --watch
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

import structlog

from panorama.analytics import MarketView
from panorama.config import get_settings
from panorama.models import ProgressEvent
from panorama.sync import CatalogSynchronizer, SyncError

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    force=True,
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def _log_progress(event: ProgressEvent):
    logger.info(
        "Cargando empreendimentos",
        loaded=event.loaded,
        total=event.total,
        page=event.page,
    )


def _log_summary(view: MarketView):
    metrics = view.metrics
    kpis = metrics.kpis
    logger.info(
        "Resumen del mercado",
        empreendimentos=kpis.count,
        vgv_lanzado=round(kpis.launched_value, 2),
        vgv_vendido=round(kpis.sold_value, 2),
        vendido_pct=round(kpis.sold_percentage, 1) if kpis.sold_percentage is not None else None,
        unidades=kpis.total_units,
        unidades_vendidas=kpis.units_sold,
        filtros_activos=view.active_filter_count,
    )
    for group in metrics.by_city:
        logger.info("VGV por ciudad", city=group.key, vgv=round(group.launched_value, 2))
    for position, record in enumerate(metrics.top_records, start=1):
        logger.info(
            "Top empreendimento",
            rank=position,
            name=record.name,
            city=record.city,
            developer=record.developer,
            vgv=round(record.launched_value, 2),
        )


def _build_view(args: argparse.Namespace, records) -> MarketView:
    view = MarketView(records)
    for dimension, values in (
        ("states", args.state),
        ("cities", args.city),
        ("developers", args.developer),
        ("launch_years", args.year),
    ):
        for value in values or []:
            view.toggle(dimension, value)
    return view


async def run_sync(args: argparse.Namespace) -> int:
    """
    Ejecuta una sincronización y loguea el resumen.

    Con --watch queda corriendo, re-sincroniza cada intervalo y loguea
    el resumen de cada pasada.

    Returns:
        Exit code
    """
    async with CatalogSynchronizer(interval_seconds=args.interval) as sync:
        try:
            records = await sync.synchronize(on_progress=_log_progress)
        except SyncError as e:
            logger.error("No se pudo sincronizar", error=sync.state.last_error or str(e))
            if not args.watch:
                return 1
            records = []

        _log_summary(_build_view(args, records))

        if args.watch:
            # Cada pasada programada reemplaza el snapshot: se rearma la vista
            sync.start_periodic(
                on_synced=lambda synced: _log_summary(_build_view(args, synced))
            )
            await asyncio.Event().wait()

    return 0


def main(argv: Optional[list[str]] = None):
    """Entry point del script."""
    parser = argparse.ArgumentParser(
        description="Sincroniza el catálogo de GeoBrain y resume el mercado"
    )
    parser.add_argument("--state", action="append", help="Filtrar por estado (repetible)")
    parser.add_argument("--city", action="append", help="Filtrar por ciudad (repetible)")
    parser.add_argument(
        "--developer", action="append", help="Filtrar por incorporadora (repetible)"
    )
    parser.add_argument(
        "--year", action="append", type=int, help="Filtrar por año de lanzamiento (repetible)"
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Seguir corriendo y re-sincronizar periódicamente",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Intervalo de re-sincronización en segundos (default: settings)",
    )

    args = parser.parse_args(argv)

    try:
        exit_code = asyncio.run(run_sync(args))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Sincronización interrumpida por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en sincronización", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
