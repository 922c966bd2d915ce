"""
HTTP surface for the harvester.

Routes:
  /run-scrape -> Run one harvest; the upstream JSON payload on success,
                 500 {"error", "details", "kind"} on failure
  /health     -> Liveness probe, plain "OK"

Each /run-scrape request launches and releases its own browser, so
concurrent requests share no mutable state.
"""

import asyncio
import signal
import uuid
from typing import Callable

from aiohttp import web

from .errors import ScrapeError, classify
from .logging_config import bind_run_context, clear_run_context, get_logger
from .service import FetchService
from .settings import HarvestConfig

logger = get_logger(__name__)

ServiceFactory = Callable[[], FetchService]

SERVICE_FACTORY = web.AppKey("service_factory", ServiceFactory)


def _failure(error: ScrapeError) -> web.Response:
    return web.json_response(
        {"error": "Failed to scrape data", "details": str(error), "kind": error.kind},
        status=500,
    )


async def handle_run_scrape(request: web.Request) -> web.Response:
    bind_run_context(uuid.uuid4().hex[:12])
    logger.info("run_scrape_received")
    try:
        service = request.app[SERVICE_FACTORY]()
        outcome = await service.fetch()
    except ScrapeError as e:
        logger.error("run_scrape_failed", kind=e.kind, error=str(e))
        return _failure(e)
    except Exception as e:
        logger.exception("run_scrape_crashed")
        return _failure(classify(e))
    finally:
        logger.info("run_scrape_finished")
        clear_run_context()

    if not outcome.ok:
        return _failure(outcome.error)
    return web.json_response(outcome.payload)


async def handle_health(request: web.Request) -> web.Response:
    return web.Response(text="OK")


def create_app(service_factory: ServiceFactory) -> web.Application:
    app = web.Application()
    app[SERVICE_FACTORY] = service_factory

    app.router.add_get("/run-scrape", handle_run_scrape)
    app.router.add_get("/health", handle_health)

    return app


def app_from_config(config: HarvestConfig) -> web.Application:
    return create_app(lambda: FetchService.from_config(config))


async def serve(config: HarvestConfig, host: str | None = None, port: int | None = None) -> None:
    """Run the server until SIGINT/SIGTERM."""
    host = host or config.server_host
    port = port or config.server_port

    runner = web.AppRunner(app_from_config(config))
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info("server_listening", host=host, port=port, trigger="/run-scrape")

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await stop_event.wait()
    finally:
        logger.info("server_stopping")
        await runner.cleanup()
