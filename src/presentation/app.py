import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from core.config import Settings, settings
from core.error_logger import get_error_reporter, setup_error_reporting
from domain.errors import MediaProxyError
from presentation.container import Container
from presentation.middleware.logging import log_access_middleware
from presentation.routers.media_proxy import router as media_proxy_router

logger = logging.getLogger("startup")


async def media_proxy_error_handler(request: Request, exc: MediaProxyError) -> PlainTextResponse:
	return PlainTextResponse(exc.detail, status_code=exc.status_code)


def create_app(
	app_settings: Settings = settings,
	transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
	"""Собирает приложение. transport подменяет сеть upstream клиента (тесты)."""
	try:
		get_error_reporter()
	except RuntimeError:
		setup_error_reporting(logging.getLogger("error_reports"))

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		container = Container(app_settings, transport=transport)
		app.state.container = container
		logger.info(
			"Media proxy готов, block_private_networks=%s",
			app_settings.proxy.block_private_networks,
		)
		try:
			yield
		finally:
			await container.aclose()

	app = FastAPI(title="media-proxy", lifespan=lifespan)

	app.middleware("http")(log_access_middleware)
	app.add_exception_handler(MediaProxyError, media_proxy_error_handler)

	app.include_router(media_proxy_router)
	return app
