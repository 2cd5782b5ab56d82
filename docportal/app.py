# (c) Copyright Datacraft, 2026
import logging
import os
from contextlib import asynccontextmanager
from logging.config import dictConfig
from pathlib import Path

import yaml
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docportal.core.config import get_settings
from docportal.core.exceptions import PortalError
from docportal.core.features.approvals import cancel_all_polls
from docportal.core.features.approvals.router import router as approvals_router
from docportal.core.features.bulk_transfer.router import router as bulk_transfer_router
from docportal.core.features.grouping.router import router as grouping_router
from docportal.core.features.saved_views.router import router as saved_views_router

__version__ = "0.3.0"

logger = logging.getLogger(__name__)
config = get_settings()
prefix = config.api_prefix


@asynccontextmanager
async def lifespan(app: FastAPI):
	"""Application lifespan handler for startup/shutdown events."""
	logger.info("Starting document portal API server...")

	yield

	logger.info("Shutting down document portal API server...")
	cancelled = cancel_all_polls()
	if cancelled:
		logger.info(f"Cancelled {cancelled} outstanding approval polls")


app = FastAPI(
	title="Document Portal REST API",
	version=__version__,
	lifespan=lifespan,
)

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
	if exc.status_code >= 500:
		logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
	return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


for router in (grouping_router, saved_views_router, approvals_router, bulk_transfer_router):
	app.include_router(router, prefix=prefix)


logging_config_path = Path(
	os.environ.get("DOCPORTAL__MAIN__LOGGING_CFG", str(config.log_config or "/etc/docportal/logging.yaml"))
)

if logging_config_path.exists() and logging_config_path.is_file():
	with open(logging_config_path, "r") as stream:
		logging_config = yaml.load(stream, Loader=yaml.FullLoader)

	dictConfig(logging_config)
