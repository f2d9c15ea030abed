from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from edustats.api.health import router as health_router
from edustats.api.materials import router as materials_router
from edustats.api.metrics_endpoint import router as metrics_router
from edustats.api.practices import router as practices_router
from edustats.api.reactions import router as reactions_router
from edustats.api.statistics import router as statistics_router
from edustats.core.config import SETTINGS
from edustats.core.errors import register_exception_handlers
from edustats.core.logging import setup_logging
from edustats.db.engine import lifespan_db
from edustats.db.redis import lifespan_redis
from edustats.middleware.metrics import MetricsMiddleware
from edustats.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Nested so teardown runs in reverse order.
    async with lifespan_db():
        async with lifespan_redis():
            yield


app = FastAPI(
    title="edustats",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext -> Metrics -> CORS -> route
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(materials_router)
app.include_router(practices_router)
app.include_router(reactions_router)
app.include_router(statistics_router)

logger.info(
    "edustats started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
