from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from leadhub.config import settings
from leadhub.db.schema import init_schema
from leadhub.errors import register_error_handlers
from leadhub.routes import (
    access_requests,
    admin,
    auth,
    dashboard,
    health,
    landing_pages,
    leads,
    sub_admin,
    super_admin,
)
from leadhub.utils.logger import get_logger

logger = get_logger(__name__)

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.init_schema_on_startup:
        init_schema()
    logger.info("Lead capture API started (environment=%s)", settings.environment)
    yield


app = FastAPI(title="Landing Page Lead Capture API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

for module in (
    health,
    auth,
    admin,
    landing_pages,
    leads,
    access_requests,
    dashboard,
    super_admin,
    sub_admin,
):
    app.include_router(module.router, prefix=API_PREFIX)
