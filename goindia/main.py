import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

# Load env from goindia/.env before settings are read
package_dir = os.path.dirname(os.path.abspath(__file__))
if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv(dotenv_path=os.path.join(package_dir, ".env"))

from goindia.core.config import settings, validate_config
from goindia.core.database import create_all_tables, is_database_configured
from goindia.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    unhandled_exception_handler,
)
from goindia.core.logging import configure_logging
from goindia.core.middleware.request_id import RequestIdMiddleware
from goindia.core.validation import validate_env
from goindia.api import ai, billing, health, proxy, trips, usage

configure_logging(settings.ENV)
validate_env()
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("goindia")
    logger.info("Starting GoIndia backend...")
    if is_database_configured():
        create_all_tables()
    else:
        logger.warning("DATABASE_URL not set; profiles and trips are kept in memory")
    try:
        yield
    finally:
        logger.info("Stopping GoIndia backend...")


app = FastAPI(title="GoIndia - Travel Assistant API", lifespan=lifespan)

app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.root_router, tags=["health"])
app.include_router(proxy.router, tags=["ai-proxy"])
app.include_router(ai.router, tags=["ai"])
app.include_router(usage.router, tags=["usage"])
app.include_router(billing.router, tags=["billing"])
app.include_router(billing.admin_router, tags=["admin-billing"])
app.include_router(trips.router, tags=["trips"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("goindia.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=settings.ENV == "development")
