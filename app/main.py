import logging
import uuid

from fastapi import FastAPI, Request

from app.api import auth, health, imports, orders, pricing, search
from app.core.config import get_settings
from app.core.logging_config import request_id_ctx, setup_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    app = FastAPI(title="Pharmacy POS", version="0.1.0")

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        req_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        token = request_id_ctx.set(req_id)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers["X-Request-ID"] = req_id
        return response

    # Routers
    app.include_router(health.router, tags=["health"])
    app.include_router(pricing.router, prefix="/pricing", tags=["pricing"])
    app.include_router(imports.router, prefix="/imports", tags=["imports"])
    app.include_router(orders.router, prefix="/orders", tags=["orders"])
    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(search.router, prefix="/search", tags=["search"])

    logger.info("Pharmacy POS API ready (remote: %s)", settings.API_BASE_URL)
    return app


app = create_app()
