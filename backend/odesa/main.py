# odesa/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from odesa.core.config import Settings, get_settings
from odesa.core.error_handlers import (
    app_error_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from odesa.core.exceptions import AppError
from odesa.core.logging import setup_logging
from odesa.crud.storage import Storage
from odesa.db.database import Database
from odesa.middleware.request_context import request_timing_middleware
from odesa.run_seeders import seed_all
from odesa.service.ai_service import AIService
from odesa.service.billing_service import BillingService
from odesa.service.story_service import StoryService

# Routers
from odesa.routes.admin import admin_router
from odesa.routes.analytics import analytics_router, newsletter_router
from odesa.routes.auth import auth_router
from odesa.routes.catalog import event_router, location_router, template_router
from odesa.routes.orders import order_router, payment_router
from odesa.routes.personalization import ai_router, onboarding_router, user_router
from odesa.routes.postcards import postcard_router
from odesa.routes.stories import story_router
from odesa.routes.subscription import subscription_router

logger = logging.getLogger("odesa")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings)

    database = Database(settings)
    await database.connect()
    await database.ensure_indexes()
    storage = Storage(database.db)
    await seed_all(storage)

    app.state.database = database
    app.state.storage = storage
    app.state.billing = BillingService.from_settings(settings)
    app.state.ai = AIService.from_settings(settings)
    app.state.stories = StoryService.from_settings(settings)
    if app.state.billing is None:
        logger.warning("STRIPE_SECRET_KEY not set, payment endpoints will answer 503")
    if app.state.ai is None:
        logger.warning("OPENAI_API_KEY not set, AI endpoints will answer 503")

    logger.info("🚀 Odesa Holiday Postcards API ready (%s)", settings.ENVIRONMENT)
    try:
        yield
    finally:
        await database.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Odesa Holiday Postcards API", lifespan=lifespan)
    app.state.settings = settings

    # ------------------------
    # OAuth2 / Swagger Authorize
    # ------------------------
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        openapi_schema = get_openapi(
            title="Odesa Holiday Postcards API",
            version="1.0.0",
            description="API for Odesa Holiday Postcards",
            routes=app.routes,
        )
        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "OAuth2Password": {
                "type": "oauth2",
                "flows": {"password": {"tokenUrl": "/api/auth/login", "scopes": {}}},
            }
        }
        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    # ------------------------
    # Middleware
    # ------------------------
    app.middleware("http")(request_timing_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ------------------------
    # Routes
    # ------------------------
    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(template_router, prefix="/api/templates")
    app.include_router(event_router, prefix="/api/events")
    app.include_router(location_router, prefix="/api/locations")
    app.include_router(postcard_router, prefix="/api/postcards")
    app.include_router(order_router, prefix="/api/orders")
    app.include_router(payment_router, prefix="/api")
    app.include_router(subscription_router, prefix="/api/subscription")
    app.include_router(onboarding_router, prefix="/api/onboarding")
    app.include_router(user_router, prefix="/api/user")
    app.include_router(ai_router, prefix="/api")
    app.include_router(story_router, prefix="/api")
    app.include_router(analytics_router, prefix="/api/analytics")
    app.include_router(newsletter_router, prefix="/api/newsletter")
    app.include_router(admin_router, prefix="/api/admin")

    # ------------------------
    # Exception handlers
    # ------------------------
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # ------------------------
    # Health & root
    # ------------------------
    @app.get("/")
    async def root():
        return {"message": "🌊 Welcome to Odesa Holiday Postcards API"}

    @app.get("/healthz")
    async def healthz(request: Request):
        database = getattr(request.app.state, "database", None)
        try:
            if database is None:
                raise RuntimeError("database not initialized")
            await database.ping()
        except Exception as e:
            logger.error("Health check failed: %s", e)
            return JSONResponse(status_code=503, content={"status": "unhealthy"})
        return {"status": "ok", "database": "connected"}

    return app


def run():
    settings = get_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
