# app/main.py
from __future__ import annotations
from contextlib import asynccontextmanager
from datetime import timedelta
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from core import db, redis as redis_client
from core.auth import SessionTokens
from core.config import Settings, get_settings
from core.errors import register_error_handlers
from core.logger import configure_logging
from repositories import master_data_repo
from services.auth_service import AuthService
from api.v1.auth import router as auth_router
from api.v1.master_data import router as master_data_router
from api.v1.leads import router as leads_router
from api.v1.deals import router as deals_router
from api.v1.users import router as users_router


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the API. Settings are loaded (and validated) here, so a missing
    JWT_SECRET fails startup.

    Run with: uvicorn main:create_app --factory
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    db.configure(settings)
    redis_client.configure(settings)
    master_data_repo.configure_cache_ttl(settings.MASTER_DATA_CACHE_TTL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        db.close_pool()

    app = FastAPI(title="CRM API", version="1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.tokens = SessionTokens(settings.JWT_SECRET, timedelta(minutes=settings.JWT_EXP_MIN))
    app.state.auth_service = AuthService(settings, app.state.tokens)

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_error_handlers(app)

    @app.get("/health")
    def health(): return {"ok": True}

    app.include_router(auth_router)
    app.include_router(master_data_router)
    app.include_router(leads_router)
    app.include_router(deals_router)
    app.include_router(users_router)

    return app
