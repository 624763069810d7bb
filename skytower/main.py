# Application entrypoint: builds the app, owns the shared handles, mounts the routers.
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings
from .db import Database
from .errors import register_exception_handlers
from .identity import IdentityVerifier
from .payments import PaymentGateway, router as payments_router
from .redis_client import RedisHandle
from .routes.agreements import router as agreements_router
from .routes.announcements import router as announcements_router
from .routes.apartments import router as apartments_router
from .routes.coupons import router as coupons_router
from .routes.users import router as users_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    database = app.state.database
    database.open()
    # For local SQLite, auto-create tables; production DBs rely on Alembic migrations.
    if database.is_sqlite:
        database.create_all()
    try:
        yield
    finally:
        database.close()
        app.state.redis.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build a FastAPI app around explicitly constructed handles.

    The Database, identity verifier, payment gateway and Redis handle live on
    app.state; the lifespan opens storage and releases it on shutdown.
    """
    settings = settings or Settings.from_env()

    app = FastAPI(title="SkyTower API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = Database(settings.database_url)
    app.state.identity_verifier = IdentityVerifier(
        secret=settings.identity_key,
        algorithms=settings.identity_algorithms,
        audience=settings.identity_audience,
        issuer=settings.identity_issuer,
    )
    app.state.payment_gateway = PaymentGateway(secret_key=settings.stripe_secret_key)
    app.state.redis = RedisHandle(settings.redis_url, enabled=settings.redis_enabled)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/")
    def root() -> dict:
        return {"message": "Hello SkyTower!"}

    # Simple liveness endpoint for container orchestrators and uptime checks
    @app.get("/healthz")
    def healthz() -> dict:
        return {"status": "ok"}

    app.include_router(users_router, prefix="", tags=["users"])
    app.include_router(apartments_router, prefix="", tags=["apartments"])
    app.include_router(agreements_router, prefix="", tags=["agreements"])
    app.include_router(announcements_router, prefix="", tags=["announcements"])
    app.include_router(coupons_router, prefix="", tags=["coupons"])
    app.include_router(payments_router, prefix="", tags=["payments"])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
