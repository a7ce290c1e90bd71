import uvicorn
from fastapi import FastAPI

from gacha_arena.api.routes.health import router as health_router
from gacha_arena.api.routes.internal_arena import router as internal_arena_router
from gacha_arena.api.routes.internal_economy import router as internal_economy_router
from gacha_arena.api.routes.internal_redeem import router as internal_redeem_router
from gacha_arena.core.config import get_settings
from gacha_arena.core.logging import configure_logging
from gacha_arena.game.combat.tiers import get_tier_catalog


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.app_env != "dev")
    # Invalid tier configuration must fail startup.
    get_tier_catalog()

    app = FastAPI(
        title="Gacha Arena Internal API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.include_router(health_router)
    app.include_router(internal_redeem_router)
    app.include_router(internal_economy_router)
    app.include_router(internal_arena_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "gacha_arena.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
