import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .core.config import Settings, settings
from .core.context import PosContext
from .routers import health, ipc, reports


def create_app(cfg: Optional[Settings] = None) -> FastAPI:
    cfg = cfg or settings
    logging.basicConfig(
        level=cfg.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    ctx = PosContext.from_settings(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # a database that cannot be opened aborts startup
        ctx.store.initialize()
        try:
            yield
        finally:
            ctx.store.close()

    app = FastAPI(title=cfg.app_name, version=cfg.app_version, lifespan=lifespan)
    app.state.ctx = ctx

    app.include_router(health.router)
    app.include_router(ipc.router)
    app.include_router(reports.router)
    return app


app = create_app()
