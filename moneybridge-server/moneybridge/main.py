from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from moneybridge import __version__
from moneybridge.core.config import get_settings
from moneybridge.core.logging import configure_logging
from moneybridge.infrastructure.database import dispose_engine, init_db
from moneybridge.interfaces.http.errors import register_exception_handlers
from moneybridge.interfaces.http.routers import create_api_router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    await init_db()
    yield
    await dispose_engine()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.project_name,
        description="Peer-to-peer mobile-money requests backed by wallet ledgers",
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

    register_exception_handlers(app)
    app.include_router(create_api_router(settings.api_prefix))
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("moneybridge.main:app", host=settings.host, port=settings.port, reload=settings.server.reload)
