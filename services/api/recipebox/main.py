# RecipeBox API Main Entry Point
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .deps import Container, build_container
from .routers.ready import router as ready_router
from .routers.recipes import router as recipes_router
from .settings import Settings

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("recipebox")


def create_app(settings: Optional[Settings] = None, container: Optional[Container] = None) -> FastAPI:
    settings = settings or (container.settings if container else Settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.container = container or build_container(settings)
        app.state.container.database.create_all()
        logger.info("RecipeBox API ready (ai_mode=%s)", settings.ai_mode)
        yield
        if container is None:
            app.state.container.database.dispose()

    app = FastAPI(title="RecipeBox API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(ready_router, prefix="/api", tags=["ready"])
    app.include_router(recipes_router, prefix="/api", tags=["recipes"])
    return app


app = create_app()
