"""FastAPI application"""
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from walrus_gateway.config import Config, get_config

from .errors import register_exception_handlers
from .lifespan import lifespan
from .routes import router


def create_app(config: Optional[Config] = None) -> FastAPI:
    config = config or get_config()

    app = FastAPI(
        title=config.app_name,
        description="Resolves Walrus site URLs and serves their files from the Walrus aggregator",
        version=config.app_version,
        lifespan=lifespan,
    )
    app.state.config = config

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # API routes
    app.include_router(router, prefix="/api")
    return app


app = create_app()
