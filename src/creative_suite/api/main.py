"""
FastAPI server for the Creative Suite.
Hosts the single-page shell, the per-mode workflow API and the SiliconFlow proxies.
"""

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from creative_suite.api import siliconflow_router, workflow_router
from creative_suite.config import Settings, get_settings
from creative_suite.suite import CreativeSuite, build_suite

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT, handlers=handlers)


def create_app(settings: Settings | None = None, suite: CreativeSuite | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Creative Suite API", debug=settings.debug)
    app.state.settings = settings
    app.state.suite = suite or build_suite(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(workflow_router.router)
    app.include_router(siliconflow_router.router)

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(STATIC_DIR / "index.html", media_type="text/html")

    @app.get("/health")
    async def health():
        return {"status": "ok", "app": settings.app_name}

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        import traceback

        logger.error(f"Global exception: {exc}")
        logger.debug(traceback.format_exc())
        return JSONResponse(
            status_code=500,
            content={"detail": f"Internal Server Error: {str(exc)}", "type": type(exc).__name__},
        )

    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(
        "creative_suite.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    run()
