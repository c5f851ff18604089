import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from thesisflow import __version__
from thesisflow.core.config import get_settings
from thesisflow.core.database import create_tables
from thesisflow.core.exceptions import validation_exception_handler, generic_exception_handler
from thesisflow.core.middleware import CSRFMiddleware
from thesisflow.api.v1 import router as api_router
from thesisflow.services.ai_provider import AIProviderConfig, create_provider

settings = get_settings()

_log_level = os.getenv("LOG_LEVEL", "DEBUG" if settings.debug else "INFO").upper()
logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.INFO)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    app.state.ai_provider = create_provider(AIProviderConfig.from_settings(settings))
    # The desktop launcher waits for this line
    logger.info("serving on port %s", settings.port)
    try:
        yield
    finally:
        await app.state.ai_provider.aclose()


app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="Thesis planning, writing and defense preparation",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(CSRFMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"],
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": __version__}


if settings.static_dir and Path(settings.static_dir).is_dir():
    # Mounted last so API routes take precedence
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="client")


def run() -> None:
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=_log_level.lower(),
    )


if __name__ == "__main__":
    run()
