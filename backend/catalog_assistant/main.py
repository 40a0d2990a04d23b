from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from catalog_assistant.core.config import get_settings
from catalog_assistant.core.database import dispose_engine
from catalog_assistant.core.errors import CatalogAssistantError
from catalog_assistant.core.logging import configure_logging
from catalog_assistant.routers import chat, products


settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Shutdown: release pooled database connections
    await dispose_engine()


app = FastAPI(
    title="B2B Catalog Assistant API",
    description="Retrieval-augmented product assistant and quoting for B2B customers",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:5173",
        "http://localhost",
        "http://127.0.0.1",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CatalogAssistantError)
async def catalog_error_handler(request: Request, exc: CatalogAssistantError):
    logger.error(
        "[API] %s %s failed: %s (%s)",
        request.method,
        request.url.path,
        exc.message,
        type(exc).__name__,
    )
    body = {
        "success": False,
        "error": exc.message,
        "path": request.url.path,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if settings.environment == "development" and exc.__cause__ is not None:
        body["detail"] = repr(exc.__cause__)
    return JSONResponse(status_code=exc.status_code, content=body)


# Include routers
app.include_router(chat.router, prefix="/chat", tags=["Chat"])
app.include_router(products.router, prefix="/products", tags=["Products"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
