from datetime import datetime, timezone
import logging
from pathlib import Path

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.core.config import settings
from app.core.error_handlers import register_error_handlers
from app.db.init_db import create_all_tables
from app.db.session import DatabaseHealth
from app.deps import get_db_health
from app.middleware.request_logging import RequestLoggingMiddleware
from app.modules.auth.api.router import router as auth_router
from app.modules.memes.api.router import router as memes_router
from app.modules.memes.reactions.api.router import router as reactions_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("app")

# Initialize the FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    debug=settings.DEBUG,
    description="Share, search and react to AI memes",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    swagger_ui_parameters={"defaultModelsExpandDepth": -1},
)

register_error_handlers(app)

@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting server in {settings.ENVIRONMENT} mode")
    create_all_tables()

# Add middleware
app.add_middleware(RequestLoggingMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded images are served straight from disk
Path(settings.UPLOAD_DIRECTORY).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIRECTORY), name="uploads")

# Register API routers
app.include_router(auth_router, prefix=f"{settings.API_V1_STR}/auth", tags=["authentication"])
app.include_router(reactions_router, prefix=f"{settings.API_V1_STR}/memes", tags=["reactions"])
app.include_router(memes_router, prefix=f"{settings.API_V1_STR}/memes", tags=["memes"])


@app.get(f"{settings.API_V1_STR}/health")
def health_check(health: DatabaseHealth = Depends(get_db_health)):
    database_available = health.is_available()
    return {
        "status": "OK" if database_available else "DEGRADED",
        "database": "connected" if database_available else "unavailable",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

@app.get("/")
async def root():
    return {
        "message": "Welcome to GrokMemeHub",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs" if settings.DEBUG else None,
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
