import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from database import init_db
from error_handlers import register_error_handlers
from file_utils import ensure_upload_directories
from observability import setup_logging
from routes.auth import router as auth_router
from routes.profile import router as profile_router
from routes.cdn import router as cdn_router
from routes.posts import router as posts_router
from routes.comments import router as comments_router
from routes.reactions import router as reactions_router
from routes.health import router as health_router

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    # Initialize database
    init_db()
    ensure_upload_directories()
    logger.info("Forum API started")
    yield
    logger.info("Forum API shutting down")

app = FastAPI(title="Literary Lions Forum API", lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods
    allow_headers=["*"],  # Allows all headers
)

register_error_handlers(app)

# Include routers
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(cdn_router)
app.include_router(posts_router)
app.include_router(comments_router)
app.include_router(reactions_router)
app.include_router(health_router)

if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=True)
