"""
Main application entry point for the SD Herbs storefront web tier.
"""
from dotenv import load_dotenv

# Load .env before settings are read
load_dotenv()

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from storefront.config.settings import settings
from storefront.services.backend_client import AdminAuthRequired
from storefront.services.service_factory import ServiceFactory
from storefront.storage.redis_storage import RedisTranscriptStorage
from storefront.api.deps import LoginRedirect

# Logging
Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(Path(settings.LOG_DIR) / 'app.log'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    logger.info("Starting SD Herbs storefront...")

    if settings.REDIS_PASSWORD:
        logger.info(
            "Redis auth enabled (user: %s)",
            settings.REDIS_USERNAME or "<default>"
        )
    redis_storage = RedisTranscriptStorage(
        redis_url=settings.REDIS_URL,
        ttl_seconds=settings.TRANSCRIPT_TTL,
        username=settings.REDIS_USERNAME,
        password=settings.REDIS_PASSWORD
    )

    try:
        await redis_storage.connect()
        ServiceFactory.set_storage(redis_storage)
        logger.info(f"✅ Redis transcript storage ready: {settings.REDIS_URL}")
    except Exception as e:
        logger.warning(f"⚠️  Redis unavailable: {e}, falling back to memory storage")

    ServiceFactory.get_chat_widget_service()
    logger.info("Application startup complete")

    yield

    logger.info("Shutting down...")
    await ServiceFactory.close_all()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="SD Herbs Storefront",
    version=VERSION,
    description="Storefront web tier: admin session guard and chatbot widget",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
from storefront.api.chat import router as chat_router
from storefront.api.theme import router as theme_router
from storefront.api.site import router as site_router
from storefront.api.admin import router as admin_router

app.include_router(chat_router)
app.include_router(theme_router)
app.include_router(site_router)
app.include_router(admin_router)


@app.exception_handler(LoginRedirect)
async def login_redirect_handler(request: Request, exc: LoginRedirect):
    """Unauthenticated admin view: 303 so the protected URL is not replayed"""
    return RedirectResponse(url=exc.path, status_code=303)


@app.exception_handler(AdminAuthRequired)
async def admin_auth_required_handler(request: Request, exc: AdminAuthRequired):
    """Backend answered 401 to a forwarded admin call"""
    logger.info(f"Backend rejected admin credentials for {request.url.path}")
    return RedirectResponse(url=settings.LOGIN_PATH, status_code=303)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc)}
    )


@app.get("/health")
async def health_check():
    """Health check"""
    storage = ServiceFactory.get_storage()
    return {
        "status": "healthy",
        "version": VERSION,
        "service": "SD Herbs Storefront",
        "storage": type(storage).__name__,
        "storage_healthy": await storage.health_check()
    }


@app.get("/info")
async def system_info():
    """Non-secret configuration"""
    return {
        "backend_api_url": settings.BACKEND_API_URL,
        "chatbot_api_url": settings.CHATBOT_API_URL,
        "login_path": settings.LOGIN_PATH,
        "default_theme": settings.DEFAULT_THEME,
        "elevenlabs_configured": settings.elevenlabs_configured,
        "transcript_ttl": settings.TRANSCRIPT_TTL
    }


@app.get("/")
async def root():
    return {
        "message": "Welcome to SD Herbs Storefront",
        "version": VERSION,
        "docs": "/docs"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )
