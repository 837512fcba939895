"""
Unique API - Main Application Entry Point

Users & Roles backend. Run with:
    uvicorn app.main:app --reload
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from app.api import users, roles, user_roles
from app.api.errors import register_exception_handlers, unhandled_exception_handler
from app.config import settings
from app.db import init_db, close_db
from app.version import __version__
import logging
import re
import uuid


# Custom logging filter to redact sensitive data
class SensitiveDataFilter(logging.Filter):
    """Filter to redact password material from logs"""

    BCRYPT_HASH = re.compile(r"\$2[abxy]\$\d{2}\$[./A-Za-z0-9]{53}")
    PASSWORD_FIELD = re.compile(r"(['\"]?(?:password|password_hash)['\"]?\s*[:=]\s*['\"]?)([^'\",\s}]+)")

    def filter(self, record):
        if hasattr(record, 'msg'):
            msg = str(record.msg)

            # Redact bcrypt hashes wherever they appear
            msg = self.BCRYPT_HASH.sub('[HASH_REDACTED]', msg)

            # Redact password / password_hash values in dict, JSON or key=value form
            if 'password' in msg:
                msg = self.PASSWORD_FIELD.sub(r"\1[REDACTED]", msg)

            record.msg = msg
        return True


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Add filter to all loggers
for handler in logging.root.handlers:
    handler.addFilter(SensitiveDataFilter())

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown"""
    # Startup
    logger.info("🚀 Starting Unique API")
    logger.info(f"📦 Version: {__version__}")
    logger.info(f"📝 Environment: {settings.environment}")

    await init_db()

    yield

    # Shutdown
    logger.info("👋 Shutting down Unique API")
    await close_db()


app = FastAPI(
    title="Unique API",
    description="Users and roles management API",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)


# ============================================
# CORS Middleware Configuration
# ============================================
# FRONTEND_URLS is a comma-separated list of allowed origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_urls,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

logger.info(f"✅ CORS configured for origins: {settings.frontend_urls}")


# ============================================
# Request correlation
# ============================================

@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Reuse the caller's X-Request-ID or mint one, and echo it back"""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    try:
        response = await call_next(request)
    except Exception as e:
        # Unhandled errors would otherwise reach ServerErrorMiddleware, outside this one
        response = await unhandled_exception_handler(request, e)

    response.headers["X-Request-ID"] = request_id
    logger.debug(f"{request.method} {request.url.path} -> {response.status_code} (request_id={request_id})")
    return response


register_exception_handlers(app)

app.include_router(users.router, prefix="/v1", tags=["users"])
app.include_router(roles.router, prefix="/v1", tags=["roles"])
app.include_router(user_roles.router, prefix="/v1", tags=["users"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "app": "Unique API",
        "version": __version__,
        "status": "running",
        "environment": settings.environment,
    }


@app.get("/v1/health")
async def health_check():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
