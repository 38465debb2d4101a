from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os
from dotenv import load_dotenv

from mentormatch.core.logging_config import setup_logging
from mentormatch.core.settings import settings
from mentormatch.middleware.logging import LoggingMiddleware
from mentormatch.config import init_firebase
from mentormatch.exceptions import domain_error_handler
from mentormatch.services.errors import DomainError
from mentormatch.routes import (
    discovery, feedback, health, mentorship_requests, messages,
    profiles, push_notifications, repositories, sessions,
)

load_dotenv()

logger = setup_logging()

_docs_enabled = settings.is_development or settings.show_docs


@asynccontextmanager
async def lifespan(app: FastAPI):
    from mentormatch.services.discovery import get_discovery_service
    from mentormatch.services.meetings import get_meeting_provisioner

    logger.info("=" * 50)
    logger.info("MentorMatch API starting up")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"CORS origins: {settings.cors_origins}")
    logger.info(f"SQL Debug: {'enabled' if settings.sql_debug else 'disabled'}")

    provisioner = get_meeting_provisioner()
    meeting_status = "configured" if provisioner.is_available() else "not configured"
    ai_status = "configured" if get_discovery_service().is_available() else "not configured"
    logger.info(f"Meeting provider ({provisioner.PROVIDER_NAME}): {meeting_status}")
    logger.info(f"AI gateway: {ai_status}")
    logger.info("=" * 50)
    yield
    logger.info("MentorMatch API shutting down")


app = FastAPI(
    title="MentorMatch API",
    description="Match students with open-source mentors, schedule sessions and chat",
    version="1.0.0",
    docs_url="/docs" if _docs_enabled else None,
    redoc_url="/redoc" if _docs_enabled else None,
    lifespan=lifespan,
)

# Last added = first executed
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

# Initialize Firebase (skip in test environment)
if os.getenv("ENV") != "test":
    init_firebase()

app.include_router(health.router)
app.include_router(profiles.router)
app.include_router(repositories.router)
app.include_router(mentorship_requests.router)
app.include_router(sessions.router)
app.include_router(feedback.router)
app.include_router(messages.router)
app.include_router(push_notifications.router)
app.include_router(discovery.router)

app.add_exception_handler(DomainError, domain_error_handler)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    logger.error(f"[{correlation_id}] Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)

    content = {"detail": "Internal server error", "correlation_id": correlation_id}
    if settings.is_development:
        content.update(error=str(exc), type=type(exc).__name__)
    return JSONResponse(status_code=500, content=content)


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "message": "MentorMatch API",
        "version": "1.0.0",
        "environment": settings.environment,
        "docs_url": "/docs" if _docs_enabled else None,
        "health_check": "/health",
        "status": "running",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info" if settings.is_development else "warning",
    )
