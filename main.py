# Essential imports
import time
from fastapi import FastAPI, Request, status, HTTPException
from fastapi.exceptions import RequestValidationError
from routers import auth, users
from contextlib import asynccontextmanager

# Import all models so Base.metadata knows every table
import models  # This triggers the imports in models/__init__.py
from core.database import Base, engine

# Logging imports
from core.logging_config import setup_logging, get_logger
from middleware import RequestIDMiddleware
from core.config import settings
from core.exceptions import AuthError, InvalidCredentials, UserNotFound, Unauthenticated
from fastapi.responses import JSONResponse
from utils.deps import build_session_manager

# CORS imports
from fastapi.middleware.cors import CORSMiddleware

# Initialize logging
setup_logging(
    log_level=settings.LOG_LEVEL,
    log_dir=settings.LOG_DIR
)

logger = get_logger(__name__)

# Lifecycle events logging
@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    app.state.session_manager = build_session_manager()
    logger.info("Application startup complete", extra={"event": "startup"})
    yield
    engine.dispose()
    logger.info("Application shutting down", extra={"event": "shutdown"})


app = FastAPI(
    title="Auth Session API",
    description="Credential and session lifecycle service",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# HTTP Request Logging Middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log all HTTP requests with method, path, status code, and duration.
    """
    start_time = time.time()

    # Process the request
    response = await call_next(request)

    # Calculate duration
    duration = (time.time() - start_time) * 1000  # Convert to milliseconds

    # Get client IP
    client_ip = request.client.host if request.client else "unknown"

    # Log the request
    logger.info(
        f'{client_ip} - "{request.method} {request.url.path} HTTP/1.1" {response.status_code}',
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration, 2),
            "client_ip": client_ip
            # Note: request_id is automatically added by RequestIDMiddleware
        }
    )

    return response


# Add request ID middleware
app.add_middleware(RequestIDMiddleware)



# Health check
@app.get("/health")
async def health_check():
    logger.debug("Health check requested")
    return {"status": "Healthy"}


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    """
    Map core errors to responses using each error's status code.

    UserNotFound is reported exactly like a wrong password so the response
    does not reveal whether an email is registered.
    """
    message = exc.message
    if isinstance(exc, UserNotFound):
        message = InvalidCredentials.default_message

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Request failed: {type(exc).__name__}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "step": getattr(exc, "step", None)
        }
    )

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": message},
        headers=headers
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch all unhandled exceptions and log them.
    """
    # Skip if it's an HTTPException or validation error (FastAPI handles these)
    if isinstance(exc, (HTTPException, RequestValidationError)):
        raise

    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__
        },
        exc_info=True  # Include full stack trace
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )



# Including routers
app.include_router(auth.router)
app.include_router(users.router)
