import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from realty.api.api import api_router
from realty.core.config import get_settings
from realty.core.database import Base, engine
from realty.core.errors import (
    AddressLookupError,
    ConflictError,
    FetchError,
    MutationError,
    NotFoundError,
    ValidationError,
)
from realty.core.logging import setup_logging
from realty.core.middleware import RequestIDMiddleware, SecurityHeadersMiddleware
from realty.core.rate_limit import limiter
from realty.models import property, visit  # noqa: F401

settings = get_settings()
setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    docs_url="/docs" if settings.ENABLE_API_DOCS else None,
    redoc_url="/redoc" if settings.ENABLE_API_DOCS else None,
    openapi_url="/openapi.json" if settings.ENABLE_API_DOCS else None,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "x-request-id"],
)


@app.on_event("startup")
def on_startup() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("%s started (environment=%s)", settings.PROJECT_NAME, settings.ENVIRONMENT)


@app.exception_handler(FetchError)
async def fetch_error_handler(request: Request, exc: FetchError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(MutationError)
async def mutation_error_handler(request: Request, exc: MutationError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(AddressLookupError)
async def address_lookup_error_handler(request: Request, exc: AddressLookupError):
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.get("/health")
@limiter.limit("60/minute")
def health(request: Request):
    return {"status": "ok"}


_storage_dir = Path(settings.STORAGE_DIR)
_storage_dir.mkdir(parents=True, exist_ok=True)
app.mount(settings.STORAGE_PUBLIC_URL, StaticFiles(directory=str(_storage_dir)), name="storage")

app.include_router(api_router, prefix=settings.API_V1_STR)
