import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from maintenance_service.config import settings
from maintenance_service.database import init_db
from maintenance_service.errors import NotFoundError, StorageError, ValidationError
from maintenance_service.routers import catalog, inspection, lookups
from maintenance_service.routers.responses import error

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup."""
    init_db()
    yield


app = FastAPI(
    title="Maintenance Inspection Service",
    description="Facility and machine-safety inspections with template-driven subchecks",
    version="1.0.0",
    lifespan=lifespan,
)

# Routers
app.include_router(inspection.router)
app.include_router(catalog.router)
app.include_router(lookups.router)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content=error(exc.message))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and query parameters get the same 400 envelope."""
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return JSONResponse(status_code=400, content=error("\n".join(messages)))


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content=error(exc.message))


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(status_code=500, content=error(exc.message))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Unhandled database error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=error(StorageError().message))


@app.get("/")
async def root():
    return {"message": "Welcome to the Maintenance Inspection Service"}


@app.get("/healthz")
async def healthz():
    return {"ok": True}
