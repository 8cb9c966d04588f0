import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.errors import ConflictError, NotFoundError, StoreError, ValidationError
from app.core.logging import configure_logging
from app.db.session import close_store, connect_store

logger = logging.getLogger(__name__)

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_store()
    try:
        yield
    finally:
        await close_store()


app = FastAPI(
    lifespan=lifespan,
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description=settings.DESCRIPTION,
    debug=settings.DEBUG
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Billing errors use the same {"detail": ...} body as HTTPException
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    logger.warning("Transaction conflict on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store error on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=503, content={"detail": "Document store unavailable"})


@app.get("/")
async def root():
    return {"message": "Welcome to Tax Road API"}


app.include_router(api_router, prefix=settings.API_V1_STR)
