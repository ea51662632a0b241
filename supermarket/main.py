import asyncio
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from supermarket.api.v1.router import router as v1_router
from supermarket.core.config import settings
from supermarket.core.deps import build_container
from supermarket.core.exceptions import (
    DuplicateKeyError,
    HasDependentsError,
    InvalidFormatError,
    NotFoundError,
    OperationCancelledError,
    PasswordVerificationError,
    StorageIOError,
    SupermarketError,
    ValidationError,
)
from supermarket.core.logging import operation_id_var, setup_logging
from supermarket.db.sessions import AsyncSessionLocal, async_engine, get_session_factory, init_models

# LOGGING
setup_logging(settings.log_level, settings.log_json)
logger = logging.getLogger(__name__)


# LIFESPAN
@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models(async_engine)

    scheduler_task = None
    container = build_container(AsyncSessionLocal)
    if settings.auto_backup_days > 0:
        scheduler_task = asyncio.create_task(container.auto_backup.run_forever())
        logger.info(f"Automatic backup every {settings.auto_backup_days} day(s)")

    yield

    if scheduler_task:
        scheduler_task.cancel()
        try:
            await scheduler_task
        except asyncio.CancelledError:
            pass
    await async_engine.dispose()


# APP INITIALIZATION
app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    lifespan=lifespan,
)


# ERROR MAPPING
STATUS_CODES = [
    (NotFoundError, 404),
    (DuplicateKeyError, 409),
    (HasDependentsError, 409),
    (InvalidFormatError, 422),
    (StorageIOError, 503),
    (PasswordVerificationError, 401),
    (ValidationError, 400),
    (OperationCancelledError, 400),
]


@app.exception_handler(SupermarketError)
async def supermarket_exception_handler(request: Request, exc: SupermarketError):
    status_code = next((code for cls, code in STATUS_CODES if isinstance(exc, cls)), 400)

    if status_code >= 500:
        logger.error(f"Storage failure: {str(exc)}", exc_info=exc)
    else:
        logger.warning(f"{type(exc).__name__}: {str(exc)}")

    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc)},
    )


# ROUTERS
app.include_router(v1_router, prefix="/api/v1")


@app.exception_handler(Exception)
async def universal_exception_handler(request: Request, exc: Exception):
    # Log the real error for the developer
    logger.error(f"Unhandled error: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500, content={"detail": "An unexpected error occurred."}
    )


# MIDDLEWARES
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type"],
)


# OPERATION TRACING
@app.middleware("http")
async def tracing_middleware(request: Request, call_next):
    operation_id = str(uuid.uuid4())
    request.state.operation_id = operation_id
    token = operation_id_var.set(operation_id)

    try:
        response = await call_next(request)
        response.headers["X-Operation-Id"] = operation_id
        return response

    finally:
        operation_id_var.reset(token)


# HEALTH CHECK
@app.get("/health")
async def health_check(session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)):
    health_status = {"status": "healthy", "dependencies": {}}

    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        health_status["dependencies"]["database"] = "ok"
    except SQLAlchemyError as e:
        health_status["status"] = "unhealthy"
        health_status["dependencies"]["database"] = str(e)

    health_status["dependencies"]["backup_dir"] = str(settings.backup_dir)
    return health_status
