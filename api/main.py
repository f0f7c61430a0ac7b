import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth import router as auth_router
from core import config, db
from core.errors import (
    BackendFault,
    CredentialGenerationFault,
    DuplicateRecord,
    EditConflict,
    InvariantViolation,
    RecordNotFound,
    ValidationFailure,
)
from core.log import configure_logging
from words import router as words_router

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "the server encountered a problem and could not process your request"


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    # Initialize the DB pool once per process.
    await db.init_pool()
    logger.info("api_started env=%s", config.app_env())
    try:
        yield
    finally:
        await db.close_pool()
        logger.info("api_stopped")


app = FastAPI(title="kite-api", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_trusted_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationFailure)
async def validation_failure_handler(_: Request, exc: ValidationFailure) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": exc.errors})


@app.exception_handler(RecordNotFound)
async def record_not_found_handler(_: Request, exc: RecordNotFound) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "the requested resource could not be found"},
    )


@app.exception_handler(EditConflict)
async def edit_conflict_handler(_: Request, exc: EditConflict) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "unable to update the record due to an edit conflict, please try again"},
    )


@app.exception_handler(DuplicateRecord)
async def duplicate_record_handler(_: Request, exc: DuplicateRecord) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": "the record already exists"})


@app.exception_handler(BackendFault)
@app.exception_handler(CredentialGenerationFault)
@app.exception_handler(InvariantViolation)
async def server_fault_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "request_failed method=%s path=%s error=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": SERVER_ERROR_MESSAGE},
    )


app.include_router(words_router.router, tags=["words"])
app.include_router(auth_router.router, tags=["auth"])


@app.get("/v1/healthcheck")
def healthcheck() -> dict:
    return {"status": "available", "environment": config.app_env()}
