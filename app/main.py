from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.errors import (
    CustomerEventNotFoundError,
    DomainError,
    ErrorCode,
    PaymentIdConflictError,
    PaymentNotFoundError,
    PaymentValidationError,
    StoreUnavailableError,
)
from app.core.events import get_event_bus
from app.core.logging import get_logger, setup_logging
from app.db.session import close_mongo_connection, connect_to_mongo, get_database
from app.repositories.customer_event_repo import CustomerEventRepository
from app.repositories.payment_repo import PaymentRepository
from app.services.summary_board import SummaryBoard
from app.services.summary_service import SummaryService

logger = get_logger(__name__)

ERROR_STATUS = {
    PaymentValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    PaymentNotFoundError: status.HTTP_404_NOT_FOUND,
    PaymentIdConflictError: status.HTTP_409_CONFLICT,
    CustomerEventNotFoundError: status.HTTP_404_NOT_FOUND,
    StoreUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await connect_to_mongo()

    db = await get_database()
    board = SummaryBoard(
        SummaryService(PaymentRepository(db), CustomerEventRepository(db)),
        get_event_bus(),
    )
    board.attach()
    app.state.summary_board = board

    yield

    board.detach()
    app.state.summary_board = None
    await close_mongo_connection()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description=settings.DESCRIPTION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Map domain errors to HTTP responses without leaking internals."""
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if status_code >= 500:
        logger.warning("request_failed", path=request.url.path, code=exc.code.value)
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": exc.code.value, "message": exc.message}},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests in the same envelope as domain validation errors."""
    errors = [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]
    message = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": ErrorCode.PAYMENT_INVALID.value,
                "message": message or "Invalid request",
                "details": {"errors": errors},
            }
        },
    )


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.PROJECT_VERSION}


app.include_router(api_router, prefix=settings.API_V1_STR)
