"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from coinfolio import __version__
from coinfolio.config import settings
from coinfolio.database import close_engine
from coinfolio.dependencies.market import close_price_oracle
from coinfolio.rate_limiter import limiter
from coinfolio.schemas.common import ErrorDetail, ErrorResponse
from coinfolio.services.coingecko_client import OracleUnavailableError
from coinfolio.services.portfolio import (
    InsufficientBalanceError,
    LedgerValidationError,
    PortfolioError,
    PriceUnavailableError,
)
from coinfolio.services.repositories import (
    DuplicateError,
    ForbiddenError,
    NotFoundError,
    RepositoryError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Coinfolio API {__version__} starting")
    yield
    close_price_oracle()
    close_engine()


# Create FastAPI app
app = FastAPI(
    title="Coinfolio API",
    description="Crypto portfolio tracker: holdings ledger, swaps and valuation",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add rate limiter to app state and exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: list[ErrorDetail] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=code, message=message, path=request.url.path, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


# Domain errors -> HTTP status
_PORTFOLIO_STATUS = {
    LedgerValidationError: status.HTTP_400_BAD_REQUEST,
    InsufficientBalanceError: status.HTTP_400_BAD_REQUEST,
    PriceUnavailableError: status.HTTP_502_BAD_GATEWAY,
}
_REPOSITORY_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    DuplicateError: status.HTTP_409_CONFLICT,
}


@app.exception_handler(PortfolioError)
async def portfolio_error_handler(request: Request, exc: PortfolioError) -> JSONResponse:
    status_code = _PORTFOLIO_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return _error_response(request, status_code, exc.code, exc.message)


@app.exception_handler(RepositoryError)
async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    status_code = _REPOSITORY_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return _error_response(request, status_code, exc.code, str(exc))


@app.exception_handler(OracleUnavailableError)
async def oracle_error_handler(request: Request, exc: OracleUnavailableError) -> JSONResponse:
    return _error_response(request, status.HTTP_502_BAD_GATEWAY, exc.code, "Price service unavailable")


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"] if part not in ("body", "query", "path"))
        details.append(ErrorDetail(field=location or None, message=err["msg"]))
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "ValidationError",
        "Request validation failed",
        details,
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return _error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "InternalError", "Internal server error"
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Coinfolio API", "version": __version__, "status": "running"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include routers
from coinfolio.routers import (  # noqa: E402
    admin,
    auth,
    coins,
    holdings,
    transactions,
    users,
    watchlist,
)

app.include_router(auth.router, prefix="/api")
app.include_router(admin.router, prefix="/api")
app.include_router(users.router)
app.include_router(holdings.router)
app.include_router(transactions.router)
app.include_router(watchlist.router)
app.include_router(coins.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, reload=True)
