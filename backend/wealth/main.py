"""Main FastAPI application."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from wealth.config import settings
from wealth.rate_limiter import limiter
from wealth.schemas.common import ErrorResponse
from wealth.services.ledger.errors import (
    BatchPersistenceError,
    EntryValidationError,
    ImportValidationError,
    OversellError,
    ReversalError,
)
from wealth.services.repositories.exceptions import (
    DuplicateError,
    NotFoundError,
    ReferenceInUseError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Wealth Ledger API",
    description="Transaction ledger with CSV import, FIFO lots, holdings and realized P&L",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
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


def _error_response(request: Request, status_code: int, exc: Exception) -> JSONResponse:
    body = ErrorResponse(error=type(exc).__name__, message=str(exc), path=request.url.path)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(ImportValidationError)
async def import_validation_error_handler(request: Request, exc: ImportValidationError):
    if exc.too_large:
        return _error_response(request, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, exc)
    return _error_response(request, status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(EntryValidationError)
async def entry_validation_error_handler(request: Request, exc: EntryValidationError):
    return _error_response(request, status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return _error_response(request, status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(OversellError)
@app.exception_handler(ReversalError)
@app.exception_handler(DuplicateError)
@app.exception_handler(ReferenceInUseError)
async def conflict_error_handler(request: Request, exc: Exception):
    return _error_response(request, status.HTTP_409_CONFLICT, exc)


@app.exception_handler(BatchPersistenceError)
async def batch_persistence_error_handler(request: Request, exc: BatchPersistenceError):
    logger.error(f"Ledger write failed on {request.url.path}: {exc}")
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, exc)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Wealth Ledger API", "version": "0.1.0", "status": "running"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include routers
from wealth.routers import (  # noqa: E402
    accounts,
    corporate_actions,
    holdings,
    imports,
    prices,
    realized,
    securities,
    transactions,
)

app.include_router(accounts.router)
app.include_router(securities.router)
app.include_router(prices.router)
app.include_router(corporate_actions.router)
app.include_router(transactions.router)
app.include_router(imports.router)
app.include_router(holdings.router)
app.include_router(realized.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, reload=True)
