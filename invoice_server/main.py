import logging
from datetime import date

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings
from .dependencies import get_counter_store
from .errors import ConfigurationError, StoreUnavailable
from .models import ErrorResponse
from .routers.companies import router as companies_router
from .routers.invoices import router as invoices_router
from .routers.items import router as items_router
from .sequence import COUNTER_KEY, CounterStore

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Invoice Server API",
    description="Invoice, item and company management with monotonic invoice numbering",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(invoices_router)
app.include_router(items_router)
app.include_router(companies_router)


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"message": "Invoice Server API is running", "status": "healthy"}


@app.get("/api/health")
def health_check(counters: CounterStore = Depends(get_counter_store)):
    """Detailed health check with database connectivity"""
    last_number = counters.get(COUNTER_KEY)
    return {
        "status": "healthy",
        "database": "connected",
        "lastNumber": last_number or 0,
        "timestamp": date.today().isoformat()
    }


# Error handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            success=False,
            error=exc.detail,
            details=f"Status Code: {exc.status_code}"
        ).model_dump()
    )


@app.exception_handler(StoreUnavailable)
@app.exception_handler(ConfigurationError)
async def store_unavailable_handler(request, exc):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content=ErrorResponse(
            success=False,
            error="Service unavailable",
            details=str(exc)
        ).model_dump()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            success=False,
            error="Internal server error",
            details=str(exc)
        ).model_dump()
    )
