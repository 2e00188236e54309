"""
Main entry point for the plasmid simulation backend.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import time
import logging
from config import settings
from routes.simulation import router as simulation_router
from routes.results import router as results_router
from utils.data_transform import ResponseBuilder

# Configure logging
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version,
    debug=settings.debug
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=settings.allow_credentials,
    allow_methods=settings.allowed_methods,
    allow_headers=settings.allowed_headers,
)

# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time to response headers."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response

# Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Wrap route and routing errors (404, 405, ...) in the error envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ResponseBuilder.error(
            message=str(exc.detail),
            error_code=f"HTTP_{exc.status_code}"
        )
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    return JSONResponse(
        status_code=422,
        content=ResponseBuilder.error(
            message="Validation error",
            error_code="VALIDATION_ERROR",
            details=[
                {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
                for error in exc.errors()
            ]
        )
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=ResponseBuilder.error(
            message="Internal server error",
            error_code="INTERNAL_ERROR"
        )
    )

# Include routers
app.include_router(simulation_router)
app.include_router(results_router)

@app.get("/", tags=["Root"])
async def root():
    """Root endpoint returning API information."""
    return ResponseBuilder.success(
        data={
            "message": settings.api_title,
            "version": settings.api_version,
            "status": "running",
            "docs_url": "/docs",
            "redoc_url": "/redoc",
            "simulation_endpoints": {
                "create": "/api/simulations",
                "step": "/api/simulations/{id}/step",
                "run": "/api/simulations/{id}/run",
                "stream": "/api/simulations/{id}/run-stream",
                "status": "/api/simulations/{id}/status"
            },
            "results_endpoints": {
                "metrics": "/api/results/{id}/metrics",
                "latest": "/api/results/{id}/metrics/latest",
                "export": "/api/results/{id}/export"
            }
        },
        message="API is running successfully"
    )

@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return ResponseBuilder.success(
        data={
            "status": "healthy",
            "version": settings.api_version,
            "timestamp": time.time()
        },
        message="Service is healthy"
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload
    )
