"""
Module: main.py
Description: FastAPI application entry point for the SQS service broker.

Initializes the FastAPI application with the broker routes, health
check and error handlers, and exposes a Lambda handler.
"""

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from mangum import Mangum

from handlers.broker import router as broker_router
from config.settings import settings
from utils.logger import get_logger

logger = get_logger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Provisions SQS queue pairs through CloudFormation for a platform marketplace",
    version=settings.app_version,
    docs_url="/docs",  # Swagger UI
    redoc_url="/redoc"  # ReDoc
)

app.include_router(broker_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns basic application health information. Does not call AWS.
    """
    logger.info("Health check requested")

    return {
        "status": "ok",
        "message": "SQS broker is healthy",
        "version": settings.app_version,
        "environment": settings.stage
    }


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Global HTTP exception handler.

    Logs HTTP exceptions and returns broker-style error bodies.
    """
    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"description": str(exc.detail)},
        headers=exc.headers
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler for unhandled errors.

    Logs unexpected exceptions and returns a generic error body.
    """
    logger.error(
        "Unhandled exception occurred",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=500,
        content={"description": "Internal server error"}
    )


@app.on_event("startup")
async def startup_event():
    """Application startup event handler."""
    logger.info(
        "Starting SQS broker",
        version=settings.app_version,
        stage=settings.stage,
        region=settings.aws_region,
        resource_prefix=settings.resource_prefix,
        deploy_env=settings.deploy_env
    )
    if not settings.broker_password:
        logger.warning("BROKER_PASSWORD is not set; all broker requests will be rejected")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event handler."""
    logger.info("Shutting down SQS broker")


# Lambda handler
handler = Mangum(app, lifespan="off")
