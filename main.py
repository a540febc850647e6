"""
FastAPI Application - Catalog Service
Category tree administration, vendor product writes and storefront reads
"""

# Load environment variables from .env file FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catalog_service.api import categories, health, products, storefront
from catalog_service.core.config import config
from catalog_service.core.errors import ErrorResponse, error_response_handler, http_exception_handler
from catalog_service.core.logger import logger
from catalog_service.core.telemetry import instrument_app
from catalog_service.db.indexes import create_indexes
from catalog_service.db.mongodb import close_mongo_connection, connect_to_mongo, get_database
from catalog_service.middleware import CorrelationIdMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting Catalog Service...")
    await connect_to_mongo()
    await create_indexes(await get_database())

    logger.info(
        "Catalog Service started successfully",
        metadata={
            "service_name": config.service_name,
            "version": config.service_version,
            "environment": config.environment,
            "port": config.port
        }
    )

    yield

    # Shutdown
    logger.info("Shutting down Catalog Service...")
    await close_mongo_connection()


# Create FastAPI application with lifespan management
app = FastAPI(
    title="Catalog Service",
    description="Category hierarchy, product variants and storefront catalog",
    version=config.service_version,
    lifespan=lifespan
)

# Instrument app with OpenTelemetry for automatic tracing
instrument_app(app)

# Configure error handlers
app.add_exception_handler(ErrorResponse, error_response_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, lambda request, exc: JSONResponse(
    status_code=422,
    content={"error": "Validation error", "details": jsonable_encoder(exc.errors())}
))

app.add_middleware(CorrelationIdMiddleware)

# Include API routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(categories.router, prefix="/api/admin/categories", tags=["categories"])
app.include_router(products.router, prefix="/api/vendor/products", tags=["vendor-products"])
app.include_router(storefront.router, prefix="/api/storefront", tags=["storefront"])


if __name__ == "__main__":
    import uvicorn

    logger.info(
        f"Starting {config.service_name} on port {config.port}",
        metadata={
            "service_name": config.service_name,
            "version": config.service_version,
            "environment": config.environment,
            "port": config.port
        }
    )

    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.environment == "development"
    )
