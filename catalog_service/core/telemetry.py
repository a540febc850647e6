"""
OpenTelemetry instrumentation for FastAPI and PyMongo

A service-named TracerProvider is installed so local spans carry the service
resource; exporters are attached by the deployment's OpenTelemetry setup.
"""

from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.pymongo import PymongoInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider

from catalog_service.core.config import config
from catalog_service.core.logger import logger


def create_tracer_provider() -> TracerProvider:
    resource = Resource.create({
        SERVICE_NAME: config.service_name,
        SERVICE_VERSION: config.service_version,
        "deployment.environment": config.environment,
    })
    return TracerProvider(resource=resource)


def instrument_app(app):
    """
    Instrument the FastAPI application and the PyMongo driver.

    Args:
        app: FastAPI application instance
    """
    try:
        tracer_provider = create_tracer_provider()
        trace.set_tracer_provider(tracer_provider)

        FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider)
        logger.info("FastAPI instrumented with OpenTelemetry")

        PymongoInstrumentor().instrument(tracer_provider=tracer_provider)
        logger.info("PyMongo instrumented with OpenTelemetry")
    except Exception as e:
        logger.error(f"Failed to instrument application: {e}", error=e)
