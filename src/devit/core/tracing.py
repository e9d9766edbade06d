"""OpenTelemetry configuration and utilities."""
import functools
import os
from typing import Any, Callable, TypeVar

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace.status import Status, StatusCode

from devit.core.config import APP_VERSION, settings

F = TypeVar("F", bound=Callable[..., Any])


def is_tracing_enabled() -> bool:
    """Check if tracing should be enabled.

    Tracing is disabled during tests and when explicitly disabled in config.
    """
    if "pytest" in os.environ.get("_", "") or os.environ.get("PYTEST_CURRENT_TEST"):
        return False

    return settings.otel_enabled


def configure_tracing() -> None:
    """Install the OTLP tracer provider if tracing is enabled."""
    if not is_tracing_enabled():
        return

    resource = Resource.create({
        "service.name": settings.otel_service_name,
        "service.version": APP_VERSION,
        "deployment.environment": settings.environment,
        "service.namespace": "devit",
    })

    tracer_provider = TracerProvider(resource=resource)
    otlp_exporter = OTLPSpanExporter(
        endpoint=settings.otel_exporter_otlp_endpoint,
        insecure=not settings.is_production,
    )
    tracer_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    trace.set_tracer_provider(tracer_provider)


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer instance for the given module name."""
    return trace.get_tracer(name)


def instrument_fastapi_app(app: Any) -> None:
    """Instrument FastAPI app with OpenTelemetry if tracing is enabled."""
    if not is_tracing_enabled():
        return

    FastAPIInstrumentor.instrument_app(app)


def create_span(tracer: trace.Tracer, name: str, **attributes: Any) -> Any:
    """Create a span if tracing is enabled, otherwise return a no-op context manager."""
    if not is_tracing_enabled():
        return _NoOpSpan()

    span = tracer.start_span(name)
    for key, value in attributes.items():
        if value is not None:
            span.set_attribute(key, str(value))
    return span


def trace_async(
    span_name: str | None = None,
    tracer_name: str | None = None,
    **span_attributes: Any
) -> Callable[[F], F]:
    """Decorator to trace async functions with OpenTelemetry spans.

    Args:
        span_name: Custom span name. If None, uses module.function_name
        tracer_name: Custom tracer name. If None, uses function's module
        **span_attributes: Additional span attributes to set
    """
    def decorator(func: F) -> F:
        if not is_tracing_enabled():
            return func

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            tracer = get_tracer(tracer_name or func.__module__)
            name = span_name or f"{func.__module__}.{func.__qualname__}"

            with tracer.start_as_current_span(name) as span:
                for key, value in span_attributes.items():
                    if value is not None:
                        span.set_attribute(key, str(value))

                try:
                    result = await func(*args, **kwargs)
                    span.set_status(Status(StatusCode.OK))
                    return result
                except Exception as exc:
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    raise

        return async_wrapper  # type: ignore
    return decorator


def trace_database(operation: str | None = None) -> Callable[[F], F]:
    """Specialized decorator for database operations.

    Example:
        @trace_database("star_repository")
        async def add_star(self, user_id, repository_id) -> Star:
            ...
    """
    def decorator(func: F) -> F:
        op_name = operation or func.__name__
        return trace_async(
            span_name=f"db.{op_name}",
            **{
                "db.operation": op_name,
                "db.system": settings.database_system,
                "component": "database"
            }
        )(func)
    return decorator


def trace_cache(operation: str | None = None) -> Callable[[F], F]:
    """Specialized decorator for cache operations."""
    def decorator(func: F) -> F:
        op_name = operation or func.__name__
        return trace_async(
            span_name=f"cache.{op_name}",
            **{
                "cache.operation": op_name,
                "cache.system": "redis",
                "component": "cache"
            }
        )(func)
    return decorator


class _NoOpSpan:
    """No-op span for when tracing is disabled."""

    def __enter__(self) -> "_NoOpSpan":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        pass

    def set_attribute(self, key: str, value: Any) -> None:
        pass

    def set_status(self, status: Any) -> None:
        pass

    def record_exception(self, exception: Exception) -> None:
        pass
