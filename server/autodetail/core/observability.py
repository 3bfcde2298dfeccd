"""Observability setup for OpenTelemetry, metrics, and structured logging."""

import logging

from opentelemetry import trace, metrics
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest
import structlog

from .config import settings

SERVICE_NAME = "autodetail-booking-api"

# Prometheus metrics
REGISTRY = CollectorRegistry()

# Request metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=REGISTRY
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=REGISTRY
)

# Business metrics
BOOKINGS_CREATED = Counter(
    'bookings_created_total',
    'Total bookings created',
    ['vehicle_type'],
    registry=REGISTRY
)

QUOTES_RECEIVED = Counter(
    'quotes_received_total',
    'Total quote requests received',
    registry=REGISTRY
)

COUPONS_APPLIED = Counter(
    'coupons_applied_total',
    'Total coupons applied to bookings',
    ['discount_type'],
    registry=REGISTRY
)

PAYMENTS_PROCESSED = Counter(
    'payments_processed_total',
    'Square payments attempted',
    ['kind', 'outcome'],
    registry=REGISTRY
)

GOOGLE_REVIEWS_LOOKUPS = Counter(
    'google_reviews_lookups_total',
    'Google reviews served, by cache outcome',
    ['outcome'],
    registry=REGISTRY
)

NOTIFICATIONS_SENT = Counter(
    'notifications_sent_total',
    'Outbound notifications by channel and outcome',
    ['channel', 'outcome'],
    registry=REGISTRY
)

LOGIN_ATTEMPTS = Counter(
    'admin_login_attempts_total',
    'Admin login attempts by outcome',
    ['outcome'],
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _resource() -> Resource:
    return Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": "1.0.0",
        "environment": settings.environment,
    })


def setup_tracing():
    """Setup OpenTelemetry tracing."""
    provider = TracerProvider(resource=_resource())
    trace.set_tracer_provider(provider)

    if settings.otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    return trace.get_tracer(__name__)


def setup_metrics():
    """Setup OpenTelemetry metrics."""
    if settings.otlp_endpoint:
        otlp_exporter = OTLPMetricExporter(endpoint=settings.otlp_endpoint)
        reader = PeriodicExportingMetricReader(exporter=otlp_exporter, export_interval_millis=60000)
        metrics.set_meter_provider(MeterProvider(resource=_resource(), metric_readers=[reader]))

    return metrics.get_meter(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy():
    """Instrument SQLAlchemy with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument()


class MetricsCollector:
    """Collector for business metrics."""

    @staticmethod
    def record_request(method: str, endpoint: str, status_code: int, duration_seconds: float):
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_seconds)

    @staticmethod
    def record_booking_created(vehicle_type: str):
        """Record a new booking."""
        BOOKINGS_CREATED.labels(vehicle_type=vehicle_type).inc()

    @staticmethod
    def record_quote_received():
        QUOTES_RECEIVED.inc()

    @staticmethod
    def record_coupon_applied(discount_type: str):
        COUPONS_APPLIED.labels(discount_type=discount_type).inc()

    @staticmethod
    def record_payment(kind: str, outcome: str):
        """Record a deposit/final payment attempt and whether it succeeded."""
        PAYMENTS_PROCESSED.labels(kind=kind, outcome=outcome).inc()

    @staticmethod
    def record_google_reviews_lookup(outcome: str):
        GOOGLE_REVIEWS_LOOKUPS.labels(outcome=outcome).inc()

    @staticmethod
    def record_notification(channel: str, outcome: str):
        NOTIFICATIONS_SENT.labels(channel=channel, outcome=outcome).inc()

    @staticmethod
    def record_login(outcome: str):
        LOGIN_ATTEMPTS.labels(outcome=outcome).inc()


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()


def get_logger(name: str, **context):
    """Structlog logger for the outbound integrations, optionally bound to ``context``."""
    return structlog.get_logger(name, **context)
