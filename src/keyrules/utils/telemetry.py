"""OpenTelemetry tracing helpers for keyrules.

Reload and evaluation call :func:`get_tracer` and open spans unconditionally.
Without a configured SDK the API hands back no-op tracers, so the spans cost
nothing unless :func:`configure_telemetry` was called at startup (requires
the ``otel`` extra: ``pip install keyrules[otel]``).

Usage::

    from keyrules.utils.telemetry import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("keyrules.reload") as span:
        span.set_attribute(ATTR_RULE_FILES, 3)
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

ATTR_ACTION_ID = "keyrules.action_id"
ATTR_USER_NAME = "keyrules.subject.user"
ATTR_SUBJECT_LOCAL = "keyrules.subject.local"
ATTR_SUBJECT_ACTIVE = "keyrules.subject.active"
ATTR_VERDICT = "keyrules.verdict"
ATTR_IMPLICIT = "keyrules.implicit"
ATTR_ADMIN_COUNT = "keyrules.admins.count"
ATTR_RULE_FILES = "keyrules.rule_files"
ATTR_RULE_FILES_FAILED = "keyrules.rule_files.failed"

_INSTRUMENTATION_NAME = "keyrules"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "keyrules",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Configure OpenTelemetry tracing (requires ``keyrules[otel]``).

    Parameters
    ----------
    service_name:
        The ``service.name`` resource attribute.
    export_to_console:
        If ``True``, export spans as JSON to stdout.
    otlp_endpoint:
        If set, export spans via OTLP/gRPC to this endpoint.

    Raises
    ------
    ImportError
        If the ``opentelemetry-sdk`` package is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install keyrules[otel]"
        )
        raise ImportError(msg) from exc

    resource = Resource.create({"service.name": service_name})  # pyright: ignore[reportUnknownVariableType,reportUnknownMemberType]
    provider = TracerProvider(resource=resource)  # pyright: ignore[reportUnknownVariableType]

    if export_to_console:
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]

        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    if otlp_endpoint:
        _add_otlp_exporter(provider, BatchSpanProcessor, otlp_endpoint)

    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]


def _add_otlp_exporter(provider: Any, processor_cls: Any, endpoint: str) -> None:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install keyrules[otel]"
        )
        raise ImportError(msg) from exc

    provider.add_span_processor(processor_cls(OTLPSpanExporter(endpoint=endpoint)))
