"""
Tracing adapter over OpenTelemetry.

The pipeline only needs an opaque span: start it with a name, mark it ok or
failed, end it exactly once. Tracer wraps an OpenTelemetry tracer (the
global no-op one unless the host application installs an SDK) and hands out
Span objects with that small surface.
"""
import os

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

ENDPOINT = "OTEL_EXPORTER_OTLP_ENDPOINT"


class Span:
    """
    one traced invocation.

    - mark_ok(): status OK.
    - mark_failed(description): status ERROR with the description.
    - end(): closes the underlying span; later calls are ignored.
    """
    __slots__ = ("name", "_span", "_ended")

    def __init__(self, name, span, /):
        self.name = name
        self._span = span
        self._ended = False

    @property
    def ended(self):
        return self._ended

    def mark_ok(self):
        self._span.set_status(Status(StatusCode.OK))

    def mark_failed(self, description, /):
        self._span.set_status(Status(StatusCode.ERROR, str(description)))

    def end(self):
        if self._ended:
            return
        self._ended = True
        self._span.end()

    def __repr__(self):
        return "span(name=%r, ended=%r)" % (self.name, self._ended)


class Tracer:
    """
    span factory.

    - tracer: an opentelemetry.trace.Tracer; defaults to trace.get_tracer("arbor").
    """

    def __init__(self, tracer=None, /):
        self._tracer = tracer if tracer is not None else trace.get_tracer("arbor")

    def start(self, name, /):
        return Span(name, self._tracer.start_span(name))


def export_endpoint(endpoint, /, environ=None):
    """
    publish an --otel-endpoint value for the host's exporter.

    The environment wins when it already names an endpoint; returns the
    endpoint in effect (or None).
    """
    environ = os.environ if environ is None else environ
    if endpoint and ENDPOINT not in environ:
        environ[ENDPOINT] = endpoint
    return environ.get(ENDPOINT)


__all__ = ("ENDPOINT", "Span", "Tracer", "export_endpoint")
