# lambdaroute/core/observability/tracing.py

import logging
import os
from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

logger = logging.getLogger(__name__)

def setup_tracing(service_name: str = "lambdaroute", endpoint: str = "localhost:4317", environment: Optional[str] = None) -> TracerProvider:
  """
  Sets up OpenTelemetry tracing for the process.

  Args:
    service_name: The name of the service to be used in traces.
    endpoint: The endpoint for the OTLP collector (e.g., "localhost:4317").
    environment: Deployment environment tag. Defaults to APP_ENV.
  """
  logger.info(f"Setting up tracing for service: {service_name}")

  resource = Resource.create({
      "service.name": service_name,
      "environment": environment or os.getenv("APP_ENV", "development"),
  })

  tracer_provider = TracerProvider(resource=resource)
  span_exporter = OTLPSpanExporter(endpoint=endpoint)

  # BatchSpanProcessor keeps export off the request path
  tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))

  trace.set_tracer_provider(tracer_provider)

  logger.info("OpenTelemetry tracing setup complete.")
  return tracer_provider
