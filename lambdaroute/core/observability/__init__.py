from .tracing import setup_tracing

__all__ = ["setup_tracing"]
