# ============================
# 📁 lambdaroute/shared/app_logger.py
# ============================
import logging
import os
import sys # For logging.StreamHandler(sys.stderr)
from typing import Dict, Optional

_loggers: Dict[str, logging.Logger] = {} # Cache for logger instances

def get_app_logger(name: str, service_name_override: Optional[str] = None) -> logging.Logger:
    """
    Retrieves or creates a standardized logger instance.
    The logger name will be 'service_name.name' unless name already is the service name.
    OpenTelemetry LoggingInstrumentor (if active) will enrich logs with trace context.
    """
    effective_service_name = service_name_override or os.getenv("SERVICE_NAME", "lambdaroute")

    logger_full_name = f"{effective_service_name}.{name}" if name != effective_service_name else effective_service_name

    if logger_full_name in _loggers:
        return _loggers[logger_full_name]

    logger_instance = logging.getLogger(logger_full_name)

    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    numeric_log_level = getattr(logging, log_level_str, logging.INFO)
    logger_instance.setLevel(numeric_log_level)

    # Add our standard handler ONLY if no handlers are already configured for this logger
    if not logger_instance.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            f'%(asctime)s - %(levelname)-8s - [{effective_service_name}] - %(name)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger_instance.addHandler(handler)
        # Our own handler is attached, so don't duplicate through the root logger
        logger_instance.propagate = False

    _loggers[logger_full_name] = logger_instance
    return logger_instance
