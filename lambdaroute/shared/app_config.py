# ============================
# 📁 lambdaroute/shared/app_config.py
# ============================
import os
import logging
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 10.0
DEFAULT_ARTIFACT_FETCH_ATTEMPTS = 10
DEFAULT_ARTIFACT_FETCH_DELAY_SECONDS = 0.2
DEFAULT_ARTIFACT_FETCH_TIMEOUT_SECONDS = 60.0
DEFAULT_FUNCTION_LOOKUP_ATTEMPTS = 5
DEFAULT_FUNCTION_LOOKUP_DELAY_SECONDS = 25.0
DEFAULT_HTTP_TIMEOUT_SECONDS = 60.0


class AppConfig:
    def __init__(self):
        # Deploy backend (clouddriver)
        self.clouddriver_base_url: Optional[str] = os.getenv("CLOUDDRIVER_BASE_URL")
        self.http_timeout_seconds: float = self._get_float_env("LAMBDAROUTE_HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS)

        self.otel_exporter_otlp_traces_endpoint: Optional[str] = os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")

        # Verification loop
        self.poll_interval_seconds: float = self._get_float_env("LAMBDAROUTE_POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS)

        # Expected-output artifact fetch
        self.artifact_fetch_attempts: int = self._get_int_env("LAMBDAROUTE_ARTIFACT_FETCH_ATTEMPTS", DEFAULT_ARTIFACT_FETCH_ATTEMPTS)
        self.artifact_fetch_delay_seconds: float = self._get_float_env("LAMBDAROUTE_ARTIFACT_FETCH_DELAY_SECONDS", DEFAULT_ARTIFACT_FETCH_DELAY_SECONDS)
        self.artifact_fetch_exponential: bool = self._get_bool_env("LAMBDAROUTE_ARTIFACT_FETCH_EXPONENTIAL", False)
        self.artifact_fetch_timeout_seconds: float = self._get_float_env("LAMBDAROUTE_ARTIFACT_FETCH_TIMEOUT_SECONDS", DEFAULT_ARTIFACT_FETCH_TIMEOUT_SECONDS)

        # Function lookup while setting up a stage
        self.function_lookup_attempts: int = self._get_int_env("LAMBDAROUTE_FUNCTION_LOOKUP_ATTEMPTS", DEFAULT_FUNCTION_LOOKUP_ATTEMPTS)
        self.function_lookup_delay_seconds: float = self._get_float_env("LAMBDAROUTE_FUNCTION_LOOKUP_DELAY_SECONDS", DEFAULT_FUNCTION_LOOKUP_DELAY_SECONDS)

        # General Application Settings
        self.environment: str = os.getenv("APP_ENV", "development").lower()
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        self._validate_critical_configs()

    def _get_bool_env(self, var_name: str, default: bool) -> bool:
        val = os.getenv(var_name)
        if val is None:
            return default
        return val.lower() in ['true', '1', 't', 'y', 'yes']

    def _get_int_env(self, var_name: str, default: int) -> int:
        val = os.getenv(var_name)
        if val is None:
            return default
        try:
            return int(val)
        except ValueError:
            logger.warning(f"{var_name}={val!r} is not an integer. Using default {default}.")
            return default

    def _get_float_env(self, var_name: str, default: float) -> float:
        val = os.getenv(var_name)
        if val is None:
            return default
        try:
            return float(val)
        except ValueError:
            logger.warning(f"{var_name}={val!r} is not a number. Using default {default}.")
            return default

    def _validate_critical_configs(self):
        if not self.clouddriver_base_url:
            logger.warning("CLOUDDRIVER_BASE_URL is not set in environment. The clouddriver client cannot be created without an explicit base URL.")
        if self.poll_interval_seconds <= 0:
            logger.warning(f"Poll interval {self.poll_interval_seconds} is not positive. Falling back to {DEFAULT_POLL_INTERVAL_SECONDS}s.")
            self.poll_interval_seconds = DEFAULT_POLL_INTERVAL_SECONDS
        if self.artifact_fetch_attempts < 1:
            logger.warning(f"Artifact fetch attempts {self.artifact_fetch_attempts} < 1. Using 1.")
            self.artifact_fetch_attempts = 1
        if self.artifact_fetch_timeout_seconds <= 0:
            logger.warning(f"Artifact fetch timeout {self.artifact_fetch_timeout_seconds} is not positive. Falling back to {DEFAULT_ARTIFACT_FETCH_TIMEOUT_SECONDS}s.")
            self.artifact_fetch_timeout_seconds = DEFAULT_ARTIFACT_FETCH_TIMEOUT_SECONDS
