from .app_config import AppConfig
from .app_logger import get_app_logger

__all__ = ["AppConfig", "get_app_logger"]
