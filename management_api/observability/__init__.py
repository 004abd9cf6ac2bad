"""
Observability module.

Provides logging configuration, structured logging helpers, correlation ID
tracking and request middleware.
"""

from management_api.observability.correlation import get_correlation_id, set_correlation_id
from management_api.observability.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger", "get_correlation_id", "set_correlation_id"]
