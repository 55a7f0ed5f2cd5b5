"""Request correlation and structured logging."""

from .logging_config import configure_logging, get_logger
from .middleware import RequestIDMiddleware
from .request_id import get_request_id

__all__ = ["configure_logging", "get_logger", "RequestIDMiddleware", "get_request_id"]
