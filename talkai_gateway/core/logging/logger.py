"""
Universal Logger facade for debugging and diagnostics.

Wraps the project logger with request/response helpers that keep the
structured context in ``extra`` and a short human readable message line.
"""

import logging
import time
import json
from typing import Any, Optional
from .config import setup_logging


class Logger:
    """
    Simple Logger with request-scoped helpers.

    Extra keyword arguments are passed to the standard library logger as
    ``extra`` so they land on the log record.
    """

    def __init__(self):
        self._logger = setup_logging()

    def configure(self, debug_mode: Optional[bool] = None):
        """Re-run the logging setup, e.g. with the gateway's resolved debug flag."""
        self._logger = setup_logging(debug_mode)

    def is_debug_enabled(self) -> bool:
        """Check if debug logging is enabled."""
        return self._logger.isEnabledFor(logging.DEBUG)

    def info(self, message: str, **kwargs):
        if kwargs:
            self._logger.info(message, extra=kwargs)
        else:
            self._logger.info(message)

    def debug(self, message: str, **kwargs):
        if kwargs:
            self._logger.debug(message, extra=kwargs)
        else:
            self._logger.debug(message)

    def warning(self, message: str, **kwargs):
        if kwargs:
            self._logger.warning(message, extra=kwargs)
        else:
            self._logger.warning(message)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log an error message, with the active traceback when exc_info is set."""
        if kwargs:
            self._logger.error(message, extra=kwargs, exc_info=exc_info)
        else:
            self._logger.error(message, exc_info=exc_info)

    def request(self, operation: str, request_id: str, **kwargs):
        """Log a request with context."""
        message_parts = [f"Request: {operation}"]
        if 'model_id' in kwargs:
            message_parts.append(f"model={kwargs['model_id']}")
        if 'stream' in kwargs:
            message_parts.append(f"stream={kwargs['stream']}")

        message = " | ".join(message_parts)
        self.info(message, request_id=request_id, **kwargs)

    def response(self, operation: str, request_id: str, status_code: int = 200, **kwargs):
        """Log a response with context."""
        message_parts = [f"Response: {operation}", f"status={status_code}"]
        if 'processing_time_ms' in kwargs:
            message_parts.append(f"time={kwargs['processing_time_ms']}ms")

        message = " | ".join(message_parts)
        self.info(message, request_id=request_id, status_code=status_code, **kwargs)

    def debug_data(self, title: str, data: Any, request_id: str, **kwargs):
        """Log a full payload, only when debug logging is enabled."""
        if not self.is_debug_enabled():
            return

        if isinstance(data, (dict, list)):
            data_str = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        else:
            data_str = str(data)

        message = f"DEBUG: {title}"
        if 'component' in kwargs:
            message += f" | component={kwargs['component']}"
        if 'data_flow' in kwargs:
            message += f" | flow={kwargs['data_flow']}"

        self.debug(f"{message}\n{data_str}", request_id=request_id, **kwargs)

    def performance(self, operation: str, start_time: float, request_id: str, **kwargs):
        """Log the elapsed time of an operation started at start_time."""
        duration_ms = int((time.time() - start_time) * 1000)
        message = " | ".join([f"Performance: {operation}", f"duration={duration_ms}ms"])
        self.info(message, request_id=request_id, duration_ms=duration_ms, **kwargs)
