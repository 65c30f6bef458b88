"""
Error Logging Utility

Centralized error logging for consistent error records across the gateway.
"""

from typing import Dict, Any, Optional
import json
import re
from .error_types import ErrorType, ErrorContext
from ..logging import logger


BACKEND_PREVIEW_LIMIT = 200


class ErrorLogger:
    """Single error logger on top of the shared project logger."""

    @staticmethod
    def _decode_unicode_escapes(text):
        """
        Decode Unicode escape sequences in error messages.

        Args:
            text (str): Text that may contain Unicode escape sequences

        Returns:
            str: Text with Unicode escape sequences decoded to actual characters
        """
        if not text:
            return text

        try:
            if '\\u' in text:
                if text.startswith('{') and text.endswith('}'):
                    decoded = json.loads(text)
                    if isinstance(decoded, dict):
                        return json.dumps(decoded, ensure_ascii=False)
                return text.encode().decode('unicode_escape')
        except (json.JSONDecodeError, ValueError, UnicodeError):
            pass

        unicode_pattern = re.compile(r'\\u([0-9a-fA-F]{4})')
        def replace_unicode(match):
            hex_code = match.group(1)
            try:
                return chr(int(hex_code, 16))
            except ValueError:
                return match.group(0)

        return unicode_pattern.sub(replace_unicode, text)

    @staticmethod
    def preview(text: Optional[str], limit: int = BACKEND_PREVIEW_LIMIT) -> Optional[str]:
        """Truncate text to limit characters, marking the cut with an ellipsis."""
        if text and len(text) > limit:
            return text[:limit] + "..."
        return text

    @staticmethod
    def log_error(
        error_type: ErrorType,
        context: ErrorContext,
        original_exception: Optional[Exception] = None,
        additional_data: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        """Log an error with its context and taxonomy bucket."""
        log_extra = context.to_log_extra()
        log_extra["error_type"] = error_type.category
        log_extra["error_code"] = error_type.code
        log_extra["http_status_code"] = status_code or error_type.status_code

        if additional_data:
            log_extra.update(additional_data)

        log_message = error_type.format_message(**context.__dict__)

        if original_exception:
            log_extra["original_exception"] = str(original_exception)
            log_extra["original_exception_type"] = type(original_exception).__name__
            logger.error(log_message, exc_info=True, **log_extra)
        else:
            logger.error(log_message, **log_extra)

    @staticmethod
    def log_backend_error(
        status_code: int,
        error_details: Optional[str],
        context: ErrorContext
    ):
        """Log a non-2xx backend reply with a truncated preview of its body."""
        decoded_error_details = ErrorLogger._decode_unicode_escapes(error_details)
        response_preview = ErrorLogger.preview(decoded_error_details)

        log_extra = context.to_log_extra()
        log_extra.update({
            "backend_status_code": status_code,
            "backend_response_preview": response_preview,
            "error_type": "backend",
            "error_code": ErrorType.BACKEND_HTTP_ERROR.code,
        })

        logger.error(
            f"TalkAI backend returned error {status_code}: {response_preview}",
            **log_extra
        )
