"""
Main Error Handler

Creates standardized HTTPExceptions with proper logging for every failure
path of the gateway.
"""

from typing import Optional
from fastapi import HTTPException

from .error_types import ErrorType, ErrorContext
from .error_logger import ErrorLogger


class ErrorHandler:
    """Centralized error handling utility."""

    @staticmethod
    def create_http_exception(
        error_type: ErrorType,
        context: Optional[ErrorContext] = None,
        original_exception: Optional[Exception] = None,
        log_error: bool = True,
        status_code: Optional[int] = None,
        **format_kwargs
    ) -> HTTPException:
        """
        Create a standardized HTTPException with proper logging.

        Args:
            error_type: The type of error to create
            context: Error context information
            original_exception: Original exception that caused this error
            log_error: Whether to log the error
            status_code: Overrides the error type's status (backend errors)
            **format_kwargs: Additional kwargs for message formatting

        Returns:
            HTTPException whose detail is the ``{"error": message}`` body
        """
        if context is None:
            context = ErrorContext()

        format_dict = {**context.__dict__, **format_kwargs}
        error_detail = error_type.create_error_detail(**format_dict)

        resolved_status = status_code or error_type.status_code

        if log_error:
            ErrorLogger.log_error(
                error_type=error_type,
                context=context,
                original_exception=original_exception,
                additional_data={"error_detail": error_detail},
                status_code=resolved_status
            )

        return HTTPException(
            status_code=resolved_status,
            detail=error_detail
        )

    @staticmethod
    def handle_invalid_request_body(
        context: ErrorContext,
        original_exception: Optional[Exception] = None
    ) -> HTTPException:
        """Handle a body that is not JSON or does not match the request shape."""
        return ErrorHandler.create_http_exception(
            error_type=ErrorType.INVALID_REQUEST_BODY,
            context=context,
            original_exception=original_exception
        )

    @staticmethod
    def handle_messages_required(context: ErrorContext) -> HTTPException:
        """Handle an empty messages list."""
        return ErrorHandler.create_http_exception(
            error_type=ErrorType.MESSAGES_REQUIRED,
            context=context
        )

    @staticmethod
    def handle_auth_errors(
        auth_type: str,
        context: ErrorContext
    ) -> HTTPException:
        """Handle authentication errors."""
        if auth_type == "missing_auth_header":
            error_type = ErrorType.MISSING_AUTH_HEADER
        elif auth_type == "invalid_auth_format":
            error_type = ErrorType.INVALID_AUTH_FORMAT
        elif auth_type == "invalid_api_key":
            error_type = ErrorType.INVALID_API_KEY
        else:
            return ErrorHandler.handle_internal_server_error(
                error_details=f"Authentication error: {auth_type}",
                context=context
            )
        return ErrorHandler.create_http_exception(error_type=error_type, context=context)

    @staticmethod
    def handle_backend_http_error(
        status_code: int,
        response_text: Optional[str],
        context: ErrorContext
    ) -> HTTPException:
        """
        Handle a non-2xx backend reply.

        The backend status is forwarded; the body is only logged.
        """
        ErrorLogger.log_backend_error(
            status_code=status_code,
            error_details=response_text,
            context=context
        )

        return ErrorHandler.create_http_exception(
            error_type=ErrorType.BACKEND_HTTP_ERROR,
            context=context,
            status_code=status_code,
            log_error=False  # Already logged above
        )

    @staticmethod
    def handle_backend_network_error(
        original_exception: Exception,
        context: ErrorContext
    ) -> HTTPException:
        """Handle network failures while talking to the backend."""
        return ErrorHandler.create_http_exception(
            error_type=ErrorType.BACKEND_NETWORK_ERROR,
            context=context,
            original_exception=original_exception
        )

    @staticmethod
    def handle_internal_server_error(
        error_details: str,
        context: ErrorContext,
        original_exception: Optional[Exception] = None
    ) -> HTTPException:
        """Handle internal server errors."""
        return ErrorHandler.create_http_exception(
            error_type=ErrorType.INTERNAL_SERVER_ERROR,
            context=context,
            original_exception=original_exception,
            error_details=error_details
        )
