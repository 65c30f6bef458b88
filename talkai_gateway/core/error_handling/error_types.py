"""
Error Types and Context Definitions

Standardized error types and context information for consistent error
handling across the TalkAI Gateway.
"""

from enum import Enum
from typing import Dict, Any, Optional
from fastapi import status


class ErrorType(Enum):
    """Enumeration of standard error types in the system."""

    # Validation Errors (400)
    INVALID_REQUEST_BODY = ("invalid_request_body", status.HTTP_400_BAD_REQUEST, "Invalid request body")
    MESSAGES_REQUIRED = ("messages_required", status.HTTP_400_BAD_REQUEST, "Messages required")

    # Authorization Errors (401)
    MISSING_AUTH_HEADER = ("missing_auth_header", status.HTTP_401_UNAUTHORIZED, "Missing authorization header")
    INVALID_AUTH_FORMAT = ("invalid_auth_format", status.HTTP_401_UNAUTHORIZED, "Invalid authorization format")
    INVALID_API_KEY = ("invalid_api_key", status.HTTP_401_UNAUTHORIZED, "Invalid API key")

    # Backend Errors (status code forwarded from the backend)
    BACKEND_HTTP_ERROR = ("backend_http_error", None, "TalkAI API error")

    # Internal Errors (500)
    BACKEND_NETWORK_ERROR = ("backend_network_error", status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal error")
    INTERNAL_SERVER_ERROR = ("internal_server_error", status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal error")

    def __init__(self, code: str, status_code: Optional[int], message_template: str):
        self.code = code
        self.status_code = status_code
        self.message_template = message_template

    @property
    def category(self) -> str:
        """Taxonomy bucket: validation, auth, backend or internal."""
        if self.status_code == status.HTTP_400_BAD_REQUEST:
            return "validation"
        if self.status_code == status.HTTP_401_UNAUTHORIZED:
            return "auth"
        if self.status_code is None:
            return "backend"
        return "internal"

    def format_message(self, **kwargs) -> str:
        """Format the error message with provided parameters."""
        try:
            return self.message_template.format(**kwargs)
        except KeyError:
            return self.message_template

    def create_error_detail(self, **kwargs) -> Dict[str, Any]:
        """Create the error body returned to the client."""
        return {"error": self.format_message(**kwargs)}


class ErrorContext:
    """Context information for error handling."""

    def __init__(
        self,
        request_id: Optional[str] = None,
        model_id: Optional[str] = None,
        endpoint_path: Optional[str] = None,
        **additional_context
    ):
        self.request_id = request_id
        self.model_id = model_id
        self.endpoint_path = endpoint_path
        self.additional_context = additional_context

    def to_log_extra(self) -> Dict[str, Any]:
        """Convert context to logging extra dictionary."""
        extra = {
            "log_type": "error"
        }

        if self.request_id:
            extra["request_id"] = self.request_id
        if self.model_id:
            extra["model_id"] = self.model_id
        if self.endpoint_path:
            extra["endpoint_path"] = self.endpoint_path

        extra.update(self.additional_context)
        return extra
