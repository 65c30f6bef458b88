from fastapi import Security, Request
from fastapi.security import APIKeyHeader
from typing import Iterable, Optional
from .error_handling import ErrorHandler, ErrorContext

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)


class AccessGate:
    """
    Bearer credential check against the configured key set.

    An empty key set puts the gate in open mode: every call is admitted.
    All valid keys are equivalent, there is no per-key scoping.
    """

    def __init__(self, api_keys: Iterable[str]):
        self._keys = frozenset(key for key in api_keys if key)

    @property
    def is_open(self) -> bool:
        return not self._keys

    def authorize(self, authorization: Optional[str], context: Optional[ErrorContext] = None) -> Optional[str]:
        """
        Validate an ``Authorization`` header value.

        Returns the admitted token (None in open mode) or raises a 401
        HTTPException built by ErrorHandler.
        """
        if self.is_open:
            return None

        context = context or ErrorContext()
        if not authorization:
            raise ErrorHandler.handle_auth_errors("missing_auth_header", context)

        parts = authorization.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer":
            raise ErrorHandler.handle_auth_errors("invalid_auth_format", context)

        token = parts[1]
        if token not in self._keys:
            raise ErrorHandler.handle_auth_errors("invalid_api_key", context)
        return token


async def require_api_key(
    request: Request,
    api_key: Optional[str] = Security(api_key_header)
) -> Optional[str]:
    """FastAPI dependency guarding endpoints with the app's AccessGate."""
    access_gate: AccessGate = request.app.state.access_gate
    context = ErrorContext(
        request_id=getattr(request.state, "request_id", None),
        endpoint_path=request.url.path
    )
    return access_gate.authorize(api_key, context)
