"""
Authentication module for Task Service.
Compares the bearer token of every API request against the configured secret.
"""
import logging
import secrets
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.security.utils import get_authorization_scheme_param
from starlette.middleware.base import BaseHTTPMiddleware

from .errors import AuthError

# Configure logging
logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    scheme, token = get_authorization_scheme_param(authorization)
    if not authorization or scheme.lower() != "bearer" or not token:
        return None
    return token


def is_authorized(token: Optional[str], expected: str) -> bool:
    """
    Constant-time comparison of a caller token against the configured secret.

    An empty configured secret rejects every caller.
    """
    if not token or not expected:
        return False
    return secrets.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))


class BearerAuthMiddleware(BaseHTTPMiddleware):
    """
    Rejects requests under ``prefix`` that lack the configured bearer token.

    Runs before routing, so body decoding and storage are never reached for
    unauthorized callers. Missing and wrong credentials get the same response.
    """

    def __init__(self, app, token: str, prefix: str):
        super().__init__(app)
        self.token = token
        self.prefix = prefix.rstrip("/")

    def _is_protected(self, path: str) -> bool:
        return path == self.prefix or path.startswith(self.prefix + "/")

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or not self._is_protected(request.url.path):
            return await call_next(request)

        token = extract_bearer_token(request.headers.get("Authorization"))
        if not is_authorized(token, self.token):
            logger.warning(f"Unauthorized request: {request.method} {request.url.path}")
            error = AuthError()
            return JSONResponse(
                status_code=error.status_code,
                content=error.to_response(),
                headers={"WWW-Authenticate": "Bearer"},
            )

        return await call_next(request)
