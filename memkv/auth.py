"""
Bearer-token authentication middleware.

Every request must carry `Authorization: Bearer <api_key>` unless its path
is explicitly exempt (health checks, API docs).
"""

import logging
import secrets
from typing import Iterable, Optional

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

DEFAULT_EXEMPT_PATHS = ("/health", "/docs", "/openapi.json")


class BearerAuthMiddleware(BaseHTTPMiddleware):
    """Rejects requests without the configured bearer token with 401."""

    def __init__(self, app, api_key: str, exempt_paths: Iterable[str] = DEFAULT_EXEMPT_PATHS):
        super().__init__(app)
        self.api_key = api_key
        self.exempt_paths = frozenset(exempt_paths)

    def _token(self, header: Optional[str]) -> Optional[str]:
        if not header:
            return None
        parts = header.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer":
            return None
        return parts[1]

    def authenticate(self, header: Optional[str]) -> bool:
        token = self._token(header)
        if not token or not self.api_key:
            return False
        return secrets.compare_digest(token.encode(), self.api_key.encode())

    async def dispatch(self, request, call_next):
        if request.url.path in self.exempt_paths:
            return await call_next(request)

        if not self.authenticate(request.headers.get("Authorization")):
            logger.warning(f"Unauthorized {request.method} {request.url.path}")
            return JSONResponse(
                {"detail": "unauthorized"},
                status_code=401,
                headers={"WWW-Authenticate": "Bearer"},
            )

        return await call_next(request)
