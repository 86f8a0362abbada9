import logging
from typing import AbstractSet

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.staticfiles import StaticFiles

from exceptions import CorsRejectedException

logger = logging.getLogger(__name__)


class OriginPolicyMiddleware(BaseHTTPMiddleware):
    """Refuse requests whose ``Origin`` is not allow-listed.

    Requests without an ``Origin`` header (same-origin pages, curl, server to
    server) are let through.
    """

    def __init__(self, app, allowed_origins: AbstractSet[str]):
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)

    async def dispatch(self, request, call_next):
        origin = request.headers.get("origin")
        if origin and origin not in self.allowed_origins:
            logger.warning(f"Rejected request from origin {origin}")
            error = CorsRejectedException("CORS policy violation")
            return JSONResponse(status_code=error.status_code, content=error.to_content())
        return await call_next(request)


class CachedStaticFiles(StaticFiles):
    def __init__(self, *args, max_age: int, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_age = max_age

    def file_response(self, *args, **kwargs):
        response = super().file_response(*args, **kwargs)
        response.headers["Cache-Control"] = f"public, max-age={self.max_age}"
        return response
