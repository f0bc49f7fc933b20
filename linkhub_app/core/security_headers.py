"""
Security response headers for every response, in the spirit of helmet's
defaults. No Content-Security-Policy and no Cross-Origin-Embedder-Policy:
the API only serves JSON and redirects.
"""

from typing import Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

DEFAULT_SECURITY_HEADERS: Dict[str, str] = {
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    # 0 switches off the legacy browser XSS auditor
    "X-XSS-Protection": "0",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the headers above unless the route already set them"""

    def __init__(self, app, headers: Optional[Dict[str, str]] = None):
        super().__init__(app)
        self.headers = dict(DEFAULT_SECURITY_HEADERS if headers is None else headers)

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response
