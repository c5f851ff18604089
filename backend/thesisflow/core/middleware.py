from urllib.parse import urlparse
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response, JSONResponse
from thesisflow.core.config import get_settings

settings = get_settings()

SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}


def _origin_of(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Reject cookie-authenticated writes coming from foreign pages.

    A state-changing request must name an allowed origin (or the server's own
    origin, which is how the bundled SPA and the desktop window talk to us) in
    its Origin or Referer header. Requests without either header are only
    accepted when they carry no session cookie.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method in SAFE_METHODS:
            return await call_next(request)

        claimed = request.headers.get("origin")
        source = "origin"
        if not claimed and request.headers.get("referer"):
            claimed = _origin_of(request.headers["referer"])
            source = "referer"

        if claimed is None:
            if settings.session_cookie_name in request.cookies:
                return self._reject("missing origin/referer")
        elif not self._is_trusted(claimed, request):
            return self._reject(f"invalid {source}")

        return await call_next(request)

    def _is_trusted(self, origin: str, request: Request) -> bool:
        if origin in settings.cors_origins:
            return True
        return origin == f"{request.url.scheme}://{request.headers.get('host', '')}"

    @staticmethod
    def _reject(reason: str) -> JSONResponse:
        return JSONResponse(status_code=403, content={"message": f"CSRF validation failed: {reason}"})
