"""Security and caching headers for API services."""

from fastapi import FastAPI, Request
from fastapi.responses import Response

from apps.shared.auth import API_KEY_HEADER


PUBLIC_CACHE_CONTROL = "public, max-age=60"
PRIVATE_CACHE_CONTROL = "no-store"


def setup_security_headers(app: FastAPI, public_prefixes: tuple[str, ...] = ()) -> None:
    """
    Add nosniff, frame and Cache-Control headers to every response.

    Successful GETs under one of public_prefixes may be cached briefly by
    client sites. Everything else, and anything sent with an API key, is
    never cached.
    """

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")

        cacheable = (
            request.method == "GET"
            and response.status_code == 200
            and API_KEY_HEADER.lower() not in request.headers
            and request.url.path.startswith(public_prefixes)
        )
        response.headers.setdefault(
            "Cache-Control",
            PUBLIC_CACHE_CONTROL if cacheable else PRIVATE_CACHE_CONTROL,
        )
        return response
