"""FastAPI application factory."""

from fastapi import FastAPI, Request, Response

from portfolio.observability.correlation import (
    CORRELATION_ID_HEADER,
    reset_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)

from .routers import public
from .routes import assets, contact

# The site is served from arbitrary origins; every response allows them all
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_app() -> FastAPI:
    """Create the portfolio API with all routes mounted."""
    app = FastAPI(
        title="Portfolio",
        docs_url=None,
        redoc_url=None,
    )

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next) -> Response:
        # Preflight on any path, routed or not
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    # Registered last so it wraps the CORS middleware
    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        cid = resolve_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        token = set_correlation_id(cid)
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response
        finally:
            reset_correlation_id(token)

    app.include_router(public.router)
    app.include_router(contact.router)
    app.include_router(assets.router)

    return app
