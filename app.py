"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers

from api.handlers import handle_forward, handle_health
from core.config import Config
from core.protocols import RequestLogger
from core.request_types import Route
from core.routes import TargetBuilder
from services.forwarding import ForwardingService
from services.upstream import UpstreamClient

CORS_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]


class PreflightCORSMiddleware(CORSMiddleware):
    """CORS allow-list where every preflight answers 200 with an empty body.

    Refused preflights get no Access-Control-Allow-* headers, so browsers
    still block the actual request.
    """

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return Response(status_code=200, headers={"Vary": "Origin"})
        headers = {
            key: value
            for key, value in response.headers.items()
            if key.lower() not in ("content-length", "content-type")
        }
        return Response(status_code=200, headers=headers)


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``transport`` replaces the network layer of the shared upstream client.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(max_connections=100, max_keepalive_connections=20)
        client = httpx.AsyncClient(limits=limits, transport=transport)
        app.state.forwarding_service = ForwardingService(
            config=config,
            logger=logger,
            upstream=UpstreamClient(client),
            builder=TargetBuilder(config),
        )
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(
        title="Salon Gateway",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=list(config.server.cors_origins),
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        allow_credentials=True,
    )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.log_error(request.url.path, 500, f"{type(exc).__name__}: {exc}")
        return JSONResponse({"error": "Internal gateway error", "details": ""}, status_code=500)

    @app.get("/")
    async def health():
        return await handle_health()

    @app.options("/{path:path}")
    async def options(path: str) -> Response:
        return Response(status_code=200)

    @app.post("/api/airtable/query")
    async def airtable_query(request: Request):
        return await handle_forward(request, Route.QUERY, logger)

    @app.post("/api/airtable/create")
    async def airtable_create(request: Request):
        return await handle_forward(request, Route.CREATE, logger)

    @app.post("/api/airtable/update")
    async def airtable_update(request: Request):
        return await handle_forward(request, Route.UPDATE, logger)

    @app.post("/api/webhook/proxy")
    async def webhook_proxy(request: Request):
        return await handle_forward(request, Route.WEBHOOK_PROXY, logger)

    return app
