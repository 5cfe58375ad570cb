"""ASGI application serving the index artifact and the query interface.

Routes:
    GET /search-index.json  -> the published index (long-lived cache)
    GET /search?q=&page=&per= -> render-ready results as JSON
    GET /health             -> liveness
    GET /metrics            -> Prometheus metrics

Usage:
    portfolio-search-serve
    # or
    python -m portfolio_search.app
"""

import logging

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from portfolio_search.adapters.index_loader import AbstractIndexLoader, create_index_loader
from portfolio_search.config import Settings
from portfolio_search.observability.context import bind_request, get_request_context
from portfolio_search.observability.logging import configure_logging
from portfolio_search.observability.metrics import get_metrics, get_metrics_content_type
from portfolio_search.observability.tracing import TraceContextMiddleware, init_tracing
from portfolio_search.search.store import INDEX_CACHE_CONTROL, IndexLoadError
from portfolio_search.service_layer.search_service import SearchService


logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, index_loader: AbstractIndexLoader | None = None) -> Starlette:
    """Create the ASGI application.

    Args:
        settings: Configuration (defaults to environment-driven ``Settings()``)
        index_loader: Snapshot source (defaults to the configured file or URL)
    """
    settings = settings or Settings()
    loader = index_loader or create_index_loader(settings)
    service = SearchService.from_settings(loader, settings)

    async def index_endpoint(request: Request) -> Response:
        try:
            index = await loader.load()
        except IndexLoadError as exc:
            logger.error("Cannot serve search index: %s", exc)
            return JSONResponse({"error": "search index unavailable"}, status_code=503)
        return Response(
            index.to_json(),
            media_type="application/json",
            headers={"Cache-Control": INDEX_CACHE_CONTROL},
        )

    async def search_endpoint(request: Request) -> JSONResponse:
        params = request.query_params
        query = params.get("q", "")
        with bind_request(get_request_context().get("trace_id"), query=query.strip()):
            response = await service.search(query, params.get("page"), params.get("per"))
        return JSONResponse(response.model_dump(mode="json"), headers={"Cache-Control": "no-store"})

    async def health_endpoint(request: Request) -> JSONResponse:
        return JSONResponse({"status": "healthy", "index_source": loader.source})

    async def metrics_endpoint(request: Request) -> Response:
        return Response(get_metrics(), media_type=get_metrics_content_type())

    routes = [
        Route("/search-index.json", endpoint=index_endpoint, methods=["GET"]),
        Route("/search", endpoint=search_endpoint, methods=["GET"]),
        Route("/health", endpoint=health_endpoint, methods=["GET"]),
        Route("/metrics", endpoint=metrics_endpoint, methods=["GET"]),
    ]

    app = Starlette(
        debug=settings.log_level.lower() == "debug",
        routes=routes,
        middleware=[Middleware(TraceContextMiddleware)],
    )
    app.state.settings = settings
    app.state.search_service = service
    return app


def main() -> None:
    """Entry point for the query server."""
    import uvicorn

    settings = Settings()
    configure_logging(settings.log_level, settings.json_logs)
    init_tracing()

    app = create_app(settings)
    logger.info("Starting search server on %s:%d", settings.host, settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
