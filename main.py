import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, status, Query, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from catalog_types import CatalogError, ErrorKind, MovieCategory
from config import Settings, load_settings
from gateway import CatalogGateway, build_gateway

logger = logging.getLogger("uvicorn.error")

_HTTP_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
}


def _upstream_failure(e: CatalogError) -> HTTPException:
    logger.warning("Upstream failure → kind=%s status=%s message=%s", e.kind.value, e.status_code, e.message)
    return HTTPException(
        status_code=_HTTP_STATUS.get(e.kind, status.HTTP_502_BAD_GATEWAY),
        detail={"kind": e.kind.value, "message": e.message},
    )


def _gateway(request: Request) -> CatalogGateway:
    return request.app.state.gateway


def _auth(request: Request, x_admin_token: Optional[str]):
    admin_token = request.app.state.admin_token
    if not admin_token:
        raise HTTPException(status_code=500, detail="ADMIN_TOKEN not configured")
    if x_admin_token != admin_token:
        raise HTTPException(status_code=401, detail="Unauthorized")


def create_app(
    gateway: Optional[CatalogGateway] = None,
    settings: Optional[Settings] = None,
    admin_token: Optional[str] = None,
) -> FastAPI:
    """
    Build the HTTP surface over one gateway.

    Without an injected gateway, settings are read on startup and a missing
    base URL or API key aborts it.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.gateway is None
        if owned:
            app_settings = app.state.settings or load_settings()
            app.state.settings = app_settings
            app.state.gateway = build_gateway(app_settings)
            if app.state.admin_token is None:
                app.state.admin_token = app_settings.admin_token
        logger.info("GATEWAY READY → id=%s owned=%s", id(app.state.gateway), owned)
        yield
        if owned:
            app.state.gateway.client.close()

    app = FastAPI(lifespan=lifespan)
    app.state.gateway = gateway
    app.state.settings = settings
    app.state.admin_token = admin_token or (settings.admin_token if settings else None)

    @app.get("/")
    def read_root():
        return JSONResponse(
            content={"status": "ok", "message": "Server is healthy"},
            status_code=status.HTTP_200_OK
        )

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "movie-catalog"}

    @app.get("/movies/{category}")
    async def list_movies(request: Request, category: MovieCategory, page: int = Query(1, ge=1, le=500)):
        try:
            result = await _gateway(request).list_movies(category, page)
        except CatalogError as e:
            raise _upstream_failure(e) from e
        return {"category": category.value, **asdict(result)}

    @app.get("/movie/{movie_id}")
    async def movie_detail(request: Request, movie_id: int):
        try:
            return await _gateway(request).movie_details(movie_id)
        except CatalogError as e:
            raise _upstream_failure(e) from e

    @app.get("/search")
    async def search(request: Request, query: str = Query("", max_length=200), page: int = Query(1, ge=1, le=500)):
        try:
            result = await _gateway(request).search_movies(query, page)
        except CatalogError as e:
            raise _upstream_failure(e) from e
        return {"query": query.strip(), **asdict(result)}

    @app.post("/admin/cache/clear")
    def admin_cache_clear(request: Request, x_admin_token: Optional[str] = Header(default=None)):
        _auth(request, x_admin_token)
        _gateway(request).invalidate_all()
        return {"ok": True}

    @app.post("/admin/cache/invalidate/{category}")
    def admin_cache_invalidate(request: Request, category: MovieCategory,
                               x_admin_token: Optional[str] = Header(default=None)):
        _auth(request, x_admin_token)
        removed = _gateway(request).invalidate_category(category)
        return {"ok": True, "category": category.value, "removed": removed}

    @app.get("/admin/cache/stats")
    def admin_cache_stats(request: Request, x_admin_token: Optional[str] = Header(default=None)):
        _auth(request, x_admin_token)
        return _gateway(request).stats()

    return app


app = create_app()
