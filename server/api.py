"""FastAPI application serving the Linux command catalog.

Handlers only pull parameters out of the request, call the catalog and wrap
the result in the response envelope; errors are turned into statuses by the
handlers registered in ``server.responses``.
"""

import logging
import pathlib
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from catalog.errors import NotFoundError, StorageUnavailableError, ValidationError
from catalog.models import AppStats, BasicCategory, BasicGroup, Command, CommandDetail, Tip
from catalog.sqlite_adapter import CommandCatalog
from config.settings import AppConfig
from observability.prometheus_metrics import setup_prometheus_metrics

from . import __version__
from .monitoring import RequestLoggingMiddleware
from .responses import ApiResponse, register_exception_handlers
from .security.cors import setup_cors

logger = logging.getLogger(__name__)

STATIC_MOUNTS = ("stylesheets", "scripts", "images")

router = APIRouter()


def build_catalog(config: AppConfig) -> CommandCatalog:
    """Open the catalog described by ``config``; raises if the schema is incomplete."""
    catalog = CommandCatalog(
        config.database_path,
        search_default_limit=config.search_default_limit,
        search_max_limit=config.search_max_limit,
        suggestion_limit=config.suggestion_limit,
        popular_commands=config.popular_commands,
    )
    catalog.initialize()
    return catalog


def get_catalog(request: Request) -> CommandCatalog:
    """Dependency to get the shared catalog."""
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise StorageUnavailableError("catalog not initialized")
    return catalog


def _require(value: Optional[str], name: str) -> str:
    if value is None:
        raise ValidationError(f"Missing required query parameter: {name}")
    return value


@router.get("/health", response_model=ApiResponse[str])
def health():
    return ApiResponse[str].ok("Service is healthy")


@router.get("/api/stats", response_model=ApiResponse[AppStats])
def get_stats(catalog: CommandCatalog = Depends(get_catalog)):
    """Aggregate counts over the catalog."""
    return ApiResponse[AppStats].ok(catalog.get_stats())


@router.get("/api/categories", response_model=ApiResponse[List[str]])
def get_categories(catalog: CommandCatalog = Depends(get_catalog)):
    return ApiResponse[List[str]].ok(catalog.list_categories())


@router.get("/api/categories/detailed", response_model=ApiResponse[List[BasicCategory]])
def get_categories_detailed(catalog: CommandCatalog = Depends(get_catalog)):
    return ApiResponse[List[BasicCategory]].ok(catalog.list_categories_detailed())


@router.get("/api/search", response_model=ApiResponse[List[Command]])
def search_commands(
    q: Optional[str] = Query(None, description="Substring to look for in name or description"),
    limit: Optional[int] = Query(None, description="Maximum number of results"),
    category: Optional[str] = Query(None, description="Restrict to a category name"),
    catalog: CommandCatalog = Depends(get_catalog),
):
    """Case-insensitive substring search; a blank ``q`` returns no results."""
    query = _require(q, "q")
    return ApiResponse[List[Command]].ok(catalog.search_commands(query, limit=limit, category=category))


@router.get("/api/suggestions", response_model=ApiResponse[List[str]])
def get_command_suggestions(
    q: Optional[str] = Query(None, description="Command name prefix"),
    limit: Optional[int] = Query(None, description="Maximum number of suggestions"),
    catalog: CommandCatalog = Depends(get_catalog),
):
    prefix = _require(q, "q")
    return ApiResponse[List[str]].ok(catalog.suggest_commands(prefix, limit=limit))


@router.get("/api/popular", response_model=ApiResponse[List[Command]])
def get_popular_commands(catalog: CommandCatalog = Depends(get_catalog)):
    return ApiResponse[List[Command]].ok(catalog.get_popular_commands())


@router.get("/api/commands", response_model=ApiResponse[List[Command]])
def get_all_commands(catalog: CommandCatalog = Depends(get_catalog)):
    return ApiResponse[List[Command]].ok(catalog.list_all_commands())


# The id stays a string here so malformed ids reach our own validation (400, not 422)
@router.get("/api/commands/{command_id}", response_model=ApiResponse[CommandDetail])
def get_command(command_id: str, catalog: CommandCatalog = Depends(get_catalog)):
    return ApiResponse[CommandDetail].ok(catalog.get_command(command_id))


@router.get("/api/category/{name}", response_model=ApiResponse[List[Command]])
def get_commands_by_category(name: str, catalog: CommandCatalog = Depends(get_catalog)):
    return ApiResponse[List[Command]].ok(catalog.list_commands_by_category(name))


@router.get("/api/basic/{name}", response_model=ApiResponse[List[BasicGroup]])
def get_basic_groups(name: str, catalog: CommandCatalog = Depends(get_catalog)):
    return ApiResponse[List[BasicGroup]].ok(catalog.list_basic_groups(name))


@router.get("/api/random-tip", response_model=ApiResponse[Tip])
def get_random_tip(catalog: CommandCatalog = Depends(get_catalog)):
    return ApiResponse[Tip].ok(catalog.get_random_tip())


def create_app(config: Optional[AppConfig] = None, catalog: Optional[CommandCatalog] = None) -> FastAPI:
    """Build the application.

    When no catalog is injected one is opened from ``config.database_path``
    during startup; a missing file or table aborts startup.
    """
    config = config or AppConfig.from_env()
    static_dir = pathlib.Path(config.static_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = catalog is None
        app.state.catalog = build_catalog(config) if owned else catalog
        logger.info(f"Linux Command Library API ready (database: {config.database_path})")
        try:
            yield
        finally:
            if owned:
                app.state.catalog.close()
            app.state.catalog = None

    app = FastAPI(title="Linux Command Library API", version=__version__, lifespan=lifespan)
    app.state.config = config

    register_exception_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)
    setup_cors(app, config.enable_cors, config.allowed_origins)
    setup_prometheus_metrics(app, version=__version__)
    app.include_router(router)

    @app.get("/", include_in_schema=False)
    def serve_frontend():
        index = static_dir / "index.html"
        if not index.is_file():
            raise NotFoundError("Frontend not available")
        return FileResponse(index, media_type="text/html; charset=utf-8")

    for name in STATIC_MOUNTS:
        directory = static_dir / name
        if directory.is_dir():
            app.mount(f"/{name}", StaticFiles(directory=str(directory)), name=name)

    return app
