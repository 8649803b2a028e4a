from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .builder.generator import BuildGenerator
from .catalog import CachedCatalog, CatalogAccessor, CatalogError, JsonCatalog, SQLiteCatalog
from .schemas import Category, CompatibilityRequest, GenerateRequest, SwapRequest
from .service import BuildService
from .tools import Toolset

ROOT = Path(__file__).resolve().parents[2]

load_dotenv(ROOT / ".env")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    path = Path(raw)
    return path if path.is_absolute() else ROOT / path


CATALOG_BACKEND = os.getenv("CATALOG_BACKEND", "json").strip().lower()
CATALOG_PATH = _env_path("CATALOG_PATH", ROOT / "data" / "catalog.json")
CATALOG_CACHE_TTL_SECONDS = _env_int("CATALOG_CACHE_TTL_SECONDS", 24 * 3600)
ALTERNATIVES_LIMIT = _env_int("ALTERNATIVES_LIMIT", 3)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _build_catalog() -> CatalogAccessor:
    catalog: CatalogAccessor
    if CATALOG_BACKEND == "sqlite":
        catalog = SQLiteCatalog(CATALOG_PATH)
    else:
        catalog = JsonCatalog(CATALOG_PATH)
    if CATALOG_CACHE_TTL_SECONDS > 0:
        catalog = CachedCatalog(catalog, ttl_seconds=CATALOG_CACHE_TTL_SECONDS)
    logger.info("catalog backend=%s path=%s", CATALOG_BACKEND, CATALOG_PATH)
    return catalog


def create_app(service: BuildService) -> FastAPI:
    app = FastAPI(title="RigBudget")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.service = service
    app.state.tools = Toolset(service).register()

    @app.post("/api/builds/generate")
    def generate(payload: GenerateRequest):
        try:
            result = service.generate_build(payload.budget)
        except CatalogError as err:
            logger.warning("catalog unavailable: %s", err)
            raise HTTPException(status_code=503, detail=str(err)) from err
        return result.model_dump(mode="json")

    @app.post("/api/builds/compatibility")
    def compatibility(payload: CompatibilityRequest):
        return service.check_compatibility(payload.build).model_dump()

    @app.post("/api/builds/swap")
    def swap(payload: SwapRequest):
        try:
            result = service.swap_component(
                payload.build, payload.category, payload.component_id, payload.budget
            )
        except CatalogError as err:
            raise HTTPException(status_code=503, detail=str(err)) from err
        except LookupError as err:
            raise HTTPException(status_code=404, detail=str(err)) from err
        except ValueError as err:
            raise HTTPException(status_code=422, detail=str(err)) from err
        return result.model_dump(mode="json")

    @app.get("/api/components")
    def list_components(
        category: Optional[Category] = None,
        min_price: float = Query(default=0, ge=0),
        max_price: Optional[float] = Query(default=None, ge=0),
        brand: Optional[str] = None,
    ):
        try:
            items = service.list_components(category, min_price, max_price, brand)
        except CatalogError as err:
            raise HTTPException(status_code=503, detail=str(err)) from err
        return [c.model_dump() for c in items]

    @app.get("/api/components/{category}/alternatives")
    def alternatives(
        category: Category,
        selected_id: Optional[str] = None,
        limit: int = Query(default=ALTERNATIVES_LIMIT, ge=1, le=20),
    ):
        try:
            items = service.get_alternatives(category, selected_id, limit=limit)
        except CatalogError as err:
            raise HTTPException(status_code=503, detail=str(err)) from err
        return [c.model_dump() for c in items]

    return app


service = BuildService(
    _build_catalog(),
    generator=BuildGenerator(alternatives_limit=ALTERNATIVES_LIMIT),
    alternatives_limit=ALTERNATIVES_LIMIT,
)
app = create_app(service)
