"""Main FastAPI application and server startup."""

import logging
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, HTTPException
from pydantic import ValidationError

from ..config import Settings, configure_logging
from ..errors import BackendError, UnknownCollectionError
from ..services import REGISTRY, CollectionData, Services, build_services, get_collection
from .schemas import (
    CacheStatsResponse,
    DeleteResponse,
    HealthResponse,
    InvalidateResponse,
    LedgerEntry,
    LedgerResponse,
    TableStats,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="POS Inventory API",
    description="Cache-aware access to the POS inventory collections",
    version="0.3.0",
)

# Global service graph (initialized on startup)
_services: Optional[Services] = None


def get_services() -> Services:
    """Dependency to get the service graph."""
    if _services is None:
        raise HTTPException(status_code=503, detail="Services not initialized")
    return _services


def resolve_collection(name: str) -> CollectionData:
    """Dependency mapping a path segment to a registered collection."""
    try:
        return get_collection(name)
    except UnknownCollectionError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.on_event("startup")
async def startup_event():
    """Build services from the environment."""
    global _services

    configure_logging()
    _services = build_services(Settings.from_env())
    logger.info(f"Collection cache at {_services.kv.db_path}")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    global _services

    if _services:
        await _services.close()
        _services = None


@app.get("/health", response_model=HealthResponse)
async def health(services: Services = Depends(get_services)):
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        backend=type(services.backend).__name__,
        collections=sorted(REGISTRY),
    )


@app.get("/collections/{name}")
async def list_documents(
    refresh: bool = False,
    cd: CollectionData = Depends(resolve_collection),
    services: Services = Depends(get_services),
) -> list[dict[str, Any]]:
    """
    List a collection, from cache when the snapshot can be trusted.

    Responds 503 when the backing store could not be reached, so an empty list
    always means an empty collection.
    """
    result = await services.db.fetch_documents_result(cd, force_refresh=refresh)
    if not result.ok:
        raise HTTPException(status_code=503, detail=result.error)
    return [doc.model_dump(mode="json") for doc in result.data]


@app.get("/collections/{name}/{doc_id}")
async def get_document(
    doc_id: str,
    cd: CollectionData = Depends(resolve_collection),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """Fetch one document; 404 if it does not exist, 503 if undeterminable."""
    result = await services.db.find_by_id_result(cd, doc_id)
    if not result.ok:
        raise HTTPException(status_code=503, detail=result.error)
    if result.data is None:
        raise HTTPException(status_code=404, detail=f"{cd.collection}/{doc_id} not found")
    return result.data.model_dump(mode="json")


@app.post("/collections/{name}", status_code=201)
async def create_document(
    payload: dict[str, Any] = Body(...),
    cd: CollectionData = Depends(resolve_collection),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """Insert a document; the stored copy is returned and cached."""
    try:
        document = cd.model.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        stored = await services.db.save_document(cd, document)
    except BackendError as e:
        raise HTTPException(status_code=502, detail=f"Save failed: {e}")
    return stored.model_dump(mode="json")


@app.patch("/collections/{name}/{doc_id}")
async def update_document(
    doc_id: str,
    fields: dict[str, Any] = Body(...),
    cd: CollectionData = Depends(resolve_collection),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """Merge fields into a document."""
    try:
        updated = await services.db.update_document(cd, doc_id, fields)
    except BackendError as e:
        raise HTTPException(status_code=502, detail=f"Update failed: {e}")

    if updated is None:
        raise HTTPException(status_code=404, detail=f"{cd.collection}/{doc_id} not found")
    return updated.model_dump(mode="json")


@app.delete("/collections/{name}/{doc_id}", response_model=DeleteResponse)
async def delete_document(
    doc_id: str,
    cd: CollectionData = Depends(resolve_collection),
    services: Services = Depends(get_services),
):
    """Delete a document from the store and the cache."""
    try:
        deleted = await services.db.delete_document(cd, doc_id)
    except BackendError as e:
        raise HTTPException(status_code=502, detail=f"Delete failed: {e}")
    return DeleteResponse(id=doc_id, deleted=deleted)


@app.post("/collections/{name}/invalidate", response_model=InvalidateResponse)
async def invalidate_collection(
    cd: CollectionData = Depends(resolve_collection),
    services: Services = Depends(get_services),
):
    """Drop the cached snapshot and ledger entries of a collection."""
    services.db.invalidate(cd)
    return InvalidateResponse(collection=cd.collection)


@app.get("/products/search")
async def search_products(
    q: str = "",
    services: Services = Depends(get_services),
) -> list[dict[str, Any]]:
    """Search the product catalogue."""
    products = await services.products.search_products(q)
    return [p.model_dump(mode="json") for p in products]


@app.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(services: Services = Depends(get_services)):
    """Row counts and sizes of the cache tables."""
    return CacheStatsResponse(
        tables={
            table: TableStats(**services.kv.stats(table))
            for table in ("collections", "timestamps")
        }
    )


@app.get("/cache/ledger", response_model=LedgerResponse)
async def cache_ledger(services: Services = Depends(get_services)):
    """Ledger state of every registered collection."""
    entries = []
    for name in sorted(REGISTRY):
        cd = REGISTRY[name]
        stamps = services.db.ledger.get_collection_timestamps(cd.collection_key)
        entries.append(LedgerEntry(
            collection=cd.collection,
            collection_key=cd.collection_key,
            cache_key=cd.cache_key,
            last_fetch_time=stamps.last_fetch_time,
            last_update_time=stamps.last_update_time,
            snapshot_fresh=stamps.snapshot_is_fresh,
            cache_valid=services.db.cache.is_cache_valid(cd.cache_key),
            cache_modified=services.db.cache.get_last_modified_time(cd.cache_key),
        ))
    return LedgerResponse(entries=entries)
