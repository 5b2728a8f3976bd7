from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import UUID

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request, Response

from stockroom.allocation.entrypoints import dependencies, schemas
from stockroom.allocation.entrypoints.dependencies import batch_uow
from stockroom.allocation.service_layer import services
from stockroom.allocation.service_layer.unit_of_work import AbstractUnitOfWork
from stockroom.utils.logging import bind_context, clear_context, configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    db = dependencies.db()
    await db.create_all()
    logger.info("Allocation API started")
    yield
    await db.dispose()


app = FastAPI(lifespan=lifespan)


@app.middleware("http")
async def request_context(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    clear_context()
    bind_context(method=request.method, path=request.url.path)
    return await call_next(request)


@app.get("/")
async def root() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/batches", status_code=201)
async def add_batch(
    payload: schemas.AddBatchRequest,
    uow: AbstractUnitOfWork = Depends(batch_uow),
) -> dict[str, str]:
    batch_id = await services.add_batch(payload.sku, payload.quantity, payload.eta, uow)
    return {"batch_id": str(batch_id)}


@app.get("/batches/{batch_id}", response_model=schemas.BatchResponse)
async def get_batch(batch_id: UUID, uow: AbstractUnitOfWork = Depends(batch_uow)) -> schemas.BatchResponse:
    try:
        batch = await services.get_batch(batch_id, uow)
    except services.InvalidBatch as e:
        raise HTTPException(status_code=404, detail=str(e))
    return schemas.BatchResponse.from_domain(batch)


@app.delete("/batches/{batch_id}", status_code=204)
async def delete_batch(batch_id: UUID, uow: AbstractUnitOfWork = Depends(batch_uow)) -> Response:
    try:
        await services.delete_batch(batch_id, uow)
    except services.InvalidBatch as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)


@app.post("/allocate", response_model=dict[str, str], status_code=201)
async def allocate(
    payload: schemas.AllocateRequest,
    uow: AbstractUnitOfWork = Depends(batch_uow),
) -> dict[str, str]:
    try:
        batch_id = await services.allocate(payload.line_id, payload.sku, payload.quantity, uow)
    except (services.InvalidSku, services.OutOfStock, services.LineAlreadyAllocated) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"batch_id": str(batch_id), "line_id": str(payload.line_id)}


@app.post("/deallocate", response_model=dict[str, str], status_code=200)
async def deallocate(
    payload: schemas.DeallocateRequest,
    uow: AbstractUnitOfWork = Depends(batch_uow),
) -> dict[str, str]:
    try:
        await services.deallocate(payload.batch_id, payload.line_id, payload.sku, payload.quantity, uow)
    except services.InvalidBatch as e:
        raise HTTPException(status_code=404, detail=str(e))
    except services.UnallocatedLine as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"batch_id": str(payload.batch_id)}
