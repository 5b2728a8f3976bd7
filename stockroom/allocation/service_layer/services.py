from datetime import datetime
from uuid import UUID

import structlog

from stockroom.allocation.domain import errors, models
from stockroom.allocation.service_layer import unit_of_work

logger = structlog.get_logger(__name__)


class AllocationServiceError(Exception):
    def __init__(self, message: str, failure: errors.AllocationFailure | None = None) -> None:
        super().__init__(message)
        self.failure = failure


class InvalidSku(AllocationServiceError):
    pass


class InvalidBatch(AllocationServiceError):
    pass


class OutOfStock(AllocationServiceError):
    pass


class UnallocatedLine(AllocationServiceError):
    pass


class LineAlreadyAllocated(AllocationServiceError):
    pass


async def add_batch(
    sku: str,
    qty: int,
    eta: datetime | None,
    uow: unit_of_work.AbstractUnitOfWork,
    batch_id: UUID | None = None,
) -> UUID:
    batch = models.Batch(id=batch_id, sku=sku, qty=qty)
    if eta is not None:
        batch.eta = eta
    async with uow:
        await uow.batches.add(batch)
        await uow.commit()
    logger.info("Batch added", batch_id=str(batch.id), sku=sku, qty=qty)
    return batch.id


async def get_batch(batch_id: UUID, uow: unit_of_work.AbstractUnitOfWork) -> models.Batch:
    async with uow:
        batch = await uow.batches.get(batch_id)
    if batch is None:
        raise InvalidBatch(f"Invalid batch {batch_id}")
    return batch


async def delete_batch(batch_id: UUID, uow: unit_of_work.AbstractUnitOfWork) -> None:
    async with uow:
        if not await uow.batches.delete(batch_id):
            raise InvalidBatch(f"Invalid batch {batch_id}")
        await uow.commit()
    logger.info("Batch deleted", batch_id=str(batch_id))


async def allocate(line_id: UUID, sku: str, qty: int, uow: unit_of_work.AbstractUnitOfWork) -> UUID:
    line = models.OrderLine(id=line_id, sku=sku, qty=qty)
    async with uow:
        batches = await uow.batches.list(line.sku)
        if not batches:
            raise InvalidSku(f"Invalid sku {line.sku}")
        holder = next((b for b in batches if any(held.id == line.id for held in b.allocations)), None)
        if holder is not None:
            raise LineAlreadyAllocated(
                f"Order line {line.id} is already allocated to batch {holder.id}", errors.AlreadyAllocated(line)
            )
        result = models.allocate(line, batches)
        if isinstance(result, errors.NoBatchAvailable):
            logger.warning(
                "Out of stock",
                sku=line.sku,
                qty=line.qty,
                line_id=str(line.id),
                candidates=len(batches),
            )
            raise OutOfStock(str(result), result)
        await uow.batches.save(result)
        await uow.commit()
    logger.info("Order line allocated", line_id=str(line.id), sku=line.sku, qty=line.qty, batch_id=str(result.id))
    return result.id


async def deallocate(
    batch_id: UUID,
    line_id: UUID,
    sku: str,
    qty: int,
    uow: unit_of_work.AbstractUnitOfWork,
) -> None:
    line = models.OrderLine(id=line_id, sku=sku, qty=qty)
    async with uow:
        batch = await uow.batches.get(batch_id)
        if batch is None:
            raise InvalidBatch(f"Invalid batch {batch_id}")
        failure = batch.deallocate(line)
        if failure is not None:
            raise UnallocatedLine(str(failure), failure)
        await uow.batches.save(batch)
        await uow.commit()
    logger.info("Order line deallocated", line_id=str(line.id), sku=line.sku, batch_id=str(batch_id))
