from __future__ import annotations

import abc
import dataclasses
from collections import defaultdict
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from stockroom.allocation.adapters.dto import BatchRecord, OrderLineRecord
from stockroom.allocation.adapters.orm import allocation_table, batch_table
from stockroom.allocation.domain import models


class AbstractBatchRepository(abc.ABC):
    async def add(self, batch: models.Batch) -> None:
        if batch.id is None:
            batch.id = uuid4()
        await self.save(batch)

    async def get(self, batch_id: UUID) -> models.Batch | None:
        return await self._get(batch_id)

    async def save(self, batch: models.Batch) -> None:
        _assign_line_ids(batch)
        await self._save(batch)

    async def list(self, sku: str) -> list[models.Batch]:
        return await self._list(sku)

    async def delete(self, batch_id: UUID) -> bool:
        return await self._delete(batch_id)

    @abc.abstractmethod
    async def _get(self, batch_id: UUID) -> models.Batch | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def _save(self, batch: models.Batch) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def _list(self, sku: str) -> list[models.Batch]:
        raise NotImplementedError

    @abc.abstractmethod
    async def _delete(self, batch_id: UUID) -> bool:
        raise NotImplementedError


class SqlAlchemyBatchRepository(AbstractBatchRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get(self, batch_id: UUID) -> models.Batch | None:
        result = await self._session.execute(sa.select(batch_table).where(batch_table.c.id == batch_id))
        row = result.mappings().one_or_none()
        if row is None:
            return None
        lines = await self._allocated_lines([batch_id])
        return BatchRecord(**row, allocations=lines[batch_id]).to_domain()

    async def _list(self, sku: str) -> list[models.Batch]:
        result = await self._session.execute(
            sa.select(batch_table).where(batch_table.c.sku == sku).order_by(batch_table.c.eta, batch_table.c.id)
        )
        rows = result.mappings().all()
        lines = await self._allocated_lines([row["id"] for row in rows])
        return [BatchRecord(**row, allocations=lines[row["id"]]).to_domain() for row in rows]

    async def _save(self, batch: models.Batch) -> None:
        record = BatchRecord.from_domain(batch)
        exists = await self._session.scalar(sa.select(batch_table.c.id).where(batch_table.c.id == record.id))
        if exists is None:
            await self._session.execute(sa.insert(batch_table).values(**record.row()))
        else:
            await self._session.execute(
                sa.update(batch_table).where(batch_table.c.id == record.id).values(**record.row())
            )

        await self._session.execute(sa.delete(allocation_table).where(allocation_table.c.batch_id == record.id))
        if record.allocations:
            await self._session.execute(
                sa.insert(allocation_table),
                [
                    dict(batch_id=record.id, order_line_id=line.id, sku=line.sku, qty=line.qty)
                    for line in record.allocations
                ],
            )

    async def _delete(self, batch_id: UUID) -> bool:
        await self._session.execute(sa.delete(allocation_table).where(allocation_table.c.batch_id == batch_id))
        result = await self._session.execute(sa.delete(batch_table).where(batch_table.c.id == batch_id))
        return result.rowcount > 0

    async def _allocated_lines(self, batch_ids: list[UUID]) -> dict[UUID, list[OrderLineRecord]]:
        lines: dict[UUID, list[OrderLineRecord]] = defaultdict(list)
        if not batch_ids:
            return lines
        result = await self._session.execute(
            sa.select(
                allocation_table.c.batch_id,
                allocation_table.c.order_line_id,
                allocation_table.c.sku,
                allocation_table.c.qty,
            ).where(allocation_table.c.batch_id.in_(batch_ids))
        )
        for row in result.mappings():
            lines[row["batch_id"]].append(OrderLineRecord(id=row["order_line_id"], sku=row["sku"], qty=row["qty"]))
        return lines


def _assign_line_ids(batch: models.Batch) -> None:
    # lines get their id once, the batch then holds the stored value
    unsaved = {line for line in batch.allocations if line.id is None}
    for line in unsaved:
        batch.allocations.remove(line)
        batch.allocations.add(dataclasses.replace(line, id=uuid4()))
