from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from stockroom.allocation.domain import models


class OrderLineRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    sku: str
    qty: int

    @classmethod
    def from_domain(cls, line: models.OrderLine) -> OrderLineRecord:
        if line.id is None:
            raise ValueError("Order line must have an id before it is stored")
        return cls(id=line.id, sku=line.sku, qty=line.qty)

    def to_domain(self) -> models.OrderLine:
        return models.OrderLine(id=self.id, sku=self.sku, qty=self.qty)


class BatchRecord(BaseModel):
    id: UUID
    sku: str
    qty: int
    eta: datetime
    allocations: list[OrderLineRecord] = []

    @field_validator("eta")
    @classmethod
    def assume_utc(cls, eta: datetime) -> datetime:
        # SQLite hands back naive datetimes
        if eta.tzinfo is None:
            return eta.replace(tzinfo=timezone.utc)
        return eta

    @classmethod
    def from_domain(cls, batch: models.Batch) -> BatchRecord:
        if batch.id is None:
            raise ValueError("Batch must have an id before it is stored")
        line_ids = [line.id for line in batch.allocations]
        if len(line_ids) != len(set(line_ids)):
            raise ValueError(f"Batch {batch.id} holds more than one order line with the same id")
        return cls(
            id=batch.id,
            sku=batch.sku,
            qty=batch.qty,
            eta=batch.eta,
            allocations=[OrderLineRecord.from_domain(line) for line in batch.allocations],
        )

    def to_domain(self) -> models.Batch:
        return models.Batch(
            id=self.id,
            sku=self.sku,
            qty=self.qty,
            eta=self.eta,
            allocations={line.to_domain() for line in self.allocations},
        )

    def row(self) -> dict[str, object]:
        return self.model_dump(exclude={"allocations"})
