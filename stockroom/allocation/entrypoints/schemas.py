from datetime import datetime, timezone
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from stockroom.allocation.domain import models


class AddBatchRequest(BaseModel):
    sku: str
    quantity: int = Field(ge=0)
    eta: datetime | None = None

    @field_validator("eta")
    @classmethod
    def assume_utc(cls, eta: datetime | None) -> datetime | None:
        if eta is not None and eta.tzinfo is None:
            return eta.replace(tzinfo=timezone.utc)
        return eta


class AllocateRequest(BaseModel):
    line_id: UUID = Field(default_factory=uuid4)
    sku: str
    quantity: int = Field(gt=0)


class DeallocateRequest(BaseModel):
    batch_id: UUID
    line_id: UUID
    sku: str
    quantity: int = Field(gt=0)


class OrderLineResponse(BaseModel):
    line_id: UUID | None
    sku: str
    quantity: int


class BatchResponse(BaseModel):
    batch_id: UUID
    sku: str
    quantity: int
    eta: datetime
    available_quantity: int
    allocations: list[OrderLineResponse]

    @classmethod
    def from_domain(cls, batch: models.Batch) -> "BatchResponse":
        return cls(
            batch_id=batch.id,
            sku=batch.sku,
            quantity=batch.qty,
            eta=batch.eta,
            available_quantity=batch.available_quantity,
            allocations=[
                OrderLineResponse(line_id=line.id, sku=line.sku, quantity=line.qty)
                for line in sorted(batch.allocations, key=lambda line: str(line.id))
            ],
        )
