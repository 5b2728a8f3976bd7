from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

from stockroom.allocation.domain.errors import (
    AllocationFailure,
    AlreadyAllocated,
    InsufficientStock,
    NoBatchAvailable,
    NotAllocated,
    SkuMismatch,
)


def allocate(line: OrderLine, batches: Iterable[Batch]) -> Batch | NoBatchAvailable:
    """Allocate ``line`` to the earliest-arriving batch that accepts it.

    ``sorted`` is stable, so batches with the same ETA are tried in the order
    the caller passed them. Only the returned batch is mutated.
    """
    rejections: list[AllocationFailure] = []
    for batch in sorted(batches):
        failure = batch.allocate(line)
        if failure is None:
            return batch
        rejections.append(failure)
    return NoBatchAvailable(line, tuple(rejections))


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, kw_only=True)
class OrderLine:
    id: UUID | None = None
    sku: str
    qty: int

    def __post_init__(self) -> None:
        if self.qty <= 0:
            raise ValueError(f"Order line quantity must be positive, got {self.qty}")


@dataclass(kw_only=True)
class Batch:
    id: UUID | None = None
    sku: str
    qty: int
    eta: datetime = field(default_factory=_now)
    allocations: set[OrderLine] = field(default_factory=set)

    def __post_init__(self) -> None:
        if self.qty < 0:
            raise ValueError(f"Batch quantity cannot be negative, got {self.qty}")

    def __repr__(self) -> str:
        return f"<Batch {self.id} {self.sku} eta={self.eta.isoformat()}>"

    def __lt__(self, other: Batch) -> bool:
        return self.eta < other.eta

    def __gt__(self, other: Batch) -> bool:
        return self.eta > other.eta

    def allocate(self, line: OrderLine) -> AllocationFailure | None:
        failure = self._check(line)
        if failure is None:
            self.allocations.add(line)
        return failure

    def deallocate(self, line: OrderLine) -> NotAllocated | None:
        if line not in self.allocations:
            return NotAllocated(line)
        self.allocations.remove(line)
        return None

    def can_allocate(self, line: OrderLine) -> bool:
        return self._check(line) is None

    @property
    def allocated_quantity(self) -> int:
        return sum(line.qty for line in self.allocations)

    @property
    def available_quantity(self) -> int:
        return self.qty - self.allocated_quantity

    def _check(self, line: OrderLine) -> AllocationFailure | None:
        if self.sku != line.sku:
            return SkuMismatch(line, self.sku)
        if line in self.allocations:
            return AlreadyAllocated(line)
        if self.available_quantity < line.qty:
            return InsufficientStock(line, self.available_quantity)
        return None
