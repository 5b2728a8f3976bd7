from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stockroom.allocation.domain.models import OrderLine


@dataclass(frozen=True)
class AllocationFailure:
    line: OrderLine

    def __str__(self) -> str:
        return f"Cannot process order line {self.line.id} for sku {self.line.sku}"


@dataclass(frozen=True)
class SkuMismatch(AllocationFailure):
    batch_sku: str

    def __str__(self) -> str:
        return f"Sku {self.line.sku} does not match batch sku {self.batch_sku}"


@dataclass(frozen=True)
class AlreadyAllocated(AllocationFailure):
    def __str__(self) -> str:
        return f"Order line {self.line.id} is already allocated to this batch"


@dataclass(frozen=True)
class InsufficientStock(AllocationFailure):
    available: int

    def __str__(self) -> str:
        return f"Not enough stock for sku {self.line.sku}: requested {self.line.qty}, available {self.available}"


@dataclass(frozen=True)
class NotAllocated(AllocationFailure):
    def __str__(self) -> str:
        return f"Order line {self.line.id} is not allocated to this batch"


@dataclass(frozen=True)
class NoBatchAvailable(AllocationFailure):
    rejections: tuple[AllocationFailure, ...] = ()

    def __str__(self) -> str:
        return f"Out of stock for sku {self.line.sku}"
