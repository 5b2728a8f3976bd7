from datetime import datetime, timedelta, timezone

from stockroom.allocation.domain.errors import AlreadyAllocated, InsufficientStock, NoBatchAvailable, SkuMismatch
from stockroom.allocation.domain.models import Batch, OrderLine, allocate

today = datetime(2024, 3, 1, tzinfo=timezone.utc)
tomorrow = today + timedelta(days=1)
later = today + timedelta(days=10)


def test_prefers_current_stock_batches_to_shipments() -> None:
    # Given
    in_stock_batch = Batch(sku="RETRO-CLOCK", qty=20, eta=today)
    shipment_batch = Batch(sku="RETRO-CLOCK", qty=20, eta=tomorrow)
    line = OrderLine(sku="RETRO-CLOCK", qty=10)

    # When
    allocate(line, [shipment_batch, in_stock_batch])

    # Then
    assert in_stock_batch.available_quantity == 10
    assert shipment_batch.available_quantity == 20


def test_prefers_earlier_batches() -> None:
    # Given
    earliest = Batch(sku="MINIMALIST-SPOON", qty=100, eta=today)
    medium = Batch(sku="MINIMALIST-SPOON", qty=100, eta=tomorrow)
    latest = Batch(sku="MINIMALIST-SPOON", qty=100, eta=later)
    line = OrderLine(sku="MINIMALIST-SPOON", qty=10)

    # When
    allocate(line, [medium, earliest, latest])

    # Then
    assert earliest.available_quantity == 90
    assert medium.available_quantity == 100
    assert latest.available_quantity == 100


def test_returns_allocated_batch() -> None:
    # Given
    in_stock_batch = Batch(sku="HIGHBROW-POSTER", qty=100, eta=today)
    shipment_batch = Batch(sku="HIGHBROW-POSTER", qty=100, eta=tomorrow)
    line = OrderLine(sku="HIGHBROW-POSTER", qty=10)

    # When
    result = allocate(line, [in_stock_batch, shipment_batch])

    # Then
    assert result is in_stock_batch


def test_skips_batches_without_enough_stock() -> None:
    # Given
    small = Batch(sku="RETRO-CLOCK", qty=5, eta=today)
    large = Batch(sku="RETRO-CLOCK", qty=50, eta=tomorrow)
    line = OrderLine(sku="RETRO-CLOCK", qty=10)

    # When
    result = allocate(line, [small, large])

    # Then
    assert result is large
    assert small.available_quantity == 5
    assert large.available_quantity == 40


def test_only_allocates_to_matching_sku_regardless_of_eta() -> None:
    # Given
    other_sku = Batch(sku="B", qty=100, eta=today)
    matching = Batch(sku="A", qty=5, eta=later)
    line = OrderLine(sku="A", qty=3)

    # When
    result = allocate(line, [other_sku, matching])

    # Then
    assert result is matching
    assert matching.available_quantity == 2
    assert other_sku.available_quantity == 100


def test_keeps_caller_order_for_batches_with_the_same_eta() -> None:
    # Given
    first = Batch(sku="RETRO-CLOCK", qty=20, eta=today)
    second = Batch(sku="RETRO-CLOCK", qty=20, eta=today)
    line = OrderLine(sku="RETRO-CLOCK", qty=10)

    # When
    result = allocate(line, [first, second])

    # Then
    assert result is first
    assert second.available_quantity == 20


def test_returns_no_batch_available_if_cannot_allocate() -> None:
    # Given
    batch = Batch(sku="SMALL-TABLE", qty=1, eta=today)
    line = OrderLine(sku="SMALL-TABLE", qty=2)

    # When
    result = allocate(line, [batch])

    # Then
    assert isinstance(result, NoBatchAvailable)
    assert result.line == line
    assert result.rejections == (InsufficientStock(line, 1),)
    assert "SMALL-TABLE" in str(result)
    assert batch.available_quantity == 1


def test_no_batch_available_lists_each_rejection_in_eta_order() -> None:
    # Given
    wrong_sku = Batch(sku="BIG-TABLE", qty=100, eta=tomorrow)
    exhausted = Batch(sku="SMALL-TABLE", qty=1, eta=today)
    line = OrderLine(sku="SMALL-TABLE", qty=2)

    # When
    result = allocate(line, [wrong_sku, exhausted])

    # Then
    assert isinstance(result, NoBatchAvailable)
    assert result.rejections == (InsufficientStock(line, 1), SkuMismatch(line, "BIG-TABLE"))


def test_no_batch_available_for_empty_candidates() -> None:
    # Given
    line = OrderLine(sku="SMALL-TABLE", qty=2)

    # When
    result = allocate(line, [])

    # Then
    assert result == NoBatchAvailable(line, ())


def test_line_already_in_every_batch_is_not_allocated_again() -> None:
    # Given
    line = OrderLine(sku="RETRO-CLOCK", qty=10)
    early = Batch(sku="RETRO-CLOCK", qty=20, eta=today, allocations={line})
    late = Batch(sku="RETRO-CLOCK", qty=20, eta=tomorrow, allocations={line})

    # When
    result = allocate(line, [late, early])

    # Then
    assert isinstance(result, NoBatchAvailable)
    assert result.rejections == (AlreadyAllocated(line), AlreadyAllocated(line))
    assert early.allocations == {line}
    assert late.allocations == {line}
    assert (early.available_quantity, late.available_quantity) == (10, 10)
