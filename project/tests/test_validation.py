# tests/test_validation.py

from decimal import Decimal

import pytest

from nursery.exceptions import RepositoryError
from nursery.services.validation import (
    check_item_subtotals,
    check_parent_totals,
    validate_order_items_subtotals,
    validate_order_structure,
    validate_parent_order_totals,
)


def seed_split_order(repo, total="900", subtotal="900"):
    repo.add_order("P1", total_amount=Decimal(total), subtotal=Decimal(subtotal), merchant_code="parent")
    repo.add_order("C1", parent_order_id="P1", merchant_code="M1", subtotal=Decimal("500"), total_amount=Decimal("500"))
    repo.add_order("C2", parent_order_id="P1", merchant_code="M2", subtotal=Decimal("400.005"), total_amount=Decimal("400.005"))
    repo.add_item("C1", "I1", quantity=2, unit_price=Decimal("250"), subtotal=Decimal("500"))
    repo.add_item("C2", "I2", quantity=1, unit_price=Decimal("400.005"), subtotal=Decimal("400.005"))


async def test_end_to_end_example_is_valid(repo, log):
    seed_split_order(repo)

    result = await validate_order_structure("P1", repo, log)

    assert result.is_valid
    assert result.errors == []
    assert result.warnings == []


async def test_parent_total_matching_child_sum_is_valid(repo):
    repo.add_order("P", total_amount=Decimal("750.50"), subtotal=Decimal("750.50"))
    repo.add_order("A", parent_order_id="P", subtotal=Decimal("500.25"))
    repo.add_order("B", parent_order_id="P", subtotal=Decimal("250.25"))

    result = await validate_parent_order_totals("P", repo)

    assert result.is_valid


async def test_perturbed_parent_total_reports_both_values(repo):
    seed_split_order(repo, total="905", subtotal="905")

    result = await validate_order_structure("P1", repo)

    assert not result.is_valid
    assert result.errors == [
        "Parent order total (905) does not match sum of child subtotals (900.005)"
    ]


async def test_parent_subtotal_out_of_sync_with_total(repo):
    seed_split_order(repo, total="900", subtotal="899")

    result = await validate_parent_order_totals("P1", repo)

    assert not result.is_valid
    assert result.errors == ["Parent order subtotal (899) does not match total_amount (900)"]


@pytest.mark.parametrize("total, valid", [
    ("100.01", True),
    ("99.99", True),
    ("100.011", False),
    ("99.989", False),
])
async def test_tolerance_boundary(repo, total, valid):
    repo.add_order("P", total_amount=Decimal(total), subtotal=Decimal(total))
    repo.add_order("C", parent_order_id="P", subtotal=Decimal("100"))

    result = await validate_parent_order_totals("P", repo)

    assert result.is_valid is valid


async def test_missing_child_subtotal_counts_as_zero(repo):
    repo.add_order("P", total_amount=Decimal("300"), subtotal=Decimal("300"))
    repo.add_order("A", parent_order_id="P", subtotal=Decimal("300"))
    repo.add_order("B", parent_order_id="P", subtotal=None)

    assert (await validate_parent_order_totals("P", repo)).is_valid


async def test_item_errors_accumulate_across_children(repo):
    seed_split_order(repo)
    repo.add_item("C1", "I3", quantity=3, unit_price=Decimal("10"), subtotal=Decimal("20"))
    repo.add_item("C2", "I4", quantity=1, unit_price=Decimal("5"), subtotal=Decimal("0"))

    result = await validate_order_structure("P1", repo)

    assert not result.is_valid
    assert result.errors == [
        "Order item I3: expected subtotal 30, got 20",
        "Order item I4: expected subtotal 5, got 0",
    ]


async def test_items_are_fetched_per_child_in_order(repo):
    seed_split_order(repo)

    await validate_order_structure("P1", repo)

    item_calls = [key for method, key in repo.calls if method == "fetch_items"]
    assert item_calls == ["C1", "C2"]


async def test_legacy_price_is_used_when_unit_price_is_missing(repo):
    repo.add_order("C", parent_order_id="P")
    repo.add_item("C", "I", quantity=2, unit_price=None, price=Decimal("250"), subtotal=Decimal("500"))

    result = await validate_order_items_subtotals("C", repo)

    assert result.is_valid


async def test_unknown_parent_is_a_single_error(repo):
    result = await validate_order_structure("missing", repo)

    assert not result.is_valid
    assert result.errors == ["Parent order missing not found"]
    assert ("fetch_children", "missing") not in repo.calls


async def test_child_id_is_rejected_as_parent(repo):
    seed_split_order(repo)

    result = await validate_order_structure("C1", repo)

    assert result.errors == ["Order C1 is not a parent order"]


async def test_children_read_failure_short_circuits(repo):
    seed_split_order(repo)
    repo.fail("fetch_children", RepositoryError("connection reset"))

    result = await validate_order_structure("P1", repo)

    assert not result.is_valid
    assert result.errors == ["Failed to fetch child orders: connection reset"]


async def test_items_read_failure_stops_remaining_children(repo, log):
    seed_split_order(repo)
    repo.fail("fetch_items", RepositoryError("timeout"), key="C1")

    result = await validate_order_structure("P1", repo, log)

    assert result.errors == ["Failed to fetch order items for C1: timeout"]
    assert ("fetch_items", "C2") not in repo.calls


async def test_unexpected_error_becomes_result(repo, log):
    repo.fail("fetch_order", RuntimeError("boom"))

    result = await validate_order_structure("P1", repo, log)

    assert result.errors == ["Validation error: boom"]


def test_pure_checks():
    from nursery.schemas.order import Order, OrderItem

    parent = Order(id="P", order_code="P", total_amount=Decimal("10"), subtotal=Decimal("10"))
    children = [Order(id="C", order_code="C", parent_order_id="P", subtotal=Decimal("10.02"))]
    items = [OrderItem(id="I", quantity=4, unit_price=Decimal("2.5"), subtotal=Decimal("10"))]

    assert check_parent_totals(parent, children) == [
        "Parent order total (10) does not match sum of child subtotals (10.02)"
    ]
    assert check_parent_totals(parent, children, tolerance=Decimal("0.05")) == []
    assert check_item_subtotals(items) == []
