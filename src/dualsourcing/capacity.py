"""Capacity checks and base/surge order splitting."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .models import DemandParameters, OrderPlan, SupplierPair


@dataclass(frozen=True)
class CapacityViolation:
    role: str
    supplier_name: str
    capacity: int
    requested: int

    @property
    def message(self) -> str:
        return (
            f"{self.role.capitalize()} supplier '{self.supplier_name}' capacity "
            f"exceeded: requested {self.requested}, capacity {self.capacity}."
        )


class CapacityError(ValueError):
    """Raised when an infeasible order plan is handed to an evaluation."""

    def __init__(self, violation: CapacityViolation) -> None:
        super().__init__(violation.message)
        self.violation = violation


def validate_capacity(plan: OrderPlan, pair: SupplierPair) -> CapacityViolation | None:
    total_base = plan.total_base
    if total_base > pair.base.fixed_capacity:
        return CapacityViolation(
            role="base",
            supplier_name=pair.base.name,
            capacity=pair.base.fixed_capacity,
            requested=total_base,
        )
    total_surge = plan.total_surge
    if total_surge > pair.surge.fixed_capacity:
        return CapacityViolation(
            role="surge",
            supplier_name=pair.surge.name,
            capacity=pair.surge.fixed_capacity,
            requested=total_surge,
        )
    return None


def remaining_capacity(plan: OrderPlan, pair: SupplierPair) -> tuple[int, int]:
    base_remaining = max(0, pair.base.fixed_capacity - plan.total_base)
    surge_remaining = max(0, pair.surge.fixed_capacity - plan.total_surge)
    return base_remaining, surge_remaining


def empty_order(product_ids: Iterable[str]) -> OrderPlan:
    ids = list(product_ids)
    return OrderPlan(
        base={product_id: 0 for product_id in ids},
        surge={product_id: 0 for product_id in ids},
    )


def _base_weight(product_id: str, demand: Mapping[str, DemandParameters]) -> float:
    params = demand.get(product_id)
    cv = params.coefficient_of_variation if params is not None else 0.0
    return 1.0 / (1.0 + cv)


def split_order(
    targets: Mapping[str, int],
    pair: SupplierPair,
    demand: Mapping[str, DemandParameters],
) -> OrderPlan:
    """Split per-product targets across the pair, consuming capacity in order.

    More variable products lean on the surge supplier. Once a supplier is
    exhausted later products get nothing from it; unmet quantity is dropped.
    """
    base_remaining = pair.base.fixed_capacity
    surge_remaining = pair.surge.fixed_capacity
    base: dict[str, int] = {}
    surge: dict[str, int] = {}
    for product_id, target in targets.items():
        target = max(0, int(target))
        desired_base = int(target * _base_weight(product_id, demand))
        base_qty = min(desired_base, base_remaining)
        surge_qty = min(max(0, target - base_qty), surge_remaining)
        base[product_id] = base_qty
        surge[product_id] = surge_qty
        base_remaining = max(0, base_remaining - base_qty)
        surge_remaining = max(0, surge_remaining - surge_qty)
    return OrderPlan(base=base, surge=surge)


def split_order_quantity(
    product_id: str,
    quantity: int,
    pair: SupplierPair,
    demand: Mapping[str, DemandParameters],
) -> OrderPlan:
    """Single-product split that moves surge shortfall back to base when it fits."""
    quantity = max(0, int(quantity))
    desired_base = int(quantity * _base_weight(product_id, demand))
    base_qty = min(desired_base, pair.base.fixed_capacity)
    surge_qty = min(max(0, quantity - base_qty), pair.surge.fixed_capacity)
    shortfall = max(0, quantity - base_qty - surge_qty)
    if shortfall:
        base_qty += min(shortfall, max(0, pair.base.fixed_capacity - base_qty))
    return OrderPlan(base={product_id: base_qty}, surge={product_id: surge_qty})
