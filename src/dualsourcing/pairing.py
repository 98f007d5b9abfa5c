"""Supplier pair generation and quick profitability screening."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from .models import (
    MAX_SURGE_LEAD_TIME,
    MIN_BASE_LEAD_TIME,
    SEASON_PERIODS,
    DemandParameters,
    Product,
    Supplier,
    SupplierPair,
)

PLANNED_SHARE_OF_DEMAND = 0.9
CARRYOVER_SHARE = 0.2
MIN_CAPACITY_COVERAGE = 0.7


def generate_supplier_pairs(suppliers: Iterable[Supplier]) -> list[SupplierPair]:
    """Pair every base-eligible supplier with every surge-eligible one.

    Base suppliers need a lead time of at least one period, surge suppliers
    less than two. A supplier is never paired with itself.
    """
    supplier_list = list(suppliers)
    base_eligible = [s for s in supplier_list if s.lead_time >= MIN_BASE_LEAD_TIME]
    surge_eligible = [s for s in supplier_list if s.lead_time < MAX_SURGE_LEAD_TIME]
    return [
        SupplierPair(base=base, surge=surge)
        for base in base_eligible
        for surge in surge_eligible
        if base.id != surge.id
    ]


def _planning_means(
    products: Sequence[Product], demand: Mapping[str, DemandParameters]
) -> dict[str, float]:
    means: dict[str, float] = {}
    for product in products:
        params = demand.get(product.id)
        means[product.id] = params.mean if params is not None else 0.0
    return means


def quick_profit_estimate(
    products: Sequence[Product],
    demand: Mapping[str, DemandParameters],
    pair: SupplierPair,
) -> float:
    """Rough single-period Newsvendor estimate used to discard weak pairs early."""
    if not products:
        return 0.0
    means = _planning_means(products, demand)
    total_demand = sum(means.values())
    if total_demand > 0:
        avg_cost = (
            sum(means[p.id] * pair.base.unit_cost(p.id) for p in products) / total_demand
        )
        avg_price = sum(means[p.id] * p.selling_price for p in products) / total_demand
    else:
        avg_cost = avg_price = 0.0
    avg_holding = sum(p.monthly_holding_cost for p in products) / len(products)

    order_quantity = total_demand * PLANNED_SHARE_OF_DEMAND
    revenue = order_quantity * avg_price
    production_cost = order_quantity * avg_cost
    holding_cost = order_quantity * CARRYOVER_SHARE * avg_holding * SEASON_PERIODS
    return revenue - production_cost - pair.base.setup_cost - holding_cost


def is_pair_promising(
    products: Sequence[Product],
    demand: Mapping[str, DemandParameters],
    pair: SupplierPair,
    min_profit: float,
) -> bool:
    total_demand = sum(_planning_means(products, demand).values())
    has_capacity = pair.total_capacity >= total_demand * MIN_CAPACITY_COVERAGE
    return has_capacity and quick_profit_estimate(products, demand, pair) >= min_profit
