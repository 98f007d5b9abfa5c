"""Monte Carlo evaluation of a fixed order plan."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
import math
import random
import statistics

from .capacity import CapacityError, split_order, split_order_quantity, validate_capacity
from .demand import DemandGenerator, sample_demand
from .models import (
    DemandParameters,
    MonteCarloStatistics,
    OrderPlan,
    Product,
    SupplierPair,
)
from .optimization import OptimizerSettings, optimize_order_quantities_with_diagnostics
from .simulation import simulate_season

PERCENTILES = (10, 25, 50, 75, 90)


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Nearest-rank percentile of an ascending sample.

    The index is ``p / 100 * (n - 1)`` rounded half up and clamped to the
    sample bounds.
    """
    if not sorted_values:
        raise ValueError("Percentile requires at least one value.")
    last = len(sorted_values) - 1
    index = math.floor((p / 100.0) * last + 0.5)
    return sorted_values[min(max(index, 0), last)]


def summarize_profits(
    profits: Iterable[float],
    *,
    pair: SupplierPair,
    plan: OrderPlan,
) -> MonteCarloStatistics:
    ordered = sorted(profits)
    if not ordered:
        raise ValueError("At least one profit sample is required.")
    mean_profit = statistics.fmean(ordered)
    std_dev_profit = math.sqrt(statistics.fmean((value - mean_profit) ** 2 for value in ordered))
    quantiles = {p: percentile(ordered, p) for p in PERCENTILES}
    return MonteCarloStatistics(
        base_supplier=pair.base.name,
        base_supplier_lead_time=pair.base.lead_time,
        surge_supplier=pair.surge.name,
        surge_supplier_lead_time=pair.surge.lead_time,
        allocation=plan.allocation(),
        order_plan=plan,
        num_runs=len(ordered),
        mean_profit=mean_profit,
        std_dev_profit=std_dev_profit,
        min_profit=ordered[0],
        max_profit=ordered[-1],
        percentile_10=quantiles[10],
        percentile_25=quantiles[25],
        percentile_50=quantiles[50],
        percentile_75=quantiles[75],
        percentile_90=quantiles[90],
        profits=tuple(ordered),
    )


def evaluate_order_plan(
    products: Sequence[Product],
    demand: Mapping[str, DemandParameters],
    pair: SupplierPair,
    plan: OrderPlan,
    num_runs: int,
    *,
    order_change_fee: float = 0.0,
    rng: random.Random | None = None,
    seed: int | None = None,
    demand_generator: DemandGenerator = sample_demand,
) -> MonteCarloStatistics:
    """Simulate the plan ``num_runs`` times against realized demand.

    Options are never valued here; the plan is held for the whole season.
    Pass ``rng`` to share a stream, or ``seed`` for a fresh reproducible one.
    """
    if num_runs <= 0:
        raise ValueError("num_runs must be positive.")
    violation = validate_capacity(plan, pair)
    if violation is not None:
        raise CapacityError(violation)
    if rng is None:
        rng = random.Random(seed)

    profits = [
        simulate_season(
            products,
            demand,
            pair,
            plan,
            order_change_fee=order_change_fee,
            options_enabled=False,
            use_realized_demand=True,
            rng=rng,
            demand_generator=demand_generator,
        ).total_profit
        for _ in range(num_runs)
    ]
    return summarize_profits(profits, pair=pair, plan=plan)


def plan_for_allocation(
    allocation: Mapping[str, int],
    pair: SupplierPair,
    demand: Mapping[str, DemandParameters],
) -> OrderPlan:
    if len(allocation) == 1:
        ((product_id, quantity),) = allocation.items()
        return split_order_quantity(product_id, quantity, pair, demand)
    return split_order(allocation, pair, demand)


def rank_supplier_pairs(
    products: Sequence[Product],
    demand: Mapping[str, DemandParameters],
    pairs: Iterable[SupplierPair],
    num_runs: int,
    *,
    order_change_fee: float = 0.0,
    seed: int | None = None,
    demand_generator: DemandGenerator = sample_demand,
    settings: OptimizerSettings | None = None,
    options_enabled: bool = True,
) -> list[MonteCarloStatistics]:
    """Optimize, split and evaluate every pair; best mean profit first.

    Quantities are planned on seasons that value the revision option unless
    ``options_enabled`` is False. The evaluation itself always holds the plan.
    """
    rng = random.Random(seed)
    results: list[MonteCarloStatistics] = []
    for pair in pairs:
        allocation = optimize_order_quantities_with_diagnostics(
            products,
            demand,
            pair,
            order_change_fee=order_change_fee,
            rng=rng,
            demand_generator=demand_generator,
            settings=settings,
            options_enabled=options_enabled,
        ).allocation
        plan = plan_for_allocation(allocation, pair, demand)
        results.append(
            evaluate_order_plan(
                products,
                demand,
                pair,
                plan,
                num_runs,
                order_change_fee=order_change_fee,
                rng=rng,
                demand_generator=demand_generator,
            )
        )
    results.sort(key=lambda stats: stats.mean_profit, reverse=True)
    return results
