"""Monthly season simulation with optional mid-season surge revisions."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import random
from typing import TYPE_CHECKING

from .demand import DemandGenerator, sample_demand
from .models import (
    MONTHS,
    NO_PENDING_CHANGE,
    SEASON_PERIODS,
    DemandParameters,
    NoPendingChange,
    OrderPlan,
    PendingChange,
    PendingState,
    PeriodResult,
    Product,
    SeasonResult,
    SupplierPair,
)
from .options import OptionValuation

if TYPE_CHECKING:
    from .optimization import OptimizerSettings


def _validate_inputs(
    products: Sequence[Product],
    order_change_fee: float,
) -> None:
    if order_change_fee < 0:
        raise ValueError("Order change fee must be non-negative.")
    product_ids = [product.id for product in products]
    if len(set(product_ids)) != len(product_ids):
        raise ValueError("Product ids must be unique.")


def _known_products_only(plan: OrderPlan, product_ids: Sequence[str]) -> OrderPlan:
    known = set(product_ids)
    return OrderPlan(
        base={key: qty for key, qty in plan.base.items() if key in known},
        surge={key: qty for key, qty in plan.surge.items() if key in known},
    )


def revise_surge_order(
    current: OrderPlan,
    targets: Mapping[str, int],
    pair: SupplierPair,
    product_ids: Sequence[str],
) -> OrderPlan:
    """Build a surge-only revision that tops base quantities up to the targets.

    Base quantities are kept. If the surge total exceeds surge capacity every
    product's surge quantity is scaled down by the same factor.
    """
    surge = {
        product_id: max(0, int(targets.get(product_id, 0)) - current.base_quantity(product_id))
        for product_id in product_ids
    }
    total = sum(surge.values())
    capacity = pair.surge.fixed_capacity
    if total > capacity:
        scale = capacity / total
        surge = {product_id: int(qty * scale) for product_id, qty in surge.items()}
    return OrderPlan(base=dict(current.base), surge=surge)


def simulate_season(
    products: Sequence[Product],
    demand: Mapping[str, DemandParameters],
    pair: SupplierPair,
    initial_plan: OrderPlan,
    *,
    order_change_fee: float = 0.0,
    options_enabled: bool = False,
    use_realized_demand: bool = True,
    rng: random.Random | None = None,
    demand_generator: DemandGenerator = sample_demand,
    settings: "OptimizerSettings | None" = None,
    z_mode: str = "two_point",
) -> SeasonResult:
    """Run one May-December season and return the per-period ledger.

    With ``options_enabled`` the surge order may be revised once at a time:
    when the option to revise is worth more than ``order_change_fee`` the
    optimizer (run without options) proposes new targets and the revision
    takes effect after the surge lead time.
    """
    _validate_inputs(products, order_change_fee)
    # Imported here to break the optimization -> simulation import cycle.
    from .optimization import optimize_order_quantities

    rng = rng if rng is not None else random.Random()
    product_ids = [product.id for product in products]
    valuation = (
        OptionValuation.for_products(
            products,
            demand,
            pair,
            order_change_fee=order_change_fee,
            z_mode=z_mode,
        )
        if options_enabled
        else None
    )

    inventory = {product_id: 0 for product_id in product_ids}
    # Quantities for ids outside the product set are never received or costed.
    current_plan = _known_products_only(initial_plan, product_ids)
    pending: PendingState = NO_PENDING_CHANGE
    base_setup_charged = False
    surge_setup_charged = False
    total_profit = 0.0
    ledger: list[PeriodResult] = []

    for period in range(SEASON_PERIODS):
        inventory_start = sum(inventory.values())
        order_change_cost = 0.0
        setup_cost = 0.0

        if isinstance(pending, PendingChange) and period >= pending.effective_period:
            current_plan = pending.plan
            pending = NO_PENDING_CHANGE
            order_change_cost = order_change_fee

        incoming = 0
        for product_id in product_ids:
            received = current_plan.quantity_for(product_id)
            inventory[product_id] += received
            incoming += received
        inventory_after_incoming = sum(inventory.values())

        if current_plan.total_base > 0 and not base_setup_charged:
            setup_cost += pair.base.setup_cost
            base_setup_charged = True
        if current_plan.total_surge > 0 and not surge_setup_charged:
            setup_cost += pair.surge.setup_cost
            surge_setup_charged = True

        demand_by_product: dict[str, int] = {}
        sold_by_product: dict[str, int] = {}
        for product_id in product_ids:
            params = demand.get(product_id)
            if params is None:
                period_demand = 0
            else:
                mean, std_dev = params.distribution(realized=use_realized_demand)
                period_demand = demand_generator(mean, std_dev, rng)
            sold = min(inventory[product_id], period_demand)
            inventory[product_id] = max(0, inventory[product_id] - sold)
            demand_by_product[product_id] = period_demand
            sold_by_product[product_id] = sold

        option_value: float | None = None
        is_final_period = period == SEASON_PERIODS - 1
        if (
            valuation is not None
            and isinstance(pending, NoPendingChange)
            and not is_final_period
        ):
            option_value = valuation.value_option(
                current_plan.total, sum(inventory.values()), period
            )
            if option_value > order_change_fee:
                targets = optimize_order_quantities(
                    products,
                    demand,
                    pair,
                    order_change_fee=order_change_fee,
                    rng=rng,
                    demand_generator=demand_generator,
                    settings=settings,
                )
                revised = revise_surge_order(current_plan, targets, pair, product_ids)
                effective_period = period + pair.surge.lead_time
                if effective_period < SEASON_PERIODS:
                    pending = PendingChange(effective_period=effective_period, plan=revised)

        revenue = 0.0
        production_cost = 0.0
        holding_cost = 0.0
        for product in products:
            revenue += sold_by_product[product.id] * product.selling_price
            production_cost += current_plan.base_quantity(product.id) * pair.base.unit_cost(
                product.id
            ) + current_plan.surge_quantity(product.id) * pair.surge.unit_cost(product.id)
            holding_cost += inventory[product.id] * product.monthly_holding_cost

        profit = revenue - production_cost - holding_cost - order_change_cost - setup_cost
        liquidation_revenue = 0.0
        if is_final_period:
            for product in products:
                liquidation_revenue += inventory[product.id] * product.liquidation_price
                inventory[product.id] = 0
            profit += liquidation_revenue
        inventory_end_by_product = dict(inventory)

        total_profit += profit
        ledger.append(
            PeriodResult(
                period=period,
                month=MONTHS[period],
                inventory_start=inventory_start,
                incoming=incoming,
                inventory_after_incoming=inventory_after_incoming,
                demand=sum(demand_by_product.values()),
                units_sold=sum(sold_by_product.values()),
                inventory_end=sum(inventory.values()),
                base_quantity=current_plan.total_base,
                surge_quantity=current_plan.total_surge,
                revenue=revenue,
                production_cost=production_cost,
                holding_cost=holding_cost,
                setup_cost=setup_cost,
                liquidation_revenue=liquidation_revenue,
                order_change_cost=order_change_cost,
                profit=profit,
                option_value=option_value,
                pending_effective_period=(
                    pending.effective_period if isinstance(pending, PendingChange) else None
                ),
                demand_by_product=demand_by_product,
                sold_by_product=sold_by_product,
                inventory_end_by_product=inventory_end_by_product,
            )
        )

    return SeasonResult(periods=ledger, total_profit=total_profit)
