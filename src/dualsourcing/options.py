"""Real-option valuation of a mid-season surge order revision."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
import math

from .models import (
    SEASON_PERIODS,
    DemandParameters,
    Product,
    SupplierPair,
    aggregate_planning_demand,
)
from .service_levels import critical_fractile, newsvendor_z, normalize_z_mode


@dataclass(frozen=True)
class OptionValuation:
    """Binomial lattice over the remaining season for the right to revise once.

    Demand moves up by ``exp(cv)`` or down by its inverse each period. At every
    node the revision is either exercised (Newsvendor payoff less the fee) or
    deferred, whichever is worth more.
    """

    mean_demand: float
    std_dev_demand: float
    selling_price: float
    holding_cost: float
    surge_unit_cost: float
    order_change_fee: float = 0.0
    periods: int = SEASON_PERIODS
    z_mode: str = "two_point"

    def __post_init__(self) -> None:
        if self.mean_demand < 0 or self.std_dev_demand < 0:
            raise ValueError("Demand inputs must be non-negative.")
        if self.order_change_fee < 0:
            raise ValueError("Order change fee must be non-negative.")
        if self.periods <= 0:
            raise ValueError("Periods must be positive.")
        object.__setattr__(self, "z_mode", normalize_z_mode(self.z_mode))

    @classmethod
    def for_products(
        cls,
        products: Sequence[Product],
        demand: Mapping[str, DemandParameters],
        pair: SupplierPair,
        *,
        order_change_fee: float = 0.0,
        z_mode: str = "two_point",
    ) -> "OptionValuation":
        """Collapse a product set into one aggregate demand stream.

        Prices and costs are weighted by planning mean demand.
        """
        product_ids = [product.id for product in products]
        mean, std_dev = aggregate_planning_demand(product_ids, demand)
        price = holding = surge_cost = 0.0
        if mean > 0:
            for product in products:
                params = demand.get(product.id)
                if params is None:
                    continue
                weight = params.mean / mean
                price += weight * product.selling_price
                holding += weight * product.monthly_holding_cost
                surge_cost += weight * pair.surge.unit_cost(product.id)
        return cls(
            mean_demand=mean,
            std_dev_demand=std_dev,
            selling_price=price,
            holding_cost=holding,
            surge_unit_cost=surge_cost,
            order_change_fee=order_change_fee,
            z_mode=z_mode,
        )

    @property
    def coefficient_of_variation(self) -> float:
        if self.mean_demand <= 0:
            return 0.0
        return self.std_dev_demand / self.mean_demand

    def remaining_periods(self, current_period: int) -> int:
        return max(0, self.periods - 1 - current_period)

    def value_option(
        self, order_quantity: int, inventory: int, current_period: int
    ) -> float:
        remaining = self.remaining_periods(current_period)
        if remaining < 1 or self.mean_demand <= 0:
            return 0.0

        cv = self.coefficient_of_variation
        up = math.exp(cv)
        down = 1.0 / up
        # u == d only without variability; both branches are then identical.
        probability = (1.0 - down) / (up - down) if up != down else 0.5

        def node_value(step: int, uplifts: int, node_inventory: int) -> float:
            if step >= remaining:
                return 0.0
            demand_up = int(self.mean_demand * up ** (uplifts + 1))
            demand_down = int(self.mean_demand * down ** (-(uplifts + 1)))
            exercise = self._exercise_payoff(order_quantity, uplifts, up)
            continuation_up = node_value(
                step + 1,
                uplifts + 1,
                _advance_inventory(node_inventory, order_quantity, demand_up),
            )
            continuation_down = node_value(
                step + 1,
                uplifts - 1,
                _advance_inventory(node_inventory, order_quantity, demand_down),
            )
            continuation = (
                probability * continuation_up + (1.0 - probability) * continuation_down
            )
            return max(exercise, continuation)

        return node_value(0, 0, inventory)

    def _exercise_payoff(self, order_quantity: int, uplifts: int, up: float) -> float:
        forecast = self.mean_demand * up**uplifts
        margin = self.selling_price - self.surge_unit_cost
        fractile = critical_fractile(margin, self.holding_cost)
        node_std_dev = forecast * self.coefficient_of_variation
        target = forecast + newsvendor_z(fractile, self.z_mode) * node_std_dev

        current = float(order_quantity)
        if target > current:
            benefit = margin * min(target - current, forecast)
        elif target < current:
            benefit = (current - target) * self.holding_cost
        else:
            benefit = 0.0
        return benefit - self.order_change_fee


def _advance_inventory(inventory: int, incoming: int, demand: int) -> int:
    available = inventory + incoming
    return max(0, available - min(available, demand))
