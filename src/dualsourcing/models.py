"""Domain types shared by the simulation, valuation and optimization modules."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
import math


SEASON_PERIODS = 8
MIN_BASE_LEAD_TIME = 1
MAX_SURGE_LEAD_TIME = 2
MONTHS = (
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass(frozen=True)
class Product:
    id: str
    selling_price: float
    liquidation_price: float = 0.0
    monthly_holding_cost: float = 0.0

    def __post_init__(self) -> None:
        if (
            self.selling_price < 0
            or self.liquidation_price < 0
            or self.monthly_holding_cost < 0
        ):
            raise ValueError("Prices and holding costs must be non-negative.")


@dataclass(frozen=True)
class DemandParameters:
    """Planning and realized demand distribution for one product.

    Planning values drive ordering decisions; realized values drive simulated
    outcomes. Set them apart to model a biased forecast.
    """

    mean: float
    std_dev: float
    realized_mean: float | None = None
    realized_std_dev: float | None = None

    def __post_init__(self) -> None:
        if self.realized_mean is None:
            object.__setattr__(self, "realized_mean", self.mean)
        if self.realized_std_dev is None:
            object.__setattr__(self, "realized_std_dev", self.std_dev)
        if self.mean < 0 or self.realized_mean < 0:
            raise ValueError("Demand means must be non-negative.")
        if self.std_dev < 0 or self.realized_std_dev < 0:
            raise ValueError("Demand standard deviations must be non-negative.")

    @property
    def coefficient_of_variation(self) -> float:
        if self.mean <= 0:
            return 0.0
        return self.std_dev / self.mean

    def distribution(self, *, realized: bool) -> tuple[float, float]:
        if realized:
            return self.realized_mean, self.realized_std_dev
        return self.mean, self.std_dev


@dataclass(frozen=True)
class Supplier:
    id: int
    name: str
    fixed_capacity: int
    lead_time: int
    setup_cost: float = 0.0
    unit_costs: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.fixed_capacity < 0:
            raise ValueError("Supplier capacity cannot be negative.")
        if self.lead_time < 0:
            raise ValueError("Lead time cannot be negative.")
        if self.setup_cost < 0:
            raise ValueError("Setup cost must be non-negative.")
        if any(cost < 0 for cost in self.unit_costs.values()):
            raise ValueError("Unit costs must be non-negative.")

    def unit_cost(self, product_id: str) -> float:
        return float(self.unit_costs.get(product_id, 0.0))


@dataclass(frozen=True)
class SupplierPair:
    """A long lead-time base supplier paired with a short lead-time surge supplier."""

    base: Supplier
    surge: Supplier

    def __post_init__(self) -> None:
        if self.base.id == self.surge.id:
            raise ValueError("Base and surge supplier must differ.")

    @property
    def has_eligible_lead_times(self) -> bool:
        return (
            self.base.lead_time >= MIN_BASE_LEAD_TIME
            and self.surge.lead_time < MAX_SURGE_LEAD_TIME
        )

    @property
    def total_capacity(self) -> int:
        return self.base.fixed_capacity + self.surge.fixed_capacity


@dataclass(frozen=True)
class OrderPlan:
    """Per-product quantities ordered from each supplier in a single period."""

    base: Mapping[str, int] = field(default_factory=dict)
    surge: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if any(qty < 0 for qty in self.base.values()) or any(
            qty < 0 for qty in self.surge.values()
        ):
            raise ValueError("Order quantities must be non-negative.")

    @property
    def product_ids(self) -> list[str]:
        ids = list(self.base)
        ids.extend(product_id for product_id in self.surge if product_id not in self.base)
        return ids

    @property
    def total_base(self) -> int:
        return sum(self.base.values())

    @property
    def total_surge(self) -> int:
        return sum(self.surge.values())

    @property
    def total(self) -> int:
        return self.total_base + self.total_surge

    def base_quantity(self, product_id: str) -> int:
        return self.base.get(product_id, 0)

    def surge_quantity(self, product_id: str) -> int:
        return self.surge.get(product_id, 0)

    def quantity_for(self, product_id: str) -> int:
        return self.base_quantity(product_id) + self.surge_quantity(product_id)

    def allocation(self) -> dict[str, int]:
        return {product_id: self.quantity_for(product_id) for product_id in self.product_ids}


@dataclass(frozen=True)
class NoPendingChange:
    pass


@dataclass(frozen=True)
class PendingChange:
    effective_period: int
    plan: OrderPlan


PendingState = NoPendingChange | PendingChange
NO_PENDING_CHANGE = NoPendingChange()


@dataclass(frozen=True)
class PeriodResult:
    period: int
    month: str
    inventory_start: int
    incoming: int
    inventory_after_incoming: int
    demand: int
    units_sold: int
    inventory_end: int
    base_quantity: int
    surge_quantity: int
    revenue: float
    production_cost: float
    holding_cost: float
    setup_cost: float
    liquidation_revenue: float
    order_change_cost: float
    profit: float
    option_value: float | None = None
    pending_effective_period: int | None = None
    demand_by_product: Mapping[str, int] = field(default_factory=dict)
    sold_by_product: Mapping[str, int] = field(default_factory=dict)
    inventory_end_by_product: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class SeasonResult:
    periods: Sequence[PeriodResult]
    total_profit: float


@dataclass(frozen=True)
class MonteCarloStatistics:
    base_supplier: str
    base_supplier_lead_time: int
    surge_supplier: str
    surge_supplier_lead_time: int
    allocation: Mapping[str, int]
    order_plan: OrderPlan
    num_runs: int
    mean_profit: float
    std_dev_profit: float
    min_profit: float
    max_profit: float
    percentile_10: float
    percentile_25: float
    percentile_50: float
    percentile_75: float
    percentile_90: float
    profits: Sequence[float] = field(default_factory=tuple, repr=False)

    @property
    def total_quantity(self) -> int:
        return sum(self.allocation.values())


def aggregate_planning_demand(
    product_ids: Iterable[str], demand: Mapping[str, DemandParameters]
) -> tuple[float, float]:
    """Sum planning means and combine std-devs as independent products."""
    mean = 0.0
    variance = 0.0
    for product_id in product_ids:
        params = demand.get(product_id)
        if params is None:
            continue
        mean += params.mean
        variance += params.std_dev**2
    return mean, math.sqrt(variance)
