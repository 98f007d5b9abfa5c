"""Order quantity search scored by simulated seasons."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
import random
import statistics
import warnings

from .capacity import split_order, split_order_quantity
from .demand import DemandGenerator, sample_demand
from .models import DemandParameters, OrderPlan, Product, SupplierPair
from .simulation import simulate_season

STRATEGY_EMPTY = "empty"
STRATEGY_LINEAR_SWEEP = "linear_sweep"
STRATEGY_GRID_SEARCH = "grid_search"
STRATEGY_PROPORTIONAL = "proportional"

ScoreFunction = Callable[[OrderPlan, int], float]


@dataclass(frozen=True)
class OptimizerSettings:
    """Search sizes for the order quantity optimizer.

    Candidates are expressed as factors of planning mean demand. Two-product
    searches refine the best coarse cell within ``fine_span`` on each side.
    """

    single_candidates: int = 12
    single_runs: int = 10
    min_factor: float = 0.7
    max_factor: float = 1.2
    coarse_grid: int = 6
    coarse_runs: int = 30
    fine_grid: int = 5
    fine_runs: int = 50
    fine_span: float = 0.15
    top_candidates: int = 3

    def __post_init__(self) -> None:
        counts = (
            self.single_candidates,
            self.single_runs,
            self.coarse_grid,
            self.coarse_runs,
            self.fine_grid,
            self.fine_runs,
            self.top_candidates,
        )
        if any(count <= 0 for count in counts):
            raise ValueError("Candidate, grid and run counts must be positive.")
        if self.min_factor < 0 or self.max_factor < self.min_factor:
            raise ValueError("Factor range must satisfy 0 <= min_factor <= max_factor.")
        if not 0 <= self.fine_span < 1:
            raise ValueError("Fine span must be in [0, 1).")


@dataclass(frozen=True)
class CandidateScore:
    allocation: Mapping[str, int]
    mean_profit: float
    runs: int
    stage: str


@dataclass(frozen=True)
class OptimizationResult:
    allocation: Mapping[str, int]
    strategy: str
    candidates: Sequence[CandidateScore] = ()

    @property
    def best_profit(self) -> float | None:
        if not self.candidates:
            return None
        return self.candidates[0].mean_profit


def _linspace(low: float, high: float, count: int) -> list[float]:
    if count == 1:
        return [low]
    step = (high - low) / (count - 1)
    return [low + step * index for index in range(count)]


def _planning_mean(product_id: str, demand: Mapping[str, DemandParameters]) -> float:
    params = demand.get(product_id)
    return params.mean if params is not None else 0.0


def _score_plan(
    products: Sequence[Product],
    demand: Mapping[str, DemandParameters],
    pair: SupplierPair,
    plan: OrderPlan,
    *,
    runs: int,
    order_change_fee: float,
    rng: random.Random,
    demand_generator: DemandGenerator,
    options_enabled: bool,
    settings: OptimizerSettings,
) -> float:
    profits = [
        simulate_season(
            products,
            demand,
            pair,
            plan,
            order_change_fee=order_change_fee,
            options_enabled=options_enabled,
            use_realized_demand=False,
            rng=rng,
            demand_generator=demand_generator,
            settings=settings,
        ).total_profit
        for _ in range(runs)
    ]
    return statistics.fmean(profits)


def proportional_allocation(
    products: Sequence[Product],
    demand: Mapping[str, DemandParameters],
    pair: SupplierPair,
) -> dict[str, int]:
    """Share the pair's combined capacity in proportion to planning mean demand."""
    means = {product.id: _planning_mean(product.id, demand) for product in products}
    total_mean = sum(means.values())
    if total_mean <= 0:
        return {product_id: 0 for product_id in means}
    capacity = pair.total_capacity
    return {
        product_id: int(capacity * mean / total_mean) for product_id, mean in means.items()
    }


def _linear_sweep(
    products: Sequence[Product],
    demand: Mapping[str, DemandParameters],
    pair: SupplierPair,
    settings: OptimizerSettings,
    score: ScoreFunction,
) -> OptimizationResult:
    product_id = products[0].id
    mean = _planning_mean(product_id, demand)
    best_quantity = int(mean)
    best_profit = float("-inf")
    candidates: list[CandidateScore] = []
    for factor in _linspace(settings.min_factor, settings.max_factor, settings.single_candidates):
        quantity = int(mean * factor)
        plan = split_order_quantity(product_id, quantity, pair, demand)
        mean_profit = score(plan, settings.single_runs)
        candidates.append(
            CandidateScore(
                allocation={product_id: quantity},
                mean_profit=mean_profit,
                runs=settings.single_runs,
                stage="sweep",
            )
        )
        if mean_profit > best_profit:
            best_profit = mean_profit
            best_quantity = quantity
    return OptimizationResult(
        allocation={product_id: best_quantity},
        strategy=STRATEGY_LINEAR_SWEEP,
        candidates=candidates,
    )


def _score_grid(
    product_ids: tuple[str, str],
    first_quantities: Sequence[int],
    second_quantities: Sequence[int],
    *,
    pair: SupplierPair,
    demand: Mapping[str, DemandParameters],
    runs: int,
    stage: str,
    score: ScoreFunction,
) -> list[CandidateScore]:
    scored: list[CandidateScore] = []
    for first in first_quantities:
        for second in second_quantities:
            if first + second > pair.total_capacity:
                continue
            targets = {product_ids[0]: first, product_ids[1]: second}
            plan = split_order(targets, pair, demand)
            scored.append(
                CandidateScore(
                    allocation=targets,
                    mean_profit=score(plan, runs),
                    runs=runs,
                    stage=stage,
                )
            )
    return scored


def _best(candidates: Sequence[CandidateScore]) -> CandidateScore:
    best = candidates[0]
    for candidate in candidates[1:]:
        if candidate.mean_profit > best.mean_profit:
            best = candidate
    return best


def _grid_search(
    products: Sequence[Product],
    demand: Mapping[str, DemandParameters],
    pair: SupplierPair,
    settings: OptimizerSettings,
    score: ScoreFunction,
) -> OptimizationResult:
    product_ids = (products[0].id, products[1].id)
    means = [_planning_mean(product_id, demand) for product_id in product_ids]
    factors = _linspace(settings.min_factor, settings.max_factor, settings.coarse_grid)
    coarse = _score_grid(
        product_ids,
        [int(means[0] * factor) for factor in factors],
        [int(means[1] * factor) for factor in factors],
        pair=pair,
        demand=demand,
        runs=settings.coarse_runs,
        stage="coarse",
        score=score,
    )
    if not coarse:
        warnings.warn(
            "No coarse grid cell fits within supplier capacity; "
            "falling back to proportional allocation.",
            stacklevel=3,
        )
        return OptimizationResult(
            allocation=proportional_allocation(products, demand, pair),
            strategy=STRATEGY_PROPORTIONAL,
        )

    best = _best(coarse)
    fine_factors = _linspace(
        1.0 - settings.fine_span, 1.0 + settings.fine_span, settings.fine_grid
    )
    fine = _score_grid(
        product_ids,
        [int(best.allocation[product_ids[0]] * factor) for factor in fine_factors],
        [int(best.allocation[product_ids[1]] * factor) for factor in fine_factors],
        pair=pair,
        demand=demand,
        runs=settings.fine_runs,
        stage="fine",
        score=score,
    )
    if fine:
        best_fine = _best(fine)
        if best_fine.mean_profit > best.mean_profit:
            best = best_fine
    return OptimizationResult(
        allocation=dict(best.allocation),
        strategy=STRATEGY_GRID_SEARCH,
        candidates=coarse + fine,
    )


def _search(
    products: Sequence[Product],
    demand: Mapping[str, DemandParameters],
    pair: SupplierPair,
    *,
    order_change_fee: float,
    rng: random.Random | None,
    demand_generator: DemandGenerator,
    settings: OptimizerSettings | None,
    options_enabled: bool = False,
) -> OptimizationResult:
    settings = settings if settings is not None else OptimizerSettings()
    rng = rng if rng is not None else random.Random()

    def score(plan: OrderPlan, runs: int) -> float:
        return _score_plan(
            products,
            demand,
            pair,
            plan,
            runs=runs,
            order_change_fee=order_change_fee,
            rng=rng,
            demand_generator=demand_generator,
            options_enabled=options_enabled,
            settings=settings,
        )

    if not products:
        return OptimizationResult(allocation={}, strategy=STRATEGY_EMPTY)
    if len(products) == 1:
        return _linear_sweep(products, demand, pair, settings, score)
    if len(products) == 2:
        return _grid_search(products, demand, pair, settings, score)
    return OptimizationResult(
        allocation=proportional_allocation(products, demand, pair),
        strategy=STRATEGY_PROPORTIONAL,
    )


def optimize_order_quantities(
    products: Sequence[Product],
    demand: Mapping[str, DemandParameters],
    pair: SupplierPair,
    *,
    order_change_fee: float = 0.0,
    rng: random.Random | None = None,
    demand_generator: DemandGenerator = sample_demand,
    settings: OptimizerSettings | None = None,
) -> dict[str, int]:
    """Pick the per-product order quantity with the highest mean season profit.

    One product is swept linearly, two products are grid searched and three or
    more share capacity in proportion to demand. Scoring runs never value
    options, which keeps the simulation from re-entering the optimizer.
    """
    result = _search(
        products,
        demand,
        pair,
        order_change_fee=order_change_fee,
        rng=rng,
        demand_generator=demand_generator,
        settings=settings,
    )
    return dict(result.allocation)


def optimize_order_quantities_with_diagnostics(
    products: Sequence[Product],
    demand: Mapping[str, DemandParameters],
    pair: SupplierPair,
    *,
    order_change_fee: float = 0.0,
    rng: random.Random | None = None,
    demand_generator: DemandGenerator = sample_demand,
    settings: OptimizerSettings | None = None,
    options_enabled: bool = True,
) -> OptimizationResult:
    """Initial planning search that keeps the top candidates.

    Unlike :func:`optimize_order_quantities`, candidates are scored on seasons
    that value the surge revision option by default, so a quantity that leaves
    room for a profitable revision is credited for it. Revisions triggered
    inside those seasons re-run the search without options.
    """
    settings = settings if settings is not None else OptimizerSettings()
    result = _search(
        products,
        demand,
        pair,
        order_change_fee=order_change_fee,
        rng=rng,
        demand_generator=demand_generator,
        settings=settings,
        options_enabled=options_enabled,
    )
    ranked = sorted(result.candidates, key=lambda item: item.mean_profit, reverse=True)
    return OptimizationResult(
        allocation=dict(result.allocation),
        strategy=result.strategy,
        candidates=ranked[: settings.top_candidates],
    )
