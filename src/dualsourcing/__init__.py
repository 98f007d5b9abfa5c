"""Seasonal dual-sourcing simulation and order planning library."""

from importlib.metadata import PackageNotFoundError, version as _dist_version

try:
    from ._version import version as __version__
except ModuleNotFoundError:
    try:
        __version__ = _dist_version("dualsourcing")
    except PackageNotFoundError:
        __version__ = "0.0.0"

from .models import (
    MONTHS,
    NO_PENDING_CHANGE,
    SEASON_PERIODS,
    DemandParameters,
    MonteCarloStatistics,
    NoPendingChange,
    OrderPlan,
    PendingChange,
    PeriodResult,
    Product,
    SeasonResult,
    Supplier,
    SupplierPair,
)
from .demand import DemandGenerator, expected_demand, sample_demand, spawn_streams
from .capacity import (
    CapacityError,
    CapacityViolation,
    empty_order,
    remaining_capacity,
    split_order,
    split_order_quantity,
    validate_capacity,
)
from .service_levels import critical_fractile, newsvendor_z, normal_quantile
from .options import OptionValuation
from .simulation import revise_surge_order, simulate_season
from .optimization import (
    CandidateScore,
    OptimizationResult,
    OptimizerSettings,
    optimize_order_quantities,
    optimize_order_quantities_with_diagnostics,
    proportional_allocation,
)
from .monte_carlo import (
    evaluate_order_plan,
    percentile,
    plan_for_allocation,
    rank_supplier_pairs,
    summarize_profits,
)
from .pairing import generate_supplier_pairs, is_pair_promising, quick_profit_estimate
from .io import (
    monte_carlo_statistics_to_dataframe,
    monte_carlo_statistics_to_dicts,
    order_plan_to_dicts,
    season_ledger_to_dataframe,
    season_ledger_to_dicts,
)
try:
    from .plotting import plot_profit_distribution, plot_season_ledger
    _HAS_PLOTTING = True
except ModuleNotFoundError:
    plot_profit_distribution = None
    plot_season_ledger = None
    _HAS_PLOTTING = False

__all__ = [
    "__version__",
    "MONTHS",
    "NO_PENDING_CHANGE",
    "SEASON_PERIODS",
    "CandidateScore",
    "CapacityError",
    "CapacityViolation",
    "DemandGenerator",
    "DemandParameters",
    "MonteCarloStatistics",
    "NoPendingChange",
    "OptimizationResult",
    "OptimizerSettings",
    "OptionValuation",
    "OrderPlan",
    "PendingChange",
    "PeriodResult",
    "Product",
    "SeasonResult",
    "Supplier",
    "SupplierPair",
    "critical_fractile",
    "empty_order",
    "evaluate_order_plan",
    "expected_demand",
    "generate_supplier_pairs",
    "is_pair_promising",
    "monte_carlo_statistics_to_dataframe",
    "monte_carlo_statistics_to_dicts",
    "newsvendor_z",
    "normal_quantile",
    "optimize_order_quantities",
    "optimize_order_quantities_with_diagnostics",
    "order_plan_to_dicts",
    "percentile",
    "plan_for_allocation",
    "proportional_allocation",
    "quick_profit_estimate",
    "rank_supplier_pairs",
    "remaining_capacity",
    "revise_surge_order",
    "sample_demand",
    "season_ledger_to_dataframe",
    "season_ledger_to_dicts",
    "simulate_season",
    "spawn_streams",
    "split_order",
    "split_order_quantity",
    "summarize_profits",
    "validate_capacity",
]

if _HAS_PLOTTING:
    __all__.extend(["plot_profit_distribution", "plot_season_ledger"])
