"""Tabular export of season ledgers, allocations and Monte Carlo statistics."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .models import MonteCarloStatistics, OrderPlan, SeasonResult


def season_ledger_to_dicts(
    result: SeasonResult,
    *,
    include_products: bool = False,
) -> list[dict[str, str | int | float | None]]:
    """Flatten a season ledger, optionally adding per-product columns."""
    rows: list[dict[str, str | int | float | None]] = []
    for row in result.periods:
        entry: dict[str, str | int | float | None] = {
            "period": row.period,
            "month": row.month,
            "inventory_start": row.inventory_start,
            "incoming": row.incoming,
            "inventory_after_incoming": row.inventory_after_incoming,
            "demand": row.demand,
            "units_sold": row.units_sold,
            "inventory_end": row.inventory_end,
            "base_quantity": row.base_quantity,
            "surge_quantity": row.surge_quantity,
            "revenue": row.revenue,
            "production_cost": row.production_cost,
            "holding_cost": row.holding_cost,
            "setup_cost": row.setup_cost,
            "liquidation_revenue": row.liquidation_revenue,
            "order_change_cost": row.order_change_cost,
            "profit": row.profit,
            "option_value": row.option_value,
            "pending_effective_period": row.pending_effective_period,
        }
        if include_products:
            for product_id, value in row.demand_by_product.items():
                entry[f"demand_{product_id}"] = value
            for product_id, value in row.sold_by_product.items():
                entry[f"sold_{product_id}"] = value
            for product_id, value in row.inventory_end_by_product.items():
                entry[f"inventory_end_{product_id}"] = value
        rows.append(entry)
    return rows


def order_plan_to_dicts(plan: OrderPlan) -> list[dict[str, str | int]]:
    return [
        {
            "product_id": product_id,
            "base_quantity": plan.base_quantity(product_id),
            "surge_quantity": plan.surge_quantity(product_id),
            "total_quantity": plan.quantity_for(product_id),
        }
        for product_id in plan.product_ids
    ]


def monte_carlo_statistics_to_dicts(
    results: Iterable[MonteCarloStatistics],
    *,
    allocation_prefix: str = "qty_",
) -> list[dict[str, str | int | float]]:
    serialized: list[dict[str, str | int | float]] = []
    for stats in results:
        entry: dict[str, str | int | float] = {
            "base_supplier": stats.base_supplier,
            "base_supplier_lead_time": stats.base_supplier_lead_time,
            "surge_supplier": stats.surge_supplier,
            "surge_supplier_lead_time": stats.surge_supplier_lead_time,
            "total_quantity": stats.total_quantity,
            "num_runs": stats.num_runs,
            "mean_profit": stats.mean_profit,
            "std_dev_profit": stats.std_dev_profit,
            "min_profit": stats.min_profit,
            "max_profit": stats.max_profit,
            "percentile_10": stats.percentile_10,
            "percentile_25": stats.percentile_25,
            "percentile_50": stats.percentile_50,
            "percentile_75": stats.percentile_75,
            "percentile_90": stats.percentile_90,
        }
        for product_id, quantity in stats.allocation.items():
            entry[f"{allocation_prefix}{product_id}"] = quantity
        serialized.append(entry)
    return serialized


def _to_dataframe(data: list[Mapping[str, object]], *, library: str, caller: str):
    if library == "pandas":
        try:
            import pandas as pd  # type: ignore
        except ModuleNotFoundError as exc:
            raise ModuleNotFoundError(
                f"pandas is required for {caller}(library='pandas')."
            ) from exc
        return pd.DataFrame(data)
    if library == "polars":
        try:
            import polars as pl  # type: ignore
        except ModuleNotFoundError as exc:
            raise ModuleNotFoundError(
                f"polars is required for {caller}(library='polars')."
            ) from exc
        return pl.DataFrame(data)
    raise ValueError("library must be 'pandas' or 'polars'.")


def season_ledger_to_dataframe(
    result: SeasonResult,
    *,
    library: str = "pandas",
    include_products: bool = False,
):
    """Convert a season ledger into a pandas or polars DataFrame."""
    data = season_ledger_to_dicts(result, include_products=include_products)
    return _to_dataframe(data, library=library, caller="season_ledger_to_dataframe")


def monte_carlo_statistics_to_dataframe(
    results: Iterable[MonteCarloStatistics],
    *,
    library: str = "pandas",
    allocation_prefix: str = "qty_",
):
    data = monte_carlo_statistics_to_dicts(results, allocation_prefix=allocation_prefix)
    return _to_dataframe(
        data, library=library, caller="monte_carlo_statistics_to_dataframe"
    )
