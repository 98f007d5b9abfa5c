"""Plotting helpers for season ledgers and Monte Carlo profit distributions."""

from __future__ import annotations

import warnings

import matplotlib.pyplot as plt
import pandas as pd

from .io import season_ledger_to_dataframe
from .models import MonteCarloStatistics, SeasonResult


def _normalize_ledger(ledger: SeasonResult | pd.DataFrame) -> pd.DataFrame:
    if isinstance(ledger, pd.DataFrame):
        return ledger.copy()
    return season_ledger_to_dataframe(ledger, library="pandas")


def plot_season_ledger(
    ledger: SeasonResult | pd.DataFrame,
    *,
    ax: plt.Axes | None = None,
    title: str | None = None,
) -> plt.Axes:
    """Plot demand, sales and ending inventory per month with profit on a twin axis."""
    frame = _normalize_ledger(ledger)
    if frame.empty:
        raise ValueError("Ledger has no periods to plot.")
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 5))

    positions = list(range(len(frame)))
    ax.bar(positions, frame["incoming"], color="lightgray", label="Incoming")
    ax.plot(positions, frame["demand"], marker="o", label="Demand")
    ax.plot(positions, frame["units_sold"], marker="s", label="Units sold")
    ax.step(positions, frame["inventory_end"], where="mid", label="Ending inventory")

    changes = frame.loc[frame["order_change_cost"] > 0]
    for position in changes.index:
        ax.axvline(position, color="tab:red", linestyle=":", linewidth=1)

    profit_ax = ax.twinx()
    profit_ax.plot(
        positions,
        frame["profit"].cumsum(),
        color="black",
        linestyle="--",
        label="Cumulative profit",
    )
    profit_ax.set_ylabel("Cumulative profit")

    ax.set_xticks(positions)
    ax.set_xticklabels(frame["month"])
    ax.set_ylabel("Units")
    ax.set_title(title or "Season ledger")
    handles, labels = ax.get_legend_handles_labels()
    profit_handles, profit_labels = profit_ax.get_legend_handles_labels()
    ax.legend(handles + profit_handles, labels + profit_labels, loc="upper left")
    return ax


def plot_profit_distribution(
    stats: MonteCarloStatistics,
    *,
    ax: plt.Axes | None = None,
    bins: int = 30,
    title: str | None = None,
) -> plt.Axes:
    """Histogram of season profits with mean and 10/50/90th percentile markers."""
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 4))
    if stats.profits:
        ax.hist(list(stats.profits), bins=bins, color="tab:blue", alpha=0.6)
    else:
        warnings.warn(
            "Statistics carry no profit samples; plotting summary markers only.",
            stacklevel=2,
        )
    ax.axvline(stats.mean_profit, color="black", label="Mean")
    for value, label, style in (
        (stats.percentile_10, "P10", ":"),
        (stats.percentile_50, "Median", "--"),
        (stats.percentile_90, "P90", ":"),
    ):
        ax.axvline(value, color="tab:red", linestyle=style, label=label)
    ax.set_xlabel("Season profit")
    ax.set_ylabel("Runs")
    ax.set_title(
        title or f"{stats.base_supplier} + {stats.surge_supplier} ({stats.num_runs} runs)"
    )
    ax.legend()
    return ax
