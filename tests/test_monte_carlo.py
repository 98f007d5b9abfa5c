import random

import pytest

from dualsourcing import (
    SEASON_PERIODS,
    CapacityError,
    DemandParameters,
    OptimizerSettings,
    OrderPlan,
    Product,
    Supplier,
    SupplierPair,
    evaluate_order_plan,
    expected_demand,
    generate_supplier_pairs,
    percentile,
    plan_for_allocation,
    rank_supplier_pairs,
    split_order_quantity,
    summarize_profits,
)


def _scenario_a():
    products = [Product(id="A", selling_price=10.0, liquidation_price=0.0, monthly_holding_cost=0.0)]
    demand = {
        "A": DemandParameters(
            mean=1000.0, std_dev=200.0, realized_mean=1000.0, realized_std_dev=200.0
        )
    }
    pair = SupplierPair(
        base=Supplier(id=0, name="Base", fixed_capacity=800, lead_time=0, unit_costs={"A": 5.0}),
        surge=Supplier(id=1, name="Surge", fixed_capacity=400, lead_time=0, unit_costs={"A": 5.0}),
    )
    return products, demand, pair


def test_percentile_median_of_odd_sample():
    values = sorted([7.0, 1.0, 9.0, 3.0, 5.0, 2.0, 8.0, 4.0, 6.0])

    assert percentile(values, 50) == 5.0
    assert percentile(values, 0) == 1.0
    assert percentile(values, 100) == 9.0


def test_percentile_is_monotone_and_clamped():
    values = sorted(random.Random(5).uniform(-100, 100) for _ in range(37))

    results = [percentile(values, p) for p in range(0, 101, 5)]

    assert results == sorted(results)
    assert percentile(values, 150) == values[-1]
    assert percentile(values, -10) == values[0]


def test_percentile_uses_nearest_rank_index():
    values = [10.0, 20.0, 30.0, 40.0]

    # round(0.25 * 3) == 1, round(0.9 * 3) == 3
    assert percentile(values, 25) == 20.0
    assert percentile(values, 90) == 40.0


def test_percentile_requires_values():
    with pytest.raises(ValueError):
        percentile([], 50)


def test_scenario_a_mean_profit_near_unconstrained_margin():
    products, demand, pair = _scenario_a()
    plan = split_order_quantity("A", min(pair.total_capacity, 1000), pair, demand)

    stats = evaluate_order_plan(products, demand, pair, plan, 200, seed=42)

    assert plan.total == 1000
    assert stats.num_runs == 200
    assert stats.mean_profit / SEASON_PERIODS == pytest.approx(5000.0, rel=0.15)
    assert stats.min_profit <= stats.percentile_10 <= stats.percentile_25
    assert stats.percentile_25 <= stats.percentile_50 <= stats.percentile_75
    assert stats.percentile_75 <= stats.percentile_90 <= stats.max_profit
    assert stats.std_dev_profit > 0
    assert stats.allocation == {"A": 1000}
    assert stats.base_supplier == "Base"
    assert stats.surge_supplier_lead_time == 0


def test_deterministic_demand_gives_degenerate_distribution():
    products, demand, pair = _scenario_a()
    plan = OrderPlan(base={"A": 800}, surge={"A": 200})

    stats = evaluate_order_plan(
        products, demand, pair, plan, 10, demand_generator=expected_demand
    )

    assert stats.std_dev_profit == 0.0
    assert stats.min_profit == stats.max_profit == stats.percentile_50
    assert stats.mean_profit == pytest.approx(SEASON_PERIODS * 5000.0)
    assert len(stats.profits) == 10


def test_seeded_evaluations_are_reproducible():
    products, demand, pair = _scenario_a()
    plan = OrderPlan(base={"A": 700}, surge={"A": 300})

    first = evaluate_order_plan(products, demand, pair, plan, 25, seed=9)
    second = evaluate_order_plan(products, demand, pair, plan, 25, seed=9)

    assert first.profits == second.profits


def test_realized_demand_drives_evaluation():
    products, _, pair = _scenario_a()
    biased = {"A": DemandParameters(mean=1000.0, std_dev=200.0, realized_mean=500.0, realized_std_dev=100.0)}
    plan = OrderPlan(base={"A": 500}, surge={"A": 0})

    stats = evaluate_order_plan(
        products, biased, pair, plan, 3, demand_generator=expected_demand
    )

    assert stats.mean_profit == pytest.approx(SEASON_PERIODS * 500 * 5.0)


def test_evaluation_rejects_bad_inputs():
    products, demand, pair = _scenario_a()

    with pytest.raises(ValueError):
        evaluate_order_plan(products, demand, pair, OrderPlan(base={"A": 10}), 0)
    with pytest.raises(CapacityError) as excinfo:
        evaluate_order_plan(products, demand, pair, OrderPlan(surge={"A": 401}), 5)
    assert excinfo.value.violation.supplier_name == "Surge"


def test_summarize_profits_uses_population_std_dev():
    _, demand, pair = _scenario_a()
    plan = OrderPlan(base={"A": 1})

    stats = summarize_profits([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0], pair=pair, plan=plan)

    assert stats.mean_profit == 5.0
    assert stats.std_dev_profit == 2.0


def test_plan_for_allocation_dispatches_on_product_count():
    _, demand, pair = _scenario_a()

    single = plan_for_allocation({"A": 1300}, pair, demand)
    multi = plan_for_allocation({"A": 900, "B": 300}, pair, demand)

    assert single.total == 1200
    assert multi.total_base <= 800
    assert multi.total_surge <= 400


def test_rank_supplier_pairs_orders_by_mean_profit():
    products = [Product(id="A", selling_price=20.0, liquidation_price=5.0, monthly_holding_cost=1.0)]
    demand = {"A": DemandParameters(mean=500.0, std_dev=80.0)}
    suppliers = [
        Supplier(id=0, name="FarFarAway", fixed_capacity=600, lead_time=4, setup_cost=1000.0, unit_costs={"A": 8.0}),
        Supplier(id=1, name="FarAway", fixed_capacity=600, lead_time=3, setup_cost=2000.0, unit_costs={"A": 8.0}),
        Supplier(id=2, name="PrettyClose", fixed_capacity=350, lead_time=0, setup_cost=1000.0, unit_costs={"A": 9.0}),
    ]

    results = rank_supplier_pairs(
        products,
        demand,
        generate_supplier_pairs(suppliers),
        5,
        seed=1,
        settings=OptimizerSettings(single_runs=2),
    )

    assert len(results) == 2
    assert results[0].mean_profit >= results[1].mean_profit
    assert {stats.base_supplier for stats in results} == {"FarFarAway", "FarAway"}
    assert all(stats.surge_supplier == "PrettyClose" for stats in results)
