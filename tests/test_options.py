import pytest

from dualsourcing import (
    DemandParameters,
    OptionValuation,
    Product,
    Supplier,
    SupplierPair,
    critical_fractile,
    newsvendor_z,
    normal_quantile,
)


def _valuation(**overrides):
    values = dict(
        mean_demand=1000.0,
        std_dev_demand=200.0,
        selling_price=10.0,
        holding_cost=1.0,
        surge_unit_cost=5.0,
        order_change_fee=100.0,
    )
    values.update(overrides)
    return OptionValuation(**values)


@pytest.mark.parametrize("current_period", [7, 8, 12])
def test_option_has_no_value_without_remaining_periods(current_period):
    valuation = _valuation()

    assert valuation.value_option(500, 250, current_period) == 0.0


def test_single_remaining_period_values_immediate_increase():
    valuation = _valuation()

    # forecast 1000, target 1000 + 1.645 * 200, margin 5, fee 100
    assert valuation.value_option(800, 0, 6) == pytest.approx(5 * 529 - 100)


def test_single_remaining_period_values_holding_savings_on_decrease():
    valuation = _valuation()

    assert valuation.value_option(2000, 0, 6) == pytest.approx(671 * 1.0 - 100)


def test_low_fractile_targets_the_forecast():
    valuation = _valuation(surge_unit_cost=9.0, holding_cost=5.0, order_change_fee=0.0)

    assert valuation.value_option(800, 0, 6) == pytest.approx(200.0)


def test_option_value_is_non_negative_and_decreases_with_fee():
    values = [
        _valuation(order_change_fee=fee).value_option(900, 100, 0)
        for fee in (0.0, 500.0, 5_000.0, 50_000.0)
    ]

    assert all(value >= 0.0 for value in values)
    assert values == sorted(values, reverse=True)
    assert values[-1] == 0.0


def test_option_value_without_demand_is_zero():
    valuation = _valuation(mean_demand=0.0, std_dev_demand=0.0)

    assert valuation.value_option(100, 0, 0) == 0.0


def test_option_value_without_variability_is_finite():
    valuation = _valuation(std_dev_demand=0.0, order_change_fee=0.0)

    value = valuation.value_option(800, 0, 5)

    assert value == pytest.approx(5 * 200)


def test_for_products_aggregates_demand_and_costs():
    products = [
        Product(id="A", selling_price=10.0, monthly_holding_cost=1.0),
        Product(id="B", selling_price=20.0, monthly_holding_cost=3.0),
    ]
    demand = {
        "A": DemandParameters(mean=600.0, std_dev=30.0),
        "B": DemandParameters(mean=400.0, std_dev=40.0),
    }
    pair = SupplierPair(
        base=Supplier(id=0, name="Far", fixed_capacity=500, lead_time=2),
        surge=Supplier(
            id=1,
            name="Near",
            fixed_capacity=500,
            lead_time=0,
            unit_costs={"A": 6.0, "B": 11.0},
        ),
    )

    valuation = OptionValuation.for_products(products, demand, pair, order_change_fee=25.0)

    assert valuation.mean_demand == pytest.approx(1000.0)
    assert valuation.std_dev_demand == pytest.approx(50.0)
    assert valuation.selling_price == pytest.approx(14.0)
    assert valuation.holding_cost == pytest.approx(1.8)
    assert valuation.surge_unit_cost == pytest.approx(8.0)
    assert valuation.order_change_fee == 25.0


def test_normal_z_mode_uses_inverse_normal():
    assert newsvendor_z(0.95) == 1.645
    assert newsvendor_z(0.3) == 0.0
    assert newsvendor_z(0.95, "normal") == pytest.approx(1.6449, abs=1e-3)
    assert newsvendor_z(0.3, "normal") < 0.0
    assert normal_quantile(0.5) == pytest.approx(0.0, abs=1e-9)
    assert normal_quantile(0.975) == pytest.approx(1.96, abs=1e-3)
    assert normal_quantile(0.01) == pytest.approx(-2.3263, abs=1e-3)


def test_unknown_z_mode_is_rejected():
    with pytest.raises(ValueError):
        _valuation(z_mode="exact")


def test_critical_fractile_handles_zero_costs():
    assert critical_fractile(5.0, 1.0) == pytest.approx(5.0 / 6.0)
    assert critical_fractile(0.0, 0.0) == 0.0
