import pytest

from dualsourcing import (
    CapacityError,
    DemandParameters,
    OrderPlan,
    Supplier,
    SupplierPair,
    empty_order,
    remaining_capacity,
    split_order,
    split_order_quantity,
    validate_capacity,
)


def _pair(base_capacity, surge_capacity):
    return SupplierPair(
        base=Supplier(id=0, name="Overseas", fixed_capacity=base_capacity, lead_time=3),
        surge=Supplier(id=1, name="Domestic", fixed_capacity=surge_capacity, lead_time=0),
    )


def test_split_fills_base_then_surge_without_variability():
    demand = {"A": DemandParameters(mean=1000.0, std_dev=0.0)}

    plan = split_order({"A": 1000}, _pair(600, 600), demand)

    assert plan.base == {"A": 600}
    assert plan.surge == {"A": 400}
    assert plan.total == 1000


def test_split_shifts_variable_products_to_surge():
    demand = {"A": DemandParameters(mean=100.0, std_dev=25.0)}

    plan = split_order({"A": 100}, _pair(1000, 1000), demand)

    assert plan.base == {"A": 80}
    assert plan.surge == {"A": 20}


def test_split_consumes_capacity_in_iteration_order():
    demand = {
        "A": DemandParameters(mean=500.0, std_dev=0.0),
        "B": DemandParameters(mean=500.0, std_dev=0.0),
    }

    plan = split_order({"A": 500, "B": 500}, _pair(600, 200), demand)

    assert plan.base == {"A": 500, "B": 100}
    assert plan.surge == {"A": 0, "B": 200}
    assert plan.quantity_for("B") == 300


@pytest.mark.parametrize(
    "targets",
    [
        {"A": 5000, "B": 10, "C": 300},
        {"A": 0, "B": 0, "C": 0},
        {"A": 700, "B": 700, "C": 700},
        {"C": 1200, "A": 1},
    ],
)
def test_split_never_exceeds_capacity(targets):
    demand = {
        "A": DemandParameters(mean=100.0, std_dev=60.0),
        "B": DemandParameters(mean=100.0, std_dev=10.0),
    }
    pair = _pair(650, 350)

    plan = split_order(targets, pair, demand)

    assert plan.total_base <= pair.base.fixed_capacity
    assert plan.total_surge <= pair.surge.fixed_capacity
    assert validate_capacity(plan, pair) is None
    for product_id, target in targets.items():
        assert plan.quantity_for(product_id) <= target


def test_single_product_split_reallocates_shortfall_to_base():
    demand = {"A": DemandParameters(mean=1000.0, std_dev=250.0)}

    plan = split_order_quantity("A", 1000, _pair(900, 100), demand)

    assert plan.base == {"A": 900}
    assert plan.surge == {"A": 100}


def test_single_product_split_drops_what_no_supplier_can_take():
    demand = {"A": DemandParameters(mean=1000.0, std_dev=0.0)}

    plan = split_order_quantity("A", 1000, _pair(300, 200), demand)

    assert plan.total == 500


def test_split_without_demand_parameters_uses_base_first():
    plan = split_order_quantity("X", 50, _pair(30, 100), {})

    assert plan.base == {"X": 30}
    assert plan.surge == {"X": 20}


def test_validate_capacity_reports_supplier_and_totals():
    pair = _pair(600, 300)

    base_violation = validate_capacity(
        OrderPlan(base={"A": 400, "B": 300}, surge={"A": 10}), pair
    )
    surge_violation = validate_capacity(OrderPlan(base={"A": 10}, surge={"A": 301}), pair)

    assert base_violation is not None
    assert base_violation.role == "base"
    assert base_violation.supplier_name == "Overseas"
    assert base_violation.capacity == 600
    assert base_violation.requested == 700
    assert "Overseas" in base_violation.message
    assert surge_violation is not None
    assert surge_violation.supplier_name == "Domestic"
    assert surge_violation.requested == 301
    assert validate_capacity(OrderPlan(base={"A": 600}, surge={"A": 300}), pair) is None


def test_capacity_error_carries_violation():
    violation = validate_capacity(OrderPlan(base={"A": 10}), _pair(5, 5))

    error = CapacityError(violation)

    assert isinstance(error, ValueError)
    assert error.violation is violation
    assert str(error) == violation.message


def test_remaining_capacity_saturates_at_zero():
    pair = _pair(100, 50)

    assert remaining_capacity(OrderPlan(base={"A": 40}, surge={"A": 10}), pair) == (60, 40)
    assert remaining_capacity(OrderPlan(base={"A": 400}, surge={"A": 90}), pair) == (0, 0)


def test_empty_order_has_zero_quantities():
    plan = empty_order(["A", "B"])

    assert plan.base == {"A": 0, "B": 0}
    assert plan.surge == {"A": 0, "B": 0}
    assert plan.total == 0


def test_order_plan_rejects_negative_quantities():
    with pytest.raises(ValueError):
        OrderPlan(base={"A": -1})
