"""
Tests for the Daily Budget Allocators

Test coverage includes:
- The refrigerator + television reference scenario
- Budget bound, coverage, monotonicity and determinism
- Refrigeration reservation when the budget is tight
- Input validation
- The linear programming allocator
"""

import pulp
import pytest

from energy_planner.optimization.budget_allocator import (
    allocate_budget,
    get_allocation_summary,
    sort_by_priority,
    validate_budget,
)
from energy_planner.optimization.device_models import (
    Device,
    DeviceAllocation,
    OptimizationConfig,
)
from energy_planner.optimization.exceptions import InvalidDeviceError, InvalidInputError
from energy_planner.optimization.milp_allocator import MILPBudgetAllocator


# =============================================================================
# Greedy Allocator Tests
# =============================================================================


class TestAllocateBudget:
    """Test suite for the greedy allocator."""

    def test_fridge_and_tv_scenario(self, fridge, tv):
        """Test the reference scenario allocates fridge 8.4h and TV 5h."""
        result = allocate_budget([fridge, tv], 2.00, 0.15)

        assert result["fridge"].hours == pytest.approx(8.4)
        assert result["fridge"].cost == pytest.approx(1.89)
        assert result["tv"].hours == pytest.approx(5.0)
        assert result["tv"].cost == pytest.approx(0.09)

    def test_result_keeps_input_order(self, household):
        result = allocate_budget(household, 3.0, 0.15)
        assert list(result.keys()) == [d.id for d in household]

    def test_every_device_covered(self, household):
        """Test unfunded devices still appear with zero hours."""
        result = allocate_budget(household, 0.5, 0.15)

        assert set(result) == {d.id for d in household}
        for allocation in result.values():
            assert allocation.hours >= 0
            assert allocation.cost >= 0

    @pytest.mark.parametrize("budget", [0.0, 0.05, 0.5, 1.0, 2.0, 3.7, 10.0, 100.0])
    def test_total_within_budget(self, household, budget):
        result = allocate_budget(household, budget, 0.15)
        total = sum(a.cost for a in result.values())
        assert total <= budget + 0.01

    def test_hours_never_exceed_typical_usage(self, household):
        result = allocate_budget(household, 1000.0, 0.15)
        for device in household:
            assert result[device.id].hours <= device.hours_per_day

    def test_generous_budget_funds_everything(self, household):
        result = allocate_budget(household, 1000.0, 0.15)
        for device in household:
            assert result[device.id].hours == pytest.approx(device.hours_per_day)

    def test_monotonic_in_budget(self, household):
        """Test a larger budget never gives any device fewer hours."""
        budgets = [0.0, 0.1, 0.25, 0.5, 0.9, 1.3, 2.0, 2.6, 4.0, 8.0, 20.0]
        previous = None
        for budget in budgets:
            result = allocate_budget(household, budget, 0.15)
            if previous is not None:
                for device_id, allocation in result.items():
                    assert allocation.hours >= previous[device_id].hours
            previous = result

    def test_deterministic(self, household):
        first = allocate_budget(household, 2.5, 0.15)
        second = allocate_budget(household, 2.5, 0.15)
        assert first == second

    def test_zero_budget_gives_zero_hours(self, household):
        result = allocate_budget(household, 0.0, 0.15)
        assert all(a.hours == 0.0 and a.cost == 0.0 for a in result.values())

    def test_tight_budget_goes_to_refrigeration(self, fridge, tv):
        """Test the fridge reservation is funded before anything else."""
        # 4h of fridge costs 0.90, so nothing remains for the TV
        result = allocate_budget([tv, fridge], 0.90, 0.15)

        assert result["fridge"].hours == pytest.approx(4.0)
        assert result["tv"].hours == 0.0

    def test_partial_reservation_when_unaffordable(self, fridge, tv):
        result = allocate_budget([fridge, tv], 0.45, 0.15)

        assert result["fridge"].hours == pytest.approx(2.0)
        assert result["tv"].hours == 0.0

    def test_refrigeration_detected_by_name(self, tv):
        freezer = Device(
            id="chest",
            name="Garage Freezer",
            wattage=1500,
            priority=1,
            hours_per_day=24,
        )
        result = allocate_budget([tv, freezer], 0.90, 0.15)
        assert result["chest"].hours == pytest.approx(4.0)

    def test_priority_order_then_wattage(self):
        devices = [
            Device(id="a", name="A", wattage=900, priority=3, hours_per_day=2),
            Device(id="b", name="B", wattage=100, priority=3, hours_per_day=2),
            Device(id="c", name="C", wattage=500, priority=5, hours_per_day=2),
        ]
        assert [d.id for d in sort_by_priority(devices)] == ["c", "b", "a"]

    def test_small_allocations_dropped(self):
        """Test allocations under 0.1h are reported as zero."""
        heater = Device(id="heater", name="Heater", wattage=3000, priority=3, hours_per_day=5)
        # 0.04 buys 0.0889h of a 3 kW heater at 0.15/kWh
        result = allocate_budget([heater], 0.04, 0.15)
        assert result["heater"].hours == 0.0
        assert result["heater"].cost == 0.0

    def test_hours_and_costs_floored(self, tv):
        result = allocate_budget([tv], 0.05, 0.15)
        # 0.05 buys 2.78h of TV, floored to 2.7h
        assert result["tv"].hours == pytest.approx(2.7)
        assert result["tv"].cost == pytest.approx(0.04)

    def test_reserved_min_hours_configurable(self, fridge, tv):
        config = OptimizationConfig(reserved_min_hours=2.0)
        result = allocate_budget([tv, fridge], 0.45, 0.15, config=config)
        assert result["fridge"].hours == pytest.approx(2.0)


class TestAllocatorValidation:
    """Test suite for allocator input validation."""

    def test_empty_device_list(self):
        with pytest.raises(InvalidInputError):
            allocate_budget([], 2.0, 0.15)

    def test_duplicate_ids(self, tv):
        with pytest.raises(InvalidInputError, match="Duplicate"):
            allocate_budget([tv, tv], 2.0, 0.15)

    @pytest.mark.parametrize("price", [0.0, -0.1])
    def test_non_positive_price(self, tv, price):
        with pytest.raises(InvalidInputError):
            allocate_budget([tv], 2.0, price)

    def test_negative_budget(self, tv):
        with pytest.raises(InvalidInputError):
            allocate_budget([tv], -1.0, 0.15)

    def test_device_edited_after_creation(self, tv):
        tv.wattage = -5
        with pytest.raises(InvalidDeviceError):
            allocate_budget([tv], 2.0, 0.15)

    def test_priority_edited_after_creation(self, tv):
        tv.priority = 9
        with pytest.raises(InvalidDeviceError):
            allocate_budget([tv], 2.0, 0.15)

    def test_frequency_edited_after_creation(self, tv):
        tv.frequency = "hourly"
        with pytest.raises(InvalidDeviceError):
            allocate_budget([tv], 2.0, 0.15)

    def test_frequency_string_coerced_on_revalidation(self, tv):
        tv.frequency = "weekends"
        allocate_budget([tv], 2.0, 0.15)
        assert tv.to_dict()["frequency"] == "weekends"

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_budget_and_price(self, tv, value):
        with pytest.raises(InvalidInputError):
            allocate_budget([tv], value, 0.15)
        with pytest.raises(InvalidInputError):
            allocate_budget([tv], 2.0, value)

    def test_non_device_entry(self):
        with pytest.raises(InvalidDeviceError):
            allocate_budget([{"id": "tv"}], 2.0, 0.15)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            allocate_budget([], 2.0, 0.15)


class TestBudgetValidation:
    """Test suite for post-hoc budget checks."""

    def test_valid_allocation(self, fridge, tv):
        result = allocate_budget([fridge, tv], 2.0, 0.15)
        check = validate_budget(result, 2.0)

        assert check.valid
        assert check.total_cost == pytest.approx(1.98)

    def test_invalid_allocation(self):
        allocation = {"x": DeviceAllocation(hours=3.0, cost=1.5)}
        check = validate_budget(allocation, 1.0)

        assert not check.valid
        assert check.total_cost == 1.5

    def test_allocation_summary(self):
        allocation = {
            "fridge": DeviceAllocation(hours=8.4, cost=1.89),
            "tv": DeviceAllocation(hours=5.0, cost=0.09),
        }
        summary = get_allocation_summary(allocation)
        assert summary == "fridge: 8.4h ($1.89), tv: 5.0h ($0.09) | Total: $1.98"


# =============================================================================
# Linear Programming Allocator Tests
# =============================================================================


class TestMILPBudgetAllocator:
    """Test suite for the PuLP allocator."""

    def test_fridge_and_tv_scenario(self, fridge, tv):
        allocator = MILPBudgetAllocator()
        result = allocator.allocate([fridge, tv], 2.00, 0.15)

        assert result["fridge"].hours == pytest.approx(8.4)
        assert result["tv"].hours == pytest.approx(5.0)
        assert sum(a.cost for a in result.values()) <= 2.00 + 0.01

    def test_refrigeration_reserved_first(self, fridge, tv):
        allocator = MILPBudgetAllocator()
        result = allocator.allocate([tv, fridge], 0.90, 0.15)

        assert result["fridge"].hours == pytest.approx(4.0, abs=0.1)
        assert result["tv"].hours == 0.0

    @pytest.mark.parametrize("budget", [0.0, 0.5, 2.0, 50.0])
    def test_budget_bound_and_coverage(self, household, budget):
        allocator = MILPBudgetAllocator()
        result = allocator.allocate(household, budget, 0.15)

        assert list(result.keys()) == [d.id for d in household]
        assert sum(a.cost for a in result.values()) <= budget + 0.01
        for device in household:
            assert 0 <= result[device.id].hours <= device.hours_per_day

    def test_problem_stats(self, fridge, tv):
        allocator = MILPBudgetAllocator()
        assert allocator.get_problem_stats() == {"status": "not_built"}

        allocator.allocate([fridge, tv], 2.0, 0.15)
        stats = allocator.get_problem_stats()

        assert stats["status"] == "Optimal"
        assert stats["num_variables"] == 4

    def test_variables_are_continuous(self, fridge, tv):
        allocator = MILPBudgetAllocator()
        allocator.allocate([fridge, tv], 2.0, 0.15)

        assert all(v.cat == pulp.LpContinuous for v in allocator.problem.variables())

    def test_validation(self):
        with pytest.raises(InvalidInputError):
            MILPBudgetAllocator().allocate([], 1.0, 0.15)
