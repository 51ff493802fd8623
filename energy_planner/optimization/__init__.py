"""
Household Energy Planning Module

This module turns a household's device list, electricity price and monthly
spending figures into three 30-day usage plans.

Key Components:
- device_models: Data models for devices, day schedules and plans
- device_catalog: Device types, categories and emission estimates
- cost_model: Energy and cost arithmetic
- day_classifier: Calendar and frequency eligibility for each horizon day
- budget_allocator: Greedy priority-ordered daily budget allocation
- milp_allocator: Linear programming alternative to the greedy allocator
- budget_trimmer: Iterative trimming of over-budget days
- plan_assembler: Day loop and the Cost plan
- eco_reducer: The Eco plan
- comfort_blender: The Comfort plan, blended from Cost and Eco
- planner: High-level chainable planning API

Plans:
- Cost: spends at most the preferred budget, funding high priorities first
- Eco: cuts hours by emission level, within the average monthly cost
- Comfort: between the two, within the mean of average and preferred spend

Example Usage:
    from energy_planner.optimization import Device, EnergyPlanner

    planner = EnergyPlanner()
    planner.add_device(Device(
        id="fridge",
        name="Refrigerator",
        wattage=150,
        priority=5,
        frequency="daily",
        hours_per_day=24,
        device_type="refrigerator",
    ))
    planner.set_budget(avg_monthly_cost=120.0, preferred_budget=90.0, price_per_kwh=0.15)

    plans = planner.build_all_plans()
    print(plans.cost.summary())
"""

from energy_planner.optimization.budget_allocator import (
    allocate_budget,
    get_allocation_summary,
    validate_budget,
)
from energy_planner.optimization.budget_trimmer import TrimResult, trim_to_budget
from energy_planner.optimization.comfort_blender import generate_comfort_plan
from energy_planner.optimization.device_models import (
    BudgetAllocationResult,
    BudgetValidation,
    ComfortPlan,
    CostPlan,
    DaySchedule,
    Device,
    DeviceAllocation,
    DeviceHours,
    EcoPlan,
    Frequency,
    OptimizationConfig,
    PlanBundle,
    PriorityLevel,
)
from energy_planner.optimization.eco_reducer import generate_eco_plan
from energy_planner.optimization.exceptions import (
    InvalidDeviceError,
    InvalidInputError,
    PlanningError,
)
from energy_planner.optimization.milp_allocator import MILPBudgetAllocator
from energy_planner.optimization.plan_assembler import generate_cost_plan
from energy_planner.optimization.planner import EnergyPlanner

__all__ = [
    "BudgetAllocationResult",
    "BudgetValidation",
    "ComfortPlan",
    "CostPlan",
    "DaySchedule",
    "Device",
    "DeviceAllocation",
    "DeviceHours",
    "EcoPlan",
    "EnergyPlanner",
    "Frequency",
    "InvalidDeviceError",
    "InvalidInputError",
    "MILPBudgetAllocator",
    "OptimizationConfig",
    "PlanBundle",
    "PlanningError",
    "PriorityLevel",
    "TrimResult",
    "allocate_budget",
    "generate_comfort_plan",
    "generate_cost_plan",
    "generate_eco_plan",
    "get_allocation_summary",
    "trim_to_budget",
    "validate_budget",
]
