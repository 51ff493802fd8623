"""
Linear Programming Budget Allocator

An alternative to the greedy allocator that solves each day's split as a
linear program with PuLP. It returns the same allocation shape, so the two
are interchangeable.

Formulation:
- Variables: per device, reserved hours r[d] and additional hours h[d]
- r[d] is bounded by the reserved minimum for refrigeration-class devices
  and fixed at zero for all others
- r[d] + h[d] <= hours_per_day
- sum over devices of cost(r[d] + h[d]) <= daily budget
- Maximize RESERVED_WEIGHT * sum(r) + sum(priority * (r + h))

The reserved weight dominates every priority weight, so refrigeration
minimums are funded before anything else. Results are floored exactly like
the greedy allocator.
"""

import time
from typing import Any, Dict, List, Optional

import pulp
import structlog

from energy_planner.optimization.cost_model import (
    calculate_cost,
    floor_cost,
    floor_hours,
)
from energy_planner.optimization.device_models import (
    BudgetAllocationResult,
    Device,
    DeviceAllocation,
    OptimizationConfig,
)
from energy_planner.optimization.validation import (
    validate_amount,
    validate_devices,
    validate_price,
)

logger = structlog.get_logger(__name__)

# Must exceed the highest priority weight
RESERVED_WEIGHT = 1000.0


class MILPBudgetAllocator:
    """PuLP-backed allocator for a single day's budget.

    Every variable is continuous, so the model is a plain linear program.
    It is solved through the same CBC or GLPK command interface as a
    mixed-integer program.

    Attributes:
        config: Engine configuration (solver, time limit, thresholds)
        problem: The most recently built PuLP problem
        reserved_vars: Reserved-hours variable per device id
        extra_vars: Additional-hours variable per device id
    """

    def __init__(self, config: Optional[OptimizationConfig] = None):
        """Initialize the allocator.

        Args:
            config: Engine configuration (uses defaults if not provided)
        """
        self.config = config or OptimizationConfig()
        self.problem: Optional[pulp.LpProblem] = None
        self.reserved_vars: Dict[str, pulp.LpVariable] = {}
        self.extra_vars: Dict[str, pulp.LpVariable] = {}
        self._solve_time: float = 0.0
        self._solver_status: str = "not_solved"

    def _build_problem(
        self,
        devices: List[Device],
        daily_budget: float,
        price_per_kwh: float,
    ) -> None:
        self.problem = pulp.LpProblem("Daily_Budget_Allocation", pulp.LpMaximize)
        self.reserved_vars = {}
        self.extra_vars = {}

        for idx, device in enumerate(devices):
            reserve_cap = 0.0
            if device.is_refrigeration_class:
                reserve_cap = min(self.config.reserved_min_hours, device.hours_per_day)

            # Index-based names keep arbitrary device ids out of the LP file
            self.reserved_vars[device.id] = pulp.LpVariable(
                f"r_{idx}", lowBound=0, upBound=reserve_cap
            )
            self.extra_vars[device.id] = pulp.LpVariable(
                f"h_{idx}", lowBound=0, upBound=device.hours_per_day
            )
            self.problem += (
                self.reserved_vars[device.id] + self.extra_vars[device.id]
                <= device.hours_per_day,
                f"cap_{idx}",
            )

        self.problem += (
            pulp.lpSum(
                calculate_cost(device.wattage, 1.0, price_per_kwh)
                * (self.reserved_vars[device.id] + self.extra_vars[device.id])
                for device in devices
            )
            <= daily_budget,
            "daily_budget",
        )

        self.problem += pulp.lpSum(
            RESERVED_WEIGHT * self.reserved_vars[device.id]
            + int(device.priority)
            * (self.reserved_vars[device.id] + self.extra_vars[device.id])
            for device in devices
        )

    def _get_solver(self) -> pulp.apis.LpSolver:
        """Get the solver named in the configuration (CBC unless GLPK)."""
        if self.config.solver_name.upper() == "GLPK":
            return pulp.GLPK_CMD(
                timeLimit=self.config.max_solve_time_seconds,
                msg=1 if self.config.verbose else 0,
            )
        return pulp.PULP_CBC_CMD(
            timeLimit=self.config.max_solve_time_seconds,
            msg=1 if self.config.verbose else 0,
        )

    def _solve(self) -> str:
        """Solve the built problem and return the PuLP status string."""
        if self.problem is None:
            raise RuntimeError("Problem not built. Call _build_problem first.")

        start_time = time.time()
        self.problem.solve(self._get_solver())
        self._solve_time = time.time() - start_time
        self._solver_status = pulp.LpStatus[self.problem.status]
        return self._solver_status

    def _extract_solution(
        self,
        devices: List[Device],
        price_per_kwh: float,
    ) -> BudgetAllocationResult:
        result: BudgetAllocationResult = {}
        for device in devices:
            raw = (self.reserved_vars[device.id].varValue or 0.0) + (
                self.extra_vars[device.id].varValue or 0.0
            )
            hours = floor_hours(min(raw, device.hours_per_day))
            if hours < self.config.min_schedulable_hours:
                hours = 0.0
            cost = floor_cost(calculate_cost(device.wattage, hours, price_per_kwh))
            result[device.id] = DeviceAllocation(hours=hours, cost=cost)
        return result

    def allocate(
        self,
        devices: List[Device],
        daily_budget: float,
        price_per_kwh: float,
    ) -> BudgetAllocationResult:
        """Allocate device hours within a daily budget.

        Args:
            devices: Devices competing for the budget
            daily_budget: Spending ceiling for the day
            price_per_kwh: Electricity price

        Returns:
            Mapping of device id to allocated hours and cost, in input order

        Raises:
            InvalidInputError: If devices, budget or price are invalid
            RuntimeError: If the solver does not reach an optimal solution
        """
        devices = validate_devices(devices)
        validate_price(price_per_kwh)
        validate_amount(daily_budget, "Daily budget")

        self._build_problem(devices, daily_budget, price_per_kwh)
        status = self._solve()
        if status != "Optimal":
            logger.error(
                "milp_allocation_failed",
                status=status,
                devices=len(devices),
                daily_budget=daily_budget,
            )
            raise RuntimeError(f"Budget allocation failed: {status}")

        result = self._extract_solution(devices, price_per_kwh)
        logger.debug(
            "milp_allocation_solved",
            devices=len(devices),
            solve_time=round(self._solve_time, 4),
            total_cost=round(sum(a.cost for a in result.values()), 2),
        )
        return result

    def get_problem_stats(self) -> Dict[str, Any]:
        """Get statistics about the most recent problem."""
        if self.problem is None:
            return {"status": "not_built"}

        return {
            "num_variables": self.problem.numVariables(),
            "num_constraints": self.problem.numConstraints(),
            "solver": self.config.solver_name,
            "status": self._solver_status,
            "solve_time": self._solve_time,
        }
