import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Tuple
from scipy.optimize import minimize
from ..config import get_logger

# An objective maps a parameter vector to (value, gradient)
Objective = Callable[[np.ndarray], Tuple[float, np.ndarray]]


@dataclass
class SolverOptions:
    """Settings for the L-BFGS solver"""
    progress: bool = False                                 # log every iteration
    max_num_iterations: int = 100                          # outer iterations, shared across restarts
    max_num_line_search_step_size_iterations: int = 50     # trial steps per line search
    max_num_line_search_direction_restarts: int = 25       # restarts after a failed line search
    max_lbfgs_rank: int = 15                               # quasi-Newton history size
    function_tolerance: float = 1e-6
    gradient_tolerance: float = 1e-8


class TerminationType(Enum):
    CONVERGENCE = 1
    NO_CONVERGENCE = 2   # iteration budget exhausted
    FAILURE = 3          # line search kept failing, or the cost is not finite


@dataclass
class SolverSummary:
    """Structure to hold optimization information"""
    termination_type: TerminationType
    initial_cost: float
    final_cost: float
    iterations: int = 0
    restarts: int = 0
    evaluations: int = 0
    message: str = ""

    def is_solution_usable(self) -> bool:
        return (self.termination_type in (TerminationType.CONVERGENCE,
                                          TerminationType.NO_CONVERGENCE)
                and np.isfinite(self.final_cost))


def solve(objective: Objective, x0: np.ndarray,
          options: SolverOptions = None) -> Tuple[np.ndarray, SolverSummary]:
    """
    Minimize a differentiable objective with L-BFGS.

    When the line search fails to find an acceptable step, L-BFGS is restarted
    from the best point found so far with an empty history, up to
    max_num_line_search_direction_restarts times. The returned point is the
    best one visited, so its cost is never above the starting cost.

    Trial points where the objective is infinite are treated as failed steps;
    L-BFGS-B may then report convergence at the edge of the infinite region, so
    a CONVERGENCE result is not guaranteed to be a stationary point.

    Args:
        objective: Callable returning (value, gradient) at a parameter vector
        x0: Starting point
        options: Solver settings (defaults used when None)

    Returns:
        x: Best parameter vector found
        summary: SolverSummary describing the run
    """
    logger = get_logger()
    if options is None:
        options = SolverOptions()

    x0 = np.array(x0, dtype=float).reshape(-1)
    initial_cost, _ = objective(x0)
    best_x, best_cost = x0.copy(), float(initial_cost)
    its = restarts = 0
    nfev = 1
    message = ""

    def progress(xk):
        logger.info(f"iter {its + progress.count}: x={xk}")
        progress.count += 1

    while True:
        budget = options.max_num_iterations - its
        if budget <= 0:
            termination = TerminationType.NO_CONVERGENCE
            message = "maximum number of iterations reached"
            break

        progress.count = 1
        result = minimize(
            objective,
            best_x,
            method="L-BFGS-B",
            jac=True,
            callback=progress if options.progress else None,
            options={
                "maxiter": budget,
                "maxcor": options.max_lbfgs_rank,
                "maxls": options.max_num_line_search_step_size_iterations,
                "ftol": options.function_tolerance,
                "gtol": options.gradient_tolerance,
            },
        )
        its += result.nit
        nfev += result.nfev
        message = str(result.message)

        if np.isfinite(result.fun) and result.fun <= best_cost:
            best_x, best_cost = np.array(result.x, dtype=float), float(result.fun)

        if result.success:
            termination = TerminationType.CONVERGENCE
            break
        if result.status == 1 or its >= options.max_num_iterations:
            termination = TerminationType.NO_CONVERGENCE
            break

        # Line search failure: clear the history and try again from best_x
        if restarts >= options.max_num_line_search_direction_restarts:
            termination = TerminationType.FAILURE
            break
        restarts += 1
        logger.debug(f"line search failed ({message}), restart {restarts}")

    if not np.isfinite(best_cost):
        termination = TerminationType.FAILURE
        message = "cost is not finite at any visited point"

    summary = SolverSummary(termination_type=termination,
                            initial_cost=float(initial_cost),
                            final_cost=best_cost,
                            iterations=its,
                            restarts=restarts,
                            evaluations=nfev,
                            message=message)
    if options.progress:
        logger.info(f"{termination.name}: cost {summary.initial_cost} -> "
                    f"{summary.final_cost} in {its} iterations, {restarts} restarts")
    return best_x, summary
