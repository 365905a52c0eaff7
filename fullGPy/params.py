import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence
from .config import get_logger
from .kernel import Kernel
from .likelihood import TrainingLogLikelihood
from .utils.solver import SolverOptions, SolverSummary, solve


@dataclass
class LearningResult:
    """Outcome of a hyperparameter learning run"""
    params: np.ndarray       # refined kernel parameters
    usable: bool             # whether the solver reports a usable solution
    initial_cost: float      # negative log likelihood at the starting parameters
    final_cost: float        # negative log likelihood at params
    summary: SolverSummary


def learn_params(points: Sequence[np.ndarray], targets: np.ndarray,
                 kernel: Kernel, noise: float,
                 options: Optional[SolverOptions] = None) -> LearningResult:
    """
    Maximize the log marginal likelihood of the training data over the kernel
    parameters, starting from the kernel's current parameters.

    The kernel itself is left untouched: committing the returned parameters is
    up to the caller (see GaussianProcess.learn_hyperparams).

    Args:
        points: Training points
        targets: Training targets (n,)
        kernel: Covariance function supplying the starting parameters
        noise: Noise (nugget) parameter
        options: Solver settings (defaults used when None)

    Returns:
        LearningResult
    """
    logger = get_logger()
    cost = TrainingLogLikelihood(points, targets, kernel, noise)
    parameters = np.array(kernel.params, dtype=float)

    parameters, summary = solve(cost, parameters, options)
    usable = summary.is_solution_usable()

    logger.info(f"learned {type(kernel).__name__} params {parameters} "
                f"(nll {summary.initial_cost:.6g} -> {summary.final_cost:.6g}, "
                f"{summary.iterations} its, {summary.termination_type.name})")
    if not usable:
        logger.warning(f"hyperparameter learning did not produce a usable "
                       f"solution: {summary.message}")

    return LearningResult(params=parameters,
                          usable=usable,
                          initial_cost=summary.initial_cost,
                          final_cost=summary.final_cost,
                          summary=summary)
