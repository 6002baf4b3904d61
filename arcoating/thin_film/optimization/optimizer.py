"""Thin Film Optimizer Module

This module contains the LevenbergMarquardtSolver class, a bounded damped
Gauss-Newton optimizer adjusting the thicknesses of the variable layers of a
coating design to minimize the merit function.

The Jacobian is estimated by forward finite differences, one parameter at a
time. Steps are clamped to the layer bounds. The damping factor μ grows when
a step is rejected or the normal equations cannot be solved, and shrinks when
a step is accepted.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import numpy as np
from scipy import linalg

from .operand import MeritEvaluator, active_targets
from .variable import ThicknessParameters

if TYPE_CHECKING:
    from arcoating.thin_film import ThinFilmStack, TransferMatrixEngine

    from .operand import MeritTarget

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], bool]
ResidualFunction = Callable[[np.ndarray], np.ndarray]

FD_STEP = 1e-7
MAX_DAMPING_ATTEMPTS = 10
MIN_DAMPING = 1e-15
MAX_DAMPING = 1e15
DIAGONAL_FLOOR = 1e-6


class OptimizationCancelled(Exception):
    """Raised at a safe point when cancellation was requested.

    Attributes:
        x: Best parameter vector of the interrupted run, if any.
        iterations: Outer iterations completed before cancellation.
    """

    def __init__(self, x: np.ndarray | None = None, iterations: int = 0):
        super().__init__("Optimization cancelled")
        self.x = x
        self.iterations = iterations


@dataclass(frozen=True)
class LMSettings:
    """Levenberg-Marquardt settings.

    Args:
        max_iterations: Maximum number of outer iterations.
        initial_damping: Initial damping factor μ.
        gradient_tol: Stop when ‖Jᵀr‖ falls below this value.
        step_tol: Stop when ‖step‖ < step_tol·(‖x‖ + step_tol).
        function_tol: Stop when the relative cost improvement of an accepted
            step falls below this value.
    """

    max_iterations: int = 200
    initial_damping: float = 1e-3
    gradient_tol: float = 1e-10
    step_tol: float = 1e-10
    function_tol: float = 1e-10

    def __post_init__(self):
        if self.max_iterations < 0:
            raise ValueError(
                f"max_iterations must be non-negative, got {self.max_iterations}"
            )
        if self.initial_damping <= 0:
            raise ValueError(
                f"initial_damping must be positive, got {self.initial_damping}"
            )

    def with_overrides(self, **overrides) -> LMSettings:
        """Copy with the given non-None fields replaced."""
        changes = {key: val for key, val in overrides.items() if val is not None}
        return replace(self, **changes) if changes else self


@dataclass
class OptimizationOutcome:
    """Result of one optimizer invocation."""

    success: bool
    message: str
    initial_merit: float = 0.0
    final_merit: float = 0.0
    iterations: int = 0
    optimized_thicknesses: list[float] = field(default_factory=list)
    trials: int = 0
    cancelled: bool = False

    @property
    def improvement(self) -> float:
        return self.initial_merit - self.final_merit


@dataclass
class LMRun:
    """Raw result of the Levenberg-Marquardt iterations."""

    x: np.ndarray
    cost: float
    iterations: int
    reason: str


def check_problem(
    stack: ThinFilmStack, targets: Sequence[MeritTarget]
) -> str | None:
    """Message describing why the problem cannot be optimized, or None."""
    if not stack.variable_indices():
        return "No variable layers to optimize"
    if not active_targets(targets):
        return "No active merit targets"
    return None


def _jacobian(
    residual_fn: ResidualFunction, x: np.ndarray, r: np.ndarray
) -> np.ndarray:
    """Forward-difference Jacobian, probing one parameter at a time."""
    J = np.empty((r.size, x.size))
    for i in range(x.size):
        h = max(FD_STEP, abs(x[i]) * FD_STEP)
        probe = x.copy()
        probe[i] += h
        J[:, i] = (residual_fn(probe) - r) / h
    return J


def _solve_normal_equations(A: np.ndarray, b: np.ndarray) -> np.ndarray | None:
    """Solve ``A·step = -b``; None if A is singular or ill-conditioned."""
    with warnings.catch_warnings():
        warnings.simplefilter("error", category=linalg.LinAlgWarning)
        try:
            step = linalg.solve(A, -b, assume_a="sym")
        except (linalg.LinAlgError, linalg.LinAlgWarning, ValueError):
            return None
    if not np.all(np.isfinite(step)):
        return None
    return step


def levenberg_marquardt(
    residual_fn: ResidualFunction,
    x0: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
    settings: LMSettings,
    should_cancel: CancelCheck | None = None,
) -> LMRun:
    """Minimize ``‖residual_fn(x)‖²`` within ``[lower, upper]``.

    Args:
        residual_fn: Residual vector of a parameter vector.
        x0: Starting point. It is not clamped; only steps are.
        lower: Lower bounds.
        upper: Upper bounds.
        settings: Iteration limits and tolerances.
        should_cancel: Checked at the start of every outer iteration.

    Returns:
        LMRun holding the final point, its cost, the outer iteration count
        and the stop reason.

    Raises:
        OptimizationCancelled: If ``should_cancel`` returned True. The
            exception carries the best point reached.
    """
    x = np.array(x0, dtype=float)
    r = residual_fn(x)
    cost = float(r @ r)
    mu = settings.initial_damping
    iterations = 0
    reason = "maximum iterations reached"

    for iteration in range(settings.max_iterations):
        if should_cancel is not None and should_cancel():
            raise OptimizationCancelled(x, iterations)
        iterations += 1

        J = _jacobian(residual_fn, x, r)
        JtJ = J.T @ J
        b = J.T @ r
        grad_norm = float(np.linalg.norm(b))
        logger.debug(
            "LM iteration %d: cost=%.6g |grad|=%.3g mu=%.3g",
            iterations,
            cost,
            grad_norm,
            mu,
        )
        if grad_norm < settings.gradient_tol:
            reason = "gradient tolerance reached"
            break

        damping_diag = np.maximum(np.diag(JtJ), DIAGONAL_FLOOR)
        stop = None
        accepted = False
        for _attempt in range(MAX_DAMPING_ATTEMPTS):
            A = JtJ + mu * np.diag(damping_diag)
            step = _solve_normal_equations(A, b)
            if step is None:
                mu *= 10.0
                continue

            step_norm = np.linalg.norm(step)
            x_norm = np.linalg.norm(x)
            if step_norm < settings.step_tol * (x_norm + settings.step_tol):
                stop = "step tolerance reached"
                break

            x_new = np.clip(x + step, lower, upper)
            r_new = residual_fn(x_new)
            cost_new = float(r_new @ r_new)

            if cost_new < cost:
                if cost - cost_new < settings.function_tol * cost and iteration > 0:
                    stop = "function tolerance reached"
                else:
                    mu = max(mu / 3.0, MIN_DAMPING)
                x, r, cost = x_new, r_new, cost_new
                accepted = True
                break

            mu = min(mu * 3.0, MAX_DAMPING)

        if stop is not None:
            reason = stop
            break
        if not accepted:
            reason = "no improving step found"
            break

    return LMRun(x=x, cost=cost, iterations=iterations, reason=reason)


class LevenbergMarquardtSolver:
    """Local optimizer for the variable layer thicknesses of a coating design.

    The caller's stack is only written once, when the run finishes: every
    evaluation (including Jacobian probes) uses a view of the stack built
    from the parameter vector.

    Args:
        engine: Optics engine.
        settings: Default settings. Defaults to ``LMSettings()``.

    Examples
    --------
    >>> from arcoating.materials import MaterialCatalog
    >>> from arcoating.thin_film import ThinFilmStack, TransferMatrixEngine
    >>> from arcoating.thin_film.optimization import (
    ...     LevenbergMarquardtSolver, MeritTarget)
    >>> engine = TransferMatrixEngine(MaterialCatalog.standard())
    >>> stack = ThinFilmStack("N-BK7").add_layer(
    ...     "MgF2", 0.10, "optical", min_thickness=0.01, max_thickness=1.0)
    >>> targets = [MeritTarget("Rave", 0.55)]
    >>> outcome = LevenbergMarquardtSolver(engine).optimize(stack, targets)
    >>> outcome.final_merit <= outcome.initial_merit
    True
    """

    def __init__(
        self, engine: TransferMatrixEngine, settings: LMSettings | None = None
    ):
        self.engine = engine
        self.evaluator = MeritEvaluator(engine)
        self.settings = settings or LMSettings()

    def residual_function(
        self,
        stack: ThinFilmStack,
        targets: Sequence[MeritTarget],
        parameters: ThicknessParameters,
    ) -> ResidualFunction:
        """Weighted residual vector as a function of the parameter vector."""
        active = active_targets(targets)

        def residuals(x: np.ndarray) -> np.ndarray:
            view = parameters.apply(stack, x)
            return self.evaluator.weighted_residuals(view, active)

        return residuals

    def optimize(
        self,
        stack: ThinFilmStack,
        targets: Sequence[MeritTarget],
        max_iterations: int | None = None,
        initial_damping: float | None = None,
        gradient_tol: float | None = None,
        step_tol: float | None = None,
        function_tol: float | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> OptimizationOutcome:
        """Run the optimization and write the result into ``stack``.

        Arguments left to None take their value from the solver settings.

        Args:
            stack: Coating design; its variable layer thicknesses are updated.
            targets: Merit targets; disabled ones are ignored.
            max_iterations: Maximum number of outer iterations.
            initial_damping: Initial damping factor μ.
            gradient_tol: Gradient norm tolerance.
            step_tol: Relative step size tolerance.
            function_tol: Relative cost improvement tolerance.
            should_cancel: Checked at every outer iteration. On cancellation
                the best point so far is written back and the outcome is
                successful with ``cancelled=True``.

        Returns:
            OptimizationOutcome. Failures (no variable layer, no active
            target, errors while evaluating) are reported with
            ``success=False`` and never raised.
        """
        try:
            problem = check_problem(stack, targets)
            if problem is not None:
                return OptimizationOutcome(success=False, message=problem)

            settings = self.settings.with_overrides(
                max_iterations=max_iterations,
                initial_damping=initial_damping,
                gradient_tol=gradient_tol,
                step_tol=step_tol,
                function_tol=function_tol,
            )
            parameters = ThicknessParameters.from_stack(stack)
            initial_merit = self.evaluator.merit(stack, targets)

            try:
                run = levenberg_marquardt(
                    self.residual_function(stack, targets, parameters),
                    parameters.values(stack),
                    parameters.lower,
                    parameters.upper,
                    settings,
                    should_cancel,
                )
            except OptimizationCancelled as cancelled:
                parameters.write_back(stack, cancelled.x)
                final_merit = self.evaluator.merit(stack, targets)
                message = (
                    f"Optimization stopped ({cancelled.iterations} iter). "
                    f"Merit: {initial_merit:.6f} -> {final_merit:.6f}"
                )
                logger.info(message)
                return OptimizationOutcome(
                    success=True,
                    message=message,
                    initial_merit=initial_merit,
                    final_merit=final_merit,
                    iterations=cancelled.iterations,
                    optimized_thicknesses=[float(v) for v in cancelled.x],
                    cancelled=True,
                )

            parameters.write_back(stack, run.x)
            final_merit = self.evaluator.merit(stack, targets)
            message = (
                f"Optimization completed ({run.iterations} iter, {run.reason}). "
                f"Merit: {initial_merit:.6f} -> {final_merit:.6f}"
            )
            logger.info(message)
            return OptimizationOutcome(
                success=True,
                message=message,
                initial_merit=initial_merit,
                final_merit=final_merit,
                iterations=run.iterations,
                optimized_thicknesses=[float(v) for v in run.x],
            )
        except Exception as exc:
            logger.warning("Optimization failed: %s", exc)
            return OptimizationOutcome(
                success=False, message=f"Optimization failed: {exc}"
            )
