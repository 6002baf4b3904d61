"""Global Search Module

This module contains the MultiStartSearch class, a multi-start global
optimizer for coating designs. Each trial draws a random starting point
uniformly within the thickness bounds and runs the Levenberg-Marquardt local
optimizer from it; the best design over all trials is kept.
"""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from functools import partial
from typing import TYPE_CHECKING

import numpy as np

from .optimizer import (
    CancelCheck,
    LevenbergMarquardtSolver,
    LMSettings,
    OptimizationCancelled,
    OptimizationOutcome,
    check_problem,
    levenberg_marquardt,
)
from .variable import ThicknessParameters

if TYPE_CHECKING:
    from arcoating.thin_film import ThinFilmStack, TransferMatrixEngine

    from .operand import MeritTarget

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, float], None]


class _BestResult:
    """Best trial so far, shared between workers."""

    def __init__(self, x: np.ndarray):
        self._lock = threading.Lock()
        self.x = x
        self.merit = math.inf
        self.trial: int | None = None
        self.iterations = 0
        self.completed = 0

    def skip(self) -> int:
        with self._lock:
            self.completed += 1
            return self.completed

    def offer(
        self, trial: int, x: np.ndarray, merit: float, iterations: int
    ) -> tuple[bool, int]:
        """Record a finished trial; ties go to the lower trial index."""
        with self._lock:
            self.completed += 1
            self.iterations += iterations
            improved = merit < self.merit or (
                merit == self.merit and self.trial is not None and trial < self.trial
            )
            if improved:
                self.x = x
                self.merit = merit
                self.trial = trial
            return improved, self.completed


class MultiStartSearch:
    """Multi-start global optimizer built on the Levenberg-Marquardt solver.

    Args:
        engine: Optics engine.
        seed: Seed (or ``numpy.random.Generator``) of the start point
            generator. Successive searches continue the same stream.
        workers: Number of threads running trials. With 1, trials run in
            order on the calling thread.
        settings: Default local optimizer settings.

    Examples
    --------
    >>> from arcoating.materials import MaterialCatalog
    >>> from arcoating.thin_film import ThinFilmStack, TransferMatrixEngine
    >>> from arcoating.thin_film.optimization import (
    ...     MeritTarget, MultiStartSearch)
    >>> engine = TransferMatrixEngine(MaterialCatalog.standard())
    >>> stack = ThinFilmStack("N-BK7").add_layer(
    ...     "MgF2", 0.10, "optical", min_thickness=0.01, max_thickness=1.0)
    >>> targets = [MeritTarget("Rave", 0.55)]
    >>> search = MultiStartSearch(engine, seed=42)
    >>> outcome = search.optimize(stack, targets, max_trials=5)
    >>> outcome.trials
    5
    """

    def __init__(
        self,
        engine: TransferMatrixEngine,
        seed: int | np.random.Generator | None = None,
        workers: int = 1,
        settings: LMSettings | None = None,
    ):
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.solver = LevenbergMarquardtSolver(engine, settings)
        self.rng = np.random.default_rng(seed)
        self.workers = workers

    @property
    def evaluator(self):
        return self.solver.evaluator

    def optimize(
        self,
        stack: ThinFilmStack,
        targets: Sequence[MeritTarget],
        max_trials: int = 50,
        max_iterations_per_trial: int | None = None,
        on_progress: ProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
        initial_damping: float | None = None,
        gradient_tol: float | None = None,
        step_tol: float | None = None,
        function_tol: float | None = None,
    ) -> OptimizationOutcome:
        """Run the search and write the best design into ``stack``.

        Args:
            stack: Coating design; its variable layer thicknesses are updated.
            targets: Merit targets; disabled ones are ignored.
            max_trials: Number of random starts.
            max_iterations_per_trial: Outer iteration limit of each local run.
            on_progress: Called as ``on_progress(completed, max_trials,
                best_merit)`` after each trial.
            should_cancel: Checked before each trial and at every local outer
                iteration. On cancellation the best design found so far is
                applied and the outcome has ``cancelled=True``.
            initial_damping: Initial damping factor of each local run.
            gradient_tol: Gradient norm tolerance of each local run.
            step_tol: Relative step size tolerance of each local run.
            function_tol: Relative cost improvement tolerance of each local
                run.

        Returns:
            OptimizationOutcome with the aggregate iteration count and the
            number of completed trials.
        """
        try:
            problem = check_problem(stack, targets)
            if problem is not None:
                return OptimizationOutcome(success=False, message=problem)

            settings = self.solver.settings.with_overrides(
                max_iterations=max_iterations_per_trial,
                initial_damping=initial_damping,
                gradient_tol=gradient_tol,
                step_tol=step_tol,
                function_tol=function_tol,
            )
            parameters = ThicknessParameters.from_stack(stack)
            residual_fn = self.solver.residual_function(stack, targets, parameters)
            initial_merit = self.evaluator.merit(stack, targets)
            starts = [
                self.rng.uniform(parameters.lower, parameters.upper)
                for _ in range(max_trials)
            ]
            best = _BestResult(parameters.values(stack))

            def run_trial(trial: int):
                if should_cancel is not None and should_cancel():
                    raise OptimizationCancelled()
                run = levenberg_marquardt(
                    residual_fn,
                    starts[trial],
                    parameters.lower,
                    parameters.upper,
                    settings,
                    should_cancel,
                )
                view = parameters.apply(stack, run.x)
                return run, self.evaluator.merit(view, targets)

            if self.workers == 1:
                cancelled = self._run_sequential(
                    run_trial, max_trials, best, on_progress
                )
            else:
                cancelled = self._run_parallel(run_trial, max_trials, best, on_progress)

            parameters.write_back(stack, best.x)
            final_merit = self.evaluator.merit(stack, targets)
            if cancelled:
                message = (
                    f"Global optimization stopped ({best.completed} trials). "
                    f"Merit: {initial_merit:.6f} -> {final_merit:.6f}"
                )
            else:
                message = (
                    f"Global optimization ({best.completed} trials, "
                    f"{best.iterations} iter). "
                    f"Merit: {initial_merit:.6f} -> {final_merit:.6f}"
                )
            logger.info(message)
            return OptimizationOutcome(
                success=True,
                message=message,
                initial_merit=initial_merit,
                final_merit=final_merit,
                iterations=best.iterations,
                optimized_thicknesses=[float(v) for v in best.x],
                trials=best.completed,
                cancelled=cancelled,
            )
        except Exception as exc:
            logger.warning("Global optimization failed: %s", exc)
            return OptimizationOutcome(
                success=False, message=f"Global optimization failed: {exc}"
            )

    @staticmethod
    def _record(trial: int, call, best: _BestResult) -> int | None:
        """Run or collect one trial; None if it was cancelled."""
        try:
            run, merit = call()
        except OptimizationCancelled:
            return None
        except Exception as exc:
            logger.warning("Trial %d skipped: %s", trial + 1, exc)
            return best.skip()
        improved, completed = best.offer(trial, run.x, merit, run.iterations)
        if improved:
            logger.info("Trial %d improved merit to %.6g", trial + 1, merit)
        return completed

    def _run_sequential(
        self, run_trial, max_trials: int, best: _BestResult, on_progress
    ) -> bool:
        for trial in range(max_trials):
            completed = self._record(trial, partial(run_trial, trial), best)
            if completed is None:
                return True
            if on_progress is not None:
                on_progress(completed, max_trials, best.merit)
        return False

    def _run_parallel(
        self, run_trial, max_trials: int, best: _BestResult, on_progress
    ) -> bool:
        cancelled = False
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = {
                executor.submit(run_trial, trial): trial for trial in range(max_trials)
            }
            for future in as_completed(futures):
                if future.cancelled():
                    continue
                completed = self._record(futures[future], future.result, best)
                if completed is None:
                    if not cancelled:
                        cancelled = True
                        for pending in futures:
                            pending.cancel()
                    continue
                if on_progress is not None and not cancelled:
                    on_progress(completed, max_trials, best.merit)
        return cancelled
