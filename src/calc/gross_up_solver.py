"""Solve for the gross withdrawal that nets a target post-tax amount.

Tax depends on the gross amount, so the inverse is found by successive
substitution: guess a gross, price it, then move the guess by the net
shortfall. Each step is exact for the tax already owed, so for a tax
function that is non-decreasing in gross with marginal rate below 100%
the iteration contracts toward the fixed point. Bracket kinks can slow
it down, which is why the iteration count is bounded.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 30
TOLERANCE = 1.0
INITIAL_TAX_RATE = 0.20

# evaluate(gross) -> (amount actually withdrawn, tax on it)
GrossEvaluator = Callable[[float], Tuple[float, float]]


@dataclass(frozen=True)
class GrossUpResult:
    gross: float            # last gross estimate that was priced
    withdrawn: float        # amount withdrawn at that estimate
    tax: float
    residual: float         # target_net - (withdrawn - tax)
    iterations: int
    converged: bool
    exceeded_limit: bool = False
    next_estimate: float = 0.0

    @property
    def net(self) -> float:
        return self.withdrawn - self.tax


def solve_net_to_gross(target_net: float,
                       evaluate: GrossEvaluator,
                       limit: Optional[float] = None,
                       max_iterations: int = MAX_ITERATIONS,
                       tolerance: float = TOLERANCE,
                       initial_tax_rate: float = INITIAL_TAX_RATE) -> GrossUpResult:
    """Find gross G such that evaluate(G) nets target_net within tolerance.

    Starts at target_net / (1 - initial_tax_rate). A negative estimate is
    reset to target_net. When limit is given and an estimate rises above
    it, the search stops with exceeded_limit set.

    Args:
        target_net: Desired post-tax amount
        evaluate: Prices a trial gross, returning (withdrawn, tax)
        limit: Largest gross that can actually be withdrawn, if any
        max_iterations: Number of trial pricings before giving up
        tolerance: Absolute net error accepted as converged

    Returns:
        GrossUpResult for the last priced estimate
    """
    estimate = target_net / (1.0 - initial_tax_rate)
    priced = estimate
    withdrawn = tax = 0.0
    residual = target_net

    for iteration in range(1, max_iterations + 1):
        priced = estimate
        withdrawn, tax = evaluate(priced)
        residual = target_net - (withdrawn - tax)

        if abs(residual) < tolerance:
            return GrossUpResult(priced, withdrawn, tax, residual, iteration, True, False, priced)

        estimate = priced + residual
        if estimate < 0:
            estimate = target_net
        if limit is not None and estimate > limit:
            return GrossUpResult(priced, withdrawn, tax, residual, iteration, False, True, estimate)

    logger.warning(
        "Net-to-gross search did not converge in %d iterations (target %.2f, residual %.2f)",
        max_iterations, target_net, residual,
    )
    return GrossUpResult(priced, withdrawn, tax, residual, max_iterations, False, False, estimate)
