"""Single-period withdrawal strategies.

Every strategy prices its trial allocations through TaxCalculator. None of
them mutate the balances they are given.
"""

from typing import Tuple

from calc.gross_up_solver import MAX_ITERATIONS, solve_net_to_gross
from calc.tax_calculator import TaxCalculator
from model.Accounts import ACCOUNT_ORDER, AccountAmounts, AccountBalances, WithdrawalSet
from model.PlanData import ComparisonResult, ValidationError, ValidationResult, WithdrawalPlan
from tax.TaxReference import TaxConfig


# A non-converged search still counts as feasible within this many dollars
NEAR_MISS_TOLERANCE = 100.0


class WithdrawalOptimizer:
    """Builds withdrawal plans for one period from a set of balances."""

    def __init__(self, calculator: TaxCalculator):
        self.calculator = calculator

    def optimize(self, balances: AccountBalances, desired_income: float, config: TaxConfig) -> WithdrawalPlan:
        """Greedy ladder: drain accounts in ACCOUNT_ORDER until desired_income is met.

        This is a baseline. It does not minimize total tax once the target
        outgrows the most tax-preferred accounts.
        """
        remaining = desired_income
        amounts = {}
        for name in ACCOUNT_ORDER:
            take = min(remaining, getattr(balances, name)) if remaining > 0 else 0.0
            amounts[name] = max(0.0, take)
            remaining -= amounts[name]

        withdrawals = WithdrawalSet(**amounts)
        shortfall = max(0.0, remaining)
        return WithdrawalPlan(
            withdrawals=withdrawals,
            tax_result=self.calculator.total_tax(withdrawals, config),
            total_withdrawn=desired_income - shortfall,
            shortfall=shortfall,
            feasible=shortfall == 0,
        )

    def allocate_proportional(self, balances: AccountBalances, target: float, config: TaxConfig,
                              is_gross_target: bool = False) -> WithdrawalPlan:
        """Withdraw from every account in proportion to its share of the total.

        With is_gross_target the target is the gross withdrawal. Otherwise the
        target is post-tax income and the gross is found with
        solve_net_to_gross.
        """
        total_available = balances.total()
        if total_available <= 0:
            zero = WithdrawalSet.zero()
            return WithdrawalPlan(
                withdrawals=zero,
                tax_result=self.calculator.total_tax(zero, config),
                total_withdrawn=0.0,
                shortfall=target,
                feasible=False,
            )

        if is_gross_target:
            withdrawals = self.proportional_split(balances, target)
            actual_gross = withdrawals.total()
            feasible = target <= total_available
            return WithdrawalPlan(
                withdrawals=withdrawals,
                tax_result=self.calculator.total_tax(withdrawals, config),
                total_withdrawn=actual_gross,
                shortfall=0.0 if feasible else target - actual_gross,
                feasible=feasible,
            )

        def evaluate(gross: float) -> Tuple[float, float]:
            trial = self.proportional_split(balances, gross)
            return trial.total(), self.calculator.total_tax(trial, config).total_tax

        solved = solve_net_to_gross(target, evaluate, limit=total_available, max_iterations=MAX_ITERATIONS)

        if solved.exceeded_limit:
            everything = WithdrawalSet.everything(balances)
            tax_result = self.calculator.total_tax(everything, config)
            return WithdrawalPlan(
                withdrawals=everything,
                tax_result=tax_result,
                total_withdrawn=total_available,
                shortfall=target - (total_available - tax_result.total_tax),
                feasible=False,
            )

        withdrawals = self.proportional_split(balances, solved.gross)
        tax_result = self.calculator.total_tax(withdrawals, config)
        shortfall = target - (withdrawals.total() - tax_result.total_tax)
        if solved.converged:
            return WithdrawalPlan(withdrawals, tax_result, withdrawals.total(), 0.0, True)
        return WithdrawalPlan(
            withdrawals=withdrawals,
            tax_result=tax_result,
            total_withdrawn=withdrawals.total(),
            shortfall=shortfall,
            feasible=abs(shortfall) < NEAR_MISS_TOLERANCE,
        )

    @staticmethod
    def proportional_split(balances: AccountBalances, gross: float) -> WithdrawalSet:
        """Split min(gross, total) across accounts by balance share.

        Each share is clipped to its balance. The clipped excess is not
        redistributed, so the split can sum to less than the capped gross.
        """
        total_available = balances.total()
        if total_available <= 0:
            return WithdrawalSet.zero()
        capped_gross = max(0.0, min(gross, total_available))
        return WithdrawalSet(**{
            name: min(amount / total_available * capped_gross, amount) for name, amount in balances.items()
        })

    def evaluate_custom(self, withdrawals: WithdrawalSet, config: TaxConfig) -> WithdrawalPlan:
        """Price caller-chosen withdrawals. Balance sufficiency is checked by validate()."""
        return WithdrawalPlan(
            withdrawals=withdrawals,
            tax_result=self.calculator.total_tax(withdrawals, config),
            total_withdrawn=withdrawals.total(),
            shortfall=0.0,
            feasible=True,
        )

    @staticmethod
    def validate(withdrawals: AccountAmounts, balances: AccountAmounts) -> ValidationResult:
        errors = []
        for name, requested in withdrawals.items():
            available = getattr(balances, name)
            if requested > available:
                errors.append(ValidationError(
                    account=name,
                    requested=requested,
                    available=available,
                    message=f"Insufficient funds in {name}",
                ))
        return ValidationResult(valid=not errors, errors=errors)

    @staticmethod
    def compare(plan_a: WithdrawalPlan, plan_b: WithdrawalPlan) -> ComparisonResult:
        """Tax of plan B relative to plan A."""
        tax_a = plan_a.tax_result.total_tax
        tax_difference = plan_b.tax_result.total_tax - tax_a
        percent_difference = tax_difference / tax_a * 100 if tax_a > 0 else 0.0
        return ComparisonResult(
            tax_difference=tax_difference,
            percent_difference=percent_difference,
            lower_tax_plan='plan_b' if tax_difference < 0 else 'plan_a',
            savings=abs(tax_difference),
        )
