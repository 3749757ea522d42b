"""Multi-year depletion planner.

Builds a MultiYearPlan by simulating one year at a time against the
balances left over from the year before:

1. Find the gross withdrawal that nets the desired income this year
2. Allocate that gross proportionally across the current balances
3. If the balances cannot cover it, withdraw everything and stop
4. Otherwise record the year and carry the reduced balances forward

The loop ends once every account is at or below $1, or at the
safety cap. Every year is taxed with the same bracket table.
"""

import logging
from typing import List, Tuple

from calc.gross_up_solver import solve_net_to_gross
from calc.tax_calculator import TaxCalculator
from calc.withdrawal_optimizer import WithdrawalOptimizer
from model.Accounts import AccountBalances, WithdrawalSet
from model.PlanData import MultiYearPlan, PlanSummary, YearPlan
from tax.FederalDetails import FederalDetails
from tax.StateDetails import StateDetails
from tax.TaxReference import TaxConfig, TaxReference

logger = logging.getLogger(__name__)

MAX_YEARS = 100
REMAINING_BALANCE_THRESHOLD = 1.0


class PlanCalculator:
    """Calculator that builds a year-by-year withdrawal schedule."""

    def __init__(self, optimizer: WithdrawalOptimizer, max_years: int = MAX_YEARS):
        self.optimizer = optimizer
        self.max_years = max_years

    @classmethod
    def from_reference(cls, reference: TaxReference, max_years: int = MAX_YEARS) -> 'PlanCalculator':
        """Wire the federal, state, tax and optimizer layers around one reference table."""
        calculator = TaxCalculator(FederalDetails(reference), StateDetails(reference))
        return cls(WithdrawalOptimizer(calculator), max_years)

    def gross_income_needed(self, desired_net_income: float, balances: AccountBalances,
                            config: TaxConfig) -> float:
        """Gross withdrawal that nets desired_net_income from these balances.

        May exceed the total balance, in which case the year is infeasible.
        """
        def evaluate(gross: float) -> Tuple[float, float]:
            trial = self.optimizer.allocate_proportional(balances, gross, config, is_gross_target=True)
            return trial.total_withdrawn, trial.tax_result.total_tax

        solved = solve_net_to_gross(desired_net_income, evaluate, limit=balances.total())
        return solved.next_estimate

    def calculate(self, balances: AccountBalances, desired_net_income: float, config: TaxConfig) -> MultiYearPlan:
        """Calculate the withdrawal schedule that depletes all accounts.

        Args:
            balances: Starting balances (not modified)
            desired_net_income: Post-tax income wanted every year
            config: Filing status and jurisdiction

        Returns:
            MultiYearPlan with chronological years and lifetime totals
        """
        if desired_net_income <= 0:
            raise ValueError(f"desired net income must be positive, got {desired_net_income}")
        self.optimizer.calculator.federal.reference.resolve(config)

        years: List[YearPlan] = []
        current = balances
        year_index = 1

        while current.has_remaining(REMAINING_BALANCE_THRESHOLD) and year_index <= self.max_years:
            gross_needed = self.gross_income_needed(desired_net_income, current, config)
            year_strategy = self.optimizer.allocate_proportional(current, gross_needed, config, is_gross_target=True)

            if not year_strategy.feasible:
                remaining = current.total()
                final = WithdrawalSet.everything(current)
                tax_result = self.optimizer.calculator.total_tax(final, config)
                years.append(YearPlan(
                    year_index=year_index,
                    withdrawals=final,
                    gross_income=remaining,
                    tax_result=tax_result,
                    post_tax_income=remaining - tax_result.total_tax,
                    is_final_year=True,
                ))
                logger.info("Year %d cannot reach %.2f net; withdrawing remaining %.2f",
                            year_index, desired_net_income, remaining)
                break

            years.append(YearPlan(
                year_index=year_index,
                withdrawals=year_strategy.withdrawals,
                gross_income=gross_needed,
                tax_result=year_strategy.tax_result,
                post_tax_income=gross_needed - year_strategy.tax_result.total_tax,
                is_final_year=False,
            ))
            logger.debug("Year %d: gross %.2f, tax %.2f", year_index, gross_needed,
                         year_strategy.tax_result.total_tax)

            current = current.after(year_strategy.withdrawals)
            year_index += 1
        else:
            if year_index > self.max_years:
                logger.info("Stopped at the %d year cap with %.2f still invested", self.max_years, current.total())

        return MultiYearPlan(years=years, summary=PlanSummary.from_years(years))
