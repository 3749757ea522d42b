from tax.FederalDetails import FederalDetails
from tax.StateDetails import StateDetails
from tax.TaxReference import TaxConfig
from model.Accounts import AccountAmounts
from model.TaxResult import TaxBreakdown, TaxResult


class TaxCalculator:
    """Calculator that prices a withdrawal composition using injected detail providers.

    Pass hydrated instances of `FederalDetails` and `StateDetails` into the
    constructor. This keeps file I/O in the caller (e.g., `Program.py`) and
    makes the calculation logic easy to unit test.
    """

    def __init__(self, federal: FederalDetails, state: StateDetails):
        self.federal = federal
        self.state = state

    def total_tax(self, withdrawals: AccountAmounts, config: TaxConfig) -> TaxResult:
        """Full federal + jurisdiction tax on one period's withdrawals.

        IRA and short-term gains are ordinary income and take the standard
        deduction. Long-term gains stack above deducted ordinary income.
        Municipal bond income is federally exempt and, as a simplification,
        also untouched by the jurisdiction. The jurisdiction taxes gross
        ordinary income plus long-term gains with no deduction.

        Raises:
            TaxConfigError: filing status or jurisdiction does not resolve
        """
        self.federal.reference.resolve(config)

        ordinary_income = withdrawals.ira + withdrawals.shortTermGains
        long_term_gains = withdrawals.longTermGains
        muni_bonds = withdrawals.muniBonds

        fed = self.federal.taxBurden(ordinary_income, long_term_gains, config.filing_status)
        state_tax = self.state.taxBurden(ordinary_income + long_term_gains, config.jurisdiction_code)

        total_income = ordinary_income + long_term_gains + muni_bonds
        total_tax = fed.totalFederalTax + state_tax
        effective_rate = total_tax / total_income * 100 if total_income > 0 else 0.0

        return TaxResult(
            total_income=total_income,
            federal_tax=fed.totalFederalTax,
            state_tax=state_tax,
            total_tax=total_tax,
            effective_rate=effective_rate,
            breakdown=TaxBreakdown(
                ordinary_income=ordinary_income,
                long_term_gains=long_term_gains,
                muni_bonds=muni_bonds,
                taxable_ordinary_income=fed.taxableOrdinaryIncome,
                federal_ordinary_tax=fed.ordinaryTax,
                federal_capital_gains_tax=fed.longTermCapitalGainsTax,
            ),
        )

    def marginal_rate(self, current_income: float, config: TaxConfig) -> float:
        """Federal plus jurisdiction rate on the next dollar of ordinary income."""
        self.federal.reference.resolve(config)
        return (self.federal.marginalRate(current_income, config.filing_status)
                + self.state.marginalRate(current_income, config.jurisdiction_code))
