from typing import List, Tuple

from tax.FederalDetails import bracket_rate_at, marginal_bracket_tax
from tax.TaxReference import FlatTax, NoIncomeTax, ProgressiveTax, TaxReference


class StateDetails:
    def __init__(self, reference: TaxReference):
        self.reference = reference

    def taxBurden(self, income: float, code: str) -> float:
        """Calculate jurisdiction income tax on gross income.

        No deduction is subtracted at this level. The rule variant decides:
        - none: 0
        - flat: income * rate
        - progressive: marginal bracket tax on income

        Raises:
            TaxConfigError: code is not in the reference table
        """
        rule = self.reference.jurisdiction(code).rule
        if income <= 0:
            return 0.0
        if isinstance(rule, NoIncomeTax):
            return 0.0
        if isinstance(rule, FlatTax):
            return income * rule.rate
        return marginal_bracket_tax(income, rule.brackets)

    def marginalRate(self, income: float, code: str) -> float:
        rule = self.reference.jurisdiction(code).rule
        if isinstance(rule, FlatTax):
            return rule.rate
        if isinstance(rule, ProgressiveTax):
            return bracket_rate_at(income, rule.brackets)
        return 0.0

    def jurisdictions(self) -> List[Tuple[str, str]]:
        """(code, name) pairs sorted by display name."""
        pairs = [(code, self.reference.jurisdiction(code).name) for code in self.reference.jurisdiction_codes()]
        return sorted(pairs, key=lambda p: p[1])
