from dataclasses import dataclass

@dataclass(frozen=True)
class FederalResult:
    taxableOrdinaryIncome: float
    ordinaryTax: float
    longTermCapitalGainsTax: float
    marginalBracket: float

    @property
    def totalFederalTax(self) -> float:
        return self.ordinaryTax + self.longTermCapitalGainsTax
