from dataclasses import dataclass


@dataclass(frozen=True)
class TaxBreakdown:
    ordinary_income: float
    long_term_gains: float
    muni_bonds: float
    taxable_ordinary_income: float
    federal_ordinary_tax: float
    federal_capital_gains_tax: float


@dataclass(frozen=True)
class TaxResult:
    """Tax owed on one withdrawal composition. effective_rate is a percentage."""
    total_income: float
    federal_tax: float
    state_tax: float
    total_tax: float
    effective_rate: float
    breakdown: TaxBreakdown
