"""Data model for withdrawal plan results.

A WithdrawalPlan describes a single period. A MultiYearPlan holds the
chronological YearPlan entries produced by the depletion simulator plus
lifetime totals. All of these are plain values recomputed on every call.
"""

from dataclasses import asdict, dataclass, field
from typing import List, Optional

from model.Accounts import WithdrawalSet
from model.TaxResult import TaxResult


@dataclass(frozen=True)
class WithdrawalPlan:
    """Result of one single-period strategy (ladder, proportional or custom)."""
    withdrawals: WithdrawalSet
    tax_result: TaxResult
    total_withdrawn: float
    shortfall: float = 0.0
    feasible: bool = True

    @property
    def post_tax_income(self) -> float:
        return self.total_withdrawn - self.tax_result.total_tax

    def to_dict(self) -> dict:
        data = asdict(self)
        data['post_tax_income'] = self.post_tax_income
        return data


@dataclass(frozen=True)
class YearPlan:
    """All withdrawal data for a single simulated year."""
    year_index: int
    withdrawals: WithdrawalSet
    gross_income: float
    tax_result: TaxResult
    post_tax_income: float
    is_final_year: bool = False

    @property
    def tax_percentage(self) -> float:
        """Tax as a percentage of this year's gross withdrawal."""
        if self.gross_income <= 0:
            return 0.0
        return self.tax_result.total_tax / self.gross_income * 100


@dataclass(frozen=True)
class PlanSummary:
    total_years: int = 0
    total_taxes_paid: float = 0.0
    total_withdrawn: float = 0.0
    avg_effective_rate: float = 0.0
    total_post_tax_income: float = 0.0

    @classmethod
    def from_years(cls, years: List[YearPlan]) -> 'PlanSummary':
        total_taxes = sum(y.tax_result.total_tax for y in years)
        total_withdrawn = sum(y.gross_income for y in years)
        avg_rate = total_taxes / total_withdrawn * 100 if total_withdrawn > 0 else 0.0
        return cls(
            total_years=len(years),
            total_taxes_paid=total_taxes,
            total_withdrawn=total_withdrawn,
            avg_effective_rate=avg_rate,
            total_post_tax_income=total_withdrawn - total_taxes,
        )


@dataclass(frozen=True)
class MultiYearPlan:
    """Complete depletion schedule across all simulated years."""
    years: List[YearPlan] = field(default_factory=list)
    summary: PlanSummary = field(default_factory=PlanSummary)

    def get_year(self, year_index: int) -> Optional[YearPlan]:
        """Get data for a specific year (1-based)."""
        if 1 <= year_index <= len(self.years):
            return self.years[year_index - 1]
        return None

    def final_year(self) -> Optional[YearPlan]:
        return self.years[-1] if self.years else None

    def to_dict(self) -> dict:
        data = asdict(self)
        for entry, year in zip(data['years'], self.years):
            entry['tax_percentage'] = year.tax_percentage
        return data


@dataclass(frozen=True)
class ValidationError:
    account: str
    requested: float
    available: float
    message: str


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: List[ValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class ComparisonResult:
    """Plan B measured against plan A. Positive tax_difference means B pays more."""
    tax_difference: float
    percent_difference: float
    lower_tax_plan: str
    savings: float

    @property
    def verdict(self) -> str:
        if abs(self.tax_difference) < 1:
            return 'optimal'
        if self.tax_difference < 0:
            return 'less tax'
        return 'more tax'
