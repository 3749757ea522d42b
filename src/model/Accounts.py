"""Account amounts keyed by the four supported tax treatments.

The set of accounts is closed: municipal bonds (federally tax-exempt),
long-term gains (preferential stacked rates), short-term gains and IRA
(both ordinary income). Balances and withdrawals share the same shape.
"""

from dataclasses import asdict, dataclass, fields
from typing import Dict, Iterator, Tuple


# Greedy ladder priority, most tax-preferred first
ACCOUNT_ORDER: Tuple[str, ...] = ('muniBonds', 'longTermGains', 'shortTermGains', 'ira')

ACCOUNT_NAMES: Dict[str, str] = {
    'muniBonds': 'Municipal Bonds',
    'longTermGains': 'Long-Term Gains',
    'shortTermGains': 'Short-Term Gains',
    'ira': 'Traditional IRA',
}


@dataclass(frozen=True)
class AccountAmounts:
    muniBonds: float = 0.0
    longTermGains: float = 0.0
    shortTermGains: float = 0.0
    ira: float = 0.0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 0:
                raise ValueError(f"{f.name} must be nonnegative, got {value}")

    @classmethod
    def from_dict(cls, data: Dict[str, float]):
        unknown = set(data) - set(ACCOUNT_ORDER)
        if unknown:
            raise ValueError(f"Unknown account(s) {sorted(unknown)}. Expected {list(ACCOUNT_ORDER)}")
        return cls(**{k: float(data.get(k, 0.0) or 0.0) for k in ACCOUNT_ORDER})

    @classmethod
    def zero(cls):
        return cls()

    def items(self) -> Iterator[Tuple[str, float]]:
        for name in ACCOUNT_ORDER:
            yield name, getattr(self, name)

    def total(self) -> float:
        return self.muniBonds + self.longTermGains + self.shortTermGains + self.ira

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class AccountBalances(AccountAmounts):
    """Balance snapshot. Each simulated year produces a new instance."""

    def has_remaining(self, threshold: float = 1.0) -> bool:
        return any(amount > threshold for _, amount in self.items())

    def after(self, withdrawals: 'WithdrawalSet') -> 'AccountBalances':
        """Balances minus withdrawals, floored at 0 per account."""
        return AccountBalances(**{
            name: max(0.0, amount - getattr(withdrawals, name)) for name, amount in self.items()
        })


@dataclass(frozen=True)
class WithdrawalSet(AccountAmounts):
    """Amount taken from each account in one period."""

    @classmethod
    def everything(cls, balances: AccountBalances) -> 'WithdrawalSet':
        return cls(**balances.to_dict())
