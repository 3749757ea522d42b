"""Tax reference data: filing statuses, bracket tables and jurisdiction rules.

The reference table is versioned input. It is loaded once, validated
against its contract and then shared read-only by the federal and
jurisdiction calculators. Every simulated year reuses the same table.
"""

import json
import math
import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union


DEFAULT_REFERENCE_PATH = os.path.normpath(
    os.path.join(os.path.dirname(__file__), '..', '..', 'reference', 'tax-data.json')
)


class TaxConfigError(ValueError):
    """Raised when a filing status or jurisdiction code is not in the reference table."""


class ReferenceDataError(ValueError):
    """Raised when the reference table breaks its schema or bracket contract."""


class FilingStatus(str, Enum):
    SINGLE = 'single'
    MARRIED_FILING_JOINTLY = 'marriedFilingJointly'
    MARRIED_FILING_SEPARATELY = 'marriedFilingSeparately'
    HEAD_OF_HOUSEHOLD = 'headOfHousehold'

    @classmethod
    def parse(cls, value: Union[str, 'FilingStatus']) -> 'FilingStatus':
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = [s.value for s in cls]
            raise TaxConfigError(f"Unknown filing status '{value}'. Expected one of {valid}") from None


@dataclass(frozen=True)
class TaxBracket:
    """Half-open income range [min, max) taxed at rate. max is math.inf when unbounded."""
    min: float
    max: float
    rate: float

    def contains(self, income: float) -> bool:
        return self.min <= income < self.max


@dataclass(frozen=True)
class NoIncomeTax:
    pass


@dataclass(frozen=True)
class FlatTax:
    rate: float


@dataclass(frozen=True)
class ProgressiveTax:
    brackets: Tuple[TaxBracket, ...]


JurisdictionRule = Union[NoIncomeTax, FlatTax, ProgressiveTax]


@dataclass(frozen=True)
class FilingStatusTable:
    standard_deduction: float
    brackets: Tuple[TaxBracket, ...]
    capital_gains_brackets: Tuple[TaxBracket, ...]


@dataclass(frozen=True)
class Jurisdiction:
    code: str
    name: str
    rule: JurisdictionRule


@dataclass(frozen=True)
class TaxConfig:
    """Caller tax configuration. Both values must resolve in the reference table."""
    filing_status: FilingStatus
    jurisdiction_code: str

    @classmethod
    def of(cls, filing_status: Union[str, FilingStatus], jurisdiction_code: str) -> 'TaxConfig':
        return cls(FilingStatus.parse(filing_status), jurisdiction_code)


def _rate(value) -> float:
    rate = float(value)
    if rate > 1:
        rate = rate / 100.0
    return rate


def _parse_brackets(raw, where: str) -> Tuple[TaxBracket, ...]:
    if not raw:
        raise ReferenceDataError(f"{where}: bracket list must not be empty")

    brackets = []
    for b in raw:
        upper = b.get("max")
        brackets.append(TaxBracket(
            min=float(b["min"]),
            max=math.inf if upper is None else float(upper),
            rate=_rate(b["rate"]),
        ))

    if brackets[0].min != 0:
        raise ReferenceDataError(f"{where}: first bracket must start at 0, found {brackets[0].min}")
    for prev, cur in zip(brackets, brackets[1:]):
        if prev.max <= prev.min:
            raise ReferenceDataError(f"{where}: bracket [{prev.min}, {prev.max}) is empty or reversed")
        if cur.min != prev.max:
            raise ReferenceDataError(
                f"{where}: brackets must be contiguous. Gap or overlap between {prev.max} and {cur.min}"
            )
    if math.isfinite(brackets[-1].max):
        raise ReferenceDataError(f"{where}: last bracket must be unbounded (max: null)")
    return tuple(brackets)


def _parse_rule(code: str, raw: dict) -> JurisdictionRule:
    kind = raw.get("type")
    if kind == "none":
        return NoIncomeTax()
    if kind == "flat":
        if "rate" not in raw:
            raise ReferenceDataError(f"jurisdiction {code}: flat rule requires a 'rate'")
        return FlatTax(_rate(raw["rate"]))
    if kind == "progressive":
        return ProgressiveTax(_parse_brackets(raw.get("brackets"), f"jurisdiction {code}"))
    raise ReferenceDataError(f"jurisdiction {code}: unknown rule type '{kind}'")


class TaxReference:
    """Immutable, validated view of the tax reference table."""

    def __init__(self, tax_year: Optional[int], version: Optional[str],
                 filing_statuses: Dict[FilingStatus, FilingStatusTable],
                 jurisdictions: Dict[str, Jurisdiction]):
        self.tax_year = tax_year
        self.version = version
        self._filing_statuses = dict(filing_statuses)
        self._jurisdictions = dict(jurisdictions)

    @classmethod
    def load(cls, path: Optional[str] = None) -> 'TaxReference':
        ref_path = path or DEFAULT_REFERENCE_PATH
        with open(ref_path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'TaxReference':
        raw_statuses = data.get("filingStatuses")
        if not raw_statuses:
            raise ReferenceDataError("reference data must contain a 'filingStatuses' object")

        statuses = {}
        for status in FilingStatus:
            raw = raw_statuses.get(status.value)
            if raw is None:
                raise ReferenceDataError(f"reference data is missing filing status '{status.value}'")
            statuses[status] = FilingStatusTable(
                standard_deduction=float(raw.get("standardDeduction", 0)),
                brackets=_parse_brackets(raw.get("brackets"), f"{status.value} federal brackets"),
                capital_gains_brackets=_parse_brackets(
                    raw.get("capitalGainsBrackets"), f"{status.value} capital gains brackets"
                ),
            )

        jurisdictions = {}
        for code, raw in data.get("jurisdictions", {}).items():
            jurisdictions[code] = Jurisdiction(code=code, name=raw.get("name", code), rule=_parse_rule(code, raw))

        return cls(data.get("taxYear"), data.get("version"), statuses, jurisdictions)

    def filing_status(self, status: Union[str, FilingStatus]) -> FilingStatusTable:
        return self._filing_statuses[FilingStatus.parse(status)]

    def jurisdiction(self, code: str) -> Jurisdiction:
        if code not in self._jurisdictions:
            raise TaxConfigError(f"Unknown jurisdiction code '{code}'")
        return self._jurisdictions[code]

    def jurisdiction_codes(self) -> Tuple[str, ...]:
        return tuple(self._jurisdictions.keys())

    def resolve(self, config: TaxConfig) -> Tuple[FilingStatusTable, Jurisdiction]:
        """Fail fast on either half of the config not resolving."""
        return self.filing_status(config.filing_status), self.jurisdiction(config.jurisdiction_code)
