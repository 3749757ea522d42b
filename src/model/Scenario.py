"""Scenario inputs read from input-parameters/<name>/spec.json."""

import json
import os
from dataclasses import dataclass
from typing import List, Optional

from model.Accounts import AccountBalances, WithdrawalSet
from tax.TaxReference import TaxConfig


INPUT_PARAMETERS_DIR = 'input-parameters'


@dataclass(frozen=True)
class Scenario:
    name: str
    config: TaxConfig
    balances: AccountBalances
    desired_income: float
    income_is_gross: bool = False
    custom_withdrawals: Optional[WithdrawalSet] = None

    @classmethod
    def from_spec(cls, name: str, spec: dict) -> 'Scenario':
        custom = spec.get('customWithdrawals')
        return cls(
            name=name,
            config=TaxConfig.of(spec.get('filingStatus', 'single'), spec.get('jurisdiction', '')),
            balances=AccountBalances.from_dict(spec.get('balances', {})),
            desired_income=float(spec.get('desiredIncome', 0)),
            income_is_gross=bool(spec.get('incomeIsGross', False)),
            custom_withdrawals=WithdrawalSet.from_dict(custom) if custom else None,
        )


def scenario_path(base_path: str, name: str) -> str:
    return os.path.join(base_path, INPUT_PARAMETERS_DIR, name, 'spec.json')


def load_scenario(base_path: str, name: str) -> Scenario:
    """Load a scenario by folder name.

    Raises:
        FileNotFoundError: no spec.json for that name
        TaxConfigError: unknown filing status
        ValueError: malformed balances or withdrawals
    """
    path = scenario_path(base_path, name)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Spec file not found: {path}")
    with open(path, 'r') as f:
        spec = json.load(f)
    return Scenario.from_spec(name, spec)


def list_scenarios(base_path: str) -> List[str]:
    root = os.path.join(base_path, INPUT_PARAMETERS_DIR)
    if not os.path.isdir(root):
        return []
    return sorted(
        name for name in os.listdir(root)
        if os.path.exists(scenario_path(base_path, name))
    )


def validate_scenario(scenario: Scenario) -> List[str]:
    """Problems to fix before a scenario can be planned. Empty when ready."""
    errors = []
    if not scenario.config.jurisdiction_code:
        errors.append('Please select a state')
    if scenario.desired_income <= 0:
        errors.append('Please enter a desired income amount')
    if scenario.balances.total() == 0:
        errors.append('Please enter at least one account balance')
    return errors
