"""Withdrawal Planner Tools for MCP Server.

This module provides the tool implementations that wrap the tax
calculators and withdrawal optimizers and expose their results through MCP.
"""

import os
import sys
from typing import Any, Dict, Optional

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tax.TaxReference import TaxReference, TaxConfig
from tax.StateDetails import StateDetails
from calc.plan_calculator import PlanCalculator
from model.Accounts import AccountBalances, WithdrawalSet
from model.PlanData import MultiYearPlan
from model.Scenario import Scenario, load_scenario, list_scenarios, validate_scenario
from model.field_metadata import FIELD_METADATA, get_description, get_short_name


class WithdrawalPlannerTools:
    """Tools that wrap the planner for one scenario."""

    def __init__(self, base_path: str, scenario_name: str, reference: TaxReference):
        """Initialize with paths and load the scenario.

        Args:
            base_path: Path to the planner root directory
            scenario_name: Name of the scenario folder in input-parameters
            reference: Loaded tax reference table
        """
        self.base_path = base_path
        self.scenario_name = scenario_name
        self.scenario: Scenario = load_scenario(base_path, scenario_name)
        self.planner = PlanCalculator.from_reference(reference)
        self.optimizer = self.planner.optimizer
        self._multi_year: Optional[MultiYearPlan] = None

    def _balances(self, balances: Optional[Dict[str, float]]) -> AccountBalances:
        return AccountBalances.from_dict(balances) if balances else self.scenario.balances

    def _config(self, filing_status: Optional[str], jurisdiction: Optional[str]) -> TaxConfig:
        return TaxConfig.of(
            filing_status or self.scenario.config.filing_status,
            jurisdiction or self.scenario.config.jurisdiction_code,
        )

    def get_scenario_overview(self) -> dict:
        """Get an overview of the scenario inputs."""
        s = self.scenario
        return {
            "scenario_name": self.scenario_name,
            "filing_status": s.config.filing_status.value,
            "jurisdiction": s.config.jurisdiction_code,
            "desired_income": s.desired_income,
            "income_is_gross": s.income_is_gross,
            "balances": s.balances.to_dict(),
            "total_available": s.balances.total(),
            "custom_withdrawals": s.custom_withdrawals.to_dict() if s.custom_withdrawals else None,
            "input_errors": validate_scenario(s),
        }

    def optimize_withdrawals(self, strategy: str = 'proportional', desired_income: Optional[float] = None,
                             is_gross: Optional[bool] = None, balances: Optional[Dict[str, float]] = None,
                             filing_status: Optional[str] = None, jurisdiction: Optional[str] = None) -> dict:
        """Single-year plan using the ladder or proportional strategy."""
        target = desired_income if desired_income is not None else self.scenario.desired_income
        config = self._config(filing_status, jurisdiction)
        account_balances = self._balances(balances)

        if strategy == 'ladder':
            plan = self.optimizer.optimize(account_balances, target, config)
        elif strategy == 'proportional':
            gross = self.scenario.income_is_gross if is_gross is None else is_gross
            plan = self.optimizer.allocate_proportional(account_balances, target, config, gross)
        else:
            raise ValueError(f"Unknown strategy '{strategy}'. Use 'ladder' or 'proportional'")

        result = plan.to_dict()
        result["strategy"] = strategy
        return result

    def plan_multi_year(self, desired_net_income: Optional[float] = None,
                        balances: Optional[Dict[str, float]] = None,
                        filing_status: Optional[str] = None, jurisdiction: Optional[str] = None) -> dict:
        """Multi-year depletion schedule. The scenario's own plan is cached."""
        if desired_net_income is None and balances is None and filing_status is None and jurisdiction is None:
            if self._multi_year is None:
                self._multi_year = self.planner.calculate(
                    self.scenario.balances, self.scenario.desired_income, self.scenario.config
                )
            return self._multi_year.to_dict()

        target = desired_net_income if desired_net_income is not None else self.scenario.desired_income
        plan = self.planner.calculate(self._balances(balances), target, self._config(filing_status, jurisdiction))
        return plan.to_dict()

    def get_year(self, year_index: int) -> dict:
        """One year of the scenario's multi-year plan."""
        self.plan_multi_year()
        year = self._multi_year.get_year(year_index)
        if year is None:
            return {"error": f"Year {year_index} not in plan (1-{len(self._multi_year.years)})"}
        data = self._multi_year.to_dict()['years'][year_index - 1]
        return data

    def evaluate_custom(self, withdrawals: Optional[Dict[str, float]] = None,
                        filing_status: Optional[str] = None, jurisdiction: Optional[str] = None) -> dict:
        """Price custom withdrawals and check them against the scenario balances."""
        custom = WithdrawalSet.from_dict(withdrawals) if withdrawals else self.scenario.custom_withdrawals
        if custom is None:
            raise ValueError("No withdrawals given and the scenario has no customWithdrawals")
        plan = self.optimizer.evaluate_custom(custom, self._config(filing_status, jurisdiction))
        validation = self.optimizer.validate(custom, self.scenario.balances)
        result = plan.to_dict()
        result["validation"] = {
            "valid": validation.valid,
            "errors": [e.__dict__ for e in validation.errors],
        }
        return result

    def compare_withdrawals(self, withdrawals: Optional[Dict[str, float]] = None) -> dict:
        """Compare custom withdrawals (plan B) against the proportional plan (plan A)."""
        custom_set = WithdrawalSet.from_dict(withdrawals) if withdrawals else self.scenario.custom_withdrawals
        if custom_set is None:
            raise ValueError("No withdrawals given and the scenario has no customWithdrawals")
        s = self.scenario
        optimal = self.optimizer.allocate_proportional(s.balances, s.desired_income, s.config, s.income_is_gross)
        custom = self.optimizer.evaluate_custom(custom_set, s.config)
        comparison = self.optimizer.compare(optimal, custom)
        return {
            "optimal": optimal.to_dict(),
            "custom": custom.to_dict(),
            "tax_difference": comparison.tax_difference,
            "percent_difference": comparison.percent_difference,
            "lower_tax_plan": 'optimal' if comparison.lower_tax_plan == 'plan_a' else 'custom',
            "savings": comparison.savings,
            "verdict": comparison.verdict,
        }

    def get_marginal_rate(self, income: float, filing_status: Optional[str] = None,
                          jurisdiction: Optional[str] = None) -> dict:
        config = self._config(filing_status, jurisdiction)
        return {
            "income": income,
            "filing_status": config.filing_status.value,
            "jurisdiction": config.jurisdiction_code,
            "marginal_rate": self.optimizer.calculator.marginal_rate(income, config),
        }


class MultiScenarioTools:
    """Manager for multiple withdrawal scenarios.

    Discovers all available scenarios and caches their planners,
    allowing queries to specify which scenario to use.
    """

    def __init__(self, base_path: str, default_scenario: Optional[str] = None,
                 reference: Optional[TaxReference] = None):
        """Initialize and discover all available scenarios.

        Args:
            base_path: Path to the planner root directory
            default_scenario: Default scenario to use when none specified
            reference: Tax reference table (loaded from base_path/reference if omitted)
        """
        self.base_path = base_path
        self.reference = reference or TaxReference.load(os.path.join(base_path, 'reference', 'tax-data.json'))
        self.scenarios: Dict[str, WithdrawalPlannerTools] = {}
        self.default_scenario = default_scenario
        self._discover_scenarios()

    def _discover_scenarios(self):
        """Discover and load all available scenarios."""
        for name in list_scenarios(self.base_path):
            try:
                self.scenarios[name] = WithdrawalPlannerTools(self.base_path, name, self.reference)
            except (OSError, ValueError) as e:
                # Log but don't fail on individual scenario errors
                print(f"Warning: Failed to load scenario '{name}': {e}", file=sys.stderr)

        if self.default_scenario is None and self.scenarios:
            self.default_scenario = list(self.scenarios.keys())[0]

    def _get_scenario(self, scenario: Optional[str] = None) -> WithdrawalPlannerTools:
        scenario_name = scenario or self.default_scenario
        if scenario_name not in self.scenarios:
            available = list(self.scenarios.keys())
            raise ValueError(f"Scenario '{scenario_name}' not found. Available scenarios: {available}")
        return self.scenarios[scenario_name]

    def list_scenarios(self) -> dict:
        """List all available scenarios."""
        scenarios_info = {}
        for name, tools in self.scenarios.items():
            scenarios_info[name] = {
                "filing_status": tools.scenario.config.filing_status.value,
                "jurisdiction": tools.scenario.config.jurisdiction_code,
                "desired_income": tools.scenario.desired_income,
                "total_available": tools.scenario.balances.total(),
            }
        return {
            "available_scenarios": list(self.scenarios.keys()),
            "default_scenario": self.default_scenario,
            "scenarios_info": scenarios_info,
        }

    def reload_scenarios(self) -> dict:
        """Reload all scenarios from disk, refreshing the cache."""
        old_scenarios = set(self.scenarios.keys())
        self.scenarios.clear()
        self.default_scenario = None
        self._discover_scenarios()
        new_scenarios = set(self.scenarios.keys())

        return {
            "status": "success",
            "message": f"Reloaded {len(self.scenarios)} scenarios",
            "scenarios_loaded": list(self.scenarios.keys()),
            "default_scenario": self.default_scenario,
            "changes": {
                "added": sorted(new_scenarios - old_scenarios),
                "removed": sorted(old_scenarios - new_scenarios),
                "reloaded": sorted(old_scenarios & new_scenarios),
            },
        }

    def list_jurisdictions(self) -> dict:
        pairs = StateDetails(self.reference).jurisdictions()
        return {
            "tax_year": self.reference.tax_year,
            "version": self.reference.version,
            "jurisdictions": [{"code": code, "name": name} for code, name in pairs],
        }

    def list_fields(self) -> dict:
        return {name: {"short_name": get_short_name(name), "description": get_description(name)}
                for name in FIELD_METADATA}

    def get_scenario_overview(self, scenario: Optional[str] = None) -> dict:
        result = self._get_scenario(scenario).get_scenario_overview()
        result["scenario"] = scenario or self.default_scenario
        return result

    def optimize_withdrawals(self, scenario: Optional[str] = None, **kwargs: Any) -> dict:
        return self._get_scenario(scenario).optimize_withdrawals(**kwargs)

    def plan_multi_year(self, scenario: Optional[str] = None, **kwargs: Any) -> dict:
        return self._get_scenario(scenario).plan_multi_year(**kwargs)

    def get_year(self, year_index: int, scenario: Optional[str] = None) -> dict:
        return self._get_scenario(scenario).get_year(year_index)

    def evaluate_custom(self, scenario: Optional[str] = None, **kwargs: Any) -> dict:
        return self._get_scenario(scenario).evaluate_custom(**kwargs)

    def compare_withdrawals(self, scenario: Optional[str] = None,
                            withdrawals: Optional[Dict[str, float]] = None) -> dict:
        return self._get_scenario(scenario).compare_withdrawals(withdrawals)

    def get_marginal_rate(self, income: float, scenario: Optional[str] = None, **kwargs: Any) -> dict:
        return self._get_scenario(scenario).get_marginal_rate(income, **kwargs)

    def compare_strategies(self, scenario: Optional[str] = None) -> dict:
        """Ladder against proportional for the same gross withdrawal.

        The ladder reads desired_income as a gross amount, so the proportional
        plan is built in gross mode too and both withdraw the same total.
        """
        tools = self._get_scenario(scenario)
        s = tools.scenario
        ladder = tools.optimizer.optimize(s.balances, s.desired_income, s.config)
        proportional = tools.optimizer.allocate_proportional(s.balances, s.desired_income, s.config,
                                                             is_gross_target=True)
        comparison = tools.optimizer.compare(ladder, proportional)
        return {
            "gross_withdrawal": s.desired_income,
            "ladder": ladder.to_dict(),
            "proportional": proportional.to_dict(),
            "post_tax_difference": proportional.post_tax_income - ladder.post_tax_income,
            "tax_difference": comparison.tax_difference,
            "percent_difference": comparison.percent_difference,
            "lower_tax_strategy": 'ladder' if comparison.lower_tax_plan == 'plan_a' else 'proportional',
            "savings": comparison.savings,
        }

