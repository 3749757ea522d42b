import sys
import os
import argparse
import logging
from tax.TaxReference import TaxReference, TaxConfigError, ReferenceDataError
from tax.StateDetails import StateDetails
from calc.plan_calculator import PlanCalculator
from model.Scenario import load_scenario, validate_scenario
from render.renderers import (
    WithdrawalPlanRenderer,
    MultiYearRenderer,
    ComparisonRenderer,
    RENDERER_REGISTRY,
)


BASE_PATH = os.path.normpath(os.path.join(os.path.dirname(__file__), '..'))


def run_mode(planner: PlanCalculator, scenario, mode: str) -> None:
    """Calculate and render one mode for a loaded scenario."""
    optimizer = planner.optimizer
    config = scenario.config

    if mode == 'Ladder':
        plan = optimizer.optimize(scenario.balances, scenario.desired_income, config)
        WithdrawalPlanRenderer("GREEDY LADDER WITHDRAWALS").render(plan)
    elif mode == 'Proportional':
        plan = optimizer.allocate_proportional(
            scenario.balances, scenario.desired_income, config, scenario.income_is_gross
        )
        WithdrawalPlanRenderer("PROPORTIONAL WITHDRAWALS").render(plan)
    elif mode == 'MultiYear':
        result = planner.calculate(scenario.balances, scenario.desired_income, config)
        MultiYearRenderer().render(result)
    elif mode == 'Compare':
        if scenario.custom_withdrawals is None:
            raise ValueError("Compare mode requires 'customWithdrawals' in the scenario spec.json")
        optimal = optimizer.allocate_proportional(
            scenario.balances, scenario.desired_income, config, scenario.income_is_gross
        )
        custom = optimizer.evaluate_custom(scenario.custom_withdrawals, config)
        validation = optimizer.validate(scenario.custom_withdrawals, scenario.balances)
        ComparisonRenderer().render({
            'optimal': optimal,
            'custom': custom,
            'comparison': optimizer.compare(optimal, custom),
            'validation_errors': validation.errors,
        })


def main():
    parser = argparse.ArgumentParser(
        description='Tax-aware withdrawal planner',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  MultiYear     Year-by-year schedule that depletes all accounts (default)
  Proportional  Single-year proportional withdrawals for the desired income
  Ladder        Single-year greedy ladder: muni bonds, LTCG, STCG, then IRA
  Compare       Price the scenario's customWithdrawals against the proportional plan

Examples:
  python src/Program.py retiree
  python src/Program.py retiree --mode Ladder
  python src/Program.py retiree --mode Compare
  python src/Program.py --list-jurisdictions
        """
    )
    parser.add_argument('scenario', nargs='?', help='Name of the scenario (folder in input-parameters)')
    parser.add_argument('--mode', '-m',
                        choices=list(RENDERER_REGISTRY.keys()),
                        default='MultiYear',
                        help='Output mode (default: MultiYear)')
    parser.add_argument('--reference', '-r',
                        help='Path to a tax reference JSON file (default: reference/tax-data.json)')
    parser.add_argument('--list-jurisdictions', action='store_true',
                        help='List jurisdiction codes and names, then exit')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log solver and simulation details')

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        reference = TaxReference.load(args.reference)
    except (OSError, ReferenceDataError) as e:
        print(f"Could not load tax reference data: {e}")
        sys.exit(1)

    if args.list_jurisdictions:
        for code, name in StateDetails(reference).jurisdictions():
            print(f"  {code:<4} {name}")
        return

    if not args.scenario:
        parser.error("scenario is required (or use --list-jurisdictions)")

    try:
        scenario = load_scenario(BASE_PATH, args.scenario)
    except FileNotFoundError as e:
        print(e)
        sys.exit(1)
    except ValueError as e:
        print(f"Invalid scenario '{args.scenario}': {e}")
        sys.exit(1)

    errors = validate_scenario(scenario)
    if errors:
        print("Please fix the following errors:")
        for err in errors:
            print(f"  - {err}")
        sys.exit(1)

    planner = PlanCalculator.from_reference(reference)
    try:
        run_mode(planner, scenario, args.mode)
    except TaxConfigError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)
    except ValueError as e:
        print(e)
        sys.exit(1)


if __name__ == "__main__":
    main()
