import os
import sys
import pytest
from unittest.mock import patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

import Program
from calc.plan_calculator import PlanCalculator
from model.Scenario import Scenario
from tax.TaxReference import TaxReference


def run_main(*args):
    with patch.object(sys, 'argv', ['Program.py', *args]):
        Program.main()


def test_default_mode_is_multi_year(capsys):
    run_main('retiree')
    out = capsys.readouterr().out

    assert 'MULTI-YEAR WITHDRAWAL SCHEDULE' in out
    assert 'Years of Income:' in out


def test_ladder_mode(capsys):
    run_main('retiree', '--mode', 'Ladder')
    out = capsys.readouterr().out

    assert 'GREEDY LADDER WITHDRAWALS' in out
    assert 'Municipal Bonds:' in out
    assert 'Feasible:' in out


def test_proportional_mode(capsys):
    run_main('retiree', '-m', 'Proportional')
    out = capsys.readouterr().out

    assert 'PROPORTIONAL WITHDRAWALS' in out
    assert 'Post-Tax Income:' in out


def test_compare_mode(capsys):
    run_main('retiree', '--mode', 'Compare')
    out = capsys.readouterr().out

    assert 'STRATEGY COMPARISON' in out
    assert 'Custom withdrawals' in out


def test_list_jurisdictions(capsys):
    run_main('--list-jurisdictions')
    out = capsys.readouterr().out

    assert 'CA   California' in out
    assert out.index('Alabama') < out.index('Wyoming')


def test_missing_scenario_exits(capsys):
    with pytest.raises(SystemExit) as exc:
        run_main('does-not-exist')
    assert exc.value.code == 1
    assert 'Spec file not found' in capsys.readouterr().out


def test_scenario_required():
    with pytest.raises(SystemExit) as exc:
        run_main()
    assert exc.value.code == 2


def test_bad_reference_path_exits(capsys, tmp_path):
    with pytest.raises(SystemExit) as exc:
        run_main('retiree', '--reference', str(tmp_path / 'missing.json'))
    assert exc.value.code == 1
    assert 'Could not load tax reference data' in capsys.readouterr().out


def test_compare_requires_custom_withdrawals():
    planner = PlanCalculator.from_reference(TaxReference.load())
    scenario = Scenario.from_spec('plain', {'jurisdiction': 'TX', 'desiredIncome': 1000,
                                            'balances': {'muniBonds': 5000}})
    with pytest.raises(ValueError, match="customWithdrawals"):
        Program.run_mode(planner, scenario, 'Compare')
