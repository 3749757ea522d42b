"""Tests for the MCP server tools module."""

import os
import sys
import json
import shutil
import tempfile
import pytest

# Add src and mcp-server to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../mcp-server')))

from tools import WithdrawalPlannerTools, MultiScenarioTools
from tax.TaxReference import TaxReference


# Path to test fixtures
FIXTURES_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), 'fixtures'))

# Path to the project root (for reference files)
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '../..'))


@pytest.fixture(scope="module")
def test_base_path():
    """Create a temporary directory structure for testing.

    This creates a temp directory with the required structure:
    - input-parameters/testscenario/spec.json (from fixtures)
    - reference/tax-data.json (symlinked from project)
    """
    temp_dir = tempfile.mkdtemp()

    # Copy the test scenario from fixtures
    input_params_dir = os.path.join(temp_dir, 'input-parameters')
    os.makedirs(input_params_dir)
    shutil.copytree(
        os.path.join(FIXTURES_PATH, 'testscenario'),
        os.path.join(input_params_dir, 'testscenario')
    )

    # Symlink the reference directory from the project root
    os.symlink(
        os.path.join(PROJECT_ROOT, 'reference'),
        os.path.join(temp_dir, 'reference')
    )

    yield temp_dir

    # Cleanup
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(scope="module")
def reference():
    return TaxReference.load()


class TestWithdrawalPlannerTools:
    """Tests for WithdrawalPlannerTools class."""

    @pytest.fixture
    def tools(self, test_base_path, reference):
        return WithdrawalPlannerTools(test_base_path, 'testscenario', reference)

    def test_init_loads_scenario(self, tools):
        assert tools.scenario.config.jurisdiction_code == 'IL'
        assert tools.scenario.desired_income == 40000
        assert tools.scenario.balances.total() == 200000

    def test_get_scenario_overview(self, tools):
        overview = tools.get_scenario_overview()

        assert overview['scenario_name'] == 'testscenario'
        assert overview['filing_status'] == 'single'
        assert overview['total_available'] == 200000
        assert overview['custom_withdrawals']['ira'] == 25000
        assert overview['input_errors'] == []

    def test_optimize_proportional(self, tools):
        result = tools.optimize_withdrawals()

        assert result['strategy'] == 'proportional'
        assert result['feasible']
        assert abs(result['post_tax_income'] - 40000) < 1

    def test_optimize_ladder(self, tools):
        result = tools.optimize_withdrawals(strategy='ladder')

        assert result['withdrawals']['muniBonds'] == 20000
        assert result['withdrawals']['longTermGains'] == 20000
        assert result['withdrawals']['ira'] == 0
        assert result['total_withdrawn'] == 40000

    def test_optimize_with_overrides(self, tools):
        result = tools.optimize_withdrawals(desired_income=10000, is_gross=True,
                                            balances={'ira': 50000}, jurisdiction='TX')

        assert result['withdrawals']['ira'] == pytest.approx(10000)
        assert result['tax_result']['state_tax'] == 0

    def test_optimize_unknown_strategy(self, tools):
        with pytest.raises(ValueError, match="Unknown strategy"):
            tools.optimize_withdrawals(strategy='random')

    def test_plan_multi_year_cached(self, tools):
        first = tools.plan_multi_year()
        assert tools._multi_year is not None
        assert tools.plan_multi_year() == first
        assert first['summary']['total_years'] == len(first['years'])

    def test_plan_multi_year_override(self, tools):
        result = tools.plan_multi_year(desired_net_income=100000)
        assert result['summary']['total_years'] == 2

    def test_get_year(self, tools):
        year = tools.get_year(1)
        assert year['year_index'] == 1
        assert 'tax_percentage' in year

        missing = tools.get_year(500)
        assert 'error' in missing

    def test_evaluate_custom_uses_scenario_withdrawals(self, tools):
        result = tools.evaluate_custom()

        assert result['total_withdrawn'] == 50000
        assert result['validation']['valid']

    def test_evaluate_custom_reports_overdraft(self, tools):
        result = tools.evaluate_custom(withdrawals={'shortTermGains': 25000})

        assert not result['validation']['valid']
        assert result['validation']['errors'][0]['message'] == 'Insufficient funds in shortTermGains'

    def test_compare_withdrawals(self, tools):
        result = tools.compare_withdrawals()

        assert result['verdict'] in ('optimal', 'less tax', 'more tax')
        assert result['savings'] == pytest.approx(abs(result['tax_difference']))
        assert result['lower_tax_plan'] in ('optimal', 'custom')

    def test_get_marginal_rate(self, tools):
        result = tools.get_marginal_rate(50000)

        assert result['jurisdiction'] == 'IL'
        assert result['marginal_rate'] == pytest.approx(0.22 + 0.0495)

    def test_results_are_json_serializable(self, tools):
        json.dumps(tools.compare_withdrawals(), default=str)
        json.dumps(tools.plan_multi_year(), default=str)


class TestMultiScenarioTools:
    """Tests for MultiScenarioTools class."""

    @pytest.fixture
    def multi_tools(self, test_base_path):
        return MultiScenarioTools(test_base_path)

    def test_discovers_scenarios(self, multi_tools):
        assert 'testscenario' in multi_tools.scenarios
        assert multi_tools.default_scenario == 'testscenario'

    def test_list_scenarios(self, multi_tools):
        result = multi_tools.list_scenarios()

        assert result['available_scenarios'] == ['testscenario']
        assert result['scenarios_info']['testscenario']['jurisdiction'] == 'IL'

    def test_unknown_scenario(self, multi_tools):
        with pytest.raises(ValueError, match="not found"):
            multi_tools.get_scenario_overview('nonexistent')

    def test_list_jurisdictions(self, multi_tools):
        result = multi_tools.list_jurisdictions()

        assert result['tax_year'] == 2024
        assert result['version'] == '2024.1'
        assert {'code': 'IL', 'name': 'Illinois'} in result['jurisdictions']

    def test_list_fields(self, multi_tools):
        fields = multi_tools.list_fields()
        assert fields['tax_percentage']['short_name'] == 'Tax %'

    def test_delegates_to_default_scenario(self, multi_tools):
        overview = multi_tools.get_scenario_overview()
        assert overview['scenario'] == 'testscenario'

        result = multi_tools.optimize_withdrawals(strategy='ladder')
        assert result['strategy'] == 'ladder'

    def test_compare_strategies(self, multi_tools):
        result = multi_tools.compare_strategies()

        assert result['lower_tax_strategy'] in ('ladder', 'proportional')
        assert result['savings'] == pytest.approx(abs(result['tax_difference']))

    def test_compare_strategies_same_gross(self, multi_tools):
        # testscenario asks for 40000 as post-tax income, but the ladder
        # reads it as gross, so both plans must withdraw 40000 gross
        result = multi_tools.compare_strategies()
        ladder = result['ladder']
        proportional = result['proportional']

        assert result['gross_withdrawal'] == 40000
        assert ladder['total_withdrawn'] == pytest.approx(40000)
        assert proportional['total_withdrawn'] == pytest.approx(ladder['total_withdrawn'])
        # Muni bonds and long-term gains cover the ladder, so it keeps more
        assert result['lower_tax_strategy'] == 'ladder'
        assert result['post_tax_difference'] == pytest.approx(-result['tax_difference'])
        assert ladder['post_tax_income'] > proportional['post_tax_income']

    def test_reload_scenarios(self, test_base_path, multi_tools):
        extra = os.path.join(test_base_path, 'input-parameters', 'extra')
        os.makedirs(extra)
        with open(os.path.join(extra, 'spec.json'), 'w') as f:
            json.dump({'jurisdiction': 'TX', 'desiredIncome': 1000, 'balances': {'muniBonds': 5000}}, f)
        try:
            result = multi_tools.reload_scenarios()

            assert result['status'] == 'success'
            assert result['changes']['added'] == ['extra']
            assert result['changes']['reloaded'] == ['testscenario']
        finally:
            shutil.rmtree(extra)

    def test_bad_scenario_is_skipped(self, test_base_path, capsys):
        broken = os.path.join(test_base_path, 'input-parameters', 'broken')
        os.makedirs(broken)
        with open(os.path.join(broken, 'spec.json'), 'w') as f:
            json.dump({'filingStatus': 'widowed'}, f)
        try:
            multi_tools = MultiScenarioTools(test_base_path)

            assert 'broken' not in multi_tools.scenarios
            assert "Failed to load scenario 'broken'" in capsys.readouterr().err
        finally:
            shutil.rmtree(broken)
