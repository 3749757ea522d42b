#!/usr/bin/env python3
"""MCP Server for the Withdrawal Planner.

This server exposes the tax calculators and withdrawal optimizers as MCP
tools, allowing AI assistants to answer questions about how to draw
income from a set of accounts with the least tax.
"""

import os
import sys
import json
import asyncio
from typing import Any

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from tools import MultiScenarioTools


# Create the MCP server
server = Server("withdrawal-planner")

# Global tools instance (initialized on startup)
tools: MultiScenarioTools | None = None


def get_tools() -> MultiScenarioTools:
    """Get or initialize the tools instance."""
    global tools
    if tools is None:
        # Default scenario can be set via WITHDRAWAL_PLANNER_SCENARIO env var
        default_scenario = os.environ.get('WITHDRAWAL_PLANNER_SCENARIO')
        base_path = os.path.join(os.path.dirname(__file__), '..')
        tools = MultiScenarioTools(base_path, default_scenario)
    return tools


# Common parameter schemas
SCENARIO_PARAM = {
    "type": "string",
    "description": "The scenario name (folder in input-parameters). If not specified, uses the default scenario. Use list_scenarios to see available scenarios."
}

ACCOUNTS_SCHEMA = {
    "type": "object",
    "properties": {
        "muniBonds": {"type": "number"},
        "longTermGains": {"type": "number"},
        "shortTermGains": {"type": "number"},
        "ira": {"type": "number"}
    },
    "additionalProperties": False
}

FILING_STATUS_PARAM = {
    "type": "string",
    "enum": ["single", "marriedFilingJointly", "marriedFilingSeparately", "headOfHousehold"],
    "description": "Optional: override the scenario's filing status"
}

JURISDICTION_PARAM = {
    "type": "string",
    "description": "Optional: override the scenario's jurisdiction code (e.g. 'CA'). Use list_jurisdictions for valid codes."
}


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available withdrawal planning tools."""
    return [
        Tool(
            name="list_scenarios",
            description="List all available withdrawal scenarios with their filing status, jurisdiction, desired income and total balance.",
            inputSchema={"type": "object", "properties": {}, "required": []}
        ),
        Tool(
            name="reload_scenarios",
            description="Reload all scenarios from disk. Use this after adding, modifying, or removing scenario spec.json files.",
            inputSchema={"type": "object", "properties": {}, "required": []}
        ),
        Tool(
            name="list_jurisdictions",
            description="List jurisdiction codes and names from the tax reference table, sorted by name.",
            inputSchema={"type": "object", "properties": {}, "required": []}
        ),
        Tool(
            name="list_fields",
            description="List result field names with their short names and descriptions.",
            inputSchema={"type": "object", "properties": {}, "required": []}
        ),
        Tool(
            name="get_scenario_overview",
            description="Get the scenario inputs: filing status, jurisdiction, desired income, balances, custom withdrawals, and any input problems.",
            inputSchema={
                "type": "object",
                "properties": {"scenario": SCENARIO_PARAM},
                "required": []
            }
        ),
        Tool(
            name="optimize_withdrawals",
            description="Build a single-year withdrawal plan with full tax breakdown. 'ladder' drains muni bonds, long-term gains, short-term gains, then IRA. 'proportional' draws from every account by balance share and, unless is_gross is set, solves for the gross that nets the desired income.",
            inputSchema={
                "type": "object",
                "properties": {
                    "strategy": {"type": "string", "enum": ["ladder", "proportional"]},
                    "desired_income": {"type": "number", "description": "Optional: override the scenario's desired income"},
                    "is_gross": {"type": "boolean", "description": "Optional: treat desired_income as a gross withdrawal (proportional only)"},
                    "balances": ACCOUNTS_SCHEMA,
                    "filing_status": FILING_STATUS_PARAM,
                    "jurisdiction": JURISDICTION_PARAM,
                    "scenario": SCENARIO_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="plan_multi_year",
            description="Year-by-year withdrawal schedule that delivers the desired post-tax income until all accounts are depleted, with lifetime totals.",
            inputSchema={
                "type": "object",
                "properties": {
                    "desired_net_income": {"type": "number", "description": "Optional: override the scenario's desired post-tax income"},
                    "balances": ACCOUNTS_SCHEMA,
                    "filing_status": FILING_STATUS_PARAM,
                    "jurisdiction": JURISDICTION_PARAM,
                    "scenario": SCENARIO_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="get_year",
            description="Get one simulated year (1-based) of the scenario's multi-year plan.",
            inputSchema={
                "type": "object",
                "properties": {
                    "year_index": {"type": "integer", "description": "Simulated year, starting at 1"},
                    "scenario": SCENARIO_PARAM
                },
                "required": ["year_index"]
            }
        ),
        Tool(
            name="evaluate_custom",
            description="Price caller-chosen withdrawals without optimizing, and report any account they overdraw.",
            inputSchema={
                "type": "object",
                "properties": {
                    "withdrawals": ACCOUNTS_SCHEMA,
                    "filing_status": FILING_STATUS_PARAM,
                    "jurisdiction": JURISDICTION_PARAM,
                    "scenario": SCENARIO_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="compare_withdrawals",
            description="Compare custom withdrawals against the proportional plan and report the tax difference, savings and verdict.",
            inputSchema={
                "type": "object",
                "properties": {
                    "withdrawals": ACCOUNTS_SCHEMA,
                    "scenario": SCENARIO_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="compare_strategies",
            description="Compare the greedy ladder against the proportional strategy when both withdraw the scenario's desired income as the same gross amount.",
            inputSchema={
                "type": "object",
                "properties": {"scenario": SCENARIO_PARAM},
                "required": []
            }
        ),
        Tool(
            name="get_marginal_rate",
            description="Federal plus jurisdiction marginal rate on the next dollar of ordinary income at a given income level.",
            inputSchema={
                "type": "object",
                "properties": {
                    "income": {"type": "number"},
                    "filing_status": FILING_STATUS_PARAM,
                    "jurisdiction": JURISDICTION_PARAM,
                    "scenario": SCENARIO_PARAM
                },
                "required": ["income"]
            }
        )
    ]


def _overrides(arguments: dict[str, Any], *names: str) -> dict[str, Any]:
    return {n: arguments[n] for n in names if arguments.get(n) is not None}


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        wp_tools = get_tools()
        scenario = arguments.get("scenario")

        if name == "list_scenarios":
            result = wp_tools.list_scenarios()
        elif name == "reload_scenarios":
            result = wp_tools.reload_scenarios()
        elif name == "list_jurisdictions":
            result = wp_tools.list_jurisdictions()
        elif name == "list_fields":
            result = wp_tools.list_fields()
        elif name == "get_scenario_overview":
            result = wp_tools.get_scenario_overview(scenario)
        elif name == "optimize_withdrawals":
            result = wp_tools.optimize_withdrawals(
                scenario,
                **_overrides(arguments, "strategy", "desired_income", "is_gross", "balances",
                             "filing_status", "jurisdiction")
            )
        elif name == "plan_multi_year":
            result = wp_tools.plan_multi_year(
                scenario,
                **_overrides(arguments, "desired_net_income", "balances", "filing_status", "jurisdiction")
            )
        elif name == "get_year":
            result = wp_tools.get_year(arguments["year_index"], scenario)
        elif name == "evaluate_custom":
            result = wp_tools.evaluate_custom(
                scenario, **_overrides(arguments, "withdrawals", "filing_status", "jurisdiction")
            )
        elif name == "compare_withdrawals":
            result = wp_tools.compare_withdrawals(scenario, arguments.get("withdrawals"))
        elif name == "compare_strategies":
            result = wp_tools.compare_strategies(scenario)
        elif name == "get_marginal_rate":
            result = wp_tools.get_marginal_rate(
                arguments["income"], scenario, **_overrides(arguments, "filing_status", "jurisdiction")
            )
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(
            type="text",
            text=json.dumps(result, indent=2, default=str)
        )]
    except Exception as e:
        return [TextContent(
            type="text",
            text=json.dumps({"error": str(e)}, indent=2)
        )]


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    asyncio.run(main())
