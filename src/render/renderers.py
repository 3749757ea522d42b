"""Renderer classes for displaying withdrawal plan results.

This module contains renderer classes that handle the presentation logic
for the different plan outputs: a single-period plan, a multi-year
depletion schedule, and a comparison of two plans.
"""

from abc import ABC, abstractmethod
from typing import Any, List

from model.Accounts import ACCOUNT_NAMES, ACCOUNT_ORDER
from model.PlanData import ComparisonResult, MultiYearPlan, WithdrawalPlan
from model.field_metadata import get_short_name, wrap_header


def format_multiline_headers(columns: List[tuple], year_width: int = 6) -> tuple[List[str], str]:
    """Format column headers with multi-line wrapping support.

    Args:
        columns: List of (header_text, width) tuples for each column
        year_width: Width of the Year column (default 6)

    Returns:
        Tuple of (list of header lines, separator line)
    """
    # Wrap each column header
    wrapped_headers = []
    for header, width in columns:
        lines = wrap_header(header, width)
        wrapped_headers.append((lines, width))

    # Find max number of lines needed
    max_lines = max(len(lines) for lines, _ in wrapped_headers) if wrapped_headers else 1

    # Pad all headers to have the same number of lines (pad at top)
    for lines, _ in wrapped_headers:
        while len(lines) < max_lines:
            lines.insert(0, "")

    header_lines = []
    for line_idx in range(max_lines):
        if line_idx == max_lines - 1:
            header_line = f"  {'Year':<{year_width}}"
        else:
            header_line = f"  {'':<{year_width}}"

        for lines, width in wrapped_headers:
            header_line += f" {lines[line_idx]:>{width}}"
        header_lines.append(header_line)

    sep_line = f"  {'-' * year_width}"
    for _, width in wrapped_headers:
        sep_line += f" {'-' * width}"

    return header_lines, sep_line


class BaseRenderer(ABC):
    """Abstract base class for all renderers."""

    @abstractmethod
    def render(self, data: Any) -> None:
        """Render the data to output."""
        pass


class WithdrawalPlanRenderer(BaseRenderer):
    """Renderer for a single-period withdrawal plan and its tax breakdown."""

    def __init__(self, title: str = "WITHDRAWAL PLAN"):
        self.title = title

    def render(self, data: WithdrawalPlan) -> None:
        """Render the withdrawals, the tax breakdown and feasibility.

        Args:
            data: WithdrawalPlan from any single-period strategy
        """
        tax = data.tax_result
        breakdown = tax.breakdown

        print()
        print("=" * 60)
        print(f"{self.title:^60}")
        print("=" * 60)

        print()
        print("-" * 60)
        print("WITHDRAWALS")
        print("-" * 60)
        for name, amount in data.withdrawals.items():
            print(f"  {ACCOUNT_NAMES[name] + ':':<40} ${amount:>14,.2f}")
        print(f"  {'-' * 40}")
        print(f"  {'Total Withdrawn:':<40} ${data.total_withdrawn:>14,.2f}")

        print()
        print("-" * 60)
        print("FEDERAL TAXES")
        print("-" * 60)
        print(f"  {'Ordinary Income:':<40} ${breakdown.ordinary_income:>14,.2f}")
        print(f"  {'Taxable Ordinary Income:':<40} ${breakdown.taxable_ordinary_income:>14,.2f}")
        print(f"  {'Ordinary Income Tax:':<40} ${breakdown.federal_ordinary_tax:>14,.2f}")
        print(f"  {'Long-Term Capital Gains Tax:':<40} ${breakdown.federal_capital_gains_tax:>14,.2f}")
        print(f"  {'-' * 40}")
        print(f"  {'Total Federal Tax:':<40} ${tax.federal_tax:>14,.2f}")

        print()
        print("-" * 60)
        print("STATE TAXES")
        print("-" * 60)
        print(f"  {'State Income Tax:':<40} ${tax.state_tax:>14,.2f}")

        print()
        print("=" * 60)
        print("SUMMARY")
        print("=" * 60)
        print(f"  {'Total Income:':<40} ${tax.total_income:>14,.2f}")
        print(f"  {'Total Tax:':<40} ${tax.total_tax:>14,.2f}")
        print(f"  {'Effective Tax Rate:':<40} {tax.effective_rate:>14.2f}%")
        print(f"  {'Post-Tax Income:':<40} ${data.post_tax_income:>14,.2f}")
        if data.feasible:
            print(f"  {'Feasible:':<40} {'yes':>15}")
        else:
            print(f"  {'Shortfall:':<40} ${data.shortfall:>14,.2f}")
        print("=" * 60)
        print()


class MultiYearRenderer(BaseRenderer):
    """Renderer for the year-by-year depletion schedule."""

    def render(self, data: MultiYearPlan) -> None:
        """Render one row per simulated year followed by lifetime totals.

        Args:
            data: MultiYearPlan from PlanCalculator
        """
        print()
        print("=" * 130)
        print(f"{'MULTI-YEAR WITHDRAWAL SCHEDULE':^130}")
        print("=" * 130)
        print()

        columns = [(get_short_name(name), 14) for name in ACCOUNT_ORDER] + [
            (get_short_name("gross_income"), 14),
            (get_short_name("total_tax"), 12),
            (get_short_name("tax_percentage"), 8),
            (get_short_name("post_tax_income"), 14),
        ]

        header_lines, sep_line = format_multiline_headers(columns, year_width=8)
        for line in header_lines:
            print(line)
        print(sep_line)

        for yp in data.years:
            w = yp.withdrawals
            label = f"{yp.year_index}{'*' if yp.is_final_year else ''}"
            print(f"  {label:<8} ${w.muniBonds:>13,.0f} ${w.longTermGains:>13,.0f} ${w.shortTermGains:>13,.0f} ${w.ira:>13,.0f} ${yp.gross_income:>13,.0f} ${yp.tax_result.total_tax:>11,.0f} {yp.tax_percentage:>7.2f}% ${yp.post_tax_income:>13,.0f}")

        print(sep_line)
        if any(yp.is_final_year for yp in data.years):
            print("  * final year: remaining balances withdrawn in full")

        s = data.summary
        print()
        print("=" * 130)
        print(f"{'SUMMARY':^130}")
        print("=" * 130)
        print(f"  {'Years of Income:':<40} {s.total_years:>18}")
        print(f"  {'Total Withdrawn:':<40} ${s.total_withdrawn:>17,.2f}")
        print(f"  {'Total Taxes Paid:':<40} ${s.total_taxes_paid:>17,.2f}")
        print(f"  {'Average Effective Rate:':<40} {s.avg_effective_rate:>17.2f}%")
        print(f"  {'Total Post-Tax Income:':<40} ${s.total_post_tax_income:>17,.2f}")
        print("=" * 130)
        print()


class ComparisonRenderer(BaseRenderer):
    """Renderer for a custom plan measured against the optimized plan."""

    def render(self, data: dict) -> None:
        """Render both plans side by side and the verdict.

        Args:
            data: dict with 'optimal' and 'custom' WithdrawalPlans and
                  the 'comparison' ComparisonResult of custom against optimal
        """
        optimal: WithdrawalPlan = data['optimal']
        custom: WithdrawalPlan = data['custom']
        comparison: ComparisonResult = data['comparison']

        print()
        print("=" * 72)
        print(f"{'STRATEGY COMPARISON':^72}")
        print("=" * 72)
        print(f"  {'':<28} {'Optimized':>20} {'Custom':>20}")
        print(f"  {'-' * 28} {'-' * 20} {'-' * 20}")
        for name in ACCOUNT_ORDER:
            print(f"  {ACCOUNT_NAMES[name]:<28} ${getattr(optimal.withdrawals, name):>19,.2f} ${getattr(custom.withdrawals, name):>19,.2f}")
        print(f"  {'Total Withdrawn':<28} ${optimal.total_withdrawn:>19,.2f} ${custom.total_withdrawn:>19,.2f}")
        print(f"  {'Federal Tax':<28} ${optimal.tax_result.federal_tax:>19,.2f} ${custom.tax_result.federal_tax:>19,.2f}")
        print(f"  {'State Tax':<28} ${optimal.tax_result.state_tax:>19,.2f} ${custom.tax_result.state_tax:>19,.2f}")
        print(f"  {'Total Tax':<28} ${optimal.tax_result.total_tax:>19,.2f} ${custom.tax_result.total_tax:>19,.2f}")
        print(f"  {'Effective Rate':<28} {optimal.tax_result.effective_rate:>19.2f}% {custom.tax_result.effective_rate:>19.2f}%")
        print()

        verdict = comparison.verdict
        if verdict == 'optimal':
            print("  Custom withdrawals match the optimized strategy")
        elif verdict == 'less tax':
            print(f"  Custom withdrawals pay ${comparison.savings:,.2f} less tax")
        else:
            print(f"  Custom withdrawals pay ${comparison.savings:,.2f} more tax ({comparison.percent_difference:+.2f}%)")

        errors = data.get('validation_errors') or []
        for err in errors:
            print(f"  ! {err.message}: requested ${err.requested:,.2f}, available ${err.available:,.2f}")
        print("=" * 72)
        print()


# Registry mapping mode names to renderer classes
RENDERER_REGISTRY = {
    'Ladder': WithdrawalPlanRenderer,
    'Proportional': WithdrawalPlanRenderer,
    'MultiYear': MultiYearRenderer,
    'Compare': ComparisonRenderer,
}
