"""Field metadata for plan result fields.

This module provides descriptions and short names for the fields shown
in withdrawal tables. Short names are used as column headers and are
reported by the MCP list_fields tool.
"""

from dataclasses import dataclass
from typing import Dict


@dataclass
class FieldInfo:
    """Metadata for a single field."""
    short_name: str  # Column header (unique, concise)
    description: str  # Full description of the field


# Field metadata dictionary mapping field names to their info
FIELD_METADATA: Dict[str, FieldInfo] = {
    # Year Info
    "year_index": FieldInfo("Year", "Simulated year, starting at 1"),
    "is_final_year": FieldInfo("Final Year", "True for the year that withdraws everything left"),

    # Withdrawals
    "muniBonds": FieldInfo("Municipal Bonds", "Withdrawal from federally tax-exempt municipal bonds"),
    "longTermGains": FieldInfo("Long-Term Gains", "Withdrawal taxed at stacked long-term capital gains rates"),
    "shortTermGains": FieldInfo("Short-Term Gains", "Withdrawal taxed as ordinary income"),
    "ira": FieldInfo("Traditional IRA", "Fully taxable ordinary income withdrawal"),
    "gross_income": FieldInfo("Gross Income", "Total withdrawn before taxes"),

    # Taxes
    "taxable_ordinary_income": FieldInfo("Taxable Ordinary", "Ordinary income after the standard deduction"),
    "federal_ordinary_tax": FieldInfo("Ordinary Income Tax", "Federal tax on ordinary income"),
    "federal_capital_gains_tax": FieldInfo("Long-Term CG Tax", "Federal tax on stacked long-term capital gains"),
    "federal_tax": FieldInfo("Federal Tax", "Total federal income tax"),
    "state_tax": FieldInfo("State Tax", "Jurisdiction income tax on gross taxable withdrawals"),
    "total_tax": FieldInfo("Total Tax", "Federal plus jurisdiction tax"),
    "effective_rate": FieldInfo("Eff Rate", "Total tax / total income"),
    "tax_percentage": FieldInfo("Tax %", "Total tax / gross withdrawal for the year"),
    "post_tax_income": FieldInfo("Post-Tax Income", "Gross withdrawal less total tax"),
}


def get_short_name(field_name: str) -> str:
    """Get the short name for a field, or the field name if not found."""
    info = FIELD_METADATA.get(field_name)
    return info.short_name if info else field_name


def get_description(field_name: str) -> str:
    """Get the description for a field, or empty string if not found."""
    info = FIELD_METADATA.get(field_name)
    return info.description if info else ""


def wrap_header(text: str, max_width: int) -> list[str]:
    """Wrap a header text into multiple lines to fit within max_width.

    Words are split on spaces and distributed across lines to minimize
    the total number of lines while staying within max_width.

    Args:
        text: The header text to wrap
        max_width: Maximum width per line

    Returns:
        List of strings, each representing a line
    """
    if len(text) <= max_width:
        return [text]

    words = text.split()
    lines = []
    current_line = ""

    for word in words:
        if not current_line:
            current_line = word
        elif len(current_line) + 1 + len(word) <= max_width:
            current_line += " " + word
        else:
            lines.append(current_line)
            current_line = word

    if current_line:
        lines.append(current_line)

    return lines
