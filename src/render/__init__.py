"""Render module for withdrawal plan output display."""

from render.renderers import (
    BaseRenderer,
    WithdrawalPlanRenderer,
    MultiYearRenderer,
    ComparisonRenderer,
    format_multiline_headers,
    RENDERER_REGISTRY,
)

__all__ = [
    'BaseRenderer',
    'WithdrawalPlanRenderer',
    'MultiYearRenderer',
    'ComparisonRenderer',
    'format_multiline_headers',
    'RENDERER_REGISTRY',
]
