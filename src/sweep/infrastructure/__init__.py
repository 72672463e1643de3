"""
Infrastructure Layer - External analyzer integration.
"""

from sweep.infrastructure.knip_runner import (
    KnipCommandError,
    KnipRunner,
    filter_src_items,
    parse_knip_output,
)

__all__ = [
    "KnipRunner",
    "KnipCommandError",
    "parse_knip_output",
    "filter_src_items",
]
