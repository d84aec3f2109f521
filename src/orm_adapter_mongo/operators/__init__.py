"""MongoDB operator compilers for where-clause modifiers."""

from __future__ import annotations

from .comparison import COMPARISON_MODIFIERS, compile_comparison
from .string import PATTERN_MODIFIERS, compile_pattern

MODIFIERS = COMPARISON_MODIFIERS | PATTERN_MODIFIERS

__all__ = [
    "COMPARISON_MODIFIERS",
    "MODIFIERS",
    "compile_comparison",
    "compile_pattern",
]
