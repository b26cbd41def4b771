"""Detection patterns and their priority-ordered registry."""

from cipherscope.services.patterns.base import DetectionPattern
from cipherscope.services.patterns.registry import PatternRegistry

__all__ = [
    "DetectionPattern",
    "PatternRegistry",
]
