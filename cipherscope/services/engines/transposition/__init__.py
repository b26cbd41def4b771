"""Transposition cipher engines."""

from cipherscope.services.engines.transposition.rail_fence import RailFenceEngine
from cipherscope.services.engines.transposition.columnar import ColumnarEngine

__all__ = [
    "RailFenceEngine",
    "ColumnarEngine",
]
