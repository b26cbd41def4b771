"""
Decoding pipelines built on the single-layer detector.

1. Multi-layer decoding peels nested encodings one layer at a time
2. The cross-check ensemble merges candidates from independent strategies
"""

from cipherscope.services.pipeline.cross_check import CrossCheckEngine
from cipherscope.services.pipeline.multi_layer import MultiLayerDecoder

__all__ = [
    "CrossCheckEngine",
    "MultiLayerDecoder",
]
