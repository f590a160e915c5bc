"""
RLP container codec.

- rlp_item.py: tagged RlpItem variant and list encoder over the rlp library
"""

from .rlp_item import RlpContent, RlpItem, encode

__all__ = [
    "RlpContent",
    "RlpItem",
    "encode",
]
