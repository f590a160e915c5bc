"""
RLP item model over the `rlp` library.

Decoded RLP is exposed as a tagged variant instead of raw nested
lists/bytes so callers inspect the content kind explicitly:

- NO_ITEM: nothing at this position (index past the end of a list)
- DATA: a byte string, possibly empty
- LIST: an ordered list of further items
"""

import logging
from enum import Enum
from typing import Any, List, Optional, Sequence

import rlp
from rlp.exceptions import RLPException

logger = logging.getLogger(__name__)


class RlpContent(Enum):
    """Content tag of an RlpItem."""

    NO_ITEM = "noItem"
    DATA = "data"
    LIST = "list"


class RlpItem:
    """One decoded RLP element."""

    __slots__ = ("content", "_data", "_items")

    def __init__(self, content: RlpContent, data: bytes = b"",
                 items: Optional[Sequence["RlpItem"]] = None):
        self.content = content
        self._data = bytes(data) if content is RlpContent.DATA else b""
        self._items = list(items or []) if content is RlpContent.LIST else []

    @classmethod
    def no_item(cls) -> "RlpItem":
        return cls(RlpContent.NO_ITEM)

    @classmethod
    def from_data(cls, data: bytes) -> "RlpItem":
        return cls(RlpContent.DATA, data=data)

    @classmethod
    def from_list(cls, items: Sequence["RlpItem"]) -> "RlpItem":
        return cls(RlpContent.LIST, items=items)

    @classmethod
    def from_decoded(cls, value: Any) -> "RlpItem":
        """Wrap the nested bytes/list structure produced by rlp.decode."""
        if isinstance(value, (bytes, bytearray)):
            return cls.from_data(value)
        return cls.from_list([cls.from_decoded(v) for v in value])

    @classmethod
    def decode(cls, raw: bytes) -> Optional["RlpItem"]:
        """
        Decode exactly one RLP item from raw.

        Args:
            raw: RLP-encoded bytes

        Returns:
            The decoded item, or None if raw is not a single well-formed item
            or nests too deeply to decode
        """
        if not raw:
            return None
        try:
            return cls.from_decoded(rlp.decode(bytes(raw), strict=True))
        except (RLPException, IndexError) as e:
            logger.debug("RLP decode failed: %s", e)
            return None
        except RecursionError:
            logger.debug("RLP decode failed: %d bytes nest too deeply", len(raw))
            return None

    @property
    def is_data(self) -> bool:
        return self.content is RlpContent.DATA

    @property
    def is_list(self) -> bool:
        return self.content is RlpContent.LIST

    @property
    def data(self) -> Optional[bytes]:
        """Payload of a DATA item; None for lists and missing items."""
        if self.content is RlpContent.DATA:
            return self._data
        return None

    @property
    def byte_length(self) -> Optional[int]:
        """Payload length of a DATA item."""
        if self.content is RlpContent.DATA:
            return len(self._data)
        return None

    @property
    def count(self) -> Optional[int]:
        """Number of sub-items of a LIST item."""
        if self.content is RlpContent.LIST:
            return len(self._items)
        return None

    @property
    def is_empty(self) -> bool:
        """True for a missing item, an empty string or an empty list."""
        if self.content is RlpContent.DATA:
            return not self._data
        if self.content is RlpContent.LIST:
            return not self._items
        return True

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> "RlpItem":
        if 0 <= index < len(self._items):
            return self._items[index]
        return RlpItem.no_item()

    def __iter__(self):
        return iter(self._items)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, RlpItem):
            return NotImplemented
        return (self.content is other.content and self._data == other._data
                and self._items == other._items)

    def __repr__(self) -> str:
        if self.content is RlpContent.DATA:
            return f"RlpItem(data=0x{self._data.hex()})"
        if self.content is RlpContent.LIST:
            return f"RlpItem(list={self._items!r})"
        return "RlpItem(noItem)"


def encode(fields: List[Any]) -> Optional[bytes]:
    """
    RLP-encode a list of ints, bytes and nested lists.

    Integers are written as minimal big-endian strings (zero is the empty
    string).

    Returns:
        Encoded bytes, or None if the rlp library rejects a value
    """
    try:
        return rlp.encode(fields)
    except (RLPException, TypeError) as e:
        logger.warning("RLP encode failed: %s", e)
        return None


__all__ = [
    "RlpContent",
    "RlpItem",
    "encode",
]
