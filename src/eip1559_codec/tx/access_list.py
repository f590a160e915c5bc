"""
EIP-2930 access list entries.

An entry pre-declares one account and the storage slots the transaction
will touch. Entries are kept in order since the order is part of the
signed encoding.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..codec.rlp_item import RlpItem
from ..runtime.address import ADDRESS_LENGTH, AddressType, EthereumAddress
from ..runtime.hexutil import bytes_to_hex, hex_to_int

logger = logging.getLogger(__name__)

STORAGE_KEY_LENGTH = 32


class AccessListEntry(BaseModel):
    """
    One (address, storage keys) pair of an access list.

    Wire form: [address(20 bytes), [key(32 bytes), ...]]
    Map form: {"address": "0x..", "storageKeys": ["0x..", ...]}
    """
    address: EthereumAddress
    storage_keys: List[bytes] = Field(
        default_factory=list,
        alias="storageKeys",
        description="32-byte storage slot keys"
    )

    model_config = {"populate_by_name": True, "frozen": True}

    __hash__ = None

    @field_validator('address')
    @classmethod
    def validate_address(cls, v: EthereumAddress) -> EthereumAddress:
        if v.type is not AddressType.NORMAL:
            raise ValueError("Access list address cannot be the contract deployment sentinel")
        return v

    @field_validator('storage_keys')
    @classmethod
    def validate_storage_keys(cls, v: List[bytes]) -> List[bytes]:
        for key in v:
            if len(key) != STORAGE_KEY_LENGTH:
                raise ValueError(f"Storage key must be {STORAGE_KEY_LENGTH} bytes, got {len(key)}")
        return v

    @classmethod
    def from_rlp_item(cls, item: RlpItem) -> Optional[AccessListEntry]:
        """
        Parse an entry from its decoded wire form.

        Returns:
            The entry, or None if the item is not a two-element list with a
            20-byte address and a list of 32-byte keys
        """
        if not item.is_list or item.count != 2:
            return None
        address_item, keys_item = item[0], item[1]
        if address_item.byte_length != ADDRESS_LENGTH:
            logger.debug("Access list address has invalid length: %s", address_item.byte_length)
            return None
        if not keys_item.is_list:
            return None
        keys = []
        for key_item in keys_item:
            if key_item.byte_length != STORAGE_KEY_LENGTH:
                logger.debug("Access list storage key has invalid length: %s", key_item.byte_length)
                return None
            keys.append(key_item.data)
        return cls(address=EthereumAddress(address_item.data), storage_keys=keys)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Optional[AccessListEntry]:
        """
        Parse an entry from its JSON-style map form.

        Storage keys are hex quantities; shorter keys are left-padded to
        32 bytes.
        """
        if not isinstance(data, Mapping):
            return None
        address = data.get("address")
        if not isinstance(address, str):
            return None
        parsed = EthereumAddress.from_string(address)
        if parsed is None:
            return None
        raw_keys = data.get("storageKeys", [])
        if not isinstance(raw_keys, list):
            return None
        keys = []
        for raw_key in raw_keys:
            value = hex_to_int(raw_key)
            if value is None or value.bit_length() > STORAGE_KEY_LENGTH * 8:
                return None
            keys.append(value.to_bytes(STORAGE_KEY_LENGTH, "big"))
        try:
            return cls(address=parsed, storage_keys=keys)
        except ValidationError as e:
            logger.debug("Access list entry rejected: %s", e)
            return None

    def encode_as_list(self) -> List[Any]:
        """Wire form, ready for RLP encoding."""
        return [self.address.address_data, list(self.storage_keys)]

    def encode_as_dict(self) -> Optional[Dict[str, Any]]:
        """Map form with a lowercase address and full-width hex keys."""
        if self.address.type is not AddressType.NORMAL:
            return None
        return {
            "address": self.address.address.lower(),
            "storageKeys": [bytes_to_hex(key) for key in self.storage_keys],
        }


def parse_access_list(raw: Any) -> Optional[List[AccessListEntry]]:
    """Parse a list of map-form entries; None if any entry is malformed."""
    if not isinstance(raw, list):
        return None
    entries = []
    for item in raw:
        entry = AccessListEntry.from_dict(item)
        if entry is None:
            return None
        entries.append(entry)
    return entries


__all__ = [
    "STORAGE_KEY_LENGTH",
    "AccessListEntry",
    "parse_access_list",
]
