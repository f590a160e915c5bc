"""
EthereumAddress Pydantic custom type.

An address is either a normal 20-byte account address or the
contract-deployment sentinel, which carries no bytes at all.
"""

from enum import Enum
from typing import Any, Optional, Union

from Crypto.Hash import keccak
from eth_utils import is_checksum_address, to_checksum_address
from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

from .hexutil import is_hex, strip_hex_prefix

ADDRESS_LENGTH = 20


def keccak256(data: bytes) -> bytes:
    """Compute Keccak-256 (Ethereum's hash, not SHA3-256)."""
    return keccak.new(digest_bits=256).update(data).digest()


class AddressType(str, Enum):
    """Kind of destination an address denotes."""

    NORMAL = "normal"
    CONTRACT_DEPLOYMENT = "contractDeployment"


class EthereumAddress:
    """Custom Pydantic type for Ethereum addresses."""

    def __init__(self, address_data: bytes):
        address_data = bytes(address_data)
        if len(address_data) not in (0, ADDRESS_LENGTH):
            raise ValueError(
                f"Address must be {ADDRESS_LENGTH} bytes or empty, got {len(address_data)}"
            )
        self._data = address_data

    @property
    def type(self) -> AddressType:
        """Whether this is a normal address or the deployment sentinel."""
        if not self._data:
            return AddressType.CONTRACT_DEPLOYMENT
        return AddressType.NORMAL

    @property
    def address_data(self) -> bytes:
        """Raw address bytes (empty for the deployment sentinel)."""
        return self._data

    @property
    def address(self) -> str:
        """EIP-55 checksummed text, or "0x" for the deployment sentinel."""
        if not self._data:
            return "0x"
        return to_checksum_address(self._data)

    def to_checksum(self) -> str:
        return self.address

    def __str__(self) -> str:
        return self.address

    def __repr__(self) -> str:
        if not self._data:
            return "EthereumAddress.contract_deployment()"
        return f"EthereumAddress('{self.address}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, EthereumAddress):
            return self._data == other._data
        elif isinstance(other, str):
            return self.address.lower() == other.lower()
        return False

    def __hash__(self) -> int:
        return hash(self._data)

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        """Return a Pydantic CoreSchema that validates the EthereumAddress."""
        return core_schema.no_info_before_validator_function(
            cls._validate,
            core_schema.is_instance_schema(cls),
            serialization=core_schema.to_string_ser_schema(),
        )

    @classmethod
    def _validate(cls, value: Any, _info=None) -> "EthereumAddress":
        """Validate and convert the input to an EthereumAddress."""
        if isinstance(value, cls):
            return value
        if isinstance(value, (bytes, bytearray)):
            if len(value) == 0:
                return cls.contract_deployment()
            parsed = cls.from_bytes(value)
        elif isinstance(value, str):
            parsed = cls.from_string(value)
        else:
            parsed = None
        if parsed is None:
            raise ValueError(f"Invalid EthereumAddress: {value!r}")
        return parsed

    @classmethod
    def contract_deployment(cls) -> "EthereumAddress":
        """The "no destination" sentinel used by contract-creation transactions."""
        return cls(b"")

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray]) -> Optional["EthereumAddress"]:
        """Create a normal address from exactly 20 bytes."""
        if len(data) != ADDRESS_LENGTH:
            return None
        return cls(bytes(data))

    @classmethod
    def from_string(cls, address: str, ignore_checksum: bool = False) -> Optional["EthereumAddress"]:
        """
        Parse a hex address string.

        All-lowercase and all-uppercase strings are accepted as-is; a
        mixed-case string must carry a valid EIP-55 checksum unless
        ignore_checksum is set.

        Args:
            address: 40 hex digits, optionally 0x-prefixed
            ignore_checksum: Skip EIP-55 verification of mixed-case input

        Returns:
            The parsed address, or None if the string is not a valid address
        """
        if not isinstance(address, str):
            return None
        digits = strip_hex_prefix(address.strip())
        if len(digits) != ADDRESS_LENGTH * 2 or not is_hex(digits):
            return None
        mixed_case = digits != digits.lower() and digits != digits.upper()
        if mixed_case and not ignore_checksum and not is_checksum_address("0x" + digits):
            return None
        return cls(bytes.fromhex(digits))


__all__ = [
    "ADDRESS_LENGTH",
    "AddressType",
    "EthereumAddress",
    "keccak256",
]
