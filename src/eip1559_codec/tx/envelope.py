"""
EIP-1559 dynamic-fee transaction envelope.

Wire form (EIP-2718 typed envelope):

    0x02 || rlp([chainId, nonce, maxPriorityFeePerGas, maxFeePerGas,
                 gasLimit, destination, value, data, accessList,
                 v, r, s])

The signing pre-image uses only the first nine fields. The JSON-style
parameter form mirrors the RPC transaction object with hex quantities.
"""

from __future__ import annotations
import logging
from enum import Enum, IntEnum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, Field

from ..codec.rlp_item import RlpItem, encode as rlp_encode
from ..runtime.address import AddressType, EthereumAddress, keccak256
from ..runtime.errors import ErrorCode, InvalidAddressError
from ..runtime.hexutil import bytes_to_hex, hex_to_bytes, hex_to_int, int_to_hex
from .access_list import AccessListEntry, parse_access_list
from .options import FeePerGasPolicy, GasLimitPolicy, NoncePolicy, TransactionOptions

logger = logging.getLogger(__name__)


class TransactionType(IntEnum):
    """EIP-2718 transaction type discriminants."""

    LEGACY = 0
    EIP2930 = 1
    EIP1559 = 2


class EncodeType(str, Enum):
    """Field set written by EIP1559Envelope.encode_for."""

    TRANSACTION = "transaction"  # all fields, broadcastable
    SIGNATURE = "signature"  # signing pre-image, no v/r/s


class _RlpKey(IntEnum):
    CHAIN_ID = 0
    NONCE = 1
    MAX_PRIORITY_FEE_PER_GAS = 2
    MAX_FEE_PER_GAS = 3
    GAS_LIMIT = 4
    DESTINATION = 5
    AMOUNT = 6
    DATA = 7
    ACCESS_LIST = 8
    SIG_V = 9
    SIG_R = 10
    SIG_S = 11
    TOTAL = 12


_QUANTITY_KEYS = (
    (_RlpKey.CHAIN_ID, "chain_id"),
    (_RlpKey.NONCE, "nonce"),
    (_RlpKey.MAX_PRIORITY_FEE_PER_GAS, "max_priority_fee_per_gas"),
    (_RlpKey.MAX_FEE_PER_GAS, "max_fee_per_gas"),
    (_RlpKey.GAS_LIMIT, "gas_limit"),
    (_RlpKey.AMOUNT, "value"),
    (_RlpKey.SIG_V, "v"),
    (_RlpKey.SIG_R, "r"),
    (_RlpKey.SIG_S, "s"),
)

_REQUIRED_PARAMS = ("to", "nonce", "value", "chainId", "v", "r", "s")

_DEPLOYMENT_STRINGS = ("", "0x", "0x0")


class TransactionParameters(BaseModel):
    """JSON-style transaction object as exchanged with RPC interfaces."""
    sender: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    type: Optional[str] = None
    chain_id: Optional[str] = Field(default=None, alias="chainId")
    nonce: Optional[str] = None
    value: Optional[str] = None
    gas: Optional[str] = None
    max_fee_per_gas: Optional[str] = Field(default=None, alias="maxFeePerGas")
    max_priority_fee_per_gas: Optional[str] = Field(default=None, alias="maxPriorityFeePerGas")
    data: Optional[str] = None
    access_list: Optional[List[Dict[str, Any]]] = Field(default=None, alias="accessList")
    v: Optional[str] = None
    r: Optional[str] = None
    s: Optional[str] = None

    model_config = {"populate_by_name": True}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to an RPC-compatible dictionary.

        Unset fields are omitted, except "to", which is kept as null for
        contract deployments.
        """
        result = self.model_dump(by_alias=True, exclude_none=True)
        result.setdefault("to", None)
        return result


class EIP1559Envelope(BaseModel):
    """
    One EIP-1559 transaction.

    Instances are immutable; apply_options and with_signature return new
    envelopes. Construct one directly with keyword arguments, from wire
    bytes (from_raw), from an RPC map (from_params) or from an options
    overlay (create).
    """
    chain_id: int = Field(default=0, ge=0, alias="chainId")
    nonce: int = Field(default=0, ge=0)
    max_priority_fee_per_gas: int = Field(default=0, ge=0, alias="maxPriorityFeePerGas")
    max_fee_per_gas: int = Field(default=0, ge=0, alias="maxFeePerGas")
    gas_limit: int = Field(default=0, ge=0, alias="gasLimit")
    to: EthereumAddress
    value: int = Field(default=0, ge=0)
    data: bytes = b""
    access_list: List[AccessListEntry] = Field(default_factory=list, alias="accessList")
    v: int = Field(default=1, ge=0)
    r: int = Field(default=0, ge=0)
    s: int = Field(default=0, ge=0)

    model_config = {"populate_by_name": True, "frozen": True}

    # frozen, but holds lists
    __hash__ = None

    @property
    def type(self) -> TransactionType:
        return TransactionType.EIP1559

    def __str__(self) -> str:
        lines = [
            f"Type: {self.type.name}",
            f"chainID: {self.chain_id}",
            f"Nonce: {self.nonce}",
            f"Gas limit: {self.gas_limit}",
            f"Max priority fee per gas: {self.max_priority_fee_per_gas}",
            f"Max fee per gas: {self.max_fee_per_gas}",
            f"To: {self.to.address}",
            f"Value: {self.value}",
            f"Data: {bytes_to_hex(self.data)}",
            f"Access List: {self.access_list}",
            f"v: {self.v}",
            f"r: {self.r}",
            f"s: {self.s}",
        ]
        return "\n".join(lines) + "\n"

    # -------------------------------------------------------------------------
    # Construction helpers
    # -------------------------------------------------------------------------

    @classmethod
    def create(cls, to: EthereumAddress, data: bytes = b"", nonce: Optional[int] = None,
               chain_id: Optional[int] = None, value: Optional[int] = None,
               v: int = 1, r: int = 0, s: int = 0,
               options: Optional[TransactionOptions] = None) -> EIP1559Envelope:
        """
        Build an envelope, filling gaps from an options overlay.

        Each of nonce and value falls back from the explicit argument to the
        overlay and then to zero. Gas and fee fields come from the overlay
        alone.
        """
        if nonce is None:
            nonce = options.resolve_nonce(0) if options is not None else 0
        if value is None:
            value = options.value if options is not None and options.value is not None else 0
        fields: Dict[str, Any] = {}
        if options is not None:
            fields = {
                "max_priority_fee_per_gas": options.resolve_max_priority_fee_per_gas(0),
                "max_fee_per_gas": options.resolve_max_fee_per_gas(0),
                "gas_limit": options.resolve_gas_limit(0),
                "access_list": list(options.access_list or []),
            }
        return cls(
            to=to,
            data=data,
            nonce=nonce,
            chain_id=chain_id or 0,
            value=value,
            v=v,
            r=r,
            s=s,
            **fields,
        )

    def apply_options(self, options: TransactionOptions) -> EIP1559Envelope:
        """
        Merge an options overlay into a copy of this envelope.

        Signature fields and the chain id are never touched.
        """
        update: Dict[str, Any] = {
            "nonce": options.resolve_nonce(self.nonce),
            "max_priority_fee_per_gas": options.resolve_max_priority_fee_per_gas(self.max_priority_fee_per_gas),
            "max_fee_per_gas": options.resolve_max_fee_per_gas(self.max_fee_per_gas),
            "gas_limit": options.resolve_gas_limit(self.gas_limit),
        }
        if options.value is not None:
            update["value"] = options.value
        if options.to is not None:
            update["to"] = options.to
        if options.access_list is not None:
            update["access_list"] = list(options.access_list)
        return self.model_copy(update=update)

    def get_options(self) -> TransactionOptions:
        """Snapshot the overlay-controlled fields as manual policies."""
        return TransactionOptions(
            nonce=NoncePolicy.manual(self.nonce),
            max_priority_fee_per_gas=FeePerGasPolicy.manual(self.max_priority_fee_per_gas),
            max_fee_per_gas=FeePerGasPolicy.manual(self.max_fee_per_gas),
            gas_limit=GasLimitPolicy.manual(self.gas_limit),
            value=self.value,
            to=self.to,
            access_list=list(self.access_list),
        )

    def with_signature(self, v: int, r: int, s: int) -> EIP1559Envelope:
        """Return a copy carrying the given signature components."""
        for name, component in (("v", v), ("r", r), ("s", s)):
            if component < 0:
                raise ValueError(f"Signature component {name} cannot be negative")
        return self.model_copy(update={"v": v, "r": r, "s": s})

    # -------------------------------------------------------------------------
    # Wire form
    # -------------------------------------------------------------------------

    @classmethod
    def from_raw(cls, raw: bytes) -> Optional[EIP1559Envelope]:
        """
        Decode a typed-envelope byte string.

        Returns:
            The envelope, or None when raw is not a well-formed EIP-1559
            envelope (wrong type byte, bad RLP, wrong arity, bad field)
        """
        if not raw or raw[0] != TransactionType.EIP1559:
            logger.debug("Not an EIP-1559 envelope: type byte %r", bytes(raw[:1]) if raw else b"")
            return None

        item = RlpItem.decode(raw[1:])
        if item is None or not item.is_list:
            logger.debug("EIP-1559 payload is not an RLP list")
            return None
        if item.count != _RlpKey.TOTAL:
            logger.debug("EIP-1559 payload has %d fields, expected %d", item.count, _RlpKey.TOTAL)
            return None

        fields: Dict[str, Any] = {}
        for key, name in _QUANTITY_KEYS:
            payload = item[key].data
            if payload is None:
                logger.debug("EIP-1559 field %s is not a byte string", name)
                return None
            fields[name] = int.from_bytes(payload, "big")

        payload = item[_RlpKey.DATA].data
        if payload is None:
            logger.debug("EIP-1559 data field is not a byte string")
            return None

        to = cls._decode_destination(item[_RlpKey.DESTINATION])
        if to is None:
            return None

        access_list = cls._decode_access_list(item[_RlpKey.ACCESS_LIST])
        if access_list is None:
            return None

        return cls(to=to, data=payload, access_list=access_list, **fields)

    @staticmethod
    def _decode_destination(item: RlpItem) -> Optional[EthereumAddress]:
        address_data = item.data
        if address_data is None:
            logger.debug("EIP-1559 destination is not a byte string")
            return None
        if not address_data:
            return EthereumAddress.contract_deployment()
        address = EthereumAddress.from_bytes(address_data)
        if address is None:
            logger.debug("EIP-1559 destination has invalid length %d", len(address_data))
        return address

    @staticmethod
    def _decode_access_list(item: RlpItem) -> Optional[List[AccessListEntry]]:
        if item.is_data:
            if item.is_empty:
                return []
            logger.debug("EIP-1559 access list is a non-empty byte string")
            return None
        if not item.is_list:
            return None
        entries = []
        for index, entry_item in enumerate(item):
            entry = AccessListEntry.from_rlp_item(entry_item)
            if entry is None:
                logger.debug("EIP-1559 access list entry %d is malformed", index)
                return None
            entries.append(entry)
        return entries

    def encode_for(self, encode_type: EncodeType = EncodeType.TRANSACTION) -> Optional[bytes]:
        """
        Serialize to the typed-envelope wire form.

        Args:
            encode_type: TRANSACTION for the broadcastable form, SIGNATURE
                for the pre-image that gets signed

        Returns:
            Type byte followed by the RLP list, or None if RLP encoding fails
        """
        access_list = [entry.encode_as_list() for entry in self.access_list]
        fields: List[Any] = [
            self.chain_id,
            self.nonce,
            self.max_priority_fee_per_gas,
            self.max_fee_per_gas,
            self.gas_limit,
            self.to.address_data,
            self.value,
            self.data,
            access_list,
        ]
        if encode_type is EncodeType.TRANSACTION:
            fields.extend([self.v, self.r, self.s])

        encoded = rlp_encode(fields)
        if encoded is None:
            return None
        return bytes([self.type]) + encoded

    def transaction_hash(self) -> Optional[bytes]:
        """Keccak-256 of the full encoding (the transaction hash)."""
        encoded = self.encode_for(EncodeType.TRANSACTION)
        return keccak256(encoded) if encoded is not None else None

    def signing_hash(self) -> Optional[bytes]:
        """Keccak-256 of the signing pre-image."""
        encoded = self.encode_for(EncodeType.SIGNATURE)
        return keccak256(encoded) if encoded is not None else None

    # -------------------------------------------------------------------------
    # Parameter (RPC map) form
    # -------------------------------------------------------------------------

    @classmethod
    def from_params(cls, params: Union[Mapping[str, Any], TransactionParameters],
                    strict_access_list: bool = False,
                    validate_checksum: bool = True) -> Optional[EIP1559Envelope]:
        """
        Decode an RPC-style transaction object.

        Args:
            params: Mapping with hex quantities, or TransactionParameters
            strict_access_list: Reject the envelope when accessList is
                malformed instead of treating it as empty
            validate_checksum: Require valid EIP-55 checksums on mixed-case
                addresses

        Returns:
            The envelope, or None if a required key is missing or malformed

        Raises:
            InvalidAddressError: If "to" is present but not a valid address
        """
        if isinstance(params, TransactionParameters):
            params = params.to_dict()
        if not isinstance(params, Mapping):
            return None

        missing = [key for key in _REQUIRED_PARAMS if key not in params]
        if "data" not in params and "input" not in params:
            missing.append("data")
        if missing:
            logger.debug("Transaction parameters missing required keys: %s", missing)
            return None

        fields: Dict[str, Any] = {}
        for key, name in (("chainId", "chain_id"), ("value", "value")):
            raw = params.get(key)
            fields[name] = 0 if raw is None else hex_to_int(raw)
        for key in ("nonce", "v", "r", "s"):
            fields[key] = hex_to_int(params.get(key))
        for name, value in fields.items():
            if value is None:
                logger.debug("Transaction parameter %s is malformed", name)
                return None

        fields["max_priority_fee_per_gas"] = _lenient_quantity(params, "maxPriorityFeePerGas")
        fields["max_fee_per_gas"] = _lenient_quantity(params, "maxFeePerGas")
        fields["gas_limit"] = _lenient_quantity(params, "gas", "gasLimit")

        if params.get("input") is not None:
            payload = hex_to_bytes(params["input"])
        else:
            payload = hex_to_bytes(params.get("data"))
        if payload is None:
            logger.debug("Transaction payload is malformed")
            return None

        access_list: List[AccessListEntry] = []
        if params.get("accessList") is not None:
            parsed = parse_access_list(params["accessList"])
            if parsed is None:
                if strict_access_list:
                    logger.debug("Transaction access list is malformed")
                    return None
                logger.debug("Ignoring malformed transaction access list")
            else:
                access_list = parsed

        to = _decode_destination_param(params.get("to"), validate_checksum)
        return cls(to=to, data=payload, access_list=access_list, **fields)

    def to_params(self, sender: Optional[Union[EthereumAddress, str]] = None) -> Optional[TransactionParameters]:
        """
        Encode as an RPC-style transaction object.

        Args:
            sender: Optional "from" value, passed through

        Returns:
            TransactionParameters, or None if an access list entry cannot
            be encoded
        """
        access_list = []
        for entry in self.access_list:
            encoded = entry.encode_as_dict()
            if encoded is None:
                return None
            access_list.append(encoded)

        if isinstance(sender, EthereumAddress):
            sender = sender.address.lower()
        to_string = None
        if self.to.type is AddressType.NORMAL:
            to_string = self.to.address.lower()

        return TransactionParameters(
            sender=sender,
            to=to_string,
            type=int_to_hex(self.type),
            chain_id=int_to_hex(self.chain_id),
            nonce=int_to_hex(self.nonce),
            value=int_to_hex(self.value),
            gas=int_to_hex(self.gas_limit),
            max_fee_per_gas=int_to_hex(self.max_fee_per_gas),
            max_priority_fee_per_gas=int_to_hex(self.max_priority_fee_per_gas),
            data=bytes_to_hex(self.data),
            access_list=access_list,
            v=int_to_hex(self.v),
            r=int_to_hex(self.r),
            s=int_to_hex(self.s),
        )


def _lenient_quantity(params: Mapping[str, Any], *keys: str) -> int:
    # first well-formed key wins; absent or malformed falls through to zero
    for key in keys:
        value = params.get(key)
        if value is None:
            continue
        parsed = hex_to_int(value)
        if parsed is not None:
            return parsed
    return 0


def _decode_destination_param(value: Any, validate_checksum: bool) -> EthereumAddress:
    if value is None or value in _DEPLOYMENT_STRINGS:
        return EthereumAddress.contract_deployment()
    if isinstance(value, EthereumAddress):
        return value
    address = None
    if isinstance(value, str):
        address = EthereumAddress.from_string(value, ignore_checksum=not validate_checksum)
    if address is None:
        code = ErrorCode.INVALID_ADDRESS
        if isinstance(value, str) and EthereumAddress.from_string(value, ignore_checksum=True) is not None:
            code = ErrorCode.INVALID_CHECKSUM
        raise InvalidAddressError(
            f"Invalid destination address: {value!r}",
            code,
            details={"to": value},
        )
    return address


__all__ = [
    "TransactionType",
    "EncodeType",
    "TransactionParameters",
    "EIP1559Envelope",
]
