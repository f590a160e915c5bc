"""
EIP-1559 Envelope Codec

Converts Ethereum dynamic-fee (type 0x02) transactions between the
in-memory envelope, the typed RLP wire encoding and the JSON-style RPC
parameter map, and merges transaction option overlays before signing.
"""

from .config import CodecConfig
from .runtime.errors import *
from .runtime.address import AddressType, EthereumAddress
from .codec import RlpContent, RlpItem
from .tx import *

__version__ = "0.1.0"
__all__ = [
    # Configuration
    "CodecConfig",

    # Errors
    "ErrorCode",
    "CodecError",
    "EncodingError",
    "DecodingError",
    "UnsupportedEnvelopeError",
    "InvalidAddressError",

    # Addresses
    "AddressType",
    "EthereumAddress",

    # RLP
    "RlpContent",
    "RlpItem",

    # Envelopes
    "EIP1559Envelope",
    "EncodeType",
    "TransactionParameters",
    "TransactionType",
    "EnvelopeCodec",
    "ENVELOPE_TYPES",

    # Access lists and options
    "AccessListEntry",
    "TransactionOptions",
    "NoncePolicy",
    "GasLimitPolicy",
    "FeePerGasPolicy",
]
