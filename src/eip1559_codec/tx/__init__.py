"""
Transaction envelope types and codec facade.
"""

from .access_list import AccessListEntry, STORAGE_KEY_LENGTH, parse_access_list
from .options import (
    NonceMode,
    GasLimitMode,
    FeePerGasMode,
    NoncePolicy,
    GasLimitPolicy,
    FeePerGasPolicy,
    TransactionOptions,
)
from .envelope import EIP1559Envelope, EncodeType, TransactionParameters, TransactionType
from .codec import ENVELOPE_TYPES, EnvelopeCodec

__all__ = [
    "AccessListEntry",
    "STORAGE_KEY_LENGTH",
    "parse_access_list",
    "NonceMode",
    "GasLimitMode",
    "FeePerGasMode",
    "NoncePolicy",
    "GasLimitPolicy",
    "FeePerGasPolicy",
    "TransactionOptions",
    "EIP1559Envelope",
    "EncodeType",
    "TransactionParameters",
    "TransactionType",
    "ENVELOPE_TYPES",
    "EnvelopeCodec",
]
