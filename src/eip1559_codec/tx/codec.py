"""
Envelope codec facade.

Dispatches raw bytes and RPC maps to the envelope variants this package
implements, trying each in turn, and applies a CodecConfig to every call.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Type, Union

from ..config import CodecConfig
from ..runtime.errors import DecodingError, EncodingError, ErrorCode, UnsupportedEnvelopeError
from .envelope import EIP1559Envelope, EncodeType, TransactionParameters, TransactionType

# Registry of supported envelope variants, keyed by type byte
ENVELOPE_TYPES: Dict[TransactionType, Type[EIP1559Envelope]] = {
    TransactionType.EIP1559: EIP1559Envelope,
}


class EnvelopeCodec:
    """
    Config-driven entry point for decoding and encoding envelopes.

    Decoders return None for input no registered variant accepts; the
    *_or_raise variants turn that into an exception.
    """

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig()

        self.logger = logging.getLogger(__name__)
        if self.config.debug:
            self.logger.setLevel(logging.DEBUG)

    @property
    def variants(self) -> Tuple[Type[EIP1559Envelope], ...]:
        return tuple(ENVELOPE_TYPES.values())

    def decode_raw(self, raw: bytes) -> Optional[EIP1559Envelope]:
        """Decode wire bytes with the first variant that accepts them."""
        for variant in self.variants:
            envelope = variant.from_raw(raw)
            if envelope is not None:
                self.logger.debug("Decoded raw envelope as %s", variant.__name__)
                return envelope
        self.logger.debug("No envelope variant accepted %d raw bytes", len(raw or b""))
        return None

    def decode_params(self, params: Union[Mapping[str, Any], TransactionParameters]) -> Optional[EIP1559Envelope]:
        """
        Decode an RPC map with the first variant that accepts it.

        Raises:
            InvalidAddressError: If "to" is present but malformed
        """
        for variant in self.variants:
            envelope = variant.from_params(
                params,
                strict_access_list=self.config.strict_access_list,
                validate_checksum=self.config.validate_checksum,
            )
            if envelope is not None:
                self.logger.debug("Decoded parameters as %s", variant.__name__)
                return envelope
        self.logger.debug("No envelope variant accepted the transaction parameters")
        return None

    def decode_raw_or_raise(self, raw: bytes) -> EIP1559Envelope:
        """Like decode_raw, but raises instead of returning None."""
        envelope = self.decode_raw(raw)
        if envelope is not None:
            return envelope
        type_byte = raw[0] if raw else None
        if type_byte is None or type_byte not in {int(t) for t in ENVELOPE_TYPES}:
            raise UnsupportedEnvelopeError(details={"typeByte": type_byte})
        raise DecodingError(
            "Malformed envelope",
            ErrorCode.INVALID_RLP,
            details={"typeByte": type_byte, "length": len(raw)},
        )

    def decode_params_or_raise(self, params: Union[Mapping[str, Any], TransactionParameters]) -> EIP1559Envelope:
        """Like decode_params, but raises instead of returning None."""
        envelope = self.decode_params(params)
        if envelope is None:
            raise DecodingError("Transaction parameters are missing or malformed",
                                ErrorCode.INVALID_TRANSACTION)
        return envelope

    def encode(self, envelope: EIP1559Envelope,
               encode_type: EncodeType = EncodeType.TRANSACTION) -> Optional[bytes]:
        return envelope.encode_for(encode_type)

    def encode_or_raise(self, envelope: EIP1559Envelope,
                        encode_type: EncodeType = EncodeType.TRANSACTION) -> bytes:
        """Like encode, but raises EncodingError instead of returning None."""
        encoded = envelope.encode_for(encode_type)
        if encoded is None:
            raise EncodingError(details={"encodeType": encode_type.value})
        return encoded

    def to_params(self, envelope: EIP1559Envelope, sender: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Encode an envelope as a plain RPC dictionary."""
        params = envelope.to_params(sender)
        if params is None:
            self.logger.warning("Failed to encode access list of envelope as parameters")
            return None
        return params.to_dict()


__all__ = [
    "ENVELOPE_TYPES",
    "EnvelopeCodec",
]
