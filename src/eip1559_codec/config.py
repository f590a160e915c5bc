"""
Codec configuration.
"""

from dataclasses import dataclass


@dataclass
class CodecConfig:
    """Configuration for EnvelopeCodec."""

    strict_access_list: bool = False
    validate_checksum: bool = True
    debug: bool = False


__all__ = ["CodecConfig"]
