"""
EIP-1559 Codec Error Model

This module provides the error handling framework for the envelope codec.
Decode paths report "not this envelope" by returning None; the exceptions
below are reserved for genuinely malformed input and for callers that ask
for exceptions explicitly.
"""

from __future__ import annotations
from typing import Optional, Dict, Any
from enum import IntEnum


class ErrorCode(IntEnum):
    """Codec error codes."""

    # Success
    OK = 0

    # General errors (1-99)
    UNKNOWN = 1

    # Encoding errors (100-199)
    INVALID_RLP = 102
    MARSHAL_ERROR = 103
    UNMARSHAL_ERROR = 104

    # Envelope errors (400-499)
    INVALID_TRANSACTION = 400
    UNSUPPORTED_ENVELOPE = 401

    # Address errors (700-799)
    INVALID_ADDRESS = 700
    INVALID_CHECKSUM = 701


class CodecError(Exception):
    """
    Base class for all codec errors.

    Carries a code, a message and optional structured details.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize a codec error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CodecError':
        """Create error from dictionary representation."""
        code = ErrorCode(data.get("code", ErrorCode.UNKNOWN))
        message = data.get("message", "Unknown error")
        details = data.get("details")
        return cls(message, code, details)


class EncodingError(CodecError):
    """Envelope serialization errors."""

    def __init__(self, message: str = "Encoding error", code: ErrorCode = ErrorCode.MARSHAL_ERROR,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class DecodingError(CodecError):
    """Envelope deserialization errors."""

    def __init__(self, message: str = "Decoding error", code: ErrorCode = ErrorCode.UNMARSHAL_ERROR,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class UnsupportedEnvelopeError(DecodingError):
    """No known envelope variant accepts the input."""

    def __init__(self, message: str = "Unsupported envelope type",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.UNSUPPORTED_ENVELOPE, details, cause)


class InvalidAddressError(CodecError):
    """
    An address string is present but cannot be parsed.

    The code is INVALID_CHECKSUM when the string is well-formed but its
    mixed-case EIP-55 checksum does not match.
    """

    def __init__(self, message: str = "Invalid address", code: ErrorCode = ErrorCode.INVALID_ADDRESS,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


__all__ = [
    "ErrorCode",
    "CodecError",
    "EncodingError",
    "DecodingError",
    "UnsupportedEnvelopeError",
    "InvalidAddressError",
]
