"""
Transaction options overlay.

A TransactionOptions value carries optional overrides and defaulting
policies for a subset of envelope fields. It is merged into an envelope
before signing; see EIP1559Envelope.apply_options.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from ..runtime.address import EthereumAddress
from ..runtime.hexutil import int_to_hex
from .access_list import AccessListEntry


# =============================================================================
# Resolution policies
# =============================================================================

class NonceMode(str, Enum):
    PENDING = "pending"
    LATEST = "latest"
    MANUAL = "manual"


class GasLimitMode(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"
    LIMITED = "limited"
    WITH_MARGIN = "withMargin"


class FeePerGasMode(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"


class NoncePolicy(BaseModel):
    """How the nonce is chosen: from the node (pending/latest) or fixed."""
    mode: NonceMode = Field(default=NonceMode.PENDING)
    value: Optional[int] = Field(default=None, ge=0)

    model_config = {"frozen": True}

    @model_validator(mode='after')
    def validate_value(self) -> NoncePolicy:
        if self.mode is NonceMode.MANUAL and self.value is None:
            raise ValueError("Manual nonce policy requires a value")
        return self

    @classmethod
    def pending(cls) -> NoncePolicy:
        return cls(mode=NonceMode.PENDING)

    @classmethod
    def latest(cls) -> NoncePolicy:
        return cls(mode=NonceMode.LATEST)

    @classmethod
    def manual(cls, value: int) -> NoncePolicy:
        return cls(mode=NonceMode.MANUAL, value=value)

    def resolve(self, suggested: int) -> int:
        if self.mode is NonceMode.MANUAL:
            return self.value
        return suggested


class GasLimitPolicy(BaseModel):
    """
    How the gas limit is chosen.

    LIMITED caps the suggested value; WITH_MARGIN is interpreted by the
    estimator and resolves to the suggested value here.
    """
    mode: GasLimitMode = Field(default=GasLimitMode.AUTOMATIC)
    value: Optional[int] = Field(default=None, ge=0)
    margin: Optional[float] = Field(default=None, ge=0)

    model_config = {"frozen": True}

    @model_validator(mode='after')
    def validate_value(self) -> GasLimitPolicy:
        if self.mode in (GasLimitMode.MANUAL, GasLimitMode.LIMITED) and self.value is None:
            raise ValueError(f"{self.mode.value} gas limit policy requires a value")
        if self.mode is GasLimitMode.WITH_MARGIN and self.margin is None:
            raise ValueError("withMargin gas limit policy requires a margin")
        return self

    @classmethod
    def automatic(cls) -> GasLimitPolicy:
        return cls(mode=GasLimitMode.AUTOMATIC)

    @classmethod
    def manual(cls, value: int) -> GasLimitPolicy:
        return cls(mode=GasLimitMode.MANUAL, value=value)

    @classmethod
    def limited(cls, value: int) -> GasLimitPolicy:
        return cls(mode=GasLimitMode.LIMITED, value=value)

    @classmethod
    def with_margin(cls, margin: float) -> GasLimitPolicy:
        return cls(mode=GasLimitMode.WITH_MARGIN, margin=margin)

    def resolve(self, suggested: int) -> int:
        if self.mode is GasLimitMode.MANUAL:
            return self.value
        if self.mode is GasLimitMode.LIMITED:
            return min(suggested, self.value)
        return suggested


class FeePerGasPolicy(BaseModel):
    """How a per-gas fee is chosen: estimated or fixed."""
    mode: FeePerGasMode = Field(default=FeePerGasMode.AUTOMATIC)
    value: Optional[int] = Field(default=None, ge=0)

    model_config = {"frozen": True}

    @model_validator(mode='after')
    def validate_value(self) -> FeePerGasPolicy:
        if self.mode is FeePerGasMode.MANUAL and self.value is None:
            raise ValueError("Manual fee policy requires a value")
        return self

    @classmethod
    def automatic(cls) -> FeePerGasPolicy:
        return cls(mode=FeePerGasMode.AUTOMATIC)

    @classmethod
    def manual(cls, value: int) -> FeePerGasPolicy:
        return cls(mode=FeePerGasMode.MANUAL, value=value)

    def resolve(self, suggested: int) -> int:
        if self.mode is FeePerGasMode.MANUAL:
            return self.value
        return suggested


# =============================================================================
# Overlay
# =============================================================================

class TransactionOptions(BaseModel):
    """
    Optional overrides applied to an envelope before signing.

    Policy fields resolve against the envelope's current value; plain
    fields (to, value, access_list) replace it only when set.
    """
    to: Optional[EthereumAddress] = Field(default=None, description="Destination override")
    sender: Optional[EthereumAddress] = Field(default=None, alias="from", description="Sending account")
    value: Optional[int] = Field(default=None, ge=0, description="Value override in wei")
    nonce: Optional[NoncePolicy] = None
    gas_limit: Optional[GasLimitPolicy] = Field(default=None, alias="gasLimit")
    max_fee_per_gas: Optional[FeePerGasPolicy] = Field(default=None, alias="maxFeePerGas")
    max_priority_fee_per_gas: Optional[FeePerGasPolicy] = Field(
        default=None,
        alias="maxPriorityFeePerGas"
    )
    access_list: Optional[List[AccessListEntry]] = Field(default=None, alias="accessList")

    model_config = {"populate_by_name": True}

    @classmethod
    def default_options(cls) -> TransactionOptions:
        """Automatic gas and fees, nonce from the pending pool."""
        return cls(
            nonce=NoncePolicy.pending(),
            gas_limit=GasLimitPolicy.automatic(),
            max_fee_per_gas=FeePerGasPolicy.automatic(),
            max_priority_fee_per_gas=FeePerGasPolicy.automatic(),
        )

    def resolve_nonce(self, suggested: int) -> int:
        if self.nonce is None:
            return suggested
        return self.nonce.resolve(suggested)

    def resolve_gas_limit(self, suggested: int) -> int:
        if self.gas_limit is None:
            return suggested
        return self.gas_limit.resolve(suggested)

    def resolve_max_fee_per_gas(self, suggested: int) -> int:
        if self.max_fee_per_gas is None:
            return suggested
        return self.max_fee_per_gas.resolve(suggested)

    def resolve_max_priority_fee_per_gas(self, suggested: int) -> int:
        if self.max_priority_fee_per_gas is None:
            return suggested
        return self.max_priority_fee_per_gas.resolve(suggested)

    def merge(self, other: Optional[TransactionOptions]) -> TransactionOptions:
        """Return a copy where every field set on other takes precedence."""
        if other is None:
            return self.model_copy()
        update = {
            name: getattr(other, name)
            for name in type(self).model_fields
            if getattr(other, name) is not None
        }
        return self.model_copy(update=update)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary of the fields that are set."""
        result: Dict[str, Any] = {}
        if self.to is not None:
            result["to"] = self.to.address.lower()
        if self.sender is not None:
            result["from"] = self.sender.address.lower()
        if self.value is not None:
            result["value"] = int_to_hex(self.value)
        for key, policy in (("nonce", self.nonce),
                            ("gasLimit", self.gas_limit),
                            ("maxFeePerGas", self.max_fee_per_gas),
                            ("maxPriorityFeePerGas", self.max_priority_fee_per_gas)):
            if policy is not None:
                result[key] = policy.model_dump(exclude_none=True, mode="json")
        if self.access_list is not None:
            result["accessList"] = [entry.encode_as_dict() for entry in self.access_list]
        return result


__all__ = [
    "NonceMode",
    "GasLimitMode",
    "FeePerGasMode",
    "NoncePolicy",
    "GasLimitPolicy",
    "FeePerGasPolicy",
    "TransactionOptions",
]
