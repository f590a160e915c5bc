"""
Shared fixtures for the envelope codec tests.

Wire fixtures are built with the rlp library directly so expectations do
not depend on the encoder under test.
"""
import pytest
import rlp

from eip1559_codec.runtime.address import EthereumAddress
from eip1559_codec.tx.access_list import AccessListEntry
from eip1559_codec.tx.envelope import EIP1559Envelope

CHECKSUM_ADDRESS = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
OTHER_CHECKSUM_ADDRESS = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"


@pytest.fixture
def sample_address():
    """A normal address with a known EIP-55 checksum."""
    return EthereumAddress.from_string(CHECKSUM_ADDRESS)


@pytest.fixture
def other_address():
    return EthereumAddress.from_string(OTHER_CHECKSUM_ADDRESS)


@pytest.fixture
def sample_access_list(other_address):
    """Two entries, the second with no storage keys."""
    return [
        AccessListEntry(
            address=other_address,
            storage_keys=[b"\x00" * 31 + b"\x01", b"\xff" * 32],
        ),
        AccessListEntry(
            address=EthereumAddress(b"\x11" * 20),
            storage_keys=[],
        ),
    ]


@pytest.fixture
def sample_envelope(sample_address, sample_access_list):
    """A fully populated, signed envelope."""
    return EIP1559Envelope(
        chain_id=1,
        nonce=9,
        max_priority_fee_per_gas=2_000_000_000,
        max_fee_per_gas=120_000_000_000,
        gas_limit=21_000,
        to=sample_address,
        value=10**18,
        data=bytes.fromhex("a9059cbb0000"),
        access_list=sample_access_list,
        v=1,
        r=0x1b5e176d927f8e9ab405058b2d2457392da3e20f328b16ddabcebc33eaac5fea,
        s=0x4ba69724e8f69de52f0125ad8b3c5c2cef33019bac3249e2c0a2192766d1721c,
    )


@pytest.fixture
def raw_envelope():
    """Build type byte 0x02 followed by the RLP encoding of the given fields."""
    def build(fields, type_byte=0x02):
        return bytes([type_byte]) + rlp.encode(fields)
    return build


@pytest.fixture
def minimal_fields():
    """
    Wire fields of the minimal envelope: chainId 1, v 1, everything else
    zero or empty, contract-deployment destination.
    """
    return [1, 0, 0, 0, 0, b"", 0, b"", [], 1, 0, 0]


@pytest.fixture
def minimal_params(sample_address):
    """Smallest parameter map the strict decoder accepts."""
    return {
        "to": sample_address.address.lower(),
        "nonce": "0x0",
        "value": "0x0",
        "chainId": "0x1",
        "data": "0x",
        "v": "0x1",
        "r": "0x0",
        "s": "0x0",
    }


@pytest.fixture
def nested_list():
    """Build an empty RLP list wrapped in depth single-element lists."""
    def build(depth):
        payload = b"\xc0"
        for _ in range(depth):
            size = len(payload)
            if size < 56:
                prefix = bytes([0xc0 + size])
            else:
                length = size.to_bytes((size.bit_length() + 7) // 8, "big")
                prefix = bytes([0xf7 + len(length)]) + length
            payload = prefix + payload
        return payload
    return build
