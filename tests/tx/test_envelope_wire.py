"""
Wire form tests for EIP1559Envelope: typed RLP decode and encode.
"""

import pytest
import rlp

from eip1559_codec.codec.rlp_item import RlpItem
from eip1559_codec.runtime.address import AddressType, EthereumAddress, keccak256
from eip1559_codec.tx.access_list import AccessListEntry
from eip1559_codec.tx.envelope import EIP1559Envelope, EncodeType, TransactionType

MINIMAL_RAW = bytes([0x02, 0xcc, 0x01]) + b"\x80" * 7 + bytes([0xc0, 0x01, 0x80, 0x80])


class TestDecode:
    """EIP1559Envelope.from_raw."""

    def test_minimal_envelope(self, raw_envelope, minimal_fields):
        raw = raw_envelope(minimal_fields)
        assert raw == MINIMAL_RAW

        envelope = EIP1559Envelope.from_raw(raw)
        assert envelope is not None
        assert envelope.chain_id == 1
        assert envelope.to.type is AddressType.CONTRACT_DEPLOYMENT
        assert envelope.value == 0
        assert envelope.data == b""
        assert envelope.access_list == []
        assert (envelope.v, envelope.r, envelope.s) == (1, 0, 0)

    def test_all_fields(self, raw_envelope):
        to = b"\x5a" * 20
        key = b"\x00" * 31 + b"\x05"
        fields = [
            5, 7, 1_000_000_000, 50_000_000_000, 21000, to, 10**18, b"\xde\xad",
            [[b"\x11" * 20, [key]]], 1, 2**255, 3,
        ]
        envelope = EIP1559Envelope.from_raw(raw_envelope(fields))
        assert envelope.chain_id == 5
        assert envelope.nonce == 7
        assert envelope.max_priority_fee_per_gas == 1_000_000_000
        assert envelope.max_fee_per_gas == 50_000_000_000
        assert envelope.gas_limit == 21000
        assert envelope.to.address_data == to
        assert envelope.value == 10**18
        assert envelope.data == b"\xde\xad"
        assert envelope.access_list == [AccessListEntry(address=EthereumAddress(b"\x11" * 20), storage_keys=[key])]
        assert (envelope.v, envelope.r, envelope.s) == (1, 2**255, 3)

    def test_type_property_is_fixed(self, raw_envelope, minimal_fields):
        envelope = EIP1559Envelope.from_raw(raw_envelope(minimal_fields))
        assert envelope.type is TransactionType.EIP1559
        assert envelope.type == 2

    @pytest.mark.parametrize("type_byte", [0x00, 0x01, 0x03, 0xc0, 0xff])
    def test_wrong_type_byte(self, raw_envelope, minimal_fields, type_byte):
        assert EIP1559Envelope.from_raw(raw_envelope(minimal_fields, type_byte=type_byte)) is None

    def test_wrong_type_byte_with_garbage_body(self):
        assert EIP1559Envelope.from_raw(b"\x01\xff\xff\xff") is None

    @pytest.mark.parametrize("raw", [b"", b"\x02", b"\x02\xcc\x01", b"\x02\x80"])
    def test_empty_or_broken_payload(self, raw):
        assert EIP1559Envelope.from_raw(raw) is None

    @pytest.mark.parametrize("payload", [
        b"\xb8",                      # long string, length bytes missing
        b"\xb9\xff\xff\x01",          # long string shorter than declared
        b"\xf9\xff\xff\x01\x80",      # long list shorter than declared
        b"\xf8\x38" + b"\x80" * 12,   # long list prefix over a short payload
        b"\xfb\xff\xff\xff\xff",      # four length bytes, no payload
    ])
    def test_truncated_length_prefix(self, payload):
        assert EIP1559Envelope.from_raw(b"\x02" + payload) is None

    @pytest.mark.parametrize("depth", [1000, 5000])
    def test_deep_nesting(self, nested_list, depth):
        assert EIP1559Envelope.from_raw(b"\x02" + nested_list(depth)) is None

    def test_deeply_nested_access_list(self, raw_envelope, minimal_fields, nested_list):
        raw = raw_envelope(minimal_fields)
        # swap the empty access list (0xc0) for a deeply nested one
        body = raw[3:].replace(b"\xc0", nested_list(3000), 1)
        size = len(body) + 1
        length = size.to_bytes((size.bit_length() + 7) // 8, "big")
        deep = b"\x02" + bytes([0xf7 + len(length)]) + length + b"\x01" + body
        assert EIP1559Envelope.from_raw(deep) is None

    @pytest.mark.parametrize("count", [0, 1, 9, 11, 13, 20])
    def test_arity_rejection(self, raw_envelope, count):
        fields = [0] * count
        assert EIP1559Envelope.from_raw(raw_envelope(fields)) is None

    def test_trailing_bytes_rejected(self, raw_envelope, minimal_fields):
        assert EIP1559Envelope.from_raw(raw_envelope(minimal_fields) + b"\x00") is None

    @pytest.mark.parametrize("index", [0, 1, 2, 3, 4, 6, 7, 9, 10, 11])
    def test_list_in_scalar_position(self, raw_envelope, minimal_fields, index):
        fields = list(minimal_fields)
        fields[index] = [b"\x01"]
        assert EIP1559Envelope.from_raw(raw_envelope(fields)) is None


class TestDestination:
    """Destination field edge cases."""

    def test_empty_is_deployment(self, raw_envelope, minimal_fields):
        envelope = EIP1559Envelope.from_raw(raw_envelope(minimal_fields))
        assert envelope.to == EthereumAddress.contract_deployment()

    def test_twenty_bytes_is_normal(self, raw_envelope, minimal_fields):
        fields = list(minimal_fields)
        fields[5] = b"\x00" * 20
        envelope = EIP1559Envelope.from_raw(raw_envelope(fields))
        assert envelope.to.type is AddressType.NORMAL
        assert envelope.to.address_data == b"\x00" * 20

    @pytest.mark.parametrize("length", [1, 19, 21, 32])
    def test_other_lengths_rejected(self, raw_envelope, minimal_fields, length):
        fields = list(minimal_fields)
        fields[5] = b"\x01" * length
        assert EIP1559Envelope.from_raw(raw_envelope(fields)) is None

    def test_list_rejected(self, raw_envelope, minimal_fields):
        fields = list(minimal_fields)
        fields[5] = []
        assert EIP1559Envelope.from_raw(raw_envelope(fields)) is None


class TestAccessList:
    """Access list field edge cases."""

    def test_empty_string_is_empty_list(self, raw_envelope, minimal_fields):
        fields = list(minimal_fields)
        fields[8] = b""
        envelope = EIP1559Envelope.from_raw(raw_envelope(fields))
        assert envelope.access_list == []

    def test_non_empty_string_rejected(self, raw_envelope, minimal_fields):
        fields = list(minimal_fields)
        fields[8] = b"\x01"
        assert EIP1559Envelope.from_raw(raw_envelope(fields)) is None

    def test_entries_keep_order(self, raw_envelope, minimal_fields):
        addresses = [bytes([i]) * 20 for i in (3, 1, 2)]
        fields = list(minimal_fields)
        fields[8] = [[address, []] for address in addresses]
        envelope = EIP1559Envelope.from_raw(raw_envelope(fields))
        assert len(envelope.access_list) == 3
        assert [entry.address.address_data for entry in envelope.access_list] == addresses

    @pytest.mark.parametrize("bad_entry", [
        [b"\x01" * 19, []],
        [b"\x01" * 20, [b"\x02" * 31]],
        b"\x01" * 20,
    ])
    def test_malformed_entry_aborts_decode(self, raw_envelope, minimal_fields, bad_entry):
        fields = list(minimal_fields)
        fields[8] = [[b"\x01" * 20, []], bad_entry]
        assert EIP1559Envelope.from_raw(raw_envelope(fields)) is None


class TestEncode:
    """EIP1559Envelope.encode_for."""

    def test_minimal_envelope_bytes(self):
        envelope = EIP1559Envelope(chain_id=1, to=EthereumAddress.contract_deployment())
        assert envelope.encode_for() == MINIMAL_RAW

    def test_full_mode_has_twelve_fields(self, sample_envelope):
        encoded = sample_envelope.encode_for(EncodeType.TRANSACTION)
        assert encoded[0] == 0x02
        item = RlpItem.decode(encoded[1:])
        assert item.count == 12
        assert int.from_bytes(item[11].data, "big") == sample_envelope.s

    def test_signature_mode_has_nine_fields(self, sample_envelope):
        encoded = sample_envelope.encode_for(EncodeType.SIGNATURE)
        assert encoded[0] == 0x02
        item = RlpItem.decode(encoded[1:])
        assert item.count == 9
        assert item[8].count == len(sample_envelope.access_list)

    def test_signature_mode_matches_reference_encoding(self, sample_envelope):
        e = sample_envelope
        expected = b"\x02" + rlp.encode([
            e.chain_id, e.nonce, e.max_priority_fee_per_gas, e.max_fee_per_gas,
            e.gas_limit, e.to.address_data, e.value, e.data,
            [[entry.address.address_data, entry.storage_keys] for entry in e.access_list],
        ])
        assert e.encode_for(EncodeType.SIGNATURE) == expected

    def test_default_mode_is_full(self, sample_envelope):
        assert sample_envelope.encode_for() == sample_envelope.encode_for(EncodeType.TRANSACTION)

    def test_zero_fields_are_empty_strings(self, sample_address):
        envelope = EIP1559Envelope(to=sample_address, v=0)
        item = RlpItem.decode(envelope.encode_for()[1:])
        for index in (0, 1, 2, 3, 4, 6, 9, 10, 11):
            assert item[index].data == b""

    def test_integers_are_minimal_big_endian(self, sample_address):
        envelope = EIP1559Envelope(to=sample_address, nonce=256, gas_limit=1)
        item = RlpItem.decode(envelope.encode_for()[1:])
        assert item[1].data == b"\x01\x00"
        assert item[4].data == b"\x01"

    def test_deployment_destination_is_empty(self):
        envelope = EIP1559Envelope(to=EthereumAddress.contract_deployment(), data=b"\x60\x80")
        item = RlpItem.decode(envelope.encode_for()[1:])
        assert item[5].data == b""
        assert item[7].data == b"\x60\x80"


class TestRoundTrip:
    """Decode(encode(e)) == e."""

    def test_sample_envelope(self, sample_envelope):
        assert EIP1559Envelope.from_raw(sample_envelope.encode_for()) == sample_envelope

    def test_deployment_envelope(self):
        envelope = EIP1559Envelope(
            chain_id=11155111,
            nonce=1,
            gas_limit=3_000_000,
            max_fee_per_gas=30,
            to=EthereumAddress.contract_deployment(),
            data=bytes(range(256)),
            v=0,
            r=12345,
            s=67890,
        )
        assert EIP1559Envelope.from_raw(envelope.encode_for()) == envelope

    def test_reencode_is_stable(self, sample_envelope):
        encoded = sample_envelope.encode_for()
        assert EIP1559Envelope.from_raw(encoded).encode_for() == encoded


class TestHashes:
    """Keccak helpers over the two encodings."""

    def test_transaction_hash(self, sample_envelope):
        assert sample_envelope.transaction_hash() == keccak256(sample_envelope.encode_for())

    def test_signing_hash_ignores_signature(self, sample_envelope):
        resigned = sample_envelope.with_signature(0, 1, 2)
        assert resigned.signing_hash() == sample_envelope.signing_hash()
        assert resigned.transaction_hash() != sample_envelope.transaction_hash()
        assert len(sample_envelope.signing_hash()) == 32


def test_description_lists_fields(sample_envelope):
    text = str(sample_envelope)
    assert "Type: EIP1559" in text
    assert "chainID: 1" in text
    assert "To: 0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed" in text
    assert "Data: 0xa9059cbb0000" in text
