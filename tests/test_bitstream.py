import pytest

from bitstream import iter_bits, pack_bits, pack_codes, packed_size, unpack_bits
from errors import CorruptBitstreamError


def test_packed_size():
	assert packed_size(0) == 0
	assert packed_size(1) == 1
	assert packed_size(8) == 1
	assert packed_size(9) == 2


def test_pack_codes_msb_first_with_padding():
	code_map = {2: "0", 0: "10", 1: "11"}
	payload, bit_count = pack_codes(bytes([2, 2, 0, 1]), code_map)
	assert bit_count == 6
	assert payload == bytes([0b00101100])


def test_pack_codes_matches_pack_bits():
	code_map = {0: "110", 1: "0", 2: "10", 3: "111"}
	data = bytes([0, 1, 2, 3, 3, 1, 0, 2, 2, 1, 0])
	payload, bit_count = pack_codes(data, code_map)
	bits = "".join(code_map[b] for b in data)
	assert bit_count == len(bits)
	assert payload == pack_bits(bits)


def test_whole_bytes_need_no_padding():
	bits = "10110011" * 3
	payload = pack_bits(bits)
	assert payload == bytes([0xB3, 0xB3, 0xB3])
	assert unpack_bits(payload, len(bits)) == bits


def test_partial_last_byte_ignores_padding_bits():
	bits = "10110011" + "10"
	assert pack_bits(bits) == bytes([0xB3, 0x80])
	# padding bits are not trusted on the way back in
	assert unpack_bits(bytes([0xB3, 0xBF]), 10) == bits
	assert list(iter_bits(bytes([0xB3, 0xBF]), 10)) == [int(b) for b in bits]


def test_empty_stream():
	assert pack_bits("") == b""
	assert pack_codes(b"", {}) == (b"", 0)
	assert unpack_bits(b"", 0) == ""
	assert list(iter_bits(b"", 0)) == []


def test_short_payload_is_corrupt():
	with pytest.raises(CorruptBitstreamError):
		unpack_bits(b"\x00", 9)
	with pytest.raises(CorruptBitstreamError):
		list(iter_bits(b"\x00", 9))


def test_negative_bit_count():
	with pytest.raises(ValueError):
		unpack_bits(b"", -1)
