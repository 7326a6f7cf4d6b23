"""
Binary layout of a compressed image

Closed-loop container (the decoder rebuilds the tree from the original image):

    bitCount  i32 LE   meaningful bits in payload
    width     i32 LE
    height    i32 LE
    payload   ceil(bitCount / 8) bytes, MSB first, zero padded

Standalone container (carries its own frequency table):

    magic     b"HUF1"
    count     u16 LE   number of distinct symbols
    table     count x (symbol u8, frequency u32 LE), ascending symbol
    ...       closed-loop container as above

A closed-loop container whose bitCount is 0x31465548 also starts with b"HUF1",
so the two layouts cannot be told apart from the bytes alone. Readers take the
layout from the caller; is_standalone only checks that a standalone blob carries
its magic.
"""

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

from bitstream import packed_size
from errors import ContainerFormatError, CorruptBitstreamError, InputUnavailableError

HEADER_STRUCT = "<iii"
HEADER_SIZE = struct.calcsize(HEADER_STRUCT)
INT32_MAX = 2 ** 31 - 1

STANDALONE_MAGIC = b"HUF1"
TABLE_COUNT_STRUCT = "<H"
TABLE_ENTRY_STRUCT = "<BI"
TABLE_ENTRY_SIZE = struct.calcsize(TABLE_ENTRY_STRUCT)


@dataclass
class Container:
    bit_count: int
    width: int
    height: int
    payload: bytes

    @property
    def sample_count(self) -> int:
        return self.width * self.height


def pack_container(bit_count: int, width: int, height: int, payload: bytes) -> bytes:
    for name, value in (("bit count", bit_count), ("width", width), ("height", height)):
        if not 0 <= value <= INT32_MAX:
            raise ContainerFormatError(f"{name} {value} does not fit in a 32-bit header field")
    if len(payload) != packed_size(bit_count):
        raise ContainerFormatError(
            f"payload is {len(payload)} bytes but {bit_count} bits pack into {packed_size(bit_count)}"
        )
    return struct.pack(HEADER_STRUCT, bit_count, width, height) + payload


def unpack_container(blob: bytes) -> Container:
    if len(blob) < HEADER_SIZE:
        raise ContainerFormatError(f"container is {len(blob)} bytes, header alone needs {HEADER_SIZE}")
    bit_count, width, height = struct.unpack_from(HEADER_STRUCT, blob, 0)
    if bit_count < 0 or width < 0 or height < 0:
        raise ContainerFormatError(f"negative header field (bits={bit_count}, width={width}, height={height})")

    payload = blob[HEADER_SIZE:]
    needed = packed_size(bit_count)
    if len(payload) < needed:
        raise CorruptBitstreamError(
            f"payload truncated to {len(payload)} of {needed} bytes",
            expected_bits=bit_count, consumed_bits=len(payload) * 8,
        )
    if len(payload) > needed:
        raise ContainerFormatError(f"{len(payload) - needed} unexpected bytes after the payload")
    return Container(bit_count, width, height, bytes(payload))


def pack_standalone(frequency_table: Dict[int, int], bit_count: int, width: int, height: int, payload: bytes) -> bytes:
    out = bytearray(STANDALONE_MAGIC)
    out += struct.pack(TABLE_COUNT_STRUCT, len(frequency_table))
    for symbol in sorted(frequency_table):
        out += struct.pack(TABLE_ENTRY_STRUCT, symbol, frequency_table[symbol])
    out += pack_container(bit_count, width, height, payload)
    return bytes(out)


def is_standalone(blob: bytes) -> bool:
    return blob[:len(STANDALONE_MAGIC)] == STANDALONE_MAGIC


def unpack_standalone(blob: bytes) -> Tuple[Dict[int, int], Container]:
    if not is_standalone(blob):
        raise ContainerFormatError("missing standalone container magic")
    offset = len(STANDALONE_MAGIC)
    if len(blob) < offset + 2:
        raise ContainerFormatError("standalone container truncated before the symbol count")
    (count,) = struct.unpack_from(TABLE_COUNT_STRUCT, blob, offset)
    offset += 2
    if count > 256:
        raise ContainerFormatError(f"symbol table claims {count} symbols, at most 256 exist")
    if len(blob) < offset + count * TABLE_ENTRY_SIZE:
        raise ContainerFormatError("standalone container truncated inside the symbol table")

    frequency_table: Dict[int, int] = {}
    for _ in range(count):
        symbol, frequency = struct.unpack_from(TABLE_ENTRY_STRUCT, blob, offset)
        offset += TABLE_ENTRY_SIZE
        if symbol in frequency_table:
            raise ContainerFormatError(f"symbol {symbol} listed twice in the table")
        if frequency == 0:
            raise ContainerFormatError(f"symbol {symbol} has a zero frequency")
        frequency_table[symbol] = frequency

    container = unpack_container(blob[offset:])
    if sum(frequency_table.values()) != container.sample_count:
        raise ContainerFormatError(
            f"table counts {sum(frequency_table.values())} samples, "
            f"image is {container.width}x{container.height}"
        )
    return frequency_table, container


def write_container(path, blob: bytes) -> int:
    Path(path).write_bytes(blob)
    return len(blob)


def read_container(path) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise InputUnavailableError(path, e.strerror or str(e)) from e
