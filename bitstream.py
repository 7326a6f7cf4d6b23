from typing import Dict, Iterator, Tuple

from errors import CorruptBitstreamError


def packed_size(bit_count: int) -> int:
    return (bit_count + 7) // 8


def pack_codes(samples: bytes, code_map: Dict[int, str]) -> Tuple[bytes, int]:
    """
    Converts Huffman codes into packed bytes
    Returns (payload, bit_count); the final byte is zero padded in its low bits
    """
    out = bytearray()
    acc = 0
    acc_bits = 0
    bit_count = 0

    for b in samples:
        bits = code_map[b]
        bit_count += len(bits)
        for ch in bits:
            acc = (acc << 1) | (1 if ch == '1' else 0)
            acc_bits += 1
            if acc_bits == 8:
                out.append(acc)
                acc = 0
                acc_bits = 0

    if acc_bits != 0:
        out.append((acc << (8 - acc_bits)) & 0xFF)

    return bytes(out), bit_count


def pack_bits(bitstring: str) -> bytes:
    out = bytearray()
    for i in range(0, len(bitstring), 8):
        chunk = bitstring[i:i + 8]
        out.append(int(chunk.ljust(8, "0"), 2))
    return bytes(out)


def iter_bits(payload: bytes, bit_count: int) -> Iterator[int]:
    if bit_count < 0:
        raise ValueError(f"bit count must not be negative, got {bit_count}")
    if len(payload) < packed_size(bit_count):
        raise CorruptBitstreamError(
            f"payload holds {len(payload)} bytes, {packed_size(bit_count)} needed",
            expected_bits=bit_count, consumed_bits=len(payload) * 8,
        )

    remaining = bit_count
    for byte in payload:
        if remaining <= 0:
            break
        for i in range(7, 7 - min(8, remaining), -1):
            yield (byte >> i) & 1
        remaining -= 8


def unpack_bits(payload: bytes, bit_count: int) -> str:
    # format(b, "08b") per byte, then drop the padding
    if bit_count < 0:
        raise ValueError(f"bit count must not be negative, got {bit_count}")
    needed = packed_size(bit_count)
    if len(payload) < needed:
        raise CorruptBitstreamError(
            f"payload holds {len(payload)} bytes, {needed} needed",
            expected_bits=bit_count, consumed_bits=len(payload) * 8,
        )
    return "".join(format(b, "08b") for b in payload[:needed])[:bit_count]
