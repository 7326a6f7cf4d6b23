from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import huffman as huff
from bitstream import iter_bits, pack_codes
from container import (
    pack_container,
    pack_standalone,
    unpack_container,
    unpack_standalone,
)
from errors import CorruptBitstreamError, EmptyAlphabetError


def _encode(samples: bytes, frequency_table: Dict[int, int]) -> Tuple[Dict[int, str], int, bytes]:
    tree = huff.build_huffman_tree(frequency_table)
    code_map = huff.generate_huffman_codes(tree)
    payload, bit_count = pack_codes(samples, code_map)
    return code_map, bit_count, payload


def compress(samples: bytes) -> Tuple[Dict[int, str], int, bytes]:
    """
    Returns (code_table, bit_count, payload) for one sample sequence
    An empty sequence has no alphabet and compresses to ({}, 0, b"")
    """
    if not samples:
        return {}, 0, b""
    return _encode(samples, huff.freq_table(samples))


def decompress(tree: Optional[huff.HuffmanTree], bit_count: int, payload: bytes) -> bytes:
    if bit_count == 0:
        return b""
    if tree is None:
        raise EmptyAlphabetError(0)
    return huff.huffman_decode(iter_bits(payload, bit_count), tree, expected_bits=bit_count)


def tree_for(samples: bytes) -> Optional[huff.HuffmanTree]:
    # the tree the decoder must rebuild for a closed-loop container
    if not samples:
        return None
    return huff.build_huffman_tree(huff.freq_table(samples))


def encode_image(samples: bytes, width: int, height: int, standalone: bool = False) -> bytes:
    if len(samples) != width * height:
        raise ValueError(f"{len(samples)} samples do not fill a {width}x{height} image")
    frequency_table = huff.freq_table(samples)
    if frequency_table:
        _, bit_count, payload = _encode(samples, frequency_table)
    else:
        bit_count, payload = 0, b""
    if standalone:
        return pack_standalone(frequency_table, bit_count, width, height, payload)
    return pack_container(bit_count, width, height, payload)


def decode_image(blob: bytes, tree: Optional[huff.HuffmanTree] = None,
                 standalone: bool = False) -> Tuple[bytes, int, int]:
    """
    Decode a container back into (samples, width, height)

    The caller says which layout the blob uses; a closed-loop header can start
    with the standalone magic bytes, so the layout is never guessed. Standalone
    containers rebuild their tree from the embedded table, closed-loop
    containers need the tree of the original image (see tree_for)
    """
    if standalone:
        frequency_table, container = unpack_standalone(blob)
        tree = huff.build_huffman_tree(frequency_table) if frequency_table else None
    else:
        container = unpack_container(blob)

    samples = decompress(tree, container.bit_count, container.payload)
    if len(samples) != container.sample_count:
        raise CorruptBitstreamError(
            f"decoded {len(samples)} samples for a {container.width}x{container.height} image",
            expected_bits=container.bit_count, consumed_bits=container.bit_count,
            decoded_symbols=len(samples),
        )
    return samples, container.width, container.height


@dataclass
class CompressionStats:
    original_size: int
    compressed_size: int

    @property
    def ratio(self) -> float:
        # compressed / original, below 1.0 means the file shrank
        return self.compressed_size / max(1, self.original_size)

    @property
    def saved_percent(self) -> float:
        if self.original_size == 0:
            return 0.0
        return 100.0 * (1 - self.compressed_size / self.original_size)


def compression_stats(original_size: int, compressed_size: int) -> CompressionStats:
    return CompressionStats(original_size, compressed_size)
