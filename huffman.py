import heapq
from typing import Dict, Iterable, List, Optional

from errors import CorruptBitstreamError, EmptyAlphabetError


class HuffmanNode: # Node for Huffman tree, children are indices into the tree's node list
    def __init__(self, frequency, symbol=None, left=None, right=None):
        self.symbol = symbol    # byte for leaves, None for internal nodes
        self.frequency = frequency
        self.left = left
        self.right = right

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode(leaf symbol={self.symbol}, frequency={self.frequency})"
        return f"HuffmanNode(frequency={self.frequency}, left={self.left}, right={self.right})"


class HuffmanTree:
    def __init__(self, nodes: List[HuffmanNode], root: int):
        self.nodes = nodes
        self.root = root

    def __len__(self):
        return len(self.nodes)

    def __getitem__(self, index) -> HuffmanNode:
        return self.nodes[index]

    @property
    def root_node(self) -> HuffmanNode:
        return self.nodes[self.root]

    @property
    def total_frequency(self) -> int:
        return self.root_node.frequency

    def leaves(self) -> List[HuffmanNode]:
        return [node for node in self.nodes if node.is_leaf]


def freq_table(samples: Iterable[int]) -> Dict[int, int]:
    ft: Dict[int, int] = {}
    for b in samples:
        if not 0 <= b <= 255:
            raise ValueError(f"sample value {b} does not fit in one byte")
        ft[b] = ft.get(b, 0) + 1
    return ft


def build_huffman_tree(frequency_table: Dict[int, int]) -> HuffmanTree: # frequency_table: dict of symbol -> frequency
    if not frequency_table:
        raise EmptyAlphabetError(0)

    nodes: List[HuffmanNode] = []
    priority_queue = []
    # Leaves go in by ascending symbol; the node index doubles as the tie-breaker,
    # so equal frequencies pop lowest symbol first, then internal nodes oldest first
    for symbol in sorted(frequency_table):
        frequency = frequency_table[symbol]
        if frequency <= 0:
            raise ValueError(f"frequency for symbol {symbol} must be positive, got {frequency}")
        nodes.append(HuffmanNode(frequency, symbol=symbol))
        priority_queue.append((frequency, len(nodes) - 1))
    heapq.heapify(priority_queue)

    # Build the tree
    while len(priority_queue) > 1:
        left_freq, left = heapq.heappop(priority_queue)
        right_freq, right = heapq.heappop(priority_queue)
        nodes.append(HuffmanNode(left_freq + right_freq, left=left, right=right)) # internal node with combined frequency
        heapq.heappush(priority_queue, (left_freq + right_freq, len(nodes) - 1))

    return HuffmanTree(nodes, priority_queue[0][1])


def generate_huffman_codes(tree: HuffmanTree) -> Dict[int, str]:
    codes: Dict[int, str] = {}

    # A lone leaf has no path, give it a one bit code so every sample costs a bit
    if tree.root_node.is_leaf:
        codes[tree.root_node.symbol] = "0"
        return codes

    stack = [(tree.root, "")]
    while stack:
        index, current_code = stack.pop()
        node = tree[index]
        if node.is_leaf:
            codes[node.symbol] = current_code
            continue
        stack.append((node.right, current_code + "1"))
        stack.append((node.left, current_code + "0"))

    return codes


def huffman_encode(samples: bytes, code_map: Dict[int, str]) -> str: # samples: input bytes to encode, code_map: dict of symbol -> Huffman code
    return "".join(code_map[b] for b in samples)


def huffman_decode(bits: Iterable, tree: HuffmanTree, expected_bits: Optional[int] = None) -> bytes:
    """
    Walk the tree one bit at a time, emitting a symbol whenever a leaf is reached

    bits may be a '0'/'1' string or any iterable of 0/1 ints. The walk must finish
    exactly on a symbol boundary, anything else means the stream was cut short or
    damaged and is reported instead of emitting a partial symbol
    """
    nodes = tree.nodes
    root = tree.root
    single_leaf = nodes[root].is_leaf
    decoded = bytearray()
    index = root
    consumed = 0

    for bit in bits:
        consumed += 1
        go_right = bit == 1 or bit == "1"
        if single_leaf:
            if go_right:
                raise CorruptBitstreamError(
                    "bit 1 in a single-symbol stream", expected_bits, consumed, len(decoded)
                )
            decoded.append(nodes[root].symbol)
            continue

        node = nodes[index]
        index = node.right if go_right else node.left
        leaf = nodes[index]
        if leaf.is_leaf:
            decoded.append(leaf.symbol)
            index = root

    if index != root:
        raise CorruptBitstreamError(
            "bitstream ends in the middle of a code", expected_bits, consumed, len(decoded)
        )
    return bytes(decoded)


def weighted_code_length(frequency_table: Dict[int, int], code_map: Dict[int, str]) -> int:
    return sum(frequency * len(code_map[symbol]) for symbol, frequency in frequency_table.items())


def is_prefix_free(code_map: Dict[int, str]) -> bool:
    # after sorting, a code that prefixes another sorts directly before one that it prefixes
    codes = sorted(code_map.values())
    return all(not b.startswith(a) for a, b in zip(codes, codes[1:]))
