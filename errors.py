class HuffmanError(Exception): # base for every failure raised by the codec and its collaborators
    pass


class InputUnavailableError(HuffmanError, OSError):
    def __init__(self, path, reason=""):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"cannot read {self.path}" + (f": {reason}" if reason else ""))


class ImageFormatError(HuffmanError, ValueError):
    def __init__(self, reason, path=None):
        self.path = None if path is None else str(path)
        self.reason = reason
        where = f"{self.path}: " if self.path else ""
        super().__init__(f"{where}{reason}")


class EmptyAlphabetError(HuffmanError, ValueError):
    def __init__(self, symbol_count=0):
        self.symbol_count = symbol_count
        super().__init__(f"cannot build a Huffman tree from {symbol_count} symbols")


class CorruptBitstreamError(HuffmanError, ValueError):
    """
    Raised when a bit sequence does not decode to whole symbols

    expected_bits is the bit count the container promised, consumed_bits how far
    decoding got before the problem was found
    """

    def __init__(self, reason, expected_bits=None, consumed_bits=None, decoded_symbols=None):
        self.reason = reason
        self.expected_bits = expected_bits
        self.consumed_bits = consumed_bits
        self.decoded_symbols = decoded_symbols
        details = []
        if expected_bits is not None:
            details.append(f"expected {expected_bits} bits")
        if consumed_bits is not None:
            details.append(f"consumed {consumed_bits}")
        if decoded_symbols is not None:
            details.append(f"decoded {decoded_symbols} symbols")
        super().__init__(reason + (f" ({', '.join(details)})" if details else ""))


class ContainerFormatError(HuffmanError, ValueError):
    pass
