from dataclasses import dataclass
from pathlib import Path

from errors import ImageFormatError, InputUnavailableError

PGM_MAGIC = b"P5"
WHITESPACE = b" \t\n\r\x0b\x0c"


@dataclass
class PGMImage:
    samples: bytes
    width: int
    height: int
    maxval: int = 255


def _next_token(data: bytes, pos: int):
    # skip whitespace and '#' comments up to the end of their line
    while pos < len(data):
        ch = data[pos:pos + 1]
        if ch in WHITESPACE:
            pos += 1
        elif ch == b"#":
            while pos < len(data) and data[pos:pos + 1] not in (b"\n", b"\r"):
                pos += 1
        else:
            break
    start = pos
    while pos < len(data) and data[pos:pos + 1] not in WHITESPACE:
        pos += 1
    return data[start:pos], pos


def parse_pgm(data: bytes, path=None) -> PGMImage:
    magic, pos = _next_token(data, 0)
    if magic != PGM_MAGIC:
        raise ImageFormatError(f"expected format tag P5, found {magic[:8]!r}", path)

    fields = []
    for name in ("width", "height", "maxval"):
        token, pos = _next_token(data, pos)
        if not token.isdigit():
            raise ImageFormatError(f"{name} is not a decimal number: {token[:16]!r}", path)
        fields.append(int(token))
    width, height, maxval = fields

    if not 0 < maxval < 256:
        raise ImageFormatError(f"maxval {maxval} is outside 1..255, only one byte per sample is supported", path)
    if pos >= len(data) or data[pos:pos + 1] not in WHITESPACE:
        raise ImageFormatError("missing whitespace after maxval", path)
    pos += 1 # exactly one separator before the raster

    size = width * height
    raster = data[pos:pos + size]
    if len(raster) < size:
        raise ImageFormatError(f"raster holds {len(raster)} of {size} samples", path)
    return PGMImage(bytes(raster), width, height, maxval)


def read_pgm(path) -> PGMImage:
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise InputUnavailableError(path, e.strerror or str(e)) from e
    return parse_pgm(data, path)


def format_pgm(samples: bytes, width: int, height: int, maxval: int = 255) -> bytes:
    if len(samples) != width * height:
        raise ValueError(f"{len(samples)} samples do not fill a {width}x{height} image")
    return b"P5\n%d %d\n%d\n" % (width, height, maxval) + bytes(samples)


def write_pgm(path, samples: bytes, width: int, height: int, maxval: int = 255) -> int:
    data = format_pgm(samples, width, height, maxval)
    Path(path).write_bytes(data)
    return len(data)
