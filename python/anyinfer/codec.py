"""
Tensor codec for the KServe v2 raw tensor layouts.

Two layouts are supported:

- BYTES: each element is a 4-byte little-endian unsigned length followed by
  that many raw bytes, with no padding between elements.
- INT32: each element is a 4-byte little-endian signed integer.

Byte order is always spelled out in the struct format ("<"), never taken
from the host.
"""

import struct
from typing import List, Optional, Sequence, Union

from .errors import MalformedResponse

INT32_WIDTH = 4
_LENGTH_PREFIX = struct.Struct("<I")

StrOrBytes = Union[str, bytes]


def _as_bytes(value: StrOrBytes) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    raise TypeError(
        f"String batch elements must be str or bytes, got {type(value).__name__}: {value!r}"
    )


def encode_string_batch(strings: Sequence[StrOrBytes], batch_size: int) -> bytes:
    """
    Encode a batch of strings into the BYTES tensor layout.

    Args:
        strings: One entry per batch element. ``str`` values are UTF-8
                 encoded, ``bytes`` values are copied as-is.
        batch_size: Expected number of elements.

    Returns:
        Concatenation of length-prefixed elements, in input order.

    Raises:
        ValueError: If batch_size < 1 or len(strings) != batch_size.
        TypeError: If an element is neither str nor bytes.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    if len(strings) != batch_size:
        raise ValueError(
            f"Expected {batch_size} strings for the batch, got {len(strings)}"
        )

    parts = []
    for value in strings:
        data = _as_bytes(value)
        parts.append(_LENGTH_PREFIX.pack(len(data)))
        parts.append(data)
    return b"".join(parts)


def decode_string_batch(
    buffer: bytes, batch_size: Optional[int] = None, call: Optional[str] = None
) -> List[bytes]:
    """
    Decode a BYTES tensor payload into its raw elements.

    When batch_size is given the buffer must hold exactly that many elements.
    Truncated length prefixes, truncated bodies and trailing bytes are all
    reported as MalformedResponse.
    """
    buffer = bytes(buffer)
    elements: List[bytes] = []
    offset = 0
    while offset < len(buffer):
        if len(buffer) - offset < _LENGTH_PREFIX.size:
            raise MalformedResponse(
                call, f"truncated length prefix at offset {offset}"
            )
        (length,) = _LENGTH_PREFIX.unpack_from(buffer, offset)
        offset += _LENGTH_PREFIX.size
        end = offset + length
        if end > len(buffer):
            raise MalformedResponse(
                call,
                f"element {len(elements)} declares {length} bytes but only "
                f"{len(buffer) - offset} remain",
            )
        elements.append(buffer[offset:end])
        offset = end

    if batch_size is not None and len(elements) != batch_size:
        raise MalformedResponse(
            call, f"expected {batch_size} elements, decoded {len(elements)}"
        )
    return elements


def encode_int32_batch(values: Sequence[int]) -> bytes:
    """Encode integers as consecutive little-endian int32 values."""
    try:
        return struct.pack(f"<{len(values)}i", *values)
    except struct.error as e:
        raise ValueError(f"Value out of int32 range: {e}") from e


def decode_int32_batch(
    buffer: bytes, element_count: int, call: Optional[str] = None
) -> List[int]:
    """
    Decode a raw INT32 tensor payload.

    Args:
        buffer: Raw output bytes.
        element_count: Number of int32 values the buffer must hold.
        call: Name of the call the buffer came from, used in error reports.

    Returns:
        The decoded values, in order.

    Raises:
        MalformedResponse: If the buffer length is not a multiple of 4 or does
            not equal element_count * 4. Nothing is decoded in that case.
    """
    if element_count < 0:
        raise ValueError(f"element_count must be >= 0, got {element_count}")
    if len(buffer) % INT32_WIDTH:
        raise MalformedResponse(
            call,
            f"buffer of {len(buffer)} bytes is not a multiple of {INT32_WIDTH}",
        )
    expected = element_count * INT32_WIDTH
    if len(buffer) != expected:
        raise MalformedResponse(
            call,
            f"expected {expected} bytes for {element_count} int32 values, "
            f"got {len(buffer)}",
        )
    return list(struct.unpack(f"<{element_count}i", buffer))
