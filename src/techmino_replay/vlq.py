from __future__ import annotations

import io
from typing import Final, Iterable

from construct import Construct, ConstructError, GreedyRange, IntegerError, SizeofError
from construct.core import stream_read, stream_write

from .errors import ReplayError

U64_MAX: Final[int] = (1 << 64) - 1

_PAYLOAD_MASK: Final[int] = 0x7F
_CONTINUATION_BIT: Final[int] = 0x80


class VlqError(ReplayError):
    pass


class VlqInt(Construct):
    """Big-endian variable-length quantity.

    Seven payload bits per byte, most significant group first. Every byte except
    the last has the high bit set. Values are clamped to 64 bits on parse, the
    same way a u64 accumulator would wrap.
    """

    def _parse(self, stream, context, path):
        acc = 0
        while True:
            b = stream_read(stream, 1, path)[0]
            acc = ((acc << 7) | (b & _PAYLOAD_MASK)) & U64_MAX
            if not b & _CONTINUATION_BIT:
                return acc

    def _build(self, obj, stream, context, path):
        if not isinstance(obj, int) or isinstance(obj, bool):
            raise IntegerError(f"value {obj!r} is not an integer", path=path)
        if obj < 0:
            raise IntegerError(f"VLQ cannot build from negative number {obj}", path=path)
        if obj > U64_MAX:
            raise IntegerError(f"VLQ value {obj} does not fit in 64 bits", path=path)
        groups = bytearray([obj & _PAYLOAD_MASK])
        x = obj >> 7
        while x > 0:
            groups.append(_CONTINUATION_BIT | (x & _PAYLOAD_MASK))
            x >>= 7
        groups.reverse()
        stream_write(stream, bytes(groups), len(groups), path)
        return obj

    def _sizeof(self, context, path):
        raise SizeofError("VLQ has no fixed size", path=path)


VLQ = VlqInt()
# A dangling byte with the continuation bit set ends the range without a value.
VLQ_STREAM = GreedyRange(VLQ)


def decode_stream(data: bytes) -> list[int]:
    """Decode every complete VLQ value in `data`.

    A trailing value whose last byte still has the continuation bit set is
    dropped, matching how the game reads replays.
    """
    return list(VLQ_STREAM.parse_stream(io.BytesIO(bytes(data))))


def encode_values(values: Iterable[int]) -> bytes:
    try:
        return VLQ_STREAM.build(list(values))
    except ConstructError as exc:
        raise VlqError(f"failed to encode VLQ values: {exc}") from exc


def encode_value(value: int) -> bytes:
    try:
        return VLQ.build(value)
    except ConstructError as exc:
        raise VlqError(f"failed to encode VLQ value {value!r}: {exc}") from exc
