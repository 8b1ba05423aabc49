from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path
from typing import Final
import zlib

import msgspec

from .errors import (
    Base64DecodeError,
    InputSerializeError,
    MetadataDeserializeError,
    MetadataNotUtf8Error,
    MetadataSeparatorNotFoundError,
    MetadataSerializeError,
    UnknownInputParseModeError,
    UnknownSerializeModeError,
    ZlibDecompressError,
)
from .events import build_input_stream, parse_input_stream
from .metadata import GameReplayMetadata, decode_metadata, encode_metadata
from .timing import InputParseMode, resolve_input_parse_mode
from .types import GameReplayData
from .vlq import VlqError

logger = logging.getLogger(__name__)

METADATA_SEPARATOR: Final[bytes] = b"\n"
# The game writes with miniz level 10; Python's zlib tops out at 9.
COMPRESSION_LEVEL: Final[int] = 9

_ZLIB_CM_DEFLATE: Final[int] = 8


def _is_zlib(data: bytes) -> bool:
    if len(data) < 2:
        return False
    cmf, flg = data[0], data[1]
    return (cmf & 0x0F) == _ZLIB_CM_DEFLATE and ((cmf << 8) | flg) % 31 == 0


def _parse_metadata(data: bytes) -> GameReplayMetadata:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MetadataNotUtf8Error(f"replay metadata is not valid UTF-8: {exc}") from exc
    try:
        return decode_metadata(text)
    except msgspec.DecodeError as exc:
        raise MetadataDeserializeError(f"invalid replay metadata: {exc}") from exc


def load_replay_raw(data: bytes, mode: InputParseMode | None = None) -> GameReplayData:
    """Parse an uncompressed replay: JSON metadata, a line feed, then the input stream.

    The game always compresses replays before saving or exporting them, so most
    callers want `load_replay_compressed` or `load_replay_base64` instead.

    `mode` overrides the timing mode inferred from `metadata.version`.
    """

    data = bytes(data)
    split_at = data.find(METADATA_SEPARATOR)
    if split_at < 0:
        raise MetadataSeparatorNotFoundError()

    metadata = _parse_metadata(data[:split_at])
    resolved = resolve_input_parse_mode(metadata.version, mode)
    if resolved is None:
        raise UnknownInputParseModeError(metadata.version)
    logger.debug("replay version %r, %s timing", metadata.version, resolved.value)

    inputs = parse_input_stream(data[split_at + 1 :], resolved)
    return GameReplayData(inputs=inputs, metadata=metadata)


def load_replay_compressed(data: bytes, mode: InputParseMode | None = None) -> GameReplayData:
    """Parse a zlib-compressed replay, e.g. the contents of a `.rep` file."""
    try:
        raw = zlib.decompress(bytes(data))
    except zlib.error as exc:
        raise ZlibDecompressError(f"failed to decompress replay: {exc}") from exc
    return load_replay_raw(raw, mode)


def load_replay_base64(text: str | bytes, mode: InputParseMode | None = None) -> GameReplayData:
    """Parse an exported replay string (base64 of the compressed bytes)."""
    if isinstance(text, str):
        try:
            text = text.strip().encode("ascii")
        except UnicodeEncodeError as exc:
            raise Base64DecodeError(f"replay string is not base64: {exc}") from exc
    else:
        text = bytes(text).strip()
    try:
        data = base64.b64decode(text, validate=True)
    except binascii.Error as exc:
        raise Base64DecodeError(f"replay string is not base64: {exc}") from exc
    return load_replay_compressed(data, mode)


def dump_replay_raw(replay: GameReplayData, mode: InputParseMode | None = None) -> bytes:
    """Serialize a replay without compression.

    Inputs must already be sorted by frame (see `GameReplayData.sort_inputs`).
    When `mode` is omitted it is inferred from `metadata.version`, so a parsed
    replay re-serializes the way it was read.
    """

    version = replay.metadata.version
    resolved = resolve_input_parse_mode(version, mode)
    if resolved is None:
        raise UnknownSerializeModeError(version)

    try:
        stream = build_input_stream(replay.inputs, resolved)
    except VlqError as exc:
        raise InputSerializeError(f"failed to encode input stream: {exc}") from exc
    try:
        header = encode_metadata(replay.metadata)
    except (msgspec.EncodeError, TypeError) as exc:
        raise MetadataSerializeError(f"failed to serialize replay metadata: {exc}") from exc
    return header + METADATA_SEPARATOR + stream


def dump_replay_compressed(replay: GameReplayData, mode: InputParseMode | None = None) -> bytes:
    return zlib.compress(dump_replay_raw(replay, mode), COMPRESSION_LEVEL)


def dump_replay_base64(replay: GameReplayData, mode: InputParseMode | None = None) -> str:
    return base64.b64encode(dump_replay_compressed(replay, mode)).decode("ascii")


def load_replay_file(path: Path, mode: InputParseMode | None = None) -> GameReplayData:
    """Load a `.rep` file holding either compressed bytes or an exported base64 string."""
    data = Path(path).read_bytes()
    if not _is_zlib(data):
        return load_replay_base64(data, mode)
    try:
        return load_replay_compressed(data, mode)
    except ZlibDecompressError as zlib_exc:
        # A few base64 prefixes (`HK`, `Hj`, ...) also pass the zlib header check.
        logger.debug("%s does not inflate, retrying as base64", path)
        try:
            return load_replay_base64(data, mode)
        except Base64DecodeError:
            raise zlib_exc from zlib_exc.__cause__


def dump_replay_file(
    path: Path,
    replay: GameReplayData,
    mode: InputParseMode | None = None,
    *,
    as_base64: bool = False,
) -> None:
    path = Path(path)
    if as_base64:
        path.write_text(dump_replay_base64(replay, mode), encoding="ascii")
    else:
        path.write_bytes(dump_replay_compressed(replay, mode))
