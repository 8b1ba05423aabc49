from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("techmino-replay")
except PackageNotFoundError:  # pragma: no cover
    # Allow running from source (e.g. `PYTHONPATH=src`) without installed package metadata.
    __version__ = "0.0.0+dev"

from .codec import (
    dump_replay_base64,
    dump_replay_compressed,
    dump_replay_file,
    dump_replay_raw,
    load_replay_base64,
    load_replay_compressed,
    load_replay_file,
    load_replay_raw,
)
from .errors import (
    Base64DecodeError,
    FrameOutOfRangeError,
    InputSerializeError,
    MalformedInputDataError,
    MetadataDeserializeError,
    MetadataNotUtf8Error,
    MetadataSeparatorNotFoundError,
    MetadataSerializeError,
    ReplayError,
    ReplayParseError,
    ReplaySerializeError,
    UnknownInputParseModeError,
    UnknownSerializeModeError,
    UnsortedInputError,
    ZlibDecompressError,
)
from .metadata import GameReplayMetadata, PlayerSettings
from .timing import ABSOLUTE_TIMING_START, InputParseMode, infer_input_parse_mode
from .types import GameInputEvent, GameReplayData, InputEventKey, InputEventKind
from .vlq import VlqError, decode_stream, encode_values

__all__ = [
    "ABSOLUTE_TIMING_START",
    "Base64DecodeError",
    "FrameOutOfRangeError",
    "GameInputEvent",
    "GameReplayData",
    "GameReplayMetadata",
    "InputEventKey",
    "InputEventKind",
    "InputParseMode",
    "InputSerializeError",
    "MalformedInputDataError",
    "MetadataDeserializeError",
    "MetadataNotUtf8Error",
    "MetadataSeparatorNotFoundError",
    "MetadataSerializeError",
    "PlayerSettings",
    "ReplayError",
    "ReplayParseError",
    "ReplaySerializeError",
    "UnknownInputParseModeError",
    "UnknownSerializeModeError",
    "UnsortedInputError",
    "VlqError",
    "ZlibDecompressError",
    "decode_stream",
    "dump_replay_base64",
    "dump_replay_compressed",
    "dump_replay_file",
    "dump_replay_raw",
    "encode_values",
    "infer_input_parse_mode",
    "load_replay_base64",
    "load_replay_compressed",
    "load_replay_file",
    "load_replay_raw",
]
