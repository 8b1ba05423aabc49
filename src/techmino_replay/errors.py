from __future__ import annotations


class ReplayError(ValueError):
    """Base class for every replay codec failure."""


class ReplayParseError(ReplayError):
    """Raised when replay bytes or text cannot be turned into a `GameReplayData`."""


class ReplaySerializeError(ReplayError):
    """Raised when a `GameReplayData` cannot be written out."""


class ZlibDecompressError(ReplayParseError):
    pass


class Base64DecodeError(ReplayParseError):
    pass


class MetadataSeparatorNotFoundError(ReplayParseError):
    """No line feed (0x0A) between the metadata and the input stream."""

    def __init__(self) -> None:
        super().__init__("metadata separator (line feed) not found")


class MetadataNotUtf8Error(ReplayParseError):
    pass


class MetadataDeserializeError(ReplayParseError):
    pass


class UnknownInputParseModeError(ReplayParseError):
    """The timing mode could not be inferred from the version string.

    Pass an explicit `InputParseMode` to load the replay anyway.
    """

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"cannot infer input parse mode from version {version!r}")


class MalformedInputDataError(ReplayParseError):
    """An event's key byte does not name a known key.

    `position` is the index of the event's first value in the VLQ stream,
    `frame` the frame it resolved to, and `kind` the raw key byte.
    """

    def __init__(self, *, position: int, frame: int, kind: int) -> None:
        self.position = position
        self.frame = frame
        self.kind = kind
        super().__init__(f"malformed input at value {position} (frame={frame}, key byte={kind})")


class UnknownSerializeModeError(ReplaySerializeError):
    """Encode-side twin of `UnknownInputParseModeError`."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"cannot infer input parse mode from version {version!r}")


class UnsortedInputError(ReplaySerializeError):
    """Inputs must be sorted by frame before serializing.

    Call `GameReplayData.sort_inputs()` first.
    """

    def __init__(self, *, first_unsorted_index: int, prev_time: int, unsorted_time: int) -> None:
        self.first_unsorted_index = first_unsorted_index
        self.prev_time = prev_time
        self.unsorted_time = unsorted_time
        super().__init__(
            f"inputs are not sorted by frame: index {first_unsorted_index} has frame {unsorted_time} "
            f"after frame {prev_time}"
        )


class InputSerializeError(ReplaySerializeError):
    """The input stream could not be encoded."""


class FrameOutOfRangeError(InputSerializeError):
    """An input's frame is negative or does not fit in 64 bits."""

    def __init__(self, *, index: int, frame: int) -> None:
        self.index = index
        self.frame = frame
        super().__init__(f"input {index} has frame {frame}, outside 0..2**64-1")


class MetadataSerializeError(ReplaySerializeError):
    pass
