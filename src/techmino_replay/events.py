from __future__ import annotations

import logging
from typing import Final, Sequence

from .errors import FrameOutOfRangeError, MalformedInputDataError, UnsortedInputError
from .timing import InputParseMode
from .types import GameInputEvent, InputEventKind, key_from_code
from .vlq import U64_MAX, decode_stream, encode_values

logger = logging.getLogger(__name__)

KEY_CODE_MASK: Final[int] = 0b011111
RELEASE_SHIFT: Final[int] = 5
# Key bytes strictly above this are releases.
RELEASE_THRESHOLD: Final[int] = 0b100000


def pack_key_byte(event: GameInputEvent) -> int:
    return int(event.key) | (int(event.kind) << RELEASE_SHIFT)


def parse_input_stream(data: bytes, mode: InputParseMode) -> list[GameInputEvent]:
    """Decode the input stream that follows the metadata line.

    The stream is VLQ values taken two at a time as `(time, key byte)`. A value
    left over without a partner is ignored.
    """

    values = decode_stream(data)
    if len(values) % 2:
        logger.debug("dropping unpaired trailing input value %d", values[-1])

    events: list[GameInputEvent] = []
    prev_frame = 0
    for index in range(len(values) // 2):
        time = values[2 * index]
        key_byte = values[2 * index + 1]

        if mode is InputParseMode.RELATIVE:
            frame = (time + prev_frame) & U64_MAX
        else:
            frame = time

        kind = InputEventKind.RELEASE if key_byte > RELEASE_THRESHOLD else InputEventKind.PRESS
        key = key_from_code(key_byte & KEY_CODE_MASK)
        if key is None:
            raise MalformedInputDataError(position=2 * index, frame=frame, kind=key_byte)

        prev_frame = frame
        events.append(GameInputEvent(frame=frame, kind=kind, key=key))

    logger.debug("parsed %d input events (%s timing)", len(events), mode.value)
    return events


def check_sorted(events: Sequence[GameInputEvent]) -> None:
    for index in range(1, len(events)):
        prev_time = int(events[index - 1].frame)
        cur_time = int(events[index].frame)
        if cur_time < prev_time:
            raise UnsortedInputError(
                first_unsorted_index=index,
                prev_time=prev_time,
                unsorted_time=cur_time,
            )


def build_input_stream(events: Sequence[GameInputEvent], mode: InputParseMode) -> bytes:
    """Encode sorted events as `(time, key byte)` VLQ pairs.

    Raises `UnsortedInputError` if the events are not ordered by frame; this
    function never reorders them. Frames outside the u64 range raise
    `FrameOutOfRangeError`.
    """

    check_sorted(events)

    values: list[int] = []
    prev_frame = 0
    for index, event in enumerate(events):
        frame = int(event.frame)
        if not 0 <= frame <= U64_MAX:
            raise FrameOutOfRangeError(index=index, frame=frame)
        if mode is InputParseMode.RELATIVE:
            values.append(frame - prev_frame)
        else:
            values.append(frame)
        values.append(pack_key_byte(event))
        prev_frame = frame
    return encode_values(values)
