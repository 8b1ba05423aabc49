from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import TYPE_CHECKING, Final, Mapping

from .metadata import GameReplayMetadata

if TYPE_CHECKING:
    from .timing import InputParseMode


class InputEventKind(IntEnum):
    PRESS = 0
    RELEASE = 1


class InputEventKey(IntEnum):
    # Wire codes. Never renumber.
    MOVE_LEFT = 1
    MOVE_RIGHT = 2
    ROTATE_RIGHT = 3
    ROTATE_LEFT = 4
    ROTATE_180 = 5
    HARD_DROP = 6
    SOFT_DROP = 7
    HOLD = 8
    FUNCTION_1 = 9
    FUNCTION_2 = 10
    INSTANT_LEFT = 11
    INSTANT_RIGHT = 12
    SONIC_DROP = 13
    DOWN_1 = 14
    DOWN_4 = 15
    DOWN_10 = 16
    LEFT_DROP = 17
    RIGHT_DROP = 18
    LEFT_ZANGI = 19
    RIGHT_ZANGI = 20


KEY_BY_CODE: Final[Mapping[int, InputEventKey]] = {int(key.value): key for key in InputEventKey}


def key_from_code(code: int) -> InputEventKey | None:
    return KEY_BY_CODE.get(int(code))


@dataclass(frozen=True, slots=True)
class GameInputEvent:
    """A single key press or release.

    `frame` is the frame the event happened on, counted from the start of the run.
    """

    frame: int
    kind: InputEventKind
    key: InputEventKey


def sort_events(events: list[GameInputEvent] | tuple[GameInputEvent, ...]) -> list[GameInputEvent]:
    return sorted(events, key=lambda event: int(event.frame))


@dataclass(slots=True)
class GameReplayData:
    inputs: list[GameInputEvent]
    metadata: GameReplayMetadata

    def sort_inputs(self) -> GameReplayData:
        """Return a copy with inputs ordered by frame.

        Serializing requires sorted inputs; events on the same frame keep their
        relative order.
        """

        return replace(self, inputs=sort_events(self.inputs))

    @classmethod
    def from_raw(cls, data: bytes, mode: InputParseMode | None = None) -> GameReplayData:
        from .codec import load_replay_raw

        return load_replay_raw(data, mode)

    @classmethod
    def from_compressed(cls, data: bytes, mode: InputParseMode | None = None) -> GameReplayData:
        from .codec import load_replay_compressed

        return load_replay_compressed(data, mode)

    @classmethod
    def from_base64(cls, text: str | bytes, mode: InputParseMode | None = None) -> GameReplayData:
        from .codec import load_replay_base64

        return load_replay_base64(text, mode)

    def to_raw(self, mode: InputParseMode | None = None) -> bytes:
        from .codec import dump_replay_raw

        return dump_replay_raw(self, mode)

    def to_compressed(self, mode: InputParseMode | None = None) -> bytes:
        from .codec import dump_replay_compressed

        return dump_replay_compressed(self, mode)

    def to_base64(self, mode: InputParseMode | None = None) -> str:
        from .codec import dump_replay_base64

        return dump_replay_base64(self, mode)
