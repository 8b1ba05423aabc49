from __future__ import annotations

from typing import Annotated, Any, Final, TypeVar

import msgspec

from .vlq import U64_MAX

# msgspec cannot express an upper bound past int64; the ceiling is checked after conversion.
U64 = Annotated[int, msgspec.Meta(ge=0)]

# Python attribute that holds unrecognized JSON keys; never written under its own name.
NONSTANDARD_FIELD: Final[str] = "nonstandard"

_StructT = TypeVar("_StructT", bound=msgspec.Struct)


class PlayerSettings(msgspec.Struct, kw_only=True, frozen=True, rename="camel", omit_defaults=True):
    """The player's settings at the time the run was recorded.

    All fields are optional; replays from different releases and mods carry
    different subsets. Keys this struct does not know are kept in `nonstandard`.
    """

    shake_fx: U64 | None = msgspec.field(default=None, name="shakeFX")
    splash_fx: U64 | None = msgspec.field(default=None, name="splashFX")
    das: U64 | None = None
    high_cam: bool | None = None
    smooth: bool | None = None
    warn: bool | None = None
    dropcut: U64 | None = None
    ghost: float | None = None
    atk_fx: U64 | None = msgspec.field(default=None, name="atkFX")
    next_pos: bool | None = None
    block: bool | None = None
    text: bool | None = None
    ihs: bool | None = None
    face: list[U64] | None = None
    score: bool | None = None
    irs: bool | None = None
    center: U64 | None = None
    sdarr: U64 | None = None
    move_fx: U64 | None = msgspec.field(default=None, name="moveFX")
    drop_fx: U64 | None = msgspec.field(default=None, name="dropFX")
    ims: bool | None = None
    lock_fx: U64 | None = msgspec.field(default=None, name="lockFX")
    arr: U64 | None = None
    swap: bool | None = None
    bag_line: bool | None = None
    skin: list[U64] | None = None
    grid: float | None = None
    dascut: U64 | None = None
    sddas: U64 | None = None
    rs: str | None = msgspec.field(default=None, name="RS")
    clear_fx: U64 | None = msgspec.field(default=None, name="clearFX")
    ft_lock: bool | None = msgspec.field(default=None, name="FTLock")
    nonstandard: dict[str, Any] = msgspec.field(default_factory=dict)


class GameReplayMetadata(msgspec.Struct, kw_only=True, frozen=True, rename="camel", omit_defaults=True):
    """The JSON header of a replay.

    `private` holds mode-specific data (only the custom clear/puzzle modes are
    known to use it). `mods` is a list of `(mod id, value)` pairs and is stored
    under the singular key `mod`. `mode` is the internal mode name, e.g.
    `sprint_10l`.
    """

    player: str
    seed: U64
    version: str
    date: str
    mode: str
    setting: PlayerSettings
    tas_used: bool | None = None
    private: Any = None
    mods: list[tuple[U64, Any]] | None = msgspec.field(default=None, name="mod")
    nonstandard: dict[str, Any] = msgspec.field(default_factory=dict)


def _wire_names(cls: type[msgspec.Struct]) -> dict[str, str]:
    return {
        info.encode_name: info.name
        for info in msgspec.structs.fields(cls)
        if info.name != NONSTANDARD_FIELD
    }


def _struct_from_obj(cls: type[_StructT], obj: dict[str, Any]) -> _StructT:
    names = _wire_names(cls)
    known = {key: value for key, value in obj.items() if key in names}
    known[NONSTANDARD_FIELD] = {key: value for key, value in obj.items() if key not in names}
    return msgspec.convert(known, type=cls)


def _struct_to_obj(struct: msgspec.Struct) -> dict[str, Any]:
    obj = msgspec.to_builtins(struct)
    obj.pop(NONSTANDARD_FIELD, None)
    for key, value in getattr(struct, NONSTANDARD_FIELD).items():
        obj.setdefault(key, value)
    return obj


def _check_u64(value: int, path: str) -> None:
    if value > U64_MAX:
        raise msgspec.ValidationError(f"Expected `int` <= {U64_MAX} - at `{path}`")


def _check_settings_bounds(settings: PlayerSettings, path: str) -> None:
    for info in msgspec.structs.fields(PlayerSettings):
        value = getattr(settings, info.name)
        if info.name == NONSTANDARD_FIELD or value is None:
            continue
        if isinstance(value, list):
            for index, item in enumerate(value):
                _check_u64(item, f"{path}.{info.encode_name}[{index}]")
        elif isinstance(value, int) and not isinstance(value, bool):
            _check_u64(value, f"{path}.{info.encode_name}")


def settings_from_obj(obj: dict[str, Any], *, path: str = "$") -> PlayerSettings:
    settings = _struct_from_obj(PlayerSettings, obj)
    _check_settings_bounds(settings, path)
    return settings


def settings_to_obj(settings: PlayerSettings) -> dict[str, Any]:
    return _struct_to_obj(settings)


def metadata_from_obj(obj: dict[str, Any]) -> GameReplayMetadata:
    """Build metadata from a decoded JSON object.

    Raises `msgspec.ValidationError` when a required key is missing or a value
    has the wrong type.
    """

    setting = obj.get("setting")
    if isinstance(setting, dict):
        # Settings are converted on their own so that their unknown keys (even
        # one spelled `nonstandard`) land in `setting.nonstandard`.
        obj = {**obj, "setting": {}}

    metadata = _struct_from_obj(GameReplayMetadata, obj)
    _check_u64(metadata.seed, "$.seed")
    for index, (mod_id, _value) in enumerate(metadata.mods or ()):
        _check_u64(mod_id, f"$.mod[{index}][0]")
    return msgspec.structs.replace(metadata, setting=settings_from_obj(setting, path="$.setting"))


def metadata_to_obj(metadata: GameReplayMetadata) -> dict[str, Any]:
    obj = _struct_to_obj(metadata)
    obj["setting"] = settings_to_obj(metadata.setting)
    return obj


def decode_metadata(data: bytes | str) -> GameReplayMetadata:
    return metadata_from_obj(msgspec.json.decode(data, type=dict[str, Any]))


def encode_metadata(metadata: GameReplayMetadata) -> bytes:
    return msgspec.json.encode(metadata_to_obj(metadata))
