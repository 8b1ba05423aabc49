from __future__ import annotations

import json

import msgspec
import pytest

from techmino_replay.metadata import (
    GameReplayMetadata,
    PlayerSettings,
    decode_metadata,
    encode_metadata,
    metadata_to_obj,
    settings_to_obj,
)
from techmino_replay.vlq import U64_MAX

SAMPLE_METADATA = {
    "player": "MrZ",
    "seed": 1046527,
    "version": "0.17.22",
    "date": "2023/01/02 12:34",
    "mode": "sprint_40l",
    "tasUsed": False,
    "mod": [[3, True], [8, 2]],
    "private": {"field": [1, 2, 3]},
    "setting": {
        "das": 10,
        "arr": 2,
        "sddas": 0,
        "sdarr": 2,
        "ihs": True,
        "irs": True,
        "ims": True,
        "RS": "TRS",
        "face": [0, 0, 0, 0, 0, 0, 0],
        "skin": [1, 7, 11, 3, 14, 4, 9],
        "ghost": 0.3,
        "grid": 0,
        "atkFX": 2,
        "shakeFX": 2,
        "highCam": True,
        "bagLine": False,
        "FTLock": True,
        "someNewKnob": 5,
    },
    "extraTop": "x",
}


def test_decode_maps_wire_names() -> None:
    meta = decode_metadata(json.dumps(SAMPLE_METADATA))
    assert meta.player == "MrZ"
    assert meta.seed == 1046527
    assert meta.tas_used is False
    assert meta.mods == [(3, True), (8, 2)]
    assert meta.private == {"field": [1, 2, 3]}
    assert meta.nonstandard == {"extraTop": "x"}

    setting = meta.setting
    assert setting.rs == "TRS"
    assert setting.atk_fx == 2
    assert setting.shake_fx == 2
    assert setting.high_cam is True
    assert setting.bag_line is False
    assert setting.ft_lock is True
    assert setting.grid == 0.0
    assert setting.skin == [1, 7, 11, 3, 14, 4, 9]
    assert setting.lock_fx is None
    assert setting.nonstandard == {"someNewKnob": 5}


def test_metadata_roundtrip_keeps_unknown_keys() -> None:
    meta = decode_metadata(json.dumps(SAMPLE_METADATA))
    encoded = encode_metadata(meta)
    assert decode_metadata(encoded) == meta

    obj = json.loads(encoded)
    assert obj["extraTop"] == "x"
    assert obj["mod"] == [[3, True], [8, 2]]
    assert "mods" not in obj
    assert "nonstandard" not in obj
    assert obj["setting"]["someNewKnob"] == 5
    assert obj["setting"]["RS"] == "TRS"
    assert "nonstandard" not in obj["setting"]


def test_encode_omits_unset_optional_fields() -> None:
    meta = GameReplayMetadata(
        player="p",
        seed=1,
        version="0.17.22",
        date="d",
        mode="marathon_n",
        setting=PlayerSettings(das=8),
    )
    obj = metadata_to_obj(meta)
    assert obj == {
        "player": "p",
        "seed": 1,
        "version": "0.17.22",
        "date": "d",
        "mode": "marathon_n",
        "setting": {"das": 8},
    }


def test_known_fields_win_over_nonstandard() -> None:
    meta = GameReplayMetadata(
        player="p",
        seed=1,
        version="0.17.22",
        date="d",
        mode="m",
        setting=PlayerSettings(arr=0, nonstandard={"arr": 99, "fresh": [1]}),
        nonstandard={"player": "other", "note": None},
    )
    obj = metadata_to_obj(meta)
    assert obj["player"] == "p"
    assert obj["note"] is None
    assert settings_to_obj(meta.setting) == {"arr": 0, "fresh": [1]}


@pytest.mark.parametrize("missing", ["player", "seed", "version", "date", "mode", "setting"])
def test_missing_required_field(missing: str) -> None:
    obj = dict(SAMPLE_METADATA)
    del obj[missing]
    with pytest.raises(msgspec.ValidationError):
        decode_metadata(json.dumps(obj))


@pytest.mark.parametrize(
    ("key", "value"),
    [("seed", -1), ("seed", "12"), ("player", 3), ("tasUsed", "yes"), ("setting", [])],
)
def test_type_mismatch(key: str, value: object) -> None:
    obj = dict(SAMPLE_METADATA)
    obj[key] = value
    with pytest.raises(msgspec.ValidationError):
        decode_metadata(json.dumps(obj))


def test_metadata_must_be_object() -> None:
    with pytest.raises(msgspec.ValidationError):
        decode_metadata(b"[1, 2, 3]")


def _with(path: tuple[str, ...], value: object) -> dict:
    obj = json.loads(json.dumps(SAMPLE_METADATA))
    target = obj
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = value
    return obj


@pytest.mark.parametrize("path", [("seed",), ("setting", "das"), ("setting", "atkFX")])
@pytest.mark.parametrize("value", [0, U64_MAX])
def test_u64_bounds_accepted(path: tuple[str, ...], value: int) -> None:
    meta = decode_metadata(json.dumps(_with(path, value)))
    assert json.loads(encode_metadata(meta)) == _with(path, value)


@pytest.mark.parametrize("path", [("seed",), ("setting", "das"), ("setting", "atkFX")])
def test_u64_overflow_rejected(path: tuple[str, ...]) -> None:
    with pytest.raises(msgspec.DecodeError):
        decode_metadata(json.dumps(_with(path, U64_MAX + 1)))


@pytest.mark.parametrize("mod_id", [0, U64_MAX])
def test_mod_id_bounds_accepted(mod_id: int) -> None:
    meta = decode_metadata(json.dumps(_with(("mod",), [[mod_id, True]])))
    assert meta.mods == [(mod_id, True)]


def test_mod_id_overflow_rejected() -> None:
    with pytest.raises(msgspec.DecodeError):
        decode_metadata(json.dumps(_with(("mod",), [[U64_MAX + 1, True]])))


def test_skin_entry_overflow_rejected() -> None:
    with pytest.raises(msgspec.DecodeError):
        decode_metadata(json.dumps(_with(("setting", "skin"), [1, U64_MAX + 1])))


def test_setting_key_named_nonstandard_is_preserved() -> None:
    obj = _with(("setting", "nonstandard"), 5)
    meta = decode_metadata(json.dumps(obj))
    assert meta.setting.nonstandard == {"someNewKnob": 5, "nonstandard": 5}
    assert meta.setting.das == 10

    encoded = json.loads(encode_metadata(meta))
    assert encoded["setting"]["nonstandard"] == 5
    assert decode_metadata(json.dumps(encoded)) == meta
