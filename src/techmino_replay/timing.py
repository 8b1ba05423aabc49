from __future__ import annotations

from enum import Enum
import re
from typing import Final

VersionTuple = tuple[int, int, int]

# First game release that stores absolute frame numbers for inputs.
ABSOLUTE_TIMING_START: Final[VersionTuple] = (0, 17, 22)

_SEMVER_RE = re.compile(r"^(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)$")
_VERSION_CHARS: Final[str] = "0123456789."


class InputParseMode(Enum):
    """How event times in the input stream are interpreted.

    RELATIVE: each time is the number of frames since the previous event
    (releases before 0.17.22).
    ABSOLUTE: each time is the frame number counted from the start of the run
    (0.17.22 and later).
    """

    RELATIVE = "relative"
    ABSOLUTE = "absolute"


def parse_semver(text: str) -> VersionTuple | None:
    match = _SEMVER_RE.match(text)
    if match is None:
        return None
    major, minor, patch = match.groups()
    return int(major), int(minor), int(patch)


def _normalize_version(version: str) -> str:
    text = str(version).casefold().strip()
    text = text.removeprefix("alpha").strip()
    return text.removeprefix("v").strip()


def infer_input_parse_mode(version: str) -> InputParseMode | None:
    """Guess the input timing mode from a replay's `version` string.

    Returns None when the string does not contain a recognizable
    `major.minor.patch` version.
    """

    text = _normalize_version(version)

    # Community forks branched off before absolute timing and kept relative times.
    if "wtf" in text:
        return InputParseMode.RELATIVE
    if text.startswith("unofficial expansion"):
        return InputParseMode.RELATIVE

    # "0.17.6@26fc" carries a commit id; "0.17.22 IRSv1.1 ..." carries mod tags.
    text = text.split("@", 1)[0]
    text = text.split(" ", 1)[0]
    filtered = "".join(ch for ch in text if ch in _VERSION_CHARS)

    parsed = parse_semver(filtered)
    if parsed is None:
        return None
    if parsed < ABSOLUTE_TIMING_START:
        return InputParseMode.RELATIVE
    return InputParseMode.ABSOLUTE


def resolve_input_parse_mode(version: str, mode: InputParseMode | None) -> InputParseMode | None:
    if mode is not None:
        return mode
    return infer_input_parse_mode(version)
