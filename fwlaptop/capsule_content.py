"""Locate version information and embedded images inside BIOS capsules."""

from __future__ import annotations

from dataclasses import dataclass

from .pd_binary import CCG5_PD_LEN, CCG6_PD_LEN

_RETIMER_NEEDLE = b"$_RETIMER_PARAM_"
_BIOS_NEEDLE = b"$BVDT"
# First bytes of the PD binaries embedded in the capsule
_CCG5_NEEDLE = bytes([0x00, 0x20, 0x00, 0x20, 0x11, 0x00])
_CCG6_NEEDLE = bytes([0x00, 0x40, 0x00, 0x20, 0x11, 0x00])


@dataclass(frozen=True)
class BiosCapsule:
    """Platform and version strings of a BIOS capsule."""

    platform: str
    version: str


def _find(data: bytes, needle: bytes) -> int | None:
    index = bytes(data).find(needle)
    return None if index < 0 else index


def find_retimer_version(data: bytes) -> int | None:
    """Return the retimer firmware version stored in a capsule, if any."""
    found = _find(data, _RETIMER_NEEDLE)
    if found is None:
        return None
    offset = found + 0x8 + len(_RETIMER_NEEDLE)
    raw = bytes(data[offset : offset + 2])
    if len(raw) != 2:
        return None
    return int.from_bytes(raw, "little")


def _text_at(data: bytes, offset: int) -> str | None:
    raw = bytes(data[offset : offset + 4])
    if len(raw) != 4:
        return None
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return None


def find_bios_version(data: bytes) -> BiosCapsule | None:
    """Return the platform and version found in a BIOS capsule, if any."""
    found = _find(data, _BIOS_NEEDLE)
    if found is None:
        return None
    platform = _text_at(data, found + 0xA + len(_BIOS_NEEDLE) - 1)
    if platform is None:
        return None
    version = _text_at(data, found + 0xE + len(_BIOS_NEEDLE) - 1)
    if version is None:
        return None
    return BiosCapsule(platform=platform, version=version)


def find_pd_in_bios_cap(data: bytes) -> bytes | None:
    """Return the PD firmware binary embedded in a BIOS capsule, if any.

    A CCG5 image is preferred over a CCG6 one. An image cut short by the end
    of the data is not returned.
    """
    for needle, length in ((_CCG5_NEEDLE, CCG5_PD_LEN), (_CCG6_NEEDLE, CCG6_PD_LEN)):
        found = _find(data, needle)
        if found is not None:
            image = bytes(data[found : found + length])
            return image if len(image) == length else None
    return None