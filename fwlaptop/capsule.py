"""Parse UEFI capsule headers and the display (UX) capsule payload.

A capsule starts with a header giving its GUID, flags and total size,
followed by opaque data interpreted by the firmware driver for that GUID.
Capsules with several header structures are not handled.
"""

from __future__ import annotations

import enum
import struct
import uuid
from dataclasses import dataclass
from pathlib import Path

# capsule GUID (mixed-endian EFI layout), header size, flags, image size
_HEADER = struct.Struct("<16sIII")
# version, checksum, image type, reserved, mode, offset x, offset y
_DISPLAY_PAYLOAD = struct.Struct("<BBBBIII")
_DISPLAY_CAPSULE_SIZE = _HEADER.size + _DISPLAY_PAYLOAD.size

_IMAGE_TYPE_BITMAP = 0


class CapsuleFlag(enum.IntFlag):
    """Capsule attribute flags defined by the UEFI specification."""

    PERSIST_ACROSS_RESET = 0x00010000
    POPULATE_SYSTEM_TABLE = 0x00020000
    INITIATE_RESET = 0x00040000


_FLAG_LABELS = (
    (CapsuleFlag.PERSIST_ACROSS_RESET, "Persist across reset "),
    (CapsuleFlag.POPULATE_SYSTEM_TABLE, "Populate system table"),
    (CapsuleFlag.INITIATE_RESET, "Initiate reset       "),
)


@dataclass(frozen=True)
class EfiCapsuleHeader:
    """The header at the start of every UEFI capsule."""

    capsule_guid: uuid.UUID
    """GUID that defines the contents of the capsule."""
    header_size: int
    """Size of the header; larger than 28 if extended entries follow."""
    flags: int
    """Bit-mapped capsule attributes."""
    capsule_image_size: int
    """Size in bytes of the whole capsule, header included."""

    def is_valid(self, data: bytes) -> bool:
        """Tell whether this header describes the given capsule data."""
        if self.capsule_image_size != len(data):
            return False
        if self.header_size > self.capsule_image_size:
            return False
        if self.header_size < _HEADER.size:
            return False
        return True


@dataclass(frozen=True)
class DisplayPayload:
    """Description of the image carried by a display capsule."""

    version: int
    checksum: int
    image_type: int
    reserved: int
    mode: int
    offset_x: int
    offset_y: int


@dataclass(frozen=True)
class DisplayCapsule:
    """A capsule carrying an image shown during a firmware update."""

    capsule_header: EfiCapsuleHeader
    image_payload: DisplayPayload


def _unpack_header(data: bytes) -> EfiCapsuleHeader:
    if len(data) < _HEADER.size:
        raise ValueError(f"capsule header needs {_HEADER.size} bytes, got {len(data)}")
    guid, header_size, flags, image_size = _HEADER.unpack_from(data)
    return EfiCapsuleHeader(
        capsule_guid=uuid.UUID(bytes_le=guid),
        header_size=header_size,
        flags=flags,
        capsule_image_size=image_size,
    )


def parse_capsule_header(data: bytes) -> EfiCapsuleHeader | None:
    """Parse the capsule header, returning None if data is not a valid capsule."""
    data = bytes(data)
    header = _unpack_header(data)
    return header if header.is_valid(data) else None


def format_capsule_header(header: EfiCapsuleHeader) -> str:
    """Describe a capsule header as a block of aligned lines."""
    lines = [
        "Capsule Header",
        f"  Capsule GUID: {header.capsule_guid}",
        f"  Header size: {header.header_size:>19} B",
    ]
    if header.header_size > _HEADER.size:
        lines.append("Has extended header entries.")
    lines.append(f"  Flags:      {f'0x{header.flags:X}':>20}")
    for flag, label in _FLAG_LABELS:
        if header.flags & flag:
            lines.append(f"    {label} (0x{int(flag):x})")
    lines.append(f"  Capsule Size: {header.capsule_image_size:>18} B")
    lines.append(f"  Capsule Size: {header.capsule_image_size // 1024:>18} KB")
    return "\n".join(lines)


def print_capsule_header(header: EfiCapsuleHeader) -> None:
    """Print a capsule header."""
    print(format_capsule_header(header))


def parse_ux_header(data: bytes) -> DisplayCapsule:
    """Parse the header of a display capsule."""
    data = bytes(data)
    if len(data) < _DISPLAY_CAPSULE_SIZE:
        raise ValueError(
            f"display capsule needs {_DISPLAY_CAPSULE_SIZE} bytes, got {len(data)}"
        )
    header = _unpack_header(data)
    payload = DisplayPayload(*_DISPLAY_PAYLOAD.unpack_from(data, _HEADER.size))
    return DisplayCapsule(capsule_header=header, image_payload=payload)


def _image_size(header: DisplayCapsule) -> int:
    size = header.capsule_header.capsule_image_size - _DISPLAY_CAPSULE_SIZE
    if size < 0:
        raise ValueError("capsule image size is smaller than the display capsule header")
    return size


def format_ux_header(header: DisplayCapsule) -> str:
    """Describe the display payload of a capsule as a block of aligned lines."""
    payload = header.image_payload
    image_size = _image_size(header)
    suffix = " (BMP)" if payload.image_type == _IMAGE_TYPE_BITMAP else ""
    lines = [
        "Windows UX Header",
        f"    Version:    {payload.version:>20}",
        f"    Checksum:   {payload.checksum:>20}",
        f"    Image Type: {payload.image_type:>20}{suffix}",
        f"    Mode:       {payload.mode:>20}",
        f"    Offset X:   {payload.offset_x:>20}",
        f"    Offset Y:   {payload.offset_y:>20}",
        f"    Calculated Size: {image_size:>15} B",
        f"    Calculated Size: {image_size // 1024:>15} KB",
    ]
    return "\n".join(lines)


def print_ux_header(header: DisplayCapsule) -> None:
    """Print the display payload header of a capsule."""
    print(format_ux_header(header))


def dump_winux_image(data: bytes, header: DisplayCapsule, filename: str | Path) -> None:
    """Write the image data of a display capsule to a file."""
    image_size = _image_size(header)
    image = bytes(data)[_DISPLAY_CAPSULE_SIZE:image_size]
    Path(filename).write_bytes(image)