"""Version numbers and flash metadata of Infineon CCGx PD controllers."""

from __future__ import annotations

import enum
import logging
import struct
from dataclasses import dataclass

log = logging.getLogger(__name__)

FW1_METADATA_ROW = 0x1FE
FW1_METADATA_ROW_CCG8 = 0x3FE
FW2_METADATA_ROW_CCG5 = 0x1FF
FW2_METADATA_ROW_CCG6 = 0x1FD
FW2_METADATA_ROW_CCG8 = 0x3FF
METADATA_OFFSET = 0xC0
CCG8_METADATA_OFFSET = 0x80
CCG3_METADATA_OFFSET = 0x40
METADATA_MAGIC = int.from_bytes(b"YC", "little")  # "CY" (Cypress)
CCG8_METADATA_MAGIC = int.from_bytes(b"FI", "little")  # "IF" (Infineon)

# Packed little-endian layouts of the CYACD and CYACD2 metadata blocks.
_CYACD = struct.Struct("<BIH2sI3sBBHHHII")
_CYACD2 = struct.Struct("<IIHHIII60sHHI32sI")


class SiliconId(enum.IntEnum):
    """Silicon family identifiers of the supported controllers."""

    CCG3 = 0x1D00
    CCG5 = 0x2100
    CCG6 = 0x3000
    CCG8 = 0x3580


class Application(enum.Enum):
    """Application type encoded in an application version."""

    NOTEBOOK = "Notebook"
    MONITOR = "Monitor"
    AA = "AA"
    INVALID = "Invalid"

    def __str__(self) -> str:
        return self.value


_APPLICATION_TAGS = {
    b"nb": Application.NOTEBOOK,
    b"md": Application.MONITOR,
    b"aa": Application.AA,
}


def _require(data: bytes, length: int, what: str) -> bytes:
    data = bytes(data)
    if len(data) < length:
        raise ValueError(f"{what} needs {length} bytes, got {len(data)}")
    return data


@dataclass(frozen=True)
class BaseVersion:
    """SDK base version X.Y.Z.BB."""

    major: int
    minor: int
    patch: int
    build_number: int

    @classmethod
    def from_bytes(cls, data: bytes) -> BaseVersion:
        data = _require(data, 4, "BaseVersion")
        return cls(
            major=(data[3] & 0xF0) >> 4,
            minor=data[3] & 0x0F,
            patch=data[2],
            build_number=int.from_bytes(data[0:2], "little"),
        )

    @classmethod
    def from_int(cls, value: int) -> BaseVersion:
        return cls.from_bytes((value & 0xFFFFFFFF).to_bytes(4, "little"))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}.{self.build_number:03}"


@dataclass(frozen=True)
class AppVersion:
    """Application firmware version X.Y.Z with its application type."""

    application: Application
    major: int
    minor: int
    circuit: int

    @classmethod
    def from_bytes(cls, data: bytes) -> AppVersion:
        data = _require(data, 4, "AppVersion")
        tag = bytes([data[1], data[0]])
        return cls(
            application=_APPLICATION_TAGS.get(tag, Application.INVALID),
            major=(data[3] & 0xF0) >> 4,
            minor=data[3] & 0x0F,
            circuit=data[2],
        )

    @classmethod
    def from_int(cls, value: int) -> AppVersion:
        return cls.from_bytes((value & 0xFFFFFFFF).to_bytes(4, "little"))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.circuit:02} ({self.application})"


@dataclass(frozen=True)
class ControllerVersion:
    """Base and application version of one firmware image."""

    base: BaseVersion
    app: AppVersion


@dataclass(frozen=True)
class ControllerFirmwares:
    """All firmware images on one PD controller."""

    bootloader: ControllerVersion
    backup_fw: ControllerVersion
    main_fw: ControllerVersion


@dataclass(frozen=True)
class PdVersions:
    """Firmware versions of both PD controllers."""

    controller01: ControllerFirmwares
    controller23: ControllerFirmwares


@dataclass(frozen=True)
class MainPdVersions:
    """Main firmware versions of both PD controllers."""

    controller01: ControllerVersion
    controller23: ControllerVersion


def _parse_cyacd_at(buffer: bytes, offset: int) -> tuple[int, int] | None:
    block = _require(bytes(buffer)[offset:], _CYACD.size, "CYACD metadata")
    fields = _CYACD.unpack_from(block)
    boot_last_row, fw_size, metadata_valid = fields[2], fields[4], fields[10]
    log.debug("Metadata: %r", fields)
    if metadata_valid != METADATA_MAGIC:
        return None
    return 1 + boot_last_row, fw_size


def parse_metadata_ccg3(buffer: bytes) -> tuple[int, int] | None:
    """Return (first firmware row, firmware size) from a CCG3 metadata row."""
    return _parse_cyacd_at(buffer, CCG3_METADATA_OFFSET)


def parse_metadata_cyacd(buffer: bytes) -> tuple[int, int] | None:
    """Return (first firmware row, firmware size) from a CCG5/CCG6 metadata row."""
    return _parse_cyacd_at(buffer, METADATA_OFFSET)


def parse_metadata_cyacd2(buffer: bytes) -> tuple[int, int] | None:
    """Return (firmware start address, firmware size) from a CCG8 metadata row."""
    block = _require(bytes(buffer)[CCG8_METADATA_OFFSET:], _CYACD2.size, "CYACD2 metadata")
    fields = _CYACD2.unpack_from(block)
    fw_start, fw_size = fields[0], fields[1]
    metadata_version, metadata_valid = fields[8], fields[9]
    log.debug("Metadata: %r", fields)
    if metadata_valid != CCG8_METADATA_MAGIC:
        return None
    if metadata_version != 1:
        log.warning("Unknown CCG8 metadata version")
        return None
    return fw_start, fw_size