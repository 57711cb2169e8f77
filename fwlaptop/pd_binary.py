"""Read version metadata from CCGx PD controller firmware binaries.

Each flash binary holds two firmware images, a backup and a main one. Their
position is described by metadata rows near the end of the flash. The first
row of each image carries the version and silicon information at offset 0xE0.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass

from .pd_version import (
    FW1_METADATA_ROW,
    FW1_METADATA_ROW_CCG8,
    FW2_METADATA_ROW_CCG5,
    FW2_METADATA_ROW_CCG6,
    FW2_METADATA_ROW_CCG8,
    AppVersion,
    BaseVersion,
    SiliconId,
    parse_metadata_ccg3,
    parse_metadata_cyacd,
    parse_metadata_cyacd2,
)

log = logging.getLogger(__name__)

FW_VERSION_OFFSET = 0xE0
"""Offset of the version information inside the first row of an image."""

SMALL_ROW = 0x80
LARGE_ROW = 0x100

CCG5_PD_LEN = 0x2_0000
CCG6_PD_LEN = 0x2_0000

# base_version, app_version, silicon_id, silicon_family
_VERSION_INFO = struct.Struct("<IIHH")

# flash row size, backup metadata row, main metadata row
_LAYOUTS = {
    SiliconId.CCG3: (SMALL_ROW, 0x03FF, 0x03FE),
    SiliconId.CCG5: (LARGE_ROW, FW1_METADATA_ROW, FW2_METADATA_ROW_CCG5),
    SiliconId.CCG6: (SMALL_ROW, FW1_METADATA_ROW, FW2_METADATA_ROW_CCG6),
    SiliconId.CCG8: (LARGE_ROW, FW1_METADATA_ROW_CCG8, FW2_METADATA_ROW_CCG8),
}


@dataclass(frozen=True)
class PdFirmware:
    """Information about a single firmware image in a PD binary."""

    silicon_id: int
    silicon_family: int
    base_version: BaseVersion
    app_version: AppVersion
    start_row: int
    """Row of the file at which the image starts."""
    size: int
    """Size of the image in bytes."""
    row_size: int
    """Number of bytes in a flash row."""


@dataclass(frozen=True)
class PdFirmwareFile:
    """Both firmware images contained in a PD binary."""

    backup_fw: PdFirmware
    main_fw: PdFirmware


def _read_row(file_buffer: bytes, row_no: int, flash_row_size: int) -> bytes | None:
    """Read up to 256 bytes starting at a row, or None past the end of the file."""
    start = row_no * flash_row_size
    for length in (LARGE_ROW, SMALL_ROW):
        if start + length <= len(file_buffer):
            return bytes(file_buffer[start : start + length])
    return None


def _read_metadata(
    file_buffer: bytes, flash_row_size: int, metadata_row: int, ccgx: SiliconId
) -> tuple[int, int] | None:
    buffer = _read_row(file_buffer, metadata_row, flash_row_size)
    if buffer is None:
        return None
    try:
        if ccgx is SiliconId.CCG3:
            return parse_metadata_ccg3(buffer)
        if ccgx in (SiliconId.CCG5, SiliconId.CCG6):
            return parse_metadata_cyacd(buffer)
        found = parse_metadata_cyacd2(buffer)
    except ValueError:
        # The row was too short to hold metadata at the expected offset.
        return None
    if found is None:
        return None
    fw_start, fw_size = found
    return fw_start // flash_row_size, fw_size


def _read_version(
    file_buffer: bytes, flash_row_size: int, metadata_row: int, ccgx: SiliconId
) -> PdFirmware | None:
    metadata = _read_metadata(file_buffer, flash_row_size, metadata_row, ccgx)
    if metadata is None:
        return None
    fw_row_start, fw_size = metadata
    row = _read_row(file_buffer, fw_row_start, flash_row_size)
    if row is None or len(row) < FW_VERSION_OFFSET + _VERSION_INFO.size:
        return None
    log.debug("First row of firmware: %s", row.hex())
    base, app, silicon_id, silicon_family = _VERSION_INFO.unpack_from(row, FW_VERSION_OFFSET)
    return PdFirmware(
        silicon_id=silicon_id,
        silicon_family=silicon_family,
        base_version=BaseVersion.from_int(base),
        app_version=AppVersion.from_int(app),
        start_row=fw_row_start,
        size=fw_size,
        row_size=flash_row_size,
    )


def read_versions(file_buffer: bytes, ccgx: SiliconId) -> PdFirmwareFile | None:
    """Parse both firmware images of a PD binary built for the given chip.

    Returns None when the binary does not hold valid metadata for that chip.
    """
    ccgx = SiliconId(ccgx)
    flash_row_size, fw1_metadata_row, fw2_metadata_row = _LAYOUTS[ccgx]
    backup_fw = _read_version(file_buffer, flash_row_size, fw1_metadata_row, ccgx)
    if backup_fw is None:
        return None
    main_fw = _read_version(file_buffer, flash_row_size, fw2_metadata_row, ccgx)
    if main_fw is None:
        return None
    return PdFirmwareFile(backup_fw=backup_fw, main_fw=main_fw)


def format_fw(fw: PdFirmware) -> str:
    """Describe a firmware image as a block of aligned lines."""
    lines = [
        f"  Silicon ID: {f'{fw.silicon_id:#06x}':>20}",
        f"  Silicon Family: {f'{fw.silicon_family:#06x}':>16}",
        f"  Version:                  {str(fw.app_version):>20}",
        f"  Base Ver:                 {str(fw.base_version):>20}",
        f"  Row size:   {fw.row_size:>20} B",
        f"  Start Row:  {fw.start_row:>20}",
        f"  Rows:       {fw.size // fw.row_size:>20}",
        f"  Size:       {fw.size:>20} B",
        f"  Size:       {fw.size // 1024:>20} KB",
    ]
    return "\n".join(lines)


def print_fw(fw: PdFirmware) -> None:
    """Print information about a firmware image."""
    print(format_fw(fw))