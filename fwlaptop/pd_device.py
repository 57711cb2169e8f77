"""Device-level definitions of CCGx PD controllers."""

from __future__ import annotations

import enum


class FwMode(enum.IntEnum):
    """Firmware image a PD controller is currently running."""

    BOOT_LOADER = 0
    BACKUP_FW = 1
    MAIN_FW = 2


_ROW_SIZES = {0: 128, 1: 256, 3: 64}


def decode_flash_row_size(mode_byte: int) -> int:
    """Decode the flash row size from bits 4-5 of the device mode byte."""
    code = (mode_byte & 0b0011_0000) >> 4
    try:
        return _ROW_SIZES[code]
    except KeyError:
        raise ValueError("Reserved flash row size encoding") from None