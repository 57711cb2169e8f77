"""State of the Framework 16 input deck and its modules."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass

INPUT_DECK_SLOTS = 8
"""Number of slots on the input deck that modules connect to."""
TOP_ROW_SLOTS = 5
"""Number of slots on the top row of the input deck."""

# Positions of the input deck multiplexer
_MUX_TOP_ROW = (0, 1, 2, 3, 4)
_MUX_TOUCHPAD = 5
_MUX_HUBBOARD = 7


class InputModuleType(enum.IntEnum):
    """Kind of module detected on an input deck slot."""

    SHORT = 0
    RESERVED1 = 1
    RESERVED2 = 2
    RESERVED3 = 3
    RESERVED4 = 4
    RESERVED5 = 5
    RESERVED6 = 6
    HUB_BOARD = 7
    GENERIC_A = 8
    GENERIC_B = 9
    GENERIC_C = 10
    KEYBOARD_B = 11
    KEYBOARD_A = 12
    TOUCHPAD = 13
    RESERVED15 = 14
    DISCONNECTED = 15

    def size(self) -> int:
        """Number of top-row connectors the module covers."""
        return _MODULE_SIZES.get(self, 0)


_MODULE_SIZES = {
    InputModuleType.GENERIC_A: 6,
    InputModuleType.GENERIC_B: 2,
    InputModuleType.GENERIC_C: 1,
    InputModuleType.KEYBOARD_B: 2,
    InputModuleType.KEYBOARD_A: 6,
}


class InputDeckState(enum.IntEnum):
    """Power state of the input deck."""

    OFF = 0
    """Manual workaround during EVT."""
    DISCONNECTED = 1
    """Input deck not powered on."""
    TURNING_ON = 2
    """Debouncing, waiting to turn on."""
    ON = 3
    """Input deck powered on."""
    FORCE_OFF = 4
    """Manual override: always off."""
    FORCE_ON = 5
    """Manual override: always on."""
    NO_DETECTION = 6
    """Manual override: follow power sequence without presence check."""


@dataclass(frozen=True)
class TopRowPositions:
    """Modules detected on the five top-row positions, left to right."""

    pos0: InputModuleType
    pos1: InputModuleType
    pos2: InputModuleType
    pos3: InputModuleType
    pos4: InputModuleType


@dataclass(frozen=True)
class InputDeckStatus:
    """Summary of the input deck state as reported by the EC."""

    state: InputDeckState
    hubboard_present: bool
    touchpad_present: bool
    top_row: TopRowPositions

    @classmethod
    def from_deck_state(cls, board_id: Sequence[int], deck_state: int) -> InputDeckStatus:
        """Build the status from per-slot board ids and the raw deck state."""
        if len(board_id) != INPUT_DECK_SLOTS:
            raise ValueError(
                f"expected {INPUT_DECK_SLOTS} board ids, got {len(board_id)}"
            )
        modules = [InputModuleType(value) for value in board_id]
        return cls(
            state=InputDeckState(deck_state),
            hubboard_present=modules[_MUX_HUBBOARD] is InputModuleType.HUB_BOARD,
            touchpad_present=modules[_MUX_TOUCHPAD] is InputModuleType.TOUCHPAD,
            top_row=TopRowPositions(*(modules[i] for i in _MUX_TOP_ROW)),
        )

    def top_row_to_array(self) -> list[InputModuleType]:
        """Top-row modules from left to right."""
        row = self.top_row
        return [row.pos0, row.pos1, row.pos2, row.pos3, row.pos4]

    def fully_populated(self) -> bool:
        """Whether the input deck is fully populated."""
        if self.state in (InputDeckState.FORCE_ON, InputDeckState.ON):
            return False
        if not self.hubboard_present or not self.touchpad_present:
            return False
        return self.top_row_fully_populated()

    def top_row_fully_populated(self) -> bool:
        """Whether the modules on the top row cover every slot."""
        return sum(module.size() for module in self.top_row_to_array()) == INPUT_DECK_SLOTS