# fwlaptop

Offline parsers for Framework Laptop firmware files: UEFI capsule headers,
the image payload of display capsules, version strings and embedded images
inside BIOS capsules, version metadata of Infineon CCGx PD controller
binaries, and the Framework 16 input deck status.

Everything works on bytes you already have; no hardware is touched.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Modules

- `fwlaptop.capsule`: UEFI capsule headers.
  - `parse_capsule_header(data)` returns an `EfiCapsuleHeader`, or `None`
    when the header's sizes do not match the data.
  - `parse_ux_header(data)` returns a `DisplayCapsule` (header plus
    `DisplayPayload`).
  - `format_capsule_header`, `print_capsule_header`, `format_ux_header`,
    `print_ux_header` describe them as aligned text; `CapsuleFlag` names the
    UEFI-defined flags.
  - `dump_winux_image(data, header, filename)` writes the image data of a
    display capsule to a file.
- `fwlaptop.capsule_content`: search inside a BIOS capsule.
  - `find_bios_version(data)` returns a `BiosCapsule` with `platform` and
    `version`, or `None`.
  - `find_retimer_version(data)` returns the retimer version as an integer,
    or `None`.
  - `find_pd_in_bios_cap(data)` returns the embedded PD firmware binary, or
    `None`.
- `fwlaptop.pd_binary`: `read_versions(file_buffer, ccgx)` reads both
  firmware images of a PD binary built for the given `SiliconId` and returns
  a `PdFirmwareFile` (`backup_fw`, `main_fw`, each a `PdFirmware`), or `None`
  when the binary holds no valid metadata for that chip. `format_fw` and
  `print_fw` describe one image.
- `fwlaptop.pd_version`: `SiliconId`, `Application`, `BaseVersion`,
  `AppVersion` (both with `from_bytes` and `from_int`), the grouping
  dataclasses `ControllerVersion`, `ControllerFirmwares`, `PdVersions`,
  `MainPdVersions`, and the metadata parsers `parse_metadata_ccg3`,
  `parse_metadata_cyacd`, `parse_metadata_cyacd2`.
- `fwlaptop.pd_device`: `FwMode` and `decode_flash_row_size(mode_byte)`,
  which raises `ValueError` for the reserved encoding.
- `fwlaptop.input_deck`: `InputModuleType`, `InputDeckState`,
  `TopRowPositions` and `InputDeckStatus`. Build a status with
  `InputDeckStatus.from_deck_state(board_id, deck_state)` from the eight
  per-slot board ids and the raw state, then ask `fully_populated()` or
  `top_row_fully_populated()`.

## Example

```python
from fwlaptop.capsule import parse_capsule_header, print_capsule_header
from fwlaptop.pd_binary import read_versions, print_fw
from fwlaptop.pd_version import SiliconId

with open("capsule.bin", "rb") as f:
    data = f.read()
header = parse_capsule_header(data)
if header is not None:
    print_capsule_header(header)

with open("pd.bin", "rb") as f:
    pd = f.read()
versions = read_versions(pd, SiliconId.CCG6)
if versions is not None:
    print_fw(versions.main_fw)
```

## What it does not do

The package has no command-line tool and does not talk to any device. It
cannot query or configure the embedded controller, read PD controller
versions from a running machine, or flash firmware. Input deck status must
be built from board ids and a deck state obtained by other means.