import struct
import uuid

import pytest

from fwlaptop.capsule import (
    CapsuleFlag,
    DisplayCapsule,
    DisplayPayload,
    EfiCapsuleHeader,
    dump_winux_image,
    format_capsule_header,
    format_ux_header,
    parse_capsule_header,
    parse_ux_header,
)

SAMPLE_GUID = uuid.UUID("12345678-1234-5678-9abc-def012345678")
IMAGE_SIZE = 676898


def make_capsule(
    size=IMAGE_SIZE,
    header_size=28,
    flags=65536,
    payload=(1, 61, 0, 0, 0, 0, 1228),
    guid=SAMPLE_GUID,
):
    head = struct.pack("<16sIII", guid.bytes_le, header_size, flags, size)
    head += struct.pack("<BBBBIII", *payload)
    body = bytes(range(256)) * (size // 256 + 1)
    return head + body[: size - len(head)]


EXPECTED_HEADER = EfiCapsuleHeader(
    capsule_guid=SAMPLE_GUID,
    header_size=28,
    flags=65536,
    capsule_image_size=IMAGE_SIZE,
)


def test_can_parse_winux_binary():
    data = make_capsule()
    cap = parse_capsule_header(data)
    assert cap == EXPECTED_HEADER
    assert cap.capsule_guid == SAMPLE_GUID
    ux_header = parse_ux_header(data)
    assert ux_header == DisplayCapsule(
        capsule_header=EXPECTED_HEADER,
        image_payload=DisplayPayload(
            version=1,
            checksum=61,
            image_type=0,
            reserved=0,
            mode=0,
            offset_x=0,
            offset_y=1228,
        ),
    )


def test_size_mismatch_is_invalid():
    data = make_capsule()
    assert parse_capsule_header(data[:-1]) is None


def test_header_size_too_small_is_invalid():
    assert parse_capsule_header(make_capsule(size=100, header_size=27)) is None


def test_header_size_larger_than_image_is_invalid():
    assert parse_capsule_header(make_capsule(size=100, header_size=101)) is None


def test_is_valid_against_other_data():
    assert EXPECTED_HEADER.is_valid(bytes(IMAGE_SIZE)) is True
    assert EXPECTED_HEADER.is_valid(bytes(10)) is False


def test_short_data_raises():
    with pytest.raises(ValueError):
        parse_capsule_header(b"\x00" * 10)
    with pytest.raises(ValueError):
        parse_ux_header(b"\x00" * 30)


def test_format_capsule_header():
    text = format_capsule_header(EXPECTED_HEADER)
    lines = text.splitlines()
    assert lines[0] == "Capsule Header"
    assert lines[1] == f"  Capsule GUID: {SAMPLE_GUID}"
    assert "Has extended header entries." not in text
    assert lines[3].endswith("0x10000")
    assert "    Persist across reset  (0x10000)" in lines
    assert not any("Initiate reset" in line for line in lines)
    assert lines[-1].endswith(" 661 KB")


def test_format_capsule_header_extended_and_all_flags():
    flags = CapsuleFlag.PERSIST_ACROSS_RESET | CapsuleFlag.POPULATE_SYSTEM_TABLE | CapsuleFlag.INITIATE_RESET
    header = EfiCapsuleHeader(SAMPLE_GUID, 40, int(flags), 100)
    lines = format_capsule_header(header).splitlines()
    assert "Has extended header entries." in lines
    assert "    Populate system table (0x20000)" in lines
    assert "    Initiate reset        (0x40000)" in lines


def test_format_ux_header():
    text = format_ux_header(parse_ux_header(make_capsule()))
    lines = text.splitlines()
    assert lines[0] == "Windows UX Header"
    assert lines[3].endswith("0 (BMP)")
    assert lines[6].endswith(" 1228")
    assert lines[7].endswith(f" {IMAGE_SIZE - 44} B")


def test_dump_winux_image(tmp_path):
    data = make_capsule(size=1000)
    header = parse_ux_header(data)
    target = tmp_path / "image.bmp"
    dump_winux_image(data, header, str(target))
    assert target.read_bytes() == data[44:1000 - 44]


def test_ux_header_with_too_small_image_size_raises(tmp_path):
    header = DisplayCapsule(
        EfiCapsuleHeader(SAMPLE_GUID, 28, 0, 30),
        DisplayPayload(1, 0, 0, 0, 0, 0, 0),
    )
    with pytest.raises(ValueError):
        format_ux_header(header)
    with pytest.raises(ValueError):
        dump_winux_image(bytes(30), header, tmp_path / "x.bin")