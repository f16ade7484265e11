"""Tests for group header decoding, label interpretation and group bodies."""

import struct

import pytest

from tesplugin.errors import (
    CorruptGroupError,
    InvalidFlagsError,
    TruncatedDataError,
    UnknownGroupKindError,
)
from tesplugin.models.groups import (
    BlockNumberLabel,
    GridLabel,
    GroupKind,
    ParentLabel,
    RecordTypeLabel,
)
from tesplugin.models.identifiers import FormId, TypeCode
from tesplugin.parser.binary_reader import BinaryReader
from tesplugin.parser.decode_config import DecodeConfig
from tesplugin.parser.group_reader import read_group, read_group_header, resolve_label


def _build_record(sig: str, form_id: int, subrecords: list[tuple[str, bytes]],
                  flags: int = 0) -> bytes:
    sub_data = b""
    for sub_sig, sub_payload in subrecords:
        sub_data += struct.pack("<4sH", sub_sig.encode("ascii"), len(sub_payload))
        sub_data += sub_payload
    header = struct.pack("<4sIIIHHHH", sig.encode("ascii"), len(sub_data), flags,
                         form_id, 0, 0, 0, 0)
    return header + sub_data


def _build_grup(label: bytes, body: bytes, group_type: int = 0) -> bytes:
    """GRUP header: "GRUP" + size(4) + label(4) + type(4) + stamp(2) + vc(2) + unknown(4)."""
    header = struct.pack("<4sI4siHHI", b"GRUP", 24 + len(body), label, group_type, 0x11, 0x22, 0)
    return header + body


# --- Labels ---

def test_top_label_is_type_code():
    assert resolve_label(b"KYWD", GroupKind.TOP) == RecordTypeLabel(TypeCode(b"KYWD"))


@pytest.mark.parametrize("kind", [
    GroupKind.WORLD_CHILDREN,
    GroupKind.CELL_CHILDREN,
    GroupKind.TOPIC_CHILDREN,
    GroupKind.CELL_PERSISTENT_CHILDREN,
    GroupKind.CELL_TEMPORARY_CHILDREN,
])
def test_parent_labels_are_form_ids(kind):
    assert resolve_label(struct.pack("<I", 0x3C), kind) == ParentLabel(FormId(0x3C))


@pytest.mark.parametrize("kind", [GroupKind.INTERIOR_CELL_BLOCK, GroupKind.INTERIOR_CELL_SUB_BLOCK])
def test_interior_block_labels_are_signed(kind):
    assert resolve_label(struct.pack("<i", -3), kind) == BlockNumberLabel(-3)


@pytest.mark.parametrize("kind", [GroupKind.EXTERIOR_CELL_BLOCK, GroupKind.EXTERIOR_CELL_SUB_BLOCK])
def test_exterior_block_labels_are_grid_pairs(kind):
    assert resolve_label(struct.pack("<hh", -1, 2), kind) == GridLabel(y=-1, x=2)


# --- Header ---

def test_read_group_header_fields():
    data = _build_grup(b"KYWD", b"")
    header = read_group_header(BinaryReader(data))
    assert header.type == TypeCode(b"GRUP")
    assert header.size == 24
    assert header.body_size == 0
    assert header.group_type is GroupKind.TOP
    assert header.label_raw == b"KYWD"
    assert header.top_level_code() == TypeCode(b"KYWD")
    assert (header.timestamp, header.vc_info) == (0x11, 0x22)


def test_top_level_code_on_nested_group_is_a_contract_violation():
    data = _build_grup(struct.pack("<I", 0x3C), b"", group_type=GroupKind.WORLD_CHILDREN)
    header = read_group_header(BinaryReader(data))
    with pytest.raises(TypeError):
        header.top_level_code()


@pytest.mark.parametrize("kind_code", [10, -1, 0x7FFF_FFFF])
def test_unknown_group_kind_is_fatal(kind_code):
    data = _build_grup(b"KYWD", b"", group_type=kind_code)
    with pytest.raises(UnknownGroupKindError, match=f"Unknown group type {kind_code}"):
        read_group_header(BinaryReader(data))


def test_wrong_group_tag():
    data = b"GRUQ" + _build_grup(b"KYWD", b"")[4:]
    with pytest.raises(CorruptGroupError, match="Expected GRUP"):
        read_group_header(BinaryReader(data))


def test_group_size_smaller_than_header():
    data = struct.pack("<4sI4siHHI", b"GRUP", 20, b"KYWD", 0, 0, 0, 0)
    with pytest.raises(CorruptGroupError):
        read_group_header(BinaryReader(data))


# --- Bodies ---

def test_read_empty_group():
    group = read_group(BinaryReader(_build_grup(b"KYWD", b"")))
    assert group.records == ()
    assert not group.is_opaque


def test_keyword_group_records_in_order():
    recs = [
        _build_record("KYWD", 0x100, [("EDID", b"ArmorMaterialSteel\x00")]),
        _build_record("KYWD", 0x101, [("CNAM", b"\x00\x00\x00\x00")]),
    ]
    data = _build_grup(b"KYWD", b"".join(recs))
    reader = BinaryReader(data)
    group = read_group(reader)

    assert len(group.records) == 2
    assert group.records[0].editor_id == "ArmorMaterialSteel"
    assert group.records[1].editor_id is None
    assert [r.form_id for r in group.records] == [FormId(0x100), FormId(0x101)]
    assert reader.position - 24 == group.header.size - 24


@pytest.mark.parametrize("category", [b"WRLD", b"CELL", b"DIAL"])
def test_nested_categories_stay_opaque(category):
    body = b"\x01\x02\x03\x04\x05"
    reader = BinaryReader(_build_grup(category, body))
    group = read_group(reader)
    assert group.is_opaque
    assert group.body == body
    assert group.records == ()
    assert reader.remaining == 0


def test_non_top_groups_stay_opaque():
    body = _build_record("REFR", 1, [])
    group = read_group(BinaryReader(_build_grup(struct.pack("<i", 4), body,
                                                group_type=GroupKind.INTERIOR_CELL_BLOCK)))
    assert group.is_opaque
    assert group.header.label == BlockNumberLabel(4)
    assert group.body == body


def test_nested_categories_are_configurable():
    config = DecodeConfig(nested_categories=frozenset({TypeCode(b"KYWD")}))
    rec = _build_record("KYWD", 1, [("EDID", b"a\x00")])
    group = read_group(BinaryReader(_build_grup(b"KYWD", rec)), config)
    assert group.is_opaque


def test_group_body_past_end_of_buffer():
    data = _build_grup(b"KYWD", _build_record("KYWD", 1, []))
    with pytest.raises(TruncatedDataError):
        read_group(BinaryReader(data[:-3]))


def test_group_record_with_bad_flags():
    rec = _build_record("KYWD", 1, [], flags=0x0000_0001)
    with pytest.raises(InvalidFlagsError, match="KYWD"):
        read_group(BinaryReader(_build_grup(b"KYWD", rec)))


def test_consumes_exactly_group_size():
    recs = b"".join(_build_record("GMST", i, [("EDID", b"fX\x00")]) for i in range(3))
    data = _build_grup(b"GMST", recs) + b"GRUPtrailing"
    reader = BinaryReader(data)
    group = read_group(reader)
    assert reader.position == group.header.size
    assert reader.peek(4) == b"GRUP"
