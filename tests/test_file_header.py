"""Tests for the TES4 file header parser."""

import struct

import pytest

from tesplugin.errors import CorruptRecordError, InvalidStringError, TruncatedDataError
from tesplugin.models.identifiers import FormId, TypeCode
from tesplugin.models.records import Hedr, MasterFile, Subrecord
from tesplugin.parser.file_header import parse_file_header


def _sub(sig: str, data: bytes) -> Subrecord:
    return Subrecord(type=TypeCode.from_str(sig), data=data)


def test_empty_header_uses_defaults():
    data = parse_file_header([])
    assert data.hedr == Hedr()
    assert data.author is None
    assert data.description is None
    assert data.masters == ()
    assert data.overrides == ()
    assert (data.intv, data.incc) == (0, 0)


def test_hedr():
    data = parse_file_header([_sub("HEDR", struct.pack("<fiI", 1.7, 920184, 0x0010_3FF7))])
    assert data.hedr.version == pytest.approx(1.7)
    assert data.hedr.num_records == 920184
    assert data.hedr.next_object_id == FormId(0x0010_3FF7)


def test_hedr_too_short():
    with pytest.raises(TruncatedDataError):
        parse_file_header([_sub("HEDR", b"\x00" * 8)])


def test_author_and_description():
    data = parse_file_header([
        _sub("CNAM", b"mcarofano\x00"),
        _sub("SNAM", b"A plugin.\x00"),
    ])
    assert data.author == "mcarofano"
    assert data.description == "A plugin."


def test_invalid_author_string_is_fatal():
    with pytest.raises(InvalidStringError):
        parse_file_header([_sub("CNAM", b"\xc3\x28\x00")])


def test_master_data_pair():
    data = parse_file_header([
        _sub("MAST", b"Skyrim.esm\x00"),
        _sub("DATA", struct.pack("<Q", 0x0102_0304_0506_0708)),
        _sub("ONAM", struct.pack("<I", 0x0001_2E46)),
    ])
    assert data.masters == (MasterFile(name="Skyrim.esm", tag=0x0102_0304_0506_0708),)
    assert data.overrides == (FormId(0x0001_2E46),)


def test_masters_keep_file_order():
    data = parse_file_header([
        _sub("MAST", b"Skyrim.esm\x00"),
        _sub("DATA", struct.pack("<Q", 1)),
        _sub("MAST", b"Update.esm\x00"),
        _sub("DATA", struct.pack("<Q", 2)),
        _sub("MAST", b"Dawnguard.esm\x00"),
        _sub("DATA", struct.pack("<Q", 3)),
    ])
    assert [(m.name, m.tag) for m in data.masters] == [
        ("Skyrim.esm", 1), ("Update.esm", 2), ("Dawnguard.esm", 3),
    ]


def test_master_without_data():
    data = parse_file_header([
        _sub("MAST", b"Skyrim.esm\x00"),
        _sub("INTV", struct.pack("<I", 5)),
    ])
    assert data.masters == (MasterFile(name="Skyrim.esm", tag=0),)
    assert data.intv == 5


def test_data_without_master_is_ignored():
    data = parse_file_header([_sub("DATA", struct.pack("<Q", 9))])
    assert data.masters == ()


def test_overrides_accumulate_across_occurrences():
    data = parse_file_header([
        _sub("ONAM", struct.pack("<I", 1)),
        _sub("ONAM", struct.pack("<II", 2, 3)),
    ])
    assert data.overrides == (FormId(1), FormId(2), FormId(3))


def test_onam_wrong_size():
    with pytest.raises(CorruptRecordError):
        parse_file_header([_sub("ONAM", b"\x01\x02\x03")])


def test_counters_and_unknown_subrecords():
    data = parse_file_header([
        _sub("TNAM", b"ignored"),
        _sub("INTV", struct.pack("<I", 77)),
        _sub("INCC", struct.pack("<I", 12)),
    ])
    assert data.intv == 77
    assert data.incc == 12


def test_string_error_reports_subrecord_offset():
    with pytest.raises(InvalidStringError) as excinfo:
        parse_file_header([Subrecord(type=TypeCode(b"CNAM"), data=b"\xff\xfe\x00", offset=48)])
    assert excinfo.value.offset == 48


def test_onam_error_reports_subrecord_offset():
    with pytest.raises(CorruptRecordError) as excinfo:
        parse_file_header([Subrecord(type=TypeCode(b"ONAM"), data=b"\x01\x02", offset=90)])
    assert excinfo.value.offset == 90
