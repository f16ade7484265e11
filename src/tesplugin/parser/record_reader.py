"""Record decoding: header → (optionally inflated) payload → subrecords.

Layout of one record:

  header   type(4) data_size(4) flags(4) form_id(4)
           timestamp(2) vc_info(2) version(2) unknown(2)      = 24 bytes
  payload  data_size bytes; if flagged COMPRESSED:
           uncompressed_size(4) + zlib stream

The payload is a flat list of subrecords: type(4) size(2) data(size).
TES4, GMST and KYWD payloads get dedicated decoders; every other record type
keeps a view of its bytes and only has its EDID extracted.
"""

import logging
import struct
import zlib
from collections.abc import Callable

from tesplugin.errors import (
    DecompressionError,
    PluginDecodeError,
    TruncatedDataError,
)
from tesplugin.models.flags import FlagVocabulary
from tesplugin.models.identifiers import (
    EDITOR_ID_CODE,
    FILE_HEADER_CODE,
    GAME_SETTING_CODE,
    KEYWORD_CODE,
    TypeCode,
)
from tesplugin.models.records import (
    FileHeaderData,
    GameSettingPayload,
    KeywordPayload,
    OpaquePayload,
    Payload,
    Record,
    RecordHeader,
    Subrecord,
)
from tesplugin.parser.binary_reader import BinaryReader
from tesplugin.parser.file_header import parse_file_header
from tesplugin.parser.gmst_parser import parse_game_setting
from tesplugin.parser.keyword_parser import parse_keyword


logger = logging.getLogger(__name__)

# Sizes in bytes
RECORD_HEADER_SIZE = 24
_DECOMPRESSED_SIZE_WIDTH = 4

# Carries the real uint32 size of the subrecord that follows it.
_EXTENDED_SIZE_CODE = TypeCode(b"XXXX")


def read_record_header(reader: BinaryReader, vocabulary: FlagVocabulary) -> RecordHeader:
    """Read a 24-byte record header, validating flags against *vocabulary*."""
    start = reader.absolute_position
    record_type = reader.type_code()
    data_size = reader.uint32()
    raw_flags = reader.uint32()
    form_id = reader.form_id()
    timestamp = reader.uint16()
    vc_info = reader.uint16()
    version = reader.uint16()
    unknown = reader.uint16()

    try:
        flags = vocabulary.validate(raw_flags)
    except PluginDecodeError as exc:
        raise exc.with_context(code=record_type, offset=start) from exc

    return RecordHeader(
        type=record_type,
        data_size=data_size,
        flags=flags,
        form_id=form_id,
        timestamp=timestamp,
        vc_info=vc_info,
        version=version,
        unknown=unknown,
    )


def scan_subrecords(reader: BinaryReader) -> list[Subrecord]:
    """Parse all subrecords from a bounded reader covering one record's data."""
    subrecords: list[Subrecord] = []
    extended_size: int | None = None
    while reader.remaining > 0:
        sig = reader.type_code()
        size = reader.uint16()
        if extended_size is not None:
            size, extended_size = extended_size, None
        if size > reader.remaining:
            raise TruncatedDataError(
                f"Subrecord {sig} declares {size} bytes but only "
                f"{reader.remaining} remain",
                offset=reader.absolute_position,
            )
        offset = reader.absolute_position
        data = reader.view(size)
        if sig == _EXTENDED_SIZE_CODE and size == 4:
            extended_size = struct.unpack("<I", data)[0]
            continue
        subrecords.append(Subrecord(type=sig, data=data, offset=offset))
    return subrecords


def inflate_payload(data_reader: BinaryReader) -> bytes:
    """Inflate a compressed payload: uint32 uncompressed size + zlib stream."""
    start = data_reader.absolute_position
    if data_reader.remaining < _DECOMPRESSED_SIZE_WIDTH:
        raise DecompressionError(
            f"Compressed payload of {data_reader.remaining} bytes has no size prefix",
            offset=start,
        )
    decompressed_size = data_reader.uint32()
    compressed = data_reader.view(data_reader.remaining)

    inflater = zlib.decompressobj()
    try:
        # Cap output one byte past the declared size so oversized streams are caught.
        raw = inflater.decompress(compressed, decompressed_size + 1)
    except zlib.error as exc:
        raise DecompressionError(f"Invalid zlib stream: {exc}", offset=start) from exc

    if len(raw) > decompressed_size:
        raise DecompressionError(
            f"Payload inflates past its declared size of {decompressed_size} bytes",
            offset=start,
        )
    if not inflater.eof:
        raise DecompressionError("Truncated zlib stream", offset=start)
    if len(raw) != decompressed_size:
        raise DecompressionError(
            f"Payload inflated to {len(raw)} bytes, expected {decompressed_size}",
            offset=start,
        )
    if inflater.unused_data:
        raise DecompressionError(
            f"{len(inflater.unused_data)} bytes follow the zlib stream",
            offset=start,
        )
    return raw


def _decode_file_header(reader: BinaryReader, header: RecordHeader,
                        localized: bool) -> FileHeaderData:
    return parse_file_header(scan_subrecords(reader))


def _decode_game_setting(reader: BinaryReader, header: RecordHeader,
                         localized: bool) -> GameSettingPayload:
    subrecords = scan_subrecords(reader)
    return parse_game_setting(
        _extract_editor_id(subrecords, header), subrecords, localized=localized
    )


def _decode_keyword(reader: BinaryReader, header: RecordHeader,
                    localized: bool) -> KeywordPayload:
    subrecords = scan_subrecords(reader)
    return parse_keyword(_extract_editor_id(subrecords, header), subrecords)


def _extract_editor_id(subrecords: list[Subrecord], header: RecordHeader) -> str | None:
    if not subrecords or subrecords[0].type != EDITOR_ID_CODE:
        return None
    raw = bytes(subrecords[0].data).partition(b"\x00")[0]
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("%s %s: EDID is not valid UTF-8", header.type, header.form_id)
        return None


def _decode_opaque(reader: BinaryReader, header: RecordHeader,
                   localized: bool) -> OpaquePayload:
    start = reader.absolute_position
    data = reader.view(reader.remaining)
    try:
        subrecords = scan_subrecords(BinaryReader(data, base=start))
    except PluginDecodeError as exc:
        logger.debug(
            "%s %s: payload does not scan as subrecords (%s)",
            header.type, header.form_id, exc,
        )
        return OpaquePayload(data=data)
    return OpaquePayload(
        data=data,
        editor_id=_extract_editor_id(subrecords, header),
        subrecords=tuple(subrecords),
    )


# Record types with a dedicated payload decoder; everything else is opaque.
_PAYLOAD_DECODERS: dict[TypeCode, Callable[[BinaryReader, RecordHeader, bool], Payload]] = {
    FILE_HEADER_CODE: _decode_file_header,
    GAME_SETTING_CODE: _decode_game_setting,
    KEYWORD_CODE: _decode_keyword,
}


def read_record_payload(reader: BinaryReader, header: RecordHeader, *,
                        localized: bool = False) -> Payload:
    """Consume exactly header.data_size bytes and decode them by record type.

    localized says whether the plugin stores strings in external string
    tables (TES4 LOCALIZED flag).
    """
    data_reader = reader.slice(header.data_size)
    decoder = _PAYLOAD_DECODERS.get(header.type, _decode_opaque)
    if not header.is_compressed:
        return decoder(data_reader, header, localized)

    payload_start = data_reader.absolute_position
    inflated = BinaryReader(inflate_payload(data_reader))
    try:
        return decoder(inflated, header, localized)
    except PluginDecodeError as exc:
        # Offsets inside the inflated buffer have no position in the file.
        raise exc.at_offset(payload_start) from exc


def read_record(reader: BinaryReader, vocabulary: FlagVocabulary, *,
                localized: bool = False) -> Record:
    """Read a single record (header + payload) at the current position."""
    start = reader.absolute_position
    header = read_record_header(reader, vocabulary)
    try:
        payload = read_record_payload(reader, header, localized=localized)
    except PluginDecodeError as exc:
        raise exc.with_context(code=header.type, offset=start) from exc
    return Record(header=header, payload=payload)
