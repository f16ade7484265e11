"""GRUP decoding: header, kind-dependent label, and body.

Group header (24 bytes):
  "GRUP"(4) size(4) label(4) group_type(int32) timestamp(2) vc_info(2) unknown(4)

size covers the header itself, so the body is size - 24 bytes. Only
top-level groups of flat record categories have their records decoded;
world/cell/dialogue trees and every nested group kind keep a view of their
body bytes.
"""

import logging
import struct

from tesplugin.errors import CorruptGroupError, UnknownGroupKindError
from tesplugin.models.groups import (
    GROUP_HEADER_SIZE,
    BlockNumberLabel,
    GridLabel,
    Group,
    GroupHeader,
    GroupKind,
    Label,
    ParentLabel,
    RecordTypeLabel,
)
from tesplugin.models.identifiers import GROUP_CODE, FormId, TypeCode
from tesplugin.parser.binary_reader import BinaryReader
from tesplugin.parser.decode_config import DEFAULT_CONFIG, DecodeConfig
from tesplugin.parser.record_reader import read_record


logger = logging.getLogger(__name__)

_PARENT_KINDS = frozenset({
    GroupKind.WORLD_CHILDREN,
    GroupKind.CELL_CHILDREN,
    GroupKind.TOPIC_CHILDREN,
    GroupKind.CELL_PERSISTENT_CHILDREN,
    GroupKind.CELL_TEMPORARY_CHILDREN,
})
_BLOCK_KINDS = frozenset({
    GroupKind.INTERIOR_CELL_BLOCK,
    GroupKind.INTERIOR_CELL_SUB_BLOCK,
})
_GRID_KINDS = frozenset({
    GroupKind.EXTERIOR_CELL_BLOCK,
    GroupKind.EXTERIOR_CELL_SUB_BLOCK,
})


def resolve_label(raw: bytes, group_type: GroupKind) -> Label:
    """Interpret the raw 4-byte label according to the group kind."""
    if group_type is GroupKind.TOP:
        return RecordTypeLabel(TypeCode(raw))
    if group_type in _PARENT_KINDS:
        return ParentLabel(FormId(struct.unpack("<I", raw)[0]))
    if group_type in _BLOCK_KINDS:
        return BlockNumberLabel(struct.unpack("<i", raw)[0])
    if group_type in _GRID_KINDS:
        y, x = struct.unpack("<hh", raw)
        return GridLabel(y=y, x=x)
    raise ValueError(f"No label interpretation for group kind {group_type!r}")


def read_group_header(reader: BinaryReader) -> GroupHeader:
    """Read a 24-byte GRUP header and resolve its label."""
    start = reader.absolute_position
    sig = reader.type_code()
    if sig != GROUP_CODE:
        raise CorruptGroupError(f"Expected GRUP, got {sig}", offset=start)
    size = reader.uint32()
    label_raw = reader.bytes(4)
    kind_code = reader.int32()
    timestamp = reader.uint16()
    vc_info = reader.uint16()
    unknown = reader.uint32()

    if size < GROUP_HEADER_SIZE:
        raise CorruptGroupError(
            f"Group size {size} is smaller than its {GROUP_HEADER_SIZE}-byte header",
            offset=start,
        )
    try:
        group_type = GroupKind(kind_code)
    except ValueError:
        raise UnknownGroupKindError(f"Unknown group type {kind_code}", offset=start) from None

    return GroupHeader(
        type=sig,
        size=size,
        label_raw=label_raw,
        group_type=group_type,
        label=resolve_label(label_raw, group_type),
        timestamp=timestamp,
        vc_info=vc_info,
        unknown=unknown,
    )


def _holds_flat_records(header: GroupHeader, config: DecodeConfig) -> bool:
    return (
        header.group_type is GroupKind.TOP
        and header.top_level_code() not in config.nested_categories
    )


def read_group(reader: BinaryReader, config: DecodeConfig = DEFAULT_CONFIG, *,
               localized: bool = False) -> Group:
    """Read one GRUP (header + body) at the current position.

    localized is forwarded to record decoders that read strings.
    """
    header = read_group_header(reader)
    # Data area = group.size - 24 bytes (header size)
    body = reader.slice(header.body_size)

    if not _holds_flat_records(header, config):
        logger.debug(
            "Keeping %s group %s body opaque (%d bytes)",
            header.group_type.name, header.label, body.remaining,
        )
        return Group(header=header, body=body.view(body.remaining))

    records = []
    while body.remaining > 0:
        records.append(read_record(body, config.record_flags, localized=localized))
    logger.debug("Decoded %d records from %s group", len(records), header.top_level_code())
    return Group(header=header, body=tuple(records))
