"""Top-level plugin decoding.

Navigates the plugin file structure:
  TES4 header record → top-level GRUPs → records → subrecords

The whole file is decoded in one pass over an in-memory buffer. Decoding
either returns a complete Plugin or raises a PluginDecodeError; there is no
partial result.
"""

import logging
import os
from pathlib import Path
from typing import BinaryIO

from tesplugin.errors import (
    CorruptGroupError,
    CorruptRecordError,
    PluginReadError,
    TrailingDataError,
)
from tesplugin.models.groups import Group, GroupKind
from tesplugin.models.identifiers import FILE_HEADER_CODE, GROUP_CODE, TypeCode
from tesplugin.models.plugin import Plugin
from tesplugin.parser.binary_reader import BinaryReader
from tesplugin.parser.decode_config import DEFAULT_CONFIG, DecodeConfig
from tesplugin.parser.group_reader import read_group
from tesplugin.parser.record_reader import read_record


logger = logging.getLogger(__name__)

PluginSource = str | os.PathLike | bytes | bytearray | memoryview | BinaryIO


def _assemble(reader: BinaryReader, config: DecodeConfig) -> Plugin:
    """Decode the TES4 record, then every top-level GRUP that follows it.

    Stops at the first position that does not start a GRUP; the caller
    decides what leftover bytes mean.
    """
    tes4_sig = reader.peek(4)
    if tes4_sig != FILE_HEADER_CODE.raw:
        raise CorruptRecordError(
            f"Expected TES4 header, got {tes4_sig!r}", offset=reader.absolute_position
        )
    header = read_record(reader, config.plugin_flags)
    localized = header.header.has_flag("LOCALIZED")

    groups: dict[TypeCode, Group] = {}
    while reader.remaining >= 4 and reader.peek(4) == GROUP_CODE.raw:
        offset = reader.absolute_position
        group = read_group(reader, config, localized=localized)
        if group.header.group_type is not GroupKind.TOP:
            raise CorruptGroupError(
                f"{group.header.group_type.name} group found at top level",
                offset=offset,
            )
        code = group.header.top_level_code()
        if code in groups:
            logger.warning(
                "Top-level %s group at offset %#x replaces an earlier %s group",
                code, offset, code,
            )
        groups[code] = group

    return Plugin(header=header, groups=groups)


def decode_plugin(data: bytes, config: DecodeConfig | None = None) -> Plugin:
    """Decode a complete plugin file held in memory.

    Raises:
        PluginDecodeError: On any structural problem, including bytes left
            over after the last top-level group.
    """
    reader = BinaryReader(bytes(data))
    plugin = _assemble(reader, config or DEFAULT_CONFIG)
    if reader.remaining:
        raise TrailingDataError(
            f"{reader.remaining} unconsumed bytes after the last group",
            offset=reader.absolute_position,
        )
    logger.debug(
        "Decoded plugin with %d top-level groups, %d masters",
        len(plugin.groups), len(plugin.masters),
    )
    return plugin


def load_plugin_bytes(source: PluginSource) -> bytes:
    """Read a plugin into memory from a path, a binary file object, or bytes."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    try:
        if isinstance(source, (str, os.PathLike)):
            return Path(source).read_bytes()
        return source.read()
    except OSError as exc:
        raise PluginReadError(f"Could not read plugin {source!r}: {exc}") from exc


def read_plugin(source: PluginSource, config: DecodeConfig | None = None) -> Plugin:
    """Load *source* fully, then decode it."""
    return decode_plugin(load_plugin_bytes(source), config)
