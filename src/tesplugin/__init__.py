"""Decoder for Creation Engine plugin files (ESM/ESP/ESL)."""

from tesplugin.errors import (
    CorruptGroupError,
    CorruptRecordError,
    DecompressionError,
    InvalidFlagsError,
    InvalidStringError,
    PluginDecodeError,
    PluginReadError,
    TrailingDataError,
    TruncatedDataError,
    UnknownGroupKindError,
)
from tesplugin.models.flags import FlagVocabulary, PluginFlags, RecordFlags
from tesplugin.models.groups import Group, GroupHeader, GroupKind
from tesplugin.models.identifiers import FormId, TypeCode
from tesplugin.models.plugin import Plugin
from tesplugin.models.records import (
    Color,
    FileHeaderData,
    GameSettingPayload,
    KeywordPayload,
    OpaquePayload,
    Record,
    RecordHeader,
)
from tesplugin.parser.decode_config import DEFAULT_CONFIG, DecodeConfig
from tesplugin.parser.plugin_reader import decode_plugin, read_plugin

__all__ = [
    "Color",
    "CorruptGroupError",
    "CorruptRecordError",
    "DEFAULT_CONFIG",
    "DecodeConfig",
    "DecompressionError",
    "FileHeaderData",
    "FlagVocabulary",
    "FormId",
    "GameSettingPayload",
    "Group",
    "GroupHeader",
    "GroupKind",
    "InvalidFlagsError",
    "InvalidStringError",
    "KeywordPayload",
    "OpaquePayload",
    "Plugin",
    "PluginDecodeError",
    "PluginFlags",
    "PluginReadError",
    "Record",
    "RecordFlags",
    "RecordHeader",
    "TrailingDataError",
    "TruncatedDataError",
    "TypeCode",
    "UnknownGroupKindError",
    "decode_plugin",
    "read_plugin",
]
