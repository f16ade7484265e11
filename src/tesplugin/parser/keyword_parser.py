"""Parse KYWD (Keyword) record payloads: EDID plus an optional CNAM color."""

from tesplugin.models.identifiers import TypeCode
from tesplugin.models.records import Color, KeywordPayload, Subrecord
from tesplugin.parser.binary_reader import subrecord_reader


_COLOR_CODE = TypeCode(b"CNAM")


def parse_color(sub: Subrecord) -> Color:
    """CNAM color: four uint8 channels, r g b a."""
    reader = subrecord_reader(sub)
    return Color(r=reader.uint8(), g=reader.uint8(), b=reader.uint8(), a=reader.uint8())


def parse_keyword(editor_id: str | None, subrecords: list[Subrecord]) -> KeywordPayload:
    color = None
    for sub in subrecords:
        if sub.type == _COLOR_CODE:
            color = parse_color(sub)
    return KeywordPayload(editor_id=editor_id, color=color, subrecords=tuple(subrecords))
