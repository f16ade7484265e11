"""Parse GMST (Game Setting) record payloads.

GMST records are simple key-value pairs used to configure engine formulas.
Each has:
  - EDID: editor ID string (e.g., "fJumpHeightMin")
  - DATA: value, typed by the first character of the editor ID:
      'b', 'i' → int32, 'f' → float32,
      's' → null-terminated string (uint32 string-table id if localized)
"""

import logging

from tesplugin.models.identifiers import TypeCode
from tesplugin.models.records import GameSettingPayload, Subrecord
from tesplugin.parser.binary_reader import subrecord_reader


logger = logging.getLogger(__name__)

_DATA_CODE = TypeCode(b"DATA")


def _parse_value(editor_id: str, data: Subrecord, localized: bool) -> int | float | str | None:
    reader = subrecord_reader(data)
    prefix = editor_id[0].lower()
    if prefix in ("b", "i"):
        return reader.int32()
    if prefix == "f":
        return reader.float32()
    if prefix == "s":
        return reader.uint32() if localized else reader.cstring()
    logger.debug("GMST %s: no value type for prefix %r", editor_id, prefix)
    return None


def parse_game_setting(editor_id: str | None, subrecords: list[Subrecord], *,
                       localized: bool = False) -> GameSettingPayload:
    """Build a GameSettingPayload from a GMST record's subrecords.

    A missing EDID or DATA leaves the value as None. A DATA too short for
    its type, or a malformed string, raises.
    """
    data = next((sub for sub in subrecords if sub.type == _DATA_CODE), None)
    value = None
    if editor_id and data is not None:
        value = _parse_value(editor_id, data, localized)
    return GameSettingPayload(editor_id=editor_id, value=value, subrecords=tuple(subrecords))
