"""Record and plugin flag vocabularies.

Both vocabularies share the same 32-bit header slot. The TES4 header record
reads it as PluginFlags; every other record reads it as RecordFlags. Bit
names follow the Skyrim-generation engine; other generations can supply
their own vocabulary through FlagVocabulary.build().
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntFlag
from functools import reduce
from operator import or_

from tesplugin.errors import InvalidFlagsError


class RecordFlags(IntFlag):
    """Per-record flags (several bits mean different things per record type)."""
    NON_PLAYABLE = 0x0000_0004           # ARMO
    FORM_INITIALIZED = 0x0000_0010       # runtime only
    DELETED = 0x0000_0020
    CONSTANT = 0x0000_0040               # also HiddenFromLocalMap / HasTreeLOD
    TURN_OFF_FIRE = 0x0000_0080          # also AddOnLODObject
    MUST_UPDATE_ANIMS = 0x0000_0100      # also Inaccessible
    HIDDEN_FROM_LOCAL_MAP = 0x0000_0200  # also StartsDead
    PERSISTENT = 0x0000_0400             # also QuestItem
    INITIALLY_DISABLED = 0x0000_0800
    IGNORED = 0x0000_1000
    VISIBLE_WHEN_DISTANT = 0x0000_8000
    RANDOM_ANIM_START = 0x0001_0000
    DANGEROUS = 0x0002_0000              # also OffLimits
    COMPRESSED = 0x0004_0000
    CANT_WAIT = 0x0008_0000
    IGNORE_OBJECT_INTERACTION = 0x0010_0000
    IS_MARKER = 0x0080_0000
    OBSTACLE = 0x0200_0000
    NAVMESH_FILTER = 0x0400_0000
    NAVMESH_BOUNDING_BOX = 0x0800_0000
    MUST_EXIT_TO_TALK = 0x1000_0000      # also ShowInWorldMap
    CHILD_CAN_USE = 0x2000_0000          # also DontHavokSettle
    NAVMESH_GROUND = 0x4000_0000         # also NoRespawn
    MULTIBOUND = 0x8000_0000


class PluginFlags(IntFlag):
    """File-level flags carried by the TES4 header record."""
    MASTER = 0x0000_0001
    LOCALIZED = 0x0000_0080
    LIGHT = 0x0000_0200


@dataclass(frozen=True, slots=True)
class FlagVocabulary:
    """A named flag set used to validate one header flags word."""
    name: str
    flag_type: type[IntFlag]

    @property
    def known_mask(self) -> int:
        return reduce(or_, (member.value for member in self.flag_type), 0)

    def validate(self, raw: int) -> IntFlag:
        """Map a raw 32-bit word onto the flag type, rejecting unknown bits."""
        unknown = raw & ~self.known_mask & 0xFFFF_FFFF
        if unknown:
            raise InvalidFlagsError(
                f"{self.name} value {raw:#010x} has unknown bits {unknown:#010x}"
            )
        return self.flag_type(raw)

    @classmethod
    def build(cls, name: str, bits: Mapping[str, int]) -> "FlagVocabulary":
        """Create a vocabulary from a {member_name: bit} mapping.

        Name a member COMPRESSED to mark zlib-compressed payloads.
        """
        return cls(name=name, flag_type=IntFlag(name, dict(bits)))


RECORD_FLAGS = FlagVocabulary("RecordFlags", RecordFlags)
PLUGIN_FLAGS = FlagVocabulary("PluginFlags", PluginFlags)
