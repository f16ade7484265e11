"""GRUP data classes: group kinds, label variants, headers and bodies.

The 4-byte label of a group header means something different for each
group kind:

  TOP                          → record type of the records inside
  WORLD/CELL/TOPIC children,
  CELL persistent/temporary    → FormId of the parent WRLD/CELL/DIAL
  INTERIOR cell (sub-)block    → signed block number
  EXTERIOR cell (sub-)block    → grid coordinates (int16 y, int16 x)
"""

from dataclasses import dataclass
from enum import IntEnum

from tesplugin.models.identifiers import FormId, TypeCode
from tesplugin.models.records import Record


GROUP_HEADER_SIZE = 24


class GroupKind(IntEnum):
    TOP = 0
    WORLD_CHILDREN = 1
    INTERIOR_CELL_BLOCK = 2
    INTERIOR_CELL_SUB_BLOCK = 3
    EXTERIOR_CELL_BLOCK = 4
    EXTERIOR_CELL_SUB_BLOCK = 5
    CELL_CHILDREN = 6
    TOPIC_CHILDREN = 7
    CELL_PERSISTENT_CHILDREN = 8
    CELL_TEMPORARY_CHILDREN = 9


@dataclass(frozen=True, slots=True)
class RecordTypeLabel:
    code: TypeCode


@dataclass(frozen=True, slots=True)
class ParentLabel:
    form_id: FormId


@dataclass(frozen=True, slots=True)
class BlockNumberLabel:
    number: int


@dataclass(frozen=True, slots=True)
class GridLabel:
    y: int
    x: int


Label = RecordTypeLabel | ParentLabel | BlockNumberLabel | GridLabel


@dataclass(frozen=True, slots=True)
class GroupHeader:
    """24-byte GRUP header. size includes the header itself."""
    type: TypeCode       # always GRUP
    size: int            # total group size (including this 24-byte header)
    label_raw: bytes
    group_type: GroupKind
    label: Label
    timestamp: int
    vc_info: int
    unknown: int

    @property
    def body_size(self) -> int:
        return self.size - GROUP_HEADER_SIZE

    def top_level_code(self) -> TypeCode:
        """Return the record type a top-level group holds.

        Only meaningful for GroupKind.TOP; calling it on any other kind is a
        programming error.
        """
        if self.group_type is not GroupKind.TOP or not isinstance(self.label, RecordTypeLabel):
            raise TypeError(
                f"top_level_code() called on a {self.group_type.name} group"
            )
        return self.label.code


@dataclass(frozen=True, slots=True)
class Group:
    """A GRUP: header + either decoded records or a view of the body bytes."""
    header: GroupHeader
    body: tuple[Record, ...] | bytes | memoryview

    @property
    def is_opaque(self) -> bool:
        return not isinstance(self.body, tuple)

    @property
    def records(self) -> tuple[Record, ...]:
        if isinstance(self.body, tuple):
            return self.body
        return ()
